from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict

from jail_exporter import constants
from jail_exporter.validators import (
    validate_filesystem_path,
    validate_socket_address,
    validate_telemetry_path,
)

SocketAddress = Annotated[str, AfterValidator(validate_socket_address)]
TelemetryPath = Annotated[str, AfterValidator(validate_telemetry_path)]
OutputFilePath = Annotated[str, AfterValidator(validate_filesystem_path)]


class ExporterSettings(BaseModel):
    """Exporter settings resolved from the command line and environment.

    Settings are immutable per runtime and built once at startup.
    """

    model_config = ConfigDict(frozen=True)

    web_listen_address: SocketAddress = constants.DEFAULT_WEB_LISTEN_ADDRESS
    web_telemetry_path: TelemetryPath = constants.DEFAULT_WEB_TELEMETRY_PATH
    output_file_path: OutputFilePath | None = None


class ServerConfig(BaseModel):
    """HTTP server configuration, filled in by the ``Server`` builder.

    Values are expected to be validated already, so this model does not
    repeat the checks done by ``ExporterSettings``.
    """

    model_config = ConfigDict(frozen=True)

    bind_address: str = constants.DEFAULT_WEB_LISTEN_ADDRESS
    telemetry_path: str = constants.DEFAULT_WEB_TELEMETRY_PATH
