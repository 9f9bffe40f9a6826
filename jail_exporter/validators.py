"""Validators for operator supplied configuration values.

Each validator takes the raw string and returns it unchanged when it is
acceptable, otherwise it raises ``ValueError`` with a message naming the rule
that was violated. They are used as argparse ``type=`` callables (through
``argparse_type``) and as pydantic ``AfterValidator``s on the settings model.
"""

import argparse
import ipaddress
import logging
from pathlib import Path
from typing import Callable

from jail_exporter.constants import OUTPUT_FILE_EXTENSION, STDOUT_SENTINEL

logger = logging.getLogger(__name__)


def parse_socket_address(value: str) -> tuple[str, int]:
    """Split an ``ADDR:PORT`` string into host and port.

    IPv4 addresses are written bare (``127.0.0.1:9452``), IPv6 addresses
    must be bracketed (``[::1]:9452``). The port is mandatory.

    Returns:
        tuple[str, int]: The normalised IP address and the port number

    Raises:
        ValueError: If the value is not a valid ADDR:PORT string
    """
    host, sep, port = value.rpartition(":")
    if not sep or not host:
        raise ValueError(f"'{value}' is not a valid ADDR:PORT string")

    try:
        if host.startswith("[") and host.endswith("]"):
            address = str(ipaddress.IPv6Address(host[1:-1]))
        else:
            address = str(ipaddress.IPv4Address(host))
    except ValueError:
        raise ValueError(f"'{value}' is not a valid ADDR:PORT string") from None

    if not (port.isascii() and port.isdigit()) or int(port) > 65535:
        raise ValueError(f"'{value}' is not a valid ADDR:PORT string")

    return address, int(port)


def validate_socket_address(value: str) -> str:
    """Ensure that web.listen-address is a valid ADDR:PORT string."""
    logger.debug("Ensuring that web.listen-address is valid")

    parse_socket_address(value)

    return value


def validate_telemetry_path(value: str) -> str:
    """Ensure that web.telemetry-path is usable as a route.

    This check is deliberately basic. No normalisation is done, so paths
    such as ``/a/../b`` or ``//metrics`` are accepted as given.
    """
    logger.debug("Ensuring that web.telemetry-path is valid")

    if not value:
        raise ValueError("path must not be empty")

    if not value.startswith("/"):
        raise ValueError("path must start with /")

    if value == "/":
        raise ValueError("path must not be /")

    return value


def validate_filesystem_path(value: str) -> str:
    """Ensure that output.file-path can be written as a textfile."""
    logger.debug("Ensuring that output.file-path is valid")

    # - is a request to write to stdout
    if value == STDOUT_SENTINEL:
        return value

    path = Path(value)

    if not path.is_absolute():
        raise ValueError("output.file-path only accepts absolute paths")

    if path.is_dir():
        raise ValueError("output.file-path must not point at a directory")

    # Path("/tmp/.prom").suffix is empty, same as a missing extension
    if path.suffix != OUTPUT_FILE_EXTENSION:
        raise ValueError(
            f"output.file-path must have {OUTPUT_FILE_EXTENSION} extension"
        )

    if not path.parent.is_dir():
        raise ValueError("output.file-path directory must exist")

    return value


def argparse_type(validator: Callable[[str], str]) -> Callable[[str], str]:
    """Wrap a validator so argparse reports its message verbatim."""

    def _type(value: str) -> str:
        try:
            return validator(value)
        except ValueError as e:
            raise argparse.ArgumentTypeError(str(e)) from e

    _type.__name__ = validator.__name__
    return _type
