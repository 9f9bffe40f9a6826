"""Errors raised by the exporter during startup and collection."""


class ExporterError(Exception):
    """Base class for all exporter errors."""


class ConfigurationError(ExporterError):
    """Raised when a configuration value fails validation."""


class PreflightError(ExporterError):
    """Base class for fatal host environment checks."""


class NotRunningAsRootError(PreflightError):
    """Raised when the process is not running with an effective UID of 0."""

    def __init__(self) -> None:
        super().__init__("jail_exporter must be run as root")


class RctlUnavailableError(PreflightError):
    """Raised when RACCT/RCTL cannot be used on this host."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"RACCT/RCTL: {reason}")


class BindError(ExporterError):
    """Raised when the HTTP server cannot bind its listen address."""

    def __init__(self, address: str, cause: Exception) -> None:
        self.address = address
        self.cause = cause
        super().__init__(f"failed to bind to {address}: {cause}")


class RenderError(ExporterError):
    """Raised when the index page cannot be rendered."""


class CollectionError(ExporterError):
    """Raised when a single metrics collection fails."""
