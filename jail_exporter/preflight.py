"""Startup checks that must pass before the exporter touches the network."""

import enum
import logging
import os
import subprocess

from jail_exporter.errors import NotRunningAsRootError, RctlUnavailableError

logger = logging.getLogger(__name__)


def _read_sysctl(name: str) -> str | None:
    """Return the value of a sysctl, or None if the OID does not exist."""
    try:
        result = subprocess.run(
            ["sysctl", "-n", name],
            capture_output=True,
            text=True,
            check=False,
        )
    except FileNotFoundError:
        # No sysctl(8) at all, so certainly no RACCT either
        return None

    if result.returncode != 0:
        return None

    return result.stdout.strip()


class RctlState(enum.Enum):
    """State of RACCT/RCTL support in the running kernel."""

    ENABLED = "enabled"
    DISABLED = "disabled"
    JAILED = "jailed"
    NOT_PRESENT = "not_present"

    @classmethod
    def check(cls) -> "RctlState":
        """Query the kernel for the current RACCT/RCTL state."""
        if _read_sysctl("security.jail.jailed") == "1":
            return cls.JAILED

        enabled = _read_sysctl("kern.racct.enable")
        if enabled is None:
            return cls.NOT_PRESENT
        if enabled == "1":
            return cls.ENABLED

        return cls.DISABLED


def is_running_as_root() -> None:
    """Check that the effective UID is 0.

    Raises:
        NotRunningAsRootError: If running as any other user
    """
    logger.debug("Ensuring that we're running as root")

    if os.geteuid() != 0:
        raise NotRunningAsRootError()


def is_racct_rctl_available() -> None:
    """Check that RACCT/RCTL is compiled in, enabled and usable here.

    Raises:
        RctlUnavailableError: With the remedy for the detected state
    """
    logger.debug("Checking RACCT/RCTL status")

    state = RctlState.check()

    if state is RctlState.ENABLED:
        return
    if state is RctlState.DISABLED:
        raise RctlUnavailableError(
            "Present, but disabled; enable using kern.racct.enable=1 tunable"
        )
    if state is RctlState.JAILED:
        raise RctlUnavailableError("Jail Exporter cannot run within a jail")

    raise RctlUnavailableError(
        "Support not present in kernel; see rctl(8) for details"
    )


def run_preflight_checks() -> None:
    """Run every preflight check in order, stopping at the first failure.

    Root is checked first since the RACCT/RCTL query is unreliable without it.
    """
    is_running_as_root()
    is_racct_rctl_available()
