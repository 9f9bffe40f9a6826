"""Tests for jail_exporter.preflight module."""

import subprocess
from unittest.mock import patch

import pytest

from jail_exporter.errors import NotRunningAsRootError, RctlUnavailableError
from jail_exporter.preflight import (
    RctlState,
    _read_sysctl,
    is_racct_rctl_available,
    is_running_as_root,
    run_preflight_checks,
)


def sysctl_values(values):
    """Build a _read_sysctl replacement returning None for unknown OIDs."""
    return lambda name: values.get(name)


class TestReadSysctl:
    """Test cases for reading sysctls."""

    @patch("jail_exporter.preflight.subprocess.run")
    def test_value(self, mock_run):
        """Test that the stripped value is returned."""
        mock_run.return_value = subprocess.CompletedProcess([], 0, stdout="1\n")

        assert _read_sysctl("kern.racct.enable") == "1"
        mock_run.assert_called_once_with(
            ["sysctl", "-n", "kern.racct.enable"],
            capture_output=True,
            text=True,
            check=False,
        )

    @patch("jail_exporter.preflight.subprocess.run")
    def test_unknown_oid(self, mock_run):
        """Test that a failing sysctl means the OID is missing."""
        mock_run.return_value = subprocess.CompletedProcess([], 1, stdout="")

        assert _read_sysctl("kern.racct.enable") is None

    @patch("jail_exporter.preflight.subprocess.run", side_effect=FileNotFoundError)
    def test_no_sysctl_binary(self, mock_run):
        """Test hosts without sysctl(8)."""
        assert _read_sysctl("kern.racct.enable") is None


class TestRctlState:
    """Test cases for RctlState.check."""

    @pytest.mark.parametrize(
        "values,expected",
        [
            ({"security.jail.jailed": "0", "kern.racct.enable": "1"}, RctlState.ENABLED),
            ({"security.jail.jailed": "0", "kern.racct.enable": "0"}, RctlState.DISABLED),
            ({"security.jail.jailed": "1", "kern.racct.enable": "1"}, RctlState.JAILED),
            ({"security.jail.jailed": "0"}, RctlState.NOT_PRESENT),
            ({}, RctlState.NOT_PRESENT),
        ],
    )
    def test_check(self, values, expected):
        """Test each kernel state is classified."""
        with patch("jail_exporter.preflight._read_sysctl", sysctl_values(values)):
            assert RctlState.check() is expected


class TestIsRunningAsRoot:
    """Test cases for the root check."""

    @patch("jail_exporter.preflight.os.geteuid", return_value=0)
    def test_root(self, mock_geteuid):
        """Test that UID 0 passes."""
        is_running_as_root()

    @patch("jail_exporter.preflight.os.geteuid", return_value=1001)
    def test_not_root(self, mock_geteuid):
        """Test that any other UID fails."""
        with pytest.raises(NotRunningAsRootError, match="must be run as root"):
            is_running_as_root()


class TestIsRacctRctlAvailable:
    """Test cases for the RACCT/RCTL check."""

    @patch.object(RctlState, "check", return_value=RctlState.ENABLED)
    def test_enabled(self, mock_check):
        """Test that an enabled RACCT passes."""
        is_racct_rctl_available()

    @pytest.mark.parametrize(
        "state,message",
        [
            (RctlState.DISABLED, "kern.racct.enable=1"),
            (RctlState.JAILED, "cannot run within a jail"),
            (RctlState.NOT_PRESENT, "see rctl(8)"),
        ],
    )
    def test_unavailable(self, state, message):
        """Test that each failure state has its own remedy."""
        with patch.object(RctlState, "check", return_value=state):
            with pytest.raises(RctlUnavailableError) as exc_info:
                is_racct_rctl_available()

        assert message in exc_info.value.reason


class TestRunPreflightChecks:
    """Test cases for the ordered preflight gate."""

    @patch("jail_exporter.preflight.is_racct_rctl_available")
    @patch("jail_exporter.preflight.is_running_as_root")
    def test_runs_in_order(self, mock_root, mock_rctl):
        """Test that root is checked before RACCT/RCTL."""
        order = []
        mock_root.side_effect = lambda: order.append("root")
        mock_rctl.side_effect = lambda: order.append("rctl")

        run_preflight_checks()

        assert order == ["root", "rctl"]

    @patch("jail_exporter.preflight.is_racct_rctl_available")
    @patch("jail_exporter.preflight.is_running_as_root", side_effect=NotRunningAsRootError)
    def test_stops_when_not_root(self, mock_root, mock_rctl):
        """Test that RACCT/RCTL is not queried without root."""
        with pytest.raises(NotRunningAsRootError):
            run_preflight_checks()

        mock_rctl.assert_not_called()
