"""Shared pytest fixtures and configuration."""

import os
import tempfile
from pathlib import Path
from unittest.mock import Mock

import pytest

from jail_exporter.collector import Exporter
from jail_exporter.errors import CollectionError

SAMPLE_METRICS = b"# HELP jail_num Current number of running jails\n# TYPE jail_num gauge\njail_num 2.0\n"


@pytest.fixture
def sample_metrics():
    """Exposition text returned by the mock exporter."""
    return SAMPLE_METRICS


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Make sure no JAIL_EXPORTER_ variables leak in from the environment."""
    for key in list(os.environ):
        if key.startswith("JAIL_EXPORTER_"):
            monkeypatch.delenv(key)


@pytest.fixture
def mock_exporter():
    """Mock exporter returning a fixed metrics document."""
    exporter = Mock(spec=Exporter)
    exporter.render_metrics.return_value = SAMPLE_METRICS
    return exporter


@pytest.fixture
def failing_exporter():
    """Mock exporter whose collections always fail."""
    exporter = Mock(spec=Exporter)
    exporter.render_metrics.side_effect = CollectionError("rctl exploded")
    return exporter
