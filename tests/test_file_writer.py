"""Tests for jail_exporter.file_writer module."""

from unittest.mock import patch

import pytest

from jail_exporter.errors import CollectionError
from jail_exporter.file_writer import write_metrics


class TestWriteMetrics:
    """Test cases for textfile output."""

    def test_write_file(self, temp_dir, mock_exporter, sample_metrics):
        """Test that the metrics end up in the target file."""
        path = temp_dir / "jails.prom"

        write_metrics(mock_exporter, str(path))

        assert path.read_bytes() == sample_metrics
        assert list(temp_dir.iterdir()) == [path]

    def test_overwrite_file(self, temp_dir, mock_exporter, sample_metrics):
        """Test that an existing file is replaced."""
        path = temp_dir / "jails.prom"
        path.write_text("stale\n")

        write_metrics(mock_exporter, str(path))

        assert path.read_bytes() == sample_metrics

    def test_write_stdout(self, capsysbinary, mock_exporter, sample_metrics):
        """Test that - writes to stdout."""
        write_metrics(mock_exporter, "-")

        assert capsysbinary.readouterr().out == sample_metrics

    def test_collection_failure(self, temp_dir, failing_exporter):
        """Test that nothing is written when collection fails."""
        path = temp_dir / "jails.prom"

        with pytest.raises(CollectionError):
            write_metrics(failing_exporter, str(path))

        assert list(temp_dir.iterdir()) == []

    def test_write_failure_cleans_up(self, temp_dir, mock_exporter):
        """Test that the temporary file is removed when the rename fails."""
        path = temp_dir / "jails.prom"

        with patch("jail_exporter.file_writer.os.replace", side_effect=OSError("nope")):
            with pytest.raises(OSError):
                write_metrics(mock_exporter, str(path))

        assert list(temp_dir.iterdir()) == []
