"""Write a single metrics collection to a node_exporter textfile or stdout."""

import logging
import os
import sys
import tempfile
from pathlib import Path

from jail_exporter.collector import Exporter
from jail_exporter.constants import STDOUT_SENTINEL

logger = logging.getLogger(__name__)


def write_metrics(exporter: Exporter, output_file_path: str) -> None:
    """Collect once and write the result to ``output_file_path``.

    The file is written next to its destination and renamed into place, so
    a textfile collector never reads a partially written file.

    Raises:
        CollectionError: If collecting the metrics fails
        OSError: If the output file can't be written
    """
    metrics = exporter.render_metrics()

    if output_file_path == STDOUT_SENTINEL:
        logger.debug("Writing metrics to stdout")
        sys.stdout.buffer.write(metrics)
        sys.stdout.flush()
        return

    path = Path(output_file_path)
    logger.debug("Writing metrics to %s", path)

    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(metrics)
        os.chmod(tmp_name, 0o644)
        os.replace(tmp_name, path)
    except OSError:
        Path(tmp_name).unlink(missing_ok=True)
        raise

    logger.info("Metrics written to %s", path)
