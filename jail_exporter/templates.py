"""HTML rendering for the exporter landing page."""

import html
import logging
from string import Template

from jail_exporter.errors import RenderError

logger = logging.getLogger(__name__)

# Route pattern syntax, and percent-escapes that the router matches decoded
ROUTE_UNSAFE_CHARS = frozenset("{}%")

INDEX_TEMPLATE = Template(
    """<!DOCTYPE html>
<html lang="en">
  <head>
    <meta charset="utf-8">
    <title>Jail Exporter</title>
  </head>
  <body>
    <h1>Jail Exporter</h1>
    <p><a href="$telemetry_path">Metrics</a></p>
  </body>
</html>
"""
)


def render_index_page(telemetry_path: str) -> str:
    """Render the index page linking to the telemetry path.

    Raises:
        RenderError: If the path can't be embedded as a link target and route
    """
    logger.debug("Rendering index page for %s", telemetry_path)

    if any(
        c.isspace() or not c.isprintable() or c in ROUTE_UNSAFE_CHARS
        for c in telemetry_path
    ):
        raise RenderError(
            f"telemetry path {telemetry_path!r} cannot be used as a link target"
        )

    return INDEX_TEMPLATE.substitute(
        telemetry_path=html.escape(telemetry_path, quote=True)
    )
