"""Collect jail resource usage from rctl(8) in Prometheus exposition format."""

import logging
import subprocess
from collections.abc import Iterator

from prometheus_client import CollectorRegistry, generate_latest
from prometheus_client.core import GaugeMetricFamily, InfoMetricFamily
from prometheus_client.registry import Collector

from jail_exporter import __version__
from jail_exporter.constants import METRIC_NAMESPACE
from jail_exporter.errors import CollectionError

logger = logging.getLogger(__name__)


def _run(args: list[str]) -> str:
    """Run a command and return its stdout, raising on a non-zero exit."""
    logger.debug("Running: %s", " ".join(args))
    result = subprocess.run(args, capture_output=True, text=True, check=True)
    return result.stdout


def list_jails() -> list[str]:
    """Return the names of all running jails."""
    return [line.strip() for line in _run(["jls", "name"]).splitlines() if line.strip()]


def jail_usage(name: str) -> dict[str, int]:
    """Return the rctl(8) resource usage of a single jail.

    rctl prints one ``resource=value`` pair per line.
    """
    usage = {}
    for line in _run(["rctl", "-u", f"jail:{name}"]).splitlines():
        line = line.strip()
        if not line:
            continue
        resource, sep, value = line.partition("=")
        if not sep:
            raise ValueError(f"unexpected rctl output line: {line!r}")
        usage[resource] = int(value)

    return usage


class RctlCollector(Collector):
    """Custom collector producing one gauge per rctl resource."""

    def collect(self) -> Iterator:
        build_info = InfoMetricFamily(
            f"{METRIC_NAMESPACE}_exporter_build",
            "The version of the jail exporter",
        )
        build_info.add_metric([], {"version": __version__})
        yield build_info

        jails = list_jails()

        num = GaugeMetricFamily(
            f"{METRIC_NAMESPACE}_num", "Current number of running jails"
        )
        num.add_metric([], len(jails))
        yield num

        families: dict[str, GaugeMetricFamily] = {}
        for jail in jails:
            for resource, value in jail_usage(jail).items():
                family = families.get(resource)
                if family is None:
                    family = GaugeMetricFamily(
                        f"{METRIC_NAMESPACE}_{resource}",
                        f"rctl resource usage for {resource}",
                        labels=["name"],
                    )
                    families[resource] = family
                family.add_metric([jail], value)

        yield from families.values()


class Exporter:
    """Handle used by the HTTP handlers to render the current metrics.

    Creating an Exporter runs no commands. The handle holds no per-request
    state, so one instance is shared by every request handler.
    """

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        if registry is None:
            registry = CollectorRegistry(auto_describe=False)
            registry.register(RctlCollector())

        self.registry = registry

    def render_metrics(self) -> bytes:
        """Collect and render the current metrics.

        Returns:
            bytes: Metrics in the Prometheus text exposition format

        Raises:
            CollectionError: If any part of the collection fails
        """
        try:
            return generate_latest(self.registry)
        except (OSError, subprocess.CalledProcessError, ValueError) as e:
            raise CollectionError(f"failed to collect metrics: {e}") from e
