"""Prometheus exporter for FreeBSD jails, reporting rctl(8) resource usage."""

__version__ = "0.1.0"
