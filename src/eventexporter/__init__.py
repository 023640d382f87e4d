"""Kubernetes event exporter: delivers cluster events to log backends."""

__version__ = "0.1.0"
