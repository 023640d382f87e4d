"""Sinks delivering Kubernetes events to external backends."""

from .base import Sink, SinkRegistry
from .loki import HeaderValue, LokiPushError, LokiSink
from .receivers import register_receivers

__all__ = [
    "Sink",
    "SinkRegistry",
    "HeaderValue",
    "LokiPushError",
    "LokiSink",
    "register_receivers",
]
