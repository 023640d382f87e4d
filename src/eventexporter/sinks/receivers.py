"""Builds sinks from the receivers of an exporter configuration."""

from ..config import ExporterConfig
from ..observability import get_logger
from .base import SinkRegistry
from .loki import LokiSink


logger = get_logger(__name__)


def register_receivers(registry: SinkRegistry, config: ExporterConfig) -> SinkRegistry:
    """Register one sink per configured receiver.

    Receivers without a sink block are skipped with a warning.
    """
    for receiver in config.receivers:
        if receiver.loki is not None:
            registry.register(LokiSink(receiver.loki, name=receiver.name))
        else:
            logger.warning("receiver_without_sink", receiver=receiver.name)
    return registry
