"""Base sink interfaces for the event exporter."""

from abc import ABC, abstractmethod

from ..models import EnhancedEvent
from ..observability import get_logger


logger = get_logger(__name__)


class Sink(ABC):
    """Base class for event sinks.

    A sink delivers one event per ``send`` call to an external backend. It
    performs no batching or retries; failures are raised to the caller.
    """

    @property
    @abstractmethod
    def sink_id(self) -> str:
        """Unique identifier for this sink."""
        pass

    @abstractmethod
    async def send(self, event: EnhancedEvent) -> None:
        """Deliver an event to the backend.

        Args:
            event: The event to deliver

        Raises:
            Exception: Any delivery failure, for the caller to retry or drop
        """
        pass

    async def close(self) -> None:
        """Release resources held by the sink. Override if needed."""
        return None


class SinkRegistry:
    """Registry of configured sinks, keyed by sink ID."""

    def __init__(self):
        self._sinks: dict[str, Sink] = {}

    def register(self, sink: Sink) -> None:
        """Register a sink."""
        if sink.sink_id in self._sinks:
            raise ValueError(f"Sink '{sink.sink_id}' already registered")
        self._sinks[sink.sink_id] = sink
        logger.info("sink_registered", sink=sink.sink_id)

    def get(self, sink_id: str) -> Sink | None:
        """Get a sink by ID."""
        return self._sinks.get(sink_id)

    def list_sinks(self) -> list[str]:
        """List all registered sink IDs."""
        return list(self._sinks.keys())

    async def close_all(self) -> None:
        """Close every registered sink."""
        for sink in self._sinks.values():
            await sink.close()
