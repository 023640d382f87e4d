"""Prometheus metrics for the event exporter.

Provides metrics collection and exposure for monitoring.
"""

import time
from contextlib import contextmanager
from typing import Generator

from prometheus_client import (
    Counter,
    Histogram,
    CollectorRegistry,
    generate_latest,
)


# Create a custom registry to avoid conflicts
REGISTRY = CollectorRegistry()

EVENTS_TOTAL = Counter(
    "eventexporter_events_total",
    "Total number of events handled by sinks",
    ["sink", "result"],  # result: sent, dropped, failed
    registry=REGISTRY
)

PUSH_DURATION_SECONDS = Histogram(
    "eventexporter_push_duration_seconds",
    "Duration of backend push requests in seconds",
    ["sink"],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
    registry=REGISTRY
)


def get_metrics() -> bytes:
    """Get current metrics in Prometheus format.

    Returns:
        Metrics data as bytes
    """
    return generate_latest(REGISTRY)


@contextmanager
def track_push(sink: str) -> Generator[None, None, None]:
    """Context manager to track the duration of one backend request.

    Args:
        sink: The sink performing the request

    Yields:
        None
    """
    start_time = time.perf_counter()
    try:
        yield
    finally:
        PUSH_DURATION_SECONDS.labels(sink=sink).observe(time.perf_counter() - start_time)


def record_event(sink: str, result: str) -> None:
    """Record the outcome of one event delivery.

    Args:
        sink: The sink that handled the event
        result: The outcome (sent, dropped, failed)
    """
    EVENTS_TOTAL.labels(sink=sink, result=result).inc()
