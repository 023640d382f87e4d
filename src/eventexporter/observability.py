"""Observability infrastructure for the event exporter.

Provides structured logging setup and per-event log context.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.types import Processor


def configure_logging(
    log_level: str = "INFO",
    json_logs: bool = True,
    service_name: str = "eventexporter"
) -> None:
    """Configure structured logging for the application.

    Args:
        log_level: The logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_logs: If True, output JSON formatted logs; if False, use colored console output
        service_name: The service name to include in logs
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper(), logging.INFO)
    )

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if json_logs:
        processors: list[Processor] = [
            *shared_processors,
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = [
            *shared_processors,
            structlog.dev.ConsoleRenderer(colors=True),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    structlog.contextvars.bind_contextvars(service=service_name)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger for the given module name.

    Args:
        name: The logger name (typically __name__)

    Returns:
        A configured structured logger
    """
    return structlog.get_logger(name)


class EventContext:
    """Context manager binding the event being delivered to the log context.

    Uses structlog's context variables, so concurrent deliveries running in
    separate tasks keep their own bindings.
    """

    def __init__(self, sink: str, kind: str, name: str, namespace: str):
        self.sink = sink
        self.kind = kind
        self.name = name
        self.namespace = namespace
        self._tokens: Any = None

    def __enter__(self) -> "EventContext":
        self._tokens = structlog.contextvars.bind_contextvars(
            sink=self.sink,
            event_kind=self.kind,
            event_name=self.name,
            event_namespace=self.namespace,
        )
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        structlog.contextvars.reset_contextvars(**self._tokens)
        self._tokens = None
