"""Layout serialization: builds a log line JSON body from an event."""

import json
from collections.abc import Mapping
from typing import Any

from .models import EnhancedEvent
from .templating import LiteralValue, TemplateString, parse_value


class SerializationError(Exception):
    """Raised when an event body or envelope cannot be encoded."""


def compile_layout(layout: Mapping[str, Any]) -> dict[str, Any]:
    """Parse every string leaf of a layout into a template value.

    Nested mappings and lists are compiled recursively; other values
    (numbers, booleans, null) are emitted unchanged.
    """
    return {str(key): _compile(value) for key, value in layout.items()}


def _compile(value: Any) -> Any:
    if isinstance(value, str):
        return parse_value(value)
    if isinstance(value, Mapping):
        return compile_layout(value)
    if isinstance(value, list):
        return [_compile(item) for item in value]
    return value


def _render(value: Any, event: EnhancedEvent) -> Any:
    if isinstance(value, (LiteralValue, TemplateString)):
        return value.render(event)
    if isinstance(value, str):
        return parse_value(value).render(event)
    if isinstance(value, Mapping):
        return {str(key): _render(item, event) for key, item in value.items()}
    if isinstance(value, list):
        return [_render(item, event) for item in value]
    return value


def serialize_with_layout(layout: Mapping[str, Any] | None, event: EnhancedEvent) -> bytes:
    """Render a layout against an event and encode it as JSON.

    Without a layout the whole event is serialized. Layout leaves may be raw
    strings or values produced by ``compile_layout``.

    Raises:
        TemplateRenderError: If a layout template cannot be rendered
        SerializationError: If the rendered layout is not JSON-encodable
    """
    if layout is None:
        return event.to_json()

    rendered = _render(layout, event)
    try:
        return json.dumps(rendered).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise SerializationError(f"failed to encode layout: {e}") from e
