"""Template rendering for event fields.

Configuration values may embed actions in the ``{{ ... }}`` syntax used by
the exporter's configuration files:

- ``{{ .InvolvedObject.Name }}`` resolves a field path against the event.
  Path segments are Go-style field names (``FirstTimestamp``) and are mapped
  onto the snake_case model attributes; segments applied to a mapping
  (labels, annotations) are used as keys verbatim.
- ``{{ toJson .InvolvedObject.Labels }}`` calls a function.
- ``{{ .Reason | lower }}`` pipes the previous value as the last argument.

Values are parsed once into tagged ``LiteralValue`` / ``TemplateString``
objects so callers never sniff strings at render time.
"""

import json
import re
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable

from pydantic import BaseModel


_ACTION = re.compile(r"\{\{-?\s*(.*?)\s*-?\}\}", re.DOTALL)
_TOKEN = re.compile(r'"(?:[^"\\]|\\.)*"|\||[^\s|]+')
_SEGMENT = re.compile(r"^[A-Za-z][A-Za-z0-9_]*$")


class TemplateRenderError(Exception):
    """Raised when a template cannot be evaluated against an event."""

    def __init__(self, template: str, message: str):
        self.template = template
        super().__init__(f"template {template!r}: {message}")


def _field_name(segment: str) -> str:
    """Map a Go-style field name onto a snake_case attribute name."""
    name = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1_\2", segment)
    name = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", name)
    return name.lower()


_MISSING = object()


def _model_field(model: BaseModel, name: str) -> Any:
    """Look up a declared field or property, following embedded models.

    Models may rename Go fields through ``template_aliases`` and promote the
    fields of embedded models listed in ``template_embedded``.
    """
    cls = type(model)
    name = getattr(cls, "template_aliases", {}).get(name, name)
    if name in cls.model_fields or isinstance(getattr(cls, name, None), property):
        return getattr(model, name)
    for embedded in getattr(cls, "template_embedded", ()):
        inner = getattr(model, embedded)
        if isinstance(inner, BaseModel):
            found = _model_field(inner, name)
            if found is not _MISSING:
                return found
    return _MISSING


def _lookup(value: Any, segment: str, template: str) -> Any:
    if value is None:
        raise TemplateRenderError(template, f"nil value evaluating field {segment}")
    if isinstance(value, Mapping):
        # missing map keys render empty, like the zero value of a Go map lookup
        return value.get(segment)
    if isinstance(value, BaseModel):
        found = _model_field(value, _field_name(segment))
        if found is not _MISSING:
            return found
    raise TemplateRenderError(
        template, f"can't evaluate field {segment} in type {type(value).__name__}"
    )


def _resolve_path(path: str, event: Any, template: str) -> Any:
    if path == ".":
        return event
    value = event
    for segment in path[1:].split("."):
        if not _SEGMENT.match(segment):
            raise TemplateRenderError(template, f"bad field path {path}")
        value = _lookup(value, segment, template)
    return value


def _plain(value: Any) -> Any:
    """Convert models and timestamps into JSON-compatible values."""
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Mapping):
        return {str(k): _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    return value


def _to_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, (BaseModel, Mapping, list, tuple)):
        return json.dumps(_plain(value))
    return str(value)


def _default(fallback: Any, value: Any = None) -> Any:
    return value if value else fallback


def _index(collection: Any, key: Any) -> Any:
    if isinstance(collection, Mapping):
        return collection.get(key)
    return collection[int(key)]


FUNCTIONS: dict[str, Callable[..., Any]] = {
    "toJson": lambda value: json.dumps(_plain(value)),
    "upper": lambda value: _to_text(value).upper(),
    "lower": lambda value: _to_text(value).lower(),
    "trim": lambda value: _to_text(value).strip(),
    "quote": lambda value: json.dumps(_to_text(value)),
    "default": _default,
    "index": _index,
}


def _argument(token: str, event: Any, template: str) -> Any:
    if token.startswith('"'):
        return json.loads(token)
    if token.startswith("."):
        return _resolve_path(token, event, template)
    raise TemplateRenderError(template, f"unexpected argument {token}")


def _evaluate(expression: str, event: Any, template: str) -> Any:
    tokens = _TOKEN.findall(expression)
    commands: list[list[str]] = [[]]
    for token in tokens:
        if token == "|":
            commands.append([])
        else:
            commands[-1].append(token)

    result: Any = None
    for position, command in enumerate(commands):
        if not command:
            raise TemplateRenderError(template, "empty command")
        head, args = command[0], command[1:]
        if head.startswith(".") or head.startswith('"'):
            if args or position > 0:
                raise TemplateRenderError(template, f"{head} is not a function")
            result = _argument(head, event, template)
            continue
        func = FUNCTIONS.get(head)
        if func is None:
            raise TemplateRenderError(template, f'function "{head}" not defined')
        values = [_argument(arg, event, template) for arg in args]
        if position > 0:
            values.append(result)
        try:
            result = func(*values)
        except (TypeError, ValueError, KeyError, IndexError) as e:
            raise TemplateRenderError(template, f"error calling {head}: {e}") from e
    return result


def render(template: str, event: Any) -> str:
    """Render a template string against an event.

    Raises:
        TemplateRenderError: On syntax errors, unknown fields or functions
    """
    parts: list[str] = []
    position = 0
    for match in _ACTION.finditer(template):
        parts.append(template[position:match.start()])
        parts.append(_to_text(_evaluate(match.group(1), event, template)))
        position = match.end()
    tail = template[position:]
    if "{{" in tail:
        raise TemplateRenderError(template, "unclosed action")
    parts.append(tail)
    return "".join(parts)


@dataclass(frozen=True)
class LiteralValue:
    """A configuration value used verbatim."""
    source: str

    def render(self, event: Any) -> str:
        return self.source


@dataclass(frozen=True)
class TemplateString:
    """A configuration value rendered against each event."""
    source: str

    def render(self, event: Any) -> str:
        return render(self.source, event)


TemplateValue = LiteralValue | TemplateString


def parse_value(raw: str) -> TemplateValue:
    """Tag a raw configuration string as literal or template."""
    if "{{" in raw:
        return TemplateString(raw)
    return LiteralValue(raw)
