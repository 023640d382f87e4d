"""Loki sink: pushes Kubernetes events to a Loki push endpoint.

Each event becomes one stream with one entry:

    {"streams": [{"stream": {<labels>}, "values": [["<ts>", "<json body>"]]}]}

The sink configuration is parsed once at construction and never mutated;
event-specific labels (``host``, ``namespace``, ``index``) and the ``name``
layout field are applied to per-call copies.
"""

import time
from dataclasses import dataclass
from typing import Any

import httpx
from pydantic import BaseModel, Field

from ..config import LokiConfig
from ..layout import SerializationError, compile_layout, serialize_with_layout
from ..metrics import record_event, track_push
from ..models import EnhancedEvent
from ..observability import EventContext, get_logger
from ..templating import TemplateRenderError, TemplateValue, parse_value
from ..tls import build_ssl_context
from .base import Sink


logger = get_logger(__name__)

NODE_KIND = "Node"
NAME_TEMPLATE = "{{ .InvolvedObject.Name }}"


class LokiStream(BaseModel):
    """One stream of a push request."""
    stream: dict[str, str] = Field(description="Stream label set")
    values: list[list[str]] = Field(description="[timestamp, line] pairs")


class LokiPushRequest(BaseModel):
    """Body of a Loki push API request."""
    streams: list[LokiStream] = Field(description="Streams to push")


class LokiPushError(Exception):
    """Raised when Loki answers with a status outside 2xx."""

    def __init__(self, status_code: int, body: str):
        self.status_code = status_code
        self.body = body
        super().__init__(f"not successful (2xx) response: HTTP {status_code}: {body}")


@dataclass(frozen=True)
class HeaderValue:
    """Outcome of rendering one configured header.

    ``fallback`` is set when the template failed and the raw template text
    is sent instead.
    """
    name: str
    value: str
    fallback: bool = False
    error: str | None = None


def generate_timestamp() -> str:
    """Current Unix time as a nanosecond string, with second precision."""
    return f"{int(time.time())}000000000"


class LabelResolver:
    """Derives the stream labels and the body layout for one event."""

    def __init__(self, config: LokiConfig):
        self._stream_labels: dict[str, TemplateValue] = {
            name: parse_value(value) for name, value in config.stream_labels.items()
        }
        self._layout = compile_layout(config.layout)
        self._name_field = parse_value(NAME_TEMPLATE)
        self._ignore_namespaces = frozenset(config.ignore_namespaces)

    def is_ignored(self, event: EnhancedEvent) -> bool:
        """Whether the event's namespace is on the ignore list."""
        return event.involved_object.namespace in self._ignore_namespaces

    def layout_for(self, event: EnhancedEvent) -> dict[str, Any]:
        """Layout for the event body; node events carry no ``name`` field."""
        layout = dict(self._layout)
        if event.involved_object.kind == NODE_KIND:
            layout.pop("name", None)
        else:
            layout["name"] = self._name_field
        return layout

    def resolve_labels(self, event: EnhancedEvent) -> dict[str, str]:
        """Render the configured labels and add the event-specific ones.

        Raises:
            TemplateRenderError: If any configured label fails to render
        """
        labels = {name: value.render(event) for name, value in self._stream_labels.items()}

        involved = event.involved_object
        if involved.kind == NODE_KIND:
            labels["host"] = involved.name
        if involved.namespace:
            labels["namespace"] = involved.namespace
            labels["index"] = f"{labels.get('cluster', '')}-{involved.namespace}"
        return labels


class RequestBuilder:
    """Builds the push envelope and HTTP request for one event."""

    def __init__(self, config: LokiConfig):
        self.url = config.url
        self._headers: dict[str, TemplateValue] = {
            name: parse_value(value) for name, value in config.headers.items()
        }
        self._server_name = config.tls.server_name

    def render_headers(self, event: EnhancedEvent) -> list[HeaderValue]:
        """Render configured headers, falling back to the raw text on failure."""
        results = []
        for name, value in self._headers.items():
            try:
                rendered = value.render(event)
            except TemplateRenderError as e:
                logger.debug("loki_header_fallback", header=name, error=str(e))
                results.append(HeaderValue(name=name, value=value.source, fallback=True, error=str(e)))
            else:
                results.append(HeaderValue(name=name, value=rendered))
        return results

    def build_envelope(
        self,
        labels: dict[str, str],
        body: bytes,
        timestamp: str | None = None
    ) -> LokiPushRequest:
        """Pair one label set with one timestamped entry."""
        return LokiPushRequest(streams=[
            LokiStream(
                stream=labels,
                values=[[timestamp or generate_timestamp(), body.decode("utf-8")]]
            )
        ])

    def encode(self, envelope: LokiPushRequest) -> bytes:
        """Encode the envelope as push API JSON."""
        return envelope.model_dump_json().encode("utf-8")

    def build_request(
        self,
        client: httpx.AsyncClient,
        event: EnhancedEvent,
        labels: dict[str, str],
        body: bytes
    ) -> httpx.Request:
        """Compose the POST request for one event."""
        try:
            envelope = self.build_envelope(labels, body)
        except UnicodeDecodeError as e:
            raise SerializationError(f"event body is not valid UTF-8: {e}") from e
        payload = self.encode(envelope)

        headers = [("Content-Type", "application/json")]
        for header in self.render_headers(event):
            logger.debug("loki_request_header", header=header.name, fallback=header.fallback)
            headers.append((header.name, header.value))

        extensions = {"sni_hostname": self._server_name} if self._server_name else None
        return client.build_request(
            "POST",
            self.url,
            content=payload,
            headers=headers,
            extensions=extensions
        )


class LokiSink(Sink):
    """Sink delivering events to Loki, one request per event.

    The HTTP client is created from the TLS settings and honors the proxy
    environment variables. A caller-provided client is used as-is and is not
    closed by ``close()``.
    """

    def __init__(
        self,
        config: LokiConfig,
        name: str = "loki",
        http_client: httpx.AsyncClient | None = None
    ):
        self.config = config
        self._name = name
        self._labels = LabelResolver(config)
        self._requests = RequestBuilder(config)
        if http_client is None:
            http_client = httpx.AsyncClient(
                verify=build_ssl_context(config.tls),
                trust_env=True,
                timeout=None
            )
            self._owns_client = True
        else:
            self._owns_client = False
        self._client = http_client

    @property
    def sink_id(self) -> str:
        return self._name

    async def close(self) -> None:
        """Close pooled connections if we own the client."""
        if self._owns_client:
            await self._client.aclose()

    async def send(self, event: EnhancedEvent) -> None:
        """Push one event to Loki.

        Events from ignored namespaces are dropped without a request.

        Raises:
            TemplateRenderError: If a label or layout template fails
            SerializationError: If the body or envelope cannot be encoded
            LokiPushError: If Loki answers outside 2xx
            httpx.TransportError: On connection, TLS or protocol failures
        """
        involved = event.involved_object
        with EventContext(self.sink_id, involved.kind, involved.name, involved.namespace):
            if self._labels.is_ignored(event):
                logger.debug("loki_event_dropped", reason="ignored_namespace")
                record_event(self.sink_id, "dropped")
                return

            try:
                await self._deliver(event)
            except BaseException:
                record_event(self.sink_id, "failed")
                raise
            record_event(self.sink_id, "sent")

    async def _deliver(self, event: EnhancedEvent) -> None:
        labels = self._labels.resolve_labels(event)
        body = serialize_with_layout(self._labels.layout_for(event), event)
        request = self._requests.build_request(self._client, event, labels, body)

        with track_push(self.sink_id):
            response = await self._client.send(request)

        if not 200 <= response.status_code < 300:
            logger.warning(
                "loki_push_rejected",
                status_code=response.status_code,
                body=response.text
            )
            raise LokiPushError(response.status_code, response.text)

        logger.debug("loki_push_sent", status_code=response.status_code)
