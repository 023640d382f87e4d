"""Shared test doubles."""

import json

import httpx


class RecordingBackend:
    """Loki stand-in that records push requests and answers with a fixed status."""

    def __init__(self, status_code: int = 204, body: str = ""):
        self.status_code = status_code
        self.body = body
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, text=self.body)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))

    def payload(self, index: int = -1) -> dict:
        return json.loads(self.requests[index].content)

    def stream(self, index: int = -1) -> dict[str, str]:
        return self.payload(index)["streams"][0]["stream"]

    def line(self, index: int = -1) -> dict:
        return json.loads(self.payload(index)["streams"][0]["values"][0][1])
