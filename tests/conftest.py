"""Shared test fixtures for the replicate_predictions test suite.

WHY: Client, transport and iterator tests all need a fake Replicate API
that answers scripted responses and records what was sent, without any
network access.

HOW: FakeAPI is a callable handler for httpx.MockTransport. It replays a
queue of responses (or per-request callables) and keeps every request it
saw. The make_client fixture builds a PredictionClient wired to it.

RULES:
- No test talks to the real API
- Every request is recorded in FakeAPI.requests, in order
- Running out of scripted responses fails loudly instead of hanging
"""

from __future__ import annotations

import json
from typing import Any, Callable, List, Union

import httpx
import pytest

from replicate_predictions.api.client import PredictionClient

TEST_API_KEY = "r8_test_key"
TEST_VERSION = "5c7d5dc6dd8bf75c1acaa8565735e7986bc5b66206b55cca93cb72c9bf15ccaa"
TEST_BASE_URL = "https://api.test.invalid/v1"

Scripted = Union[httpx.Response, Callable[[httpx.Request], httpx.Response]]


class FakeAPI:
    """Scripted stand-in for the Replicate API."""

    def __init__(self, *responses: Scripted) -> None:
        self.responses: List[Scripted] = list(responses)
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self.responses:
            raise AssertionError("Unexpected request: {} {}".format(request.method, request.url))
        scripted = self.responses.pop(0)
        if callable(scripted) and not isinstance(scripted, httpx.Response):
            return scripted(request)
        return scripted

    def body(self, index: int) -> Any:
        """Decoded JSON body of the index-th request, None when it had none."""
        content = self.requests[index].content
        return json.loads(content) if content else None


def prediction_json(
    prediction_id: str = "ufawqhfynnddngldkgtslldrkq",
    status: str = "starting",
    input: Any = None,
    output: Any = None,
    version: str = TEST_VERSION,
) -> dict:
    return {
        "id": prediction_id,
        "version": version,
        "status": status,
        "input": {"prompt": "x"} if input is None else input,
        "output": output,
        "error": None,
        "logs": "",
        "created_at": "2024-01-01T00:00:00.000Z",
        "completed_at": None,
    }


def list_item_json(prediction_id: str, status: str = "succeeded", version: str = TEST_VERSION) -> dict:
    return {"id": prediction_id, "version": version, "status": status}


@pytest.fixture
def make_client():
    """Factory: make_client(handler, **kwargs) -> PredictionClient on a MockTransport."""

    def _make(handler: Callable, **kwargs: Any) -> PredictionClient:
        kwargs.setdefault("api_key", TEST_API_KEY)
        kwargs.setdefault("base_url", TEST_BASE_URL)
        return PredictionClient(
            kwargs.pop("version", TEST_VERSION),
            http_transport=httpx.MockTransport(handler),
            **kwargs,
        )

    return _make
