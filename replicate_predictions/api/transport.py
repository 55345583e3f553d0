"""Authenticated JSON transport for the Replicate HTTP API.

WHY: The prediction client and the list iterator both need the same thing
from HTTP: send JSON to a path under the API base URL with the token
header, get decoded JSON back, and turn non-2xx responses into typed
errors. Keeping that in one small adapter means the client code only deals
with paths and payloads.

HOW: Wraps httpx.AsyncClient with a ``Token <api-key>`` Authorization
header. APITransport is an async context manager: enter it to open the
connection pool, exit to close it. Every response is handed to an
error_checker hook before it is decoded; the default hook
(check_api_error) parses the ``{"detail": ...}`` error body into an
APIError.

RULES:
- One HTTP request per get()/post() call, no retries
- No internal timeout; deadlines come from the caller (asyncio cancellation)
- error_checker returns an exception to raise, or None for success
- httpx.HTTPError is re-raised as TransportError, bad JSON as ResponseDecodeError
- Empty success bodies decode to None
"""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, Mapping, Optional, Union

import httpx

from replicate_predictions.api.errors import APIError, ResponseDecodeError, TransportError
from replicate_predictions.config import REPLICATE_BASE_URL

logger = logging.getLogger(__name__)

ErrorChecker = Callable[[httpx.Response], Optional[Exception]]
"""Hook that classifies a response: return an exception to fail the call."""

QueryParams = Union[httpx.QueryParams, Mapping[str, Any], None]


def check_api_error(response: httpx.Response) -> Optional[Exception]:
    """Default error classifier for the Replicate API.

    Responses with a status in [200, 300) pass. Anything else is read and
    parsed as ``{"detail": "..."}`` into an APIError. When the body cannot
    be read or does not have that shape, the ResponseDecodeError describing
    that failure is returned instead.
    """
    if 200 <= response.status_code < 300:
        return None

    try:
        return APIError.from_dict(response.json(), status_code=response.status_code)
    except (httpx.StreamError, ValueError, KeyError, TypeError) as exc:
        error = ResponseDecodeError(
            "Could not decode error response (HTTP {}): {}".format(response.status_code, exc)
        )
        error.__cause__ = exc
        return error


class APITransport:
    """Async JSON transport bound to one base URL and API key.

    WHY: Isolates httpx from the rest of the package so the client and the
    iterator can be tested against httpx.MockTransport and so the error
    classification can be swapped without touching them.

    HOW: ``get``/``post`` build the request, send it through the shared
    httpx.AsyncClient, run the error checker, then decode the JSON body.

    RULES:
    - Use as: async with APITransport(api_key) as transport: ...
    - http_transport is passed straight to httpx (tests inject MockTransport)
    """

    def __init__(
        self,
        api_key: str,
        base_url: str | None = None,
        error_checker: ErrorChecker | None = None,
        http_transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self._base_url = (base_url or REPLICATE_BASE_URL).rstrip("/")
        self._error_checker = error_checker or check_api_error
        self._http_transport = http_transport
        self._client: httpx.AsyncClient | None = None

    @property
    def base_url(self) -> str:
        return self._base_url

    async def __aenter__(self) -> APITransport:
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        await self.aclose()

    async def open(self) -> None:
        if self._client is not None:
            return
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers={
                "Authorization": "Token {}".format(self._api_key),
                "Accept": "application/json",
            },
            timeout=None,
            transport=self._http_transport,
        )

    async def aclose(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    def _ensure_client(self) -> httpx.AsyncClient:
        """Return the active httpx client, raising if the transport is closed."""
        if self._client is None:
            raise RuntimeError(
                "APITransport must be used as an async context manager: "
                "async with APITransport(api_key) as transport: ..."
            )
        return self._client

    async def get(self, path: str, params: QueryParams = None) -> Any:
        """GET ``path`` with optional query parameters and return the decoded body."""
        return await self._request("GET", path, params=params)

    async def post(self, path: str, body: Any = None, decode: bool = True) -> Any:
        """POST ``body`` as JSON (nothing when None) and return the decoded body.

        With ``decode=False`` the success body is not read as JSON and None is
        returned; error responses are still classified.
        """
        return await self._request("POST", path, body=body, decode=decode)

    async def _request(
        self,
        method: str,
        path: str,
        params: QueryParams = None,
        body: Any = None,
        decode: bool = True,
    ) -> Any:
        client = self._ensure_client()

        content: bytes | None = None
        headers = {}
        if body is not None:
            try:
                content = json.dumps(body).encode("utf-8")
            except (TypeError, ValueError) as exc:
                raise TransportError("Could not serialize request body: {}".format(exc)) from exc
            headers["Content-Type"] = "application/json"

        try:
            response = await client.request(
                method, path, params=params, content=content, headers=headers
            )
        except httpx.HTTPError as exc:
            raise TransportError("{} {} failed: {}".format(method, path, exc)) from exc

        logger.debug("%s %s -> %s", method, response.request.url.path, response.status_code)

        error = self._error_checker(response)
        if error is not None:
            raise error

        if not decode or not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise ResponseDecodeError(
                "Could not decode response from {} {}: {}".format(method, path, exc)
            ) from exc
