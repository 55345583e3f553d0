"""Async client for Replicate predictions bound to one model version.

WHY: Applications run a specific model version and want typed access to
its predictions: create one, re-read it until it finishes, cancel it, and
browse past predictions. This module wraps those four calls behind a
single client class so callers never deal with paths or raw JSON.

HOW: PredictionClient owns an APITransport (httpx under the hood) and is
an async context manager: enter it to open the connection pool, exit to
close it. The client is generic over the model's input and output types;
the Schema codecs passed at construction convert between those types and
JSON, so the client itself never looks inside them.

RULES:
- Use as: async with PredictionClient(version, api_key) as client: ...
- api_key defaults to load_api_key() from .env
- version and api_key are fixed for the client's lifetime
- Each method makes exactly one HTTP request; polling is the caller's loop
- list_predictions() is not filtered by version: the API returns every
  prediction visible to the key
"""

from __future__ import annotations

import logging
from typing import Any, Generic, Optional
from urllib.parse import quote

import httpx

from replicate_predictions.api.errors import (
    InvalidStatusError,
    ResponseDecodeError,
    TransportError,
)
from replicate_predictions.api.models import (
    RAW_JSON,
    InputT,
    OutputT,
    Prediction,
    PredictionPage,
    Schema,
)
from replicate_predictions.api.pagination import PredictionListIterator
from replicate_predictions.api.transport import APITransport, ErrorChecker, QueryParams
from replicate_predictions.config import load_api_key

logger = logging.getLogger(__name__)

PREDICTIONS_PATH = "/predictions"


def _prediction_path(prediction_id: str, *suffix: str) -> str:
    if not prediction_id:
        raise ValueError("prediction_id must be a non-empty string")
    parts = [PREDICTIONS_PATH, quote(prediction_id, safe="")]
    parts.extend(suffix)
    return "/".join(parts)


class PredictionClient(Generic[InputT, OutputT]):
    """Create, fetch, cancel and list predictions for one model version.

    WHY: Every Replicate model has its own input/output schema, so the
    client is parameterized by both and the caller binds concrete types:
    ``PredictionClient[WhisperInput, WhisperOutput](version, input_schema=
    Schema.of(WhisperInput), output_schema=Schema.of(WhisperOutput))``.
    Without schemas, inputs and outputs stay plain JSON.

    HOW: Thin methods over APITransport. Response JSON is decoded into
    Prediction / PredictionPage; shape problems surface as
    ResponseDecodeError, unknown statuses as InvalidStatusError.

    RULES:
    - Non-2xx responses raise APIError (or whatever error_checker returns)
    - Network failures raise TransportError
    - Cancellation/deadlines are asyncio's: cancelling the awaiting task
      aborts the in-flight request
    """

    def __init__(
        self,
        version: str,
        api_key: str | None = None,
        *,
        input_schema: Schema[InputT] | None = None,
        output_schema: Schema[OutputT] | None = None,
        base_url: str | None = None,
        error_checker: ErrorChecker | None = None,
        http_transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not version:
            raise ValueError("A model version is required")
        self._version = version
        self._api_key = api_key or load_api_key()
        self._input_schema: Schema = input_schema or RAW_JSON
        self._output_schema: Schema = output_schema or RAW_JSON
        self._transport = APITransport(
            self._api_key,
            base_url=base_url,
            error_checker=error_checker,
            http_transport=http_transport,
        )

    @property
    def version(self) -> str:
        return self._version

    @property
    def api_key(self) -> str:
        return self._api_key

    async def __aenter__(self) -> PredictionClient[InputT, OutputT]:
        await self._transport.open()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        await self._transport.aclose()

    # ------------------------------------------------------------------
    # Predictions
    # ------------------------------------------------------------------

    async def create_prediction(
        self,
        input: InputT,
        webhook_complete: Optional[str] = None,
    ) -> Prediction[InputT, OutputT]:
        """Start a prediction on the bound model version.

        WHY: This is how work gets submitted; the returned prediction is
        usually still ``starting`` and must be polled with get_prediction.

        HOW: POSTs ``{"version", "input"}`` to /predictions, adding
        ``webhook_complete`` when a URL is given, and decodes the reply.

        RULES:
        - input is converted with the input schema's dump before sending
        - Raises TransportError if the input cannot be serialized
        """
        try:
            payload = self._input_schema.dump(input)
        except (TypeError, ValueError, AttributeError) as exc:
            raise TransportError("Could not serialize prediction input: {}".format(exc)) from exc

        body = {"version": self._version, "input": payload}
        if webhook_complete:
            body["webhook_complete"] = webhook_complete

        data = await self._transport.post(PREDICTIONS_PATH, body)
        prediction = self._decode_prediction(data)
        logger.info(
            "Created prediction %s (version %s, status %s)",
            prediction.id,
            self._version,
            prediction.status.value,
        )
        return prediction

    async def get_prediction(self, prediction_id: str) -> Prediction[InputT, OutputT]:
        """Fetch the current server-side state of a prediction.

        Status changes are only seen by calling this again; the API does
        not push updates.
        """
        data = await self._transport.get(_prediction_path(prediction_id))
        prediction = self._decode_prediction(data)
        logger.debug("Prediction %s is %s", prediction.id, prediction.status.value)
        return prediction

    async def cancel_prediction(self, prediction_id: str) -> None:
        """Ask the API to cancel a running prediction. The reply body is ignored."""
        await self._transport.post(_prediction_path(prediction_id, "cancel"), decode=False)
        logger.info("Canceled prediction %s", prediction_id)

    def list_predictions(self) -> PredictionListIterator:
        """Return a fresh iterator over all predictions visible to the API key."""
        return PredictionListIterator(self)

    async def fetch_page(self, params: QueryParams = None) -> PredictionPage:
        """Fetch one page of GET /predictions.

        ``params`` are the query parameters taken from a page cursor; None
        fetches the first page. Used by PredictionListIterator.
        """
        data = await self._transport.get(PREDICTIONS_PATH, params=params)
        try:
            return PredictionPage.from_dict(data)
        except InvalidStatusError:
            raise
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            raise ResponseDecodeError("Unexpected prediction list payload: {}".format(exc)) from exc

    def _decode_prediction(self, data: Any) -> Prediction[InputT, OutputT]:
        try:
            return Prediction.from_dict(data, self._input_schema, self._output_schema)
        except InvalidStatusError:
            raise
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            raise ResponseDecodeError("Unexpected prediction payload: {}".format(exc)) from exc
