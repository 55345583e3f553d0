"""Replicate predictions API package: async HTTP interface to Replicate.

WHY: Applications need to create predictions, poll them, cancel them, and
page through past predictions without handling HTTP details themselves.

HOW: APITransport (httpx) handles auth, JSON and error classification.
PredictionClient exposes the four prediction operations, generic over the
model's input/output types. PredictionListIterator walks list pages lazily.

RULES:
- All HTTP calls go through APITransport (no direct httpx usage elsewhere)
- Authentication is via a ``Token`` header built from the API key
"""

from replicate_predictions.api.client import PredictionClient
from replicate_predictions.api.errors import (
    APIError,
    InvalidStatusError,
    IteratorDone,
    ReplicateError,
    ResponseDecodeError,
    TransportError,
)
from replicate_predictions.api.models import (
    RAW_JSON,
    Prediction,
    PredictionListItem,
    PredictionPage,
    Schema,
    Status,
)
from replicate_predictions.api.pagination import PredictionListIterator
from replicate_predictions.api.transport import APITransport, check_api_error

__all__ = [
    "APIError",
    "APITransport",
    "InvalidStatusError",
    "IteratorDone",
    "Prediction",
    "PredictionClient",
    "PredictionListItem",
    "PredictionListIterator",
    "PredictionPage",
    "RAW_JSON",
    "ReplicateError",
    "ResponseDecodeError",
    "Schema",
    "Status",
    "TransportError",
    "check_api_error",
]
