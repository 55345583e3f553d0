"""Exception hierarchy for the prediction client.

WHY: Callers need to branch on what went wrong: the server rejected the
request (APIError), the request never produced a usable response
(TransportError), the server sent data outside the known status set
(InvalidStatusError), or a listing simply ran out of items (IteratorDone).

HOW: Everything except IteratorDone derives from ReplicateError so a single
``except ReplicateError`` catches all real failures. IteratorDone derives
from StopAsyncIteration instead, so ``async for`` ends cleanly on it and it
can never be mistaken for a failure.

RULES:
- str(APIError) is the server's detail message, nothing more
- Nothing in the package retries or suppresses these errors
"""

from __future__ import annotations


class ReplicateError(Exception):
    """Base class for all prediction client failures."""


class TransportError(ReplicateError):
    """The HTTP exchange failed: network error or unserializable request body."""


class ResponseDecodeError(TransportError):
    """A response body could not be decoded into the expected shape."""


class APIError(ReplicateError):
    """Raised when the API answers with a status outside [200, 300).

    The ``detail`` attribute carries the human-readable message from the
    ``{"detail": ...}`` error body. ``status_code`` is the HTTP status, or
    None when the error was built without a response at hand.
    """

    def __init__(self, detail: str, status_code: int | None = None) -> None:
        self.detail = detail
        self.status_code = status_code
        super().__init__(detail)

    @classmethod
    def from_dict(cls, data: dict, status_code: int | None = None) -> APIError:
        """Build an APIError from a ``{"detail": ...}`` body.

        Raises KeyError/TypeError when the body does not have that shape.
        """
        detail = data["detail"]
        if not isinstance(detail, str):
            raise TypeError("detail must be a string, got {}".format(type(detail).__name__))
        return cls(detail, status_code=status_code)


class InvalidStatusError(ReplicateError, ValueError):
    """A status value outside the five known prediction statuses."""

    def __init__(self, value: object) -> None:
        self.value = value
        super().__init__("Invalid prediction status: {!r}".format(value))


class IteratorDone(StopAsyncIteration):
    """Normal end of a paginated listing. Not a failure."""
