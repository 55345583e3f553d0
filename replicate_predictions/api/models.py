"""Prediction API request and response dataclasses.

WHY: The Replicate predictions API returns flat JSON objects for single
predictions and for pages of the prediction list. Typed dataclasses make
these structures explicit and keep raw status strings out of application
code.

HOW: Each dataclass maps 1:1 to an API JSON object, with from_dict/to_dict
for parsing and serializing. Every model defines its own input and output
JSON schema, so Prediction is generic over both and delegates their
conversion to a Schema codec supplied by the caller. The default codec is
the identity, which leaves the decoded JSON untouched.

RULES:
- status is always a Status member after parsing; unknown values raise
  InvalidStatusError
- output is None until the prediction succeeds
- Unknown wire fields are ignored
- The client never looks inside input/output values; only the Schema does
"""

from __future__ import annotations

import dataclasses
import enum
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Generic, List, Optional, TypeVar

from replicate_predictions.api.errors import InvalidStatusError

T = TypeVar("T")
InputT = TypeVar("InputT")
OutputT = TypeVar("OutputT")


class Status(str, enum.Enum):
    """Lifecycle states of a prediction.

    starting and processing are transient; succeeded, failed and canceled
    are terminal. Inherits from str so values compare and serialize as
    their wire strings.
    """

    STARTING = "starting"
    PROCESSING = "processing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELED = "canceled"

    @classmethod
    def is_valid(cls, value: object) -> bool:
        """Return True only for the five known status values."""
        if isinstance(value, Status):
            return True
        return isinstance(value, str) and value in _STATUS_VALUES

    @classmethod
    def parse(cls, value: object) -> Status:
        """Convert a wire value to a Status, raising InvalidStatusError if unknown."""
        if isinstance(value, Status):
            return value
        if not cls.is_valid(value):
            raise InvalidStatusError(value)
        return cls(value)

    @property
    def is_terminal(self) -> bool:
        return self in (Status.SUCCEEDED, Status.FAILED, Status.CANCELED)


_STATUS_VALUES = frozenset(member.value for member in Status)


def _identity(value: Any) -> Any:
    return value


@dataclass(frozen=True)
class Schema(Generic[T]):
    """Codec between a model's JSON input/output and a caller-chosen type.

    WHY: Each Replicate model defines its own input and output schema. The
    library cannot know them, so callers bind a concrete type per client
    and pass the conversion functions here.

    HOW: ``load`` turns decoded JSON into T, ``dump`` turns T back into
    JSON-serializable data. Both default to the identity, so plain dicts
    and lists work with no setup.

    RULES:
    - load is never called with None (absent output stays None)
    - Schema.of(SomeDataclass) uses from_dict/to_dict when the type has
      them, falling back to SomeDataclass(**data) and dataclasses.asdict
    """

    load: Callable[[Any], T] = _identity
    dump: Callable[[T], Any] = _identity

    @classmethod
    def of(cls, model: type) -> Schema:
        from_dict = getattr(model, "from_dict", None)
        if from_dict is not None:
            load = from_dict
        else:
            def load(data: Any) -> Any:
                return model(**data)

        to_dict = getattr(model, "to_dict", None)
        if to_dict is not None:
            dump = to_dict
        elif dataclasses.is_dataclass(model):
            dump = dataclasses.asdict
        else:
            dump = _identity
        return cls(load=load, dump=dump)


RAW_JSON: Schema[Any] = Schema()
"""Identity schema: inputs and outputs stay as decoded JSON."""


@dataclass
class Prediction(Generic[InputT, OutputT]):
    """One asynchronous inference job, as returned by the API.

    WHY: Create and get calls both return the full prediction object; the
    caller polls get_prediction until ``status.is_terminal``.

    HOW: Core fields map to the prediction JSON. error, logs, created_at and
    completed_at are kept when the server sends them but are optional.

    RULES:
    - id and version are immutable for the job's lifetime
    - input/output are converted through the Schema passed to from_dict
    """

    id: str
    version: str
    status: Status
    input: Optional[InputT] = None
    output: Optional[OutputT] = None
    error: Any = None
    logs: Optional[str] = None
    created_at: Optional[str] = None
    completed_at: Optional[str] = None

    @classmethod
    def from_dict(
        cls,
        data: Dict[str, Any],
        input_schema: Schema = RAW_JSON,
        output_schema: Schema = RAW_JSON,
    ) -> Prediction:
        """Parse a prediction JSON object.

        Raises KeyError for missing id/version/status and InvalidStatusError
        for a status outside the enum.
        """
        raw_input = data.get("input")
        raw_output = data.get("output")
        return cls(
            id=data["id"],
            version=data["version"],
            status=Status.parse(data["status"]),
            input=input_schema.load(raw_input) if raw_input is not None else None,
            output=output_schema.load(raw_output) if raw_output is not None else None,
            error=data.get("error"),
            logs=data.get("logs"),
            created_at=data.get("created_at"),
            completed_at=data.get("completed_at"),
        )

    def to_dict(
        self,
        input_schema: Schema = RAW_JSON,
        output_schema: Schema = RAW_JSON,
    ) -> Dict[str, Any]:
        return {
            "id": self.id,
            "version": self.version,
            "status": self.status.value,
            "input": input_schema.dump(self.input) if self.input is not None else None,
            "output": output_schema.dump(self.output) if self.output is not None else None,
            "error": self.error,
            "logs": self.logs,
            "created_at": self.created_at,
            "completed_at": self.completed_at,
        }


@dataclass
class PredictionListItem:
    """Lightweight projection of a prediction returned by the list endpoint."""

    id: str
    version: str
    status: Status

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> PredictionListItem:
        return cls(
            id=data["id"],
            version=data["version"],
            status=Status.parse(data["status"]),
        )


@dataclass
class PredictionPage:
    """One page of GET /predictions.

    ``next`` and ``previous`` are opaque cursors supplied by the server
    (a URL or bare query string); None means there is no such page.
    """

    results: List[PredictionListItem] = field(default_factory=list)
    next: Optional[str] = None
    previous: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> PredictionPage:
        return cls(
            results=[PredictionListItem.from_dict(item) for item in data.get("results") or []],
            next=data.get("next"),
            previous=data.get("previous"),
        )
