"""Request body shapes and their allocation."""

from dataclasses import dataclass, field
from typing import Annotated, Any, Protocol, TypeVar, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr
from pydantic import ValidationError as PydanticValidationError
from pydantic_core import from_json

from bodyparse.config import Settings
from bodyparse.decoding.forms import FormDecoder, field_lookup
from bodyparse.shared.exceptions import JSONDecodeFailedError

B = TypeVar("B", bound="RequestBody")

# Signed 64-bit integer, the range a wire-level int may hold
Int64 = Annotated[int, Field(ge=-(2**63), le=2**63 - 1)]


@dataclass(frozen=True)
class DecoderConfig:
    """Process-wide decoding configuration, read-only once built."""

    form: FormDecoder = field(default_factory=FormDecoder)

    @classmethod
    def from_settings(cls, settings: Settings) -> "DecoderConfig":
        return cls(
            form=FormDecoder(
                ignore_unknown_keys=settings.form_ignore_unknown_keys,
                zero_empty=settings.form_zero_empty,
            )
        )


@runtime_checkable
class RequestType(Protocol):
    """Anything that can produce a blank instance of a request body."""

    def allocate(self, config: DecoderConfig) -> Any: ...


class RequestBody(BaseModel):
    """Base model for decodable request bodies.

    Every field must carry a zero default so that ``allocate`` can build a
    blank instance; decoding then fills in whatever the client sent.
    """

    model_config = ConfigDict(populate_by_name=True)

    _config: DecoderConfig | None = PrivateAttr(default=None)

    @classmethod
    def allocate(cls: type[B], config: DecoderConfig) -> B:
        """Return a fresh, zero-valued instance bound to ``config``."""
        instance = cls()
        instance._config = config
        return instance

    @property
    def decoder_config(self) -> DecoderConfig | None:
        return self._config

    def decode_json(self, raw: bytes) -> None:
        """Populate this instance in place from a JSON object.

        Top-level keys match field aliases or attribute names
        case-insensitively, an exact match winning over a folded one. Keys
        missing from the document keep their current value, unknown keys are
        ignored, and values must already have the declared JSON type.

        Raises:
            JSONDecodeFailedError: If ``raw`` is not a JSON object or a value
                does not fit its field.
        """
        try:
            document = from_json(raw)
        except ValueError as exc:
            raise JSONDecodeFailedError(details={"reason": str(exc)}) from exc
        if not isinstance(document, dict):
            raise JSONDecodeFailedError(
                details={"reason": f"expected object, got {type(document).__name__}"}
            )

        model = type(self)
        lookup = field_lookup(model)
        exact = {info.alias or name: name for name, info in model.model_fields.items()}
        data: dict[str, Any] = {}
        matched_exactly: set[str] = set()
        for key, value in document.items():
            name = exact.get(key) or (key if key in model.model_fields else None)
            if name is not None:
                data[name] = value
                matched_exactly.add(name)
                continue
            name = lookup.get(key.lower())
            if name is not None and name not in matched_exactly:
                data[name] = value

        try:
            decoded = model.model_validate(data, strict=True)
        except PydanticValidationError as exc:
            errors = [{"loc": list(err["loc"]), "type": err["type"]} for err in exc.errors()]
            raise JSONDecodeFailedError(details={"errors": errors}) from exc

        for name in data:
            setattr(self, name, getattr(decoded, name))

    def describe(self) -> str:
        """Render the fields as ``Name{Field:value ...}`` using wire names."""
        parts = []
        for name, info in type(self).model_fields.items():
            parts.append(f"{info.alias or name}:{getattr(self, name)}")
        return f"{type(self).__name__}{{{' '.join(parts)}}}"
