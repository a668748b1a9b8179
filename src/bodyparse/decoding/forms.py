"""URL-encoded form parsing and form-to-model decoding."""

import re
import typing
from dataclasses import dataclass
from typing import Any
from urllib.parse import parse_qsl

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from starlette.datastructures import FormData

from bodyparse.shared.exceptions import FormDecodeError, FormParseError

# A '%' that does not start a two-digit hex escape
_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")

_SEQUENCE_ORIGINS = (list, tuple, set, frozenset)

# Base-10 integer text, as accepted by strconv-style integer parsing
_INT_TEXT = re.compile(r"[+-]?[0-9]+")


def parse_form(body: bytes) -> FormData:
    """Parse an application/x-www-form-urlencoded body.

    Parsing is strict: invalid percent escapes, bytes that are not UTF-8 and
    ``;`` separators are rejected instead of being passed through.

    Raises:
        FormParseError: If the body is not a valid URL-encoded form.
    """
    try:
        text = body.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise FormParseError(details={"reason": "body is not valid UTF-8"}) from exc

    if ";" in text:
        raise FormParseError(details={"reason": "invalid semicolon separator"})
    if _BAD_ESCAPE.search(text):
        raise FormParseError(details={"reason": "invalid URL escape"})

    try:
        items = parse_qsl(text, keep_blank_values=True, errors="strict")
    except (ValueError, UnicodeDecodeError) as exc:
        raise FormParseError(details={"reason": str(exc)}) from exc
    return FormData(items)


def _is_sequence(annotation: Any) -> bool:
    origin = typing.get_origin(annotation)
    if origin is typing.Union or type(annotation).__name__ == "UnionType":
        return any(_is_sequence(arg) for arg in typing.get_args(annotation))
    return annotation in _SEQUENCE_ORIGINS or origin in _SEQUENCE_ORIGINS


def _is_text(annotation: Any) -> bool:
    origin = typing.get_origin(annotation)
    if origin is typing.Union or type(annotation).__name__ == "UnionType":
        return any(_is_text(arg) for arg in typing.get_args(annotation))
    return annotation is str


def _is_int(annotation: Any) -> bool:
    """True for int fields, optional ints and sequences of ints."""
    origin = typing.get_origin(annotation)
    if origin is typing.Union or type(annotation).__name__ == "UnionType":
        return any(_is_int(arg) for arg in typing.get_args(annotation))
    if origin in _SEQUENCE_ORIGINS:
        return any(_is_int(arg) for arg in typing.get_args(annotation))
    return annotation is int


def field_lookup(model: type[BaseModel]) -> dict[str, str]:
    """Map lower-cased aliases and attribute names to attribute names."""
    lookup: dict[str, str] = {}
    for name, field in model.model_fields.items():
        lookup[name.lower()] = name
        if field.alias:
            lookup[field.alias.lower()] = name
    return lookup


@dataclass(frozen=True)
class FormDecoder:
    """Maps parsed form fields onto a pydantic model by field name.

    Fields are matched case-insensitively against each model field's alias
    and attribute name. Instances hold no per-request state and are shared
    by all in-flight requests.
    """

    ignore_unknown_keys: bool = False
    zero_empty: bool = False

    def decode(self, target: BaseModel, form: FormData) -> None:
        """Populate ``target`` in place from ``form``.

        Raises:
            FormDecodeError: On unknown keys (unless ignored) or values that
                cannot be coerced to the declared field types.
        """
        model = type(target)
        lookup = field_lookup(model)

        data: dict[str, Any] = {}
        unknown: list[str] = []
        malformed: list[str] = []
        for key in dict.fromkeys(form.keys()):
            name = lookup.get(key.lower())
            if name is None:
                unknown.append(key)
                continue

            field = model.model_fields[name]
            values = form.getlist(key)
            if _is_int(field.annotation) and any(
                v != "" and not _INT_TEXT.fullmatch(v) for v in values
            ):
                malformed.append(name)
                continue
            if _is_sequence(field.annotation):
                data[name] = values
                continue

            value = values[0]
            if value == "" and not _is_text(field.annotation):
                if self.zero_empty:
                    data[name] = field.get_default(call_default_factory=True)
                continue
            data[name] = value

        if unknown and not self.ignore_unknown_keys:
            raise FormDecodeError(details={"unknown_keys": unknown})
        if malformed:
            raise FormDecodeError(details={"invalid_fields": malformed})

        try:
            decoded = model.model_validate(data)
        except PydanticValidationError as exc:
            fields = [".".join(str(p) for p in err["loc"]) for err in exc.errors()]
            raise FormDecodeError(details={"invalid_fields": fields}) from exc

        for name in data:
            setattr(target, name, getattr(decoded, name))
