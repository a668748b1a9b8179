"""Request context carrying the decoded request body."""

from contextvars import ContextVar, Token
from typing import Any, TypeVar

from bodyparse.shared.exceptions import ParsedBodyMissingError

T = TypeVar("T")

# Context variable to hold the decoded body for the current request
_parsed_body: ContextVar[Any | None] = ContextVar("parsed_body", default=None)


def set_parsed_body(body: Any) -> Token[Any | None]:
    """Attach the decoded body to the current request.

    Returns the token needed to restore the previous value once the
    request is done.
    """
    return _parsed_body.set(body)


def reset_parsed_body(token: Token[Any | None]) -> None:
    """Restore the value that was current before ``set_parsed_body``."""
    _parsed_body.reset(token)


def get_parsed_body(expected: type[T]) -> T:
    """Get the decoded body for the current request.

    Raises:
        ParsedBodyMissingError: If no body was attached (e.g. the method
            bypassed decoding) or it is not an instance of ``expected``.
    """
    body = _parsed_body.get()
    if not isinstance(body, expected):
        found = type(body).__name__ if body is not None else None
        raise ParsedBodyMissingError(expected=expected.__name__, found=found)
    return body


def get_optional_parsed_body() -> Any | None:
    """Get the decoded body if available, None otherwise."""
    return _parsed_body.get()
