"""Custom exception hierarchy for bodyparse."""

from typing import Any


class BodyParseError(Exception):
    """Base exception for all bodyparse errors.

    ``message`` is the literal text sent to the client, so subclasses keep it
    fixed and put anything request-specific into ``details``.
    """

    status_code: int = 500
    default_message: str = "internal error"

    def __init__(self, message: str | None = None, details: dict[str, Any] | None = None) -> None:
        self.message = message or self.default_message
        self.details = details or {}
        super().__init__(self.message)


# ----- Client Errors -----


class ClientError(BodyParseError):
    """The request cannot be decoded; the caller has to fix it."""

    status_code = 400


class MediaTypeParseError(ClientError):
    """Content-Type header is present but malformed."""

    default_message = "couldn't parse media type"


class UnsupportedContentTypeError(ClientError):
    """Media type has no decoding strategy."""

    default_message = "unsupported content-type"

    def __init__(self, media_type: str) -> None:
        super().__init__(details={"media_type": media_type})


class JSONDecodeFailedError(ClientError):
    """Body could not be read or decoded as JSON into the target."""

    default_message = "couldn't decode json"


class FormParseError(ClientError):
    """Body is not a valid URL-encoded form."""

    default_message = "couldn't parse form"


class FormDecodeError(ClientError):
    """Form fields could not be mapped onto the target."""

    default_message = "couldn't decode form"


# ----- Server Errors -----


class ParsedBodyMissingError(BodyParseError):
    """Handler expected a decoded body that is absent or of another type."""

    status_code = 500
    default_message = "request body unavailable"

    def __init__(self, expected: str, found: str | None) -> None:
        super().__init__(details={"expected": expected, "found": found})
