"""Body decoding strategies.

This package provides:
- media type resolution for the Content-Type header
- URL-encoded form parsing and field mapping
- request body shapes (``RequestBody``) and the shared ``DecoderConfig``
"""

from bodyparse.decoding.forms import FormDecoder, parse_form
from bodyparse.decoding.media import (
    FORM_MULTIPART,
    FORM_URLENCODED,
    JSON_ENCODED,
    parse_media_type,
    resolve_media_type,
)
from bodyparse.decoding.target import DecoderConfig, RequestBody, RequestType

__all__ = [
    "FORM_MULTIPART",
    "FORM_URLENCODED",
    "JSON_ENCODED",
    "DecoderConfig",
    "FormDecoder",
    "RequestBody",
    "RequestType",
    "parse_form",
    "parse_media_type",
    "resolve_media_type",
]
