"""Content-Type header resolution."""

from collections.abc import Mapping

from bodyparse.shared.exceptions import MediaTypeParseError

FORM_MULTIPART = "multipart/form-data"
FORM_URLENCODED = "application/x-www-form-urlencoded"
JSON_ENCODED = "application/json"

_TSPECIALS = frozenset('()<>@,;:\\"/[]?=')
_WHITESPACE = " \t"


def _is_token_char(ch: str) -> bool:
    return 32 < ord(ch) < 127 and ch not in _TSPECIALS


def _consume_token(v: str) -> tuple[str, str]:
    i = 0
    while i < len(v) and _is_token_char(v[i]):
        i += 1
    return v[:i], v[i:]


def _consume_value(v: str) -> tuple[str, str]:
    """Consume a token or a quoted-string; returns ("", v) on failure."""
    if not v.startswith('"'):
        return _consume_token(v)

    buf: list[str] = []
    i = 1
    while i < len(v):
        ch = v[i]
        if ch == '"':
            return "".join(buf), v[i + 1 :]
        if ch == "\\" and i + 1 < len(v):
            i += 1
            ch = v[i]
        elif ch in "\r\n":
            break
        buf.append(ch)
        i += 1
    return "", v


def _consume_param(v: str) -> tuple[str, str, str]:
    rest = v.lstrip(_WHITESPACE)
    if not rest.startswith(";"):
        return "", "", v
    rest = rest[1:].lstrip(_WHITESPACE)
    name, rest = _consume_token(rest)
    name = name.lower()
    if not name:
        return "", "", v

    rest = rest.lstrip(_WHITESPACE)
    if not rest.startswith("="):
        return "", "", v
    rest = rest[1:].lstrip(_WHITESPACE)
    value, rest2 = _consume_value(rest)
    if not value and rest2 == rest:
        return "", "", v
    return name, value, rest2


def _check_media_type(media_type: str) -> None:
    typ, rest = _consume_token(media_type)
    if not typ:
        raise ValueError("no media type")
    if not rest:
        return
    if not rest.startswith("/"):
        raise ValueError("expected slash after first token")
    subtype, rest = _consume_token(rest[1:])
    if not subtype:
        raise ValueError("expected token after slash")
    if rest:
        raise ValueError("unexpected content after media subtype")


def parse_media_type(value: str) -> tuple[str, dict[str, str]]:
    """Parse a Content-Type value into its lower-cased media type and parameters.

    Raises:
        ValueError: If the media type or any parameter is malformed.
    """
    base, _, _ = value.partition(";")
    media_type = base.strip(_WHITESPACE).lower()
    _check_media_type(media_type)

    params: dict[str, str] = {}
    v = value[len(base) :]
    while v:
        v = v.lstrip(_WHITESPACE)
        if not v:
            break
        name, param_value, rest = _consume_param(v)
        if not name:
            if v.strip(_WHITESPACE).strip(";").strip(_WHITESPACE) == "":
                # Ignore trailing semicolons
                break
            raise ValueError("invalid media parameter")
        if name in params:
            raise ValueError(f"duplicate parameter name {name!r}")
        params[name] = param_value
        v = rest

    return media_type, params


def resolve_media_type(headers: Mapping[str, str]) -> str:
    """Return the bare media type of the request body.

    An absent or empty Content-Type header resolves to ``""`` without
    failing; parameters such as charset or boundary are discarded.

    Raises:
        MediaTypeParseError: If the header value is malformed.
    """
    content_type = headers.get("content-type", "")
    if not content_type:
        return ""
    try:
        media_type, _ = parse_media_type(content_type)
    except ValueError as exc:
        raise MediaTypeParseError(
            details={"content_type": content_type, "reason": str(exc)}
        ) from exc
    return media_type
