"""Request signing for the Tuya OpenAPI.

Every call to the Tuya cloud carries an HMAC-SHA256 signature over a
canonical string. The cloud recomputes the same string on its side, so the
functions in this module must stay byte-for-byte deterministic.
"""

import hashlib
import hmac
from typing import Any
from urllib.parse import parse_qsl, quote, unquote, urlencode


def encrypt_str(message: str, secret: str) -> str:
    """Compute the HMAC-SHA256 of a message.

    Args:
        message: Message to sign.
        secret: Tuya secret key.

    Returns:
        Upper-case hexadecimal digest.

    """
    digest = hmac.new(
        secret.encode("utf-8"),
        message.encode("utf-8"),
        hashlib.sha256,
    )
    return digest.hexdigest().upper()


def content_hash(body: bytes | None) -> str:
    """Return the lower-case hex SHA-256 of the request body.

    Bodyless requests hash the empty string.
    """
    return hashlib.sha256(body or b"").hexdigest()


def _query_value(value: Any) -> str:  # noqa: ANN401
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def canonicalize_path(path: str, query: dict[str, Any] | None = None) -> str:
    """Build the canonical path and query string of a request.

    Parameters embedded in the path are merged with the explicit ones, the
    explicit ones winning on collision. Keys are sorted and the serialized
    query is percent-decoded exactly once.

    Args:
        path: Request path, optionally carrying a query string.
        query: Explicit query parameters.

    Returns:
        The path followed by ``?`` and the canonical query, or the bare path
        when there are no parameters.

    """
    uri, _, path_query = path.partition("?")
    merged = dict(parse_qsl(path_query, keep_blank_values=True))
    merged.update({key: _query_value(value) for key, value in (query or {}).items()})

    if not merged:
        return uri

    sorted_items = [(key, merged[key]) for key in sorted(merged)]
    querystring = unquote(urlencode(sorted_items, quote_via=quote))
    return f"{uri}?{querystring}"


def string_to_sign(method: str, body: bytes | None, canonical_url: str) -> str:
    """Return ``METHOD\\nSHA256(body)\\n\\nCANONICAL_URL``.

    The empty third line stands for the optional signed headers, which this
    integration never uses.
    """
    return "\n".join([method.upper(), content_hash(body), "", canonical_url])


def sign_message(
    access_key: str,
    token: str | None,
    timestamp: str,
    to_sign: str,
) -> str:
    """Assemble the message that is HMAC-signed.

    Token acquisition has no token yet, so it is left out of the message.
    """
    return f"{access_key}{token or ''}{timestamp}{to_sign}"
