"""feedgate.security.redaction

Secret redaction helpers.

Integration URLs carry tokens in query strings and payloads carry API keys.
Redact them before anything hits logs.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

_REDACTED = "[REDACTED]"

_REDACTION_PATTERNS: list[tuple[str, str]] = [
    # Generic key/value
    (r"(?i)(api[_-]?key|secret|password|token)\s*[:=]\s*[^\s\"'&]+", r"\1=" + _REDACTED),
    # Bearer credentials
    (r"(?i)bearer\s+[a-zA-Z0-9._~+/-]+=*", "Bearer " + _REDACTED),
    # JWT
    (r"eyJ[a-zA-Z0-9_-]+\.eyJ[a-zA-Z0-9_-]+\.[a-zA-Z0-9_-]+", _REDACTED),
]

_SENSITIVE_FIELD_NAMES = {
    "api_key",
    "apikey",
    "secret",
    "password",
    "token",
    "user",
    "key",
    "auth",
    "authorization",
}


def redact_secrets(text: str) -> str:
    out = text
    for pattern, repl in _REDACTION_PATTERNS:
        out = re.sub(pattern, repl, out)
    return out


def redact_url(url: str) -> str:
    """Mask sensitive query values and userinfo, keep the rest readable."""

    try:
        parts = urlsplit(url)
    except ValueError:
        return redact_secrets(url)

    netloc = parts.netloc
    if "@" in netloc:
        netloc = _REDACTED + "@" + netloc.rsplit("@", 1)[1]

    query = parts.query
    if query:
        pairs = [(k, _REDACTED if k.lower() in _SENSITIVE_FIELD_NAMES else v) for k, v in parse_qsl(query, keep_blank_values=True)]
        query = urlencode(pairs, safe="[]")

    return urlunsplit((parts.scheme, netloc, parts.path, query, parts.fragment))


def redact_payload(payload: Mapping[str, Any]) -> dict[str, Any]:
    """Return a redacted copy of an outbound JSON body, fit for a log record.

    Credential fields (Pushover ``token`` and ``user``, API keys) are replaced
    wholesale; other string values still go through :func:`redact_secrets`.
    The input is left untouched.
    """

    return {k: _REDACTED if str(k).lower() in _SENSITIVE_FIELD_NAMES else _redact_value(v) for k, v in payload.items()}


def _redact_value(value: Any) -> Any:
    if isinstance(value, Mapping):
        return redact_payload(value)
    if isinstance(value, str):
        return redact_secrets(value)
    if isinstance(value, list | tuple):
        return [_redact_value(v) for v in value]
    return value
