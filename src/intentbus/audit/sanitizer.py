# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Secret and PII stripping for persisted payloads and AI reasoning.

Payloads are sanitized immediately before they are written to the audit
log, never before validation. Validators always see the original payload.

Usage:
    from intentbus.audit.sanitizer import get_payload_sanitizer, redact_pii

    clean = get_payload_sanitizer().sanitize({"password": "hunter2"})
    # {"password": "[REDACTED]"}

    redact_pii("mail me at jane@example.com")
    # "mail me at [EMAIL]"
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

REDACTED = "[REDACTED]"
TRUNCATED = "[TRUNCATED]"

# Maximum nesting depth walked before the remainder is dropped
MAX_SANITIZE_DEPTH = 20

# Keys whose values are always secrets, matched case-insensitively anywhere
# in the key name
_SENSITIVE_KEY = re.compile(
    r"(?i)(passw(or)?d|passwd|secret|token|api[_-]?key|authorization|cookie|"
    r"private[_-]?key|credit[_-]?card|card[_-]?number|cvv|ssn)"
)

# Ordered: more specific patterns first so their placeholder wins
_PII_PATTERNS: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"(?i)\bbearer\s+[A-Za-z0-9._~+/-]+=*"), "[BEARER_TOKEN]"),
    (re.compile(r"\bsk-[A-Za-z0-9_-]{16,}"), "[API_KEY]"),
    (re.compile(r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}"), "[EMAIL]"),
    (re.compile(r"\b\d{3}-\d{2}-\d{4}\b"), "[SSN]"),
    (re.compile(r"(?<!\d)(?:\d[ -]?){12,15}\d(?!\d)"), "[CARD_NUMBER]"),
    (
        re.compile(r"(?<!\d)(?:\+?1[ .-]?)?\(?\d{3}\)?[ .-]?\d{3}[ .-]\d{4}(?!\d)"),
        "[PHONE]",
    ),
)


class PayloadSanitizer:
    """Strips secret-bearing keys and redacts PII patterns from values.

    Keys matching a secret pattern keep their position but their value is
    replaced with ``[REDACTED]`` so the payload shape stays inspectable.
    String values anywhere in the structure have PII patterns replaced with
    typed placeholders.
    """

    def __init__(
        self,
        *,
        extra_sensitive_keys: frozenset[str] = frozenset(),
        max_depth: int = MAX_SANITIZE_DEPTH,
    ) -> None:
        self._extra_keys = {k.lower() for k in extra_sensitive_keys}
        self._max_depth = max_depth

    def is_sensitive_key(self, key: str) -> bool:
        """Return True if values under ``key`` must never be persisted."""
        return key.lower() in self._extra_keys or bool(_SENSITIVE_KEY.search(key))

    def redact_text(self, text: str) -> str:
        """Replace PII patterns in ``text`` with placeholders."""
        for pattern, placeholder in _PII_PATTERNS:
            text = pattern.sub(placeholder, text)
        return text

    def sanitize(self, payload: Mapping[str, Any]) -> dict[str, Any]:
        """Return a sanitized deep copy of ``payload``."""
        return self._sanitize_mapping(payload, depth=0)

    def _sanitize_mapping(self, data: Mapping[str, Any], depth: int) -> dict[str, Any]:
        result: dict[str, Any] = {}
        for key, value in data.items():
            key_str = str(key)
            if self.is_sensitive_key(key_str):
                result[key_str] = REDACTED
            else:
                result[key_str] = self._sanitize_value(value, depth + 1)
        return result

    def _sanitize_value(self, value: Any, depth: int) -> Any:
        if depth > self._max_depth:
            return TRUNCATED
        if isinstance(value, str):
            return self.redact_text(value)
        if isinstance(value, Mapping):
            return self._sanitize_mapping(value, depth)
        if isinstance(value, list | tuple | set | frozenset):
            return [self._sanitize_value(item, depth + 1) for item in value]
        return value


_default_sanitizer: PayloadSanitizer | None = None


def get_payload_sanitizer() -> PayloadSanitizer:
    """Return the process-wide default sanitizer."""
    global _default_sanitizer
    if _default_sanitizer is None:
        _default_sanitizer = PayloadSanitizer()
    return _default_sanitizer


def sanitize_payload(payload: Mapping[str, Any]) -> dict[str, Any]:
    """Sanitize ``payload`` with the default sanitizer."""
    return get_payload_sanitizer().sanitize(payload)


def redact_pii(text: str) -> str:
    """Redact PII patterns from ``text`` with the default sanitizer."""
    return get_payload_sanitizer().redact_text(text)


__all__ = [
    "REDACTED",
    "PayloadSanitizer",
    "get_payload_sanitizer",
    "redact_pii",
    "sanitize_payload",
]
