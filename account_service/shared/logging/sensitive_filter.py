# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Redaction of credentials and personal data before log records reach a sink."""

from __future__ import annotations

import re
from typing import Any

_REDACTED = "***REDACTED***"

_RULES: tuple[tuple[re.Pattern[str], str], ...] = (
    # configuration secrets
    (re.compile(r"((?:secret[_-]?key|jwt[_-]?secret)\s*[:=]\s*['\"]?)[^'\"\s]{8,}", re.I), rf"\1{_REDACTED}"),
    # reset tokens travel as JWTs
    (re.compile(r"\beyJ[\w-]+\.[\w-]+\.[\w-]+"), "***JWT***"),
    (re.compile(r"(bearer\s+)[\w.-]{20,}", re.I), rf"\1{_REDACTED}"),
    (re.compile(r"((?:refresh_?)?token\s*[:=]\s*['\"]?)[\w.-]{20,}", re.I), rf"\1{_REDACTED}"),
    # confirmation codes
    (re.compile(r"(code\s*[:=]\s*['\"]?)[\w-]{16,}"), rf"\1{_REDACTED}"),
    (re.compile(r"((?:old_?|new_?)?password\s*[:=]\s*['\"]?)[^'\"\s,}]+", re.I), rf"\1{_REDACTED}"),
    # werkzeug hash strings
    (re.compile(r"\b(scrypt|pbkdf2):[^\s'\"]+"), rf"\1:{_REDACTED}"),
    (re.compile(r"(\w+(?:\+\w+)?://[^:/@\s]+):[^@\s]+@"), rf"\1:{_REDACTED}@"),
    (re.compile(r"[\w.%+-]+@([\w-]+(?:\.[\w-]+)*\.[a-zA-Z]{2,})"), r"***@\1"),
)


def sanitize_message(message: str) -> str:
    for pattern, replacement in _RULES:
        message = pattern.sub(replacement, message)
    return message


def sanitize_record(record: dict[str, Any]) -> bool:
    """Loguru filter: rewrites the message in place and never drops the record."""
    message = record.get("message")
    if message:
        record["message"] = sanitize_message(message)
    return True
