# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Security audit trail for account operations."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from flask import has_request_context, request
from sqlalchemy.exc import SQLAlchemyError

from account_service.shared.logging import get_correlation_id, logger

_SENSITIVE_KEYS = ("password", "token", "code", "secret", "hash")


class AuditAction(str, Enum):
    REGISTER = "register"
    CREDENTIALS_VALIDATED = "credentials_validated"
    CREDENTIALS_REJECTED = "credentials_rejected"
    ACCOUNT_CONFIRMED = "account_confirmed"
    ACCOUNT_DELETED = "account_deleted"
    PASSWORD_CHANGED = "password_changed"
    PASSWORD_RESET_REQUESTED = "password_reset_requested"
    PASSWORD_RESET = "password_reset"
    SESSION_REVOKED = "session_revoked"


def _redact(details: dict[str, Any]) -> dict[str, Any]:
    return {
        key: "***REDACTED***" if any(marker in key.lower() for marker in _SENSITIVE_KEYS) else value
        for key, value in details.items()
    }


def _caller_ip() -> str | None:
    if not has_request_context():
        return None
    forwarded = request.headers.get("X-Forwarded-For")
    return forwarded.split(",")[0].strip() if forwarded else request.remote_addr


class AuditLogger:
    """Writes one log line per security event and mirrors it to ``audit_logs``.

    Persisting is best effort: a storage failure is logged and the calling
    operation carries on.
    """

    def __init__(self, *, persist: bool = True) -> None:
        self._persist = persist

    def log(
        self,
        action: AuditAction,
        *,
        user_id: int | None = None,
        details: dict[str, Any] | None = None,
        success: bool = True,
    ) -> None:
        safe_details = _redact(details or {})
        ip_address = _caller_ip()
        line = f"AUDIT {action.value} user_id={user_id} ip={ip_address} success={success}"
        if safe_details:
            line = f"{line} details={safe_details}"
        logger.log("INFO" if success else "WARNING", line)

        if self._persist:
            self._store(action, user_id, ip_address, success, safe_details)

    @staticmethod
    def _store(
        action: AuditAction,
        user_id: int | None,
        ip_address: str | None,
        success: bool,
        details: dict[str, Any],
    ) -> None:
        from account_service.infrastructure.db.models import AuditLog
        from account_service.infrastructure.db.session import session_scope

        correlation_id = get_correlation_id()
        entry = AuditLog(
            timestamp=datetime.now(UTC),
            action=action.value,
            user_id=user_id,
            ip_address=ip_address,
            success=success,
            details_json=json.dumps(details, default=str) if details else None,
            correlation_id=None if correlation_id == "-" else correlation_id,
        )
        try:
            with session_scope() as db:
                db.add(entry)
        except SQLAlchemyError as exc:
            logger.warning(f"audit: could not persist {action.value}: {type(exc).__name__}")


audit = AuditLogger()


def audit_log(
    action: AuditAction,
    user_id: int | None = None,
    details: dict[str, Any] | None = None,
    success: bool = True,
) -> None:
    audit.log(action, user_id=user_id, details=details, success=success)


__all__ = ["AuditAction", "AuditLogger", "audit", "audit_log"]
