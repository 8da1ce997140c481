# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(slots=True, frozen=True)
class User:
    id: int
    username: str
    email: str | None
    password_hash: str
    confirmed: bool
    created_at: datetime
    refresh_token_hash: str | None = None


@dataclass(slots=True, frozen=True)
class PendingConfirmation:
    user_id: int
    email: str
    code: str
    created_at: datetime


@dataclass(slots=True, frozen=True)
class ForgotPasswordClaims:
    """Identity claims carried by a password-reset token."""

    user_id: int
    user_email: str

    def to_claims(self) -> dict[str, object]:
        return {"userId": self.user_id, "userEmail": self.user_email}
