# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Mapping
from datetime import timedelta
from typing import Any, Protocol

from .entities import PendingConfirmation, User


class UserRepository(Protocol):
    def find_by_id(self, user_id: int) -> User | None: ...
    def find_by_email(self, email: str) -> User | None: ...
    def find_by_username(self, username: str) -> User | None: ...
    def create(self, username: str, password_hash: str, email: str | None = None) -> User: ...
    def create_with_confirmation(
        self, username: str, password_hash: str, email: str
    ) -> tuple[User, PendingConfirmation]: ...
    def update_password(self, user_id: int, password_hash: str) -> bool: ...
    def mark_confirmed(self, user_id: int) -> None: ...
    def delete(self, user_id: int) -> bool: ...
    def set_refresh_token_hash(self, user_id: int, token_hash: str) -> None: ...
    def remove_refresh_token(self, user_id: int) -> None: ...


class ConfirmationRepository(Protocol):
    def issue_for_user(self, user_id: int, email: str) -> PendingConfirmation: ...
    def find(self, email: str, code: str) -> PendingConfirmation | None: ...


class PasswordHasher(Protocol):
    def hash(self, password: str) -> str: ...
    def verify(self, password: str, hashed: str) -> bool: ...


class TokenService(Protocol):
    def issue(self, claims: Mapping[str, Any], ttl: timedelta) -> str: ...
    def verify(self, token: str) -> dict[str, Any] | None: ...
