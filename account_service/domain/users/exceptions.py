# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from http import HTTPStatus

from account_service.shared.errors.base import DomainError, InfrastructureError


class UserAlreadyExistsError(DomainError):
    code = "user_already_exists"
    status = HTTPStatus.CONFLICT


class UserNotFoundError(DomainError):
    code = "user_not_found"
    status = HTTPStatus.NOT_FOUND


class ConfirmationNotFoundError(DomainError):
    code = "confirmation_not_found"
    status = HTTPStatus.BAD_REQUEST


class UnauthorizedError(DomainError):
    code = "unauthorized"
    status = HTTPStatus.UNAUTHORIZED

    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(context={"message": message})

    @property
    def message(self) -> str:
        return str((self.context or {}).get("message", ""))


class StorageError(InfrastructureError):
    def __init__(self) -> None:
        super().__init__("storage_error")
