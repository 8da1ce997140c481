# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from typing import Annotated, Any, TypeVar

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from account_service.application.dto import (
    AuthConfirmationDTO,
    AuthCredentialsDTO,
    AuthEmailDTO,
    ChangePasswordDTO,
    GetRefreshUserDTO,
    GetUserIdDTO,
    PublicUserModel,
    SetNewPasswordDTO,
    SignUpResultModel,
    ValidateCredentialsDTO,
    ValidatedUsernameModel,
)
from account_service.application.services.user_account_service import UserAccountService
from account_service.domain.users.entities import User
from account_service.domain.users.exceptions import UnauthorizedError
from account_service.infrastructure.audit import AuditAction, audit_log
from account_service.interfaces.rpc.router import Handler, MessagePattern
from account_service.shared.errors.validation import raise_validation_error
from account_service.shared.logging import logger

ROLE = "auth"

_M = TypeVar("_M", bound=BaseModel)

_USER_ID = TypeAdapter(Annotated[int, Field(strict=True, ge=1)])


def _parse(model: type[_M], data: Any) -> _M:
    try:
        return model.model_validate(data if data is not None else {})
    except ValidationError as exc:
        raise_validation_error(exc)


def _parse_id(data: Any) -> int:
    try:
        return _USER_ID.validate_python(data)
    except ValidationError as exc:
        raise_validation_error(exc)


def _dump(model: BaseModel | None) -> dict[str, Any] | None:
    if model is None:
        return None
    return model.model_dump(by_alias=True)


def _public(user: User | None) -> dict[str, Any] | None:
    return _dump(PublicUserModel.from_user(user)) if user else None


class UserController:
    def __init__(self, *, accounts: UserAccountService) -> None:
        self._accounts = accounts

    def get_user_id(self, data: Any) -> dict[str, Any] | None:
        return _dump(self._accounts.get_user_id(_parse(GetUserIdDTO, data)))

    def change_password(self, data: Any) -> dict[str, Any] | None:
        dto = _parse(ChangePasswordDTO, data)
        try:
            result = self._accounts.change_password(dto)
        except UnauthorizedError:
            audit_log(AuditAction.PASSWORD_CHANGED, user_id=dto.user_id, success=False)
            raise
        audit_log(AuditAction.PASSWORD_CHANGED, user_id=dto.user_id)
        return _dump(result)

    def delete_account(self, data: Any) -> dict[str, Any] | None:
        user_id = _parse_id(data)
        result = self._accounts.delete_account(user_id)
        audit_log(AuditAction.ACCOUNT_DELETED, user_id=user_id)
        return _dump(result)

    def confirm_account(self, data: Any) -> None:
        dto = _parse(AuthConfirmationDTO, data)
        self._accounts.confirm_account_creation(dto)
        audit_log(AuditAction.ACCOUNT_CONFIRMED, details={"email": dto.email})

    def sign_up(self, data: Any) -> dict[str, Any] | None:
        dto = _parse(AuthCredentialsDTO, data)
        user, confirmation_code = self._accounts.sign_up(dto)
        audit_log(AuditAction.REGISTER, user_id=user.id, details={"username": user.username})
        result = SignUpResultModel(
            id=user.id,
            username=user.username,
            email=user.email,
            confirmed=user.confirmed,
            confirmation_code=confirmation_code,
        )
        return _dump(result)

    def validate_credentials(self, data: Any) -> dict[str, Any] | None:
        dto = _parse(ValidateCredentialsDTO, data)
        username = self._accounts.validate_credentials(dto)
        audit_log(
            AuditAction.CREDENTIALS_VALIDATED if username else AuditAction.CREDENTIALS_REJECTED,
            details={"username": dto.username},
            success=username is not None,
        )
        return _dump(ValidatedUsernameModel(username=username))

    def get_user_by_id(self, data: Any) -> dict[str, Any] | None:
        return _public(self._accounts.get_user_by_id(_parse_id(data)))

    def get_user_by_email(self, data: Any) -> dict[str, Any] | None:
        dto = _parse(AuthEmailDTO, data)
        return _public(self._accounts.get_user_by_email(dto.email))

    def get_refresh_user(self, data: Any) -> dict[str, Any] | None:
        return _public(self._accounts.get_user_if_refresh_token_matches(_parse(GetRefreshUserDTO, data)))

    def set_refresh_token(self, data: Any) -> None:
        dto = _parse(GetRefreshUserDTO, data)
        self._accounts.set_refresh_token(dto.user_id, dto.refresh_token)

    def remove_refresh_token(self, data: Any) -> None:
        user_id = _parse_id(data)
        self._accounts.remove_refresh_token(user_id)
        audit_log(AuditAction.SESSION_REVOKED, user_id=user_id)

    def forgot_password(self, data: Any) -> dict[str, Any] | None:
        token = self._accounts.forgot_password(_parse(AuthEmailDTO, data))
        audit_log(AuditAction.PASSWORD_RESET_REQUESTED, details={"issued": token is not None})
        return _dump(token)

    def set_new_password(self, data: Any) -> dict[str, Any] | None:
        dto = _parse(SetNewPasswordDTO, data)
        try:
            result = self._accounts.set_new_password(dto)
        except UnauthorizedError:
            audit_log(AuditAction.PASSWORD_RESET, success=False)
            raise
        audit_log(AuditAction.PASSWORD_RESET, details={"email": result.email})
        return _dump(result)

    def as_patterns(self) -> dict[MessagePattern, Handler]:
        handlers: dict[str, Handler] = {
            "getId": self.get_user_id,
            "changePassword": self.change_password,
            "deleteAccount": self.delete_account,
            "confirm": self.confirm_account,
            "signUp": self.sign_up,
            "validateCredentials": self.validate_credentials,
            "getById": self.get_user_by_id,
            "getByEmail": self.get_user_by_email,
            "getRefreshUser": self.get_refresh_user,
            "setRefreshToken": self.set_refresh_token,
            "removeRefreshToken": self.remove_refresh_token,
            "forgotPassword": self.forgot_password,
            "setNewPassword": self.set_new_password,
        }
        logger.debug(f"rpc: user controller exposes {len(handlers)} patterns")
        return {MessagePattern(role=ROLE, cmd=cmd): handler for cmd, handler in handlers.items()}
