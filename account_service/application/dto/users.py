# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic_core import PydanticCustomError

from account_service.domain.users.entities import User

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_USERNAME_RE = re.compile(r"^[a-zA-Z0-9_.\-]+$")


def _check_email(value: str) -> str:
    value = value.strip()
    if not _EMAIL_RE.match(value):
        raise PydanticCustomError("email_invalid", "Email address is not valid", {})
    return value.lower()


def _check_username(value: str) -> str:
    if not _USERNAME_RE.match(value):
        raise PydanticCustomError(
            "username_invalid_chars",
            "Username must contain only letters, digits, '_', '.' or '-'",
            {"pattern": _USERNAME_RE.pattern},
        )
    return value


class _Message(BaseModel):
    model_config = ConfigDict(validate_by_name=True, validate_by_alias=True, frozen=True)


class AuthCredentialsDTO(_Message):
    username: str = Field(min_length=3, max_length=64)
    password: str = Field(min_length=1, max_length=128)
    email: str | None = Field(default=None, max_length=254)

    @field_validator("username")
    @classmethod
    def validate_username(cls, value: str) -> str:
        return _check_username(value)

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return _check_email(value)


class ValidateCredentialsDTO(_Message):
    # no sign-up limits here: a malformed login is a plain rejection
    username: str
    password: str


class GetUserIdDTO(_Message):
    email: str | None = Field(default=None, max_length=254)
    username: str | None = Field(default=None, max_length=64)

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return _check_email(value)

    @model_validator(mode="after")
    def _require_lookup_field(self) -> "GetUserIdDTO":
        if not self.email and not self.username:
            raise PydanticCustomError(
                "lookup_field_missing", "Either email or username is required", {}
            )
        return self


class ChangePasswordDTO(_Message):
    user_id: int = Field(alias="userId", ge=1)
    old_password: str | None = Field(default=None, alias="oldPassword", max_length=128)
    new_password: str = Field(alias="newPassword", min_length=1, max_length=128)


class AuthConfirmationDTO(_Message):
    email: str = Field(max_length=254)
    code: str = Field(min_length=1, max_length=128)

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: str) -> str:
        return _check_email(value)


class AuthEmailDTO(_Message):
    email: str = Field(max_length=254)

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: str) -> str:
        return _check_email(value)


class SetNewPasswordDTO(_Message):
    forgot_password_token: str = Field(alias="forgotPasswordToken", min_length=1)
    new_password: str = Field(alias="newPassword", min_length=1, max_length=128)


class GetRefreshUserDTO(_Message):
    user_id: int = Field(alias="userId", ge=1)
    refresh_token: str = Field(alias="refreshToken", min_length=1)


class AuthIdModel(_Message):
    auth_id: int


class StringResponse(_Message):
    response: str


class AuthEmailModel(_Message):
    email: str


class ForgotPasswordTokenModel(_Message):
    forgot_password_token: str = Field(alias="forgotPasswordToken")


class ValidatedUsernameModel(_Message):
    username: str | None


class PublicUserModel(_Message):
    id: int
    username: str
    email: str | None
    confirmed: bool

    @classmethod
    def from_user(cls, user: User) -> "PublicUserModel":
        return cls(id=user.id, username=user.username, email=user.email, confirmed=user.confirmed)


class SignUpResultModel(PublicUserModel):
    confirmation_code: str | None = Field(default=None, alias="confirmationCode")
