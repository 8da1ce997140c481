# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .users import (
    AuthConfirmationDTO,
    AuthCredentialsDTO,
    AuthEmailDTO,
    AuthEmailModel,
    AuthIdModel,
    ChangePasswordDTO,
    ForgotPasswordTokenModel,
    GetRefreshUserDTO,
    GetUserIdDTO,
    PublicUserModel,
    SetNewPasswordDTO,
    SignUpResultModel,
    StringResponse,
    ValidateCredentialsDTO,
    ValidatedUsernameModel,
)

__all__ = [
    "AuthConfirmationDTO",
    "AuthCredentialsDTO",
    "AuthEmailDTO",
    "AuthEmailModel",
    "AuthIdModel",
    "ChangePasswordDTO",
    "ForgotPasswordTokenModel",
    "GetRefreshUserDTO",
    "GetUserIdDTO",
    "PublicUserModel",
    "SetNewPasswordDTO",
    "SignUpResultModel",
    "StringResponse",
    "ValidateCredentialsDTO",
    "ValidatedUsernameModel",
]
