# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .users.entities import ForgotPasswordClaims, PendingConfirmation, User
from .users.exceptions import (
    ConfirmationNotFoundError,
    StorageError,
    UnauthorizedError,
    UserAlreadyExistsError,
    UserNotFoundError,
)

__all__ = [
    "ForgotPasswordClaims",
    "PendingConfirmation",
    "User",
    "ConfirmationNotFoundError",
    "StorageError",
    "UnauthorizedError",
    "UserAlreadyExistsError",
    "UserNotFoundError",
]
