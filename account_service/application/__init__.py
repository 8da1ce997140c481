# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .services.password_hashing import WerkzeugPasswordHasher
from .services.user_account_service import TOKEN_EXPIRED_OR_BROKEN, UserAccountService

__all__ = [
    "TOKEN_EXPIRED_OR_BROKEN",
    "UserAccountService",
    "WerkzeugPasswordHasher",
]
