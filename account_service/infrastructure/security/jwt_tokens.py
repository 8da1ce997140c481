# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Signed, self-expiring tokens for the password-reset flow."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt

from account_service.domain.users.repositories import TokenService
from account_service.shared.logging import logger

_REGISTERED_CLAIMS = ("exp", "iat")


def _utcnow() -> datetime:
    return datetime.now(UTC)


class JwtTokenService(TokenService):
    def __init__(
        self,
        secret: str,
        *,
        algorithm: str = "HS256",
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        if not secret:
            raise ValueError("token secret must not be empty")
        self._secret = secret
        self._algorithm = algorithm
        self._clock = clock

    def issue(self, claims: Mapping[str, Any], ttl: timedelta) -> str:
        now = self._clock()
        payload = dict(claims)
        payload["iat"] = now
        payload["exp"] = now + ttl
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> dict[str, Any] | None:
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": ["exp"]},
            )
        except jwt.ExpiredSignatureError:
            logger.debug("jwt: token expired")
            return None
        except jwt.InvalidTokenError as exc:
            logger.debug(f"jwt: token rejected ({type(exc).__name__})")
            return None

        for claim in _REGISTERED_CLAIMS:
            payload.pop(claim, None)
        return payload


__all__ = ["JwtTokenService"]
