from __future__ import annotations

from datetime import UTC, datetime, timedelta

import jwt
import pytest

from account_service.infrastructure.security.jwt_tokens import JwtTokenService

SECRET = "unit-test-secret-0123456789-abcdefghij"


def test_verify_returns_issued_claims() -> None:
    tokens = JwtTokenService(SECRET)

    token = tokens.issue({"userId": 7, "userEmail": "alice@example.com"}, timedelta(minutes=5))

    assert tokens.verify(token) == {"userId": 7, "userEmail": "alice@example.com"}


def test_verify_rejects_expired_token() -> None:
    issued_at = datetime.now(UTC) - timedelta(hours=2)
    tokens = JwtTokenService(SECRET, clock=lambda: issued_at)

    token = tokens.issue({"userId": 7, "userEmail": "alice@example.com"}, timedelta(hours=1))

    assert JwtTokenService(SECRET).verify(token) is None


def test_verify_rejects_tampered_token() -> None:
    tokens = JwtTokenService(SECRET)
    token = tokens.issue({"userId": 7, "userEmail": "alice@example.com"}, timedelta(minutes=5))
    header, payload, signature = token.split(".")
    forged_signature = ("A" if signature[0] != "A" else "B") + signature[1:]

    assert tokens.verify(f"{header}.{payload}.{forged_signature}") is None
    assert tokens.verify("garbage") is None
    assert tokens.verify("") is None


def test_verify_rejects_foreign_secret() -> None:
    token = JwtTokenService("another-secret-0123456789-abcdefghij").issue(
        {"userId": 1, "userEmail": "bob@example.com"}, timedelta(minutes=5)
    )

    assert JwtTokenService(SECRET).verify(token) is None


def test_verify_requires_expiry() -> None:
    token = jwt.encode({"userId": 1, "userEmail": "bob@example.com"}, SECRET, algorithm="HS256")

    assert JwtTokenService(SECRET).verify(token) is None


def test_empty_secret_is_refused() -> None:
    with pytest.raises(ValueError):
        JwtTokenService("")
