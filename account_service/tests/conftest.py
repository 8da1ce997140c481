from __future__ import annotations

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret-0123456789-abcdefghijklmnop")
os.environ.setdefault("PASSWORD_HASH_METHOD", "pbkdf2:sha256:1000")

from collections.abc import Iterator

import pytest

from account_service.infrastructure.db import ENGINE, Base, SessionLocal
from account_service.infrastructure.db import models  # noqa: F401


@pytest.fixture(autouse=True)
def reset_database() -> Iterator[None]:
    Base.metadata.drop_all(bind=ENGINE)
    Base.metadata.create_all(bind=ENGINE)
    yield
    SessionLocal.remove()
    Base.metadata.drop_all(bind=ENGINE)
