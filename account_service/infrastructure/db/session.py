# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, scoped_session, sessionmaker
from sqlalchemy.pool import StaticPool

from account_service.shared.config import DatabaseConfig, load_config
from account_service.shared.logging import logger

_IN_MEMORY_URLS = ("sqlite://", "sqlite:///:memory:")


class Base(DeclarativeBase):
    pass


def build_engine(config: DatabaseConfig) -> Engine:
    if config.url in _IN_MEMORY_URLS:
        # single shared connection or each session would see its own empty database
        return create_engine(
            config.url, poolclass=StaticPool, connect_args={"check_same_thread": False}
        )

    options: dict[str, Any] = {
        "pool_pre_ping": True,
        "pool_size": config.pool_size,
        "max_overflow": config.max_overflow,
        "pool_timeout": config.pool_timeout,
    }
    if config.url.startswith("sqlite"):
        options["connect_args"] = {"check_same_thread": False, "timeout": config.pool_timeout}
    return create_engine(config.url, **options)


ENGINE: Engine = build_engine(load_config().database)

SessionLocal = scoped_session(sessionmaker(bind=ENGINE, autoflush=False, expire_on_commit=False))


@contextmanager
def session_scope() -> Iterator[Session]:
    """Thread-scoped session for callers outside the repositories (audit trail)."""
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        logger.debug("db.session: rolled back")
        raise
    finally:
        SessionLocal.remove()


def init_db(engine: Engine | None = None) -> None:
    from . import models  # noqa: F401

    Base.metadata.create_all(bind=engine or ENGINE)
    logger.info("Database schema ensured")
