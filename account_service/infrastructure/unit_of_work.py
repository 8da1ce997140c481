# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Transactional scope used by the repositories."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from types import TracebackType

from sqlalchemy.orm import Session

from account_service.shared.logging import logger

SessionFactory = Callable[[], Session]


class SqlAlchemyUnitOfWork:
    """One session per repository call: commit when the block succeeds, roll back otherwise."""

    __slots__ = ("_factory", "_session")

    def __init__(self, session_factory: SessionFactory) -> None:
        self._factory = session_factory
        self._session: Session | None = None

    @property
    def session(self) -> Session:
        if self._session is None:
            raise RuntimeError("unit of work is not active")
        return self._session

    def __enter__(self) -> SqlAlchemyUnitOfWork:
        self._session = self._factory()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        session = self.session
        try:
            if exc_type is None:
                session.commit()
            else:
                logger.debug(f"uow: rolling back after {exc_type.__name__}")
                session.rollback()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()
            self._session = None


@contextmanager
def unit_of_work_scope(factory: SessionFactory) -> Iterator[Session]:
    with SqlAlchemyUnitOfWork(factory) as uow:
        yield uow.session


__all__ = ["SessionFactory", "SqlAlchemyUnitOfWork", "unit_of_work_scope"]
