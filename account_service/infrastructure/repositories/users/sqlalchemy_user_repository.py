# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import secrets
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, datetime

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from account_service.domain.users.entities import PendingConfirmation
from account_service.domain.users.entities import User as DomainUser
from account_service.domain.users.exceptions import StorageError, UserAlreadyExistsError
from account_service.domain.users.repositories import ConfirmationRepository, UserRepository
from account_service.infrastructure.db.models import AccountConfirmation, User
from account_service.infrastructure.unit_of_work import SessionFactory, unit_of_work_scope
from account_service.shared.logging import logger


def _aware(value: datetime) -> datetime:
    # SQLite drops tzinfo on the way back
    return value if value.tzinfo else value.replace(tzinfo=UTC)


def _to_domain(row: User) -> DomainUser:
    return DomainUser(
        id=row.id,
        username=row.username,
        email=row.email,
        password_hash=row.password_hash,
        confirmed=bool(row.confirmed),
        created_at=_aware(row.created_at),
        refresh_token_hash=row.refresh_token_hash,
    )


# Postgres SQLSTATE for unique_violation
_UNIQUE_VIOLATION = "23505"


def _is_unique_violation(exc: IntegrityError) -> bool:
    orig = exc.orig
    sqlstate = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if sqlstate is not None:
        return sqlstate == _UNIQUE_VIOLATION
    # sqlite3 only reports the violation in the message
    return "UNIQUE constraint failed" in str(orig)


def _issue_confirmation(session: Session, user_id: int, email: str) -> PendingConfirmation:
    session.execute(delete(AccountConfirmation).where(AccountConfirmation.user_id == user_id))
    code = secrets.token_urlsafe(32)
    created_at = datetime.now(UTC)
    session.add(
        AccountConfirmation(user_id=user_id, email=email, code=code, created_at=created_at)
    )
    session.flush()
    return PendingConfirmation(user_id=user_id, email=email, code=code, created_at=created_at)


@contextmanager
def _storage_scope(factory: SessionFactory, operation: str) -> Iterator[Session]:
    """Unit of work that re-classifies storage failures into domain errors."""
    try:
        with unit_of_work_scope(factory) as session:
            yield session
    except IntegrityError as exc:
        if not _is_unique_violation(exc):
            logger.error(f"users.{operation}: integrity failure {type(exc.orig).__name__}")
            raise StorageError() from exc
        logger.info(f"users.{operation}: unique constraint violated")
        raise UserAlreadyExistsError() from exc
    except SQLAlchemyError as exc:
        logger.error(f"users.{operation}: storage failure {type(exc).__name__}")
        raise StorageError() from exc


class SqlAlchemyUserRepository(UserRepository):
    def __init__(self, session_factory: SessionFactory):
        self._session_factory = session_factory

    def _find_one(self, operation: str, *criteria) -> DomainUser | None:
        with _storage_scope(self._session_factory, operation) as session:
            row = session.scalars(select(User).where(*criteria)).first()
            return _to_domain(row) if row else None

    def find_by_id(self, user_id: int) -> DomainUser | None:
        return self._find_one("find_by_id", User.id == user_id)

    def find_by_email(self, email: str) -> DomainUser | None:
        return self._find_one("find_by_email", User.email == email)

    def find_by_username(self, username: str) -> DomainUser | None:
        return self._find_one("find_by_username", User.username == username)

    @staticmethod
    def _insert(session: Session, username: str, password_hash: str, email: str | None) -> User:
        row = User(
            username=username,
            email=email,
            password_hash=password_hash,
            confirmed=False,
            created_at=datetime.now(UTC),
        )
        session.add(row)
        session.flush()
        return row

    def create(self, username: str, password_hash: str, email: str | None = None) -> DomainUser:
        with _storage_scope(self._session_factory, "create") as session:
            return _to_domain(self._insert(session, username, password_hash, email))

    def create_with_confirmation(
        self, username: str, password_hash: str, email: str
    ) -> tuple[DomainUser, PendingConfirmation]:
        with _storage_scope(self._session_factory, "create_with_confirmation") as session:
            row = self._insert(session, username, password_hash, email)
            return _to_domain(row), _issue_confirmation(session, row.id, email)

    def update_password(self, user_id: int, password_hash: str) -> bool:
        with _storage_scope(self._session_factory, "update_password") as session:
            result = session.execute(
                update(User).where(User.id == user_id).values(password_hash=password_hash)
            )
            return result.rowcount > 0

    def mark_confirmed(self, user_id: int) -> None:
        with _storage_scope(self._session_factory, "mark_confirmed") as session:
            session.execute(update(User).where(User.id == user_id).values(confirmed=True))
            session.execute(
                delete(AccountConfirmation).where(AccountConfirmation.user_id == user_id)
            )

    def delete(self, user_id: int) -> bool:
        with _storage_scope(self._session_factory, "delete") as session:
            row = session.get(User, user_id)
            if row is None:
                return False
            session.delete(row)
            return True

    def set_refresh_token_hash(self, user_id: int, token_hash: str) -> None:
        with _storage_scope(self._session_factory, "set_refresh_token") as session:
            session.execute(
                update(User).where(User.id == user_id).values(refresh_token_hash=token_hash)
            )

    def remove_refresh_token(self, user_id: int) -> None:
        with _storage_scope(self._session_factory, "remove_refresh_token") as session:
            session.execute(
                update(User).where(User.id == user_id).values(refresh_token_hash=None)
            )


class SqlAlchemyConfirmationRepository(ConfirmationRepository):
    def __init__(self, session_factory: SessionFactory):
        self._session_factory = session_factory

    def issue_for_user(self, user_id: int, email: str) -> PendingConfirmation:
        with _storage_scope(self._session_factory, "issue_confirmation") as session:
            return _issue_confirmation(session, user_id, email)

    def find(self, email: str, code: str) -> PendingConfirmation | None:
        with _storage_scope(self._session_factory, "find_confirmation") as session:
            row = session.scalars(
                select(AccountConfirmation).where(
                    AccountConfirmation.email == email, AccountConfirmation.code == code
                )
            ).first()
            if row is None:
                return None
            return PendingConfirmation(
                user_id=row.user_id,
                email=row.email,
                code=row.code,
                created_at=_aware(row.created_at),
            )
