from __future__ import annotations

import secrets
from dataclasses import replace
from datetime import UTC, datetime, timedelta

import pytest

from account_service.application.dto import (
    AuthConfirmationDTO,
    AuthCredentialsDTO,
    AuthEmailDTO,
    ChangePasswordDTO,
    GetRefreshUserDTO,
    GetUserIdDTO,
    SetNewPasswordDTO,
    ValidateCredentialsDTO,
)
from account_service.application.services.user_account_service import (
    TOKEN_EXPIRED_OR_BROKEN,
    UserAccountService,
)
from account_service.domain.users.entities import PendingConfirmation, User
from account_service.domain.users.exceptions import (
    ConfirmationNotFoundError,
    UnauthorizedError,
    UserAlreadyExistsError,
    UserNotFoundError,
)
from account_service.domain.users.repositories import (
    ConfirmationRepository,
    PasswordHasher,
    UserRepository,
)
from account_service.infrastructure.security.jwt_tokens import JwtTokenService

SECRET = "service-test-secret-0123456789-abcdefg"


class InMemoryUserRepository(UserRepository):
    def __init__(self, confirmations: InMemoryConfirmationRepository) -> None:
        self._users: dict[int, User] = {}
        self._seq = 1
        self._confirmations = confirmations

    def find_by_id(self, user_id: int) -> User | None:
        return self._users.get(user_id)

    def find_by_email(self, email: str) -> User | None:
        return next((u for u in self._users.values() if u.email == email), None)

    def find_by_username(self, username: str) -> User | None:
        return next((u for u in self._users.values() if u.username == username), None)

    def create(self, username: str, password_hash: str, email: str | None = None) -> User:
        if self.find_by_username(username) or (email and self.find_by_email(email)):
            raise UserAlreadyExistsError()
        user = User(
            id=self._seq,
            username=username,
            email=email,
            password_hash=password_hash,
            confirmed=False,
            created_at=datetime.now(UTC),
        )
        self._seq += 1
        self._users[user.id] = user
        return user

    def create_with_confirmation(
        self, username: str, password_hash: str, email: str
    ) -> tuple[User, PendingConfirmation]:
        user = self.create(username, password_hash, email)
        return user, self._confirmations.issue_for_user(user.id, email)

    def update_password(self, user_id: int, password_hash: str) -> bool:
        user = self._users.get(user_id)
        if user is None:
            return False
        self._users[user_id] = replace(user, password_hash=password_hash)
        return True

    def mark_confirmed(self, user_id: int) -> None:
        self._users[user_id] = replace(self._users[user_id], confirmed=True)

    def delete(self, user_id: int) -> bool:
        return self._users.pop(user_id, None) is not None

    def set_refresh_token_hash(self, user_id: int, token_hash: str) -> None:
        self._users[user_id] = replace(self._users[user_id], refresh_token_hash=token_hash)

    def remove_refresh_token(self, user_id: int) -> None:
        if user_id in self._users:
            self._users[user_id] = replace(self._users[user_id], refresh_token_hash=None)


class InMemoryConfirmationRepository(ConfirmationRepository):
    def __init__(self) -> None:
        self._pending: dict[int, PendingConfirmation] = {}

    def issue_for_user(self, user_id: int, email: str) -> PendingConfirmation:
        pending = PendingConfirmation(
            user_id=user_id,
            email=email,
            code=secrets.token_urlsafe(8),
            created_at=datetime.now(UTC),
        )
        self._pending[user_id] = pending
        return pending

    def find(self, email: str, code: str) -> PendingConfirmation | None:
        return next(
            (p for p in self._pending.values() if p.email == email and p.code == code), None
        )


class DeterministicHasher(PasswordHasher):
    def hash(self, password: str) -> str:
        return f"hashed:{password}"

    def verify(self, password: str, hashed: str) -> bool:
        return hashed == f"hashed:{password}"


@pytest.fixture()
def confirmations() -> InMemoryConfirmationRepository:
    return InMemoryConfirmationRepository()


@pytest.fixture()
def users(confirmations: InMemoryConfirmationRepository) -> InMemoryUserRepository:
    return InMemoryUserRepository(confirmations)


@pytest.fixture()
def service(
    users: InMemoryUserRepository, confirmations: InMemoryConfirmationRepository
) -> UserAccountService:
    return UserAccountService(
        users=users,
        confirmations=confirmations,
        password_hasher=DeterministicHasher(),
        tokens=JwtTokenService(SECRET),
        forgot_password_ttl=timedelta(minutes=15),
    )


def _credentials(username: str, password: str, email: str | None = None) -> AuthCredentialsDTO:
    return AuthCredentialsDTO(username=username, password=password, email=email)


def _login(username: str, password: str) -> ValidateCredentialsDTO:
    return ValidateCredentialsDTO(username=username, password=password)


def test_sign_up_then_validate_credentials(service: UserAccountService) -> None:
    user, code = service.sign_up(_credentials("alice", "pw1"))

    assert user.username == "alice"
    assert user.password_hash == "hashed:pw1"
    assert code is None
    assert service.validate_credentials(_login("alice", "pw1")) == "alice"
    assert service.validate_credentials(_login("alice", "wrong")) is None


def test_validate_credentials_unknown_user_is_soft_failure(service: UserAccountService) -> None:
    assert service.validate_credentials(_login("nobody", "pw1")) is None


def test_sign_up_duplicate_username_raises(
    service: UserAccountService, users: InMemoryUserRepository
) -> None:
    service.sign_up(_credentials("alice", "pw1"))

    with pytest.raises(UserAlreadyExistsError):
        service.sign_up(_credentials("alice", "other"))

    assert len(users._users) == 1


def test_sign_up_with_email_issues_confirmation(service: UserAccountService) -> None:
    user, code = service.sign_up(_credentials("alice", "pw1", "Alice@Example.com"))

    assert user.email == "alice@example.com"
    assert code

    service.confirm_account_creation(AuthConfirmationDTO(email="alice@example.com", code=code))

    confirmed = service.get_user_by_id(user.id)
    assert confirmed is not None and confirmed.confirmed is True


def test_confirm_without_pending_record_raises_bad_request(service: UserAccountService) -> None:
    service.sign_up(_credentials("alice", "pw1", "alice@example.com"))

    with pytest.raises(ConfirmationNotFoundError) as exc_info:
        service.confirm_account_creation(
            AuthConfirmationDTO(email="alice@example.com", code="not-the-code")
        )

    assert exc_info.value.status == 400


def test_get_user_id_by_email_or_username(service: UserAccountService) -> None:
    user, _ = service.sign_up(_credentials("alice", "pw1", "alice@example.com"))

    assert service.get_user_id(GetUserIdDTO(email="alice@example.com")).auth_id == user.id
    assert service.get_user_id(GetUserIdDTO(username="alice")).auth_id == user.id

    with pytest.raises(UserNotFoundError):
        service.get_user_id(GetUserIdDTO(username="bob"))


def test_change_password_end_to_end(service: UserAccountService) -> None:
    user, _ = service.sign_up(_credentials("alice", "pw1"))

    result = service.change_password(ChangePasswordDTO(user_id=user.id, new_password="pw2"))

    assert result.response == "Password changed"
    assert service.validate_credentials(_login("alice", "pw2")) == "alice"
    assert service.validate_credentials(_login("alice", "pw1")) is None


def test_change_password_checks_old_password_when_given(service: UserAccountService) -> None:
    user, _ = service.sign_up(_credentials("alice", "pw1"))

    with pytest.raises(UnauthorizedError):
        service.change_password(
            ChangePasswordDTO(user_id=user.id, old_password="nope", new_password="pw2")
        )

    assert service.validate_credentials(_login("alice", "pw1")) == "alice"


def test_change_password_unknown_user(service: UserAccountService) -> None:
    with pytest.raises(UserNotFoundError):
        service.change_password(ChangePasswordDTO(user_id=42, new_password="pw2"))


def test_delete_account(service: UserAccountService) -> None:
    user, _ = service.sign_up(_credentials("alice", "pw1"))

    assert service.delete_account(user.id).response == "Account deleted"
    assert service.get_user_by_id(user.id) is None
    with pytest.raises(UserNotFoundError):
        service.delete_account(user.id)


def test_forgot_password_unknown_email_returns_none(service: UserAccountService) -> None:
    assert service.forgot_password(AuthEmailDTO(email="ghost@example.com")) is None


def test_forgot_password_then_set_new_password(service: UserAccountService) -> None:
    service.sign_up(_credentials("alice", "pw1", "alice@example.com"))

    token = service.forgot_password(AuthEmailDTO(email="alice@example.com"))
    assert token is not None

    result = service.set_new_password(
        SetNewPasswordDTO(forgot_password_token=token.forgot_password_token, new_password="pw3")
    )

    assert result.email == "alice@example.com"
    assert service.validate_credentials(_login("alice", "pw3")) == "alice"
    assert service.validate_credentials(_login("alice", "pw1")) is None


def test_set_new_password_with_tampered_token(service: UserAccountService) -> None:
    service.sign_up(_credentials("alice", "pw1", "alice@example.com"))
    token = service.forgot_password(AuthEmailDTO(email="alice@example.com"))
    assert token is not None

    with pytest.raises(UnauthorizedError) as exc_info:
        service.set_new_password(
            SetNewPasswordDTO(
                forgot_password_token=token.forgot_password_token + "x", new_password="pw3"
            )
        )

    assert exc_info.value.message == TOKEN_EXPIRED_OR_BROKEN
    assert exc_info.value.status == 401
    assert service.validate_credentials(_login("alice", "pw1")) == "alice"


def test_set_new_password_rejects_token_without_identity_claims(
    service: UserAccountService,
) -> None:
    token = JwtTokenService(SECRET).issue({"userId": 1}, timedelta(minutes=5))

    with pytest.raises(UnauthorizedError):
        service.set_new_password(SetNewPasswordDTO(forgot_password_token=token, new_password="x"))


def test_reset_token_stays_usable_until_expiry(service: UserAccountService) -> None:
    service.sign_up(_credentials("alice", "pw1", "alice@example.com"))
    token = service.forgot_password(AuthEmailDTO(email="alice@example.com"))
    assert token is not None
    dto = SetNewPasswordDTO(forgot_password_token=token.forgot_password_token, new_password="pw2")

    service.set_new_password(dto)
    service.set_new_password(dto.model_copy(update={"new_password": "pw3"}))

    assert service.validate_credentials(_login("alice", "pw3")) == "alice"


def test_refresh_token_lifecycle(service: UserAccountService) -> None:
    user, _ = service.sign_up(_credentials("alice", "pw1"))
    service.set_refresh_token(user.id, "refresh-1")

    found = service.get_user_if_refresh_token_matches(
        GetRefreshUserDTO(user_id=user.id, refresh_token="refresh-1")
    )
    assert found is not None and found.id == user.id
    assert (
        service.get_user_if_refresh_token_matches(
            GetRefreshUserDTO(user_id=user.id, refresh_token="refresh-2")
        )
        is None
    )

    service.remove_refresh_token(user.id)

    assert (
        service.get_user_if_refresh_token_matches(
            GetRefreshUserDTO(user_id=user.id, refresh_token="refresh-1")
        )
        is None
    )
