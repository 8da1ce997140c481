# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Account lifecycle operations: sign-up, credentials, confirmation, password reset."""

from __future__ import annotations

from datetime import timedelta

from account_service.application.dto import (
    AuthConfirmationDTO,
    AuthCredentialsDTO,
    AuthEmailDTO,
    AuthEmailModel,
    AuthIdModel,
    ChangePasswordDTO,
    ForgotPasswordTokenModel,
    GetRefreshUserDTO,
    GetUserIdDTO,
    SetNewPasswordDTO,
    StringResponse,
    ValidateCredentialsDTO,
)
from account_service.domain.users.entities import ForgotPasswordClaims, User
from account_service.domain.users.exceptions import (
    ConfirmationNotFoundError,
    UnauthorizedError,
    UserNotFoundError,
)
from account_service.domain.users.repositories import (
    ConfirmationRepository,
    PasswordHasher,
    TokenService,
    UserRepository,
)
from account_service.shared.logging import logger

TOKEN_EXPIRED_OR_BROKEN = "Token expired or broken"


class UserAccountService:
    def __init__(
        self,
        *,
        users: UserRepository,
        confirmations: ConfirmationRepository,
        password_hasher: PasswordHasher,
        tokens: TokenService,
        forgot_password_ttl: timedelta = timedelta(hours=1),
    ) -> None:
        self._users = users
        self._confirmations = confirmations
        self._password_hasher = password_hasher
        self._tokens = tokens
        self._forgot_password_ttl = forgot_password_ttl

    def sign_up(self, credentials: AuthCredentialsDTO) -> tuple[User, str | None]:
        """Create an account; returns the user and a confirmation code when an email was given.

        Uniqueness is enforced by the store, so a taken username or email raises
        ``UserAlreadyExistsError``. The account and its confirmation record are
        written together, so a failure leaves neither behind.
        """
        hashed = self._password_hasher.hash(credentials.password)
        if credentials.email is None:
            user = self._users.create(credentials.username, hashed)
            logger.info(f"accounts.sign_up: created user_id={user.id}")
            return user, None

        user, confirmation = self._users.create_with_confirmation(
            credentials.username, hashed, credentials.email
        )
        logger.info(f"accounts.sign_up: created user_id={user.id} pending confirmation")
        return user, confirmation.code

    def validate_credentials(self, credentials: ValidateCredentialsDTO) -> str | None:
        user = self._users.find_by_username(credentials.username)
        if user and self._password_hasher.verify(credentials.password, user.password_hash):
            return user.username
        logger.info("accounts.validate_credentials: rejected")
        return None

    def get_user_id(self, dto: GetUserIdDTO) -> AuthIdModel:
        user = None
        if dto.email:
            user = self._users.find_by_email(dto.email)
        if user is None and dto.username:
            user = self._users.find_by_username(dto.username)
        if user is None:
            raise UserNotFoundError()
        return AuthIdModel(auth_id=user.id)

    def get_user_by_id(self, user_id: int) -> User | None:
        return self._users.find_by_id(user_id)

    def get_user_by_email(self, email: str) -> User | None:
        return self._users.find_by_email(email)

    def get_user_if_refresh_token_matches(self, dto: GetRefreshUserDTO) -> User | None:
        user = self._users.find_by_id(dto.user_id)
        if user is None or not user.refresh_token_hash:
            return None
        if not self._password_hasher.verify(dto.refresh_token, user.refresh_token_hash):
            return None
        return user

    def set_refresh_token(self, user_id: int, refresh_token: str) -> None:
        self._users.set_refresh_token_hash(user_id, self._password_hasher.hash(refresh_token))

    def change_password(self, dto: ChangePasswordDTO) -> StringResponse:
        user = self._users.find_by_id(dto.user_id)
        if user is None:
            raise UserNotFoundError()
        if dto.old_password is not None and not self._password_hasher.verify(
            dto.old_password, user.password_hash
        ):
            raise UnauthorizedError("Old password does not match")

        hashed = self._password_hasher.hash(dto.new_password)
        if not self._users.update_password(user.id, hashed):
            raise UserNotFoundError()
        logger.info(f"accounts.change_password: ok user_id={user.id}")
        return StringResponse(response="Password changed")

    def delete_account(self, user_id: int) -> StringResponse:
        if not self._users.delete(user_id):
            raise UserNotFoundError()
        logger.info(f"accounts.delete_account: ok user_id={user_id}")
        return StringResponse(response="Account deleted")

    def confirm_account_creation(self, dto: AuthConfirmationDTO) -> None:
        pending = self._confirmations.find(dto.email, dto.code)
        if pending is None:
            raise ConfirmationNotFoundError()
        self._users.mark_confirmed(pending.user_id)
        logger.info(f"accounts.confirm: ok user_id={pending.user_id}")

    def remove_refresh_token(self, user_id: int) -> None:
        self._users.remove_refresh_token(user_id)

    def forgot_password(self, dto: AuthEmailDTO) -> ForgotPasswordTokenModel | None:
        user = self._users.find_by_email(dto.email)
        if user is None or user.email is None:
            return None

        claims = ForgotPasswordClaims(user_id=user.id, user_email=user.email)
        token = self._tokens.issue(claims.to_claims(), self._forgot_password_ttl)
        logger.info(f"accounts.forgot_password: token issued user_id={user.id}")
        return ForgotPasswordTokenModel(forgot_password_token=token)

    def set_new_password(self, dto: SetNewPasswordDTO) -> AuthEmailModel:
        # Reset tokens are not tracked: one stays usable until it expires.
        payload = self._tokens.verify(dto.forgot_password_token) or {}
        user_id = payload.get("userId")
        user_email = payload.get("userEmail")
        if not user_id or not user_email:
            raise UnauthorizedError(TOKEN_EXPIRED_OR_BROKEN)

        hashed = self._password_hasher.hash(dto.new_password)
        if not self._users.update_password(int(user_id), hashed):
            raise UserNotFoundError()
        logger.info(f"accounts.set_new_password: ok user_id={user_id}")
        return AuthEmailModel(email=str(user_email))
