# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Callable
from datetime import timedelta
from functools import cached_property

from sqlalchemy.orm import Session

from account_service.application.services.password_hashing import WerkzeugPasswordHasher
from account_service.application.services.user_account_service import UserAccountService
from account_service.infrastructure.db import SessionLocal
from account_service.infrastructure.repositories.users.sqlalchemy_user_repository import (
    SqlAlchemyConfirmationRepository,
    SqlAlchemyUserRepository,
)
from account_service.infrastructure.security.jwt_tokens import JwtTokenService
from account_service.interfaces.http.controllers.rpc_controller import RpcController
from account_service.interfaces.rpc.controllers.user_controller import UserController
from account_service.interfaces.rpc.router import MessagePatternRouter
from account_service.shared.config import AppConfig, load_config


class Container:
    def __init__(
        self,
        config: AppConfig | None = None,
        session_factory: Callable[[], Session] | None = None,
    ) -> None:
        self._config = config or load_config()
        self._session_factory = session_factory or SessionLocal

    @cached_property
    def password_hasher(self) -> WerkzeugPasswordHasher:
        return WerkzeugPasswordHasher(method=self._config.security.password_hash_method)

    @cached_property
    def token_service(self) -> JwtTokenService:
        return JwtTokenService(
            self._config.token_secret(),
            algorithm=self._config.security.jwt_algorithm,
        )

    @cached_property
    def user_repository(self) -> SqlAlchemyUserRepository:
        return SqlAlchemyUserRepository(self._session_factory)

    @cached_property
    def confirmation_repository(self) -> SqlAlchemyConfirmationRepository:
        return SqlAlchemyConfirmationRepository(self._session_factory)

    @cached_property
    def user_account_service(self) -> UserAccountService:
        return UserAccountService(
            users=self.user_repository,
            confirmations=self.confirmation_repository,
            password_hasher=self.password_hasher,
            tokens=self.token_service,
            forgot_password_ttl=timedelta(seconds=self._config.security.forgot_password_ttl),
        )

    @cached_property
    def user_controller(self) -> UserController:
        return UserController(accounts=self.user_account_service)

    @cached_property
    def router(self) -> MessagePatternRouter:
        router = MessagePatternRouter()
        router.include(self.user_controller.as_patterns())
        return router

    @cached_property
    def rpc_controller(self) -> RpcController:
        return RpcController(router=self.router)


container = Container()
