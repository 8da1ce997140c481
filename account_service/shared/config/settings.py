# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

import sys
from functools import lru_cache

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_INSECURE_SECRETS = ("dev", "development", "test", "")


class DatabaseConfig(BaseSettings):
    url: str = Field("sqlite:///account_service.db", alias="DATABASE_URL")
    pool_size: int = Field(10, ge=1, alias="DATABASE_POOL_SIZE")
    max_overflow: int = Field(5, ge=0, alias="DATABASE_MAX_OVERFLOW")
    pool_timeout: float = Field(30.0, ge=0.1, alias="DATABASE_POOL_TIMEOUT")

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore", validate_by_name=True
    )


class SecurityConfig(BaseSettings):
    # Forgot-password tokens
    jwt_secret: str | None = Field(None, alias="JWT_SECRET")
    jwt_algorithm: str = Field("HS256", alias="JWT_ALGORITHM")
    forgot_password_ttl: int = Field(3600, ge=1, alias="FORGOT_PASSWORD_TOKEN_TTL")

    # Password hashing
    password_hash_method: str = Field("scrypt", alias="PASSWORD_HASH_METHOD")

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore", validate_by_name=True
    )

    @field_validator("jwt_algorithm", mode="after")
    @classmethod
    def _check_algorithm(cls, value: str) -> str:
        if not value.upper().startswith("HS"):
            raise ValueError("only HMAC algorithms are supported for reset tokens")
        return value.upper()


class ObservabilityConfig(BaseSettings):
    metrics_enabled: bool = Field(True, alias="METRICS_ENABLED")
    service_name: str = Field("account-service", alias="SERVICE_NAME")

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore", validate_by_name=True
    )


def _database_config_factory() -> DatabaseConfig:
    return DatabaseConfig()  # type: ignore[call-arg]


def _observability_config_factory() -> ObservabilityConfig:
    return ObservabilityConfig()  # type: ignore[call-arg]


def _security_config_factory() -> SecurityConfig:
    return SecurityConfig()  # type: ignore[call-arg]


class AppConfig(BaseSettings):
    app_env: str = Field("development", alias="APP_ENV")
    secret_key: str = Field("dev", alias="SECRET_KEY")
    debug_logging: bool = Field(False, alias="DEBUG_LOGGING")

    database: DatabaseConfig = Field(default_factory=_database_config_factory)
    observability: ObservabilityConfig = Field(default_factory=_observability_config_factory)
    security: SecurityConfig = Field(default_factory=_security_config_factory)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        validate_assignment=True,
        extra="ignore",
    )

    @field_validator("debug_logging", mode="before")
    @classmethod
    def _parse_debug_logging(cls, value: str | bool) -> bool:
        if isinstance(value, str):
            return value.lower() in ("1", "true", "yes")
        return bool(value)

    @model_validator(mode="after")
    def _validate_production_settings(self) -> "AppConfig":
        if not self.is_production():
            return self

        if self.token_secret() in _INSECURE_SECRETS:
            print(
                "\n❌ CRITICAL SECURITY ERROR: Insecure SECRET_KEY/JWT_SECRET detected in production!\n"
                "   Reset tokens would be forgeable with this value.\n"
                "   Generate one with: python -c \"import secrets; print(secrets.token_urlsafe(32))\"\n",
                file=sys.stderr,
            )
            sys.exit(1)

        return self

    def is_production(self) -> bool:
        return self.app_env.lower() in ("production", "prod")

    def token_secret(self) -> str:
        return self.security.jwt_secret or self.secret_key


@lru_cache(maxsize=1)
def load_config() -> AppConfig:
    return AppConfig()


__all__ = ["AppConfig", "DatabaseConfig", "ObservabilityConfig", "SecurityConfig", "load_config"]
