# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Error hierarchy shared by the RPC façade and the service layer.

Every error carries a stable machine ``code``, the HTTP status used when the
error crosses the ``/rpc`` boundary and optional ``context`` for the caller.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from http import HTTPStatus
from typing import Any, ClassVar


@dataclass(slots=True)
class AppError(Exception):
    code: str
    status: HTTPStatus
    context: Mapping[str, Any] | None = None

    def __post_init__(self) -> None:
        Exception.__init__(self, self.code)

    @property
    def is_client_error(self) -> bool:
        return self.status < HTTPStatus.INTERNAL_SERVER_ERROR

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"error": self.code}
        if self.context:
            payload["context"] = dict(self.context)
        return payload


class DomainError(AppError):
    """Business rule failure; subclasses pin ``code`` and ``status``."""

    code: ClassVar[str] = "domain_error"
    status: ClassVar[HTTPStatus] = HTTPStatus.BAD_REQUEST

    def __init__(self, *, context: Mapping[str, Any] | None = None) -> None:
        cls = type(self)
        AppError.__init__(self, code=cls.code, status=cls.status, context=context)


class InfrastructureError(AppError):
    def __init__(self, code: str = "infrastructure_error") -> None:
        super().__init__(code=code, status=HTTPStatus.INTERNAL_SERVER_ERROR)


class ValidationError(AppError):
    def __init__(self, *, context: Mapping[str, Any] | None = None) -> None:
        super().__init__(
            code="validation_error",
            status=HTTPStatus.UNPROCESSABLE_ENTITY,
            context=context,
        )

    @property
    def fields(self) -> list[str]:
        return list((self.context or {}).get("fields", ()))


class PatternNotFoundError(AppError):
    def __init__(self, role: str | None, cmd: str | None) -> None:
        super().__init__(
            code="pattern_not_found",
            status=HTTPStatus.NOT_FOUND,
            context={"role": role, "cmd": cmd},
        )
