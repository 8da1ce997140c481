# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Dispatch table for ``{role, cmd}`` message patterns."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from account_service.shared.errors import PatternNotFoundError
from account_service.shared.logging import logger

Handler = Callable[[Any], Any]


@dataclass(slots=True, frozen=True)
class MessagePattern:
    role: str
    cmd: str

    def __str__(self) -> str:
        return f"{self.role}.{self.cmd}"


class PatternDTO(BaseModel):
    role: str = Field(min_length=1, max_length=64)
    cmd: str = Field(min_length=1, max_length=64)

    model_config = ConfigDict(frozen=True)

    def as_key(self) -> MessagePattern:
        return MessagePattern(role=self.role, cmd=self.cmd)


class RpcRequestDTO(BaseModel):
    pattern: PatternDTO
    data: Any = None


class MessagePatternRouter:
    def __init__(self) -> None:
        self._handlers: dict[MessagePattern, Handler] = {}

    def register(self, pattern: MessagePattern, handler: Handler) -> None:
        if pattern in self._handlers:
            raise ValueError(f"pattern {pattern} is already registered")
        self._handlers[pattern] = handler

    def include(self, handlers: Mapping[MessagePattern, Handler]) -> None:
        for pattern, handler in handlers.items():
            self.register(pattern, handler)

    def __contains__(self, pattern: object) -> bool:
        return pattern in self._handlers

    def patterns(self) -> Iterable[MessagePattern]:
        return tuple(self._handlers)

    def dispatch(self, pattern: MessagePattern, data: Any) -> Any:
        handler = self._handlers.get(pattern)
        if handler is None:
            logger.warning(f"rpc: no handler for pattern={pattern}")
            raise PatternNotFoundError(pattern.role, pattern.cmd)
        logger.debug(f"rpc: dispatch pattern={pattern}")
        return handler(data)


__all__ = ["Handler", "MessagePattern", "MessagePatternRouter", "PatternDTO", "RpcRequestDTO"]
