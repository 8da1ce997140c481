# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from typing import Any, NoReturn

from pydantic import ValidationError as PydanticValidationError

from .base import ValidationError


def _field_path(loc: tuple[int | str, ...]) -> str:
    # loc uses the wire aliases, e.g. ("newPassword",) or ("pattern", "cmd")
    return ".".join(str(part) for part in loc) or "data"


def format_pydantic_errors(exc: PydanticValidationError) -> dict[str, Any]:
    problems: list[dict[str, Any]] = []
    for error in exc.errors(include_url=False, include_input=False):
        problem: dict[str, Any] = {
            "field": _field_path(error["loc"]),
            "type": error["type"],
            "message": error["msg"],
        }
        if error.get("ctx"):
            problem["ctx"] = {key: str(value) for key, value in error["ctx"].items()}
        problems.append(problem)

    return {
        "fields": sorted({problem["field"] for problem in problems}),
        "errors": problems,
    }


def raise_validation_error(exc: PydanticValidationError) -> NoReturn:
    raise ValidationError(context=format_pydantic_errors(exc)) from exc


__all__ = ["format_pydantic_errors", "raise_validation_error"]
