# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import secrets
import time

from flask import Flask, Response, g, request

from account_service.shared.logging import (
    clear_request_context,
    logger,
    set_correlation_id,
    set_rpc_pattern,
)

REQUEST_ID_HEADER = "X-Request-ID"


def _client_ip() -> str:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.remote_addr or "unknown"


def _rpc_pattern() -> str | None:
    if request.path != "/rpc":
        return None
    body = request.get_json(silent=True)
    pattern = body.get("pattern") if isinstance(body, dict) else None
    if not isinstance(pattern, dict):
        return "?"
    return f"{pattern.get('role')}.{pattern.get('cmd')}"


def configure_request_logging(app: Flask) -> None:
    """Tag each request with a correlation id and log its outcome."""

    @app.before_request
    def _start() -> None:
        g.correlation_id = request.headers.get(REQUEST_ID_HEADER) or secrets.token_urlsafe(8)
        g.started_at = time.perf_counter()
        set_correlation_id(g.correlation_id)
        set_rpc_pattern(_rpc_pattern())
        logger.info(f"{request.method} {request.path} from {_client_ip()}")

    @app.after_request
    def _finish(response: Response) -> Response:
        elapsed = time.perf_counter() - g.get("started_at", time.perf_counter())
        response.headers.setdefault(REQUEST_ID_HEADER, g.get("correlation_id", "-"))
        logger.info(f"{request.method} {request.path} -> {response.status_code} in {elapsed:.3f}s")
        return response

    @app.teardown_request
    def _teardown(exc: BaseException | None) -> None:
        if exc is not None:
            logger.error(f"request aborted by {type(exc).__name__}")
        clear_request_context()


__all__ = ["REQUEST_ID_HEADER", "configure_request_logging"]
