# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from http import HTTPStatus

from flask import Flask, Response, jsonify, request
from werkzeug.exceptions import HTTPException

from account_service.shared.config import load_config
from account_service.shared.logging import logger

from .base import AppError


def handle_app_error(error: AppError) -> tuple[Response, HTTPStatus]:
    return jsonify(error.to_dict()), error.status


def register_error_handler(app: Flask) -> None:
    """Render every failure on the façade as ``{"error", "context"}`` JSON."""
    debug_mode = load_config().debug_logging

    @app.errorhandler(AppError)
    def _handle_app_error(exc: AppError):
        if exc.is_client_error:
            logger.warning(f"rpc rejected: {exc.code} ({int(exc.status)})")
        else:
            logger.error(f"rpc failed: {exc.code} ({int(exc.status)})")
        return handle_app_error(exc)

    @app.errorhandler(HTTPException)
    def _handle_http(exc: HTTPException):
        # Routing errors (405, 404 on unknown paths) keep their status but speak JSON too
        code = (exc.name or "http_error").lower().replace(" ", "_")
        return jsonify({"error": code}), exc.code or HTTPStatus.INTERNAL_SERVER_ERROR

    @app.errorhandler(Exception)
    def _handle_unexpected(exc: Exception):
        if debug_mode:
            logger.exception(f"Unhandled exception on {request.method} {request.path}")
        else:
            logger.error(f"Unhandled {type(exc).__name__} on {request.method} {request.path}")
        return jsonify({"error": "internal_error"}), HTTPStatus.INTERNAL_SERVER_ERROR
