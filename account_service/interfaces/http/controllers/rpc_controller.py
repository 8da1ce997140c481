# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from flask import Blueprint, Response, jsonify, request
from pydantic import ValidationError

from account_service.infrastructure.observability import render_metrics, track_latency
from account_service.interfaces.rpc.router import MessagePatternRouter, RpcRequestDTO
from account_service.shared.errors import AppError
from account_service.shared.errors.validation import raise_validation_error


class RpcController:
    """HTTP entry point carrying ``{pattern, data}`` envelopes to the router."""

    def __init__(self, *, router: MessagePatternRouter) -> None:
        self._router = router

    def handle(self) -> tuple[Response, int]:
        try:
            envelope = RpcRequestDTO.model_validate(request.get_json(silent=True) or {})
        except ValidationError as exc:
            raise_validation_error(exc)

        key = envelope.pattern.as_key()
        # unknown patterns share one label
        label = str(key) if key in self._router else "unknown"
        outcome = {"status": "internal_error"}
        with track_latency(label, lambda: outcome["status"]):
            try:
                result = self._router.dispatch(key, envelope.data)
            except AppError as exc:
                outcome["status"] = exc.code
                raise
            outcome["status"] = "ok"
        return jsonify({"response": result}), 200

    def health(self) -> tuple[Response, int]:
        return jsonify({"status": "ok"}), 200

    def metrics(self) -> Response:
        payload, content_type = render_metrics()
        return Response(payload, content_type=content_type)

    def as_blueprint(self) -> Blueprint:
        bp = Blueprint("rpc", __name__)
        bp.add_url_rule("/rpc", view_func=self.handle, methods=["POST"])
        bp.add_url_rule("/health", view_func=self.health, methods=["GET"])
        bp.add_url_rule("/metrics", view_func=self.metrics, methods=["GET"])
        return bp
