# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from flask import Flask

from account_service.infrastructure.container import Container, container as default_container
from account_service.infrastructure.db import init_db
from account_service.shared.config import load_config
from account_service.shared.logging import logger, setup_logging
from account_service.shared.middleware import configure_error_handling, configure_request_logging

_config = load_config()


def create_app(container: Container | None = None) -> Flask:
    setup_logging(debug_mode=_config.debug_logging)
    init_db()

    container = container or default_container

    app = Flask(__name__)
    app.config.update(SECRET_KEY=_config.secret_key)
    configure_error_handling(app)
    configure_request_logging(app)

    app.register_blueprint(container.rpc_controller.as_blueprint())

    @app.after_request
    def _add_security_headers(resp):
        resp.headers.setdefault("X-Content-Type-Options", "nosniff")
        resp.headers.setdefault("Cache-Control", "no-store")
        return resp

    logger.info(f"Account service initialized with {len(tuple(container.router.patterns()))} patterns")
    return app


if __name__ == "__main__":
    create_app().run(host="0.0.0.0", port=5000, debug=_config.debug_logging)
