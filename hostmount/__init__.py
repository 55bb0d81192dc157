from __future__ import annotations

from typing import Mapping

from dotenv import load_dotenv
from flask import Flask, jsonify

from remotes import RemoteMountError, RemoteMountManager, build_manager

from .config import load_config
from .logging import init_logging
from .routes.remotes import remotes_api


def create_app(
    config_object: object | Mapping[str, object] | None = None,
    manager: RemoteMountManager | None = None,
) -> Flask:
    """Application factory for the host management API."""
    load_dotenv()

    app = Flask(__name__)
    app.config.from_mapping(load_config())
    if config_object:
        if isinstance(config_object, Mapping):
            app.config.from_mapping(config_object)
        else:
            app.config.from_object(config_object)

    init_logging(app)

    app.extensions['remote_mount_manager'] = manager or build_manager(app.config)
    _register_error_handlers(app)
    app.register_blueprint(remotes_api)

    return app


def _register_error_handlers(app: Flask) -> None:
    @app.errorhandler(RemoteMountError)
    def _remote_mount_error(exc: RemoteMountError):
        level = app.logger.error if exc.status_code >= 500 else app.logger.warning
        level("remote operation failed: %s", exc.message)
        return jsonify(exc.to_dict()), exc.status_code
