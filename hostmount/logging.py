from __future__ import annotations

import json
import logging
import time
import uuid
from typing import Any, Dict

from flask import Flask, g, request
from flask.signals import got_request_exception


_EXTRA_FIELDS = ("method", "path", "status_code", "duration_ms", "remote_id")


def _request_id() -> str | None:
    try:
        return getattr(g, "request_id", None)
    except RuntimeError:
        return None


class JsonRequestFormatter(logging.Formatter):
    """One JSON object per log line, tagged with the request ID when there is one."""

    default_time_format = "%Y-%m-%dT%H:%M:%S"
    default_msec_format = "%s.%03dZ"

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401 - base class contract
        payload: Dict[str, Any] = {
            "timestamp": self.formatTime(record, self.default_time_format),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        request_id = getattr(record, "request_id", None) or _request_id()
        if request_id:
            payload["request_id"] = request_id

        for name in _EXTRA_FIELDS:
            if hasattr(record, name):
                payload[name] = getattr(record, name)

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=True)


def init_logging(app: Flask) -> None:
    """Send app and ``remotes`` logs through the JSON formatter and tag requests."""

    level = getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO)
    handler = logging.StreamHandler()
    handler.setFormatter(JsonRequestFormatter())

    # Reset Flask's default handlers to avoid duplicate logs.
    app.logger.handlers.clear()
    app.logger.addHandler(handler)
    app.logger.setLevel(level)
    app.logger.propagate = False

    remotes_logger = logging.getLogger("remotes")
    remotes_logger.setLevel(level)

    root_logger = logging.getLogger()
    if not root_logger.handlers:
        root_logger.addHandler(handler)
        root_logger.setLevel(level)

    @app.before_request
    def _inject_request_id() -> None:  # pragma: no cover - flask runtime hook
        g.request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        g.request_started = time.time()

    @app.after_request
    def _log_request(response):  # pragma: no cover - flask runtime hook
        request_id = _request_id()
        if request_id:
            response.headers["X-Request-ID"] = request_id

        extra: Dict[str, Any] = {
            "request_id": request_id,
            "method": request.method,
            "path": request.path,
            "status_code": response.status_code,
        }
        started = getattr(g, "request_started", None)
        if isinstance(started, (int, float)):
            extra["duration_ms"] = round((time.time() - started) * 1000, 2)
        if request.view_args and "remote_id" in request.view_args:
            extra["remote_id"] = request.view_args["remote_id"]

        app.logger.info("request complete", extra=extra)
        return response

    @got_request_exception.connect_via(app)
    def _log_exception(sender, exception, **kwargs):  # pragma: no cover - runtime hook
        extra = {
            "request_id": _request_id(),
            "method": getattr(request, "method", None),
            "path": getattr(request, "path", None),
        }
        exc_info = (type(exception), exception, exception.__traceback__)
        app.logger.error("request error", exc_info=exc_info, extra=extra)
