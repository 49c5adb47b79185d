"""Logging setup for the exchange rates service.

Every feed download, cache read, dataset swap and scheduled refresh logs a
structured ``extra`` built by :func:`feed_log_extra`; HTTP requests log the same
shape with ``event="request.*"``. :class:`JSONLogFormatter` lifts exactly those
fields into the emitted JSON object.
"""

from __future__ import annotations

import json
import logging
import time
import uuid
from datetime import UTC, datetime
from typing import Any

from flask import Flask, g, has_request_context, request
from werkzeug.exceptions import HTTPException

REQUEST_ID_HEADER = "X-Request-ID"

LOGGING_CONFIG_FLAG = "_logging_configured"
REQUEST_LOGGING_FLAG = "_request_logging_configured"

STRUCTURED_FIELDS = (
    "event",
    "source",
    "status",
    "outcome",
    "stale",
    "last_date",
    "generation",
    "duration_ms",
    "method",
    "route",
    "request_id",
    "error",
)


class JSONLogFormatter(logging.Formatter):
    """Render a record and its structured fields as one JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for field in STRUCTURED_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                payload[field] = value

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(payload, separators=(",", ":"), default=str)


def setup_logging(app: Flask) -> None:
    """Install a single root handler, JSON or plain text depending on config."""

    if app.config.get(LOGGING_CONFIG_FLAG):
        return

    level = _resolve_level(app.config.get("LOG_LEVEL", "INFO"))
    handler = logging.StreamHandler()
    handler.setLevel(level)
    if app.config.get("LOG_JSON_ENABLED"):
        handler.setFormatter(JSONLogFormatter())
    else:
        handler.setFormatter(
            logging.Formatter(
                app.config.get("LOG_FORMAT", "%(asctime)s %(levelname)s [%(name)s] %(message)s")
            )
        )

    root_logger = logging.getLogger()
    for existing in root_logger.handlers[:]:
        root_logger.removeHandler(existing)
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    # Werkzeug and Flask log through the root handler only.
    logging.getLogger("werkzeug").handlers = []
    app.logger.handlers = []
    app.logger.setLevel(level)
    app.logger.propagate = True

    app.config[LOGGING_CONFIG_FLAG] = True


def init_request_logging(app: Flask) -> None:
    """Tag each request with an ``X-Request-ID`` and log its outcome."""

    if app.config.get(REQUEST_LOGGING_FLAG):
        return

    @app.before_request
    def _start_request():
        g.request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        g.request_start = time.perf_counter()
        g.request_logged = False

    @app.after_request
    def _log_response(response):
        request_id = getattr(g, "request_id", None)
        if request_id:
            response.headers.setdefault(REQUEST_ID_HEADER, request_id)
        app.logger.info(
            "%s %s -> %s",
            request.method,
            request.path,
            response.status_code,
            extra=_request_log_extra("request.completed", response.status_code),
        )
        g.request_logged = True
        return response

    @app.teardown_request
    def _log_failure(exc: BaseException | None):
        if exc is None or getattr(g, "request_logged", False):
            return
        status = exc.code if isinstance(exc, HTTPException) else 500
        app.logger.error(
            "%s %s failed: %s",
            request.method,
            request.path,
            exc,
            extra=_request_log_extra("request.failed", status, error=str(exc)),
        )

    app.config[REQUEST_LOGGING_FLAG] = True


def feed_log_extra(
    *,
    source: str,
    event: str,
    status: str,
    duration_ms: float | None = None,
    stale: bool = False,
    outcome: str | None = None,
    last_date: str | None = None,
    generation: int | None = None,
    error: str | None = None,
) -> dict[str, Any]:
    """Structured fields for feed, cache and refresh log records."""

    payload: dict[str, Any] = {
        "event": event,
        "source": source,
        "status": status,
        "duration_ms": round(duration_ms, 3) if duration_ms is not None else None,
        "request_id": _current_request_id(),
        "stale": stale,
        "outcome": outcome,
        "last_date": last_date,
        "generation": generation,
        "error": error or None,
    }
    return {key: value for key, value in payload.items() if value is not None}


def _request_log_extra(event: str, status: int, error: str | None = None) -> dict[str, Any]:
    start = getattr(g, "request_start", None)
    duration_ms = (time.perf_counter() - start) * 1000 if start is not None else None
    payload: dict[str, Any] = {
        "event": event,
        "source": "api",
        "status": status,
        "method": request.method,
        "route": request.url_rule.rule if request.url_rule else request.path,
        "duration_ms": round(duration_ms, 3) if duration_ms is not None else None,
        "request_id": getattr(g, "request_id", None),
        "error": error,
    }
    return {key: value for key, value in payload.items() if value is not None}


def _current_request_id() -> str | None:
    if not has_request_context():
        return None
    return getattr(g, "request_id", None)


def _resolve_level(level: Any) -> int:
    if isinstance(level, int):
        return level
    return logging.getLevelNamesMapping().get(str(level or "INFO").upper(), logging.INFO)
