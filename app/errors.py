"""Application-wide error utilities and handlers."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date
from typing import Any

from flask import Flask, jsonify


class APIError(Exception):
    """Base class for API-level errors."""

    status_code: int = 400

    def __init__(
        self, message: str, *, status_code: int | None = None, payload: dict[str, Any] | None = None
    ):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.payload = payload or {}


class ValidationError(APIError):
    """Error raised for validation failures."""

    status_code = 422


class CurrenciesNotFoundError(APIError):
    """Requested currencies are unknown or have no rate on the selected date."""

    status_code = 404

    def __init__(self, codes: Iterable[str]):
        codes = list(codes)
        super().__init__(
            f"Currencies not found: {', '.join(codes)}.",
            payload={"currencies_not_found": codes},
        )


class DateNotFoundError(APIError):
    """No trading day exists on or before the requested date."""

    status_code = 404

    def __init__(self, requested: date):
        super().__init__(
            f"No rates available on or before {requested.isoformat()}.",
            payload={"date": requested.isoformat()},
        )


class NoRatesAvailableError(APIError):
    """The loaded dataset does not contain any rates to serve."""

    status_code = 503

    def __init__(self, message: str = "No rates available."):
        super().__init__(message)


DEFAULT_STATUS_MESSAGES: dict[int, str] = {
    400: "Request could not be processed.",
    404: "Resource not found.",
    422: "Submitted data is invalid.",
    503: "Service temporarily unavailable. Please retry in a moment.",
}


def register_error_handlers(app: Flask) -> None:
    """Attach error handlers to the Flask application."""

    @app.errorhandler(APIError)
    def handle_api_error(error: APIError):
        message = error.message or DEFAULT_STATUS_MESSAGES.get(error.status_code, "Request failed.")
        payload = error.payload or {}

        response = {"message": message}
        if payload:
            response.update(payload)

        field = payload.get("field")
        if field and "field_errors" not in response:
            response["field_errors"] = {str(field): [message]}

        return jsonify(response), error.status_code
