from __future__ import annotations

import logging
from typing import Any, Dict

from flask import Flask, jsonify, request

from ..core.exceptions import (
    AuthenticationError,
    ConflictError,
    IndexCapacityError,
    PartialWriteFailure,
    StoreUnavailable,
    ValidationError,
)

logger = logging.getLogger(__name__)


def json_body() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Expected a JSON object body")
    return data


def error_response(message: str, status: int, **extra: Any):
    payload: Dict[str, Any] = {"error": message}
    payload.update(extra)
    return jsonify(payload), status


def not_found(what: str):
    return error_response(f"{what} not found", 404)


def register_error_handlers(app: Flask) -> None:
    """Map domain and store errors to JSON responses for every controller."""

    @app.errorhandler(ConflictError)
    def _conflict(e: ConflictError):
        return error_response(str(e), 409)

    @app.errorhandler(ValidationError)
    def _invalid(e: ValidationError):
        return error_response(str(e), 400)

    @app.errorhandler(AuthenticationError)
    def _unauthenticated(e: AuthenticationError):
        return error_response(str(e), 401)

    @app.errorhandler(IndexCapacityError)
    def _index_full(e: IndexCapacityError):
        logger.error("Index capacity reached: %s", e)
        return error_response(str(e), 507)

    @app.errorhandler(PartialWriteFailure)
    def _partial(e: PartialWriteFailure):
        logger.error("Partial write: %s", e)
        # A group filled up by a concurrent writer after the up-front check.
        full = isinstance(e.__cause__, IndexCapacityError)
        return error_response(
            str(e.__cause__) if full else "Storage error, the change was not fully applied",
            507 if full else 503,
            operation=e.operation,
            rolledBack=e.rolled_back,
        )

    @app.errorhandler(StoreUnavailable)
    def _unavailable(e: StoreUnavailable):
        logger.error("Store unavailable: %s", e)
        return error_response("Storage temporarily unavailable", 503)
