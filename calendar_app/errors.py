"""
Error types shared by the auth and events services, and the Flask handlers
that turn them into JSON responses.

Services raise these exceptions; the gateway registers the handlers so every
route answers with the same `{"message", "error"}` body.
"""

import logging
from typing import Any, Dict, Optional, Tuple

import psycopg2
from flask import Flask, jsonify, request, Response
from werkzeug.exceptions import HTTPException


class ApiError(Exception):
    """Base class for errors that map to an HTTP status."""

    status_code = 400
    message = "Bad request"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.message)
        if message:
            self.message = message

    def to_response(self) -> Tuple[Response, int]:
        return jsonify({"message": self.message, "error": type(self).__name__}), self.status_code


class ValidationError(ApiError):
    status_code = 400
    message = "Invalid input"


class DuplicateUser(ApiError):
    status_code = 400
    message = "User already exists"


class WeakPassword(ApiError):
    status_code = 400
    message = "Password must be at least 6 characters"


class InvalidCredentials(ApiError):
    status_code = 400
    message = "Invalid credentials"


class Unauthenticated(ApiError):
    status_code = 401
    message = "Please authenticate"


class NotFound(ApiError):
    status_code = 404
    message = "Event not found"


class VersionConflict(ApiError):
    status_code = 409
    message = "Event was modified by another request"


class StoreUnavailable(ApiError):
    status_code = 500
    message = "Database unavailable"


def get_json_body() -> Dict[str, Any]:
    """Return the JSON object body of the request, or raise ValidationError."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def register_error_handlers(app: Flask) -> None:
    """
    Attach the error boundary to the application.

    - ApiError subclasses keep their own status and message.
    - psycopg2.OperationalError (lost or refused connection) -> StoreUnavailable.
    - werkzeug HTTPException (404 route, 405 method, bad JSON) -> JSON body.
    - Anything else is logged and answered with a generic 500.
    """

    @app.errorhandler(ApiError)
    def handle_api_error(err: ApiError) -> Tuple[Response, int]:
        if err.status_code >= 500:
            logging.error(f"[Gateway] {type(err).__name__}: {err.message}")
        return err.to_response()

    @app.errorhandler(psycopg2.OperationalError)
    def handle_store_error(err: psycopg2.OperationalError) -> Tuple[Response, int]:
        logging.error(f"[Gateway] Database operation failed: {err}")
        return StoreUnavailable().to_response()

    @app.errorhandler(HTTPException)
    def handle_http_error(err: HTTPException) -> Tuple[Response, int]:
        return jsonify({"message": err.description, "error": err.name}), err.code

    @app.errorhandler(Exception)
    def handle_unexpected(err: Exception) -> Tuple[Response, int]:
        logging.exception("[Gateway] Unhandled error")
        return jsonify({"message": "Something went wrong!", "error": "InternalError"}), 500
