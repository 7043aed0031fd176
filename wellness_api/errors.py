"""Centralised error handling and custom exceptions.

This module defines custom exception classes and provides
Flask error handlers that serialise them into JSON responses.
By using custom exceptions, the service layer can signal
specific error conditions without coupling itself to HTTP
response codes. The Flask app will register these handlers
during application factory initialisation.
"""
from __future__ import annotations

import logging

from flask import jsonify
from marshmallow import ValidationError as SchemaValidationError

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Base class for errors that map onto a structured API response."""

    code = "ERROR"
    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def payload(self) -> dict:
        return {"code": self.code, "message": self.message}

    def to_response(self, status_code: int | None = None):
        return jsonify({"error": self.payload()}), status_code or self.status_code


class ValidationError(ApiError):
    """Raised when input validation fails."""

    code = "VALIDATION_ERROR"
    status_code = 400

    def __init__(self, message: str, fields: dict | None = None) -> None:
        super().__init__(message)
        self.fields = fields or {}

    def payload(self) -> dict:
        data = super().payload()
        data["fields"] = self.fields
        return data


class InvalidReferenceError(ApiError):
    """Raised when a write references a row that does not exist."""

    code = "INVALID_REFERENCE"
    status_code = 400


class ForbiddenError(ApiError):
    """Raised when the caller may not act on the requested resource."""

    code = "FORBIDDEN"
    status_code = 403

    def __init__(self, message: str = "You do not have access to this resource.") -> None:
        super().__init__(message)


class NotFoundError(ApiError):
    """Raised when a requested resource cannot be found."""

    code = "NOT_FOUND"
    status_code = 404


class ConflictError(ApiError):
    """Raised when a uniqueness or concurrent-edit conflict occurs."""

    code = "CONFLICT"
    status_code = 409


class TransactionFailure(ApiError):
    """Raised when a survey transaction failed and was rolled back."""

    code = "TRANSACTION_FAILED"
    status_code = 500


def validation_error_from_schema(err: SchemaValidationError) -> ValidationError:
    """Convert a marshmallow error into the API's ``ValidationError``."""
    messages = err.messages if isinstance(err.messages, dict) else {"_schema": err.messages}
    return ValidationError("Invalid request data.", fields=messages)


def register_error_handlers(app) -> None:
    """Register custom error handlers on the given Flask app."""
    @app.errorhandler(ApiError)
    def handle_api_error(err: ApiError):
        if err.status_code >= 500:
            logger.error("%s: %s", err.code, err.message)
        return err.to_response()

    @app.errorhandler(SchemaValidationError)
    def handle_schema_error(err: SchemaValidationError):
        return validation_error_from_schema(err).to_response()
