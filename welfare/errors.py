"""
ERROR TAXONOMY
==============

Every error a service can raise maps onto one HTTP status.
Routes never build error responses themselves; the handlers
registered here turn exceptions into JSON bodies.
"""

import logging

from flask import jsonify, request
from werkzeug.exceptions import HTTPException

logger = logging.getLogger(__name__)


class WelfareError(Exception):
    """Base exception for all service-level failures"""
    status_code = 500
    default_message = 'Internal Server Error'

    def __init__(self, message=None, errors=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        self.errors = errors

    def to_dict(self):
        payload = {'message': self.message}
        if self.errors:
            payload['errors'] = self.errors
        return payload


class NotFound(WelfareError):
    """Raised when a record does not exist"""
    status_code = 404
    default_message = 'Not found'


class ValidationError(WelfareError):
    """Raised when input fails schema or model validation"""
    status_code = 400
    default_message = 'Invalid request data'


class InvalidStatus(ValidationError):
    """Raised when a loan status is outside the allowed values"""
    default_message = 'Invalid loan status'


class DuplicateError(WelfareError):
    """Raised when a unique field is already taken"""
    status_code = 400
    default_message = 'User already exists'


class InvalidCredentials(WelfareError):
    """Raised on a failed login"""
    status_code = 401
    default_message = 'Invalid EPF/ Email or Password!'


class Unauthorized(WelfareError):
    """Raised when no valid session token accompanies the request"""
    status_code = 401
    default_message = 'Not authorized, no token'


class Forbidden(WelfareError):
    """Raised when the member lacks the required role"""
    status_code = 403
    default_message = 'Not authorized as an admin'


class ServerError(WelfareError):
    """Raised when persistence or runtime fails unexpectedly"""
    status_code = 500


# ============================================================
# FLASK ERROR HANDLERS
# ============================================================

def register_error_handlers(app):
    """Attach JSON error handlers to the application."""

    @app.errorhandler(WelfareError)
    def handle_welfare_error(error):
        if error.status_code >= 500:
            logger.error(f"{request.method} {request.path} failed: {error.message}")
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(404)
    def handle_not_found(error):
        return jsonify({'message': f'Not Found - {request.path}'}), 404

    @app.errorhandler(405)
    def handle_method_not_allowed(error):
        return jsonify({'message': f'Method {request.method} not allowed on {request.path}'}), 405

    @app.errorhandler(HTTPException)
    def handle_http_exception(error):
        return jsonify({'message': error.description}), error.code

    @app.errorhandler(Exception)
    def handle_unexpected(error):
        logger.exception(f"Unhandled error on {request.method} {request.path}")
        return jsonify({'message': 'Internal Server Error'}), 500
