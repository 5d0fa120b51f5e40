from __future__ import annotations

import logging

from flask import Flask
from werkzeug.exceptions import HTTPException

from ..core.exceptions import DomainError, PrerequisiteNotMetError, StoreUnavailable
from .http import error_response

logger = logging.getLogger(__name__)


def register_error_handlers(app: Flask) -> None:
    """Render every failure as ``{"success": false, "error": ...}``."""

    @app.errorhandler(StoreUnavailable)
    def store_unavailable(exc: StoreUnavailable):
        logger.error("Store unavailable: %s context=%s", exc, exc.context)
        return error_response(str(exc), exc.status_code, retryable=True)

    @app.errorhandler(PrerequisiteNotMetError)
    def prerequisites_missing(exc: PrerequisiteNotMetError):
        return error_response(str(exc), exc.status_code, missing=exc.missing)

    @app.errorhandler(DomainError)
    def domain_error(exc: DomainError):
        return error_response(str(exc), exc.status_code)

    @app.errorhandler(HTTPException)
    def http_error(exc: HTTPException):
        return error_response(exc.description or exc.name, exc.code or 500)

    @app.errorhandler(Exception)
    def unhandled(exc: Exception):
        logger.exception("Unhandled error: %s", exc)
        return error_response("Server Error", 500)
