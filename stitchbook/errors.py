"""Error taxonomy for the receipt workflow.

Every error carries the HTTP status it maps to; the message is safe to show
to the shop operator as-is.
"""

import re

from flask import jsonify
from sqlalchemy.exc import IntegrityError
from werkzeug.exceptions import HTTPException

from .logging import get_logger
from .utils.api import api_error

logger = get_logger(__name__)


class StitchbookError(Exception):
    status_code = 500

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(StitchbookError):
    """Missing or invalid input the client can correct."""

    status_code = 400


class NotFound(StitchbookError):
    status_code = 404


class ConflictError(StitchbookError):
    """Receipt number collision; the whole submission must be retried."""

    status_code = 409


class InternalError(StitchbookError):
    status_code = 500


def parse_unique_violation(err_exc: IntegrityError):
    """Return {"table", "column", ...} for a unique violation, or None.

    Postgres reports the constraint name instead of the table.
    """
    m = re.search(r"UNIQUE constraint failed:\s*([^.]+)\.([^\s,]+)", str(err_exc.orig))
    if m:
        return {"table": m.group(1), "column": m.group(2)}
    m = re.search(r"Key \(([^)]+)\)=\(([^)]+)\) already exists", str(err_exc.orig))
    if m:
        c = re.search(r'unique constraint "([^"]+)"', str(err_exc.orig))
        return {
            "table": None,
            "column": m.group(1),
            "value": m.group(2),
            "constraint": c.group(1) if c else None,
        }
    return None


def _error_response(message, status_code):
    resp = jsonify(api_error(message))
    resp.status_code = status_code
    return resp


def register_error_handlers(app):
    @app.errorhandler(StitchbookError)
    def handle_stitchbook_error(e):
        return _error_response(e.message, e.status_code)

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        return _error_response(e.description or e.name, e.code or 500)

    @app.errorhandler(Exception)
    def handle_unexpected(e):
        logger.exception("unhandled error")
        return _error_response("Internal server error", 500)
