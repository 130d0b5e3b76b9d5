import logging

from flask import jsonify
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from werkzeug.exceptions import HTTPException

from models import db
from services.errors import DomainError, InfrastructureError

logger = logging.getLogger(__name__)


def _error_response(status: int, message: str, code: str, **extra):
    body = {"success": False, "error": message, "code": code}
    body.update({k: v for k, v in extra.items() if v})
    return jsonify(body), status


def register_error_handlers(app):
    @app.errorhandler(DomainError)
    def handle_domain_error(err: DomainError):
        if err.status_code >= 500:
            logger.error("%s: %s", err.code, err.message)
        return _error_response(
            err.status_code,
            err.message,
            err.code,
            retryable=getattr(err, "retryable", False),
            details=err.details,
        )

    @app.errorhandler(SQLAlchemyError)
    def handle_store_error(err: SQLAlchemyError):
        db.session.rollback()
        logger.exception("Unhandled store error")
        return _error_response(
            500,
            "Server error",
            InfrastructureError.default_code,
            retryable=isinstance(err, OperationalError),
        )

    @app.errorhandler(HTTPException)
    def handle_http_error(err: HTTPException):
        return _error_response(err.code or 500, err.description or err.name, err.name.upper().replace(" ", "_"))
