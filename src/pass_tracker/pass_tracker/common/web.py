"""Flask helpers shared by the JSON controllers."""

from __future__ import annotations

import logging
from dataclasses import asdict, is_dataclass
from datetime import datetime
from enum import Enum
from functools import wraps
from typing import Any

from flask import Flask, g, jsonify, request
from werkzeug.exceptions import HTTPException

from ..core.enums import RequestType, ResourceKind
from ..core.exceptions import (
    AuthenticationError,
    AuthError,
    AuthorizationError,
    ConcurrentUpdateError,
    DomainError,
    InsufficientBalanceError,
    NotFoundError,
    PartialFailureError,
    ValidationError,
)
from ..session.context import SessionContext
from ..session.flask_store import FlaskSessionIdentityStore

logger = logging.getLogger(__name__)

# Most specific first.
_ERROR_STATUS = (
    (ValidationError, 400, "validation_error"),
    (AuthenticationError, 401, "auth_error"),
    (AuthorizationError, 403, "authorization_error"),
    (AuthError, 401, "auth_error"),
    (NotFoundError, 404, "not_found"),
    (InsufficientBalanceError, 409, "insufficient_balance"),
    (ConcurrentUpdateError, 409, "concurrent_update"),
    (PartialFailureError, 500, "partial_failure"),
)


def to_json(value: Any) -> Any:
    if is_dataclass(value) and not isinstance(value, type):
        out = {k: to_json(v) for k, v in asdict(value).items()}
        if hasattr(value, "request_type"):
            out["request_type"] = value.request_type.value
        return out
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return [to_json(v) for v in value]
    if isinstance(value, dict):
        return {k: to_json(v) for k, v in value.items()}
    return value


def account_json(account) -> dict:
    data = to_json(account)
    data.pop("password_hash", None)
    data.pop("password_salt", None)
    data["has_credential"] = account.has_credential
    return data


def parse_kind(value: str) -> ResourceKind:
    try:
        return ResourceKind((value or "").lower())
    except ValueError:
        raise ValidationError(f"Unknown resource kind: {value}")


def parse_request_type(value: str) -> RequestType:
    try:
        return RequestType((value or "").lower())
    except ValueError:
        raise ValidationError(f"Unknown request type: {value}")


def json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def session_context(container) -> SessionContext:
    ctx = g.get("session_context")
    if ctx is None:
        ctx = SessionContext(container.accounts_repo, FlaskSessionIdentityStore())
        g.session_context = ctx
    return ctx


def make_guards(container):
    def login_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            account = session_context(container).current_account()
            if account is None:
                raise AuthenticationError("Please sign in to continue")
            g.current_account = account
            return view(*args, **kwargs)

        return wrapper

    def admin_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            account = session_context(container).current_account()
            if account is None:
                raise AuthenticationError("Please sign in to continue")
            if not account.is_admin:
                raise AuthorizationError("Administrator access required")
            g.current_account = account
            return view(*args, **kwargs)

        return wrapper

    return login_required, admin_required


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(exc: DomainError):
        for exc_type, status, kind in _ERROR_STATUS:
            if isinstance(exc, exc_type):
                break
        else:
            status, kind = 400, "domain_error"

        body = {"error": kind, "message": str(exc)}
        if isinstance(exc, PartialFailureError):
            body.update(balance_changed=True, request_id=exc.request_id, email=exc.email, new_balance=exc.new_balance)
        elif isinstance(exc, InsufficientBalanceError):
            body.update(email=exc.email, balance=exc.balance, amount=exc.amount)
        return jsonify(body), status

    @app.errorhandler(HTTPException)
    def handle_http_error(exc: HTTPException):
        return jsonify({"error": "http_error", "message": exc.description}), exc.code or 500

    @app.errorhandler(Exception)
    def handle_unexpected(exc: Exception):
        logger.exception("unhandled error on %s %s", request.method, request.path)
        message = f"Internal error: {exc}" if app.config.get("DEBUG") else "Internal error"
        return jsonify({"error": "internal_error", "message": message}), 500
