from __future__ import annotations

import logging

from flask import Flask, g, jsonify, session

from ..common.web import account_json, json_body, make_guards, session_context
from ..container import Container
from ..core.exceptions import AuthenticationError
from .service import LoginStatus

logger = logging.getLogger(__name__)

SETUP_EMAIL_KEY = "credential_setup_email"


def register(app: Flask, container: Container) -> None:
    login_required, admin_required = make_guards(container)

    @app.route("/login", methods=["POST"], endpoint="login")
    def login():
        data = json_body()
        result = container.auth_service.login(str(data.get("email", "")), str(data.get("password", "")))
        ctx = session_context(container)

        if result.status is LoginStatus.NEEDS_SETUP:
            ctx.sign_out()
            session[SETUP_EMAIL_KEY] = result.account.email
            return jsonify({"status": result.status.value, "account": {"email": result.account.email, "name": result.account.name}})

        session.pop(SETUP_EMAIL_KEY, None)
        ctx.sign_in(result.account, remember=bool(data.get("remember")))
        return jsonify({"status": result.status.value, "account": account_json(result.account)})

    @app.route("/credential", methods=["POST"], endpoint="setup_credential")
    def setup_credential():
        email = session.get(SETUP_EMAIL_KEY)
        if not email:
            raise AuthenticationError("Sign in with your email before creating a password")

        data = json_body()
        account = container.auth_service.setup_credential(
            email,
            str(data.get("password", "")),
            str(data.get("confirmation", "")),
        )
        session.pop(SETUP_EMAIL_KEY, None)
        session_context(container).sign_in(account, remember=bool(data.get("remember")))
        return jsonify({"status": LoginStatus.OK.value, "account": account_json(account)})

    @app.route("/logout", methods=["POST"], endpoint="logout")
    def logout():
        session_context(container).sign_out()
        session.pop(SETUP_EMAIL_KEY, None)
        return jsonify({"status": "signed_out"})

    @app.route("/me", methods=["GET"], endpoint="me")
    @login_required
    def me():
        return jsonify(account_json(g.current_account))

    @app.route("/admin/accounts", methods=["GET"], endpoint="admin_accounts")
    @admin_required
    def admin_accounts():
        rows = container.account_service.list_accounts(actor=g.current_account)
        return jsonify([account_json(a) for a in rows])

    @app.route("/admin/accounts/<email>/reset-credential", methods=["POST"], endpoint="admin_reset_credential")
    @admin_required
    def admin_reset_credential(email: str):
        container.auth_service.reset_credential(actor=g.current_account, email=email)
        return jsonify({"status": "reset", "email": email.strip().lower()})
