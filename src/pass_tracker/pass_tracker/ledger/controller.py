from __future__ import annotations

from flask import Flask, g, jsonify

from ..common.web import json_body, make_guards, parse_kind
from ..container import Container


def register(app: Flask, container: Container) -> None:
    login_required, admin_required = make_guards(container)

    @app.route("/balances/<kind>", methods=["GET"], endpoint="my_balance")
    @login_required
    def my_balance(kind: str):
        resource = parse_kind(kind)
        balance = container.ledger.get_balance(g.current_account.email, resource)
        return jsonify({"kind": resource.value, "balance": balance})

    @app.route("/admin/accounts/<email>/balances/<kind>", methods=["PUT"], endpoint="admin_set_balance")
    @admin_required
    def admin_set_balance(email: str, kind: str):
        resource = parse_kind(kind)
        value = container.ledger.set_balance(
            actor=g.current_account,
            email=email,
            kind=resource,
            value=json_body().get("value"),
        )
        return jsonify({"email": email.strip().lower(), "kind": resource.value, "balance": value})

    @app.route("/admin/accounts/<email>/probation", methods=["PUT"], endpoint="admin_set_probation")
    @admin_required
    def admin_set_probation(email: str):
        on_probation = container.ledger.set_probation(
            actor=g.current_account,
            email=email,
            on_probation=json_body().get("on_probation"),
        )
        return jsonify({"email": email.strip().lower(), "on_probation": on_probation})
