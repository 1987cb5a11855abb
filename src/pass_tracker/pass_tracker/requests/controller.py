from __future__ import annotations

from flask import Flask, g, jsonify

from ..common.web import json_body, make_guards, parse_kind, parse_request_type, to_json
from ..container import Container
from ..core.enums import RequestType


def register(app: Flask, container: Container) -> None:
    login_required, admin_required = make_guards(container)

    @app.route("/requests/<kind>/transfer", methods=["POST"], endpoint="submit_transfer")
    @login_required
    def submit_transfer(kind: str):
        request_id = container.request_queue.submit_transfer(
            actor=g.current_account,
            kind=parse_kind(kind),
            amount=json_body().get("amount"),
        )
        return jsonify({"request_id": request_id}), 201

    @app.route("/requests/<kind>/incentive", methods=["POST"], endpoint="submit_incentive")
    @login_required
    def submit_incentive(kind: str):
        data = json_body()
        request_id = container.request_queue.submit_incentive(
            actor=g.current_account,
            kind=parse_kind(kind),
            amount=data.get("amount"),
            reason=str(data.get("reason") or ""),
        )
        return jsonify({"request_id": request_id}), 201

    @app.route("/requests/<kind>/<request_type>/latest", methods=["GET"], endpoint="my_latest_request")
    @login_required
    def my_latest_request(kind: str, request_type: str):
        latest = container.request_queue.find_latest_by_account(
            email=g.current_account.email,
            kind=parse_kind(kind),
            request_type=parse_request_type(request_type),
        )
        return jsonify({"pending": to_json(latest) if latest else None})

    @app.route("/admin/requests/<kind>/<request_type>", methods=["GET"], endpoint="admin_pending_requests")
    @admin_required
    def admin_pending_requests(kind: str, request_type: str):
        rows = container.request_queue.list_pending(
            actor=g.current_account,
            kind=parse_kind(kind),
            request_type=parse_request_type(request_type),
        )
        return jsonify([to_json(r) for r in rows])

    @app.route("/admin/requests/<kind>/<request_type>/<int:request_id>/deny", methods=["POST"], endpoint="admin_deny_request")
    @admin_required
    def admin_deny_request(kind: str, request_type: str, request_id: int):
        resource = parse_kind(kind)
        rtype = parse_request_type(request_type)
        container.request_queue.deny(actor=g.current_account, kind=resource, request_type=rtype, request_id=request_id)
        return jsonify({"status": "denied", "request_id": request_id})

    @app.route("/admin/requests/<kind>/<request_type>/<int:request_id>/approve", methods=["POST"], endpoint="admin_approve_request")
    @admin_required
    def admin_approve_request(kind: str, request_type: str, request_id: int):
        resource = parse_kind(kind)
        rtype = parse_request_type(request_type)
        result = container.approval_engine.approve(
            actor=g.current_account,
            kind=resource,
            request_type=rtype,
            request_id=request_id,
        )
        return jsonify(
            {
                "status": "approved",
                "request_id": request_id,
                "email": result.request.email,
                "new_balance": result.new_balance,
                "direction": "debit" if rtype is RequestType.TRANSFER else "credit",
            }
        )
