"""Example: drive the service layer directly (no Flask).

Controllers are a thin layer; the request/approval rules live in services.
"""

import importlib

from config import get_settings_module

from src.pass_tracker.pass_tracker.container import build_container
from src.pass_tracker.pass_tracker.core.enums import RequestType, ResourceKind


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG)

    admin = container.account_service.get("admin@example.com")
    pending = container.request_queue.list_pending(
        actor=admin,
        kind=ResourceKind.PASS,
        request_type=RequestType.TRANSFER,
    )
    for req in pending:
        print(req.request_id, req.email, req.amount, req.created_at)


if __name__ == "__main__":
    main()
