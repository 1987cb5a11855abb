from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .accounts.credentials import CredentialStore
from .accounts.mysql_account_repository import MySQLAccountRepository
from .accounts.repository import AccountRepository
from .accounts.service import AccountService, AuthService
from .approvals.service import ApprovalEngine
from .database.connection import DBConfig, DatabaseConnection
from .ledger.service import BalanceLedger
from .notifications.digest import PendingDigest
from .notifications.emailjs import EmailJSClient, parse_recipients
from .notifications.sink import (
    BackgroundNotificationSink,
    EmailNotificationSink,
    NotificationSink,
    NullNotificationSink,
)
from .requests.mysql_request_repository import MySQLRequestRepository
from .requests.repository import RequestRepository
from .requests.service import RequestQueue


@dataclass(frozen=True)
class Container:
    accounts_repo: AccountRepository
    requests_repo: RequestRepository

    credential_store: CredentialStore
    auth_service: AuthService
    account_service: AccountService
    ledger: BalanceLedger
    request_queue: RequestQueue
    approval_engine: ApprovalEngine
    notifier: NotificationSink
    digest: PendingDigest

    conn: Optional[DatabaseConnection] = None


def build_email_client(settings: dict) -> Optional[EmailJSClient]:
    service_id = str(settings.get("EMAILJS_SERVICE_ID") or "").strip()
    template_id = str(settings.get("EMAILJS_TEMPLATE_ID") or "").strip()
    public_key = str(settings.get("EMAILJS_PUBLIC_KEY") or "").strip()
    to_emails = parse_recipients(str(settings.get("NOTIFY_EMAILS") or ""))

    if not (service_id and template_id and public_key and to_emails):
        return None
    return EmailJSClient(
        service_id=service_id,
        template_id=template_id,
        public_key=public_key,
        to_emails=to_emails,
    )


def build_services(
    *,
    accounts_repo: AccountRepository,
    requests_repo: RequestRepository,
    email_client: Optional[EmailJSClient] = None,
    notifier: Optional[NotificationSink] = None,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    if notifier is None:
        if email_client:
            notifier = BackgroundNotificationSink(EmailNotificationSink(email_client))
        else:
            notifier = NullNotificationSink()

    credential_store = CredentialStore(accounts_repo)
    ledger = BalanceLedger(accounts_repo)

    return Container(
        accounts_repo=accounts_repo,
        requests_repo=requests_repo,
        credential_store=credential_store,
        auth_service=AuthService(accounts_repo, credential_store),
        account_service=AccountService(accounts_repo),
        ledger=ledger,
        request_queue=RequestQueue(requests_repo, accounts_repo, notifier),
        approval_engine=ApprovalEngine(requests_repo, ledger),
        notifier=notifier,
        digest=PendingDigest(requests_repo, email_client),
        conn=conn,
    )


def build_container(*, db_config: dict, notification_settings: Optional[dict] = None) -> Container:
    config = DBConfig(
        host=str(db_config["host"]),
        port=int(db_config.get("port", 3306)),
        user=str(db_config["user"]),
        password=str(db_config["password"]),
        database=str(db_config["database"]),
    )
    conn = DatabaseConnection.get_instance(config)

    return build_services(
        accounts_repo=MySQLAccountRepository(conn),
        requests_repo=MySQLRequestRepository(conn),
        email_client=build_email_client(notification_settings or {}),
        conn=conn,
    )
