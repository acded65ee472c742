from typing import Optional

from uuid_utils import UUID

from src.service.exchange.app.interface.i_side_effect_repo import (
    IAdminAuditLogRepo,
    INotificationRepo,
)
from src.service.exchange.domain.entity.admin_audit_log_entity import AdminAuditLog
from src.service.exchange.domain.entity.notification_entity import Notification
from src.service.exchange.driven_adapter.repo.in_memory.document_store import (
    InMemoryDocumentStore,
)


class NotificationRepoInMemoryImpl(INotificationRepo):
    def __init__(self, *, store: InMemoryDocumentStore) -> None:
        self.store = store

    async def create(self, *, notification: Notification) -> Notification:
        self.store.notifications.append(notification)
        return notification

    async def list_by_user(self, *, user_id: UUID) -> list[Notification]:
        return [n for n in reversed(self.store.notifications) if n.user_id == user_id]


class AdminAuditLogRepoInMemoryImpl(IAdminAuditLogRepo):
    def __init__(self, *, store: InMemoryDocumentStore) -> None:
        self.store = store

    async def create(self, *, entry: AdminAuditLog) -> AdminAuditLog:
        self.store.audit_logs.append(entry)
        return entry

    async def list_all(self, *, admin_id: Optional[UUID] = None) -> list[AdminAuditLog]:
        return [
            entry
            for entry in reversed(self.store.audit_logs)
            if admin_id is None or entry.admin_id == admin_id
        ]
