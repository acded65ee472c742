from typing import Optional

from uuid_utils import UUID

from src.platform.state.kvrocks_client import key_of, kvrocks_client
from src.service.exchange.app.interface.i_side_effect_repo import (
    IAdminAuditLogRepo,
    INotificationRepo,
)
from src.service.exchange.domain.entity.admin_audit_log_entity import AdminAuditLog
from src.service.exchange.domain.entity.notification_entity import Notification
from src.service.exchange.driven_adapter.repo.kvrocks.document_codec import (
    decode_audit_log,
    decode_notification,
    encode,
)


class NotificationRepoKvrocksImpl(INotificationRepo):
    async def create(self, *, notification: Notification) -> Notification:
        await kvrocks_client.get_client().lpush(
            key_of('notification', 'by_user', str(notification.user_id)), encode(notification)
        )
        return notification

    async def list_by_user(self, *, user_id: UUID) -> list[Notification]:
        docs = await kvrocks_client.get_client().lrange(
            key_of('notification', 'by_user', str(user_id)), 0, -1
        )
        return [decode_notification(doc) for doc in docs]


class AdminAuditLogRepoKvrocksImpl(IAdminAuditLogRepo):
    async def create(self, *, entry: AdminAuditLog) -> AdminAuditLog:
        await kvrocks_client.get_client().lpush(key_of('admin_audit_log'), encode(entry))
        return entry

    async def list_all(self, *, admin_id: Optional[UUID] = None) -> list[AdminAuditLog]:
        docs = await kvrocks_client.get_client().lrange(key_of('admin_audit_log'), 0, -1)
        entries = [decode_audit_log(doc) for doc in docs]
        return [entry for entry in entries if admin_id is None or entry.admin_id == admin_id]
