"""Sinks written by the lifecycle event handlers"""

from abc import ABC, abstractmethod
from typing import Optional

from uuid_utils import UUID

from src.service.exchange.domain.entity.admin_audit_log_entity import AdminAuditLog
from src.service.exchange.domain.entity.notification_entity import Notification


class INotificationRepo(ABC):
    @abstractmethod
    async def create(self, *, notification: Notification) -> Notification:
        pass

    @abstractmethod
    async def list_by_user(self, *, user_id: UUID) -> list[Notification]:
        pass


class IAdminAuditLogRepo(ABC):
    @abstractmethod
    async def create(self, *, entry: AdminAuditLog) -> AdminAuditLog:
        pass

    @abstractmethod
    async def list_all(self, *, admin_id: Optional[UUID] = None) -> list[AdminAuditLog]:
        pass


class IEmailService(ABC):
    @abstractmethod
    async def send_email(self, *, to: str, subject: str, body: str) -> bool:
        pass
