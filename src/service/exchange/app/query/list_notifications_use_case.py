from typing import Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from uuid_utils import UUID

from src.platform.config.di import Container
from src.platform.exception.exceptions import UnauthorizedError
from src.platform.logging.loguru_io import Logger
from src.service.exchange.app.command.match_transition_helper import resolve_actor
from src.service.exchange.app.interface.i_reference_query_repo import IUserQueryRepo
from src.service.exchange.app.interface.i_side_effect_repo import (
    IAdminAuditLogRepo,
    INotificationRepo,
)
from src.service.exchange.domain.entity.admin_audit_log_entity import AdminAuditLog
from src.service.exchange.domain.entity.notification_entity import Notification


class ListNotificationsUseCase:
    def __init__(self, *, notification_repo: INotificationRepo) -> None:
        self.notification_repo = notification_repo

    @classmethod
    @inject
    def depends(
        cls,
        notification_repo: INotificationRepo = Depends(Provide[Container.notification_repo]),
    ) -> Self:
        return cls(notification_repo=notification_repo)

    @Logger.io
    async def execute(self, *, user_id: UUID) -> list[Notification]:
        return await self.notification_repo.list_by_user(user_id=user_id)


class ListAdminAuditLogsUseCase:
    def __init__(
        self, *, audit_log_repo: IAdminAuditLogRepo, user_query_repo: IUserQueryRepo
    ) -> None:
        self.audit_log_repo = audit_log_repo
        self.user_query_repo = user_query_repo

    @classmethod
    @inject
    def depends(
        cls,
        audit_log_repo: IAdminAuditLogRepo = Depends(Provide[Container.admin_audit_log_repo]),
        user_query_repo: IUserQueryRepo = Depends(Provide[Container.user_query_repo]),
    ) -> Self:
        return cls(audit_log_repo=audit_log_repo, user_query_repo=user_query_repo)

    @Logger.io
    async def execute(
        self, *, acting_user_id: UUID, admin_id: Optional[UUID] = None
    ) -> list[AdminAuditLog]:
        actor = await resolve_actor(self.user_query_repo, acting_user_id)
        if not actor.is_admin:
            raise UnauthorizedError('Only administrators can read the audit log')
        return await self.audit_log_repo.list_all(admin_id=admin_id)
