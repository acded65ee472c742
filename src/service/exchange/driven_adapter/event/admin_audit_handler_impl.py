from src.platform.logging.loguru_io import Logger
from src.service.exchange.app.interface.i_match_event_handler import IMatchEventHandler
from src.service.exchange.app.interface.i_side_effect_repo import IAdminAuditLogRepo
from src.service.exchange.domain.domain_event.match_lifecycle_event import MatchLifecycleEvent
from src.service.exchange.domain.entity.admin_audit_log_entity import AdminAction, AdminAuditLog
from src.service.exchange.domain.enum.match_event_type import MatchEventType


AUDITED_ACTIONS: dict[MatchEventType, AdminAction] = {
    MatchEventType.MATCH_ACCEPTED: AdminAction.ACCEPT_MATCH,
    MatchEventType.MATCH_CANCELLED: AdminAction.CANCEL_MATCH,
    MatchEventType.MATCH_COMPLETED: AdminAction.COMPLETE_MATCH,
}


class AdminAuditHandlerImpl(IMatchEventHandler):
    """Records transitions an administrator performed on someone else's match"""

    name = 'admin_audit'

    def __init__(self, *, audit_log_repo: IAdminAuditLogRepo) -> None:
        self.audit_log_repo = audit_log_repo

    @Logger.io
    async def handle(self, *, event: MatchLifecycleEvent) -> None:
        action = AUDITED_ACTIONS.get(event.type)
        if action is None or not event.acted_as_admin or event.acting_user_id is None:
            return

        await self.audit_log_repo.create(
            entry=AdminAuditLog.for_match(
                admin_id=event.acting_user_id,
                action=action,
                match_id=event.match.id,
                affected_user_ids=tuple(dict.fromkeys(event.participant_ids)),
                before=event.previous_status or '',
                after=event.match.status,
                notes=event.reason,
            )
        )
        Logger.base.info(
            f'🛡️ [AUDIT] admin {event.acting_user_id} {action} on match {event.match.id}'
        )
