from typing import Optional

from uuid_utils import UUID

from src.platform.logging.loguru_io import Logger
from src.service.exchange.app.interface.i_match_event_handler import IMatchEventHandler
from src.service.exchange.app.interface.i_reference_query_repo import IUserQueryRepo
from src.service.exchange.app.interface.i_side_effect_repo import IEmailService, INotificationRepo
from src.service.exchange.domain.domain_event.match_lifecycle_event import MatchLifecycleEvent
from src.service.exchange.domain.entity.notification_entity import Notification
from src.service.exchange.domain.entity.user_entity import User
from src.service.exchange.domain.enum.match_event_type import MatchEventType


TITLES: dict[MatchEventType, str] = {
    MatchEventType.MATCH_INITIATED: 'New Match Request',
    MatchEventType.MATCH_ACCEPTED: 'Match Accepted!',
    MatchEventType.MATCH_CANCELLED: 'Match Cancelled',
    MatchEventType.MATCH_COMPLETED: 'Exchange Complete!',
    MatchEventType.MATCH_EXPIRED: 'Match Expired',
}


def display_name(user: Optional[User]) -> str:
    if user is None:
        return 'Someone'
    return f'{user.first_name} {user.last_name[:1]}.'.strip() if user.first_name else user.username


def build_message(event: MatchLifecycleEvent, actor: Optional[User]) -> str:
    who = display_name(actor)
    match event.type:
        case MatchEventType.MATCH_INITIATED:
            return f'{who} wants to match with your ticket request'
        case MatchEventType.MATCH_ACCEPTED:
            return f'{who} accepted your match'
        case MatchEventType.MATCH_CANCELLED:
            suffix = f': {event.reason}' if event.reason else ''
            return f'{who} cancelled the match{suffix}'
        case MatchEventType.MATCH_COMPLETED:
            return 'Your exchange is complete. Contact details are now on your ticket request'
        case MatchEventType.MATCH_EXPIRED:
            return 'Your match expired without a response and your ticket request is open again'


def recipients(event: MatchLifecycleEvent) -> list[UUID]:
    """Completion and expiry reach both parties, everything else skips the actor"""
    if event.type in (MatchEventType.MATCH_COMPLETED, MatchEventType.MATCH_EXPIRED):
        return list(dict.fromkeys(event.participant_ids))
    if event.type == MatchEventType.MATCH_INITIATED:
        return [event.matched_owner_id]
    return [user_id for user_id in dict.fromkeys(event.participant_ids) if user_id != event.acting_user_id]


class MatchNotificationHandlerImpl(IMatchEventHandler):
    name = 'match_notification'

    def __init__(
        self,
        *,
        user_query_repo: IUserQueryRepo,
        notification_repo: INotificationRepo,
        email_service: IEmailService,
    ) -> None:
        self.user_query_repo = user_query_repo
        self.notification_repo = notification_repo
        self.email_service = email_service

    @Logger.io
    async def handle(self, *, event: MatchLifecycleEvent) -> None:
        actor = (
            await self.user_query_repo.get_by_id(user_id=event.acting_user_id)
            if event.acting_user_id
            else None
        )
        title = TITLES[event.type]
        message = build_message(event, actor)

        for user_id in recipients(event):
            await self.notification_repo.create(
                notification=Notification.create(
                    user_id=user_id,
                    type=event.type,
                    title=title,
                    message=message,
                    match_id=event.match.id,
                )
            )
            recipient = await self.user_query_repo.get_by_id(user_id=user_id)
            if recipient and recipient.email:
                await self.email_service.send_email(to=recipient.email, subject=title, body=message)

        Logger.base.info(f'🔔 [NOTIFY] {event.type} for match {event.match.id}')
