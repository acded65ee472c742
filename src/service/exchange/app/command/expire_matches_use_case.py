from datetime import datetime, timezone
from typing import Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace

from src.platform.config.di import Container
from src.platform.exception.exceptions import CustomBaseError
from src.platform.logging.loguru_io import Logger
from src.service.exchange.app.command.match_transition_helper import (
    MatchTransitionHelper,
    TicketWrite,
)
from src.service.exchange.app.interface.i_match_command_repo import IMatchCommandRepo
from src.service.exchange.app.interface.i_match_event_publisher import IMatchEventPublisher
from src.service.exchange.app.interface.i_match_query_repo import IMatchQueryRepo
from src.service.exchange.app.interface.i_reference_query_repo import IUserQueryRepo
from src.service.exchange.app.interface.i_ticket_request_command_repo import (
    ITicketRequestCommandRepo,
)
from src.service.exchange.domain.entity.match_entity import Match
from src.service.exchange.domain.enum.match_event_type import MatchEventType
from src.service.exchange.domain.enum.ticket_request_status import TicketRequestStatus


class ExpireMatchesUseCase:
    """
    Sweep unresolved matches past their ``expires_at``

    Each one moves to expired with a system history entry and both ticket
    requests reopen. A match that another writer resolves mid-sweep is skipped.
    """

    def __init__(
        self,
        *,
        match_command_repo: IMatchCommandRepo,
        match_query_repo: IMatchQueryRepo,
        ticket_request_command_repo: ITicketRequestCommandRepo,
        user_query_repo: IUserQueryRepo,
        event_publisher: IMatchEventPublisher,
    ) -> None:
        self.match_query_repo = match_query_repo
        self.helper = MatchTransitionHelper(
            match_command_repo=match_command_repo,
            ticket_request_command_repo=ticket_request_command_repo,
            user_query_repo=user_query_repo,
            event_publisher=event_publisher,
        )
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        match_command_repo: IMatchCommandRepo = Depends(Provide[Container.match_command_repo]),
        match_query_repo: IMatchQueryRepo = Depends(Provide[Container.match_query_repo]),
        ticket_request_command_repo: ITicketRequestCommandRepo = Depends(
            Provide[Container.ticket_request_command_repo]
        ),
        user_query_repo: IUserQueryRepo = Depends(Provide[Container.user_query_repo]),
        event_publisher: IMatchEventPublisher = Depends(
            Provide[Container.match_event_publisher]
        ),
    ) -> Self:
        return cls(
            match_command_repo=match_command_repo,
            match_query_repo=match_query_repo,
            ticket_request_command_repo=ticket_request_command_repo,
            user_query_repo=user_query_repo,
            event_publisher=event_publisher,
        )

    @Logger.io
    async def execute(self, *, now: Optional[datetime] = None) -> list[Match]:
        now = now or datetime.now(timezone.utc)
        with self.tracer.start_as_current_span('use_case.expire_matches'):
            expired: list[Match] = []
            for candidate in await self.match_query_repo.list_expired(now=now):
                try:
                    context = await self.helper.load(match_id=candidate.id)
                    match = await self.helper.commit(
                        transition='expire',
                        context=context,
                        apply=lambda match: match.expire(),
                        event_type=MatchEventType.MATCH_EXPIRED,
                        initiator_write=TicketWrite(status=TicketRequestStatus.OPEN),
                        matched_write=TicketWrite(status=TicketRequestStatus.OPEN),
                    )
                except CustomBaseError as e:
                    Logger.base.warning(f'⏭️ [MATCH] [EXPIRE] skipped {candidate.id}: {e.message}')
                    continue
                expired.append(match)

            Logger.base.info(f'⌛ [MATCH] [EXPIRE] {len(expired)} match(es) expired')
            return expired
