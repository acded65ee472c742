from typing import Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace
from uuid_utils import UUID

from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.service.exchange.app.command.match_transition_helper import (
    MatchTransitionHelper,
    TicketWrite,
)
from src.service.exchange.app.interface.i_match_command_repo import IMatchCommandRepo
from src.service.exchange.app.interface.i_match_event_publisher import IMatchEventPublisher
from src.service.exchange.app.interface.i_reference_query_repo import IUserQueryRepo
from src.service.exchange.app.interface.i_ticket_request_command_repo import (
    ITicketRequestCommandRepo,
)
from src.service.exchange.domain.entity.match_entity import Match
from src.service.exchange.domain.enum.match_event_type import MatchEventType
from src.service.exchange.domain.enum.ticket_request_status import TicketRequestStatus


class CancelMatchUseCase:
    """initiated | accepted -> cancelled; both ticket requests go back to open"""

    def __init__(
        self,
        *,
        match_command_repo: IMatchCommandRepo,
        ticket_request_command_repo: ITicketRequestCommandRepo,
        user_query_repo: IUserQueryRepo,
        event_publisher: IMatchEventPublisher,
    ) -> None:
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
            ticket_request_command_repo=ticket_request_command_repo,
            user_query_repo=user_query_repo,
            event_publisher=event_publisher,
        )

    @Logger.io
    async def execute(
        self, *, match_id: UUID, acting_user_id: UUID, reason: Optional[str] = None
    ) -> Match:
        with self.tracer.start_as_current_span(
            'use_case.cancel_match',
            attributes={'match.id': str(match_id), 'user.id': str(acting_user_id)},
        ):
            context = await self.helper.load_for_actor(
                match_id=match_id, acting_user_id=acting_user_id
            )
            return await self.helper.commit(
                transition='cancel',
                context=context,
                apply=lambda match: match.cancel(changed_by=acting_user_id, reason=reason),
                event_type=MatchEventType.MATCH_CANCELLED,
                initiator_write=TicketWrite(status=TicketRequestStatus.OPEN),
                matched_write=TicketWrite(status=TicketRequestStatus.OPEN),
                reason=reason,
            )
