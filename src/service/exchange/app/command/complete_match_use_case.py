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
from src.service.exchange.domain.entity.ticket_request_entity import TicketRequest
from src.service.exchange.domain.enum.match_event_type import MatchEventType
from src.service.exchange.domain.enum.ticket_request_status import TicketRequestStatus
from src.service.exchange.domain.value_object.snapshot import CounterpartySnapshot


class CompleteMatchUseCase:
    """
    accepted -> completed

    Both ticket requests become completed and each one receives the *other*
    party's contact snapshot, frozen at this moment.
    """

    def __init__(
        self,
        *,
        match_command_repo: IMatchCommandRepo,
        ticket_request_command_repo: ITicketRequestCommandRepo,
        user_query_repo: IUserQueryRepo,
        event_publisher: IMatchEventPublisher,
    ) -> None:
        self.user_query_repo = user_query_repo
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

    async def _snapshot_of_owner(self, ticket: TicketRequest) -> CounterpartySnapshot:
        owner = await self.user_query_repo.get_by_id(user_id=ticket.owner_id)
        if owner is not None:
            return CounterpartySnapshot.of(owner)

        # Owner record gone: fall back to the identity frozen on the ticket
        Logger.base.warning(f'⚠️ [MATCH] [COMPLETE] owner {ticket.owner_id} not found')
        return CounterpartySnapshot(
            user_id=ticket.owner_id,
            first_name=ticket.user_snapshot.first_name,
            last_name=ticket.user_snapshot.last_name,
            username=ticket.user_snapshot.username,
            email='',
            discord_handle=ticket.user_snapshot.discord_handle,
        )

    @Logger.io
    async def execute(
        self, *, match_id: UUID, acting_user_id: UUID, notes: Optional[str] = None
    ) -> Match:
        with self.tracer.start_as_current_span(
            'use_case.complete_match',
            attributes={'match.id': str(match_id), 'user.id': str(acting_user_id)},
        ):
            context = await self.helper.load_for_actor(
                match_id=match_id, acting_user_id=acting_user_id
            )
            initiator_contact = await self._snapshot_of_owner(context.initiator_ticket)
            matched_contact = await self._snapshot_of_owner(context.matched_ticket)

            return await self.helper.commit(
                transition='complete',
                context=context,
                apply=lambda match: match.complete(changed_by=acting_user_id, notes=notes),
                event_type=MatchEventType.MATCH_COMPLETED,
                initiator_write=TicketWrite(
                    status=TicketRequestStatus.COMPLETED, counterparty_snapshot=matched_contact
                ),
                matched_write=TicketWrite(
                    status=TicketRequestStatus.COMPLETED, counterparty_snapshot=initiator_contact
                ),
                reason=notes,
            )
