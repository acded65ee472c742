import time
from datetime import timedelta
from typing import Iterable, Optional, Self

import anyio
from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace
from uuid_utils import UUID

from src.platform.config.di import Container
from src.platform.exception.exceptions import (
    InvalidStateError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.exchange_metrics import metrics
from src.service.exchange.app.command.match_transition_helper import (
    publish_safely,
    resolve_actor,
)
from src.service.exchange.app.interface.i_match_command_repo import IMatchCommandRepo
from src.service.exchange.app.interface.i_match_event_publisher import IMatchEventPublisher
from src.service.exchange.app.interface.i_reference_query_repo import IUserQueryRepo
from src.service.exchange.app.interface.i_ticket_request_command_repo import (
    ITicketRequestCommandRepo,
)
from src.service.exchange.domain.domain_event.match_lifecycle_event import MatchLifecycleEvent
from src.service.exchange.domain.entity.match_entity import Match
from src.service.exchange.domain.entity.ticket_request_entity import TicketRequest
from src.service.exchange.domain.enum.match_event_type import MatchEventType
from src.service.exchange.domain.enum.ticket_kind import opposite_kind
from src.service.exchange.domain.enum.ticket_request_status import TicketRequestStatus


class InitiateMatchUseCase:
    """
    Propose a match between two open ticket requests.

    Flow:
    1. Validate both tickets exist, the actor owns the initiator ticket, and the
       two are opposite kinds held by different users
    2. Flip both tickets open -> pending with compare-and-set (concurrently)
    3. Roll back whichever flip succeeded if the other one lost its race
    4. Store the match with its first history entry and publish MATCH_INITIATED
    """

    def __init__(
        self,
        *,
        match_command_repo: IMatchCommandRepo,
        ticket_request_command_repo: ITicketRequestCommandRepo,
        user_query_repo: IUserQueryRepo,
        event_publisher: IMatchEventPublisher,
        match_ttl: Optional[timedelta] = None,
    ) -> None:
        self.match_command_repo = match_command_repo
        self.ticket_request_command_repo = ticket_request_command_repo
        self.user_query_repo = user_query_repo
        self.event_publisher = event_publisher
        self.match_ttl = match_ttl
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
        match_ttl: Optional[timedelta] = Depends(Provide[Container.match_ttl]),
    ) -> Self:
        return cls(
            match_command_repo=match_command_repo,
            ticket_request_command_repo=ticket_request_command_repo,
            user_query_repo=user_query_repo,
            event_publisher=event_publisher,
            match_ttl=match_ttl,
        )

    async def _get_ticket(self, ticket_id: UUID) -> TicketRequest:
        ticket = await self.ticket_request_command_repo.get_by_id(ticket_id=ticket_id)
        if ticket is None:
            raise NotFoundError(f'Ticket request {ticket_id} not found')
        return ticket

    async def _reserve_both(self, initiator: TicketRequest, matched: TicketRequest) -> None:
        flipped: dict[UUID, Optional[TicketRequest]] = {}

        async def flip(ticket_id: UUID) -> None:
            flipped[ticket_id] = await self.ticket_request_command_repo.compare_and_set_status(
                ticket_id=ticket_id,
                expected_status=TicketRequestStatus.OPEN,
                new_status=TicketRequestStatus.PENDING,
            )

        async with anyio.create_task_group() as tg:
            tg.start_soon(flip, initiator.id)
            tg.start_soon(flip, matched.id)

        if all(flipped.values()):
            return

        await self._release(ticket_id for ticket_id, ticket in flipped.items() if ticket)
        lost = initiator if flipped[initiator.id] is None else matched
        current = await self.ticket_request_command_repo.get_by_id(ticket_id=lost.id)
        raise InvalidStateError(
            f'Ticket request {lost.id} is no longer open',
            current_status=current.status if current else lost.status,
        )

    async def _release(self, ticket_ids: Iterable[UUID]) -> None:
        for ticket_id in ticket_ids:
            await self.ticket_request_command_repo.compare_and_set_status(
                ticket_id=ticket_id,
                expected_status=TicketRequestStatus.PENDING,
                new_status=TicketRequestStatus.OPEN,
            )
            Logger.base.warning(f'↩️ [MATCH] [INITIATE] rolled back ticket {ticket_id} to open')

    @Logger.io
    async def execute(
        self,
        *,
        initiator_ticket_id: UUID,
        matched_ticket_id: UUID,
        acting_user_id: UUID,
        notes: Optional[str] = None,
    ) -> Match:
        with self.tracer.start_as_current_span(
            'use_case.initiate_match',
            attributes={
                'ticket.initiator_id': str(initiator_ticket_id),
                'ticket.matched_id': str(matched_ticket_id),
                'user.id': str(acting_user_id),
            },
        ):
            started = time.perf_counter()
            actor = await resolve_actor(self.user_query_repo, acting_user_id)
            initiator = await self._get_ticket(initiator_ticket_id)
            matched = await self._get_ticket(matched_ticket_id)

            if initiator.owner_id != actor.id:
                raise UnauthorizedError('Only the owner of the initiating ticket request can do this')
            if initiator.owner_id == matched.owner_id:
                raise ValidationError('Cannot match two ticket requests owned by the same user')
            if opposite_kind(initiator.kind) != matched.kind:
                raise ValidationError(f'A {initiator.kind} request cannot be matched with a {matched.kind}')
            for ticket in (initiator, matched):
                if ticket.status != TicketRequestStatus.OPEN:
                    raise InvalidStateError(
                        f'Ticket request {ticket.id} is not open', current_status=ticket.status
                    )

            match = Match.initiate(
                initiator_ticket_id=initiator.id,
                matched_ticket_id=matched.id,
                initiated_by=actor.id,
                notes=notes,
                ttl=self.match_ttl,
            )

            try:
                await self._reserve_both(initiator, matched)
            except InvalidStateError:
                metrics.record_transition(
                    transition='initiate', result='rejected', duration=time.perf_counter() - started
                )
                raise

            try:
                await self.match_command_repo.create(match=match)
            except Exception:
                await self._release((initiator.id, matched.id))
                raise

            metrics.record_transition(
                transition='initiate', result='success', duration=time.perf_counter() - started
            )
            Logger.base.info(
                f'🤝 [MATCH] [INITIATE] {match.id}: {initiator.id} ({initiator.kind}) '
                f'-> {matched.id} ({matched.kind})'
            )

            await publish_safely(
                self.event_publisher,
                MatchLifecycleEvent.of(
                    type=MatchEventType.MATCH_INITIATED,
                    match=match,
                    acting_user_id=actor.id,
                    owners=(initiator.owner_id, matched.owner_id),
                    reason=notes,
                ),
            )
            return match
