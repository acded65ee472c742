"""
Match transition helper

Shared steps of accept / cancel / complete / expire:

1. Load the match and both of its ticket requests
2. Resolve and authorize the acting user (participant or admin)
3. Compare-and-set the match on the status the transition was validated against
4. Write both ticket requests concurrently, each only while it is still in a state the
   transition expects; a write that finds the ticket already moved on by a later
   transition of the same match is dropped
5. Publish the lifecycle event (failures are logged, never raised)
"""

import time
from typing import Callable, Optional

import anyio
import attrs
from uuid_utils import UUID

from src.platform.exception.exceptions import (
    InvalidStateError,
    NotFoundError,
    UnauthorizedError,
)
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.exchange_metrics import metrics
from src.service.exchange.app.interface.i_match_command_repo import IMatchCommandRepo
from src.service.exchange.app.interface.i_match_event_publisher import IMatchEventPublisher
from src.service.exchange.app.interface.i_reference_query_repo import IUserQueryRepo
from src.service.exchange.app.interface.i_ticket_request_command_repo import (
    ITicketRequestCommandRepo,
)
from src.service.exchange.domain.domain_event.match_lifecycle_event import MatchLifecycleEvent
from src.service.exchange.domain.entity.match_entity import Match
from src.service.exchange.domain.entity.ticket_request_entity import TicketRequest
from src.service.exchange.domain.entity.user_entity import User
from src.service.exchange.domain.enum.match_event_type import MatchEventType
from src.service.exchange.domain.enum.ticket_request_status import TicketRequestStatus
from src.service.exchange.domain.value_object.snapshot import CounterpartySnapshot


@attrs.frozen
class MatchContext:
    match: Match
    initiator_ticket: TicketRequest
    matched_ticket: TicketRequest
    actor: Optional[User] = None
    acted_as_admin: bool = False

    @property
    def owners(self) -> tuple[UUID, UUID]:
        return self.initiator_ticket.owner_id, self.matched_ticket.owner_id


# Ticket statuses while a match is unresolved; accept may still be writing pending -> matched
LIVE_TICKET_STATUSES = (TicketRequestStatus.PENDING, TicketRequestStatus.MATCHED)


@attrs.frozen
class TicketWrite:
    status: TicketRequestStatus
    counterparty_snapshot: Optional[CounterpartySnapshot] = None
    expected_statuses: tuple[TicketRequestStatus, ...] = LIVE_TICKET_STATUSES


async def resolve_actor(user_query_repo: IUserQueryRepo, user_id: UUID) -> User:
    user = await user_query_repo.get_by_id(user_id=user_id)
    if user is None:
        raise UnauthorizedError('Unknown user')
    user.validate_active()
    return user


def participant_or_admin(actor: User, owners: tuple[UUID, ...]) -> bool:
    """Return True when access is granted only through the admin role"""
    if actor.id in owners:
        return False
    if actor.is_admin:
        return True
    raise UnauthorizedError('Only match participants or administrators can do this')


async def publish_safely(publisher: IMatchEventPublisher, event: MatchLifecycleEvent) -> None:
    try:
        await publisher.publish(event=event)
    except Exception:
        metrics.record_side_effect_failure(handler='publisher', event_type=event.type)
        Logger.base.exception(f'⚠️ [EVENT] Could not publish {event.type} for match {event.match.id}')


class MatchTransitionHelper:
    def __init__(
        self,
        *,
        match_command_repo: IMatchCommandRepo,
        ticket_request_command_repo: ITicketRequestCommandRepo,
        user_query_repo: IUserQueryRepo,
        event_publisher: IMatchEventPublisher,
    ) -> None:
        self.match_command_repo = match_command_repo
        self.ticket_request_command_repo = ticket_request_command_repo
        self.user_query_repo = user_query_repo
        self.event_publisher = event_publisher

    async def load(self, *, match_id: UUID) -> MatchContext:
        match = await self.match_command_repo.get_by_id(match_id=match_id)
        if match is None:
            raise NotFoundError(f'Match {match_id} not found')

        initiator_ticket = await self.ticket_request_command_repo.get_by_id(
            ticket_id=match.initiator_ticket_id
        )
        matched_ticket = await self.ticket_request_command_repo.get_by_id(
            ticket_id=match.matched_ticket_id
        )
        if initiator_ticket is None or matched_ticket is None:
            raise NotFoundError(f'Ticket request referenced by match {match_id} not found')

        return MatchContext(
            match=match, initiator_ticket=initiator_ticket, matched_ticket=matched_ticket
        )

    async def load_for_actor(self, *, match_id: UUID, acting_user_id: UUID) -> MatchContext:
        actor = await resolve_actor(self.user_query_repo, acting_user_id)
        context = await self.load(match_id=match_id)
        acted_as_admin = participant_or_admin(actor, context.owners)
        return attrs.evolve(context, actor=actor, acted_as_admin=acted_as_admin)

    async def commit(
        self,
        *,
        transition: str,
        context: MatchContext,
        apply: Callable[[Match], Match],
        event_type: MatchEventType,
        initiator_write: TicketWrite,
        matched_write: TicketWrite,
        reason: Optional[str] = None,
    ) -> Match:
        """
        Run ``apply`` on the loaded match and persist the result with both ticket writes

        Raises:
            InvalidStateError: transition not allowed, or another writer moved the match first
        """
        started = time.perf_counter()
        before = context.match
        try:
            after = apply(before)
            written = await self.match_command_repo.compare_and_set(
                match=after, expected_status=before.status
            )
            if not written:
                current = await self.match_command_repo.get_by_id(match_id=before.id)
                raise InvalidStateError(
                    f'Match {before.id} was changed concurrently',
                    current_status=current.status if current else before.status,
                )
        except InvalidStateError:
            metrics.record_transition(
                transition=transition, result='rejected', duration=time.perf_counter() - started
            )
            raise

        async with anyio.create_task_group() as tg:
            tg.start_soon(self._write_ticket, before.initiator_ticket_id, initiator_write)
            tg.start_soon(self._write_ticket, before.matched_ticket_id, matched_write)

        metrics.record_transition(
            transition=transition, result='success', duration=time.perf_counter() - started
        )
        Logger.base.info(
            f'🔄 [MATCH] [{transition.upper()}] {before.id}: {before.status} -> {after.status}'
        )

        await publish_safely(
            self.event_publisher,
            MatchLifecycleEvent.of(
                type=event_type,
                match=after,
                acting_user_id=context.actor.id if context.actor else None,
                owners=context.owners,
                previous_status=before.status,
                reason=reason,
                acted_as_admin=context.acted_as_admin,
            ),
        )
        return after

    async def _write_ticket(self, ticket_id: UUID, write: TicketWrite) -> None:
        written = await self.ticket_request_command_repo.update_lifecycle_state(
            ticket_id=ticket_id,
            expected_statuses=write.expected_statuses,
            status=write.status,
            counterparty_snapshot=write.counterparty_snapshot,
        )
        if written is None:
            Logger.base.warning(
                f'⏭️ [MATCH] ticket request {ticket_id} already moved on, {write.status} not written'
            )
