import time
from datetime import timedelta
from typing import Optional, Self, assert_never

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace
from uuid_utils import UUID

from src.platform.config.di import Container
from src.platform.exception.exceptions import (
    DanglingReferenceError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.exchange_metrics import metrics
from src.service.exchange.app.command.match_transition_helper import (
    publish_safely,
    resolve_actor,
)
from src.service.exchange.app.dto.match_dto import DirectMatchResult
from src.service.exchange.app.interface.i_match_command_repo import IMatchCommandRepo
from src.service.exchange.app.interface.i_match_event_publisher import IMatchEventPublisher
from src.service.exchange.app.interface.i_reference_query_repo import (
    IGameQueryRepo,
    IUserQueryRepo,
)
from src.service.exchange.app.interface.i_ticket_request_command_repo import (
    ITicketRequestCommandRepo,
)
from src.service.exchange.app.interface.i_ticket_request_query_repo import (
    ITicketRequestQueryRepo,
)
from src.service.exchange.domain.domain_event.match_lifecycle_event import MatchLifecycleEvent
from src.service.exchange.domain.entity.game_entity import is_dangling
from src.service.exchange.domain.entity.match_entity import Match
from src.service.exchange.domain.entity.ticket_request_entity import (
    BuyTerms,
    SellTerms,
    TicketRequest,
    TicketTerms,
    TradeTerms,
)
from src.service.exchange.domain.enum.match_event_type import MatchEventType
from src.service.exchange.domain.enum.section_type import SectionType
from src.service.exchange.domain.enum.ticket_kind import TicketKind, opposite_kind
from src.service.exchange.domain.enum.ticket_request_status import TicketRequestStatus
from src.service.exchange.domain.purchase_limit_policy import check_purchase_limits
from src.service.exchange.domain.value_object.purchase_limits import PurchaseLimits


def mirror_terms(target: TicketRequest, section_type: Optional[SectionType] = None) -> TicketTerms:
    """Terms for the counter-request that satisfies ``target`` as closely as possible"""
    match target.terms:
        case SellTerms() as sell:
            return BuyTerms(
                section_type=sell.section_type,
                max_price=sell.min_price,
                requesting_free=sell.donating_free,
            )
        case BuyTerms() as buy:
            section = section_type or buy.section_type
            if section is None:
                raise ValidationError('section_type is required to answer an any-section buy request')
            return SellTerms(
                section_type=section,
                min_price=buy.max_price,
                donating_free=buy.requesting_free,
            )
        case TradeTerms() as trade:
            offered = section_type or trade.section_type_desired
            if offered is None:
                raise ValidationError('section_type is required to answer an any-section trade request')
            return TradeTerms(
                section_type_offered=offered,
                section_type_desired=trade.section_type_offered,
            )
        case _:
            assert_never(target.terms)


class InitiateDirectMatchUseCase:
    """
    Match straight against a listed ticket request.

    An opposite-kind request is created on the actor's behalf (already pending,
    flagged ``is_direct_match``), and the target flip, the new request and the
    match are written as a single store operation. If the target left ``open``
    in the meantime nothing is written.
    """

    def __init__(
        self,
        *,
        match_command_repo: IMatchCommandRepo,
        ticket_request_command_repo: ITicketRequestCommandRepo,
        ticket_request_query_repo: ITicketRequestQueryRepo,
        game_query_repo: IGameQueryRepo,
        user_query_repo: IUserQueryRepo,
        event_publisher: IMatchEventPublisher,
        purchase_limits: PurchaseLimits,
        match_ttl: Optional[timedelta] = None,
    ) -> None:
        self.match_command_repo = match_command_repo
        self.ticket_request_command_repo = ticket_request_command_repo
        self.ticket_request_query_repo = ticket_request_query_repo
        self.game_query_repo = game_query_repo
        self.user_query_repo = user_query_repo
        self.event_publisher = event_publisher
        self.purchase_limits = purchase_limits
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
        ticket_request_query_repo: ITicketRequestQueryRepo = Depends(
            Provide[Container.ticket_request_query_repo]
        ),
        game_query_repo: IGameQueryRepo = Depends(Provide[Container.game_query_repo]),
        user_query_repo: IUserQueryRepo = Depends(Provide[Container.user_query_repo]),
        event_publisher: IMatchEventPublisher = Depends(
            Provide[Container.match_event_publisher]
        ),
        purchase_limits: PurchaseLimits = Depends(Provide[Container.purchase_limits]),
        match_ttl: Optional[timedelta] = Depends(Provide[Container.match_ttl]),
    ) -> Self:
        return cls(
            match_command_repo=match_command_repo,
            ticket_request_command_repo=ticket_request_command_repo,
            ticket_request_query_repo=ticket_request_query_repo,
            game_query_repo=game_query_repo,
            user_query_repo=user_query_repo,
            event_publisher=event_publisher,
            purchase_limits=purchase_limits,
            match_ttl=match_ttl,
        )

    @Logger.io
    async def execute(
        self,
        *,
        target_ticket_id: UUID,
        acting_user_id: UUID,
        section_type: Optional[SectionType] = None,
        game_id: Optional[UUID] = None,
        notes: Optional[str] = None,
    ) -> DirectMatchResult:
        with self.tracer.start_as_current_span(
            'use_case.initiate_direct_match',
            attributes={'ticket.target_id': str(target_ticket_id), 'user.id': str(acting_user_id)},
        ):
            started = time.perf_counter()
            actor = await resolve_actor(self.user_query_repo, acting_user_id)

            target = await self.ticket_request_command_repo.get_by_id(ticket_id=target_ticket_id)
            if target is None:
                raise NotFoundError(f'Ticket request {target_ticket_id} not found')
            if target.owner_id == actor.id:
                raise ValidationError('Cannot direct-match your own ticket request')
            if target.status != TicketRequestStatus.OPEN:
                raise InvalidStateError(
                    f'Ticket request {target.id} is not open', current_status=target.status
                )

            resolved_game_id = target.game_id or game_id
            if resolved_game_id is not None:
                game = await self.game_query_repo.get_by_id(game_id=resolved_game_id)
                if is_dangling(game):
                    raise DanglingReferenceError(f'Game {resolved_game_id} does not exist')

            kind = opposite_kind(target.kind)
            if kind == TicketKind.BUY and resolved_game_id is not None:
                check_purchase_limits(
                    limits=self.purchase_limits,
                    games_by_date=await self.game_query_repo.list_by_date(),
                    existing_requests=await self.ticket_request_query_repo.list_by_owner(
                        owner_id=actor.id
                    ),
                    game_id=resolved_game_id,
                    num_tickets=target.num_tickets,
                )

            created = TicketRequest.create(
                owner=actor,
                kind=kind,
                terms=mirror_terms(target, section_type),
                num_tickets=target.num_tickets,
                game_id=resolved_game_id,
                tickets_together=target.tickets_together,
                notes=notes,
                is_direct_match=True,
                status=TicketRequestStatus.PENDING,
            )
            match = Match.initiate(
                initiator_ticket_id=created.id,
                matched_ticket_id=target.id,
                initiated_by=actor.id,
                notes=notes,
                ttl=self.match_ttl,
            )

            flipped = await self.match_command_repo.create_direct_match_atomically(
                created_ticket=created, match=match, target_ticket_id=target.id
            )
            if flipped is None:
                metrics.record_transition(
                    transition='initiate_direct',
                    result='rejected',
                    duration=time.perf_counter() - started,
                )
                current = await self.ticket_request_command_repo.get_by_id(ticket_id=target.id)
                raise InvalidStateError(
                    f'Ticket request {target.id} is no longer open',
                    current_status=current.status if current else target.status,
                )

            metrics.record_transition(
                transition='initiate_direct', result='success', duration=time.perf_counter() - started
            )
            Logger.base.info(
                f'🤝 [MATCH] [DIRECT] {match.id}: created {created.kind} {created.id} '
                f'against {target.kind} {target.id}'
            )

            await publish_safely(
                self.event_publisher,
                MatchLifecycleEvent.of(
                    type=MatchEventType.MATCH_INITIATED,
                    match=match,
                    acting_user_id=actor.id,
                    owners=(created.owner_id, target.owner_id),
                    reason=notes,
                ),
            )
            return DirectMatchResult(match=match, created_ticket=created, target_ticket=flipped)
