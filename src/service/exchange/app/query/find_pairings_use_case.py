"""
Matchmaker

Loads a source ticket request, fetches open opposite-kind candidates for the
same game, scores each pair and returns the ones above the threshold, best
first and redacted for display.

A buy request without a game wants any game, so it is paired both ways: as a
source it searches every game, and a sell source with a game also sees it
among its candidates.
"""

from typing import Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace
from uuid_utils import UUID

from src.platform.config.di import Container
from src.platform.exception.exceptions import (
    DanglingReferenceError,
    InvalidStateError,
    NotFoundError,
)
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.exchange_metrics import metrics
from src.service.exchange.app.dto.pairing_dto import Pairing, PairingResult
from src.service.exchange.app.interface.i_reference_query_repo import IGameQueryRepo
from src.service.exchange.app.interface.i_ticket_request_query_repo import (
    ITicketRequestQueryRepo,
)
from src.service.exchange.domain.entity.game_entity import Game, is_dangling
from src.service.exchange.domain.entity.ticket_request_entity import TicketRequest
from src.service.exchange.domain.enum.ticket_kind import TicketKind, opposite_kind
from src.service.exchange.domain.enum.ticket_request_status import TicketRequestStatus
from src.service.exchange.domain.pairing_scorer import PairingScore, score_tickets
from src.service.exchange.domain.value_object.scoring_weights import ScoringWeights


class FindPairingsUseCase:
    def __init__(
        self,
        *,
        ticket_request_query_repo: ITicketRequestQueryRepo,
        game_query_repo: IGameQueryRepo,
        weights: ScoringWeights,
        best_pairings_limit: int = 3,
    ) -> None:
        self.ticket_request_query_repo = ticket_request_query_repo
        self.game_query_repo = game_query_repo
        self.weights = weights
        self.best_pairings_limit = best_pairings_limit
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        ticket_request_query_repo: ITicketRequestQueryRepo = Depends(
            Provide[Container.ticket_request_query_repo]
        ),
        game_query_repo: IGameQueryRepo = Depends(Provide[Container.game_query_repo]),
        weights: ScoringWeights = Depends(Provide[Container.scoring_weights]),
        best_pairings_limit: int = Depends(Provide[Container.best_pairings_limit]),
    ) -> Self:
        return cls(
            ticket_request_query_repo=ticket_request_query_repo,
            game_query_repo=game_query_repo,
            weights=weights,
            best_pairings_limit=best_pairings_limit,
        )

    async def _load_ticket(self, ticket_id: UUID) -> TicketRequest:
        ticket = await self.ticket_request_query_repo.get_by_id(ticket_id=ticket_id)
        if ticket is None:
            raise NotFoundError(f'Ticket request {ticket_id} not found')
        return ticket

    async def _has_dangling_game(
        self, ticket: TicketRequest, cache: dict[UUID, Optional[Game]]
    ) -> bool:
        # No game on a buy request means any game
        if ticket.game_id is None:
            return False
        if ticket.game_id not in cache:
            cache[ticket.game_id] = await self.game_query_repo.get_by_id(game_id=ticket.game_id)
        return is_dangling(cache[ticket.game_id])

    @Logger.io
    async def find_pairings(self, *, ticket_id: UUID, include_all: bool = False) -> PairingResult:
        with self.tracer.start_as_current_span(
            'use_case.find_pairings',
            attributes={'ticket.id': str(ticket_id), 'pairing.include_all': include_all},
        ):
            source = await self._load_ticket(ticket_id)
            if source.status != TicketRequestStatus.OPEN:
                raise InvalidStateError(
                    f'Ticket request {source.id} is not open', current_status=source.status
                )

            games: dict[UUID, Optional[Game]] = {}
            if await self._has_dangling_game(source, games):
                raise DanglingReferenceError(
                    f'Ticket request {source.id} references a game that no longer exists'
                )

            wanted_kind = opposite_kind(source.kind)
            candidates = await self.ticket_request_query_repo.find_candidates(
                kind=wanted_kind,
                game_id=source.game_id,
                exclude_owner_id=source.owner_id,
                include_any_game=wanted_kind == TicketKind.BUY,
            )

            threshold = 0 if include_all else self.weights.acceptance_threshold
            scored: list[tuple[TicketRequest, PairingScore]] = []
            for candidate in candidates:
                if candidate.id == source.id or candidate.owner_id == source.owner_id:
                    continue
                if await self._has_dangling_game(candidate, games):
                    continue
                result = score_tickets(source, candidate, weights=self.weights)
                if result.score > threshold:
                    scored.append((candidate, result))

            scored.sort(key=lambda pair: (-pair[1].score, pair[0].created_at, str(pair[0].id)))
            weights = self.weights.as_dict()

            metrics.record_pairing_query(
                source_kind=source.kind,
                mode='all' if include_all else 'best',
                candidates=len(candidates),
            )
            Logger.base.info(
                f'🔎 [MATCHMAKER] {source.kind} {source.id}: '
                f'{len(scored)}/{len(candidates)} candidate(s) above {threshold:g}'
            )
            return PairingResult(
                source_ticket=source,
                pairings=tuple(
                    Pairing.of(candidate=candidate, score=result, weights=weights)
                    for candidate, result in scored
                ),
            )

    @Logger.io
    async def find_best_pairings(self, *, ticket_id: UUID) -> PairingResult:
        result = await self.find_pairings(ticket_id=ticket_id, include_all=False)
        return result.top(self.best_pairings_limit)

    @Logger.io
    async def score_tickets(self, *, source_ticket_id: UUID, candidate_ticket_id: UUID) -> Pairing:
        """Explain the score of one specific pair, whatever their statuses"""
        source = await self._load_ticket(source_ticket_id)
        candidate = await self._load_ticket(candidate_ticket_id)
        return Pairing.of(
            candidate=candidate,
            score=score_tickets(source, candidate, weights=self.weights),
            weights=self.weights.as_dict(),
        )
