from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from uuid_utils import UUID

from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.service.exchange.app.dto.pairing_dto import PairingResult
from src.service.exchange.app.interface.i_reference_query_repo import IGameQueryRepo
from src.service.exchange.app.interface.i_ticket_request_query_repo import (
    ITicketRequestQueryRepo,
)
from src.service.exchange.app.query.find_pairings_use_case import FindPairingsUseCase
from src.service.exchange.domain.enum.ticket_request_status import TicketRequestStatus
from src.service.exchange.domain.value_object.scoring_weights import ScoringWeights


class FindAllPairingsForUserUseCase:
    """Pairings for every open ticket request of a user; a failing ticket is skipped"""

    def __init__(
        self,
        *,
        ticket_request_query_repo: ITicketRequestQueryRepo,
        find_pairings: FindPairingsUseCase,
    ) -> None:
        self.ticket_request_query_repo = ticket_request_query_repo
        self.find_pairings = find_pairings

    @classmethod
    @inject
    def depends(
        cls,
        ticket_request_query_repo: ITicketRequestQueryRepo = Depends(
            Provide[Container.ticket_request_query_repo]
        ),
        game_query_repo: IGameQueryRepo = Depends(Provide[Container.game_query_repo]),
        weights: ScoringWeights = Depends(Provide[Container.scoring_weights]),
    ) -> Self:
        return cls(
            ticket_request_query_repo=ticket_request_query_repo,
            find_pairings=FindPairingsUseCase(
                ticket_request_query_repo=ticket_request_query_repo,
                game_query_repo=game_query_repo,
                weights=weights,
            ),
        )

    @Logger.io
    async def execute(self, *, user_id: UUID, include_all: bool = False) -> list[PairingResult]:
        tickets = await self.ticket_request_query_repo.list_by_owner(
            owner_id=user_id, status=TicketRequestStatus.OPEN
        )

        results: list[PairingResult] = []
        for ticket in sorted(tickets, key=lambda t: (t.created_at, str(t.id))):
            try:
                results.append(
                    await self.find_pairings.find_pairings(ticket_id=ticket.id, include_all=include_all)
                )
            except Exception:
                Logger.base.exception(f'⚠️ [MATCHMAKER] skipped ticket request {ticket.id}')
        return results
