from typing import Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from uuid_utils import UUID

from src.platform.config.di import Container
from src.platform.exception.exceptions import DanglingReferenceError
from src.platform.logging.loguru_io import Logger
from src.service.exchange.app.command.match_transition_helper import resolve_actor
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
from src.service.exchange.domain.entity.game_entity import is_dangling
from src.service.exchange.domain.entity.ticket_request_entity import TicketRequest, TicketTerms
from src.service.exchange.domain.enum.ticket_kind import TicketKind
from src.service.exchange.domain.purchase_limit_policy import check_purchase_limits
from src.service.exchange.domain.value_object.purchase_limits import PurchaseLimits


class CreateTicketRequestUseCase:
    def __init__(
        self,
        *,
        ticket_request_command_repo: ITicketRequestCommandRepo,
        ticket_request_query_repo: ITicketRequestQueryRepo,
        game_query_repo: IGameQueryRepo,
        user_query_repo: IUserQueryRepo,
        purchase_limits: PurchaseLimits,
    ) -> None:
        self.ticket_request_command_repo = ticket_request_command_repo
        self.ticket_request_query_repo = ticket_request_query_repo
        self.game_query_repo = game_query_repo
        self.user_query_repo = user_query_repo
        self.purchase_limits = purchase_limits

    @classmethod
    @inject
    def depends(
        cls,
        ticket_request_command_repo: ITicketRequestCommandRepo = Depends(
            Provide[Container.ticket_request_command_repo]
        ),
        ticket_request_query_repo: ITicketRequestQueryRepo = Depends(
            Provide[Container.ticket_request_query_repo]
        ),
        game_query_repo: IGameQueryRepo = Depends(Provide[Container.game_query_repo]),
        user_query_repo: IUserQueryRepo = Depends(Provide[Container.user_query_repo]),
        purchase_limits: PurchaseLimits = Depends(Provide[Container.purchase_limits]),
    ) -> Self:
        return cls(
            ticket_request_command_repo=ticket_request_command_repo,
            ticket_request_query_repo=ticket_request_query_repo,
            game_query_repo=game_query_repo,
            user_query_repo=user_query_repo,
            purchase_limits=purchase_limits,
        )

    @Logger.io
    async def create_ticket_request(
        self,
        *,
        owner_id: UUID,
        kind: TicketKind,
        terms: TicketTerms,
        game_id: Optional[UUID] = None,
        num_tickets: Optional[int] = None,
        tickets_together: bool = False,
        notes: Optional[str] = None,
    ) -> TicketRequest:
        owner = await resolve_actor(self.user_query_repo, owner_id)

        ticket_request = TicketRequest.create(
            owner=owner,
            kind=kind,
            terms=terms,
            num_tickets=num_tickets,
            game_id=game_id,
            tickets_together=tickets_together,
            notes=notes,
        )

        if game_id is not None:
            game = await self.game_query_repo.get_by_id(game_id=game_id)
            if is_dangling(game):
                raise DanglingReferenceError(f'Game {game_id} does not exist')

            if kind == TicketKind.BUY:
                check_purchase_limits(
                    limits=self.purchase_limits,
                    games_by_date=await self.game_query_repo.list_by_date(),
                    existing_requests=await self.ticket_request_query_repo.list_by_owner(
                        owner_id=owner.id
                    ),
                    game_id=game_id,
                    num_tickets=ticket_request.num_tickets,
                )

        created = await self.ticket_request_command_repo.create(ticket_request=ticket_request)
        Logger.base.info(
            f'🎫 [TICKET] created {created.kind} request {created.id} for {created.num_tickets} ticket(s)'
        )
        return created
