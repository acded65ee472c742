from typing import Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from uuid_utils import UUID

from src.platform.config.di import Container
from src.platform.exception.exceptions import NotFoundError, UnauthorizedError
from src.platform.logging.loguru_io import Logger
from src.service.exchange.app.command.match_transition_helper import (
    participant_or_admin,
    resolve_actor,
)
from src.service.exchange.app.dto.match_dto import TicketMatchInfo
from src.service.exchange.app.interface.i_match_query_repo import IMatchQueryRepo
from src.service.exchange.app.interface.i_reference_query_repo import IUserQueryRepo
from src.service.exchange.app.interface.i_ticket_request_query_repo import (
    ITicketRequestQueryRepo,
)
from src.service.exchange.domain.entity.match_entity import Match
from src.service.exchange.domain.enum.match_status import MatchStatus


class ListMatchesUseCase:
    def __init__(
        self,
        *,
        match_query_repo: IMatchQueryRepo,
        ticket_request_query_repo: ITicketRequestQueryRepo,
        user_query_repo: IUserQueryRepo,
    ) -> None:
        self.match_query_repo = match_query_repo
        self.ticket_request_query_repo = ticket_request_query_repo
        self.user_query_repo = user_query_repo

    @classmethod
    @inject
    def depends(
        cls,
        match_query_repo: IMatchQueryRepo = Depends(Provide[Container.match_query_repo]),
        ticket_request_query_repo: ITicketRequestQueryRepo = Depends(
            Provide[Container.ticket_request_query_repo]
        ),
        user_query_repo: IUserQueryRepo = Depends(Provide[Container.user_query_repo]),
    ) -> Self:
        return cls(
            match_query_repo=match_query_repo,
            ticket_request_query_repo=ticket_request_query_repo,
            user_query_repo=user_query_repo,
        )

    @Logger.io
    async def list_for_user(
        self, *, user_id: UUID, status: Optional[MatchStatus] = None
    ) -> list[Match]:
        tickets = await self.ticket_request_query_repo.list_by_owner(owner_id=user_id)
        if not tickets:
            return []
        return await self.match_query_repo.list_by_ticket_ids(
            ticket_ids=[ticket.id for ticket in tickets], status=status
        )

    @Logger.io
    async def list_all(
        self, *, acting_user_id: UUID, status: Optional[MatchStatus] = None
    ) -> list[Match]:
        actor = await resolve_actor(self.user_query_repo, acting_user_id)
        if not actor.is_admin:
            raise UnauthorizedError('Only administrators can list every match')
        return await self.match_query_repo.list_all(status=status)

    @Logger.io
    async def get_match(self, *, match_id: UUID, acting_user_id: UUID) -> Match:
        actor = await resolve_actor(self.user_query_repo, acting_user_id)
        match = await self.match_query_repo.get_by_id(match_id=match_id)
        if match is None:
            raise NotFoundError(f'Match {match_id} not found')

        owners = []
        for ticket_id in match.ticket_ids:
            ticket = await self.ticket_request_query_repo.get_by_id(ticket_id=ticket_id)
            if ticket is not None:
                owners.append(ticket.owner_id)
        participant_or_admin(actor, tuple(owners))
        return match

    @Logger.io
    async def get_match_info_for_tickets(self, *, user_id: UUID) -> list[TicketMatchInfo]:
        """Each of the user's ticket requests with its unresolved match, if any"""
        tickets = await self.ticket_request_query_repo.list_by_owner(owner_id=user_id)
        if not tickets:
            return []

        matches = await self.match_query_repo.list_by_ticket_ids(
            ticket_ids=[ticket.id for ticket in tickets]
        )
        unresolved: dict[UUID, Match] = {}
        for match in matches:
            if not match.is_unresolved:
                continue
            for ticket_id in match.ticket_ids:
                unresolved.setdefault(ticket_id, match)

        infos = []
        for ticket in sorted(tickets, key=lambda t: (t.created_at, str(t.id)), reverse=True):
            match = unresolved.get(ticket.id)
            infos.append(
                TicketMatchInfo(
                    ticket=ticket,
                    match=match,
                    awaiting_my_action=(
                        match is not None
                        and match.status == MatchStatus.INITIATED
                        and match.matched_ticket_id == ticket.id
                    ),
                )
            )
        return infos
