from typing import Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from uuid_utils import UUID

from src.platform.config.di import Container
from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.exchange.app.interface.i_ticket_request_query_repo import (
    ITicketRequestQueryRepo,
)
from src.service.exchange.domain.entity.ticket_request_entity import TicketRequest
from src.service.exchange.domain.enum.ticket_request_status import TicketRequestStatus


class ListTicketRequestsUseCase:
    def __init__(self, *, ticket_request_query_repo: ITicketRequestQueryRepo) -> None:
        self.ticket_request_query_repo = ticket_request_query_repo

    @classmethod
    @inject
    def depends(
        cls,
        ticket_request_query_repo: ITicketRequestQueryRepo = Depends(
            Provide[Container.ticket_request_query_repo]
        ),
    ) -> Self:
        return cls(ticket_request_query_repo=ticket_request_query_repo)

    @Logger.io
    async def list_my_ticket_requests(
        self, *, owner_id: UUID, status: Optional[TicketRequestStatus] = None
    ) -> list[TicketRequest]:
        tickets = await self.ticket_request_query_repo.list_by_owner(owner_id=owner_id, status=status)
        return sorted(tickets, key=lambda t: (t.created_at, str(t.id)), reverse=True)

    @Logger.io
    async def get_ticket_request(self, *, ticket_id: UUID, viewer_id: UUID) -> TicketRequest:
        """Owners see their own request in full, everyone else a redacted copy"""
        ticket = await self.ticket_request_query_repo.get_by_id(ticket_id=ticket_id)
        if ticket is None:
            raise NotFoundError(f'Ticket request {ticket_id} not found')
        return ticket if ticket.owner_id == viewer_id else ticket.redacted()
