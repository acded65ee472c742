from datetime import datetime, timezone
from typing import Iterable, Optional

import attrs
from uuid_utils import UUID

from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.exchange.app.interface.i_ticket_request_command_repo import (
    ITicketRequestCommandRepo,
)
from src.service.exchange.app.interface.i_ticket_request_query_repo import (
    ITicketRequestQueryRepo,
)
from src.service.exchange.domain.entity.ticket_request_entity import TicketRequest
from src.service.exchange.domain.enum.ticket_kind import TicketKind
from src.service.exchange.domain.enum.ticket_request_status import TicketRequestStatus
from src.service.exchange.domain.value_object.snapshot import CounterpartySnapshot
from src.service.exchange.driven_adapter.repo.in_memory.document_store import (
    InMemoryDocumentStore,
)


class TicketRequestCommandRepoInMemoryImpl(ITicketRequestCommandRepo):
    def __init__(self, *, store: InMemoryDocumentStore) -> None:
        self.store = store

    @Logger.io
    async def get_by_id(self, *, ticket_id: UUID) -> TicketRequest | None:
        return self.store.ticket_requests.get(ticket_id)

    @Logger.io
    async def create(self, *, ticket_request: TicketRequest) -> TicketRequest:
        async with self.store.lock:
            self.store.ticket_requests[ticket_request.id] = ticket_request
        return ticket_request

    @Logger.io
    async def compare_and_set_status(
        self,
        *,
        ticket_id: UUID,
        expected_status: TicketRequestStatus,
        new_status: TicketRequestStatus,
    ) -> TicketRequest | None:
        async with self.store.lock:
            current = self.store.ticket_requests.get(ticket_id)
            if current is None or current.status != expected_status:
                return None
            updated = attrs.evolve(
                current, status=new_status, updated_at=datetime.now(timezone.utc)
            )
            self.store.ticket_requests[ticket_id] = updated
            return updated

    @Logger.io
    async def update_lifecycle_state(
        self,
        *,
        ticket_id: UUID,
        expected_statuses: Iterable[TicketRequestStatus],
        status: TicketRequestStatus,
        counterparty_snapshot: Optional[CounterpartySnapshot] = None,
    ) -> TicketRequest | None:
        async with self.store.lock:
            current = self.store.ticket_requests.get(ticket_id)
            if current is None:
                raise NotFoundError(f'Ticket request {ticket_id} not found')
            if current.status not in set(expected_statuses):
                return None
            updated = current.with_status(status, counterparty_snapshot=counterparty_snapshot)
            self.store.ticket_requests[ticket_id] = updated
            return updated


class TicketRequestQueryRepoInMemoryImpl(ITicketRequestQueryRepo):
    def __init__(self, *, store: InMemoryDocumentStore) -> None:
        self.store = store

    @Logger.io
    async def get_by_id(self, *, ticket_id: UUID) -> TicketRequest | None:
        return self.store.ticket_requests.get(ticket_id)

    @Logger.io
    async def find_candidates(
        self,
        *,
        kind: TicketKind,
        game_id: Optional[UUID],
        exclude_owner_id: UUID,
        include_any_game: bool = False,
        status: TicketRequestStatus = TicketRequestStatus.OPEN,
    ) -> list[TicketRequest]:
        return [
            ticket
            for ticket in list(self.store.ticket_requests.values())
            if ticket.kind == kind
            and ticket.status == status
            and ticket.owner_id != exclude_owner_id
            and (
                game_id is None
                or ticket.game_id == game_id
                or (include_any_game and ticket.game_id is None)
            )
        ]

    @Logger.io
    async def list_by_owner(
        self, *, owner_id: UUID, status: Optional[TicketRequestStatus] = None
    ) -> list[TicketRequest]:
        return [
            ticket
            for ticket in list(self.store.ticket_requests.values())
            if ticket.owner_id == owner_id and (status is None or ticket.status == status)
        ]
