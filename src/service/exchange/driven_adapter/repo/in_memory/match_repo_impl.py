from datetime import datetime, timezone
from typing import Iterable, Optional

import attrs
from uuid_utils import UUID

from src.platform.logging.loguru_io import Logger
from src.service.exchange.app.interface.i_match_command_repo import IMatchCommandRepo
from src.service.exchange.app.interface.i_match_query_repo import IMatchQueryRepo
from src.service.exchange.domain.entity.match_entity import Match
from src.service.exchange.domain.entity.ticket_request_entity import TicketRequest
from src.service.exchange.domain.enum.match_status import MatchStatus
from src.service.exchange.domain.enum.ticket_request_status import TicketRequestStatus
from src.service.exchange.driven_adapter.repo.in_memory.document_store import (
    InMemoryDocumentStore,
)


def _newest_first(matches: Iterable[Match]) -> list[Match]:
    return sorted(matches, key=lambda match: (match.created_at, str(match.id)), reverse=True)


class MatchCommandRepoInMemoryImpl(IMatchCommandRepo):
    def __init__(self, *, store: InMemoryDocumentStore) -> None:
        self.store = store

    @Logger.io
    async def get_by_id(self, *, match_id: UUID) -> Match | None:
        return self.store.matches.get(match_id)

    @Logger.io
    async def create(self, *, match: Match) -> Match:
        async with self.store.lock:
            self.store.matches[match.id] = match
        return match

    @Logger.io
    async def compare_and_set(self, *, match: Match, expected_status: MatchStatus) -> bool:
        async with self.store.lock:
            current = self.store.matches.get(match.id)
            if current is None or current.status != expected_status:
                return False
            self.store.matches[match.id] = match
            return True

    @Logger.io
    async def create_direct_match_atomically(
        self, *, created_ticket: TicketRequest, match: Match, target_ticket_id: UUID
    ) -> TicketRequest | None:
        async with self.store.lock:
            target = self.store.ticket_requests.get(target_ticket_id)
            if target is None or target.status != TicketRequestStatus.OPEN:
                return None
            flipped = attrs.evolve(
                target, status=TicketRequestStatus.PENDING, updated_at=datetime.now(timezone.utc)
            )
            self.store.ticket_requests[target_ticket_id] = flipped
            self.store.ticket_requests[created_ticket.id] = created_ticket
            self.store.matches[match.id] = match
            return flipped


class MatchQueryRepoInMemoryImpl(IMatchQueryRepo):
    def __init__(self, *, store: InMemoryDocumentStore) -> None:
        self.store = store

    @Logger.io
    async def get_by_id(self, *, match_id: UUID) -> Match | None:
        return self.store.matches.get(match_id)

    @Logger.io
    async def list_by_ticket_ids(
        self, *, ticket_ids: Iterable[UUID], status: Optional[MatchStatus] = None
    ) -> list[Match]:
        wanted = set(ticket_ids)
        return _newest_first(
            match
            for match in list(self.store.matches.values())
            if wanted.intersection(match.ticket_ids) and (status is None or match.status == status)
        )

    @Logger.io
    async def list_all(self, *, status: Optional[MatchStatus] = None) -> list[Match]:
        return _newest_first(
            match
            for match in list(self.store.matches.values())
            if status is None or match.status == status
        )

    @Logger.io
    async def list_expired(self, *, now: datetime) -> list[Match]:
        return [match for match in list(self.store.matches.values()) if match.is_expired_at(now)]
