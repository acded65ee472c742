from datetime import datetime, timezone
from typing import Callable, Iterable, Optional

import attrs
from uuid_utils import UUID

from src.platform.exception.exceptions import ConflictError, NotFoundError
from src.platform.logging.loguru_io import Logger
from src.platform.state.kvrocks_client import key_of, kvrocks_client
from src.platform.state.lua_script_executor import lua_script_executor
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
from src.service.exchange.driven_adapter.repo.kvrocks.document_codec import (
    decode_ticket_request,
    encode,
)


WRITE_ATTEMPTS = 5


def ticket_key(ticket_id: UUID | str) -> str:
    return key_of('ticket_request', str(ticket_id))


def ticket_index_keys(ticket: TicketRequest) -> tuple[str, str, str]:
    """by-kind, by-game and by-owner index sets a ticket id belongs to"""
    return (
        key_of('ticket_request', 'by_kind', ticket.kind),
        key_of('ticket_request', 'by_game', str(ticket.game_id) if ticket.game_id else 'any'),
        key_of('ticket_request', 'by_owner', str(ticket.owner_id)),
    )


async def fetch_ticket_requests(ids: list[str]) -> list[TicketRequest]:
    if not ids:
        return []
    client = kvrocks_client.get_client()
    async with client.pipeline(transaction=False) as pipe:
        for ticket_id in ids:
            pipe.hget(ticket_key(ticket_id), 'doc')
        docs = await pipe.execute()
    return [decode_ticket_request(doc) for doc in docs if doc]


async def get_ticket_request(ticket_id: UUID) -> TicketRequest | None:
    doc = await kvrocks_client.get_client().hget(ticket_key(ticket_id), 'doc')
    return decode_ticket_request(doc) if doc else None


async def get_ticket_request_with_revision(ticket_id: UUID) -> tuple[TicketRequest | None, str]:
    doc, rev = await kvrocks_client.get_client().hmget(ticket_key(ticket_id), ['doc', 'rev'])
    return (decode_ticket_request(doc) if doc else None), (rev or '0')


class TicketRequestCommandRepoKvrocksImpl(ITicketRequestCommandRepo):
    @Logger.io
    async def get_by_id(self, *, ticket_id: UUID) -> TicketRequest | None:
        return await get_ticket_request(ticket_id)

    @Logger.io
    async def create(self, *, ticket_request: TicketRequest) -> TicketRequest:
        client = kvrocks_client.get_client()
        async with client.pipeline(transaction=True) as pipe:
            pipe.hset(
                ticket_key(ticket_request.id),
                mapping={'status': ticket_request.status, 'doc': encode(ticket_request)},
            )
            for index_key in ticket_index_keys(ticket_request):
                pipe.sadd(index_key, str(ticket_request.id))
            await pipe.execute()
        return ticket_request

    @Logger.io
    async def compare_and_set_status(
        self,
        *,
        ticket_id: UUID,
        expected_status: TicketRequestStatus,
        new_status: TicketRequestStatus,
    ) -> TicketRequest | None:
        return await self._write_if(
            ticket_id=ticket_id,
            expected_statuses=(expected_status,),
            change=lambda current: attrs.evolve(
                current, status=new_status, updated_at=datetime.now(timezone.utc)
            ),
        )

    @Logger.io
    async def update_lifecycle_state(
        self,
        *,
        ticket_id: UUID,
        expected_statuses: Iterable[TicketRequestStatus],
        status: TicketRequestStatus,
        counterparty_snapshot: Optional[CounterpartySnapshot] = None,
    ) -> TicketRequest | None:
        return await self._write_if(
            ticket_id=ticket_id,
            expected_statuses=tuple(expected_statuses),
            change=lambda current: current.with_status(
                status, counterparty_snapshot=counterparty_snapshot
            ),
            missing_raises=True,
        )

    async def _write_if(
        self,
        *,
        ticket_id: UUID,
        expected_statuses: tuple[TicketRequestStatus, ...],
        change: Callable[[TicketRequest], TicketRequest],
        missing_raises: bool = False,
    ) -> TicketRequest | None:
        """
        Read, change and write back one ticket document, guarded by status and revision

        The document is rebuilt from a fresh read whenever another writer bumped the
        revision in between, so no field written by someone else is lost.
        """
        for _ in range(WRITE_ATTEMPTS):
            current, rev = await get_ticket_request_with_revision(ticket_id)
            if current is None:
                if missing_raises:
                    raise NotFoundError(f'Ticket request {ticket_id} not found')
                return None
            if current.status not in expected_statuses:
                return None

            updated = change(current)
            result = int(
                await lua_script_executor.run(
                    'compare_and_set_status',
                    client=kvrocks_client.get_client(),
                    keys=[ticket_key(ticket_id)],
                    args=[rev, updated.status, encode(updated), *expected_statuses],
                )
            )
            if result == 1:
                return updated
            if result != 2:
                return None
            Logger.base.debug(f'🔁 [KVROCKS] ticket request {ticket_id} moved on, re-reading')

        raise ConflictError(f'Ticket request {ticket_id} kept changing, giving up')


class TicketRequestQueryRepoKvrocksImpl(ITicketRequestQueryRepo):
    @Logger.io
    async def get_by_id(self, *, ticket_id: UUID) -> TicketRequest | None:
        return await get_ticket_request(ticket_id)

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
        client = kvrocks_client.get_client()
        kind_key = key_of('ticket_request', 'by_kind', kind)
        if game_id is None:
            ids = await client.smembers(kind_key)
        else:
            ids = await client.sinter(kind_key, key_of('ticket_request', 'by_game', str(game_id)))
            if include_any_game:
                any_game_key = key_of('ticket_request', 'by_game', 'any')
                ids = set(ids) | set(await client.sinter(kind_key, any_game_key))

        # Status is re-checked on the decoded document: it may move on mid-scan
        return [
            ticket
            for ticket in await fetch_ticket_requests(sorted(ids))
            if ticket.status == status and ticket.owner_id != exclude_owner_id
        ]

    @Logger.io
    async def list_by_owner(
        self, *, owner_id: UUID, status: Optional[TicketRequestStatus] = None
    ) -> list[TicketRequest]:
        ids = await kvrocks_client.get_client().smembers(
            key_of('ticket_request', 'by_owner', str(owner_id))
        )
        return [
            ticket
            for ticket in await fetch_ticket_requests(sorted(ids))
            if status is None or ticket.status == status
        ]
