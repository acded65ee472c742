from datetime import datetime, timezone
from typing import Iterable, Optional

import attrs
from uuid_utils import UUID

from src.platform.exception.exceptions import ConflictError
from src.platform.logging.loguru_io import Logger
from src.platform.state.kvrocks_client import key_of, kvrocks_client
from src.platform.state.lua_script_executor import lua_script_executor
from src.service.exchange.app.interface.i_match_command_repo import IMatchCommandRepo
from src.service.exchange.app.interface.i_match_query_repo import IMatchQueryRepo
from src.service.exchange.domain.entity.match_entity import Match
from src.service.exchange.domain.entity.ticket_request_entity import TicketRequest
from src.service.exchange.domain.enum.match_status import MatchStatus
from src.service.exchange.domain.enum.ticket_request_status import TicketRequestStatus
from src.service.exchange.driven_adapter.repo.kvrocks.document_codec import decode_match, encode
from src.service.exchange.driven_adapter.repo.kvrocks.ticket_request_repo_impl import (
    WRITE_ATTEMPTS,
    get_ticket_request_with_revision,
    ticket_index_keys,
    ticket_key,
)


MATCH_INDEX_ALL = ('match', 'all')


def match_key(match_id: UUID | str) -> str:
    return key_of('match', str(match_id))


def match_index_keys(match: Match) -> tuple[str, str, str]:
    return (
        key_of(*MATCH_INDEX_ALL),
        key_of('match', 'by_ticket', str(match.initiator_ticket_id)),
        key_of('match', 'by_ticket', str(match.matched_ticket_id)),
    )


async def fetch_matches(ids: Iterable[str]) -> list[Match]:
    ids = sorted(ids)
    if not ids:
        return []
    client = kvrocks_client.get_client()
    async with client.pipeline(transaction=False) as pipe:
        for match_id in ids:
            pipe.hget(match_key(match_id), 'doc')
        docs = await pipe.execute()
    return [decode_match(doc) for doc in docs if doc]


def _newest_first(matches: Iterable[Match]) -> list[Match]:
    return sorted(matches, key=lambda match: (match.created_at, str(match.id)), reverse=True)


class MatchCommandRepoKvrocksImpl(IMatchCommandRepo):
    @Logger.io
    async def get_by_id(self, *, match_id: UUID) -> Match | None:
        doc = await kvrocks_client.get_client().hget(match_key(match_id), 'doc')
        return decode_match(doc) if doc else None

    @Logger.io
    async def create(self, *, match: Match) -> Match:
        client = kvrocks_client.get_client()
        async with client.pipeline(transaction=True) as pipe:
            pipe.hset(match_key(match.id), mapping={'status': match.status, 'doc': encode(match)})
            for index_key in match_index_keys(match):
                pipe.sadd(index_key, str(match.id))
            await pipe.execute()
        return match

    @Logger.io
    async def compare_and_set(self, *, match: Match, expected_status: MatchStatus) -> bool:
        result = await lua_script_executor.run(
            'compare_and_set_status',
            client=kvrocks_client.get_client(),
            keys=[match_key(match.id)],
            # Every match write changes its status, so the status alone guards it
            args=['', match.status, encode(match), expected_status],
        )
        return int(result) == 1

    @Logger.io
    async def create_direct_match_atomically(
        self, *, created_ticket: TicketRequest, match: Match, target_ticket_id: UUID
    ) -> TicketRequest | None:
        for _ in range(WRITE_ATTEMPTS):
            target, rev = await get_ticket_request_with_revision(target_ticket_id)
            if target is None or target.status != TicketRequestStatus.OPEN:
                return None

            flipped = attrs.evolve(
                target, status=TicketRequestStatus.PENDING, updated_at=datetime.now(timezone.utc)
            )
            result = int(
                await lua_script_executor.run(
                    'create_direct_match',
                    client=kvrocks_client.get_client(),
                    keys=[
                        ticket_key(target_ticket_id),
                        ticket_key(created_ticket.id),
                        match_key(match.id),
                        *ticket_index_keys(created_ticket),
                        *match_index_keys(match),
                    ],
                    args=[
                        TicketRequestStatus.OPEN,
                        flipped.status,
                        encode(flipped),
                        created_ticket.status,
                        encode(created_ticket),
                        match.status,
                        encode(match),
                        str(created_ticket.id),
                        str(match.id),
                        rev,
                    ],
                )
            )
            if result == 1:
                return flipped
            if result != 2:
                return None

        raise ConflictError(f'Ticket request {target_ticket_id} kept changing, giving up')


class MatchQueryRepoKvrocksImpl(IMatchQueryRepo):
    @Logger.io
    async def get_by_id(self, *, match_id: UUID) -> Match | None:
        doc = await kvrocks_client.get_client().hget(match_key(match_id), 'doc')
        return decode_match(doc) if doc else None

    @Logger.io
    async def list_by_ticket_ids(
        self, *, ticket_ids: Iterable[UUID], status: Optional[MatchStatus] = None
    ) -> list[Match]:
        keys = [key_of('match', 'by_ticket', str(ticket_id)) for ticket_id in ticket_ids]
        if not keys:
            return []
        ids = await kvrocks_client.get_client().sunion(keys)
        return _newest_first(
            match for match in await fetch_matches(ids) if status is None or match.status == status
        )

    @Logger.io
    async def list_all(self, *, status: Optional[MatchStatus] = None) -> list[Match]:
        ids = await kvrocks_client.get_client().smembers(key_of(*MATCH_INDEX_ALL))
        return _newest_first(
            match for match in await fetch_matches(ids) if status is None or match.status == status
        )

    @Logger.io
    async def list_expired(self, *, now: datetime) -> list[Match]:
        ids = await kvrocks_client.get_client().smembers(key_of(*MATCH_INDEX_ALL))
        return [match for match in await fetch_matches(ids) if match.is_expired_at(now)]
