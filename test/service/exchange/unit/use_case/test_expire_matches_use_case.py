from datetime import timedelta

import pytest

from src.service.exchange.app.command.expire_matches_use_case import ExpireMatchesUseCase
from src.service.exchange.domain.entity.match_entity import Match
from src.service.exchange.domain.enum.match_event_type import MatchEventType
from src.service.exchange.domain.enum.match_status import MatchStatus
from src.service.exchange.domain.enum.ticket_request_status import TicketRequestStatus
from test.service.exchange.builders import buy_terms, make_ticket, published_events, sell_terms


@pytest.fixture
def use_case(match_command_repo, match_query_repo, ticket_command_repo, user_repo, publisher):
    return ExpireMatchesUseCase(
        match_command_repo=match_command_repo,
        match_query_repo=match_query_repo,
        ticket_request_command_repo=ticket_command_repo,
        user_query_repo=user_repo,
        event_publisher=publisher,
    )


def _pending_pair(seed, seller, buyer, game):
    return seed(
        make_ticket(seller, sell_terms(), game=game, status=TicketRequestStatus.PENDING),
        make_ticket(buyer, buy_terms(), game=game, status=TicketRequestStatus.PENDING),
    )


class TestExpireMatches:
    @pytest.mark.asyncio
    async def test_overdue_match_expires_and_reopens_tickets(
        self, use_case, seed, seller, buyer, game, store, publisher
    ):
        """
        Given: an initiated match with a one hour TTL
        When: expiry runs two hours later
        Then: the match is expired by the system and both requests are open again
        """
        sell, buy = _pending_pair(seed, seller, buyer, game)
        match = seed(
            Match.initiate(
                initiator_ticket_id=buy.id,
                matched_ticket_id=sell.id,
                initiated_by=buyer.id,
                ttl=timedelta(hours=1),
            )
        )

        expired = await use_case.execute(now=match.created_at + timedelta(hours=2))

        assert [m.id for m in expired] == [match.id]
        assert store.matches[match.id].status == MatchStatus.EXPIRED
        assert store.matches[match.id].history[-1].changed_by is None
        assert store.ticket_requests[sell.id].status == TicketRequestStatus.OPEN
        assert store.ticket_requests[buy.id].status == TicketRequestStatus.OPEN

        [event] = published_events(publisher)
        assert event.type == MatchEventType.MATCH_EXPIRED
        assert event.acting_user_id is None

    @pytest.mark.asyncio
    async def test_matches_within_ttl_or_without_one_are_kept(
        self, use_case, seed, seller, buyer, game, store
    ):
        sell, buy = _pending_pair(seed, seller, buyer, game)
        fresh = seed(
            Match.initiate(
                initiator_ticket_id=buy.id,
                matched_ticket_id=sell.id,
                initiated_by=buyer.id,
                ttl=timedelta(hours=48),
            )
        )
        other_sell, other_buy = _pending_pair(seed, seller, buyer, game)
        no_ttl = seed(
            Match.initiate(
                initiator_ticket_id=other_buy.id, matched_ticket_id=other_sell.id, initiated_by=buyer.id
            )
        )

        expired = await use_case.execute(now=fresh.created_at + timedelta(hours=1))

        assert expired == []
        assert store.matches[fresh.id].status == MatchStatus.INITIATED
        assert store.matches[no_ttl.id].status == MatchStatus.INITIATED

    @pytest.mark.asyncio
    async def test_broken_match_is_skipped(self, use_case, seed, seller, buyer, game, store):
        """
        Given: two overdue matches, one pointing at a deleted ticket request
        When: expiry runs
        Then: the healthy one expires and the broken one is left as it was
        """
        sell, buy = _pending_pair(seed, seller, buyer, game)
        healthy = seed(
            Match.initiate(
                initiator_ticket_id=buy.id,
                matched_ticket_id=sell.id,
                initiated_by=buyer.id,
                ttl=timedelta(minutes=1),
            )
        )
        orphan_sell, orphan_buy = _pending_pair(seed, seller, buyer, game)
        broken = seed(
            Match.initiate(
                initiator_ticket_id=orphan_buy.id,
                matched_ticket_id=orphan_sell.id,
                initiated_by=buyer.id,
                ttl=timedelta(minutes=1),
            )
        )
        del store.ticket_requests[orphan_sell.id]

        expired = await use_case.execute(now=healthy.created_at + timedelta(hours=1))

        assert [m.id for m in expired] == [healthy.id]
        assert store.matches[broken.id].status == MatchStatus.INITIATED
