import pytest

from src.platform.exception.exceptions import UnauthorizedError
from src.service.exchange.app.query.list_matches_use_case import ListMatchesUseCase
from src.service.exchange.domain.entity.match_entity import Match
from src.service.exchange.domain.enum.match_status import MatchStatus
from src.service.exchange.domain.enum.ticket_request_status import TicketRequestStatus
from test.service.exchange.builders import buy_terms, make_ticket, sell_terms


@pytest.fixture
def use_case(match_query_repo, ticket_query_repo, user_repo):
    return ListMatchesUseCase(
        match_query_repo=match_query_repo,
        ticket_request_query_repo=ticket_query_repo,
        user_query_repo=user_repo,
    )


@pytest.fixture
def initiated(seed, seller, buyer, game):
    sell, buy = seed(
        make_ticket(seller, sell_terms(), game=game, status=TicketRequestStatus.PENDING),
        make_ticket(buyer, buy_terms(), game=game, status=TicketRequestStatus.PENDING),
    )
    return seed(
        Match.initiate(initiator_ticket_id=buy.id, matched_ticket_id=sell.id, initiated_by=buyer.id)
    )


class TestListMatches:
    @pytest.mark.asyncio
    async def test_participants_see_their_match(self, use_case, initiated, seller, buyer, outsider):
        assert [m.id for m in await use_case.list_for_user(user_id=seller.id)] == [initiated.id]
        assert [m.id for m in await use_case.list_for_user(user_id=buyer.id)] == [initiated.id]
        assert await use_case.list_for_user(user_id=outsider.id) == []

    @pytest.mark.asyncio
    async def test_status_filter(self, use_case, initiated, seller):
        assert await use_case.list_for_user(user_id=seller.id, status=MatchStatus.COMPLETED) == []

    @pytest.mark.asyncio
    async def test_list_all_is_admin_only(self, use_case, initiated, admin, seller):
        with pytest.raises(UnauthorizedError):
            await use_case.list_all(acting_user_id=seller.id)

        assert [m.id for m in await use_case.list_all(acting_user_id=admin.id)] == [initiated.id]

    @pytest.mark.asyncio
    async def test_get_match_is_limited_to_participants_and_admins(
        self, use_case, initiated, buyer, admin, outsider
    ):
        assert (await use_case.get_match(match_id=initiated.id, acting_user_id=buyer.id)).id == initiated.id
        assert (await use_case.get_match(match_id=initiated.id, acting_user_id=admin.id)).id == initiated.id
        with pytest.raises(UnauthorizedError):
            await use_case.get_match(match_id=initiated.id, acting_user_id=outsider.id)


class TestTicketMatchInfo:
    @pytest.mark.asyncio
    async def test_awaiting_my_action_is_set_for_the_matched_side(
        self, use_case, initiated, seller, buyer
    ):
        """
        Given: the buyer initiated a match against the seller's request
        When: each side reads the match info of their requests
        Then: only the seller is awaiting action
        """
        [seller_info] = await use_case.get_match_info_for_tickets(user_id=seller.id)
        [buyer_info] = await use_case.get_match_info_for_tickets(user_id=buyer.id)

        assert seller_info.match.id == initiated.id
        assert seller_info.awaiting_my_action is True
        assert buyer_info.match.id == initiated.id
        assert buyer_info.awaiting_my_action is False

    @pytest.mark.asyncio
    async def test_resolved_matches_are_not_attached(self, use_case, seed, initiated, seller):
        seed(initiated.cancel(changed_by=seller.id))

        [info] = await use_case.get_match_info_for_tickets(user_id=seller.id)

        assert info.match is None
        assert info.awaiting_my_action is False
