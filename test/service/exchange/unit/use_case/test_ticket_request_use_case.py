import pytest
from uuid_utils import uuid7

from src.platform.exception.exceptions import (
    DanglingReferenceError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from src.service.exchange.app.command.create_ticket_request_use_case import (
    CreateTicketRequestUseCase,
)
from src.service.exchange.app.query.list_ticket_requests_use_case import (
    ListTicketRequestsUseCase,
)
from src.service.exchange.domain.enum.ticket_kind import TicketKind
from src.service.exchange.domain.enum.ticket_request_status import TicketRequestStatus
from src.service.exchange.domain.value_object.purchase_limits import PurchaseLimits
from test.service.exchange.builders import buy_terms, make_game, make_ticket, sell_terms


@pytest.fixture
def create_use_case(ticket_command_repo, ticket_query_repo, game_repo, user_repo):
    return CreateTicketRequestUseCase(
        ticket_request_command_repo=ticket_command_repo,
        ticket_request_query_repo=ticket_query_repo,
        game_query_repo=game_repo,
        user_query_repo=user_repo,
        purchase_limits=PurchaseLimits(),
    )


@pytest.fixture
def list_use_case(ticket_query_repo):
    return ListTicketRequestsUseCase(ticket_request_query_repo=ticket_query_repo)


class TestCreateTicketRequest:
    @pytest.mark.asyncio
    async def test_sell_request_is_stored_open(self, create_use_case, seller, game, store):
        """
        Given: an active seller and a scheduled game
        When: they list three numbered seats
        Then: an open sell request for 3 tickets is stored with the seller's snapshot
        """
        created = await create_use_case.create_ticket_request(
            owner_id=seller.id,
            kind=TicketKind.SELL,
            terms=sell_terms(seat_numbers=('12', '13', '14')),
            game_id=game.id,
            tickets_together=True,
        )

        stored = store.ticket_requests[created.id]
        assert stored.status == TicketRequestStatus.OPEN
        assert stored.num_tickets == 3
        assert stored.user_snapshot.username == 'sam'
        assert stored.is_direct_match is False

    @pytest.mark.asyncio
    async def test_unknown_game_is_dangling(self, create_use_case, seller, store):
        with pytest.raises(DanglingReferenceError):
            await create_use_case.create_ticket_request(
                owner_id=seller.id,
                kind=TicketKind.SELL,
                terms=sell_terms(),
                game_id=uuid7(),
                num_tickets=2,
            )

        assert store.ticket_requests == {}

    @pytest.mark.asyncio
    async def test_deactivated_owner_is_rejected(self, create_use_case, seller, game, store):
        store.users[seller.id].is_active = False

        with pytest.raises(UnauthorizedError):
            await create_use_case.create_ticket_request(
                owner_id=seller.id,
                kind=TicketKind.SELL,
                terms=sell_terms(),
                game_id=game.id,
                num_tickets=2,
            )

    @pytest.mark.asyncio
    async def test_purchase_limit_per_game(self, create_use_case, seed, buyer, game):
        seed(make_ticket(buyer, buy_terms(), game=game, num_tickets=2))

        with pytest.raises(ValidationError, match='per game'):
            await create_use_case.create_ticket_request(
                owner_id=buyer.id,
                kind=TicketKind.BUY,
                terms=buy_terms(),
                game_id=game.id,
                num_tickets=1,
            )

    @pytest.mark.asyncio
    async def test_any_game_buy_skips_game_checks(self, create_use_case, buyer, store):
        created = await create_use_case.create_ticket_request(
            owner_id=buyer.id, kind=TicketKind.BUY, terms=buy_terms(), num_tickets=4
        )

        assert store.ticket_requests[created.id].game_id is None

    @pytest.mark.asyncio
    async def test_purchase_window_spans_consecutive_games(self, create_use_case, seed, store, buyer):
        games = [store.add_game(make_game(f'Week {w}', week=w)) for w in range(4)]
        seed(
            make_ticket(buyer, buy_terms(), game=games[0], num_tickets=2),
            make_ticket(buyer, buy_terms(), game=games[1], num_tickets=1),
        )

        with pytest.raises(ValidationError, match='consecutive'):
            await create_use_case.create_ticket_request(
                owner_id=buyer.id,
                kind=TicketKind.BUY,
                terms=buy_terms(),
                game_id=games[3].id,
                num_tickets=1,
            )


class TestListTicketRequests:
    @pytest.mark.asyncio
    async def test_owner_sees_own_requests_newest_first(self, list_use_case, seed, seller, buyer, game):
        older, newer = seed(
            make_ticket(seller, sell_terms(), game=game),
            make_ticket(seller, sell_terms(), game=game),
        )
        seed(make_ticket(buyer, buy_terms(), game=game))

        mine = await list_use_case.list_my_ticket_requests(owner_id=seller.id)

        assert {t.id for t in mine} == {older.id, newer.id}
        assert mine[0].created_at >= mine[1].created_at

    @pytest.mark.asyncio
    async def test_status_filter(self, list_use_case, seed, seller, game):
        seed(
            make_ticket(seller, sell_terms(), game=game),
            make_ticket(seller, sell_terms(), game=game, status=TicketRequestStatus.COMPLETED),
        )

        completed = await list_use_case.list_my_ticket_requests(
            owner_id=seller.id, status=TicketRequestStatus.COMPLETED
        )

        assert [t.status for t in completed] == [TicketRequestStatus.COMPLETED]

    @pytest.mark.asyncio
    async def test_other_viewers_get_a_redacted_copy(self, list_use_case, seed, buyer, seller):
        wanted = seed(make_ticket(buyer, buy_terms(max_price=30)))

        as_owner = await list_use_case.get_ticket_request(ticket_id=wanted.id, viewer_id=buyer.id)
        as_other = await list_use_case.get_ticket_request(ticket_id=wanted.id, viewer_id=seller.id)

        assert as_owner.terms.max_price == 30
        assert as_owner.user_snapshot.last_name == 'Buyer'
        assert as_other.terms.max_price is None
        assert as_other.user_snapshot.last_name == 'B'

    @pytest.mark.asyncio
    async def test_unknown_request(self, list_use_case, buyer):
        with pytest.raises(NotFoundError):
            await list_use_case.get_ticket_request(ticket_id=uuid7(), viewer_id=buyer.id)
