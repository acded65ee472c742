import pytest

from src.platform.exception.exceptions import ValidationError
from src.service.exchange.domain.enum.ticket_request_status import TicketRequestStatus
from src.service.exchange.domain.purchase_limit_policy import check_purchase_limits
from src.service.exchange.domain.value_object.purchase_limits import PurchaseLimits
from test.service.exchange.builders import buy_terms, make_game, make_ticket, make_user


@pytest.fixture
def buyer():
    return make_user('bea')


@pytest.fixture
def season():
    return [make_game(f'Opponent {week}', week=week) for week in range(6)]


class TestPurchaseLimits:
    def test_two_tickets_per_game(self, buyer, season):
        """
        Given: the buyer already asked for 1 ticket to game 0
        When: asking for 2 more to the same game
        Then: the per-game limit of 2 is broken
        """
        existing = [make_ticket(buyer, buy_terms(), game=season[0], num_tickets=1)]

        with pytest.raises(ValidationError, match='per game'):
            check_purchase_limits(
                limits=PurchaseLimits(),
                games_by_date=season,
                existing_requests=existing,
                game_id=season[0].id,
                num_tickets=2,
            )

    def test_three_tickets_across_four_consecutive_games(self, buyer, season):
        existing = [
            make_ticket(buyer, buy_terms(), game=season[0], num_tickets=2),
            make_ticket(buyer, buy_terms(), game=season[2], num_tickets=1),
        ]

        with pytest.raises(ValidationError, match='consecutive games'):
            check_purchase_limits(
                limits=PurchaseLimits(),
                games_by_date=season,
                existing_requests=existing,
                game_id=season[3].id,
                num_tickets=1,
            )

    def test_window_slides_past_older_games(self, buyer, season):
        existing = [make_ticket(buyer, buy_terms(), game=season[0], num_tickets=2)]

        check_purchase_limits(
            limits=PurchaseLimits(),
            games_by_date=season,
            existing_requests=existing,
            game_id=season[4].id,
            num_tickets=2,
        )

    def test_cancelled_requests_do_not_count(self, buyer, season):
        existing = [
            make_ticket(
                buyer, buy_terms(), game=season[0], num_tickets=2, status=TicketRequestStatus.CANCELLED
            )
        ]

        check_purchase_limits(
            limits=PurchaseLimits(),
            games_by_date=season,
            existing_requests=existing,
            game_id=season[0].id,
            num_tickets=2,
        )
