import pytest

from src.platform.exception.exceptions import DomainError, ValidationError
from src.service.exchange.domain.entity.ticket_request_entity import BuyTerms, TicketRequest
from src.service.exchange.domain.enum.section_type import SectionType
from src.service.exchange.domain.enum.ticket_kind import TicketKind, opposite_kind
from src.service.exchange.domain.enum.ticket_request_status import TicketRequestStatus
from src.service.exchange.domain.value_object.snapshot import CounterpartySnapshot
from test.service.exchange.builders import (
    buy_terms,
    make_game,
    make_ticket,
    make_user,
    sell_terms,
    trade_terms,
)


@pytest.fixture
def owner():
    return make_user('olive', first_name='Olive', last_name='Oyl')


@pytest.fixture
def game():
    return make_game()


class TestTicketRequestCreate:
    def test_seat_numbers_derive_quantity(self, owner, game):
        ticket = make_ticket(owner, sell_terms(seat_numbers=('A1', 'A2', 'A3')), game=game)

        assert ticket.num_tickets == 3
        assert ticket.status == TicketRequestStatus.OPEN
        assert ticket.user_snapshot.last_name == 'Oyl'

    def test_seat_numbers_must_agree_with_explicit_quantity(self, owner, game):
        with pytest.raises(ValidationError, match='seat_numbers'):
            TicketRequest.create(
                owner=owner,
                kind=TicketKind.SELL,
                terms=sell_terms(seat_numbers=('A1', 'A2')),
                num_tickets=3,
                game_id=game.id,
            )

    @pytest.mark.parametrize('num_tickets', [0, -1, None])
    def test_quantity_must_be_positive(self, owner, game, num_tickets):
        with pytest.raises(ValidationError, match='num_tickets'):
            TicketRequest.create(
                owner=owner, kind=TicketKind.BUY, terms=buy_terms(), num_tickets=num_tickets
            )

    def test_buy_needs_section_unless_any_section(self, owner):
        """
        Given: buy terms with neither a section nor any_section
        When: the request is created
        Then: ValidationError
        """
        with pytest.raises(ValidationError, match='section_type'):
            TicketRequest.create(
                owner=owner, kind=TicketKind.BUY, terms=BuyTerms(), num_tickets=1
            )

    def test_negative_price_is_rejected(self, owner, game):
        with pytest.raises(ValidationError, match='min_price'):
            make_ticket(owner, sell_terms(min_price=-5), game=game)

    def test_terms_must_match_kind(self, owner, game):
        with pytest.raises(ValidationError, match='sell terms'):
            TicketRequest.create(
                owner=owner, kind=TicketKind.SELL, terms=buy_terms(), num_tickets=1, game_id=game.id
            )

    @pytest.mark.parametrize('kind', [TicketKind.SELL, TicketKind.TRADE])
    def test_sell_and_trade_must_reference_a_game(self, owner, kind):
        terms = sell_terms() if kind == TicketKind.SELL else trade_terms()
        with pytest.raises(ValidationError, match='must reference a game'):
            TicketRequest.create(owner=owner, kind=kind, terms=terms, num_tickets=1)

    def test_buy_without_game_means_any_game(self, owner):
        ticket = make_ticket(owner, buy_terms(), game=None)

        assert ticket.game_id is None
        assert ticket.section_type == SectionType.SUPPORTERS


class TestOppositeKind:
    @pytest.mark.parametrize(
        ('kind', 'expected'),
        [
            (TicketKind.SELL, TicketKind.BUY),
            (TicketKind.BUY, TicketKind.SELL),
            (TicketKind.TRADE, TicketKind.TRADE),
        ],
    )
    def test_mapping(self, kind, expected):
        assert opposite_kind(kind) == expected


class TestRedaction:
    def test_last_name_initial_and_hidden_buy_ceiling(self, owner):
        """
        Given: a buy request from Olive Oyl with max price 30
        When: redacted for other viewers
        Then: last name is "O" and max_price is hidden; the original is untouched
        """
        ticket = make_ticket(owner, buy_terms(max_price=30))

        redacted = ticket.redacted()

        assert redacted.user_snapshot.last_name == 'O'
        assert redacted.user_snapshot.first_name == 'Olive'
        assert redacted.terms.max_price is None
        assert ticket.terms.max_price == 30

    def test_sell_price_stays_visible(self, owner, game):
        ticket = make_ticket(owner, sell_terms(min_price=25), game=game)

        assert ticket.redacted().terms.min_price == 25


class TestLifecycleState:
    def test_with_status_replaces_counterparty_snapshot(self, owner, game):
        other = make_user('otto')
        ticket = make_ticket(owner, sell_terms(), game=game)

        completed = ticket.with_status(
            TicketRequestStatus.COMPLETED, counterparty_snapshot=CounterpartySnapshot.of(other)
        )
        reopened = completed.with_status(TicketRequestStatus.OPEN)

        assert completed.counterparty_snapshot.email == 'otto@example.com'
        assert reopened.counterparty_snapshot is None
        assert reopened.status == TicketRequestStatus.OPEN

    def test_buy_request_has_no_sell_side(self, owner):
        with pytest.raises(DomainError):
            make_ticket(owner, buy_terms()).as_sell_side()

    def test_trade_projects_both_sides(self, owner, game):
        ticket = make_ticket(owner, trade_terms(SectionType.STANDARD, SectionType.HIGHROLLER), game=game)

        assert ticket.as_sell_side().section_type == SectionType.STANDARD
        assert ticket.as_buy_side().section_type == SectionType.HIGHROLLER
