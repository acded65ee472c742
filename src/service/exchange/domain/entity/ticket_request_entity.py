from datetime import datetime, timezone
from typing import Optional, Union, assert_never
from uuid_utils import UUID, uuid7

import attrs

from src.platform.exception.exceptions import DomainError, ValidationError
from src.platform.logging.loguru_io import Logger
from src.service.exchange.domain.entity.user_entity import User
from src.service.exchange.domain.enum.section_type import SectionType
from src.service.exchange.domain.enum.ticket_kind import TicketKind
from src.service.exchange.domain.enum.ticket_request_status import TicketRequestStatus
from src.service.exchange.domain.value_object.snapshot import CounterpartySnapshot, UserSnapshot


@attrs.frozen
class SellTerms:
    section_type: SectionType
    min_price: Optional[float] = None
    donating_free: bool = False
    seat_numbers: tuple[str, ...] = ()


@attrs.frozen
class BuyTerms:
    section_type: Optional[SectionType] = None
    any_section: bool = False
    max_price: Optional[float] = None
    requesting_free: bool = False


@attrs.frozen
class TradeTerms:
    section_type_offered: SectionType
    section_type_desired: Optional[SectionType] = None
    any_section: bool = False


TicketTerms = Union[SellTerms, BuyTerms, TradeTerms]


@attrs.frozen
class SellSideView:
    """What a request offers, as seen by the pairing scorer"""

    game_id: Optional[UUID]
    section_type: SectionType
    num_tickets: int
    tickets_together: bool
    min_price: Optional[float] = None
    donating_free: bool = False


@attrs.frozen
class BuySideView:
    """What a request wants, as seen by the pairing scorer"""

    game_id: Optional[UUID]
    section_type: Optional[SectionType]
    any_section: bool
    num_tickets: int
    tickets_together: bool
    max_price: Optional[float] = None
    requesting_free: bool = False


def _check_price(name: str, value: Optional[float]) -> None:
    if value is not None and value < 0:
        raise ValidationError(f'{name} must not be negative')


def _validate_terms(kind: TicketKind, terms: TicketTerms) -> None:
    match kind:
        case TicketKind.SELL:
            if not isinstance(terms, SellTerms):
                raise ValidationError('sell requests require sell terms')
            _check_price('min_price', terms.min_price)
        case TicketKind.BUY:
            if not isinstance(terms, BuyTerms):
                raise ValidationError('buy requests require buy terms')
            if terms.section_type is None and not terms.any_section:
                raise ValidationError('section_type is required unless any_section is set')
            _check_price('max_price', terms.max_price)
        case TicketKind.TRADE:
            if not isinstance(terms, TradeTerms):
                raise ValidationError('trade requests require trade terms')
            if terms.section_type_desired is None and not terms.any_section:
                raise ValidationError('section_type_desired is required unless any_section is set')
        case _:
            assert_never(kind)


@attrs.define
class TicketRequest:
    id: UUID
    owner_id: UUID
    kind: TicketKind
    terms: TicketTerms
    num_tickets: int
    user_snapshot: UserSnapshot
    game_id: Optional[UUID] = None
    status: TicketRequestStatus = TicketRequestStatus.OPEN
    tickets_together: bool = False
    is_direct_match: bool = False
    counterparty_snapshot: Optional[CounterpartySnapshot] = None
    notes: Optional[str] = None
    created_at: datetime = attrs.field(factory=lambda: datetime.now(timezone.utc))
    updated_at: Optional[datetime] = None

    @classmethod
    @Logger.io
    def create(
        cls,
        *,
        owner: User,
        kind: TicketKind,
        terms: TicketTerms,
        num_tickets: Optional[int] = None,
        game_id: Optional[UUID] = None,
        tickets_together: bool = False,
        notes: Optional[str] = None,
        is_direct_match: bool = False,
        status: TicketRequestStatus = TicketRequestStatus.OPEN,
    ) -> 'TicketRequest':
        _validate_terms(kind, terms)

        # An explicit seat list fixes the quantity
        if isinstance(terms, SellTerms) and terms.seat_numbers:
            if num_tickets is not None and num_tickets != len(terms.seat_numbers):
                raise ValidationError('num_tickets must match the number of seat_numbers')
            num_tickets = len(terms.seat_numbers)

        if num_tickets is None or num_tickets < 1:
            raise ValidationError('num_tickets must be a positive integer')
        if game_id is None and kind != TicketKind.BUY:
            raise ValidationError(f'{kind} requests must reference a game')

        now = datetime.now(timezone.utc)
        return cls(
            id=uuid7(),
            owner_id=owner.id,
            kind=kind,
            terms=terms,
            num_tickets=num_tickets,
            user_snapshot=UserSnapshot.of(owner),
            game_id=game_id,
            status=status,
            tickets_together=tickets_together,
            is_direct_match=is_direct_match,
            notes=notes,
            created_at=now,
            updated_at=now,
        )

    @property
    def section_type(self) -> Optional[SectionType]:
        """Section this request is about: offered for sell/trade, desired for buy"""
        match self.terms:
            case SellTerms(section_type=section_type) | BuyTerms(section_type=section_type):
                return section_type
            case TradeTerms(section_type_offered=section_type):
                return section_type

    def with_status(
        self,
        status: TicketRequestStatus,
        *,
        counterparty_snapshot: Optional[CounterpartySnapshot] = None,
    ) -> 'TicketRequest':
        """Lifecycle-driven status write; the counterparty snapshot is replaced, never merged"""
        return attrs.evolve(
            self,
            status=status,
            counterparty_snapshot=counterparty_snapshot,
            updated_at=datetime.now(timezone.utc),
        )

    def redacted(self) -> 'TicketRequest':
        """Copy safe to show other users: last name initial only, buyer ceiling hidden"""
        terms = self.terms
        if isinstance(terms, BuyTerms):
            terms = attrs.evolve(terms, max_price=None)
        return attrs.evolve(
            self,
            terms=terms,
            user_snapshot=self.user_snapshot.redacted(),
            counterparty_snapshot=None,
        )

    def as_sell_side(self) -> SellSideView:
        match self.terms:
            case SellTerms() as sell:
                return SellSideView(
                    game_id=self.game_id,
                    section_type=sell.section_type,
                    num_tickets=self.num_tickets,
                    tickets_together=self.tickets_together,
                    min_price=sell.min_price,
                    donating_free=sell.donating_free,
                )
            case TradeTerms() as trade:
                return SellSideView(
                    game_id=self.game_id,
                    section_type=trade.section_type_offered,
                    num_tickets=self.num_tickets,
                    tickets_together=self.tickets_together,
                )
            case BuyTerms():
                raise DomainError(f'Ticket request {self.id} is a buy request and offers nothing')

    def as_buy_side(self) -> BuySideView:
        match self.terms:
            case BuyTerms() as buy:
                return BuySideView(
                    game_id=self.game_id,
                    section_type=buy.section_type,
                    any_section=buy.any_section,
                    num_tickets=self.num_tickets,
                    tickets_together=self.tickets_together,
                    max_price=buy.max_price,
                    requesting_free=buy.requesting_free,
                )
            case TradeTerms() as trade:
                return BuySideView(
                    game_id=self.game_id,
                    section_type=trade.section_type_desired,
                    any_section=trade.any_section,
                    num_tickets=self.num_tickets,
                    tickets_together=self.tickets_together,
                )
            case SellTerms():
                raise DomainError(f'Ticket request {self.id} is a sell request and wants nothing')
