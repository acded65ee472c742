from datetime import datetime
from typing import Any, List, Optional

import attrs
from pydantic import BaseModel, Field

from src.platform.exception.exceptions import ValidationError
from src.platform.types.uuid7_utils_types import UtilsUUID7
from src.service.exchange.domain.entity.ticket_request_entity import (
    BuyTerms,
    SellTerms,
    TicketRequest,
    TicketTerms,
    TradeTerms,
)
from src.service.exchange.domain.enum.section_type import SectionType
from src.service.exchange.domain.enum.ticket_kind import TicketKind
from src.service.exchange.domain.enum.ticket_request_status import TicketRequestStatus
from src.service.exchange.domain.seating_format import section_label
from src.service.exchange.domain.value_object.snapshot import CounterpartySnapshot, UserSnapshot


class TicketRequestCreateRequest(BaseModel):
    kind: TicketKind
    game_id: Optional[UtilsUUID7] = None
    num_tickets: Optional[int] = None
    tickets_together: bool = False
    notes: Optional[str] = None

    # sell / buy
    section_type: Optional[SectionType] = None
    # sell
    min_price: Optional[float] = None
    donating_free: bool = False
    seat_numbers: List[str] = []
    # buy / trade
    any_section: bool = False
    # buy
    max_price: Optional[float] = None
    requesting_free: bool = False
    # trade
    section_type_offered: Optional[SectionType] = None
    section_type_desired: Optional[SectionType] = None

    model_config = {
        'json_schema_extra': {
            'examples': [
                {
                    'kind': 'sell',
                    'game_id': '01936d8f-5e73-7c4e-a9c5-123456789abc',
                    'section_type': 'supporters',
                    'min_price': 20,
                    'seat_numbers': ['12', '13'],
                    'tickets_together': True,
                },
                {'kind': 'buy', 'num_tickets': 2, 'any_section': True, 'max_price': 30},
            ]
        }
    }

    def to_terms(self) -> TicketTerms:
        match self.kind:
            case TicketKind.SELL:
                if self.section_type is None:
                    raise ValidationError('section_type is required for sell requests')
                return SellTerms(
                    section_type=self.section_type,
                    min_price=self.min_price,
                    donating_free=self.donating_free,
                    seat_numbers=tuple(self.seat_numbers),
                )
            case TicketKind.BUY:
                return BuyTerms(
                    section_type=self.section_type,
                    any_section=self.any_section,
                    max_price=self.max_price,
                    requesting_free=self.requesting_free,
                )
            case TicketKind.TRADE:
                if self.section_type_offered is None:
                    raise ValidationError('section_type_offered is required for trade requests')
                return TradeTerms(
                    section_type_offered=self.section_type_offered,
                    section_type_desired=self.section_type_desired,
                    any_section=self.any_section,
                )


class UserSnapshotResponse(BaseModel):
    first_name: str
    last_name: str
    username: str
    discord_handle: Optional[str] = None

    @classmethod
    def from_snapshot(cls, snapshot: UserSnapshot) -> 'UserSnapshotResponse':
        return cls(**attrs.asdict(snapshot))


class CounterpartySnapshotResponse(BaseModel):
    user_id: UtilsUUID7
    first_name: str
    last_name: str
    username: str
    email: str
    discord_handle: Optional[str] = None
    captured_at: datetime

    @classmethod
    def from_snapshot(cls, snapshot: CounterpartySnapshot) -> 'CounterpartySnapshotResponse':
        return cls(**attrs.asdict(snapshot))


class TicketRequestResponse(BaseModel):
    id: UtilsUUID7
    owner_id: UtilsUUID7
    kind: TicketKind
    game_id: Optional[UtilsUUID7] = None
    num_tickets: int
    status: TicketRequestStatus
    tickets_together: bool
    is_direct_match: bool
    section_type: Optional[SectionType] = None
    section_label: str
    terms: dict[str, Any] = Field(default_factory=dict)
    user_snapshot: UserSnapshotResponse
    counterparty_snapshot: Optional[CounterpartySnapshotResponse] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, ticket: TicketRequest) -> 'TicketRequestResponse':
        return cls(
            id=ticket.id,
            owner_id=ticket.owner_id,
            kind=ticket.kind,
            game_id=ticket.game_id,
            num_tickets=ticket.num_tickets,
            status=ticket.status,
            tickets_together=ticket.tickets_together,
            is_direct_match=ticket.is_direct_match,
            section_type=ticket.section_type,
            section_label=section_label(ticket.section_type),
            terms=attrs.asdict(ticket.terms),
            user_snapshot=UserSnapshotResponse.from_snapshot(ticket.user_snapshot),
            counterparty_snapshot=(
                CounterpartySnapshotResponse.from_snapshot(ticket.counterparty_snapshot)
                if ticket.counterparty_snapshot
                else None
            ),
            notes=ticket.notes,
            created_at=ticket.created_at,
            updated_at=ticket.updated_at,
        )
