"""Exchange Domain Enums"""

from src.service.exchange.domain.enum.match_event_type import MatchEventType
from src.service.exchange.domain.enum.match_status import MatchStatus
from src.service.exchange.domain.enum.price_status import PriceStatus
from src.service.exchange.domain.enum.section_type import SectionType
from src.service.exchange.domain.enum.ticket_kind import TicketKind, opposite_kind
from src.service.exchange.domain.enum.ticket_request_status import TicketRequestStatus

__all__ = [
    'MatchEventType',
    'MatchStatus',
    'PriceStatus',
    'SectionType',
    'TicketKind',
    'TicketRequestStatus',
    'opposite_kind',
]
