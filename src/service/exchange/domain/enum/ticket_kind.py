from enum import StrEnum
from typing import assert_never


class TicketKind(StrEnum):
    BUY = 'buy'
    SELL = 'sell'
    TRADE = 'trade'


def opposite_kind(kind: TicketKind) -> TicketKind:
    """Kind of request a ticket of ``kind`` is paired against"""
    match kind:
        case TicketKind.SELL:
            return TicketKind.BUY
        case TicketKind.BUY:
            return TicketKind.SELL
        case TicketKind.TRADE:
            return TicketKind.TRADE
        case _:
            assert_never(kind)
