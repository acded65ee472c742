"""Exchange Application DTOs"""

from src.service.exchange.app.dto.match_dto import DirectMatchResult, TicketMatchInfo
from src.service.exchange.app.dto.pairing_dto import Pairing, PairingResult


__all__ = [
    'DirectMatchResult',
    'Pairing',
    'PairingResult',
    'TicketMatchInfo',
]
