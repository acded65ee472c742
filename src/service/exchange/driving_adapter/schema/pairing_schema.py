from typing import List

from pydantic import BaseModel

from src.service.exchange.app.dto.pairing_dto import Pairing, PairingResult
from src.service.exchange.domain.enum.price_status import PriceStatus
from src.service.exchange.driving_adapter.schema.ticket_request_schema import (
    TicketRequestResponse,
)


class PairingResponse(BaseModel):
    ticket: TicketRequestResponse
    score: int
    reasons: List[str]
    price_status: PriceStatus
    section_label: str
    weights: dict[str, int]

    @classmethod
    def from_dto(cls, pairing: Pairing) -> 'PairingResponse':
        return cls(
            ticket=TicketRequestResponse.from_entity(pairing.ticket),
            score=pairing.score,
            reasons=list(pairing.reasons),
            price_status=pairing.price_status,
            section_label=pairing.section_label,
            weights=pairing.weights,
        )


class PairingResultResponse(BaseModel):
    source_ticket: TicketRequestResponse
    pairings: List[PairingResponse]

    @classmethod
    def from_dto(cls, result: PairingResult) -> 'PairingResultResponse':
        return cls(
            source_ticket=TicketRequestResponse.from_entity(result.source_ticket),
            pairings=[PairingResponse.from_dto(pairing) for pairing in result.pairings],
        )
