"""
Pairing DTOs

Matchmaker results: each candidate is already redacted and carries the label
and factor weights needed to explain its score.
"""

import attrs

from src.service.exchange.domain.entity.ticket_request_entity import TicketRequest
from src.service.exchange.domain.enum.price_status import PriceStatus
from src.service.exchange.domain.pairing_scorer import PairingScore
from src.service.exchange.domain.seating_format import section_label


@attrs.frozen
class Pairing:
    ticket: TicketRequest  # redacted counterpart
    score: int
    reasons: tuple[str, ...]
    price_status: PriceStatus
    section_label: str
    weights: dict[str, int]

    @classmethod
    def of(
        cls, *, candidate: TicketRequest, score: PairingScore, weights: dict[str, int]
    ) -> 'Pairing':
        return cls(
            ticket=candidate.redacted(),
            score=score.score,
            reasons=score.reasons,
            price_status=score.price_status,
            section_label=section_label(candidate.section_type),
            weights=weights,
        )


@attrs.frozen
class PairingResult:
    source_ticket: TicketRequest
    pairings: tuple[Pairing, ...]

    def top(self, limit: int) -> 'PairingResult':
        return attrs.evolve(self, pairings=self.pairings[:limit])
