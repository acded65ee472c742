import attrs


@attrs.frozen
class ScoringWeights:
    """Factor weights injected into the pairing scorer"""

    game: int = 30
    section: int = 20
    quantity: int = 20
    price: int = 20
    adjacency: int = 10
    donation_mismatch_penalty: int = -100
    negotiation_margin: float = 0.25
    acceptance_ratio: float = 0.4

    @property
    def max_score(self) -> int:
        return self.game + self.section + self.quantity + self.price + self.adjacency

    @property
    def acceptance_threshold(self) -> float:
        return self.max_score * self.acceptance_ratio

    def as_dict(self) -> dict[str, int]:
        return {
            'game': self.game,
            'section': self.section,
            'quantity': self.quantity,
            'price': self.price,
            'adjacency': self.adjacency,
        }
