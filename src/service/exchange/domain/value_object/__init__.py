"""Exchange Domain Value Objects"""

from src.service.exchange.domain.value_object.match_history_entry import MatchHistoryEntry
from src.service.exchange.domain.value_object.purchase_limits import PurchaseLimits
from src.service.exchange.domain.value_object.scoring_weights import ScoringWeights
from src.service.exchange.domain.value_object.snapshot import CounterpartySnapshot, UserSnapshot

__all__ = [
    'CounterpartySnapshot',
    'MatchHistoryEntry',
    'PurchaseLimits',
    'ScoringWeights',
    'UserSnapshot',
]
