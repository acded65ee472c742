from enum import StrEnum


class MatchStatus(StrEnum):
    INITIATED = 'initiated'
    ACCEPTED = 'accepted'
    COMPLETED = 'completed'
    CANCELLED = 'cancelled'
    EXPIRED = 'expired'

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_MATCH_STATUSES


TERMINAL_MATCH_STATUSES = frozenset(
    {MatchStatus.COMPLETED, MatchStatus.CANCELLED, MatchStatus.EXPIRED}
)
UNRESOLVED_MATCH_STATUSES = frozenset({MatchStatus.INITIATED, MatchStatus.ACCEPTED})
