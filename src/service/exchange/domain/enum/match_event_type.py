from enum import StrEnum


class MatchEventType(StrEnum):
    MATCH_INITIATED = 'match_initiated'
    MATCH_ACCEPTED = 'match_accepted'
    MATCH_CANCELLED = 'match_cancelled'
    MATCH_COMPLETED = 'match_completed'
    MATCH_EXPIRED = 'match_expired'
