from enum import StrEnum


class TicketRequestStatus(StrEnum):
    OPEN = 'open'  # seeking a match
    PENDING = 'pending'  # referenced by an initiated match
    MATCHED = 'matched'  # match accepted, awaiting completion
    COMPLETED = 'completed'
    CANCELLED = 'cancelled'
    DEACTIVATED = 'deactivated'  # owner account deactivated
