from datetime import datetime
from typing import Optional
from uuid_utils import UUID

import attrs

from src.service.exchange.domain.enum.match_status import MatchStatus


@attrs.frozen
class MatchHistoryEntry:
    status: MatchStatus
    changed_by: Optional[UUID]  # None for system transitions (expiry)
    timestamp: datetime
    notes: Optional[str] = None
