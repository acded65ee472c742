from datetime import datetime, timezone
from typing import Optional
from uuid_utils import UUID, uuid7

import attrs

from src.service.exchange.domain.enum.match_event_type import MatchEventType


@attrs.define
class Notification:
    id: UUID
    user_id: UUID
    type: MatchEventType
    title: str
    message: str
    match_id: Optional[UUID] = None
    is_read: bool = False
    created_at: datetime = attrs.field(factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def create(
        cls, *, user_id: UUID, type: MatchEventType, title: str, message: str, match_id: UUID
    ) -> 'Notification':
        return cls(id=uuid7(), user_id=user_id, type=type, title=title, message=message, match_id=match_id)
