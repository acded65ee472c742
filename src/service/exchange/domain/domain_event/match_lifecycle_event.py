"""
Match Lifecycle Events

One event per match transition, consumed by the notification and admin audit
handlers. Owners are resolved at emission time so handlers never re-read tickets.
"""

from datetime import datetime, timezone
from typing import Optional

import attrs
from uuid_utils import UUID

from src.service.exchange.domain.entity.match_entity import Match
from src.service.exchange.domain.enum.match_event_type import MatchEventType
from src.service.exchange.domain.enum.match_status import MatchStatus


@attrs.define
class MatchLifecycleEvent:
    type: MatchEventType
    match: Match
    acting_user_id: Optional[UUID]  # None for system transitions
    initiator_owner_id: UUID
    matched_owner_id: UUID
    previous_status: Optional[MatchStatus] = None
    reason: Optional[str] = None
    acted_as_admin: bool = False
    occurred_at: datetime = attrs.field(factory=lambda: datetime.now(timezone.utc))

    @property
    def participant_ids(self) -> tuple[UUID, UUID]:
        return self.initiator_owner_id, self.matched_owner_id

    @classmethod
    def of(
        cls,
        *,
        type: MatchEventType,
        match: Match,
        acting_user_id: Optional[UUID],
        owners: tuple[UUID, UUID],
        previous_status: Optional[MatchStatus] = None,
        reason: Optional[str] = None,
        acted_as_admin: bool = False,
    ) -> 'MatchLifecycleEvent':
        initiator_owner_id, matched_owner_id = owners
        return cls(
            type=type,
            match=match,
            acting_user_id=acting_user_id,
            initiator_owner_id=initiator_owner_id,
            matched_owner_id=matched_owner_id,
            previous_status=previous_status,
            reason=reason,
            acted_as_admin=acted_as_admin,
        )
