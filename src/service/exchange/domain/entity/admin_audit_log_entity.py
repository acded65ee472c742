from datetime import datetime, timezone
from enum import StrEnum
from typing import Any, Optional
from uuid_utils import UUID, uuid7

import attrs


class AdminAction(StrEnum):
    ACCEPT_MATCH = 'accept_match'
    CANCEL_MATCH = 'cancel_match'
    COMPLETE_MATCH = 'complete_match'


@attrs.define
class AdminAuditLog:
    """Record of an administrator acting on a match they are not a party to"""

    id: UUID
    admin_id: UUID
    action: AdminAction
    target_type: str
    target_id: UUID
    affected_user_ids: tuple[UUID, ...]
    changes: dict[str, Any]
    notes: Optional[str] = None
    created_at: datetime = attrs.field(factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def for_match(
        cls,
        *,
        admin_id: UUID,
        action: AdminAction,
        match_id: UUID,
        affected_user_ids: tuple[UUID, ...],
        before: str,
        after: str,
        notes: Optional[str] = None,
    ) -> 'AdminAuditLog':
        return cls(
            id=uuid7(),
            admin_id=admin_id,
            action=action,
            target_type='match',
            target_id=match_id,
            affected_user_ids=affected_user_ids,
            changes={'before': {'status': before}, 'after': {'status': after}},
            notes=notes,
        )
