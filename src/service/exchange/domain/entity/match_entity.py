from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid_utils import UUID, uuid7

import attrs

from src.platform.exception.exceptions import InvalidStateError, ValidationError
from src.platform.logging.loguru_io import Logger
from src.service.exchange.domain.enum.match_status import (
    UNRESOLVED_MATCH_STATUSES,
    MatchStatus,
)
from src.service.exchange.domain.value_object.match_history_entry import MatchHistoryEntry


@attrs.define
class Match:
    """
    A proposed pairing between two ticket requests.

    State machine:
        initiated -> accepted -> completed
        initiated | accepted -> cancelled | expired

    Every transition returns a new Match with exactly one extra history entry;
    the history tuple is never rewritten.
    """

    id: UUID
    initiator_ticket_id: UUID
    matched_ticket_id: UUID
    status: MatchStatus = MatchStatus.INITIATED
    history: tuple[MatchHistoryEntry, ...] = ()
    expires_at: Optional[datetime] = None
    created_at: datetime = attrs.field(factory=lambda: datetime.now(timezone.utc))
    updated_at: Optional[datetime] = None

    @classmethod
    @Logger.io
    def initiate(
        cls,
        *,
        initiator_ticket_id: UUID,
        matched_ticket_id: UUID,
        initiated_by: UUID,
        notes: Optional[str] = None,
        ttl: Optional[timedelta] = None,
    ) -> 'Match':
        if initiator_ticket_id == matched_ticket_id:
            raise ValidationError('A ticket request cannot be matched with itself')

        now = datetime.now(timezone.utc)
        return cls(
            id=uuid7(),
            initiator_ticket_id=initiator_ticket_id,
            matched_ticket_id=matched_ticket_id,
            status=MatchStatus.INITIATED,
            history=(
                MatchHistoryEntry(
                    status=MatchStatus.INITIATED,
                    changed_by=initiated_by,
                    timestamp=now,
                    notes=notes,
                ),
            ),
            expires_at=now + ttl if ttl else None,
            created_at=now,
            updated_at=now,
        )

    @property
    def ticket_ids(self) -> tuple[UUID, UUID]:
        return self.initiator_ticket_id, self.matched_ticket_id

    @property
    def is_unresolved(self) -> bool:
        return self.status in UNRESOLVED_MATCH_STATUSES

    def counterpart_ticket_id(self, ticket_id: UUID) -> UUID:
        return (
            self.matched_ticket_id if ticket_id == self.initiator_ticket_id else self.initiator_ticket_id
        )

    def is_expired_at(self, now: datetime) -> bool:
        return self.is_unresolved and self.expires_at is not None and self.expires_at <= now

    def accept(self, *, changed_by: UUID, notes: Optional[str] = None) -> 'Match':
        return self._transition(
            to=MatchStatus.ACCEPTED,
            allowed_from=frozenset({MatchStatus.INITIATED}),
            changed_by=changed_by,
            notes=notes,
            action='accept',
        )

    def cancel(self, *, changed_by: UUID, reason: Optional[str] = None) -> 'Match':
        return self._transition(
            to=MatchStatus.CANCELLED,
            allowed_from=UNRESOLVED_MATCH_STATUSES,
            changed_by=changed_by,
            notes=reason,
            action='cancel',
        )

    def complete(self, *, changed_by: UUID, notes: Optional[str] = None) -> 'Match':
        return self._transition(
            to=MatchStatus.COMPLETED,
            allowed_from=frozenset({MatchStatus.ACCEPTED}),
            changed_by=changed_by,
            notes=notes,
            action='complete',
        )

    def expire(self) -> 'Match':
        return self._transition(
            to=MatchStatus.EXPIRED,
            allowed_from=UNRESOLVED_MATCH_STATUSES,
            changed_by=None,
            notes='Expired without resolution',
            action='expire',
        )

    def _transition(
        self,
        *,
        to: MatchStatus,
        allowed_from: frozenset[MatchStatus],
        changed_by: Optional[UUID],
        notes: Optional[str],
        action: str,
    ) -> 'Match':
        if self.status not in allowed_from:
            raise InvalidStateError(f'Cannot {action} match {self.id}', current_status=self.status)

        now = datetime.now(timezone.utc)
        entry = MatchHistoryEntry(status=to, changed_by=changed_by, timestamp=now, notes=notes)
        return attrs.evolve(self, status=to, history=(*self.history, entry), updated_at=now)
