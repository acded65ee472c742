from datetime import datetime, timezone
from typing import Optional
from uuid_utils import UUID

import attrs

from src.service.exchange.domain.entity.user_entity import User


@attrs.frozen
class UserSnapshot:
    """Owner display identity frozen when a ticket request is created"""

    first_name: str
    last_name: str
    username: str
    discord_handle: Optional[str] = None

    @classmethod
    def of(cls, user: User) -> 'UserSnapshot':
        return cls(
            first_name=user.first_name,
            last_name=user.last_name,
            username=user.username,
            discord_handle=user.discord_handle,
        )

    def redacted(self) -> 'UserSnapshot':
        return attrs.evolve(self, last_name=self.last_name[:1])


@attrs.frozen
class CounterpartySnapshot:
    """The other party's contact identity, frozen when the match completes"""

    user_id: UUID
    first_name: str
    last_name: str
    username: str
    email: str
    discord_handle: Optional[str] = None
    captured_at: datetime = attrs.field(factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def of(cls, user: User) -> 'CounterpartySnapshot':
        return cls(
            user_id=user.id,
            first_name=user.first_name,
            last_name=user.last_name,
            username=user.username,
            email=user.email,
            discord_handle=user.discord_handle,
        )
