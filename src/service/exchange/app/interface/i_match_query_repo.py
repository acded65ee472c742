from abc import ABC, abstractmethod
from datetime import datetime
from typing import Iterable, Optional

from uuid_utils import UUID

from src.service.exchange.domain.entity.match_entity import Match
from src.service.exchange.domain.enum.match_status import MatchStatus


class IMatchQueryRepo(ABC):
    @abstractmethod
    async def get_by_id(self, *, match_id: UUID) -> Match | None:
        pass

    @abstractmethod
    async def list_by_ticket_ids(
        self, *, ticket_ids: Iterable[UUID], status: Optional[MatchStatus] = None
    ) -> list[Match]:
        """Matches referencing any of ``ticket_ids``, newest first"""
        pass

    @abstractmethod
    async def list_all(self, *, status: Optional[MatchStatus] = None) -> list[Match]:
        """Every match, newest first"""
        pass

    @abstractmethod
    async def list_expired(self, *, now: datetime) -> list[Match]:
        """Unresolved matches whose expires_at is at or before ``now``"""
        pass
