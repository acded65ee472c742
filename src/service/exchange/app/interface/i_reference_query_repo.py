"""Lookups into records owned by other parts of the marketplace (games, users)"""

from abc import ABC, abstractmethod

from uuid_utils import UUID

from src.service.exchange.domain.entity.game_entity import Game
from src.service.exchange.domain.entity.user_entity import User


class IGameQueryRepo(ABC):
    @abstractmethod
    async def get_by_id(self, *, game_id: UUID) -> Game | None:
        """Game record, including soft-deleted ones (callers decide what dangling means)"""
        pass

    @abstractmethod
    async def list_by_date(self) -> list[Game]:
        """Non-deleted games in chronological order"""
        pass


class IUserQueryRepo(ABC):
    @abstractmethod
    async def get_by_id(self, *, user_id: UUID) -> User | None:
        pass
