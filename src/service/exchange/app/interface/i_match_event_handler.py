from abc import ABC, abstractmethod

from src.service.exchange.domain.domain_event.match_lifecycle_event import MatchLifecycleEvent


class IMatchEventHandler(ABC):
    """Consumer of match lifecycle events (notifications, admin audit)"""

    name: str = 'match_event_handler'

    @abstractmethod
    async def handle(self, *, event: MatchLifecycleEvent) -> None:
        pass
