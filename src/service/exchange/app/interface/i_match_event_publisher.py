from abc import ABC, abstractmethod

from src.service.exchange.domain.domain_event.match_lifecycle_event import MatchLifecycleEvent


class IMatchEventPublisher(ABC):
    @abstractmethod
    async def publish(self, *, event: MatchLifecycleEvent) -> None:
        """
        Hand the event to the notification/audit consumers without waiting on them

        Implementations must not raise because a consumer failed.
        """
        pass
