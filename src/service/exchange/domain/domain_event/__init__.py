from src.service.exchange.domain.domain_event.match_lifecycle_event import MatchLifecycleEvent

__all__ = ['MatchLifecycleEvent']
