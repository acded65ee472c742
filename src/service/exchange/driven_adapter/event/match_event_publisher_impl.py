"""
Match event publisher

Fire-and-forget fan-out of lifecycle events to the notification and audit
handlers. Dispatch runs on the application task group when one is installed
(see ``container.task_group``) and inline otherwise; either way a failing
handler is logged and counted, and never reaches the lifecycle use case.
"""

from typing import Any, Callable, Optional, Sequence

from anyio.abc import TaskGroup

from src.platform.logging.loguru_io import Logger
from src.platform.metrics.exchange_metrics import metrics
from src.service.exchange.app.interface.i_match_event_handler import IMatchEventHandler
from src.service.exchange.app.interface.i_match_event_publisher import IMatchEventPublisher
from src.service.exchange.domain.domain_event.match_lifecycle_event import MatchLifecycleEvent


class MatchEventPublisherImpl(IMatchEventPublisher):
    def __init__(
        self,
        *,
        handlers: Sequence[IMatchEventHandler],
        task_group: Optional[Callable[[], Any]] = None,
    ) -> None:
        self.handlers = list(handlers)
        self._task_group = task_group

    def _current_task_group(self) -> TaskGroup | None:
        return self._task_group() if self._task_group else None

    async def publish(self, *, event: MatchLifecycleEvent) -> None:
        task_group = self._current_task_group()
        if task_group is None:
            await self.dispatch(event)
            return
        task_group.start_soon(self.dispatch, event)

    async def dispatch(self, event: MatchLifecycleEvent) -> None:
        for handler in self.handlers:
            try:
                await handler.handle(event=event)
            except Exception:
                metrics.record_side_effect_failure(handler=handler.name, event_type=event.type)
                Logger.base.exception(
                    f'⚠️ [EVENT] {handler.name} failed on {event.type} for match {event.match.id}'
                )
