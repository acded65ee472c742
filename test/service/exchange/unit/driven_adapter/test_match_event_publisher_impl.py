from unittest.mock import AsyncMock, MagicMock

import anyio
import pytest
from uuid_utils import uuid7

from src.service.exchange.domain.domain_event.match_lifecycle_event import MatchLifecycleEvent
from src.service.exchange.domain.entity.match_entity import Match
from src.service.exchange.domain.enum.match_event_type import MatchEventType
from src.service.exchange.driven_adapter.event.match_event_publisher_impl import (
    MatchEventPublisherImpl,
)


def _handler(name: str, *, fails: bool = False) -> MagicMock:
    handler = MagicMock()
    handler.name = name
    handler.handle = AsyncMock(side_effect=RuntimeError(f'{name} exploded') if fails else None)
    return handler


@pytest.fixture
def event():
    initiator, matched = uuid7(), uuid7()
    match = Match.initiate(initiator_ticket_id=uuid7(), matched_ticket_id=uuid7(), initiated_by=initiator)
    return MatchLifecycleEvent.of(
        type=MatchEventType.MATCH_INITIATED,
        match=match,
        acting_user_id=initiator,
        owners=(initiator, matched),
    )


class TestMatchEventPublisher:
    @pytest.mark.asyncio
    async def test_inline_dispatch_reaches_every_handler(self, event):
        first, second = _handler('first'), _handler('second')
        publisher = MatchEventPublisherImpl(handlers=[first, second])

        await publisher.publish(event=event)

        first.handle.assert_awaited_once_with(event=event)
        second.handle.assert_awaited_once_with(event=event)

    @pytest.mark.asyncio
    async def test_failing_handler_is_isolated(self, event):
        """
        Given: the first handler raises
        When: an event is published
        Then: publish returns normally and the second handler still runs
        """
        broken, healthy = _handler('broken', fails=True), _handler('healthy')
        publisher = MatchEventPublisherImpl(handlers=[broken, healthy])

        await publisher.publish(event=event)

        broken.handle.assert_awaited_once()
        healthy.handle.assert_awaited_once_with(event=event)

    @pytest.mark.asyncio
    async def test_dispatch_runs_on_the_installed_task_group(self, event):
        """
        Given: a task group installed on the publisher
        When: an event is published
        Then: handlers run in the background and a failure does not cancel the group
        """
        broken, healthy = _handler('broken', fails=True), _handler('healthy')

        async with anyio.create_task_group() as tg:
            publisher = MatchEventPublisherImpl(handlers=[broken, healthy], task_group=lambda: tg)
            await publisher.publish(event=event)
            healthy.handle.assert_not_awaited()

        healthy.handle.assert_awaited_once_with(event=event)
        broken.handle.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_missing_task_group_falls_back_to_inline(self, event):
        handler = _handler('only')
        publisher = MatchEventPublisherImpl(handlers=[handler], task_group=lambda: None)

        await publisher.publish(event=event)

        handler.handle.assert_awaited_once_with(event=event)
