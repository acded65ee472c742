import asyncio

import pytest
from uuid_utils import uuid7

from src.platform.exception.exceptions import (
    InvalidStateError,
    NotFoundError,
    UnauthorizedError,
)
from src.service.exchange.app.command.accept_match_use_case import AcceptMatchUseCase
from src.service.exchange.app.command.cancel_match_use_case import CancelMatchUseCase
from src.service.exchange.app.command.complete_match_use_case import CompleteMatchUseCase
from src.service.exchange.domain.entity.match_entity import Match
from src.service.exchange.domain.enum.match_event_type import MatchEventType
from src.service.exchange.domain.enum.match_status import MatchStatus
from src.service.exchange.domain.enum.ticket_request_status import TicketRequestStatus
from test.service.exchange.builders import (
    buy_terms,
    make_ticket,
    make_user,
    published_events,
    sell_terms,
)


def _deps(match_command_repo, ticket_command_repo, user_repo, publisher) -> dict:
    return {
        'match_command_repo': match_command_repo,
        'ticket_request_command_repo': ticket_command_repo,
        'user_query_repo': user_repo,
        'event_publisher': publisher,
    }


@pytest.fixture
def accept_use_case(match_command_repo, ticket_command_repo, user_repo, publisher):
    return AcceptMatchUseCase(**_deps(match_command_repo, ticket_command_repo, user_repo, publisher))


@pytest.fixture
def cancel_use_case(match_command_repo, ticket_command_repo, user_repo, publisher):
    return CancelMatchUseCase(**_deps(match_command_repo, ticket_command_repo, user_repo, publisher))


@pytest.fixture
def complete_use_case(match_command_repo, ticket_command_repo, user_repo, publisher):
    return CompleteMatchUseCase(**_deps(match_command_repo, ticket_command_repo, user_repo, publisher))


@pytest.fixture
def tickets(seed, seller, buyer, game):
    """Sell and buy requests already held by an initiated match"""
    return seed(
        make_ticket(seller, sell_terms(), game=game, status=TicketRequestStatus.PENDING),
        make_ticket(buyer, buy_terms(), game=game, status=TicketRequestStatus.PENDING),
    )


@pytest.fixture
def initiated(seed, tickets, buyer):
    sell, buy = tickets
    return seed(
        Match.initiate(initiator_ticket_id=buy.id, matched_ticket_id=sell.id, initiated_by=buyer.id)
    )


@pytest.fixture
def accepted(seed, initiated, seller):
    return seed(initiated.accept(changed_by=seller.id))


class TestAcceptMatch:
    @pytest.mark.asyncio
    async def test_accept_moves_tickets_to_matched(
        self, accept_use_case, initiated, tickets, seller, store, publisher
    ):
        sell, buy = tickets

        match = await accept_use_case.execute(match_id=initiated.id, acting_user_id=seller.id)

        assert match.status == MatchStatus.ACCEPTED
        assert store.matches[initiated.id].status == MatchStatus.ACCEPTED
        assert store.ticket_requests[sell.id].status == TicketRequestStatus.MATCHED
        assert store.ticket_requests[buy.id].status == TicketRequestStatus.MATCHED

        [event] = published_events(publisher)
        assert event.type == MatchEventType.MATCH_ACCEPTED
        assert event.previous_status == MatchStatus.INITIATED
        assert event.acted_as_admin is False

    @pytest.mark.asyncio
    async def test_accept_outside_initiated_changes_nothing(
        self, accept_use_case, accepted, tickets, seller, store, publisher
    ):
        """
        Given: a match that is already accepted
        When: accept is called again
        Then: InvalidStateError names "accepted" and neither ticket is touched
        """
        sell, buy = tickets
        before = dict(store.ticket_requests)

        with pytest.raises(InvalidStateError) as exc_info:
            await accept_use_case.execute(match_id=accepted.id, acting_user_id=seller.id)

        assert exc_info.value.current_status == MatchStatus.ACCEPTED
        assert store.ticket_requests[sell.id] is before[sell.id]
        assert store.ticket_requests[buy.id] is before[buy.id]
        publisher.publish.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_concurrent_accepts_single_winner(
        self, accept_use_case, initiated, seller, buyer, store
    ):
        """
        Given: one initiated match
        When: both participants accept at the same time
        Then: exactly one succeeds, the other gets InvalidStateError, history grows by one
        """
        results = await asyncio.gather(
            accept_use_case.execute(match_id=initiated.id, acting_user_id=seller.id),
            accept_use_case.execute(match_id=initiated.id, acting_user_id=buyer.id),
            return_exceptions=True,
        )

        successes = [r for r in results if isinstance(r, Match)]
        failures = [r for r in results if isinstance(r, InvalidStateError)]
        assert len(successes) == 1
        assert len(failures) == 1
        assert len(store.matches[initiated.id].history) == 2

    @pytest.mark.asyncio
    async def test_outsider_is_rejected(self, accept_use_case, initiated, outsider, store):
        with pytest.raises(UnauthorizedError):
            await accept_use_case.execute(match_id=initiated.id, acting_user_id=outsider.id)

        assert store.matches[initiated.id].status == MatchStatus.INITIATED

    @pytest.mark.asyncio
    async def test_deactivated_participant_is_rejected(self, accept_use_case, initiated, seller, store):
        store.users[seller.id].is_active = False

        with pytest.raises(UnauthorizedError):
            await accept_use_case.execute(match_id=initiated.id, acting_user_id=seller.id)

    @pytest.mark.asyncio
    async def test_admin_acts_on_behalf(self, accept_use_case, initiated, admin, publisher):
        """
        Given: an administrator who is not a party to the match
        When: they accept it
        Then: the transition succeeds and the event is flagged for auditing
        """
        match = await accept_use_case.execute(match_id=initiated.id, acting_user_id=admin.id)

        assert match.history[-1].changed_by == admin.id
        [event] = published_events(publisher)
        assert event.acted_as_admin is True
        assert event.acting_user_id == admin.id

    @pytest.mark.asyncio
    async def test_unknown_match(self, accept_use_case, seller):
        with pytest.raises(NotFoundError):
            await accept_use_case.execute(match_id=uuid7(), acting_user_id=seller.id)

    @pytest.mark.asyncio
    async def test_unknown_user(self, accept_use_case, initiated):
        with pytest.raises(UnauthorizedError):
            await accept_use_case.execute(match_id=initiated.id, acting_user_id=uuid7())


class TestCancelMatch:
    @pytest.mark.asyncio
    @pytest.mark.parametrize('state', ['initiated', 'accepted'])
    async def test_cancel_reopens_both_tickets(
        self, request, cancel_use_case, tickets, buyer, store, publisher, state
    ):
        match = request.getfixturevalue(state)
        sell, buy = tickets

        cancelled = await cancel_use_case.execute(
            match_id=match.id, acting_user_id=buyer.id, reason='cannot make it'
        )

        assert cancelled.status == MatchStatus.CANCELLED
        assert cancelled.history[-1].notes == 'cannot make it'
        assert store.ticket_requests[sell.id].status == TicketRequestStatus.OPEN
        assert store.ticket_requests[buy.id].status == TicketRequestStatus.OPEN
        assert store.ticket_requests[buy.id].counterparty_snapshot is None

        [event] = published_events(publisher)
        assert event.type == MatchEventType.MATCH_CANCELLED
        assert event.reason == 'cannot make it'

    @pytest.mark.asyncio
    async def test_cancel_on_completed_fails(self, cancel_use_case, seed, accepted, buyer, store):
        completed = seed(accepted.complete(changed_by=buyer.id))

        with pytest.raises(InvalidStateError) as exc_info:
            await cancel_use_case.execute(match_id=completed.id, acting_user_id=buyer.id)

        assert exc_info.value.current_status == MatchStatus.COMPLETED
        assert store.matches[completed.id].status == MatchStatus.COMPLETED


class TestCompleteMatch:
    @pytest.mark.asyncio
    async def test_full_flow_records_three_history_entries(
        self, accept_use_case, complete_use_case, initiated, seller, buyer
    ):
        """
        Given: an initiated match
        When: the seller accepts and the buyer completes
        Then: history is initiated, accepted, completed with the right actors
        """
        await accept_use_case.execute(match_id=initiated.id, acting_user_id=seller.id)
        completed = await complete_use_case.execute(match_id=initiated.id, acting_user_id=buyer.id)

        assert [(entry.status, entry.changed_by) for entry in completed.history] == [
            (MatchStatus.INITIATED, buyer.id),
            (MatchStatus.ACCEPTED, seller.id),
            (MatchStatus.COMPLETED, buyer.id),
        ]

    @pytest.mark.asyncio
    async def test_each_side_gets_the_other_partys_contact(
        self, complete_use_case, accepted, tickets, seller, buyer, store
    ):
        """
        Given: an accepted match between Sam (seller) and Bea (buyer)
        When: the match is completed
        Then: the sell request holds Bea's contact and the buy request holds Sam's
        """
        sell, buy = tickets

        await complete_use_case.execute(match_id=accepted.id, acting_user_id=seller.id)

        sell_after = store.ticket_requests[sell.id]
        buy_after = store.ticket_requests[buy.id]
        assert sell_after.status == TicketRequestStatus.COMPLETED
        assert buy_after.status == TicketRequestStatus.COMPLETED
        assert sell_after.counterparty_snapshot.email == buyer.email
        assert sell_after.counterparty_snapshot.user_id == buyer.id
        assert buy_after.counterparty_snapshot.email == seller.email
        assert buy_after.counterparty_snapshot.last_name == 'Seller'

    @pytest.mark.asyncio
    async def test_complete_requires_accepted(self, complete_use_case, initiated, tickets, seller, store):
        sell, _ = tickets

        with pytest.raises(InvalidStateError) as exc_info:
            await complete_use_case.execute(match_id=initiated.id, acting_user_id=seller.id)

        assert exc_info.value.current_status == MatchStatus.INITIATED
        assert store.ticket_requests[sell.id].status == TicketRequestStatus.PENDING

    @pytest.mark.asyncio
    async def test_missing_owner_falls_back_to_ticket_snapshot(
        self, complete_use_case, accepted, tickets, seller, buyer, store
    ):
        sell, _ = tickets
        del store.users[buyer.id]

        await complete_use_case.execute(match_id=accepted.id, acting_user_id=seller.id)

        contact = store.ticket_requests[sell.id].counterparty_snapshot
        assert contact.username == 'bea'
        assert contact.email == ''


class TestLifecycleIsolation:
    @pytest.mark.asyncio
    async def test_other_users_tickets_are_untouched(
        self, accept_use_case, seed, initiated, seller, game, store
    ):
        bystander = store.add_user(make_user('bo'))
        unrelated = seed(make_ticket(bystander, buy_terms(), game=game))

        await accept_use_case.execute(match_id=initiated.id, acting_user_id=seller.id)

        assert store.ticket_requests[unrelated.id] is unrelated


@pytest.fixture
def slow_matched_writes(ticket_command_repo):
    """Hold every ticket write to matched for 50 ms, as if accept were slow to finish"""
    original = ticket_command_repo.update_lifecycle_state

    async def delayed(**kwargs):
        if kwargs['status'] == TicketRequestStatus.MATCHED:
            await asyncio.sleep(0.05)
        return await original(**kwargs)

    ticket_command_repo.update_lifecycle_state = delayed
    return ticket_command_repo


class TestInterleavedTransitions:
    @pytest.mark.asyncio
    async def test_cancel_while_accept_writes_tickets(
        self,
        accept_use_case,
        cancel_use_case,
        slow_matched_writes,
        initiated,
        tickets,
        seller,
        buyer,
        store,
    ):
        """
        Given: accept has moved the match but its ticket writes are still in flight
        When: the buyer cancels in between
        Then: the match ends cancelled and both tickets are open, not matched
        """
        sell, buy = tickets

        async def cancel_shortly():
            await asyncio.sleep(0.01)
            return await cancel_use_case.execute(match_id=initiated.id, acting_user_id=buyer.id)

        accepted, cancelled = await asyncio.gather(
            accept_use_case.execute(match_id=initiated.id, acting_user_id=seller.id),
            cancel_shortly(),
        )

        assert accepted.status == MatchStatus.ACCEPTED
        assert cancelled.status == MatchStatus.CANCELLED
        assert store.matches[initiated.id].status == MatchStatus.CANCELLED
        assert store.ticket_requests[sell.id].status == TicketRequestStatus.OPEN
        assert store.ticket_requests[buy.id].status == TicketRequestStatus.OPEN

    @pytest.mark.asyncio
    async def test_complete_while_accept_writes_tickets(
        self,
        accept_use_case,
        complete_use_case,
        slow_matched_writes,
        initiated,
        tickets,
        seller,
        buyer,
        store,
    ):
        """
        Given: accept has moved the match but its ticket writes are still in flight
        When: the buyer completes in between
        Then: both tickets end completed with the other party's contact
        """
        sell, buy = tickets

        async def complete_shortly():
            await asyncio.sleep(0.01)
            return await complete_use_case.execute(match_id=initiated.id, acting_user_id=buyer.id)

        await asyncio.gather(
            accept_use_case.execute(match_id=initiated.id, acting_user_id=seller.id),
            complete_shortly(),
        )

        assert store.matches[initiated.id].status == MatchStatus.COMPLETED
        assert store.ticket_requests[sell.id].status == TicketRequestStatus.COMPLETED
        assert store.ticket_requests[buy.id].status == TicketRequestStatus.COMPLETED
        assert store.ticket_requests[sell.id].counterparty_snapshot.username == 'bea'

    @pytest.mark.asyncio
    async def test_lifecycle_write_skips_ticket_that_moved_on(
        self, ticket_command_repo, seed, seller, game, store
    ):
        reopened = seed(make_ticket(seller, sell_terms(), game=game))

        written = await ticket_command_repo.update_lifecycle_state(
            ticket_id=reopened.id,
            expected_statuses=(TicketRequestStatus.PENDING,),
            status=TicketRequestStatus.MATCHED,
        )

        assert written is None
        assert store.ticket_requests[reopened.id] is reopened
