import pytest
from uuid_utils import uuid7

from src.service.exchange.domain.domain_event.match_lifecycle_event import MatchLifecycleEvent
from src.service.exchange.domain.entity.admin_audit_log_entity import AdminAction
from src.service.exchange.domain.entity.match_entity import Match
from src.service.exchange.domain.entity.user_entity import UserRole
from src.service.exchange.domain.enum.match_event_type import MatchEventType
from src.service.exchange.domain.enum.match_status import MatchStatus
from src.service.exchange.driven_adapter.email.mock_email_service import MockEmailService
from src.service.exchange.driven_adapter.event.admin_audit_handler_impl import (
    AdminAuditHandlerImpl,
)
from src.service.exchange.driven_adapter.event.match_notification_handler_impl import (
    MatchNotificationHandlerImpl,
    recipients,
)
from src.service.exchange.driven_adapter.repo.in_memory.document_store import (
    InMemoryDocumentStore,
)
from src.service.exchange.driven_adapter.repo.in_memory.reference_repo_impl import (
    UserQueryRepoInMemoryImpl,
)
from src.service.exchange.driven_adapter.repo.in_memory.side_effect_repo_impl import (
    AdminAuditLogRepoInMemoryImpl,
    NotificationRepoInMemoryImpl,
)
from test.service.exchange.builders import make_user


@pytest.fixture
def store():
    return InMemoryDocumentStore()


@pytest.fixture
def initiator(store):
    return store.add_user(make_user('ian', first_name='Ian', last_name='Initiator'))


@pytest.fixture
def matched(store):
    return store.add_user(make_user('mia'))


@pytest.fixture
def admin(store):
    return store.add_user(make_user('ada', role=UserRole.ADMIN))


@pytest.fixture
def email_service():
    return MockEmailService()


@pytest.fixture
def notification_handler(store, email_service):
    return MatchNotificationHandlerImpl(
        user_query_repo=UserQueryRepoInMemoryImpl(store=store),
        notification_repo=NotificationRepoInMemoryImpl(store=store),
        email_service=email_service,
    )


@pytest.fixture
def audit_handler(store):
    return AdminAuditHandlerImpl(audit_log_repo=AdminAuditLogRepoInMemoryImpl(store=store))


@pytest.fixture
def match(initiator):
    return Match.initiate(initiator_ticket_id=uuid7(), matched_ticket_id=uuid7(), initiated_by=initiator.id)


def _event(type, match, *, actor, initiator, matched, **kwargs) -> MatchLifecycleEvent:
    return MatchLifecycleEvent.of(
        type=type,
        match=match,
        acting_user_id=actor.id if actor else None,
        owners=(initiator.id, matched.id),
        **kwargs,
    )


class TestRecipients:
    def test_initiated_goes_to_the_matched_owner(self, match, initiator, matched):
        event = _event(MatchEventType.MATCH_INITIATED, match, actor=initiator, initiator=initiator, matched=matched)
        assert recipients(event) == [matched.id]

    def test_accepted_skips_the_actor(self, match, initiator, matched):
        event = _event(MatchEventType.MATCH_ACCEPTED, match, actor=matched, initiator=initiator, matched=matched)
        assert recipients(event) == [initiator.id]

    def test_admin_cancel_reaches_both(self, match, initiator, matched, admin):
        event = _event(MatchEventType.MATCH_CANCELLED, match, actor=admin, initiator=initiator, matched=matched)
        assert recipients(event) == [initiator.id, matched.id]

    @pytest.mark.parametrize('type', [MatchEventType.MATCH_COMPLETED, MatchEventType.MATCH_EXPIRED])
    def test_resolution_reaches_both(self, match, initiator, matched, type):
        event = _event(type, match, actor=None, initiator=initiator, matched=matched)
        assert recipients(event) == [initiator.id, matched.id]


class TestMatchNotificationHandler:
    @pytest.mark.asyncio
    async def test_initiated_notifies_and_emails_the_matched_owner(
        self, notification_handler, store, email_service, match, initiator, matched
    ):
        """
        Given: Ian initiated a match against Mia's request
        When: the notification handler runs
        Then: Mia gets one notification and one email naming "Ian I."
        """
        event = _event(MatchEventType.MATCH_INITIATED, match, actor=initiator, initiator=initiator, matched=matched)

        await notification_handler.handle(event=event)

        [notification] = store.notifications
        assert notification.user_id == matched.id
        assert notification.title == 'New Match Request'
        assert notification.match_id == match.id
        assert 'Ian I.' in notification.message
        [email] = email_service.sent_emails
        assert email['to'] == 'mia@example.com'
        assert email['subject'] == 'New Match Request'

    @pytest.mark.asyncio
    async def test_cancel_reason_is_included(self, notification_handler, store, match, initiator, matched):
        event = _event(
            MatchEventType.MATCH_CANCELLED,
            match,
            actor=matched,
            initiator=initiator,
            matched=matched,
            reason='game moved',
        )

        await notification_handler.handle(event=event)

        [notification] = store.notifications
        assert notification.user_id == initiator.id
        assert notification.message.endswith(': game moved')

    @pytest.mark.asyncio
    async def test_recipient_without_email_still_gets_a_notification(
        self, notification_handler, store, email_service, match, initiator, matched
    ):
        store.users[matched.id].email = ''
        event = _event(MatchEventType.MATCH_INITIATED, match, actor=initiator, initiator=initiator, matched=matched)

        await notification_handler.handle(event=event)

        assert len(store.notifications) == 1
        assert email_service.sent_emails == []


class TestAdminAuditHandler:
    @pytest.mark.asyncio
    async def test_admin_transition_is_recorded(self, audit_handler, store, match, initiator, matched, admin):
        """
        Given: an administrator cancelled someone else's accepted match
        When: the audit handler runs
        Then: one audit entry records the admin, both participants and the status change
        """
        cancelled = match.accept(changed_by=matched.id).cancel(changed_by=admin.id, reason='fraud report')
        event = _event(
            MatchEventType.MATCH_CANCELLED,
            cancelled,
            actor=admin,
            initiator=initiator,
            matched=matched,
            previous_status=MatchStatus.ACCEPTED,
            reason='fraud report',
            acted_as_admin=True,
        )

        await audit_handler.handle(event=event)

        [entry] = store.audit_logs
        assert entry.admin_id == admin.id
        assert entry.action == AdminAction.CANCEL_MATCH
        assert entry.target_id == match.id
        assert entry.affected_user_ids == (initiator.id, matched.id)
        assert entry.changes == {'before': {'status': 'accepted'}, 'after': {'status': 'cancelled'}}
        assert entry.notes == 'fraud report'

    @pytest.mark.asyncio
    async def test_participant_transition_is_not_recorded(
        self, audit_handler, store, match, initiator, matched
    ):
        event = _event(
            MatchEventType.MATCH_ACCEPTED,
            match.accept(changed_by=matched.id),
            actor=matched,
            initiator=initiator,
            matched=matched,
            previous_status=MatchStatus.INITIATED,
        )

        await audit_handler.handle(event=event)

        assert store.audit_logs == []
