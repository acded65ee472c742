"""Use case fixtures: in-memory repositories over one fresh store per test"""

from unittest.mock import AsyncMock

import pytest

from src.service.exchange.app.interface.i_match_event_publisher import IMatchEventPublisher
from src.service.exchange.domain.entity.user_entity import UserRole
from src.service.exchange.driven_adapter.repo.in_memory.document_store import (
    InMemoryDocumentStore,
)
from src.service.exchange.driven_adapter.repo.in_memory.match_repo_impl import (
    MatchCommandRepoInMemoryImpl,
    MatchQueryRepoInMemoryImpl,
)
from src.service.exchange.driven_adapter.repo.in_memory.reference_repo_impl import (
    GameQueryRepoInMemoryImpl,
    UserQueryRepoInMemoryImpl,
)
from src.service.exchange.driven_adapter.repo.in_memory.ticket_request_repo_impl import (
    TicketRequestCommandRepoInMemoryImpl,
    TicketRequestQueryRepoInMemoryImpl,
)
from test.service.exchange.builders import make_game, make_user


@pytest.fixture
def store():
    return InMemoryDocumentStore()


@pytest.fixture
def ticket_command_repo(store):
    return TicketRequestCommandRepoInMemoryImpl(store=store)


@pytest.fixture
def ticket_query_repo(store):
    return TicketRequestQueryRepoInMemoryImpl(store=store)


@pytest.fixture
def match_command_repo(store):
    return MatchCommandRepoInMemoryImpl(store=store)


@pytest.fixture
def match_query_repo(store):
    return MatchQueryRepoInMemoryImpl(store=store)


@pytest.fixture
def game_repo(store):
    return GameQueryRepoInMemoryImpl(store=store)


@pytest.fixture
def user_repo(store):
    return UserQueryRepoInMemoryImpl(store=store)


@pytest.fixture
def publisher():
    return AsyncMock(spec=IMatchEventPublisher)


@pytest.fixture
def seller(store):
    return store.add_user(make_user('sam', first_name='Sam', last_name='Seller'))


@pytest.fixture
def buyer(store):
    return store.add_user(make_user('bea', first_name='Bea', last_name='Buyer'))


@pytest.fixture
def outsider(store):
    return store.add_user(make_user('otto'))


@pytest.fixture
def admin(store):
    return store.add_user(make_user('ada', role=UserRole.ADMIN))


@pytest.fixture
def game(store):
    return store.add_game(make_game('Rovers', week=1))


@pytest.fixture
def seed(store):
    """Put ticket requests and matches straight into the store"""

    def _seed(*documents):
        for document in documents:
            if hasattr(document, 'history'):
                store.matches[document.id] = document
            else:
                store.ticket_requests[document.id] = document
        return documents if len(documents) > 1 else documents[0]

    return _seed
