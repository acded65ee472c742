from uuid_utils import UUID

from src.service.exchange.app.interface.i_reference_query_repo import (
    IGameQueryRepo,
    IUserQueryRepo,
)
from src.service.exchange.domain.entity.game_entity import Game
from src.service.exchange.domain.entity.user_entity import User
from src.service.exchange.driven_adapter.repo.in_memory.document_store import (
    InMemoryDocumentStore,
)


class GameQueryRepoInMemoryImpl(IGameQueryRepo):
    def __init__(self, *, store: InMemoryDocumentStore) -> None:
        self.store = store

    async def get_by_id(self, *, game_id: UUID) -> Game | None:
        return self.store.games.get(game_id)

    async def list_by_date(self) -> list[Game]:
        return sorted(
            (game for game in self.store.games.values() if not game.is_deleted),
            key=lambda game: game.date,
        )


class UserQueryRepoInMemoryImpl(IUserQueryRepo):
    def __init__(self, *, store: InMemoryDocumentStore) -> None:
        self.store = store

    async def get_by_id(self, *, user_id: UUID) -> User | None:
        return self.store.users.get(user_id)
