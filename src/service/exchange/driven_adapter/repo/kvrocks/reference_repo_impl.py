"""
Game and user lookups

Both records are owned by the marketplace CRUD services, which write them as
``{prefix}exchange:game:<id>`` / ``{prefix}exchange:user:<id>`` JSON strings.
"""

from uuid_utils import UUID

from src.platform.state.kvrocks_client import key_of, kvrocks_client
from src.service.exchange.app.interface.i_reference_query_repo import (
    IGameQueryRepo,
    IUserQueryRepo,
)
from src.service.exchange.domain.entity.game_entity import Game
from src.service.exchange.domain.entity.user_entity import User
from src.service.exchange.driven_adapter.repo.kvrocks.document_codec import (
    decode_game,
    decode_user,
    encode,
)


GAME_INDEX = ('game', 'all')


class GameQueryRepoKvrocksImpl(IGameQueryRepo):
    async def get_by_id(self, *, game_id: UUID) -> Game | None:
        doc = await kvrocks_client.get_client().get(key_of('game', str(game_id)))
        return decode_game(doc) if doc else None

    async def list_by_date(self) -> list[Game]:
        client = kvrocks_client.get_client()
        ids = sorted(await client.smembers(key_of(*GAME_INDEX)))
        if not ids:
            return []
        docs = await client.mget([key_of('game', game_id) for game_id in ids])
        games = [decode_game(doc) for doc in docs if doc]
        return sorted((game for game in games if not game.is_deleted), key=lambda g: g.date)

    async def save(self, *, game: Game) -> Game:
        client = kvrocks_client.get_client()
        await client.set(key_of('game', str(game.id)), encode(game))
        await client.sadd(key_of(*GAME_INDEX), str(game.id))
        return game


class UserQueryRepoKvrocksImpl(IUserQueryRepo):
    async def get_by_id(self, *, user_id: UUID) -> User | None:
        doc = await kvrocks_client.get_client().get(key_of('user', str(user_id)))
        return decode_user(doc) if doc else None

    async def save(self, *, user: User) -> User:
        await kvrocks_client.get_client().set(key_of('user', str(user.id)), encode(user))
        return user
