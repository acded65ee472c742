"""
In-process document store

Backs the exchange repositories in local development and tests. Documents are
attrs entities replaced wholesale on every write; ``lock`` serializes the
read-check-write sequences that the Kvrocks backend runs as Lua scripts.
"""

from uuid_utils import UUID

import anyio

from src.service.exchange.domain.entity.admin_audit_log_entity import AdminAuditLog
from src.service.exchange.domain.entity.game_entity import Game
from src.service.exchange.domain.entity.match_entity import Match
from src.service.exchange.domain.entity.notification_entity import Notification
from src.service.exchange.domain.entity.ticket_request_entity import TicketRequest
from src.service.exchange.domain.entity.user_entity import User


class InMemoryDocumentStore:
    def __init__(self) -> None:
        self.lock = anyio.Lock()
        self.ticket_requests: dict[UUID, TicketRequest] = {}
        self.matches: dict[UUID, Match] = {}
        self.games: dict[UUID, Game] = {}
        self.users: dict[UUID, User] = {}
        self.notifications: list[Notification] = []
        self.audit_logs: list[AdminAuditLog] = []

    def add_game(self, game: Game) -> Game:
        self.games[game.id] = game
        return game

    def add_user(self, user: User) -> User:
        self.users[user.id] = user
        return user

    def clear(self) -> None:
        self.ticket_requests.clear()
        self.matches.clear()
        self.games.clear()
        self.users.clear()
        self.notifications.clear()
        self.audit_logs.clear()
