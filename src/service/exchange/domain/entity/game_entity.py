from datetime import datetime
from typing import Optional
from uuid_utils import UUID

import attrs


@attrs.define
class Game:
    id: UUID
    opponent: str
    date: datetime
    is_deleted: bool = False
    location: Optional[str] = None


def is_dangling(game: Optional[Game]) -> bool:
    """A game reference that resolves to nothing or to a deleted record"""
    return game is None or game.is_deleted
