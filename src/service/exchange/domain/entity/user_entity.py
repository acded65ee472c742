from datetime import datetime
from enum import Enum
from typing import Optional
from uuid_utils import UUID

import attrs

from src.platform.exception.exceptions import UnauthorizedError


class UserRole(str, Enum):
    MEMBER = 'member'
    ADMIN = 'admin'


@attrs.define
class User:
    id: UUID
    username: str
    first_name: str = ''
    last_name: str = ''
    email: str = ''
    discord_handle: Optional[str] = None
    role: UserRole = UserRole.MEMBER
    is_active: bool = True
    created_at: Optional[datetime] = None

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def validate_active(self) -> None:
        if not self.is_active:
            raise UnauthorizedError('User is deactivated')
