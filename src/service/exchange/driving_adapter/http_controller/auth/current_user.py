"""
Acting user resolution

The caller's identity arrives in the ``X-User-Id`` header (issued by the
marketplace gateway) and is resolved through the user lookup.
"""

from typing import Optional

from dependency_injector.wiring import Provide, inject
from fastapi import Depends, Header
from opentelemetry import trace

from src.platform.config.di import Container
from src.platform.exception.exceptions import UnauthorizedError
from src.platform.types.uuid7_utils_types import to_uuid
from src.service.exchange.app.interface.i_reference_query_repo import IUserQueryRepo
from src.service.exchange.domain.entity.user_entity import User


@inject
async def get_current_user(
    x_user_id: Optional[str] = Header(default=None),
    user_query_repo: IUserQueryRepo = Depends(Provide[Container.user_query_repo]),
) -> User:
    if not x_user_id:
        raise UnauthorizedError('Missing X-User-Id header')
    try:
        user_id = to_uuid(x_user_id)
    except ValueError:
        raise UnauthorizedError('Malformed X-User-Id header')

    tracer = trace.get_tracer(__name__)
    with tracer.start_as_current_span('auth.get_current_user', attributes={'user.id': str(user_id)}):
        user = await user_query_repo.get_by_id(user_id=user_id)
        if user is None:
            raise UnauthorizedError('Unknown user')
        user.validate_active()
        return user


async def require_admin(current_user: User = Depends(get_current_user)) -> User:
    if not current_user.is_admin:
        raise UnauthorizedError('Only administrators can perform this action')
    return current_user
