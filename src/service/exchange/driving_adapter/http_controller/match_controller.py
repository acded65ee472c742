from typing import List, Optional

from fastapi import APIRouter, Depends, status
from opentelemetry import trace

from src.platform.logging.loguru_io import Logger
from src.platform.types.uuid7_utils_types import UtilsUUID7
from src.service.exchange.app.command.accept_match_use_case import AcceptMatchUseCase
from src.service.exchange.app.command.cancel_match_use_case import CancelMatchUseCase
from src.service.exchange.app.command.complete_match_use_case import CompleteMatchUseCase
from src.service.exchange.app.command.expire_matches_use_case import ExpireMatchesUseCase
from src.service.exchange.app.command.initiate_direct_match_use_case import (
    InitiateDirectMatchUseCase,
)
from src.service.exchange.app.command.initiate_match_use_case import InitiateMatchUseCase
from src.service.exchange.app.query.list_matches_use_case import ListMatchesUseCase
from src.service.exchange.app.query.list_notifications_use_case import (
    ListAdminAuditLogsUseCase,
    ListNotificationsUseCase,
)
from src.service.exchange.domain.entity.user_entity import User
from src.service.exchange.domain.enum.match_status import MatchStatus
from src.service.exchange.driving_adapter.http_controller.auth.current_user import (
    get_current_user,
    require_admin,
)
from src.service.exchange.driving_adapter.schema.match_schema import (
    AdminAuditLogResponse,
    CancelMatchRequest,
    DirectMatchRequest,
    DirectMatchResponse,
    InitiateMatchRequest,
    MatchNotesRequest,
    MatchResponse,
    NotificationResponse,
)


router = APIRouter()
tracer = trace.get_tracer(__name__)


@router.post('', status_code=status.HTTP_201_CREATED)
@Logger.io
async def initiate_match(
    request: InitiateMatchRequest,
    current_user: User = Depends(get_current_user),
    use_case: InitiateMatchUseCase = Depends(InitiateMatchUseCase.depends),
) -> MatchResponse:
    match = await use_case.execute(
        initiator_ticket_id=request.initiator_ticket_id,
        matched_ticket_id=request.matched_ticket_id,
        acting_user_id=current_user.id,
        notes=request.notes,
    )
    return MatchResponse.from_entity(match)


@router.post('/direct', status_code=status.HTTP_201_CREATED)
@Logger.io
async def initiate_direct_match(
    request: DirectMatchRequest,
    current_user: User = Depends(get_current_user),
    use_case: InitiateDirectMatchUseCase = Depends(InitiateDirectMatchUseCase.depends),
) -> DirectMatchResponse:
    with tracer.start_as_current_span('controller.initiate_direct_match') as span:
        span.set_attribute('ticket.target_id', str(request.target_ticket_id))
        result = await use_case.execute(
            target_ticket_id=request.target_ticket_id,
            acting_user_id=current_user.id,
            section_type=request.section_type,
            game_id=request.game_id,
            notes=request.notes,
        )
        span.set_attribute('match.id', str(result.match.id))
        return DirectMatchResponse.from_dto(result)


@router.post('/expire')
@Logger.io
async def expire_matches(
    current_user: User = Depends(require_admin),
    use_case: ExpireMatchesUseCase = Depends(ExpireMatchesUseCase.depends),
) -> List[MatchResponse]:
    matches = await use_case.execute()
    return [MatchResponse.from_entity(match) for match in matches]


@router.get('/my')
@Logger.io
async def list_my_matches(
    match_status: Optional[MatchStatus] = None,
    current_user: User = Depends(get_current_user),
    use_case: ListMatchesUseCase = Depends(ListMatchesUseCase.depends),
) -> List[MatchResponse]:
    matches = await use_case.list_for_user(user_id=current_user.id, status=match_status)
    return [MatchResponse.from_entity(match) for match in matches]


@router.get('/all')
@Logger.io
async def list_all_matches(
    match_status: Optional[MatchStatus] = None,
    current_user: User = Depends(get_current_user),
    use_case: ListMatchesUseCase = Depends(ListMatchesUseCase.depends),
) -> List[MatchResponse]:
    matches = await use_case.list_all(acting_user_id=current_user.id, status=match_status)
    return [MatchResponse.from_entity(match) for match in matches]


@router.get('/notification/my')
@Logger.io
async def list_my_notifications(
    current_user: User = Depends(get_current_user),
    use_case: ListNotificationsUseCase = Depends(ListNotificationsUseCase.depends),
) -> List[NotificationResponse]:
    notifications = await use_case.execute(user_id=current_user.id)
    return [NotificationResponse.from_entity(notification) for notification in notifications]


@router.get('/audit_log')
@Logger.io
async def list_admin_audit_logs(
    admin_id: Optional[UtilsUUID7] = None,
    current_user: User = Depends(get_current_user),
    use_case: ListAdminAuditLogsUseCase = Depends(ListAdminAuditLogsUseCase.depends),
) -> List[AdminAuditLogResponse]:
    entries = await use_case.execute(acting_user_id=current_user.id, admin_id=admin_id)
    return [AdminAuditLogResponse.from_entity(entry) for entry in entries]


@router.get('/{match_id}')
@Logger.io
async def get_match(
    match_id: UtilsUUID7,
    current_user: User = Depends(get_current_user),
    use_case: ListMatchesUseCase = Depends(ListMatchesUseCase.depends),
) -> MatchResponse:
    match = await use_case.get_match(match_id=match_id, acting_user_id=current_user.id)
    return MatchResponse.from_entity(match)


@router.post('/{match_id}/accept')
@Logger.io
async def accept_match(
    match_id: UtilsUUID7,
    request: Optional[MatchNotesRequest] = None,
    current_user: User = Depends(get_current_user),
    use_case: AcceptMatchUseCase = Depends(AcceptMatchUseCase.depends),
) -> MatchResponse:
    match = await use_case.execute(
        match_id=match_id,
        acting_user_id=current_user.id,
        notes=request.notes if request else None,
    )
    return MatchResponse.from_entity(match)


@router.post('/{match_id}/cancel')
@Logger.io
async def cancel_match(
    match_id: UtilsUUID7,
    request: Optional[CancelMatchRequest] = None,
    current_user: User = Depends(get_current_user),
    use_case: CancelMatchUseCase = Depends(CancelMatchUseCase.depends),
) -> MatchResponse:
    match = await use_case.execute(
        match_id=match_id,
        acting_user_id=current_user.id,
        reason=request.reason if request else None,
    )
    return MatchResponse.from_entity(match)


@router.post('/{match_id}/complete')
@Logger.io
async def complete_match(
    match_id: UtilsUUID7,
    request: Optional[MatchNotesRequest] = None,
    current_user: User = Depends(get_current_user),
    use_case: CompleteMatchUseCase = Depends(CompleteMatchUseCase.depends),
) -> MatchResponse:
    match = await use_case.execute(
        match_id=match_id,
        acting_user_id=current_user.id,
        notes=request.notes if request else None,
    )
    return MatchResponse.from_entity(match)
