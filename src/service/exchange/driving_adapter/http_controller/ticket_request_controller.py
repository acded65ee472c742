from typing import List, Optional

from fastapi import APIRouter, Depends, status
from opentelemetry import trace

from src.platform.logging.loguru_io import Logger
from src.platform.types.uuid7_utils_types import UtilsUUID7
from src.service.exchange.app.command.create_ticket_request_use_case import (
    CreateTicketRequestUseCase,
)
from src.service.exchange.app.query.list_matches_use_case import ListMatchesUseCase
from src.service.exchange.app.query.list_ticket_requests_use_case import (
    ListTicketRequestsUseCase,
)
from src.service.exchange.domain.entity.user_entity import User
from src.service.exchange.domain.enum.ticket_request_status import TicketRequestStatus
from src.service.exchange.driving_adapter.http_controller.auth.current_user import (
    get_current_user,
)
from src.service.exchange.driving_adapter.schema.match_schema import TicketMatchInfoResponse
from src.service.exchange.driving_adapter.schema.ticket_request_schema import (
    TicketRequestCreateRequest,
    TicketRequestResponse,
)


router = APIRouter()
tracer = trace.get_tracer(__name__)


@router.post('', status_code=status.HTTP_201_CREATED)
@Logger.io
async def create_ticket_request(
    request: TicketRequestCreateRequest,
    current_user: User = Depends(get_current_user),
    use_case: CreateTicketRequestUseCase = Depends(CreateTicketRequestUseCase.depends),
) -> TicketRequestResponse:
    with tracer.start_as_current_span('controller.create_ticket_request') as span:
        span.set_attribute('ticket.kind', request.kind)
        ticket = await use_case.create_ticket_request(
            owner_id=current_user.id,
            kind=request.kind,
            terms=request.to_terms(),
            game_id=request.game_id,
            num_tickets=request.num_tickets,
            tickets_together=request.tickets_together,
            notes=request.notes,
        )
        span.set_attribute('ticket.id', str(ticket.id))
        return TicketRequestResponse.from_entity(ticket)


@router.get('/my')
@Logger.io
async def list_my_ticket_requests(
    ticket_status: Optional[TicketRequestStatus] = None,
    current_user: User = Depends(get_current_user),
    use_case: ListTicketRequestsUseCase = Depends(ListTicketRequestsUseCase.depends),
) -> List[TicketRequestResponse]:
    tickets = await use_case.list_my_ticket_requests(owner_id=current_user.id, status=ticket_status)
    return [TicketRequestResponse.from_entity(ticket) for ticket in tickets]


@router.get('/my/match_info')
@Logger.io
async def get_my_match_info(
    current_user: User = Depends(get_current_user),
    use_case: ListMatchesUseCase = Depends(ListMatchesUseCase.depends),
) -> List[TicketMatchInfoResponse]:
    infos = await use_case.get_match_info_for_tickets(user_id=current_user.id)
    return [TicketMatchInfoResponse.from_dto(info) for info in infos]


@router.get('/{ticket_id}')
@Logger.io
async def get_ticket_request(
    ticket_id: UtilsUUID7,
    current_user: User = Depends(get_current_user),
    use_case: ListTicketRequestsUseCase = Depends(ListTicketRequestsUseCase.depends),
) -> TicketRequestResponse:
    ticket = await use_case.get_ticket_request(ticket_id=ticket_id, viewer_id=current_user.id)
    return TicketRequestResponse.from_entity(ticket)
