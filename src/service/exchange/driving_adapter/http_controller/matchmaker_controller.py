from typing import List

from fastapi import APIRouter, Depends

from src.platform.logging.loguru_io import Logger
from src.platform.types.uuid7_utils_types import UtilsUUID7
from src.service.exchange.app.query.find_all_pairings_for_user_use_case import (
    FindAllPairingsForUserUseCase,
)
from src.service.exchange.app.query.find_pairings_use_case import FindPairingsUseCase
from src.service.exchange.domain.entity.user_entity import User
from src.service.exchange.driving_adapter.http_controller.auth.current_user import (
    get_current_user,
)
from src.service.exchange.driving_adapter.schema.pairing_schema import (
    PairingResponse,
    PairingResultResponse,
)


router = APIRouter()


@router.get('/ticket/{ticket_id}/pairings')
@Logger.io
async def find_pairings(
    ticket_id: UtilsUUID7,
    include_all: bool = False,
    current_user: User = Depends(get_current_user),
    use_case: FindPairingsUseCase = Depends(FindPairingsUseCase.depends),
) -> PairingResultResponse:
    result = await use_case.find_pairings(ticket_id=ticket_id, include_all=include_all)
    return PairingResultResponse.from_dto(result)


@router.get('/ticket/{ticket_id}/best')
@Logger.io
async def find_best_pairings(
    ticket_id: UtilsUUID7,
    current_user: User = Depends(get_current_user),
    use_case: FindPairingsUseCase = Depends(FindPairingsUseCase.depends),
) -> PairingResultResponse:
    result = await use_case.find_best_pairings(ticket_id=ticket_id)
    return PairingResultResponse.from_dto(result)


@router.get('/my')
@Logger.io
async def find_all_my_pairings(
    include_all: bool = False,
    current_user: User = Depends(get_current_user),
    use_case: FindAllPairingsForUserUseCase = Depends(FindAllPairingsForUserUseCase.depends),
) -> List[PairingResultResponse]:
    results = await use_case.execute(user_id=current_user.id, include_all=include_all)
    return [PairingResultResponse.from_dto(result) for result in results]


@router.get('/score')
@Logger.io
async def score_pair(
    source_ticket_id: UtilsUUID7,
    candidate_ticket_id: UtilsUUID7,
    current_user: User = Depends(get_current_user),
    use_case: FindPairingsUseCase = Depends(FindPairingsUseCase.depends),
) -> PairingResponse:
    pairing = await use_case.score_tickets(
        source_ticket_id=source_ticket_id, candidate_ticket_id=candidate_ticket_id
    )
    return PairingResponse.from_dto(pairing)
