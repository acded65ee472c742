from abc import ABC, abstractmethod
from typing import Optional

from uuid_utils import UUID

from src.service.exchange.domain.entity.ticket_request_entity import TicketRequest
from src.service.exchange.domain.enum.ticket_kind import TicketKind
from src.service.exchange.domain.enum.ticket_request_status import TicketRequestStatus


class ITicketRequestQueryRepo(ABC):
    @abstractmethod
    async def get_by_id(self, *, ticket_id: UUID) -> TicketRequest | None:
        pass

    @abstractmethod
    async def find_candidates(
        self,
        *,
        kind: TicketKind,
        game_id: Optional[UUID],
        exclude_owner_id: UUID,
        include_any_game: bool = False,
        status: TicketRequestStatus = TicketRequestStatus.OPEN,
    ) -> list[TicketRequest]:
        """
        Requests of ``kind`` in ``status`` not owned by ``exclude_owner_id``

        Args:
            kind: Kind to look for (opposite of the source)
            game_id: Same-game filter; None searches every game
            exclude_owner_id: Owner of the source request
            include_any_game: With a ``game_id``, also return requests that name no game
            status: Status filter

        Returns:
            Matching requests in store order
        """
        pass

    @abstractmethod
    async def list_by_owner(
        self, *, owner_id: UUID, status: Optional[TicketRequestStatus] = None
    ) -> list[TicketRequest]:
        pass
