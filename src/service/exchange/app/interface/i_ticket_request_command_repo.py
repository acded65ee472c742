"""
Ticket Request Command Repository Interface

Writes to ticket request documents. Once a match references a ticket, its status is
only written through this port by the match lifecycle use cases.
"""

from abc import ABC, abstractmethod
from typing import Iterable, Optional

from uuid_utils import UUID

from src.service.exchange.domain.entity.ticket_request_entity import TicketRequest
from src.service.exchange.domain.enum.ticket_request_status import TicketRequestStatus
from src.service.exchange.domain.value_object.snapshot import CounterpartySnapshot


class ITicketRequestCommandRepo(ABC):
    @abstractmethod
    async def get_by_id(self, *, ticket_id: UUID) -> TicketRequest | None:
        pass

    @abstractmethod
    async def create(self, *, ticket_request: TicketRequest) -> TicketRequest:
        pass

    @abstractmethod
    async def compare_and_set_status(
        self,
        *,
        ticket_id: UUID,
        expected_status: TicketRequestStatus,
        new_status: TicketRequestStatus,
    ) -> TicketRequest | None:
        """
        Set status only if the stored status still equals ``expected_status``

        Args:
            ticket_id: Ticket request ID
            expected_status: Status the caller observed
            new_status: Status to write

        Returns:
            Updated ticket request, or None if it is missing or its status moved on
        """
        pass

    @abstractmethod
    async def update_lifecycle_state(
        self,
        *,
        ticket_id: UUID,
        expected_statuses: Iterable[TicketRequestStatus],
        status: TicketRequestStatus,
        counterparty_snapshot: Optional[CounterpartySnapshot] = None,
    ) -> TicketRequest | None:
        """
        Write status and counterparty snapshot together (snapshot None clears it)

        The write is skipped when the stored status is not one of ``expected_statuses``:
        a later transition of the same match already moved the ticket on.

        Returns:
            Updated ticket request, or None when the write was skipped

        Raises:
            NotFoundError: ticket request does not exist
        """
        pass
