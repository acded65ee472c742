"""
Match Command Repository Interface

The store guards every match status change with a compare-and-set on the
previously observed status, so two concurrent transitions from the same
state cannot both succeed.
"""

from abc import ABC, abstractmethod

from uuid_utils import UUID

from src.service.exchange.domain.entity.match_entity import Match
from src.service.exchange.domain.entity.ticket_request_entity import TicketRequest
from src.service.exchange.domain.enum.match_status import MatchStatus


class IMatchCommandRepo(ABC):
    @abstractmethod
    async def get_by_id(self, *, match_id: UUID) -> Match | None:
        pass

    @abstractmethod
    async def create(self, *, match: Match) -> Match:
        pass

    @abstractmethod
    async def compare_and_set(self, *, match: Match, expected_status: MatchStatus) -> bool:
        """
        Replace the stored match with ``match`` if its stored status is ``expected_status``

        Args:
            match: Match after the transition
            expected_status: Status the transition was validated against

        Returns:
            True if written, False if another writer got there first
        """
        pass

    @abstractmethod
    async def create_direct_match_atomically(
        self, *, created_ticket: TicketRequest, match: Match, target_ticket_id: UUID
    ) -> TicketRequest | None:
        """
        Single unit of work for a direct match:
        target open -> pending, insert the proxy ticket, insert the match

        Args:
            created_ticket: Proxy ticket for the acting user (already pending)
            match: Freshly initiated match between the two
            target_ticket_id: Ticket the user matched against

        Returns:
            Target ticket after the flip, or None if it was no longer open (nothing written)
        """
        pass
