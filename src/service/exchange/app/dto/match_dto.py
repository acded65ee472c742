from typing import Optional

import attrs

from src.service.exchange.domain.entity.match_entity import Match
from src.service.exchange.domain.entity.ticket_request_entity import TicketRequest


@attrs.frozen
class DirectMatchResult:
    match: Match
    created_ticket: TicketRequest  # proxy request for the acting user, already pending
    target_ticket: TicketRequest


@attrs.frozen
class TicketMatchInfo:
    """A user's ticket with the unresolved match currently holding it, if any"""

    ticket: TicketRequest
    match: Optional[Match]
    awaiting_my_action: bool
