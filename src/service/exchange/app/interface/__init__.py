"""Application layer interfaces (Ports)"""

from src.service.exchange.app.interface.i_match_command_repo import IMatchCommandRepo
from src.service.exchange.app.interface.i_match_event_handler import IMatchEventHandler
from src.service.exchange.app.interface.i_match_event_publisher import IMatchEventPublisher
from src.service.exchange.app.interface.i_match_query_repo import IMatchQueryRepo
from src.service.exchange.app.interface.i_reference_query_repo import (
    IGameQueryRepo,
    IUserQueryRepo,
)
from src.service.exchange.app.interface.i_side_effect_repo import (
    IAdminAuditLogRepo,
    IEmailService,
    INotificationRepo,
)
from src.service.exchange.app.interface.i_ticket_request_command_repo import (
    ITicketRequestCommandRepo,
)
from src.service.exchange.app.interface.i_ticket_request_query_repo import (
    ITicketRequestQueryRepo,
)

__all__ = [
    'IAdminAuditLogRepo',
    'IEmailService',
    'IGameQueryRepo',
    'IMatchCommandRepo',
    'IMatchEventHandler',
    'IMatchEventPublisher',
    'IMatchQueryRepo',
    'INotificationRepo',
    'ITicketRequestCommandRepo',
    'ITicketRequestQueryRepo',
    'IUserQueryRepo',
]
