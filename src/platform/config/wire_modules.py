"""
Wire Modules Configuration

Defines the modules that need dependency injection wiring.
Shared between production and test environments.
"""

from types import ModuleType

from src.service.exchange.app.command import (
    accept_match_use_case,
    cancel_match_use_case,
    complete_match_use_case,
    create_ticket_request_use_case,
    expire_matches_use_case,
    initiate_direct_match_use_case,
    initiate_match_use_case,
)
from src.service.exchange.app.query import (
    find_all_pairings_for_user_use_case,
    find_pairings_use_case,
    list_matches_use_case,
    list_notifications_use_case,
    list_ticket_requests_use_case,
)
from src.service.exchange.driving_adapter.http_controller.auth import current_user


WIRE_MODULES: list[ModuleType] = [
    create_ticket_request_use_case,
    initiate_match_use_case,
    initiate_direct_match_use_case,
    accept_match_use_case,
    cancel_match_use_case,
    complete_match_use_case,
    expire_matches_use_case,
    find_pairings_use_case,
    find_all_pairings_for_user_use_case,
    list_matches_use_case,
    list_ticket_requests_use_case,
    list_notifications_use_case,
    current_user,
]
