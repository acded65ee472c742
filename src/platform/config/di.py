"""
https://python-dependency-injector.ets-labs.org/index.html
https://python-dependency-injector.ets-labs.org/examples/fastapi-sqlalchemy.html
"""

from datetime import timedelta
from typing import Optional

from dependency_injector import containers, providers

from src.platform.config.core_setting import Settings
from src.service.exchange.app.interface.i_match_event_publisher import IMatchEventPublisher
from src.service.exchange.domain.value_object.purchase_limits import PurchaseLimits
from src.service.exchange.domain.value_object.scoring_weights import ScoringWeights
from src.service.exchange.driven_adapter.email.mock_email_service import MockEmailService
from src.service.exchange.driven_adapter.event.admin_audit_handler_impl import (
    AdminAuditHandlerImpl,
)
from src.service.exchange.driven_adapter.event.match_event_publisher_impl import (
    MatchEventPublisherImpl,
)
from src.service.exchange.driven_adapter.event.match_notification_handler_impl import (
    MatchNotificationHandlerImpl,
)
from src.service.exchange.driven_adapter.repo.in_memory.document_store import (
    InMemoryDocumentStore,
)
from src.service.exchange.driven_adapter.repo.in_memory.match_repo_impl import (
    MatchCommandRepoInMemoryImpl,
    MatchQueryRepoInMemoryImpl,
)
from src.service.exchange.driven_adapter.repo.in_memory.reference_repo_impl import (
    GameQueryRepoInMemoryImpl,
    UserQueryRepoInMemoryImpl,
)
from src.service.exchange.driven_adapter.repo.in_memory.side_effect_repo_impl import (
    AdminAuditLogRepoInMemoryImpl,
    NotificationRepoInMemoryImpl,
)
from src.service.exchange.driven_adapter.repo.in_memory.ticket_request_repo_impl import (
    TicketRequestCommandRepoInMemoryImpl,
    TicketRequestQueryRepoInMemoryImpl,
)
from src.service.exchange.driven_adapter.repo.kvrocks.match_repo_impl import (
    MatchCommandRepoKvrocksImpl,
    MatchQueryRepoKvrocksImpl,
)
from src.service.exchange.driven_adapter.repo.kvrocks.reference_repo_impl import (
    GameQueryRepoKvrocksImpl,
    UserQueryRepoKvrocksImpl,
)
from src.service.exchange.driven_adapter.repo.kvrocks.side_effect_repo_impl import (
    AdminAuditLogRepoKvrocksImpl,
    NotificationRepoKvrocksImpl,
)
from src.service.exchange.driven_adapter.repo.kvrocks.ticket_request_repo_impl import (
    TicketRequestCommandRepoKvrocksImpl,
    TicketRequestQueryRepoKvrocksImpl,
)


def build_scoring_weights(settings: Settings) -> ScoringWeights:
    return ScoringWeights(
        game=settings.SCORE_WEIGHT_GAME,
        section=settings.SCORE_WEIGHT_SECTION,
        quantity=settings.SCORE_WEIGHT_QUANTITY,
        price=settings.SCORE_WEIGHT_PRICE,
        adjacency=settings.SCORE_WEIGHT_ADJACENCY,
        donation_mismatch_penalty=settings.SCORE_DONATION_MISMATCH_PENALTY,
        negotiation_margin=settings.SCORE_NEGOTIATION_MARGIN,
        acceptance_ratio=settings.MATCH_ACCEPTANCE_RATIO,
    )


def build_purchase_limits(settings: Settings) -> PurchaseLimits:
    return PurchaseLimits(
        max_per_game=settings.PURCHASE_MAX_TICKETS_PER_GAME,
        max_per_window=settings.PURCHASE_MAX_TICKETS_PER_WINDOW,
        window_games=settings.PURCHASE_WINDOW_GAMES,
    )


def build_match_ttl(settings: Settings) -> Optional[timedelta]:
    return timedelta(hours=settings.MATCH_TTL_HOURS) if settings.MATCH_TTL_HOURS else None


class Container(containers.DeclarativeContainer):
    # Configuration
    config_service = providers.Singleton(Settings)

    # Background task group (set by main.py lifespan)
    # Used for fire-and-forget tasks like event publishing
    task_group = providers.Object(None)

    # Domain tuning
    scoring_weights = providers.Singleton(build_scoring_weights, config_service)
    purchase_limits = providers.Singleton(build_purchase_limits, config_service)
    match_ttl = providers.Singleton(build_match_ttl, config_service)
    best_pairings_limit = providers.Callable(
        lambda settings: settings.BEST_PAIRINGS_LIMIT, config_service
    )

    # In-process store (memory backend)
    in_memory_store = providers.Singleton(InMemoryDocumentStore)

    # Repositories (memory or kvrocks, picked by EXCHANGE_STORE_BACKEND)
    ticket_request_command_repo = providers.Selector(
        config_service.provided.EXCHANGE_STORE_BACKEND,
        memory=providers.Singleton(TicketRequestCommandRepoInMemoryImpl, store=in_memory_store),
        kvrocks=providers.Singleton(TicketRequestCommandRepoKvrocksImpl),
    )
    ticket_request_query_repo = providers.Selector(
        config_service.provided.EXCHANGE_STORE_BACKEND,
        memory=providers.Singleton(TicketRequestQueryRepoInMemoryImpl, store=in_memory_store),
        kvrocks=providers.Singleton(TicketRequestQueryRepoKvrocksImpl),
    )
    match_command_repo = providers.Selector(
        config_service.provided.EXCHANGE_STORE_BACKEND,
        memory=providers.Singleton(MatchCommandRepoInMemoryImpl, store=in_memory_store),
        kvrocks=providers.Singleton(MatchCommandRepoKvrocksImpl),
    )
    match_query_repo = providers.Selector(
        config_service.provided.EXCHANGE_STORE_BACKEND,
        memory=providers.Singleton(MatchQueryRepoInMemoryImpl, store=in_memory_store),
        kvrocks=providers.Singleton(MatchQueryRepoKvrocksImpl),
    )
    game_query_repo = providers.Selector(
        config_service.provided.EXCHANGE_STORE_BACKEND,
        memory=providers.Singleton(GameQueryRepoInMemoryImpl, store=in_memory_store),
        kvrocks=providers.Singleton(GameQueryRepoKvrocksImpl),
    )
    user_query_repo = providers.Selector(
        config_service.provided.EXCHANGE_STORE_BACKEND,
        memory=providers.Singleton(UserQueryRepoInMemoryImpl, store=in_memory_store),
        kvrocks=providers.Singleton(UserQueryRepoKvrocksImpl),
    )
    notification_repo = providers.Selector(
        config_service.provided.EXCHANGE_STORE_BACKEND,
        memory=providers.Singleton(NotificationRepoInMemoryImpl, store=in_memory_store),
        kvrocks=providers.Singleton(NotificationRepoKvrocksImpl),
    )
    admin_audit_log_repo = providers.Selector(
        config_service.provided.EXCHANGE_STORE_BACKEND,
        memory=providers.Singleton(AdminAuditLogRepoInMemoryImpl, store=in_memory_store),
        kvrocks=providers.Singleton(AdminAuditLogRepoKvrocksImpl),
    )

    # Side effects
    email_service = providers.Singleton(MockEmailService)
    match_notification_handler = providers.Singleton(
        MatchNotificationHandlerImpl,
        user_query_repo=user_query_repo,
        notification_repo=notification_repo,
        email_service=email_service,
    )
    admin_audit_handler = providers.Singleton(
        AdminAuditHandlerImpl,
        audit_log_repo=admin_audit_log_repo,
    )
    match_event_publisher: providers.Provider[IMatchEventPublisher] = providers.Singleton(
        MatchEventPublisherImpl,
        handlers=providers.List(match_notification_handler, admin_audit_handler),
        task_group=task_group.provider,
    )


container = Container()


def setup() -> None:
    container.config_service()


def cleanup() -> None:
    container.reset_singletons()
