from collections import Counter
from typing import Iterable, Sequence
from uuid_utils import UUID

from src.platform.exception.exceptions import ValidationError
from src.service.exchange.domain.entity.game_entity import Game
from src.service.exchange.domain.entity.ticket_request_entity import TicketRequest
from src.service.exchange.domain.enum.ticket_kind import TicketKind
from src.service.exchange.domain.enum.ticket_request_status import TicketRequestStatus
from src.service.exchange.domain.value_object.purchase_limits import PurchaseLimits


# Buy requests that still claim tickets for their owner
COUNTED_STATUSES = frozenset(
    {
        TicketRequestStatus.OPEN,
        TicketRequestStatus.PENDING,
        TicketRequestStatus.MATCHED,
        TicketRequestStatus.COMPLETED,
    }
)


def tickets_per_game(requests: Iterable[TicketRequest]) -> Counter[UUID]:
    held: Counter[UUID] = Counter()
    for request in requests:
        if (
            request.kind == TicketKind.BUY
            and request.game_id is not None
            and request.status in COUNTED_STATUSES
        ):
            held[request.game_id] += request.num_tickets
    return held


def check_purchase_limits(
    *,
    limits: PurchaseLimits,
    games_by_date: Sequence[Game],
    existing_requests: Iterable[TicketRequest],
    game_id: UUID,
    num_tickets: int,
) -> None:
    """Raise ValidationError when buying ``num_tickets`` more for ``game_id`` breaks a limit.

    Two limits apply: ``max_per_game`` tickets for a single game, and ``max_per_window``
    tickets across any ``window_games`` consecutive games (by date) that include it.
    """
    held = tickets_per_game(existing_requests)

    if held[game_id] + num_tickets > limits.max_per_game:
        raise ValidationError(
            f'Purchase limit reached: at most {limits.max_per_game} tickets per game '
            f'({held[game_id]} already requested)'
        )

    game_ids = [game.id for game in games_by_date]
    if game_id not in game_ids:
        return

    position = game_ids.index(game_id)
    first_start = max(0, position - limits.window_games + 1)
    for start in range(first_start, position + 1):
        window = game_ids[start : start + limits.window_games]
        total = sum(held[gid] for gid in window) + num_tickets
        if total > limits.max_per_window:
            raise ValidationError(
                f'Purchase limit reached: at most {limits.max_per_window} tickets across '
                f'any {limits.window_games} consecutive games'
            )
