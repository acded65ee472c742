"""
Pairing scorer: compatibility between what one request offers and what another wants.

Five additive factors, evaluated in a fixed order with one reason line each:

    game (30) + section (20) + quantity (20) + price (20) + adjacency (10) = 100

The price factor can instead apply a -100 penalty when a seller donates tickets
to a buyer who did not ask for free ones, which pushes the pairing below zero.
"""

from typing import Optional

import attrs

from src.service.exchange.domain.entity.ticket_request_entity import (
    BuySideView,
    SellSideView,
    TicketRequest,
)
from src.service.exchange.domain.enum.price_status import PriceStatus
from src.service.exchange.domain.enum.ticket_kind import TicketKind
from src.service.exchange.domain.seating_format import section_label
from src.service.exchange.domain.value_object.scoring_weights import ScoringWeights


DEFAULT_WEIGHTS = ScoringWeights()


@attrs.frozen
class PairingScore:
    score: int
    reasons: tuple[str, ...]
    price_status: PriceStatus


def _fmt_price(value: Optional[float]) -> str:
    return f'${value:g}' if value is not None else 'n/a'


def _score_game(sell: SellSideView, buy: BuySideView, weights: ScoringWeights) -> tuple[int, str]:
    if buy.game_id is None:
        return weights.game, 'Buyer accepts any game'
    if buy.game_id == sell.game_id:
        return weights.game, 'Same game'
    return 0, 'Different game'


def _score_section(
    sell: SellSideView, buy: BuySideView, weights: ScoringWeights
) -> tuple[int, str]:
    if buy.section_type is not None and buy.section_type == sell.section_type:
        return weights.section, f'Same section ({section_label(sell.section_type)})'
    if buy.any_section:
        return weights.section // 2, f'Buyer accepts any section ({section_label(sell.section_type)})'
    return 0, (
        f'Different section ({section_label(sell.section_type)} offered, '
        f'{section_label(buy.section_type)} wanted)'
    )


def _score_quantity(
    sell: SellSideView, buy: BuySideView, weights: ScoringWeights
) -> tuple[int, str]:
    if sell.num_tickets >= buy.num_tickets:
        return weights.quantity, (
            f'Enough tickets ({sell.num_tickets} offered, {buy.num_tickets} wanted)'
        )
    return 0, f'Not enough tickets ({sell.num_tickets} offered, {buy.num_tickets} wanted)'


def _score_price(
    sell: SellSideView, buy: BuySideView, weights: ScoringWeights
) -> tuple[int, str, PriceStatus]:
    if sell.donating_free and buy.requesting_free:
        return weights.price, 'Free tickets for a free request', PriceStatus.DONATION_MATCH
    if sell.donating_free:
        return (
            weights.donation_mismatch_penalty,
            'Seller is donating but buyer did not request free tickets',
            PriceStatus.DONATION_MISMATCH,
        )
    if sell.min_price is not None and buy.max_price is not None:
        quote = f'{_fmt_price(sell.min_price)} asked, {_fmt_price(buy.max_price)} offered'
        if sell.min_price <= buy.max_price:
            return weights.price, f'Price compatible ({quote})', PriceStatus.COMPATIBLE
        overage = sell.min_price - buy.max_price
        if overage < buy.max_price * weights.negotiation_margin:
            return (
                weights.price // 2,
                f'Price within negotiation range ({quote})',
                PriceStatus.NEGOTIATION_LIKELY,
            )
        return 0, f'Price gap too large ({quote})', PriceStatus.NEGOTIATION_NEEDED
    return 0, 'Price information incomplete', PriceStatus.INCOMPLETE


def _score_adjacency(
    sell: SellSideView, buy: BuySideView, weights: ScoringWeights
) -> tuple[int, str]:
    if sell.tickets_together and buy.tickets_together:
        return weights.adjacency, 'Both want seats together'
    if not sell.tickets_together and not buy.tickets_together:
        return weights.adjacency // 2, 'Neither needs seats together'
    return 0, 'Seating preferences differ'


def score_pair(
    sell_side: SellSideView,
    buy_side: BuySideView,
    *,
    weights: ScoringWeights = DEFAULT_WEIGHTS,
) -> PairingScore:
    game_points, game_reason = _score_game(sell_side, buy_side, weights)
    section_points, section_reason = _score_section(sell_side, buy_side, weights)
    quantity_points, quantity_reason = _score_quantity(sell_side, buy_side, weights)
    price_points, price_reason, price_status = _score_price(sell_side, buy_side, weights)
    adjacency_points, adjacency_reason = _score_adjacency(sell_side, buy_side, weights)

    return PairingScore(
        score=game_points + section_points + quantity_points + price_points + adjacency_points,
        reasons=(game_reason, section_reason, quantity_reason, price_reason, adjacency_reason),
        price_status=price_status,
    )


def order_sides(
    source: TicketRequest, candidate: TicketRequest
) -> tuple[SellSideView, BuySideView]:
    """Put the offering side first whichever of the two requests is the source.

    Trade against trade compares the source's offer with the candidate's desire.
    """
    if source.kind == TicketKind.BUY:
        return candidate.as_sell_side(), source.as_buy_side()
    return source.as_sell_side(), candidate.as_buy_side()


def score_tickets(
    source: TicketRequest,
    candidate: TicketRequest,
    *,
    weights: ScoringWeights = DEFAULT_WEIGHTS,
) -> PairingScore:
    sell_side, buy_side = order_sides(source, candidate)
    return score_pair(sell_side, buy_side, weights=weights)
