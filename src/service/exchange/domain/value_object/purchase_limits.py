import attrs


@attrs.frozen
class PurchaseLimits:
    max_per_game: int = 2
    max_per_window: int = 3
    window_games: int = 4
