from prometheus_client import Counter, Histogram


class ExchangeMetrics:
    """
    Ticket exchange core metrics

    Tracks match lifecycle transitions, matchmaking queries and side-effect delivery
    """

    def __init__(self) -> None:
        # ========== Match Lifecycle ==========
        self.match_transitions = Counter(
            'exchange_match_transitions_total',
            'Match lifecycle transitions',
            ['transition', 'result'],  # result: success/rejected
        )

        self.match_transition_duration = Histogram(
            'exchange_match_transition_duration_seconds',
            'Match lifecycle transition processing time',
            ['transition'],
            buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 2.0],
        )

        # ========== Matchmaking ==========
        self.pairing_queries = Counter(
            'exchange_pairing_queries_total',
            'Pairing discovery queries',
            ['source_kind', 'mode'],  # mode: best/all
        )

        self.pairing_candidates = Histogram(
            'exchange_pairing_candidates',
            'Candidates scanned per pairing query',
            ['source_kind'],
            buckets=[0, 1, 5, 10, 25, 50, 100, 250],
        )

        # ========== Side Effects ==========
        self.side_effect_failures = Counter(
            'exchange_side_effect_failures_total',
            'Lifecycle event handler failures (logged, never surfaced)',
            ['handler', 'event_type'],
        )

    # ========== Helper Methods ==========

    def record_transition(self, *, transition: str, result: str, duration: float) -> None:
        self.match_transitions.labels(transition=transition, result=result).inc()
        self.match_transition_duration.labels(transition=transition).observe(duration)

    def record_pairing_query(self, *, source_kind: str, mode: str, candidates: int) -> None:
        self.pairing_queries.labels(source_kind=source_kind, mode=mode).inc()
        self.pairing_candidates.labels(source_kind=source_kind).observe(candidates)

    def record_side_effect_failure(self, *, handler: str, event_type: str) -> None:
        self.side_effect_failures.labels(handler=handler, event_type=event_type).inc()


# Global metrics instance
metrics = ExchangeMetrics()
