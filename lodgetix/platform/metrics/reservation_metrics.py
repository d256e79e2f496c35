from prometheus_client import Counter, Gauge, Histogram


class ReservationMetrics:
    """Prometheus collectors for the reservation orchestrator and realtime layer"""

    def __init__(self) -> None:
        # ========== Reservation Business Metrics ==========
        self.reservation_requests = Counter(
            'lodgetix_reservation_requests_total',
            'Total ticket reservation requests',
            ['result', 'error_kind'],
        )

        self.reservation_duration = Histogram(
            'lodgetix_reservation_duration_seconds',
            'Ticket reservation round-trip time',
            ['result'],
            buckets=[0.01, 0.05, 0.1, 0.2, 0.5, 1.0, 2.0, 5.0, 10.0],
        )

        self.tickets_reserved = Counter(
            'lodgetix_tickets_reserved_total',
            'Tickets placed on hold',
        )

        self.reservation_completions = Counter(
            'lodgetix_reservation_completions_total',
            'Reservation completion attempts',
            ['result', 'error_kind'],
        )

        self.availability_queries = Counter(
            'lodgetix_availability_queries_total',
            'Availability lookups',
            ['result'],  # ok/error/timed_out
        )

        # ========== Realtime Metrics ==========
        self.realtime_channels_active = Gauge(
            'lodgetix_realtime_channels_active',
            'Realtime channels currently subscribed',
            ['kind'],  # presence/system/availability/ticket
        )

        self.client_storage_failures = Counter(
            'lodgetix_client_storage_failures_total',
            'Client storage operations that did not complete',
            ['operation', 'outcome'],
        )

    # ========== Helper Methods ==========

    def record_reservation(self, *, result: str, error_kind: str, duration: float, tickets: int):
        self.reservation_requests.labels(result=result, error_kind=error_kind).inc()
        self.reservation_duration.labels(result=result).observe(duration)
        if tickets:
            self.tickets_reserved.inc(tickets)

    def record_completion(self, *, result: str, error_kind: str):
        self.reservation_completions.labels(result=result, error_kind=error_kind).inc()

    def record_availability_query(self, *, result: str):
        self.availability_queries.labels(result=result).inc()

    def channel_opened(self, *, kind: str):
        self.realtime_channels_active.labels(kind=kind).inc()

    def channel_closed(self, *, kind: str):
        self.realtime_channels_active.labels(kind=kind).dec()

    def record_storage_failure(self, *, operation: str, outcome: str):
        self.client_storage_failures.labels(operation=operation, outcome=outcome).inc()


# Global metrics instance
metrics = ReservationMetrics()
