from prometheus_client import Counter, Gauge


class SeatLockMetrics:
    """
    Seat Lock Core Metrics Collector

    Tracks lock operation outcomes and the seat status distribution
    """

    def __init__(self):
        # ========== Lock Operation Metrics ==========
        self.lock_operations = Counter(
            'seat_lock_operations_total',
            'Total seat lock operations',
            ['operation', 'result'],  # operation: acquire/confirm/release, result: ok/<error kind>
        )

        self.expired_locks_swept = Counter(
            'seat_lock_expired_swept_total',
            'Locks reclaimed by the expiry sweep',
        )

        # ========== Seat Status Metrics ==========
        self.seats_by_status = Gauge(
            'seat_lock_seats',
            'Seats per status at the last snapshot',
            ['status'],
        )

    # ========== Helper Methods ==========

    def record_lock_operation(self, *, operation: str, result: str):
        self.lock_operations.labels(operation=operation, result=result).inc()

    def record_swept(self, *, count: int):
        if count:
            self.expired_locks_swept.inc(count)

    def update_seat_status_counts(self, *, counts: dict[str, int]):
        for status, count in counts.items():
            self.seats_by_status.labels(status=status).set(count)


# Global metrics instance
metrics = SeatLockMetrics()
