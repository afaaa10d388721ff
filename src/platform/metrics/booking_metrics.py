from prometheus_client import Counter, Histogram


class BookingMetrics:
    """
    Cinema booking core metrics

    Tracks reservation outcomes and latency, seat contention, cancellations and
    what the consistency audit and reconciliation sweep find.
    """

    def __init__(self):
        # ========== Reservation Metrics ==========
        self.reservation_requests = Counter(
            'seat_reservation_requests_total',
            'Total seat reservation requests',
            ['result'],  # confirmed, replayed or an error code such as SeatConflict
        )

        self.reservation_duration = Histogram(
            'seat_reservation_duration_seconds',
            'Seat reservation processing time',
            ['result'],
            buckets=[0.005, 0.01, 0.05, 0.1, 0.2, 0.5, 1.0, 2.0, 5.0, 10.0],
        )

        self.seats_reserved = Counter(
            'seats_reserved_total', 'Seats confirmed by successful reservations'
        )

        self.seat_conflicts = Counter(
            'seat_conflicts_total', 'Reservations that lost a seat race'
        )

        # ========== Ledger Metrics ==========
        self.bookings_cancelled = Counter(
            'bookings_cancelled_total',
            'Bookings moved to cancelled',
            ['reason'],  # requested/seat_conflict/storage_failure/abandoned
        )

        # ========== Consistency Metrics ==========
        self.audit_findings = Counter(
            'consistency_audit_findings_total',
            'Findings reported by the consistency audit',
            ['kind', 'severity'],
        )

    # ========== Helper Methods ==========

    def record_reservation(self, *, result: str, duration: float, seat_count: int = 0):
        self.reservation_requests.labels(result=result).inc()
        self.reservation_duration.labels(result=result).observe(duration)
        if result == 'confirmed':
            self.seats_reserved.inc(seat_count)
        elif result == 'SeatConflict':
            self.seat_conflicts.inc()

    def record_cancellation(self, *, reason: str, count: int = 1):
        self.bookings_cancelled.labels(reason=reason).inc(count)

    def record_audit_finding(self, *, kind: str, severity: str):
        self.audit_findings.labels(kind=kind, severity=severity).inc()


# Global metrics instance
metrics = BookingMetrics()
