from prometheus_client import Counter


class PurchaseMetrics:
    """
    Purchase core metrics collector

    Tracks the transaction lifecycle and coupon consumption, plus the
    best-effort side effects whose failures never reach the caller.
    """

    def __init__(self) -> None:
        # ========== Transaction Metrics ==========
        self.transactions_created = Counter(
            'purchase_transactions_created_total',
            'Transaction creation attempts',
            ['result'],  # result: success / error class name
        )

        self.transaction_status_changes = Counter(
            'purchase_transaction_status_changes_total',
            'Committed transaction status transitions',
            ['from_status', 'to_status'],
        )

        self.compensation_failures = Counter(
            'purchase_compensation_failures_total',
            'Compensating actions that failed after a committed status change',
            ['step'],  # step: release_seat / rollback_coupon / refund_points
        )

        # ========== Coupon Metrics ==========
        self.coupon_consumptions = Counter(
            'purchase_coupon_consumptions_total',
            'Coupon redemptions and usages',
            ['coupon_type', 'path', 'result'],  # path: redeem / use / rollback
        )

        # ========== Notification Metrics ==========
        self.notification_failures = Counter(
            'purchase_notification_failures_total',
            'Notifications that could not be delivered',
            ['event_type'],
        )

    # ========== Helper Methods ==========

    def record_transaction_created(self, *, result: str) -> None:
        self.transactions_created.labels(result=result).inc()

    def record_status_change(self, *, from_status: str, to_status: str) -> None:
        self.transaction_status_changes.labels(from_status=from_status, to_status=to_status).inc()

    def record_compensation_failure(self, *, step: str) -> None:
        self.compensation_failures.labels(step=step).inc()

    def record_coupon_consumption(self, *, coupon_type: str, path: str, result: str) -> None:
        self.coupon_consumptions.labels(coupon_type=coupon_type, path=path, result=result).inc()

    def record_notification_failure(self, *, event_type: str) -> None:
        self.notification_failures.labels(event_type=event_type).inc()


# Global metrics instance
metrics = PurchaseMetrics()
