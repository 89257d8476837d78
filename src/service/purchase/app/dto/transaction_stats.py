import attrs


@attrs.define(frozen=True)
class TransactionStats:
    total: int = 0
    revenue_idr: int = 0
    pending: int = 0
    completed: int = 0
    rejected: int = 0
    canceled: int = 0
    expired: int = 0
