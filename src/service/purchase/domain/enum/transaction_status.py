from enum import StrEnum


class TransactionStatus(StrEnum):
    WAITING_FOR_PAYMENT = 'WAITING_FOR_PAYMENT'
    WAITING_FOR_ADMIN_CONFIRMATION = 'WAITING_FOR_ADMIN_CONFIRMATION'
    DONE = 'DONE'
    REJECTED = 'REJECTED'
    EXPIRED = 'EXPIRED'
    CANCELED = 'CANCELED'


ALLOWED_TRANSITIONS: dict[TransactionStatus, frozenset[TransactionStatus]] = {
    TransactionStatus.WAITING_FOR_PAYMENT: frozenset(
        {
            TransactionStatus.WAITING_FOR_ADMIN_CONFIRMATION,
            TransactionStatus.CANCELED,
            TransactionStatus.EXPIRED,
        }
    ),
    TransactionStatus.WAITING_FOR_ADMIN_CONFIRMATION: frozenset(
        {TransactionStatus.DONE, TransactionStatus.REJECTED}
    ),
    TransactionStatus.DONE: frozenset(),
    TransactionStatus.REJECTED: frozenset(),
    TransactionStatus.EXPIRED: frozenset(),
    TransactionStatus.CANCELED: frozenset(),
}

# Target states whose side effects give the seat (and coupon/points) back
COMPENSATED_STATUSES = frozenset({TransactionStatus.REJECTED, TransactionStatus.CANCELED})
