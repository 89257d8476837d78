"""
Transaction Domain Events

Published after a status change has been committed. Subscribers (the
notification sender) must never be able to fail the transaction itself.
"""

from datetime import datetime
from typing import Optional, Protocol, runtime_checkable

import attrs

from src.service.purchase.domain.entity.event_entity import EventSnapshot
from src.service.purchase.domain.entity.transaction_entity import Transaction
from src.service.purchase.domain.entity.user_entity import UserEntity


DEFAULT_REJECTION_REASON = 'Your payment has been rejected. Seats have been restored.'


@runtime_checkable
class TransactionDomainEvent(Protocol):
    @property
    def transaction_id(self) -> int: ...

    @property
    def occurred_at(self) -> datetime: ...


@attrs.define(frozen=True)
class TransactionConfirmedEvent:
    """Fired when an admin moves a transaction to DONE"""

    transaction_id: int
    user_email: str
    user_name: str
    event_title: str
    total_idr: int
    transaction_date: datetime
    occurred_at: datetime = attrs.field(factory=datetime.now)

    @classmethod
    def from_transaction(
        cls, *, transaction: Transaction, user: UserEntity, event: EventSnapshot
    ) -> 'TransactionConfirmedEvent':
        return cls(
            transaction_id=transaction.id,  # type: ignore[arg-type]
            user_email=user.email,
            user_name=user.name,
            event_title=event.title,
            total_idr=transaction.total_idr,
            transaction_date=transaction.created_at or datetime.now(),
        )


@attrs.define(frozen=True)
class TransactionRejectedEvent:
    """Fired when an admin moves a transaction to REJECTED, after compensation ran"""

    transaction_id: int
    user_email: str
    user_name: str
    event_title: str
    total_idr: int
    transaction_date: datetime
    reason: str = DEFAULT_REJECTION_REASON
    occurred_at: datetime = attrs.field(factory=datetime.now)

    @classmethod
    def from_transaction(
        cls,
        *,
        transaction: Transaction,
        user: UserEntity,
        event: EventSnapshot,
        reason: Optional[str] = None,
    ) -> 'TransactionRejectedEvent':
        return cls(
            transaction_id=transaction.id,  # type: ignore[arg-type]
            user_email=user.email,
            user_name=user.name,
            event_title=event.title,
            total_idr=transaction.total_idr,
            transaction_date=transaction.created_at or datetime.now(),
            reason=reason or DEFAULT_REJECTION_REASON,
        )
