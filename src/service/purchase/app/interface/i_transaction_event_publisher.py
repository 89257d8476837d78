"""
Transaction Event Publisher Interface

Use cases publish domain events after the status change is committed.
Implementations are best-effort: delivery failures are logged and swallowed,
so publish() never raises into the caller.
"""

from abc import ABC, abstractmethod

from src.service.purchase.domain.domain_event.transaction_domain_event import (
    TransactionDomainEvent,
)


class ITransactionEventPublisher(ABC):
    @abstractmethod
    async def publish(self, *, event: TransactionDomainEvent) -> None:
        pass
