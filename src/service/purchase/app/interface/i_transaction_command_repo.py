from abc import ABC, abstractmethod
from typing import Optional

from src.service.purchase.domain.entity.transaction_entity import Transaction
from src.service.purchase.domain.enum.transaction_status import TransactionStatus


class ITransactionCommandRepo(ABC):
    """Repository interface for transaction write operations"""

    @abstractmethod
    async def create(self, *, transaction: Transaction) -> Transaction:
        pass

    @abstractmethod
    async def update_status_atomically(
        self,
        *,
        transaction_id: int,
        from_status: TransactionStatus,
        to_status: TransactionStatus,
        admin_notes: Optional[str] = None,
    ) -> Optional[Transaction]:
        """
        Write the new status only if the row still holds from_status.

        Returns:
            The updated transaction, or None when a concurrent writer got there first
        """
        pass
