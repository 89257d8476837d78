from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from src.service.purchase.app.dto.transaction_detail import TransactionDetail
from src.service.purchase.app.dto.transaction_filter import TransactionFilter
from src.service.purchase.app.dto.transaction_stats import TransactionStats
from src.service.purchase.domain.entity.transaction_entity import Transaction


class ITransactionQueryRepo(ABC):
    """Repository interface for transaction read operations"""

    @abstractmethod
    async def get_by_id(self, *, transaction_id: int) -> Optional[Transaction]:
        pass

    @abstractmethod
    async def get_detail(self, *, transaction_id: int) -> Optional[TransactionDetail]:
        """Transaction joined with its buyer and event summaries"""
        pass

    @abstractmethod
    async def list_with_details(
        self, *, filters: TransactionFilter
    ) -> tuple[List[TransactionDetail], int]:
        """
        Returns:
            The requested page (newest first) and the total count matching the filters
        """
        pass

    @abstractmethod
    async def get_stats(
        self, *, user_id: Optional[int] = None, event_id: Optional[int] = None
    ) -> TransactionStats:
        pass

    @abstractmethod
    async def list_waiting_created_before(
        self, *, created_before: datetime, limit: int
    ) -> List[TransactionDetail]:
        """WAITING_FOR_PAYMENT transactions older than the cutoff, oldest first"""
        pass
