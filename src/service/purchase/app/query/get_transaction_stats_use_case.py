from typing import Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.service.purchase.app.dto.transaction_stats import TransactionStats
from src.service.purchase.app.interface.i_transaction_query_repo import ITransactionQueryRepo


class GetTransactionStatsUseCase:
    """Counts per status bucket; revenue only counts DONE transactions"""

    def __init__(self, *, transaction_query_repo: ITransactionQueryRepo):
        self.transaction_query_repo = transaction_query_repo

    @classmethod
    @inject
    def depends(
        cls,
        transaction_query_repo: ITransactionQueryRepo = Depends(
            Provide[Container.transaction_query_repo]
        ),
    ) -> Self:
        return cls(transaction_query_repo=transaction_query_repo)

    @Logger.io
    async def execute(
        self, *, user_id: Optional[int] = None, event_id: Optional[int] = None
    ) -> TransactionStats:
        return await self.transaction_query_repo.get_stats(user_id=user_id, event_id=event_id)
