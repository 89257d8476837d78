from datetime import datetime, timedelta, timezone
from typing import List, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.service.purchase.app.dto.transaction_detail import TransactionDetail
from src.service.purchase.app.interface.i_transaction_query_repo import ITransactionQueryRepo


class ListExpiringTransactionsUseCase:
    """
    Unpaid transactions past the payment window, oldest first.

    Read-only: moving them to EXPIRED is an admin status update.
    """

    def __init__(self, *, transaction_query_repo: ITransactionQueryRepo, payment_window_hours: int):
        self.transaction_query_repo = transaction_query_repo
        self.payment_window_hours = payment_window_hours

    @classmethod
    @inject
    def depends(
        cls,
        transaction_query_repo: ITransactionQueryRepo = Depends(
            Provide[Container.transaction_query_repo]
        ),
        payment_window_hours: int = Depends(Provide[Container.payment_window_hours]),
    ) -> Self:
        return cls(
            transaction_query_repo=transaction_query_repo,
            payment_window_hours=payment_window_hours,
        )

    @Logger.io
    async def execute(self, *, limit: int = 10) -> List[TransactionDetail]:
        cutoff = datetime.now(timezone.utc) - timedelta(hours=self.payment_window_hours)
        return await self.transaction_query_repo.list_waiting_created_before(
            created_before=cutoff, limit=limit
        )
