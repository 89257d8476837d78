from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.purchase.app.dto.transaction_detail import TransactionDetail
from src.service.purchase.app.interface.i_transaction_query_repo import ITransactionQueryRepo


class GetTransactionUseCase:
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
    async def execute(self, *, transaction_id: int) -> TransactionDetail:
        detail = await self.transaction_query_repo.get_detail(transaction_id=transaction_id)
        if not detail:
            raise NotFoundError('Transaction not found')
        return detail
