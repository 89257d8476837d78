from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.exception.exceptions import ValidationError
from src.platform.logging.loguru_io import Logger
from src.service.purchase.app.dto.page import Page
from src.service.purchase.app.dto.transaction_detail import TransactionDetail
from src.service.purchase.app.dto.transaction_filter import TransactionFilter
from src.service.purchase.app.interface.i_transaction_query_repo import ITransactionQueryRepo


class ListTransactionsUseCase:
    def __init__(self, *, transaction_query_repo: ITransactionQueryRepo, max_limit: int = 100):
        self.transaction_query_repo = transaction_query_repo
        self.max_limit = max_limit

    @classmethod
    @inject
    def depends(
        cls,
        transaction_query_repo: ITransactionQueryRepo = Depends(
            Provide[Container.transaction_query_repo]
        ),
        max_limit: int = Depends(Provide[Container.max_page_limit]),
    ) -> Self:
        return cls(transaction_query_repo=transaction_query_repo, max_limit=max_limit)

    @Logger.io
    async def execute(self, *, filters: TransactionFilter) -> Page[TransactionDetail]:
        if filters.page < 1:
            raise ValidationError('page must be at least 1')
        if not 1 <= filters.limit <= self.max_limit:
            raise ValidationError(f'limit must be between 1 and {self.max_limit}')
        if (
            filters.min_amount is not None
            and filters.max_amount is not None
            and filters.min_amount > filters.max_amount
        ):
            raise ValidationError('min_amount cannot exceed max_amount')

        items, total = await self.transaction_query_repo.list_with_details(filters=filters)
        return Page(items=items, page=filters.page, limit=filters.limit, total=total)

    @Logger.io
    async def list_by_user(
        self, *, user_id: int, page: int = 1, limit: int = 10
    ) -> Page[TransactionDetail]:
        return await self.execute(filters=TransactionFilter(user_id=user_id, page=page, limit=limit))

    @Logger.io
    async def list_by_organizer(
        self, *, organizer_id: int, page: int = 1, limit: int = 10
    ) -> Page[TransactionDetail]:
        return await self.execute(
            filters=TransactionFilter(organizer_id=organizer_id, page=page, limit=limit)
        )
