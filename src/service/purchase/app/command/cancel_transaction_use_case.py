from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from sqlalchemy.exc import SQLAlchemyError

from src.platform.config.di import Container
from src.platform.exception.exceptions import (
    ConflictError,
    NotFoundError,
    PersistenceError,
    RollbackError,
)
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.purchase_metrics import metrics
from src.service.purchase.app.command.transaction_compensator import TransactionCompensator
from src.service.purchase.app.interface.i_transaction_command_repo import (
    ITransactionCommandRepo,
)
from src.service.purchase.app.interface.i_transaction_query_repo import ITransactionQueryRepo
from src.service.purchase.domain.entity.transaction_entity import Transaction
from src.service.purchase.domain.enum.transaction_status import TransactionStatus


class CancelTransactionUseCase:
    """Owner cancels an unpaid transaction; the seat, coupon use and points are given back"""

    def __init__(
        self,
        *,
        transaction_query_repo: ITransactionQueryRepo,
        transaction_command_repo: ITransactionCommandRepo,
        compensator: TransactionCompensator,
    ) -> None:
        self.transaction_query_repo = transaction_query_repo
        self.transaction_command_repo = transaction_command_repo
        self.compensator = compensator

    @classmethod
    @inject
    def depends(
        cls,
        transaction_query_repo: ITransactionQueryRepo = Depends(
            Provide[Container.transaction_query_repo]
        ),
        transaction_command_repo: ITransactionCommandRepo = Depends(
            Provide[Container.transaction_command_repo]
        ),
        compensator: TransactionCompensator = Depends(
            Provide[Container.transaction_compensator]
        ),
    ) -> Self:
        return cls(
            transaction_query_repo=transaction_query_repo,
            transaction_command_repo=transaction_command_repo,
            compensator=compensator,
        )

    @Logger.io
    async def execute(self, *, transaction_id: int, user_id: int) -> Transaction:
        try:
            canceled = await self._write_canceled(transaction_id=transaction_id, user_id=user_id)
        except SQLAlchemyError as e:
            raise PersistenceError(f'Failed to cancel transaction: {e}') from e

        failed_steps = await self.compensator.compensate_transaction(transaction=canceled)
        if failed_steps:
            raise RollbackError(
                f'Transaction {transaction_id} is CANCELED but compensation failed: '
                f'{", ".join(failed_steps)}',
                failed_steps=failed_steps,
            )

        Logger.base.info(f'🚫 [CANCEL] Transaction {transaction_id} canceled by user {user_id}')
        return canceled

    async def _write_canceled(self, *, transaction_id: int, user_id: int) -> Transaction:
        transaction = await self.transaction_query_repo.get_by_id(transaction_id=transaction_id)
        if not transaction:
            raise NotFoundError('Transaction not found')

        transaction.validate_can_be_canceled_by(user_id)

        canceled = await self.transaction_command_repo.update_status_atomically(
            transaction_id=transaction_id,
            from_status=TransactionStatus.WAITING_FOR_PAYMENT,
            to_status=TransactionStatus.CANCELED,
        )
        if canceled is None:
            fresh = await self.transaction_query_repo.get_by_id(transaction_id=transaction_id)
            if not fresh:
                raise NotFoundError('Transaction not found')
            fresh.validate_can_be_canceled_by(user_id)
            raise ConflictError('Transaction was modified concurrently, please retry')

        metrics.record_status_change(
            from_status=TransactionStatus.WAITING_FOR_PAYMENT.value,
            to_status=TransactionStatus.CANCELED.value,
        )
        return canceled
