from typing import List, Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace
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
from src.service.purchase.app.interface.i_event_inventory_repo import IEventInventoryRepo
from src.service.purchase.app.interface.i_transaction_command_repo import (
    ITransactionCommandRepo,
)
from src.service.purchase.app.interface.i_transaction_event_publisher import (
    ITransactionEventPublisher,
)
from src.service.purchase.app.interface.i_transaction_query_repo import ITransactionQueryRepo
from src.service.purchase.app.interface.i_user_points_repo import IUserPointsRepo
from src.service.purchase.domain.domain_event.transaction_domain_event import (
    TransactionConfirmedEvent,
    TransactionRejectedEvent,
)
from src.service.purchase.domain.entity.transaction_entity import Transaction
from src.service.purchase.domain.enum.transaction_status import TransactionStatus


class UpdateTransactionStatusUseCase:
    """
    Admin-driven status change.

    The write is guarded on the status that was validated, so two admins racing
    on the same transaction cannot both win. Side effects run after the commit:

    - DONE: confirmation notification
    - REJECTED: compensation, then rejection notification
    - CANCELED: compensation only

    Compensation failures surface as one RollbackError; the new status stays.
    """

    def __init__(
        self,
        *,
        transaction_query_repo: ITransactionQueryRepo,
        transaction_command_repo: ITransactionCommandRepo,
        event_inventory_repo: IEventInventoryRepo,
        user_points_repo: IUserPointsRepo,
        compensator: TransactionCompensator,
        event_publisher: ITransactionEventPublisher,
    ) -> None:
        self.transaction_query_repo = transaction_query_repo
        self.transaction_command_repo = transaction_command_repo
        self.event_inventory_repo = event_inventory_repo
        self.user_points_repo = user_points_repo
        self.compensator = compensator
        self.event_publisher = event_publisher
        self.tracer = trace.get_tracer(__name__)

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
        event_inventory_repo: IEventInventoryRepo = Depends(
            Provide[Container.event_inventory_repo]
        ),
        user_points_repo: IUserPointsRepo = Depends(Provide[Container.user_points_repo]),
        compensator: TransactionCompensator = Depends(
            Provide[Container.transaction_compensator]
        ),
        event_publisher: ITransactionEventPublisher = Depends(
            Provide[Container.transaction_event_publisher]
        ),
    ) -> Self:
        return cls(
            transaction_query_repo=transaction_query_repo,
            transaction_command_repo=transaction_command_repo,
            event_inventory_repo=event_inventory_repo,
            user_points_repo=user_points_repo,
            compensator=compensator,
            event_publisher=event_publisher,
        )

    @Logger.io
    async def execute(
        self,
        *,
        transaction_id: int,
        status: TransactionStatus,
        admin_notes: Optional[str] = None,
    ) -> Transaction:
        with self.tracer.start_as_current_span(
            'use_case.update_transaction_status',
            attributes={'transaction.id': transaction_id, 'transaction.status': status.value},
        ):
            try:
                updated = await self._write_status(
                    transaction_id=transaction_id, status=status, admin_notes=admin_notes
                )
            except SQLAlchemyError as e:
                raise PersistenceError(f'Failed to update transaction: {e}') from e

            failed_steps: List[str] = []
            if updated.needs_compensation():
                failed_steps = await self.compensator.compensate_transaction(transaction=updated)

            await self._notify(transaction=updated, reason=admin_notes)

            if failed_steps:
                raise RollbackError(
                    f'Transaction {transaction_id} is {status.value} but compensation failed: '
                    f'{", ".join(failed_steps)}',
                    failed_steps=failed_steps,
                )
            return updated

    async def _write_status(
        self,
        *,
        transaction_id: int,
        status: TransactionStatus,
        admin_notes: Optional[str],
    ) -> Transaction:
        transaction = await self.transaction_query_repo.get_by_id(transaction_id=transaction_id)
        if not transaction:
            raise NotFoundError('Transaction not found')

        transaction.validate_transition(status)

        updated = await self.transaction_command_repo.update_status_atomically(
            transaction_id=transaction_id,
            from_status=transaction.status,
            to_status=status,
            admin_notes=admin_notes,
        )
        if updated is None:
            # Someone else moved the row first, judge again against its fresh status
            fresh = await self.transaction_query_repo.get_by_id(transaction_id=transaction_id)
            if not fresh:
                raise NotFoundError('Transaction not found')
            fresh.validate_transition(status)
            raise ConflictError('Transaction was modified concurrently, please retry')

        metrics.record_status_change(from_status=transaction.status.value, to_status=status.value)
        Logger.base.info(
            f'🔄 [TRANSACTION] {transaction_id}: {transaction.status.value} -> {status.value}'
        )
        return updated

    async def _notify(self, *, transaction: Transaction, reason: Optional[str]) -> None:
        if transaction.status not in (TransactionStatus.DONE, TransactionStatus.REJECTED):
            return

        try:
            user = await self.user_points_repo.get_by_id(user_id=transaction.user_id)
            event = await self.event_inventory_repo.get_by_id(event_id=transaction.event_id)
        except Exception as e:
            metrics.record_notification_failure(event_type=transaction.status.value)
            Logger.base.error(f'📭 [NOTIFY] Cannot load recipient of {transaction.id}: {e}')
            return

        if not user or not event:
            metrics.record_notification_failure(event_type=transaction.status.value)
            Logger.base.warning(f'📭 [NOTIFY] Missing user or event for {transaction.id}')
            return

        if transaction.status == TransactionStatus.DONE:
            await self.event_publisher.publish(
                event=TransactionConfirmedEvent.from_transaction(
                    transaction=transaction, user=user, event=event
                )
            )
        else:
            await self.event_publisher.publish(
                event=TransactionRejectedEvent.from_transaction(
                    transaction=transaction, user=user, event=event, reason=reason
                )
            )
