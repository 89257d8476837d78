from datetime import datetime, timezone
from typing import AsyncContextManager, Callable, Optional

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.purchase.app.interface.i_transaction_command_repo import (
    ITransactionCommandRepo,
)
from src.service.purchase.domain.entity.transaction_entity import Transaction
from src.service.purchase.domain.enum.transaction_status import TransactionStatus
from src.service.purchase.driven_adapter.model.transaction_model import TransactionModel
from src.service.purchase.driven_adapter.repo.transaction_query_repo_impl import (
    TransactionQueryRepoImpl,
)


class TransactionCommandRepoImpl(ITransactionCommandRepo):
    def __init__(self, session_factory: Callable[..., AsyncContextManager[AsyncSession]]) -> None:
        self.session_factory = session_factory

    @Logger.io
    async def create(self, *, transaction: Transaction) -> Transaction:
        transaction_model = TransactionModel(
            user_id=transaction.user_id,
            event_id=transaction.event_id,
            coupon_id=transaction.coupon_id,
            status=transaction.status.value,
            total_idr=transaction.total_idr,
            points_used=transaction.points_used,
            admin_notes=transaction.admin_notes,
        )
        async with self.session_factory() as session:
            session.add(transaction_model)
            await session.commit()
            await session.refresh(transaction_model)

            return TransactionQueryRepoImpl.to_entity(transaction_model)

    @Logger.io
    async def update_status_atomically(
        self,
        *,
        transaction_id: int,
        from_status: TransactionStatus,
        to_status: TransactionStatus,
        admin_notes: Optional[str] = None,
    ) -> Optional[Transaction]:
        values: dict = {'status': to_status.value, 'updated_at': datetime.now(timezone.utc)}
        if admin_notes is not None:
            values['admin_notes'] = admin_notes

        stmt = (
            update(TransactionModel)
            .where(TransactionModel.id == transaction_id)
            .where(TransactionModel.status == from_status.value)
            .values(**values)
            .returning(TransactionModel)
            .execution_options(synchronize_session=False)
        )
        async with self.session_factory() as session:
            result = await session.execute(stmt)
            transaction_model = result.scalar_one_or_none()
            await session.commit()

            if not transaction_model:
                return None

            return TransactionQueryRepoImpl.to_entity(transaction_model)
