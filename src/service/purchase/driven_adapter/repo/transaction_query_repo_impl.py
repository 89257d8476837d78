from datetime import datetime
from typing import AsyncContextManager, Callable, List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from src.platform.logging.loguru_io import Logger
from src.service.purchase.app.dto.transaction_detail import (
    EventSummary,
    TransactionDetail,
    UserSummary,
)
from src.service.purchase.app.dto.transaction_filter import TransactionFilter
from src.service.purchase.app.dto.transaction_stats import TransactionStats
from src.service.purchase.app.interface.i_transaction_query_repo import ITransactionQueryRepo
from src.service.purchase.domain.entity.transaction_entity import Transaction
from src.service.purchase.domain.enum.transaction_status import TransactionStatus
from src.service.purchase.driven_adapter.model.event_model import EventModel
from src.service.purchase.driven_adapter.model.transaction_model import TransactionModel


class TransactionQueryRepoImpl(ITransactionQueryRepo):
    def __init__(self, session_factory: Callable[..., AsyncContextManager[AsyncSession]]) -> None:
        self.session_factory = session_factory

    @Logger.io
    async def get_by_id(self, *, transaction_id: int) -> Optional[Transaction]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(TransactionModel).where(TransactionModel.id == transaction_id)
            )
            transaction_model = result.scalar_one_or_none()

            return self.to_entity(transaction_model) if transaction_model else None

    @Logger.io
    async def get_detail(self, *, transaction_id: int) -> Optional[TransactionDetail]:
        query = (
            select(TransactionModel)
            .options(selectinload(TransactionModel.user), selectinload(TransactionModel.event))
            .where(TransactionModel.id == transaction_id)
        )
        async with self.session_factory() as session:
            result = await session.execute(query)
            transaction_model = result.scalar_one_or_none()

            return self._to_detail(transaction_model) if transaction_model else None

    @Logger.io
    async def list_with_details(
        self, *, filters: TransactionFilter
    ) -> tuple[List[TransactionDetail], int]:
        conditions = self._build_conditions(filters)

        query = (
            select(TransactionModel)
            .options(selectinload(TransactionModel.user), selectinload(TransactionModel.event))
            .where(*conditions)
            .order_by(TransactionModel.created_at.desc(), TransactionModel.id.desc())
            .offset(filters.offset)
            .limit(filters.limit)
        )
        count_query = select(func.count()).select_from(TransactionModel).where(*conditions)

        async with self.session_factory() as session:
            total = (await session.execute(count_query)).scalar_one()
            result = await session.execute(query)
            items = [self._to_detail(model) for model in result.scalars().all()]

            return items, total

    @Logger.io
    async def get_stats(
        self, *, user_id: Optional[int] = None, event_id: Optional[int] = None
    ) -> TransactionStats:
        query = select(
            TransactionModel.status,
            func.count(TransactionModel.id),
            func.coalesce(func.sum(TransactionModel.total_idr), 0),
        ).group_by(TransactionModel.status)
        if user_id is not None:
            query = query.where(TransactionModel.user_id == user_id)
        if event_id is not None:
            query = query.where(TransactionModel.event_id == event_id)

        async with self.session_factory() as session:
            result = await session.execute(query)
            rows = result.all()

        counts = {TransactionStatus(status): count for status, count, _ in rows}
        revenue = sum(amount for status, _, amount in rows if status == TransactionStatus.DONE)
        return TransactionStats(
            total=sum(counts.values()),
            revenue_idr=int(revenue),
            pending=counts.get(TransactionStatus.WAITING_FOR_PAYMENT, 0)
            + counts.get(TransactionStatus.WAITING_FOR_ADMIN_CONFIRMATION, 0),
            completed=counts.get(TransactionStatus.DONE, 0),
            rejected=counts.get(TransactionStatus.REJECTED, 0),
            canceled=counts.get(TransactionStatus.CANCELED, 0),
            expired=counts.get(TransactionStatus.EXPIRED, 0),
        )

    @Logger.io
    async def list_waiting_created_before(
        self, *, created_before: datetime, limit: int
    ) -> List[TransactionDetail]:
        query = (
            select(TransactionModel)
            .options(selectinload(TransactionModel.user), selectinload(TransactionModel.event))
            .where(TransactionModel.status == TransactionStatus.WAITING_FOR_PAYMENT.value)
            .where(TransactionModel.created_at < created_before)
            .order_by(TransactionModel.created_at.asc())
            .limit(limit)
        )
        async with self.session_factory() as session:
            result = await session.execute(query)
            return [self._to_detail(model) for model in result.scalars().all()]

    @staticmethod
    def _build_conditions(filters: TransactionFilter) -> list:
        conditions: list = []
        if filters.user_id is not None:
            conditions.append(TransactionModel.user_id == filters.user_id)
        if filters.event_id is not None:
            conditions.append(TransactionModel.event_id == filters.event_id)
        if filters.organizer_id is not None:
            conditions.append(
                TransactionModel.event_id.in_(
                    select(EventModel.id).where(EventModel.organizer_id == filters.organizer_id)
                )
            )
        if filters.status is not None:
            conditions.append(TransactionModel.status == filters.status.value)
        if filters.date_from is not None:
            conditions.append(TransactionModel.created_at >= filters.date_from)
        if filters.date_to is not None:
            conditions.append(TransactionModel.created_at <= filters.date_to)
        if filters.min_amount is not None:
            conditions.append(TransactionModel.total_idr >= filters.min_amount)
        if filters.max_amount is not None:
            conditions.append(TransactionModel.total_idr <= filters.max_amount)
        return conditions

    @staticmethod
    def to_entity(transaction_model: TransactionModel) -> Transaction:
        return Transaction(
            id=transaction_model.id,
            user_id=transaction_model.user_id,
            event_id=transaction_model.event_id,
            coupon_id=transaction_model.coupon_id,
            status=TransactionStatus(transaction_model.status),
            total_idr=transaction_model.total_idr,
            points_used=transaction_model.points_used,
            admin_notes=transaction_model.admin_notes,
            created_at=transaction_model.created_at,
            updated_at=transaction_model.updated_at,
        )

    @staticmethod
    def _to_detail(transaction_model: TransactionModel) -> TransactionDetail:
        user_model = transaction_model.user
        event_model = transaction_model.event
        return TransactionDetail(
            transaction=TransactionQueryRepoImpl.to_entity(transaction_model),
            user=UserSummary(
                id=user_model.id,
                name=user_model.name,
                email=user_model.email,
                points=user_model.points,
            )
            if user_model
            else None,
            event=EventSummary(
                id=event_model.id,
                title=event_model.title,
                organizer_id=event_model.organizer_id,
                price_idr=event_model.price_idr,
                starts_at=event_model.starts_at,
                category=event_model.category,
                location=event_model.location,
            )
            if event_model
            else None,
        )
