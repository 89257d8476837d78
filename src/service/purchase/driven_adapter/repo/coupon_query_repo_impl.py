from typing import AsyncContextManager, Callable, List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.purchase.app.interface.i_coupon_query_repo import ICouponQueryRepo
from src.service.purchase.domain.entity.coupon_entity import (
    Coupon,
    OrganizerCoupon,
    ReferralCoupon,
)
from src.service.purchase.domain.enum.coupon_enum import CouponStatus, CouponType
from src.service.purchase.driven_adapter.model.coupon_model import CouponModel
from src.service.purchase.driven_adapter.model.transaction_model import TransactionModel


class CouponQueryRepoImpl(ICouponQueryRepo):
    def __init__(self, session_factory: Callable[..., AsyncContextManager[AsyncSession]]) -> None:
        self.session_factory = session_factory

    @Logger.io
    async def get_by_id(self, *, coupon_id: int) -> Optional[Coupon]:
        async with self.session_factory() as session:
            result = await session.execute(select(CouponModel).where(CouponModel.id == coupon_id))
            coupon_model = result.scalar_one_or_none()

            return self.to_entity(coupon_model) if coupon_model else None

    @Logger.io
    async def get_by_code(self, *, code: str) -> Optional[Coupon]:
        async with self.session_factory() as session:
            result = await session.execute(select(CouponModel).where(CouponModel.code == code))
            coupon_model = result.scalar_one_or_none()

            return self.to_entity(coupon_model) if coupon_model else None

    @Logger.io
    async def list_all(self) -> List[Coupon]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(CouponModel).order_by(CouponModel.created_at.desc(), CouponModel.id.desc())
            )
            return [self.to_entity(coupon_model) for coupon_model in result.scalars().all()]

    @Logger.io
    async def list_by_organizer_with_usage(
        self, *, organizer_id: int
    ) -> List[tuple[OrganizerCoupon, int]]:
        query = (
            select(CouponModel, func.count(TransactionModel.id))
            .outerjoin(TransactionModel, TransactionModel.coupon_id == CouponModel.id)
            .where(CouponModel.type == CouponType.ORGANIZER.value)
            .where(CouponModel.organizer_id == organizer_id)
            .group_by(CouponModel.id)
            .order_by(CouponModel.created_at.desc(), CouponModel.id.desc())
        )
        async with self.session_factory() as session:
            result = await session.execute(query)
            return [
                (self.to_entity(coupon_model), usage_count)  # type: ignore[misc]
                for coupon_model, usage_count in result.all()
            ]

    @Logger.io
    async def list_by_user(self, *, user_id: int) -> List[ReferralCoupon]:
        query = (
            select(CouponModel)
            .where(CouponModel.type == CouponType.REFERRAL.value)
            .where(CouponModel.user_id == user_id)
            .order_by(CouponModel.created_at.desc(), CouponModel.id.desc())
        )
        async with self.session_factory() as session:
            result = await session.execute(query)
            return [self.to_entity(coupon_model) for coupon_model in result.scalars().all()]  # type: ignore[misc]

    @staticmethod
    def to_entity(coupon_model: CouponModel) -> Coupon:
        if coupon_model.type == CouponType.ORGANIZER.value:
            return OrganizerCoupon(
                id=coupon_model.id,
                code=coupon_model.code,
                discount_idr=coupon_model.discount_idr,
                organizer_id=coupon_model.organizer_id,  # type: ignore[arg-type]
                quantity=coupon_model.quantity or 0,
                used=coupon_model.used or 0,
                status=CouponStatus(coupon_model.status),
                expires_at=coupon_model.expires_at,
                created_at=coupon_model.created_at,
            )
        return ReferralCoupon(
            id=coupon_model.id,
            code=coupon_model.code,
            discount_idr=coupon_model.discount_idr,
            user_id=coupon_model.user_id,  # type: ignore[arg-type]
            status=CouponStatus(coupon_model.status),
            expires_at=coupon_model.expires_at,
            used_at=coupon_model.used_at,
            created_at=coupon_model.created_at,
        )
