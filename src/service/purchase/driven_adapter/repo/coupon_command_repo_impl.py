from datetime import datetime
from typing import AsyncContextManager, Callable, Optional

from sqlalchemy import and_, case, or_, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.exception.exceptions import ConflictError
from src.platform.logging.loguru_io import Logger
from src.service.purchase.app.interface.i_coupon_command_repo import ICouponCommandRepo
from src.service.purchase.domain.entity.coupon_entity import (
    Coupon,
    OrganizerCoupon,
    ReferralCoupon,
)
from src.service.purchase.domain.enum.coupon_enum import CouponStatus, CouponType
from src.service.purchase.driven_adapter.model.coupon_model import CouponModel
from src.service.purchase.driven_adapter.repo.coupon_query_repo_impl import CouponQueryRepoImpl


class CouponCommandRepoImpl(ICouponCommandRepo):
    def __init__(self, session_factory: Callable[..., AsyncContextManager[AsyncSession]]) -> None:
        self.session_factory = session_factory

    @Logger.io
    async def create(self, *, coupon: Coupon) -> Coupon:
        match coupon:
            case OrganizerCoupon():
                coupon_model = CouponModel(
                    code=coupon.code,
                    type=CouponType.ORGANIZER.value,
                    discount_idr=coupon.discount_idr,
                    status=coupon.status.value,
                    organizer_id=coupon.organizer_id,
                    quantity=coupon.quantity,
                    used=coupon.used,
                    expires_at=coupon.expires_at,
                )
            case ReferralCoupon():
                coupon_model = CouponModel(
                    code=coupon.code,
                    type=CouponType.REFERRAL.value,
                    discount_idr=coupon.discount_idr,
                    status=coupon.status.value,
                    user_id=coupon.user_id,
                    used=0,
                    expires_at=coupon.expires_at,
                )

        async with self.session_factory() as session:
            session.add(coupon_model)
            try:
                await session.commit()
            except IntegrityError as e:
                await session.rollback()
                raise ConflictError(f'Coupon code {coupon.code} already exists') from e
            await session.refresh(coupon_model)

            return CouponQueryRepoImpl.to_entity(coupon_model)

    @Logger.io
    async def consume_organizer_unit(
        self, *, coupon_id: int, exhausted_status: CouponStatus, now: datetime
    ) -> Optional[OrganizerCoupon]:
        stmt = (
            update(CouponModel)
            .where(CouponModel.id == coupon_id)
            .where(CouponModel.type == CouponType.ORGANIZER.value)
            .where(CouponModel.status == CouponStatus.AVAILABLE.value)
            .where(CouponModel.quantity > 0)
            .where(or_(CouponModel.expires_at.is_(None), CouponModel.expires_at >= now))
            .values(
                quantity=CouponModel.quantity - 1,
                used=CouponModel.used + 1,
                # SET expressions see the pre-update row, so quantity == 1 means "last unit"
                status=case(
                    (CouponModel.quantity == 1, exhausted_status.value),
                    else_=CouponModel.status,
                ),
            )
        )
        return await self._execute_guarded(stmt)  # type: ignore[return-value]

    @Logger.io
    async def consume_referral(self, *, coupon_id: int, now: datetime) -> Optional[ReferralCoupon]:
        stmt = (
            update(CouponModel)
            .where(CouponModel.id == coupon_id)
            .where(CouponModel.type == CouponType.REFERRAL.value)
            .where(CouponModel.status == CouponStatus.AVAILABLE.value)
            .where(or_(CouponModel.expires_at.is_(None), CouponModel.expires_at >= now))
            .values(status=CouponStatus.USED.value, used=1, used_at=now)
        )
        return await self._execute_guarded(stmt)  # type: ignore[return-value]

    @Logger.io
    async def release_organizer_unit(
        self, *, coupon_id: int, now: datetime
    ) -> Optional[OrganizerCoupon]:
        stmt = (
            update(CouponModel)
            .where(CouponModel.id == coupon_id)
            .where(CouponModel.type == CouponType.ORGANIZER.value)
            .where(CouponModel.used > 0)
            .values(
                quantity=CouponModel.quantity + 1,
                used=CouponModel.used - 1,
                status=case(
                    (
                        and_(CouponModel.expires_at.is_not(None), CouponModel.expires_at < now),
                        CouponStatus.EXPIRED.value,
                    ),
                    else_=CouponStatus.AVAILABLE.value,
                ),
            )
        )
        return await self._execute_guarded(stmt)  # type: ignore[return-value]

    @Logger.io
    async def release_referral(self, *, coupon_id: int) -> Optional[ReferralCoupon]:
        stmt = (
            update(CouponModel)
            .where(CouponModel.id == coupon_id)
            .where(CouponModel.type == CouponType.REFERRAL.value)
            .where(CouponModel.status == CouponStatus.USED.value)
            .values(status=CouponStatus.AVAILABLE.value, used=0, used_at=None)
        )
        return await self._execute_guarded(stmt)  # type: ignore[return-value]

    @Logger.io
    async def mark_expired(self, *, coupon_id: int) -> Optional[Coupon]:
        stmt = (
            update(CouponModel)
            .where(CouponModel.id == coupon_id)
            .where(CouponModel.status == CouponStatus.AVAILABLE.value)
            .values(status=CouponStatus.EXPIRED.value)
        )
        return await self._execute_guarded(stmt)

    async def _execute_guarded(self, stmt) -> Optional[Coupon]:
        async with self.session_factory() as session:
            result = await session.execute(
                stmt.returning(CouponModel).execution_options(synchronize_session=False)
            )
            coupon_model = result.scalar_one_or_none()
            await session.commit()

            return CouponQueryRepoImpl.to_entity(coupon_model) if coupon_model else None
