from datetime import datetime, timezone
from typing import Optional

from src.platform.exception.exceptions import NotFoundError, RollbackError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.purchase_metrics import metrics
from src.service.purchase.app.interface.i_coupon_command_repo import ICouponCommandRepo
from src.service.purchase.app.interface.i_coupon_query_repo import ICouponQueryRepo
from src.service.purchase.domain.entity.coupon_entity import (
    Coupon,
    OrganizerCoupon,
    ReferralCoupon,
)


class RollbackCouponUsageUseCase:
    """
    Undo one use of a coupon when the transaction that applied it is rejected or canceled.

    Organizer coupons get their unit back (and AVAILABLE, unless past expires_at).
    Referral coupons go back to AVAILABLE.
    """

    def __init__(
        self, *, coupon_query_repo: ICouponQueryRepo, coupon_command_repo: ICouponCommandRepo
    ) -> None:
        self.coupon_query_repo = coupon_query_repo
        self.coupon_command_repo = coupon_command_repo

    @Logger.io
    async def execute(self, *, coupon_id: int) -> Coupon:
        coupon = await self.coupon_query_repo.get_by_id(coupon_id=coupon_id)
        if not coupon:
            raise NotFoundError('Coupon not found')

        coupon.ensure_releasable()

        now = datetime.now(timezone.utc)
        released: Optional[Coupon]
        match coupon:
            case OrganizerCoupon():
                released = await self.coupon_command_repo.release_organizer_unit(
                    coupon_id=coupon_id, now=now
                )
            case ReferralCoupon():
                released = await self.coupon_command_repo.release_referral(coupon_id=coupon_id)

        if released is None:
            raise RollbackError(
                f'Coupon {coupon.code} usage cannot be rolled back',
                failed_steps=['rollback_coupon'],
            )

        metrics.record_coupon_consumption(
            coupon_type=coupon.type.value, path='rollback', result='success'
        )
        Logger.base.info(f'↩️ [COUPON] Usage of {coupon.code} rolled back')
        return released
