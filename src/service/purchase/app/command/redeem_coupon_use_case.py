from datetime import datetime, timezone
from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.purchase.app.command.use_coupon_use_case import UseCouponUseCase
from src.service.purchase.app.interface.i_coupon_query_repo import ICouponQueryRepo
from src.service.purchase.domain.entity.coupon_entity import (
    CouponRedemptionReceipt,
    ReferralCoupon,
)


class RedeemCouponUseCase:
    """
    Redeem a coupon by its code.

    Raises:
        NotFoundError: Unknown code
        ExpiredError: Past expires_at
        AlreadyUsedError: Referral coupon already used
        ExhaustedError: Organizer coupon has no unit left
        ForbiddenError: Referral coupon owned by another user
    """

    def __init__(
        self, *, coupon_query_repo: ICouponQueryRepo, use_coupon_use_case: UseCouponUseCase
    ) -> None:
        self.coupon_query_repo = coupon_query_repo
        self.use_coupon_use_case = use_coupon_use_case

    @classmethod
    @inject
    def depends(
        cls,
        coupon_query_repo: ICouponQueryRepo = Depends(Provide[Container.coupon_query_repo]),
        use_coupon_use_case: UseCouponUseCase = Depends(Provide[Container.use_coupon_use_case]),
    ) -> Self:
        return cls(coupon_query_repo=coupon_query_repo, use_coupon_use_case=use_coupon_use_case)

    @Logger.io
    async def execute(self, *, code: str, user_id: int) -> CouponRedemptionReceipt:
        coupon = await self.coupon_query_repo.get_by_code(code=code.strip())
        if not coupon:
            raise NotFoundError('Coupon not found')
        if isinstance(coupon, ReferralCoupon):
            coupon.ensure_owned_by(user_id=user_id)

        redeemed = await self.use_coupon_use_case.consume(coupon=coupon, path='redeem')
        return CouponRedemptionReceipt(
            coupon=redeemed, redeemed_by=user_id, redeemed_at=datetime.now(timezone.utc)
        )
