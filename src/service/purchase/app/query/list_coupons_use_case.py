from typing import List, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.service.purchase.app.interface.i_coupon_query_repo import ICouponQueryRepo
from src.service.purchase.domain.entity.coupon_entity import (
    Coupon,
    OrganizerCoupon,
    ReferralCoupon,
)


class ListCouponsUseCase:
    def __init__(self, *, coupon_query_repo: ICouponQueryRepo):
        self.coupon_query_repo = coupon_query_repo

    @classmethod
    @inject
    def depends(
        cls,
        coupon_query_repo: ICouponQueryRepo = Depends(Provide[Container.coupon_query_repo]),
    ) -> Self:
        return cls(coupon_query_repo=coupon_query_repo)

    @Logger.io
    async def list_all(self) -> List[Coupon]:
        return await self.coupon_query_repo.list_all()

    @Logger.io
    async def list_by_organizer(self, *, organizer_id: int) -> List[tuple[OrganizerCoupon, int]]:
        """Organizer coupons with the number of transactions each one was applied to"""
        return await self.coupon_query_repo.list_by_organizer_with_usage(organizer_id=organizer_id)

    @Logger.io
    async def list_by_user(self, *, user_id: int) -> List[ReferralCoupon]:
        return await self.coupon_query_repo.list_by_user(user_id=user_id)
