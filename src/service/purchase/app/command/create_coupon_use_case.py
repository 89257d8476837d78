from datetime import datetime
from typing import Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.exception.exceptions import ConflictError
from src.platform.logging.loguru_io import Logger
from src.service.purchase.app.interface.i_coupon_command_repo import ICouponCommandRepo
from src.service.purchase.app.interface.i_coupon_query_repo import ICouponQueryRepo
from src.service.purchase.domain.entity.coupon_entity import OrganizerCoupon, ReferralCoupon


class CreateOrganizerCouponUseCase:
    def __init__(
        self, *, coupon_query_repo: ICouponQueryRepo, coupon_command_repo: ICouponCommandRepo
    ) -> None:
        self.coupon_query_repo = coupon_query_repo
        self.coupon_command_repo = coupon_command_repo

    @classmethod
    @inject
    def depends(
        cls,
        coupon_query_repo: ICouponQueryRepo = Depends(Provide[Container.coupon_query_repo]),
        coupon_command_repo: ICouponCommandRepo = Depends(Provide[Container.coupon_command_repo]),
    ) -> Self:
        return cls(coupon_query_repo=coupon_query_repo, coupon_command_repo=coupon_command_repo)

    @Logger.io
    async def execute(
        self,
        *,
        organizer_id: Optional[int],
        code: str,
        discount_idr: int,
        quantity: Optional[int],
        expires_at: Optional[datetime] = None,
    ) -> OrganizerCoupon:
        coupon = OrganizerCoupon.create(
            code=code,
            discount_idr=discount_idr,
            organizer_id=organizer_id,
            quantity=quantity,
            expires_at=expires_at,
        )
        if await self.coupon_query_repo.get_by_code(code=coupon.code):
            raise ConflictError(f'Coupon code {coupon.code} already exists')

        created = await self.coupon_command_repo.create(coupon=coupon)
        Logger.base.info(f'🎟️ [COUPON] Organizer {organizer_id} created coupon {coupon.code}')
        return created  # type: ignore[return-value]


class CreateReferralCouponUseCase:
    """Issued by the signup flow to the referred user; valid for a fixed number of months"""

    def __init__(
        self,
        *,
        coupon_query_repo: ICouponQueryRepo,
        coupon_command_repo: ICouponCommandRepo,
        validity_months: int = 3,
    ) -> None:
        self.coupon_query_repo = coupon_query_repo
        self.coupon_command_repo = coupon_command_repo
        self.validity_months = validity_months

    @classmethod
    @inject
    def depends(
        cls,
        coupon_query_repo: ICouponQueryRepo = Depends(Provide[Container.coupon_query_repo]),
        coupon_command_repo: ICouponCommandRepo = Depends(Provide[Container.coupon_command_repo]),
        validity_months: int = Depends(Provide[Container.referral_coupon_validity_months]),
    ) -> Self:
        return cls(
            coupon_query_repo=coupon_query_repo,
            coupon_command_repo=coupon_command_repo,
            validity_months=validity_months,
        )

    @Logger.io
    async def execute(
        self, *, user_id: Optional[int], discount_idr: int, code: str
    ) -> ReferralCoupon:
        coupon = ReferralCoupon.create(
            code=code,
            discount_idr=discount_idr,
            user_id=user_id,
            validity_months=self.validity_months,
        )
        if await self.coupon_query_repo.get_by_code(code=coupon.code):
            raise ConflictError(f'Coupon code {coupon.code} already exists')

        created = await self.coupon_command_repo.create(coupon=coupon)
        Logger.base.info(f'🎟️ [COUPON] Referral coupon {coupon.code} issued to user {user_id}')
        return created  # type: ignore[return-value]
