from typing import List

from fastapi import APIRouter, Depends, status

from src.platform.logging.loguru_io import Logger
from src.service.purchase.app.command.create_coupon_use_case import (
    CreateOrganizerCouponUseCase,
    CreateReferralCouponUseCase,
)
from src.service.purchase.app.command.redeem_coupon_use_case import RedeemCouponUseCase
from src.service.purchase.app.query.list_coupons_use_case import ListCouponsUseCase
from src.service.purchase.domain.entity.user_entity import UserEntity
from src.service.purchase.driving_adapter.http_controller.auth.role_auth import (
    get_current_user,
    require_admin,
    require_customer,
    require_organizer,
)
from src.service.purchase.driving_adapter.http_controller.schema.coupon_schema import (
    CouponRedeemRequest,
    CouponRedemptionResponse,
    CouponResponse,
    OrganizerCouponCreateRequest,
    OrganizerCouponUsageResponse,
    ReferralCouponCreateRequest,
)


router = APIRouter()


@router.post('', status_code=status.HTTP_201_CREATED)
@Logger.io
async def create_organizer_coupon(
    request: OrganizerCouponCreateRequest,
    current_user: UserEntity = Depends(require_organizer),
    use_case: CreateOrganizerCouponUseCase = Depends(CreateOrganizerCouponUseCase.depends),
) -> CouponResponse:
    coupon = await use_case.execute(
        organizer_id=current_user.id,
        code=request.code,
        discount_idr=request.discount_idr,
        quantity=request.quantity,
        expires_at=request.expires_at,
    )
    return CouponResponse.from_entity(coupon)


@router.post('/referral', status_code=status.HTTP_201_CREATED)
@Logger.io
async def create_referral_coupon(
    request: ReferralCouponCreateRequest,
    current_user: UserEntity = Depends(require_admin),
    use_case: CreateReferralCouponUseCase = Depends(CreateReferralCouponUseCase.depends),
) -> CouponResponse:
    coupon = await use_case.execute(
        user_id=request.user_id, discount_idr=request.discount_idr, code=request.code
    )
    return CouponResponse.from_entity(coupon)


@router.post('/redeem')
@Logger.io
async def redeem_coupon(
    request: CouponRedeemRequest,
    current_user: UserEntity = Depends(require_customer),
    use_case: RedeemCouponUseCase = Depends(RedeemCouponUseCase.depends),
) -> CouponRedemptionResponse:
    receipt = await use_case.execute(code=request.code, user_id=current_user.id or 0)
    return CouponRedemptionResponse.from_receipt(receipt)


@router.get('')
@Logger.io
async def list_coupons(
    current_user: UserEntity = Depends(require_admin),
    use_case: ListCouponsUseCase = Depends(ListCouponsUseCase.depends),
) -> List[CouponResponse]:
    return [CouponResponse.from_entity(coupon) for coupon in await use_case.list_all()]


@router.get('/organizer/me')
@Logger.io
async def list_my_organizer_coupons(
    current_user: UserEntity = Depends(require_organizer),
    use_case: ListCouponsUseCase = Depends(ListCouponsUseCase.depends),
) -> List[OrganizerCouponUsageResponse]:
    coupons = await use_case.list_by_organizer(organizer_id=current_user.id or 0)
    return [
        OrganizerCouponUsageResponse(
            **CouponResponse.from_entity(coupon).model_dump(), transaction_count=count
        )
        for coupon, count in coupons
    ]


@router.get('/me')
@Logger.io
async def list_my_referral_coupons(
    current_user: UserEntity = Depends(get_current_user),
    use_case: ListCouponsUseCase = Depends(ListCouponsUseCase.depends),
) -> List[CouponResponse]:
    coupons = await use_case.list_by_user(user_id=current_user.id or 0)
    return [CouponResponse.from_entity(coupon) for coupon in coupons]
