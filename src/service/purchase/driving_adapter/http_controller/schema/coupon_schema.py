from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from src.service.purchase.domain.entity.coupon_entity import (
    Coupon,
    CouponRedemptionReceipt,
    OrganizerCoupon,
    ReferralCoupon,
)
from src.service.purchase.domain.enum.coupon_enum import CouponStatus, CouponType


class OrganizerCouponCreateRequest(BaseModel):
    code: str = Field(min_length=1, max_length=64)
    discount_idr: int = Field(ge=0)
    quantity: int = Field(ge=1)
    expires_at: Optional[datetime] = None

    model_config = {
        'json_schema_extra': {
            'example': {
                'code': 'EARLYBIRD',
                'discount_idr': 25000,
                'quantity': 100,
                'expires_at': '2025-12-31T23:59:59Z',
            }
        }
    }


class ReferralCouponCreateRequest(BaseModel):
    user_id: int
    code: str = Field(min_length=1, max_length=64)
    discount_idr: int = Field(ge=0)

    model_config = {
        'json_schema_extra': {
            'example': {'user_id': 7, 'code': 'REF-7-X2K9', 'discount_idr': 10000}
        }
    }


class CouponRedeemRequest(BaseModel):
    code: str = Field(min_length=1, max_length=64)

    model_config = {'json_schema_extra': {'example': {'code': 'EARLYBIRD'}}}


class CouponResponse(BaseModel):
    id: int
    code: str
    type: CouponType
    discount_idr: int
    status: CouponStatus
    expires_at: Optional[datetime] = None
    organizer_id: Optional[int] = None
    user_id: Optional[int] = None
    quantity: Optional[int] = None
    used: int = 0
    used_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, coupon: Coupon) -> 'CouponResponse':
        match coupon:
            case OrganizerCoupon():
                return cls(
                    id=coupon.id or 0,
                    code=coupon.code,
                    type=coupon.type,
                    discount_idr=coupon.discount_idr,
                    status=coupon.status,
                    expires_at=coupon.expires_at,
                    organizer_id=coupon.organizer_id,
                    quantity=coupon.quantity,
                    used=coupon.used,
                    created_at=coupon.created_at,
                )
            case ReferralCoupon():
                return cls(
                    id=coupon.id or 0,
                    code=coupon.code,
                    type=coupon.type,
                    discount_idr=coupon.discount_idr,
                    status=coupon.status,
                    expires_at=coupon.expires_at,
                    user_id=coupon.user_id,
                    used=coupon.used,
                    used_at=coupon.used_at,
                    created_at=coupon.created_at,
                )


class OrganizerCouponUsageResponse(CouponResponse):
    transaction_count: int = 0


class CouponRedemptionResponse(BaseModel):
    coupon: CouponResponse
    redeemed_by: int
    redeemed_at: datetime

    @classmethod
    def from_receipt(cls, receipt: CouponRedemptionReceipt) -> 'CouponRedemptionResponse':
        return cls(
            coupon=CouponResponse.from_entity(receipt.coupon),
            redeemed_by=receipt.redeemed_by,
            redeemed_at=receipt.redeemed_at,
        )
