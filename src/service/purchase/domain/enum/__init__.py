"""Purchase Domain Enums"""

from src.service.purchase.domain.enum.coupon_enum import (
    CouponExhaustionPolicy,
    CouponStatus,
    CouponType,
)
from src.service.purchase.domain.enum.transaction_status import TransactionStatus

__all__ = ['CouponExhaustionPolicy', 'CouponStatus', 'CouponType', 'TransactionStatus']
