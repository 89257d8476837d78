from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from src.service.purchase.domain.entity.coupon_entity import (
    Coupon,
    OrganizerCoupon,
    ReferralCoupon,
)
from src.service.purchase.domain.enum.coupon_enum import CouponStatus


class ICouponCommandRepo(ABC):
    """
    Repository interface for coupon write operations

    Every consume/release method is one guarded UPDATE. It returns the updated
    coupon, or None when the guard did not match (lost race, wrong state).
    """

    @abstractmethod
    async def create(self, *, coupon: Coupon) -> Coupon:
        """
        Raises:
            ConflictError: When the code already exists
        """
        pass

    @abstractmethod
    async def consume_organizer_unit(
        self, *, coupon_id: int, exhausted_status: CouponStatus, now: datetime
    ) -> Optional[OrganizerCoupon]:
        """quantity -= 1, used += 1 while quantity > 0, status AVAILABLE and not past expires_at"""
        pass

    @abstractmethod
    async def consume_referral(self, *, coupon_id: int, now: datetime) -> Optional[ReferralCoupon]:
        """AVAILABLE -> USED, stamping used_at"""
        pass

    @abstractmethod
    async def release_organizer_unit(
        self, *, coupon_id: int, now: datetime
    ) -> Optional[OrganizerCoupon]:
        """quantity += 1, used -= 1 while used > 0"""
        pass

    @abstractmethod
    async def release_referral(self, *, coupon_id: int) -> Optional[ReferralCoupon]:
        """USED -> AVAILABLE, clearing used_at"""
        pass

    @abstractmethod
    async def mark_expired(self, *, coupon_id: int) -> Optional[Coupon]:
        """AVAILABLE -> EXPIRED"""
        pass
