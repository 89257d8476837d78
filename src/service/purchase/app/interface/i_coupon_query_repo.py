from abc import ABC, abstractmethod
from typing import List, Optional

from src.service.purchase.domain.entity.coupon_entity import (
    Coupon,
    OrganizerCoupon,
    ReferralCoupon,
)


class ICouponQueryRepo(ABC):
    """Repository interface for coupon read operations"""

    @abstractmethod
    async def get_by_id(self, *, coupon_id: int) -> Optional[Coupon]:
        pass

    @abstractmethod
    async def get_by_code(self, *, code: str) -> Optional[Coupon]:
        pass

    @abstractmethod
    async def list_all(self) -> List[Coupon]:
        pass

    @abstractmethod
    async def list_by_organizer_with_usage(
        self, *, organizer_id: int
    ) -> List[tuple[OrganizerCoupon, int]]:
        """Organizer coupons paired with the number of transactions that applied them"""
        pass

    @abstractmethod
    async def list_by_user(self, *, user_id: int) -> List[ReferralCoupon]:
        pass
