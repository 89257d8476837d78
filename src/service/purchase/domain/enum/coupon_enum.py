from enum import StrEnum


class CouponType(StrEnum):
    ORGANIZER = 'ORGANIZER'
    REFERRAL = 'REFERRAL'


class CouponStatus(StrEnum):
    AVAILABLE = 'AVAILABLE'
    USED = 'USED'
    EXPIRED = 'EXPIRED'


class CouponExhaustionPolicy(StrEnum):
    """Status an organizer coupon takes when its last unit is consumed"""

    MARK_USED = 'mark_used'
    MARK_EXPIRED = 'mark_expired'

    @property
    def exhausted_status(self) -> CouponStatus:
        if self is CouponExhaustionPolicy.MARK_EXPIRED:
            return CouponStatus.EXPIRED
        return CouponStatus.USED
