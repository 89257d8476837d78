"""
Coupon aggregate

A coupon is one of two variants that share a code, a discount and an optional
expiry date but otherwise follow different consumption rules:

- OrganizerCoupon: a quota of `quantity` remaining units, counted down per use.
- ReferralCoupon: single use, owned by the referred user.

`Coupon` is the union of both; callers branch with `match` instead of testing
nullable fields.
"""

import calendar
from datetime import datetime, timezone
from typing import ClassVar, Optional

import attrs

from src.platform.exception.exceptions import (
    AlreadyUsedError,
    ExhaustedError,
    ExpiredError,
    ForbiddenError,
    RollbackError,
    ValidationError,
)
from src.platform.logging.loguru_io import Logger
from src.service.purchase.domain.enum.coupon_enum import CouponStatus, CouponType


def add_months(moment: datetime, months: int) -> datetime:
    """Calendar month arithmetic, clamping the day (Jan 31 + 1 month -> Feb 28/29)"""
    month_index = moment.month - 1 + months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def _validate_common(*, code: str, discount_idr: int) -> None:
    if not code or not code.strip():
        raise ValidationError('Coupon code is required')
    if discount_idr < 0:
        raise ValidationError('discount_idr cannot be negative')


@attrs.define
class OrganizerCoupon:
    code: str
    discount_idr: int
    organizer_id: int
    quantity: int = attrs.field(validator=attrs.validators.ge(0))
    used: int = 0
    status: CouponStatus = CouponStatus.AVAILABLE
    expires_at: Optional[datetime] = None
    id: Optional[int] = None
    created_at: Optional[datetime] = None

    type: ClassVar[CouponType] = CouponType.ORGANIZER

    @classmethod
    @Logger.io
    def create(
        cls,
        *,
        code: str,
        discount_idr: int,
        organizer_id: Optional[int],
        quantity: Optional[int],
        expires_at: Optional[datetime] = None,
    ) -> 'OrganizerCoupon':
        if organizer_id is None:
            raise ValidationError('organizer_id is required to create an organizer coupon')
        if quantity is None or quantity < 1:
            raise ValidationError('quantity must be at least 1 for an organizer coupon')
        _validate_common(code=code, discount_idr=discount_idr)

        return cls(
            code=code.strip(),
            discount_idr=discount_idr,
            organizer_id=organizer_id,
            quantity=quantity,
            used=0,
            status=CouponStatus.AVAILABLE,
            expires_at=expires_at,
            created_at=datetime.now(timezone.utc),
        )

    def is_expired(self, *, now: Optional[datetime] = None) -> bool:
        now = now or datetime.now(timezone.utc)
        return self.expires_at is not None and self.expires_at < now

    @Logger.io
    def ensure_consumable(self, *, now: Optional[datetime] = None) -> None:
        """
        Raises:
            ExpiredError: When past expires_at
            ExhaustedError: When no unit is left or the coupon is no longer AVAILABLE
        """
        if self.is_expired(now=now):
            raise ExpiredError('Coupon has expired')
        if self.quantity <= 0 or self.status != CouponStatus.AVAILABLE:
            raise ExhaustedError('Coupon quota has been exhausted')

    @Logger.io
    def ensure_releasable(self) -> None:
        """
        A unit can be given back only if one has been consumed.

        Raises:
            RollbackError: When nothing has been consumed
        """
        if not self.used:
            raise RollbackError(
                f'Coupon {self.code} usage cannot be rolled back', failed_steps=['rollback_coupon']
            )


@attrs.define
class ReferralCoupon:
    code: str
    discount_idr: int
    user_id: int
    status: CouponStatus = CouponStatus.AVAILABLE
    expires_at: Optional[datetime] = None
    used_at: Optional[datetime] = None
    id: Optional[int] = None
    created_at: Optional[datetime] = None

    type: ClassVar[CouponType] = CouponType.REFERRAL

    @classmethod
    @Logger.io
    def create(
        cls,
        *,
        code: str,
        discount_idr: int,
        user_id: Optional[int],
        validity_months: int,
        now: Optional[datetime] = None,
    ) -> 'ReferralCoupon':
        if user_id is None:
            raise ValidationError('user_id is required to create a referral coupon')
        _validate_common(code=code, discount_idr=discount_idr)

        now = now or datetime.now(timezone.utc)
        return cls(
            code=code.strip(),
            discount_idr=discount_idr,
            user_id=user_id,
            status=CouponStatus.AVAILABLE,
            expires_at=add_months(now, validity_months),
            created_at=now,
        )

    @property
    def used(self) -> int:
        return 1 if self.status == CouponStatus.USED else 0

    def is_expired(self, *, now: Optional[datetime] = None) -> bool:
        now = now or datetime.now(timezone.utc)
        return self.expires_at is not None and self.expires_at < now

    @Logger.io
    def ensure_consumable(self, *, now: Optional[datetime] = None) -> None:
        """
        Raises:
            ExpiredError: When past expires_at or already flagged EXPIRED
            AlreadyUsedError: When the single use has been spent
        """
        if self.is_expired(now=now) or self.status == CouponStatus.EXPIRED:
            raise ExpiredError('Coupon has expired')
        if self.status == CouponStatus.USED:
            raise AlreadyUsedError('Referral coupon has already been used')

    @Logger.io
    def ensure_owned_by(self, *, user_id: int) -> None:
        if self.user_id != user_id:
            raise ForbiddenError('Referral coupon belongs to another user')

    @Logger.io
    def ensure_releasable(self) -> None:
        """
        Raises:
            RollbackError: When the coupon is not USED
        """
        if self.status != CouponStatus.USED:
            raise RollbackError(
                f'Coupon {self.code} usage cannot be rolled back', failed_steps=['rollback_coupon']
            )


Coupon = OrganizerCoupon | ReferralCoupon


@attrs.define(frozen=True)
class CouponRedemptionReceipt:
    coupon: Coupon
    redeemed_by: int
    redeemed_at: datetime
