from datetime import datetime, timezone
from typing import Optional

import attrs

from src.platform.exception.exceptions import (
    ForbiddenError,
    InvalidStateError,
    InvalidTransitionError,
)
from src.platform.logging.loguru_io import Logger
from src.service.purchase.domain.enum.transaction_status import (
    ALLOWED_TRANSITIONS,
    COMPENSATED_STATUSES,
    TransactionStatus,
)


def compute_total_idr(
    *, price_idr: int, is_free: bool, discount_idr: int = 0, points_used: int = 0
) -> int:
    """
    Price a single ticket.

    The coupon discount is applied first, then points, and the result is floored
    at zero after each step so that neither can push the total below zero.
    """
    total = 0 if is_free else price_idr
    total = max(0, total - discount_idr)
    return max(0, total - points_used)


@attrs.define
class Transaction:
    user_id: int
    event_id: int
    total_idr: int = attrs.field(validator=attrs.validators.ge(0))
    status: TransactionStatus = TransactionStatus.WAITING_FOR_PAYMENT
    coupon_id: Optional[int] = None
    points_used: int = 0
    admin_notes: Optional[str] = None
    id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    @Logger.io
    def create(
        cls,
        *,
        user_id: int,
        event_id: int,
        total_idr: int,
        coupon_id: Optional[int] = None,
        points_used: int = 0,
    ) -> 'Transaction':
        now = datetime.now(timezone.utc)
        return cls(
            user_id=user_id,
            event_id=event_id,
            total_idr=total_idr,
            status=TransactionStatus.WAITING_FOR_PAYMENT,
            coupon_id=coupon_id,
            points_used=points_used,
            created_at=now,
            updated_at=now,
        )

    @property
    def is_terminal(self) -> bool:
        return not ALLOWED_TRANSITIONS[self.status]

    def can_transition_to(self, target: TransactionStatus) -> bool:
        return target in ALLOWED_TRANSITIONS[self.status]

    def needs_compensation(self) -> bool:
        """Whether reaching the current status must give the seat, coupon and points back"""
        return self.status in COMPENSATED_STATUSES

    @Logger.io
    def validate_transition(self, target: TransactionStatus) -> None:
        """
        Raises:
            InvalidTransitionError: When the pair is not in the transition table
        """
        if not self.can_transition_to(target):
            raise InvalidTransitionError(self.status.value, target.value)

    @Logger.io
    def validate_can_be_canceled_by(self, user_id: int) -> None:
        """
        Only the owner can cancel, and only before payment.

        Raises:
            ForbiddenError: When the requester is not the owner
            InvalidStateError: When the transaction is past WAITING_FOR_PAYMENT
        """
        if self.user_id != user_id:
            raise ForbiddenError('You cannot cancel a transaction that belongs to another user')
        if self.status != TransactionStatus.WAITING_FOR_PAYMENT:
            raise InvalidStateError(
                f'Transaction cannot be canceled in status {self.status.value}, '
                f'only {TransactionStatus.WAITING_FOR_PAYMENT.value} transactions can'
            )
