from typing import List, Optional

from src.platform.logging.loguru_io import Logger
from src.platform.metrics.purchase_metrics import metrics
from src.service.purchase.app.command.rollback_coupon_usage_use_case import (
    RollbackCouponUsageUseCase,
)
from src.service.purchase.app.interface.i_event_inventory_repo import IEventInventoryRepo
from src.service.purchase.app.interface.i_user_points_repo import IUserPointsRepo
from src.service.purchase.domain.entity.transaction_entity import Transaction


class TransactionCompensator:
    """
    Gives back what a transaction took: the seat, the coupon use and the debited points.

    Every step is attempted even if an earlier one fails. The names of the failed
    steps are returned so the caller decides how to surface them.
    """

    RELEASE_SEAT = 'release_seat'
    ROLLBACK_COUPON = 'rollback_coupon'
    REFUND_POINTS = 'refund_points'

    def __init__(
        self,
        *,
        event_inventory_repo: IEventInventoryRepo,
        user_points_repo: IUserPointsRepo,
        rollback_coupon_usage_use_case: RollbackCouponUsageUseCase,
        deduct_points_on_purchase: bool = False,
    ) -> None:
        self.event_inventory_repo = event_inventory_repo
        self.user_points_repo = user_points_repo
        self.rollback_coupon_usage_use_case = rollback_coupon_usage_use_case
        self.deduct_points_on_purchase = deduct_points_on_purchase

    @Logger.io
    async def compensate_transaction(self, *, transaction: Transaction) -> List[str]:
        return await self.compensate(
            event_id=transaction.event_id,
            user_id=transaction.user_id,
            coupon_id=transaction.coupon_id,
            points=transaction.points_used if self.deduct_points_on_purchase else 0,
        )

    @Logger.io
    async def compensate(
        self,
        *,
        event_id: int,
        user_id: int,
        coupon_id: Optional[int] = None,
        points: int = 0,
    ) -> List[str]:
        failed_steps: List[str] = []

        try:
            if await self.event_inventory_repo.release_seat(event_id=event_id) is None:
                self._record_failure(self.RELEASE_SEAT, f'event {event_id} not found')
                failed_steps.append(self.RELEASE_SEAT)
        except Exception as e:
            self._record_failure(self.RELEASE_SEAT, str(e))
            failed_steps.append(self.RELEASE_SEAT)

        if coupon_id is not None:
            try:
                await self.rollback_coupon_usage_use_case.execute(coupon_id=coupon_id)
            except Exception as e:
                self._record_failure(self.ROLLBACK_COUPON, str(e))
                failed_steps.append(self.ROLLBACK_COUPON)

        if points > 0:
            try:
                refunded = await self.user_points_repo.refund_points(
                    user_id=user_id, points=points
                )
                if refunded is None:
                    self._record_failure(self.REFUND_POINTS, f'user {user_id} not found')
                    failed_steps.append(self.REFUND_POINTS)
            except Exception as e:
                self._record_failure(self.REFUND_POINTS, str(e))
                failed_steps.append(self.REFUND_POINTS)

        return failed_steps

    @staticmethod
    def _record_failure(step: str, reason: str) -> None:
        metrics.record_compensation_failure(step=step)
        Logger.base.error(f'❌ [COMPENSATE] {step} failed: {reason}')
