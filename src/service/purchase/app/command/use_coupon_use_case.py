from datetime import datetime, timezone

from opentelemetry import trace

from src.platform.exception.exceptions import (
    AlreadyUsedError,
    CustomBaseError,
    ExhaustedError,
    ExpiredError,
    NotFoundError,
)
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.purchase_metrics import metrics
from src.service.purchase.app.interface.i_coupon_command_repo import ICouponCommandRepo
from src.service.purchase.app.interface.i_coupon_query_repo import ICouponQueryRepo
from src.service.purchase.domain.entity.coupon_entity import (
    Coupon,
    OrganizerCoupon,
    ReferralCoupon,
)
from src.service.purchase.domain.enum.coupon_enum import CouponExhaustionPolicy, CouponStatus


class UseCouponUseCase:
    """
    Consume one use of a coupon.

    Shared by redemption-by-code and by the purchase flow. The in-memory checks
    pick the error to report, the guarded repo update decides who wins a race:

    - ORGANIZER: quantity -= 1 and used += 1 in one statement; the exhaustion
      policy decides the status once quantity reaches 0
    - REFERRAL: AVAILABLE -> USED in one statement

    A coupon found past expires_at is flipped to EXPIRED before ExpiredError is raised.
    """

    def __init__(
        self,
        *,
        coupon_query_repo: ICouponQueryRepo,
        coupon_command_repo: ICouponCommandRepo,
        exhaustion_policy: CouponExhaustionPolicy = CouponExhaustionPolicy.MARK_USED,
    ) -> None:
        self.coupon_query_repo = coupon_query_repo
        self.coupon_command_repo = coupon_command_repo
        self.exhaustion_policy = exhaustion_policy
        self.tracer = trace.get_tracer(__name__)

    @Logger.io
    async def execute(self, *, coupon_id: int) -> Coupon:
        coupon = await self.coupon_query_repo.get_by_id(coupon_id=coupon_id)
        if not coupon:
            raise NotFoundError('Coupon not found')
        return await self.consume(coupon=coupon, path='use')

    @Logger.io
    async def consume(self, *, coupon: Coupon, path: str) -> Coupon:
        with self.tracer.start_as_current_span(
            'use_case.consume_coupon',
            attributes={'coupon.id': coupon.id or 0, 'coupon.type': coupon.type.value},
        ):
            try:
                updated = await self._consume(coupon=coupon)
            except CustomBaseError as e:
                metrics.record_coupon_consumption(
                    coupon_type=coupon.type.value, path=path, result=e.kind
                )
                raise

            metrics.record_coupon_consumption(
                coupon_type=coupon.type.value, path=path, result='success'
            )
            return updated

    async def _consume(self, *, coupon: Coupon) -> Coupon:
        now = datetime.now(timezone.utc)

        if coupon.is_expired(now=now):
            if coupon.status == CouponStatus.AVAILABLE:
                await self.coupon_command_repo.mark_expired(coupon_id=coupon.id)  # type: ignore[arg-type]
                Logger.base.info(f'⌛ [COUPON] {coupon.code} expired, status persisted')
            raise ExpiredError('Coupon has expired')

        coupon.ensure_consumable(now=now)

        match coupon:
            case OrganizerCoupon():
                organizer_coupon = await self.coupon_command_repo.consume_organizer_unit(
                    coupon_id=coupon.id,  # type: ignore[arg-type]
                    exhausted_status=self.exhaustion_policy.exhausted_status,
                    now=now,
                )
                if organizer_coupon is None:
                    raise ExhaustedError('Coupon quota has been exhausted')
                Logger.base.info(
                    f'🎟️ [COUPON] {coupon.code} consumed, {organizer_coupon.quantity} left'
                )
                return organizer_coupon
            case ReferralCoupon():
                referral_coupon = await self.coupon_command_repo.consume_referral(
                    coupon_id=coupon.id,  # type: ignore[arg-type]
                    now=now,
                )
                if referral_coupon is None:
                    raise AlreadyUsedError('Referral coupon has already been used')
                Logger.base.info(f'🎟️ [COUPON] Referral coupon {coupon.code} used')
                return referral_coupon
