from typing import Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace
from sqlalchemy.exc import SQLAlchemyError

from src.platform.config.di import Container
from src.platform.exception.exceptions import (
    CustomBaseError,
    InsufficientPointsError,
    NotFoundError,
    PersistenceError,
    SoldOutError,
    ValidationError,
)
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.purchase_metrics import metrics
from src.service.purchase.app.command.transaction_compensator import TransactionCompensator
from src.service.purchase.app.command.use_coupon_use_case import UseCouponUseCase
from src.service.purchase.app.dto.transaction_detail import (
    EventSummary,
    TransactionDetail,
    UserSummary,
)
from src.service.purchase.app.interface.i_coupon_query_repo import ICouponQueryRepo
from src.service.purchase.app.interface.i_event_inventory_repo import IEventInventoryRepo
from src.service.purchase.app.interface.i_transaction_command_repo import (
    ITransactionCommandRepo,
)
from src.service.purchase.app.interface.i_user_points_repo import IUserPointsRepo
from src.service.purchase.domain.entity.coupon_entity import ReferralCoupon
from src.service.purchase.domain.entity.transaction_entity import Transaction, compute_total_idr


class CreateTransactionUseCase:
    """
    Buy one ticket.

    Flow:
    1. Validate (no writes): event exists, has seats and has not started;
       coupon exists (a referral coupon only for its owner); user has enough points
    2. Reserve a seat with a guarded decrement (lost race -> SoldOutError)
    3. Consume the coupon
    4. Debit points (only when DEDUCT_POINTS_ON_PURCHASE is on)
    5. Persist the transaction as WAITING_FOR_PAYMENT

    Any failure after step 2 gives back what was already taken, then re-raises.
    """

    def __init__(
        self,
        *,
        event_inventory_repo: IEventInventoryRepo,
        user_points_repo: IUserPointsRepo,
        coupon_query_repo: ICouponQueryRepo,
        transaction_command_repo: ITransactionCommandRepo,
        use_coupon_use_case: UseCouponUseCase,
        compensator: TransactionCompensator,
        deduct_points_on_purchase: bool = False,
    ) -> None:
        self.event_inventory_repo = event_inventory_repo
        self.user_points_repo = user_points_repo
        self.coupon_query_repo = coupon_query_repo
        self.transaction_command_repo = transaction_command_repo
        self.use_coupon_use_case = use_coupon_use_case
        self.compensator = compensator
        self.deduct_points_on_purchase = deduct_points_on_purchase
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        event_inventory_repo: IEventInventoryRepo = Depends(
            Provide[Container.event_inventory_repo]
        ),
        user_points_repo: IUserPointsRepo = Depends(Provide[Container.user_points_repo]),
        coupon_query_repo: ICouponQueryRepo = Depends(Provide[Container.coupon_query_repo]),
        transaction_command_repo: ITransactionCommandRepo = Depends(
            Provide[Container.transaction_command_repo]
        ),
        use_coupon_use_case: UseCouponUseCase = Depends(Provide[Container.use_coupon_use_case]),
        compensator: TransactionCompensator = Depends(
            Provide[Container.transaction_compensator]
        ),
        deduct_points_on_purchase: bool = Depends(Provide[Container.deduct_points_on_purchase]),
    ) -> Self:
        return cls(
            event_inventory_repo=event_inventory_repo,
            user_points_repo=user_points_repo,
            coupon_query_repo=coupon_query_repo,
            transaction_command_repo=transaction_command_repo,
            use_coupon_use_case=use_coupon_use_case,
            compensator=compensator,
            deduct_points_on_purchase=deduct_points_on_purchase,
        )

    @Logger.io
    async def execute(
        self,
        *,
        user_id: int,
        event_id: int,
        coupon_id: Optional[int] = None,
        points_used: int = 0,
    ) -> TransactionDetail:
        with self.tracer.start_as_current_span(
            'use_case.create_transaction',
            attributes={'user.id': user_id, 'event.id': event_id},
        ):
            try:
                detail = await self._create(
                    user_id=user_id,
                    event_id=event_id,
                    coupon_id=coupon_id,
                    points_used=points_used,
                )
            except CustomBaseError as e:
                metrics.record_transaction_created(result=e.kind)
                raise
            except SQLAlchemyError as e:
                metrics.record_transaction_created(result=PersistenceError.__name__)
                raise PersistenceError(f'Failed to create transaction: {e}') from e

            metrics.record_transaction_created(result='success')
            return detail

    async def _create(
        self,
        *,
        user_id: int,
        event_id: int,
        coupon_id: Optional[int],
        points_used: int,
    ) -> TransactionDetail:
        if points_used < 0:
            raise ValidationError('points_used cannot be negative')

        # Step 1: Validate before any write
        event = await self.event_inventory_repo.get_by_id(event_id=event_id)
        if not event:
            raise NotFoundError('Event not found')
        event.validate_purchasable()

        coupon = None
        if coupon_id is not None:
            coupon = await self.coupon_query_repo.get_by_id(coupon_id=coupon_id)
            if not coupon:
                raise NotFoundError('Coupon not found')
            if isinstance(coupon, ReferralCoupon):
                coupon.ensure_owned_by(user_id=user_id)

        user = await self.user_points_repo.get_by_id(user_id=user_id)
        if points_used > 0:
            if not user:
                raise NotFoundError('User not found')
            user.validate_can_spend_points(points_used)

        total_idr = compute_total_idr(
            price_idr=event.price_idr,
            is_free=event.is_free,
            discount_idr=coupon.discount_idr if coupon else 0,
            points_used=points_used,
        )

        # Step 2: Reserve the seat
        reserved_event = await self.event_inventory_repo.reserve_seat(event_id=event_id)
        if reserved_event is None:
            raise SoldOutError('Event is sold out')

        coupon_applied = False
        points_debited = 0
        try:
            # Step 3: Consume the coupon
            if coupon is not None:
                await self.use_coupon_use_case.consume(coupon=coupon, path='purchase')
                coupon_applied = True

            # Step 4: Debit points
            if self.deduct_points_on_purchase and points_used > 0:
                debited = await self.user_points_repo.deduct_points(
                    user_id=user_id, points=points_used
                )
                if debited is None:
                    raise InsufficientPointsError(
                        f'Insufficient points: requested {points_used}'
                    )
                points_debited = points_used
                user = debited

            # Step 5: Persist
            created = await self.transaction_command_repo.create(
                transaction=Transaction.create(
                    user_id=user_id,
                    event_id=event_id,
                    total_idr=total_idr,
                    coupon_id=coupon_id,
                    points_used=points_used,
                )
            )
        except Exception:
            Logger.base.warning(
                f'↩️ [CREATE-TRANSACTION] Failed after reserving a seat of event {event_id}, '
                'compensating'
            )
            await self.compensator.compensate(
                event_id=event_id,
                user_id=user_id,
                coupon_id=coupon_id if coupon_applied else None,
                points=points_debited,
            )
            raise

        Logger.base.info(
            f'🎫 [CREATE-TRANSACTION] Transaction {created.id} created for user {user_id}, '
            f'event {event_id}, total {total_idr} IDR'
        )
        return TransactionDetail(
            transaction=created,
            user=UserSummary.from_user(user) if user else None,
            event=EventSummary.from_event(reserved_event),
        )
