"""
In-memory fakes for the purchase ports

Each fake keeps the guard semantics of its SQL counterpart: a guarded write
returns the updated entity, or None when the guard does not match.
"""

from datetime import datetime, timezone
import itertools
from typing import Any, List, Optional, Sequence

import attrs

from src.platform.exception.exceptions import ConflictError
from src.service.purchase.app.command.cancel_transaction_use_case import CancelTransactionUseCase
from src.service.purchase.app.command.create_transaction_use_case import CreateTransactionUseCase
from src.service.purchase.app.command.redeem_coupon_use_case import RedeemCouponUseCase
from src.service.purchase.app.command.rollback_coupon_usage_use_case import (
    RollbackCouponUsageUseCase,
)
from src.service.purchase.app.command.send_transaction_notification_use_case import (
    SendTransactionNotificationUseCase,
)
from src.service.purchase.app.command.transaction_compensator import TransactionCompensator
from src.service.purchase.app.command.update_transaction_status_use_case import (
    UpdateTransactionStatusUseCase,
)
from src.service.purchase.app.command.use_coupon_use_case import UseCouponUseCase
from src.service.purchase.app.dto.transaction_detail import (
    EventSummary,
    TransactionDetail,
    UserSummary,
)
from src.service.purchase.app.dto.transaction_filter import TransactionFilter
from src.service.purchase.app.dto.transaction_stats import TransactionStats
from src.service.purchase.app.interface.i_coupon_command_repo import ICouponCommandRepo
from src.service.purchase.app.interface.i_coupon_query_repo import ICouponQueryRepo
from src.service.purchase.app.interface.i_event_inventory_repo import IEventInventoryRepo
from src.service.purchase.app.interface.i_notification_sender import INotificationSender
from src.service.purchase.app.interface.i_transaction_command_repo import (
    ITransactionCommandRepo,
)
from src.service.purchase.app.interface.i_transaction_query_repo import ITransactionQueryRepo
from src.service.purchase.app.interface.i_user_points_repo import IUserPointsRepo
from src.service.purchase.domain.entity.coupon_entity import (
    Coupon,
    OrganizerCoupon,
    ReferralCoupon,
)
from src.service.purchase.domain.entity.event_entity import EventSnapshot
from src.service.purchase.domain.entity.transaction_entity import Transaction
from src.service.purchase.domain.entity.user_entity import UserEntity
from src.service.purchase.domain.enum.coupon_enum import CouponExhaustionPolicy, CouponStatus
from src.service.purchase.domain.enum.transaction_status import TransactionStatus
from src.service.purchase.driven_adapter.event.in_process_transaction_event_publisher import (
    InProcessTransactionEventPublisher,
)


class FakeEventInventoryRepo(IEventInventoryRepo):
    def __init__(self, *events: EventSnapshot) -> None:
        self.events = {event.id: event for event in events}

    async def get_by_id(self, *, event_id: int) -> Optional[EventSnapshot]:
        event = self.events.get(event_id)
        return attrs.evolve(event) if event else None

    async def reserve_seat(self, *, event_id: int) -> Optional[EventSnapshot]:
        event = self.events.get(event_id)
        if event is None or event.quantity <= 0:
            return None
        self.events[event_id] = attrs.evolve(event, quantity=event.quantity - 1)
        return attrs.evolve(self.events[event_id])

    async def release_seat(self, *, event_id: int) -> Optional[EventSnapshot]:
        event = self.events.get(event_id)
        if event is None:
            return None
        self.events[event_id] = attrs.evolve(event, quantity=event.quantity + 1)
        return attrs.evolve(self.events[event_id])


class FakeUserPointsRepo(IUserPointsRepo):
    def __init__(self, *users: UserEntity) -> None:
        self.users = {user.id: user for user in users}

    async def get_by_id(self, *, user_id: int) -> Optional[UserEntity]:
        user = self.users.get(user_id)
        return attrs.evolve(user) if user else None

    async def deduct_points(self, *, user_id: int, points: int) -> Optional[UserEntity]:
        user = self.users.get(user_id)
        if user is None or user.points < points:
            return None
        self.users[user_id] = attrs.evolve(user, points=user.points - points)
        return attrs.evolve(self.users[user_id])

    async def refund_points(self, *, user_id: int, points: int) -> Optional[UserEntity]:
        user = self.users.get(user_id)
        if user is None:
            return None
        self.users[user_id] = attrs.evolve(user, points=user.points + points)
        return attrs.evolve(self.users[user_id])


class FakeCouponRepo(ICouponQueryRepo, ICouponCommandRepo):
    """Serves both coupon ports from one store, like the shared table does"""

    def __init__(self, *coupons: Coupon) -> None:
        self._ids = itertools.count(1)
        self.coupons: dict[int, Coupon] = {}
        for coupon in coupons:
            if coupon.id is None:
                coupon = attrs.evolve(coupon, id=next(self._ids))
            self.coupons[coupon.id] = coupon  # type: ignore[index]
        self.usage: dict[int, int] = {}

    # ========== Query ==========

    async def get_by_id(self, *, coupon_id: int) -> Optional[Coupon]:
        coupon = self.coupons.get(coupon_id)
        return attrs.evolve(coupon) if coupon else None

    async def get_by_code(self, *, code: str) -> Optional[Coupon]:
        for coupon in self.coupons.values():
            if coupon.code == code:
                return attrs.evolve(coupon)
        return None

    async def list_all(self) -> List[Coupon]:
        return [attrs.evolve(coupon) for coupon in self.coupons.values()]

    async def list_by_organizer_with_usage(
        self, *, organizer_id: int
    ) -> List[tuple[OrganizerCoupon, int]]:
        return [
            (attrs.evolve(coupon), self.usage.get(coupon.id, 0))  # type: ignore[arg-type]
            for coupon in self.coupons.values()
            if isinstance(coupon, OrganizerCoupon) and coupon.organizer_id == organizer_id
        ]

    async def list_by_user(self, *, user_id: int) -> List[ReferralCoupon]:
        return [
            attrs.evolve(coupon)
            for coupon in self.coupons.values()
            if isinstance(coupon, ReferralCoupon) and coupon.user_id == user_id
        ]

    # ========== Command ==========

    async def create(self, *, coupon: Coupon) -> Coupon:
        if any(existing.code == coupon.code for existing in self.coupons.values()):
            raise ConflictError(f'Coupon code {coupon.code} already exists')
        created = attrs.evolve(coupon, id=next(self._ids))
        self.coupons[created.id] = created  # type: ignore[index]
        return attrs.evolve(created)

    async def consume_organizer_unit(
        self, *, coupon_id: int, exhausted_status: CouponStatus, now: datetime
    ) -> Optional[OrganizerCoupon]:
        coupon = self.coupons.get(coupon_id)
        if (
            not isinstance(coupon, OrganizerCoupon)
            or coupon.status != CouponStatus.AVAILABLE
            or coupon.quantity <= 0
            or coupon.is_expired(now=now)
        ):
            return None
        updated = attrs.evolve(
            coupon,
            quantity=coupon.quantity - 1,
            used=coupon.used + 1,
            status=exhausted_status if coupon.quantity == 1 else coupon.status,
        )
        self.coupons[coupon_id] = updated
        return attrs.evolve(updated)

    async def consume_referral(self, *, coupon_id: int, now: datetime) -> Optional[ReferralCoupon]:
        coupon = self.coupons.get(coupon_id)
        if not isinstance(coupon, ReferralCoupon) or coupon.status != CouponStatus.AVAILABLE:
            return None
        updated = attrs.evolve(coupon, status=CouponStatus.USED, used_at=now)
        self.coupons[coupon_id] = updated
        return attrs.evolve(updated)

    async def release_organizer_unit(
        self, *, coupon_id: int, now: datetime
    ) -> Optional[OrganizerCoupon]:
        coupon = self.coupons.get(coupon_id)
        if not isinstance(coupon, OrganizerCoupon):
            return None
        if not coupon.used:
            return None
        updated = attrs.evolve(
            coupon,
            quantity=coupon.quantity + 1,
            used=coupon.used - 1,
            status=CouponStatus.EXPIRED if coupon.is_expired(now=now) else CouponStatus.AVAILABLE,
        )
        self.coupons[coupon_id] = updated
        return attrs.evolve(updated)

    async def release_referral(self, *, coupon_id: int) -> Optional[ReferralCoupon]:
        coupon = self.coupons.get(coupon_id)
        if not isinstance(coupon, ReferralCoupon) or coupon.status != CouponStatus.USED:
            return None
        updated = attrs.evolve(coupon, status=CouponStatus.AVAILABLE, used_at=None)
        self.coupons[coupon_id] = updated
        return attrs.evolve(updated)

    async def mark_expired(self, *, coupon_id: int) -> Optional[Coupon]:
        coupon = self.coupons.get(coupon_id)
        if coupon is None or coupon.status != CouponStatus.AVAILABLE:
            return None
        updated = attrs.evolve(coupon, status=CouponStatus.EXPIRED)
        self.coupons[coupon_id] = updated
        return attrs.evolve(updated)


class FakeTransactionRepo(ITransactionQueryRepo, ITransactionCommandRepo):
    """Serves both transaction ports; details are joined from the user and event fakes"""

    def __init__(
        self,
        *,
        user_repo: Optional[FakeUserPointsRepo] = None,
        event_repo: Optional[FakeEventInventoryRepo] = None,
        coupon_repo: Optional[FakeCouponRepo] = None,
    ) -> None:
        self._ids = itertools.count(1)
        self.transactions: dict[int, Transaction] = {}
        self.user_repo = user_repo or FakeUserPointsRepo()
        self.event_repo = event_repo or FakeEventInventoryRepo()
        self.coupon_repo = coupon_repo

    def seed(self, transaction: Transaction) -> Transaction:
        seeded = attrs.evolve(
            transaction,
            id=transaction.id or next(self._ids),
            created_at=transaction.created_at or datetime.now(timezone.utc),
        )
        self.transactions[seeded.id] = seeded  # type: ignore[index]
        return seeded

    # ========== Command ==========

    async def create(self, *, transaction: Transaction) -> Transaction:
        created = self.seed(transaction)
        if self.coupon_repo is not None and created.coupon_id is not None:
            usage = self.coupon_repo.usage
            usage[created.coupon_id] = usage.get(created.coupon_id, 0) + 1
        return attrs.evolve(created)

    async def update_status_atomically(
        self,
        *,
        transaction_id: int,
        from_status: TransactionStatus,
        to_status: TransactionStatus,
        admin_notes: Optional[str] = None,
    ) -> Optional[Transaction]:
        transaction = self.transactions.get(transaction_id)
        if transaction is None or transaction.status != from_status:
            return None
        updated = attrs.evolve(
            transaction,
            status=to_status,
            admin_notes=admin_notes if admin_notes is not None else transaction.admin_notes,
            updated_at=datetime.now(timezone.utc),
        )
        self.transactions[transaction_id] = updated
        return attrs.evolve(updated)

    # ========== Query ==========

    async def get_by_id(self, *, transaction_id: int) -> Optional[Transaction]:
        transaction = self.transactions.get(transaction_id)
        return attrs.evolve(transaction) if transaction else None

    async def get_detail(self, *, transaction_id: int) -> Optional[TransactionDetail]:
        transaction = self.transactions.get(transaction_id)
        return self._to_detail(transaction) if transaction else None

    async def list_with_details(
        self, *, filters: TransactionFilter
    ) -> tuple[List[TransactionDetail], int]:
        matching = [t for t in self.transactions.values() if self._matches(t, filters)]
        matching.sort(key=lambda t: (t.created_at, t.id), reverse=True)
        page = matching[filters.offset : filters.offset + filters.limit]
        return [self._to_detail(t) for t in page], len(matching)

    async def get_stats(
        self, *, user_id: Optional[int] = None, event_id: Optional[int] = None
    ) -> TransactionStats:
        selected = [
            t
            for t in self.transactions.values()
            if (user_id is None or t.user_id == user_id)
            and (event_id is None or t.event_id == event_id)
        ]

        def count(*statuses: TransactionStatus) -> int:
            return sum(1 for t in selected if t.status in statuses)

        return TransactionStats(
            total=len(selected),
            revenue_idr=sum(t.total_idr for t in selected if t.status == TransactionStatus.DONE),
            pending=count(
                TransactionStatus.WAITING_FOR_PAYMENT,
                TransactionStatus.WAITING_FOR_ADMIN_CONFIRMATION,
            ),
            completed=count(TransactionStatus.DONE),
            rejected=count(TransactionStatus.REJECTED),
            canceled=count(TransactionStatus.CANCELED),
            expired=count(TransactionStatus.EXPIRED),
        )

    async def list_waiting_created_before(
        self, *, created_before: datetime, limit: int
    ) -> List[TransactionDetail]:
        waiting = sorted(
            (
                t
                for t in self.transactions.values()
                if t.status == TransactionStatus.WAITING_FOR_PAYMENT
                and t.created_at < created_before  # type: ignore[operator]
            ),
            key=lambda t: t.created_at,  # type: ignore[arg-type, return-value]
        )
        return [self._to_detail(t) for t in waiting[:limit]]

    def _matches(self, transaction: Transaction, filters: TransactionFilter) -> bool:
        event = self.event_repo.events.get(transaction.event_id)
        checks = [
            filters.user_id is None or transaction.user_id == filters.user_id,
            filters.event_id is None or transaction.event_id == filters.event_id,
            filters.organizer_id is None
            or (event is not None and event.organizer_id == filters.organizer_id),
            filters.status is None or transaction.status == filters.status,
            filters.date_from is None or transaction.created_at >= filters.date_from,  # type: ignore[operator]
            filters.date_to is None or transaction.created_at <= filters.date_to,  # type: ignore[operator]
            filters.min_amount is None or transaction.total_idr >= filters.min_amount,
            filters.max_amount is None or transaction.total_idr <= filters.max_amount,
        ]
        return all(checks)

    def _to_detail(self, transaction: Transaction) -> TransactionDetail:
        user = self.user_repo.users.get(transaction.user_id)
        event = self.event_repo.events.get(transaction.event_id)
        return TransactionDetail(
            transaction=attrs.evolve(transaction),
            user=UserSummary.from_user(user) if user else None,
            event=EventSummary.from_event(event) if event else None,
        )


class RecordingNotificationSender(INotificationSender):
    def __init__(self, *, fail: bool = False) -> None:
        self.fail = fail
        self.sent: List[dict[str, Any]] = []

    async def notify(
        self, *, to_email: str, subject: str, template_name: str, context: dict[str, Any]
    ) -> None:
        if self.fail:
            raise ConnectionError('SMTP server unreachable')
        self.sent.append(
            {
                'to': to_email,
                'subject': subject,
                'template_name': template_name,
                'context': context,
            }
        )


class InMemoryPurchaseWorld:
    """
    Wires the real use cases to the fakes above, the way the container wires
    them to the SQL repositories.
    """

    def __init__(
        self,
        *,
        users: Sequence[UserEntity] = (),
        events: Sequence[EventSnapshot] = (),
        coupons: Sequence[Coupon] = (),
        exhaustion_policy: CouponExhaustionPolicy = CouponExhaustionPolicy.MARK_USED,
        deduct_points_on_purchase: bool = False,
    ) -> None:
        self.user_repo = FakeUserPointsRepo(*users)
        self.event_repo = FakeEventInventoryRepo(*events)
        self.coupon_repo = FakeCouponRepo(*coupons)
        self.transaction_repo = FakeTransactionRepo(
            user_repo=self.user_repo, event_repo=self.event_repo, coupon_repo=self.coupon_repo
        )
        self.notification_sender = RecordingNotificationSender()
        self.notification_use_case = SendTransactionNotificationUseCase(
            notification_sender=self.notification_sender,
            dashboard_url='http://localhost:3000/dashboard',
            checkout_url='http://localhost:3000/checkout',
        )
        self.event_publisher = InProcessTransactionEventPublisher(
            notification_use_case=self.notification_use_case
        )
        self.use_coupon_use_case = UseCouponUseCase(
            coupon_query_repo=self.coupon_repo,
            coupon_command_repo=self.coupon_repo,
            exhaustion_policy=exhaustion_policy,
        )
        self.rollback_coupon_usage_use_case = RollbackCouponUsageUseCase(
            coupon_query_repo=self.coupon_repo, coupon_command_repo=self.coupon_repo
        )
        self.deduct_points_on_purchase = deduct_points_on_purchase
        self.compensator = TransactionCompensator(
            event_inventory_repo=self.event_repo,
            user_points_repo=self.user_repo,
            rollback_coupon_usage_use_case=self.rollback_coupon_usage_use_case,
            deduct_points_on_purchase=deduct_points_on_purchase,
        )

    def create_transaction_use_case(self) -> CreateTransactionUseCase:
        return CreateTransactionUseCase(
            event_inventory_repo=self.event_repo,
            user_points_repo=self.user_repo,
            coupon_query_repo=self.coupon_repo,
            transaction_command_repo=self.transaction_repo,
            use_coupon_use_case=self.use_coupon_use_case,
            compensator=self.compensator,
            deduct_points_on_purchase=self.deduct_points_on_purchase,
        )

    def update_transaction_status_use_case(self) -> UpdateTransactionStatusUseCase:
        return UpdateTransactionStatusUseCase(
            transaction_query_repo=self.transaction_repo,
            transaction_command_repo=self.transaction_repo,
            event_inventory_repo=self.event_repo,
            user_points_repo=self.user_repo,
            compensator=self.compensator,
            event_publisher=self.event_publisher,
        )

    def cancel_transaction_use_case(self) -> CancelTransactionUseCase:
        return CancelTransactionUseCase(
            transaction_query_repo=self.transaction_repo,
            transaction_command_repo=self.transaction_repo,
            compensator=self.compensator,
        )

    def redeem_coupon_use_case(self) -> RedeemCouponUseCase:
        return RedeemCouponUseCase(
            coupon_query_repo=self.coupon_repo, use_coupon_use_case=self.use_coupon_use_case
        )

    def seat_count(self, event_id: int) -> int:
        return self.event_repo.events[event_id].quantity

    def coupon(self, coupon_id: int) -> Coupon:
        return self.coupon_repo.coupons[coupon_id]
