"""
Unit tests for UpdateTransactionStatusUseCase

Tests the admin status flow:
1. Transition validation against the current status
2. Guarded write (lost race -> re-validate, then ConflictError)
3. Compensation on REJECTED / CANCELED
4. Post-commit notification on DONE / REJECTED
"""

from unittest.mock import AsyncMock, Mock

import pytest
from sqlalchemy.exc import OperationalError

from src.platform.exception.exceptions import (
    ConflictError,
    InvalidTransitionError,
    NotFoundError,
    PersistenceError,
    RollbackError,
)
from src.service.purchase.app.command.update_transaction_status_use_case import (
    UpdateTransactionStatusUseCase,
)
from src.service.purchase.domain.domain_event.transaction_domain_event import (
    DEFAULT_REJECTION_REASON,
)
from src.service.purchase.domain.entity.coupon_entity import OrganizerCoupon
from src.service.purchase.domain.entity.event_entity import EventSnapshot
from src.service.purchase.domain.entity.transaction_entity import Transaction
from src.service.purchase.domain.entity.user_entity import UserEntity
from src.service.purchase.domain.enum.coupon_enum import CouponStatus
from src.service.purchase.domain.enum.transaction_status import TransactionStatus
from test.service.purchase.fakes import InMemoryPurchaseWorld
from test.service.purchase.unit.test_helpers import RepositoryMocks


async def _purchase(
    world: InMemoryPurchaseWorld, *, user: UserEntity, event: EventSnapshot, coupon_id=None
) -> Transaction:
    detail = await world.create_transaction_use_case().execute(
        user_id=user.id,  # type: ignore[arg-type]
        event_id=event.id,
        coupon_id=coupon_id,
    )
    return detail.transaction


@pytest.mark.unit
class TestUpdateTransactionStatus:
    @pytest.mark.asyncio
    async def test_confirm_payment_then_done_sends_confirmation(
        self, customer: UserEntity, upcoming_event: EventSnapshot
    ) -> None:
        """
        Given: A transaction waiting for payment
        When: An admin moves it to WAITING_FOR_ADMIN_CONFIRMATION and then DONE
        Then: The seat stays taken and one confirmation e-mail is sent
        """
        # Arrange
        world = InMemoryPurchaseWorld(users=[customer], events=[upcoming_event])
        transaction = await _purchase(world, user=customer, event=upcoming_event)
        use_case = world.update_transaction_status_use_case()

        # Act
        await use_case.execute(
            transaction_id=transaction.id,  # type: ignore[arg-type]
            status=TransactionStatus.WAITING_FOR_ADMIN_CONFIRMATION,
        )
        done = await use_case.execute(
            transaction_id=transaction.id,  # type: ignore[arg-type]
            status=TransactionStatus.DONE,
        )

        # Assert
        assert done.status == TransactionStatus.DONE
        assert world.seat_count(upcoming_event.id) == 4
        assert len(world.notification_sender.sent) == 1
        sent = world.notification_sender.sent[0]
        assert sent['to'] == customer.email
        assert sent['template_name'] == 'transaction-accepted'
        assert sent['context']['event_title'] == upcoming_event.title
        assert sent['context']['total_idr'] == 100_000

    @pytest.mark.asyncio
    async def test_reject_restores_seat_and_coupon(
        self,
        customer: UserEntity,
        upcoming_event: EventSnapshot,
        organizer_coupon: OrganizerCoupon,
    ) -> None:
        """
        Given: A paid transaction that applied an organizer coupon
        When: An admin rejects it with a note
        Then: Seat and coupon unit are back and the rejection e-mail carries the note
        """
        # Arrange
        world = InMemoryPurchaseWorld(
            users=[customer], events=[upcoming_event], coupons=[organizer_coupon]
        )
        transaction = await _purchase(
            world, user=customer, event=upcoming_event, coupon_id=organizer_coupon.id
        )
        use_case = world.update_transaction_status_use_case()
        await use_case.execute(
            transaction_id=transaction.id,  # type: ignore[arg-type]
            status=TransactionStatus.WAITING_FOR_ADMIN_CONFIRMATION,
        )

        # Act
        rejected = await use_case.execute(
            transaction_id=transaction.id,  # type: ignore[arg-type]
            status=TransactionStatus.REJECTED,
            admin_notes='Transfer amount does not match',
        )

        # Assert
        assert rejected.status == TransactionStatus.REJECTED
        assert rejected.admin_notes == 'Transfer amount does not match'
        assert world.seat_count(upcoming_event.id) == 5
        coupon = world.coupon(organizer_coupon.id)  # type: ignore[arg-type]
        assert coupon.quantity == 2  # type: ignore[union-attr]
        assert coupon.used == 0
        assert coupon.status == CouponStatus.AVAILABLE

        sent = world.notification_sender.sent[-1]
        assert sent['template_name'] == 'transaction-rejected'
        assert sent['context']['reason'] == 'Transfer amount does not match'
        assert sent['context']['retry_link'] == 'http://localhost:3000/checkout'

    @pytest.mark.asyncio
    async def test_reject_without_note_uses_default_reason(
        self, customer: UserEntity, upcoming_event: EventSnapshot
    ) -> None:
        # Arrange
        world = InMemoryPurchaseWorld(users=[customer], events=[upcoming_event])
        transaction = await _purchase(world, user=customer, event=upcoming_event)
        use_case = world.update_transaction_status_use_case()
        await use_case.execute(
            transaction_id=transaction.id,  # type: ignore[arg-type]
            status=TransactionStatus.WAITING_FOR_ADMIN_CONFIRMATION,
        )

        # Act
        await use_case.execute(
            transaction_id=transaction.id,  # type: ignore[arg-type]
            status=TransactionStatus.REJECTED,
        )

        # Assert
        assert world.notification_sender.sent[-1]['context']['reason'] == DEFAULT_REJECTION_REASON

    @pytest.mark.asyncio
    async def test_invalid_transition_leaves_transaction_unchanged(
        self, customer: UserEntity, upcoming_event: EventSnapshot
    ) -> None:
        """
        Given: A transaction waiting for payment
        When: An admin tries to move it straight to DONE
        Then: InvalidTransitionError is raised, the status is unchanged and nothing is sent
        """
        # Arrange
        world = InMemoryPurchaseWorld(users=[customer], events=[upcoming_event])
        transaction = await _purchase(world, user=customer, event=upcoming_event)

        # Act & Assert
        with pytest.raises(InvalidTransitionError):
            await world.update_transaction_status_use_case().execute(
                transaction_id=transaction.id,  # type: ignore[arg-type]
                status=TransactionStatus.DONE,
            )

        stored = world.transaction_repo.transactions[transaction.id]  # type: ignore[index]
        assert stored.status == TransactionStatus.WAITING_FOR_PAYMENT
        assert world.notification_sender.sent == []

    @pytest.mark.asyncio
    async def test_expire_gives_nothing_back(
        self, customer: UserEntity, upcoming_event: EventSnapshot
    ) -> None:
        # Arrange
        world = InMemoryPurchaseWorld(users=[customer], events=[upcoming_event])
        transaction = await _purchase(world, user=customer, event=upcoming_event)

        # Act
        expired = await world.update_transaction_status_use_case().execute(
            transaction_id=transaction.id,  # type: ignore[arg-type]
            status=TransactionStatus.EXPIRED,
        )

        # Assert
        assert expired.status == TransactionStatus.EXPIRED
        assert world.seat_count(upcoming_event.id) == 4
        assert world.notification_sender.sent == []

    @pytest.mark.asyncio
    async def test_unknown_transaction(self) -> None:
        world = InMemoryPurchaseWorld()

        with pytest.raises(NotFoundError):
            await world.update_transaction_status_use_case().execute(
                transaction_id=404, status=TransactionStatus.DONE
            )

    @pytest.mark.asyncio
    async def test_notification_failure_does_not_fail_the_update(
        self, customer: UserEntity, upcoming_event: EventSnapshot
    ) -> None:
        # Arrange
        world = InMemoryPurchaseWorld(users=[customer], events=[upcoming_event])
        world.notification_sender.fail = True
        transaction = await _purchase(world, user=customer, event=upcoming_event)
        use_case = world.update_transaction_status_use_case()
        await use_case.execute(
            transaction_id=transaction.id,  # type: ignore[arg-type]
            status=TransactionStatus.WAITING_FOR_ADMIN_CONFIRMATION,
        )

        # Act
        done = await use_case.execute(
            transaction_id=transaction.id,  # type: ignore[arg-type]
            status=TransactionStatus.DONE,
        )

        # Assert
        assert done.status == TransactionStatus.DONE


@pytest.mark.unit
class TestUpdateTransactionStatusRaces:
    def _use_case(self, mocks: RepositoryMocks, compensator: AsyncMock) -> UpdateTransactionStatusUseCase:
        return UpdateTransactionStatusUseCase(
            transaction_query_repo=mocks.transaction_query_repo,
            transaction_command_repo=mocks.transaction_command_repo,
            event_inventory_repo=mocks.event_inventory_repo,
            user_points_repo=mocks.user_points_repo,
            compensator=compensator,
            event_publisher=mocks.event_publisher,
        )

    @pytest.mark.asyncio
    async def test_concurrent_same_transition_loses_with_invalid_transition(self) -> None:
        """
        Given: Two admins reject the same transaction at the same time
        When: The second guarded write matches no row
        Then: The fresh status is re-validated and compensation runs only once
        """
        # Arrange
        waiting = Transaction(
            id=1,
            user_id=1,
            event_id=10,
            total_idr=100_000,
            status=TransactionStatus.WAITING_FOR_ADMIN_CONFIRMATION,
        )
        already_rejected = Transaction(
            id=1, user_id=1, event_id=10, total_idr=100_000, status=TransactionStatus.REJECTED
        )
        mocks = RepositoryMocks(transaction=waiting)
        mocks.transaction_query_repo.get_by_id = AsyncMock(side_effect=[waiting, already_rejected])
        mocks.transaction_command_repo.update_status_atomically = AsyncMock(return_value=None)
        compensator = AsyncMock()

        # Act & Assert
        with pytest.raises(InvalidTransitionError):
            await self._use_case(mocks, compensator).execute(
                transaction_id=1, status=TransactionStatus.REJECTED
            )

        compensator.compensate_transaction.assert_not_awaited()
        mocks.event_publisher.publish.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_lost_race_with_unchanged_status_is_conflict(self) -> None:
        # Arrange
        waiting = Transaction(
            id=1,
            user_id=1,
            event_id=10,
            total_idr=100_000,
            status=TransactionStatus.WAITING_FOR_ADMIN_CONFIRMATION,
        )
        mocks = RepositoryMocks(transaction=waiting)
        mocks.transaction_command_repo.update_status_atomically = AsyncMock(return_value=None)

        # Act & Assert
        with pytest.raises(ConflictError):
            await self._use_case(mocks, AsyncMock()).execute(
                transaction_id=1, status=TransactionStatus.DONE
            )

    @pytest.mark.asyncio
    async def test_compensation_failure_raises_rollback_error(self) -> None:
        """
        Given: Releasing the seat fails after the REJECTED write committed
        When: The admin rejects the transaction
        Then: RollbackError names the failed step and the rejection is still notified
        """
        # Arrange
        waiting = Transaction(
            id=1,
            user_id=1,
            event_id=10,
            total_idr=100_000,
            status=TransactionStatus.WAITING_FOR_ADMIN_CONFIRMATION,
        )
        rejected = Transaction(
            id=1, user_id=1, event_id=10, total_idr=100_000, status=TransactionStatus.REJECTED
        )
        mocks = RepositoryMocks(
            transaction=waiting,
            user=UserEntity(id=1, email='buyer@example.com', name='Budi'),
            event=Mock(title='Jazz Night'),  # type: ignore[arg-type]
        )
        mocks.transaction_command_repo.update_status_atomically = AsyncMock(return_value=rejected)
        compensator = AsyncMock()
        compensator.compensate_transaction = AsyncMock(return_value=['release_seat'])

        # Act
        with pytest.raises(RollbackError) as exc_info:
            await self._use_case(mocks, compensator).execute(
                transaction_id=1, status=TransactionStatus.REJECTED
            )

        # Assert
        assert exc_info.value.failed_steps == ['release_seat']
        mocks.event_publisher.publish.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_database_failure_is_wrapped(self) -> None:
        # Arrange
        mocks = RepositoryMocks()
        mocks.transaction_query_repo.get_by_id = AsyncMock(
            side_effect=OperationalError('SELECT', {}, Exception('connection reset'))
        )

        # Act & Assert
        with pytest.raises(PersistenceError):
            await self._use_case(mocks, AsyncMock()).execute(
                transaction_id=1, status=TransactionStatus.DONE
            )
