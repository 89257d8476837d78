"""
Unit tests for the coupon use cases

- UseCouponUseCase / RedeemCouponUseCase: consumption and its error kinds
- RollbackCouponUsageUseCase: giving a use back
- CreateOrganizerCouponUseCase / CreateReferralCouponUseCase: issuing
- ListCouponsUseCase: listing per owner
"""

from datetime import datetime, timedelta
from unittest.mock import AsyncMock

import attrs
import pytest

from src.platform.exception.exceptions import (
    AlreadyUsedError,
    ConflictError,
    ExhaustedError,
    ExpiredError,
    ForbiddenError,
    NotFoundError,
    RollbackError,
    ValidationError,
)
from src.service.purchase.app.command.create_coupon_use_case import (
    CreateOrganizerCouponUseCase,
    CreateReferralCouponUseCase,
)
from src.service.purchase.app.command.rollback_coupon_usage_use_case import (
    RollbackCouponUsageUseCase,
)
from src.service.purchase.app.command.use_coupon_use_case import UseCouponUseCase
from src.service.purchase.app.query.list_coupons_use_case import ListCouponsUseCase
from src.service.purchase.domain.entity.coupon_entity import OrganizerCoupon, ReferralCoupon
from src.service.purchase.domain.enum.coupon_enum import CouponExhaustionPolicy, CouponStatus
from test.service.purchase.fakes import FakeCouponRepo, InMemoryPurchaseWorld
from test.service.purchase.unit.test_helpers import RepositoryMocks


@pytest.mark.unit
class TestRedeemCoupon:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        'policy, exhausted_status',
        [
            (CouponExhaustionPolicy.MARK_USED, CouponStatus.USED),
            (CouponExhaustionPolicy.MARK_EXPIRED, CouponStatus.EXPIRED),
        ],
    )
    async def test_organizer_coupon_counts_down_to_exhaustion(
        self,
        organizer_coupon: OrganizerCoupon,
        policy: CouponExhaustionPolicy,
        exhausted_status: CouponStatus,
    ) -> None:
        """
        Given: An organizer coupon with 2 units
        When: It is redeemed three times
        Then: Units go 2 -> 1 -> 0, the policy sets the status, the third redemption is exhausted
        """
        # Arrange
        world = InMemoryPurchaseWorld(coupons=[organizer_coupon], exhaustion_policy=policy)
        use_case = world.redeem_coupon_use_case()

        # Act
        first = await use_case.execute(code='JAZZ20', user_id=1)
        second = await use_case.execute(code='JAZZ20', user_id=1)

        # Assert
        assert first.coupon.quantity == 1  # type: ignore[union-attr]
        assert first.coupon.status == CouponStatus.AVAILABLE
        assert second.coupon.quantity == 0  # type: ignore[union-attr]
        assert second.coupon.used == 2
        assert second.coupon.status == exhausted_status
        assert second.redeemed_by == 1

        with pytest.raises(ExhaustedError):
            await use_case.execute(code='JAZZ20', user_id=1)

    @pytest.mark.asyncio
    async def test_referral_coupon_is_single_use(self, referral_coupon: ReferralCoupon) -> None:
        # Arrange
        world = InMemoryPurchaseWorld(coupons=[referral_coupon])
        use_case = world.redeem_coupon_use_case()

        # Act
        receipt = await use_case.execute(code=' REF-BUDI ', user_id=1)

        # Assert
        assert receipt.coupon.status == CouponStatus.USED
        with pytest.raises(AlreadyUsedError):
            await use_case.execute(code='REF-BUDI', user_id=1)

    @pytest.mark.asyncio
    async def test_referral_coupon_of_another_user_is_forbidden(
        self, referral_coupon: ReferralCoupon
    ) -> None:
        # Arrange
        world = InMemoryPurchaseWorld(coupons=[referral_coupon])

        # Act & Assert
        with pytest.raises(ForbiddenError):
            await world.redeem_coupon_use_case().execute(code='REF-BUDI', user_id=2)
        assert world.coupon(referral_coupon.id).status == CouponStatus.AVAILABLE  # type: ignore[arg-type]

    @pytest.mark.asyncio
    async def test_organizer_coupon_can_be_redeemed_by_anyone(
        self, organizer_coupon: OrganizerCoupon
    ) -> None:
        world = InMemoryPurchaseWorld(coupons=[organizer_coupon])

        receipt = await world.redeem_coupon_use_case().execute(code='JAZZ20', user_id=42)

        assert receipt.redeemed_by == 42

    @pytest.mark.asyncio
    async def test_unknown_code(self) -> None:
        with pytest.raises(NotFoundError):
            await InMemoryPurchaseWorld().redeem_coupon_use_case().execute(code='NOPE', user_id=1)

    @pytest.mark.asyncio
    async def test_expired_coupon_is_flagged_expired(
        self, organizer_coupon: OrganizerCoupon, now: datetime
    ) -> None:
        """
        Given: An AVAILABLE organizer coupon whose expiry date has passed
        When: It is redeemed
        Then: ExpiredError is raised and the stored status becomes EXPIRED
        """
        # Arrange
        stale = attrs.evolve(organizer_coupon, expires_at=now - timedelta(days=1))
        world = InMemoryPurchaseWorld(coupons=[stale])

        # Act & Assert
        with pytest.raises(ExpiredError):
            await world.redeem_coupon_use_case().execute(code='JAZZ20', user_id=1)

        stored = world.coupon(stale.id)  # type: ignore[arg-type]
        assert stored.status == CouponStatus.EXPIRED
        assert stored.quantity == 2  # type: ignore[union-attr]


@pytest.mark.unit
class TestUseCouponRaces:
    @pytest.mark.asyncio
    async def test_lost_race_on_last_unit_is_exhausted(
        self, organizer_coupon: OrganizerCoupon
    ) -> None:
        """
        Given: The in-memory copy still shows a unit left
        When: The guarded decrement matches no row because another buyer took it
        Then: ExhaustedError is raised
        """
        # Arrange
        mocks = RepositoryMocks(coupon=organizer_coupon)
        mocks.coupon_command_repo.consume_organizer_unit = AsyncMock(return_value=None)
        use_case = UseCouponUseCase(
            coupon_query_repo=mocks.coupon_query_repo,
            coupon_command_repo=mocks.coupon_command_repo,
        )

        # Act & Assert
        with pytest.raises(ExhaustedError):
            await use_case.execute(coupon_id=organizer_coupon.id)  # type: ignore[arg-type]

    @pytest.mark.asyncio
    async def test_lost_race_on_referral_is_already_used(
        self, referral_coupon: ReferralCoupon
    ) -> None:
        # Arrange
        mocks = RepositoryMocks(coupon=referral_coupon)
        mocks.coupon_command_repo.consume_referral = AsyncMock(return_value=None)
        use_case = UseCouponUseCase(
            coupon_query_repo=mocks.coupon_query_repo,
            coupon_command_repo=mocks.coupon_command_repo,
        )

        # Act & Assert
        with pytest.raises(AlreadyUsedError):
            await use_case.execute(coupon_id=referral_coupon.id)  # type: ignore[arg-type]

    @pytest.mark.asyncio
    async def test_exhaustion_policy_is_passed_to_repo(
        self, organizer_coupon: OrganizerCoupon
    ) -> None:
        # Arrange
        mocks = RepositoryMocks(coupon=organizer_coupon)
        mocks.coupon_command_repo.consume_organizer_unit = AsyncMock(
            return_value=attrs.evolve(organizer_coupon, quantity=1, used=1)
        )
        use_case = UseCouponUseCase(
            coupon_query_repo=mocks.coupon_query_repo,
            coupon_command_repo=mocks.coupon_command_repo,
            exhaustion_policy=CouponExhaustionPolicy.MARK_EXPIRED,
        )

        # Act
        await use_case.execute(coupon_id=organizer_coupon.id)  # type: ignore[arg-type]

        # Assert
        kwargs = mocks.coupon_command_repo.consume_organizer_unit.await_args.kwargs
        assert kwargs['exhausted_status'] == CouponStatus.EXPIRED


@pytest.mark.unit
class TestRollbackCouponUsage:
    @pytest.mark.asyncio
    async def test_rollback_referral(self, referral_coupon: ReferralCoupon) -> None:
        # Arrange
        repo = FakeCouponRepo(attrs.evolve(referral_coupon, status=CouponStatus.USED))
        use_case = RollbackCouponUsageUseCase(coupon_query_repo=repo, coupon_command_repo=repo)

        # Act
        released = await use_case.execute(coupon_id=referral_coupon.id)  # type: ignore[arg-type]

        # Assert
        assert released.status == CouponStatus.AVAILABLE

    @pytest.mark.asyncio
    async def test_rollback_exhausted_organizer_coupon_reopens_it(
        self, organizer_coupon: OrganizerCoupon
    ) -> None:
        # Arrange
        exhausted = attrs.evolve(organizer_coupon, quantity=0, used=2, status=CouponStatus.USED)
        repo = FakeCouponRepo(exhausted)
        use_case = RollbackCouponUsageUseCase(coupon_query_repo=repo, coupon_command_repo=repo)

        # Act
        released = await use_case.execute(coupon_id=exhausted.id)  # type: ignore[arg-type]

        # Assert
        assert released.quantity == 1  # type: ignore[union-attr]
        assert released.used == 1
        assert released.status == CouponStatus.AVAILABLE

    @pytest.mark.asyncio
    async def test_rollback_of_unused_coupon_fails(self, organizer_coupon: OrganizerCoupon) -> None:
        repo = FakeCouponRepo(organizer_coupon)
        use_case = RollbackCouponUsageUseCase(coupon_query_repo=repo, coupon_command_repo=repo)

        with pytest.raises(RollbackError):
            await use_case.execute(coupon_id=organizer_coupon.id)  # type: ignore[arg-type]

    @pytest.mark.asyncio
    async def test_rollback_of_unknown_coupon(self) -> None:
        repo = FakeCouponRepo()
        use_case = RollbackCouponUsageUseCase(coupon_query_repo=repo, coupon_command_repo=repo)

        with pytest.raises(NotFoundError):
            await use_case.execute(coupon_id=1)


@pytest.mark.unit
class TestCreateCoupons:
    @pytest.mark.asyncio
    async def test_create_organizer_coupon(self) -> None:
        # Arrange
        repo = FakeCouponRepo()
        use_case = CreateOrganizerCouponUseCase(coupon_query_repo=repo, coupon_command_repo=repo)

        # Act
        created = await use_case.execute(
            organizer_id=2, code='EARLY10', discount_idr=10_000, quantity=100
        )

        # Assert
        assert created.id is not None
        assert created.quantity == 100
        assert created.status == CouponStatus.AVAILABLE

    @pytest.mark.asyncio
    async def test_duplicate_code_is_conflict(self, organizer_coupon: OrganizerCoupon) -> None:
        repo = FakeCouponRepo(organizer_coupon)
        use_case = CreateOrganizerCouponUseCase(coupon_query_repo=repo, coupon_command_repo=repo)

        with pytest.raises(ConflictError):
            await use_case.execute(
                organizer_id=2, code=organizer_coupon.code, discount_idr=5_000, quantity=1
            )

    @pytest.mark.asyncio
    async def test_organizer_coupon_needs_quantity(self) -> None:
        repo = FakeCouponRepo()
        use_case = CreateOrganizerCouponUseCase(coupon_query_repo=repo, coupon_command_repo=repo)

        with pytest.raises(ValidationError):
            await use_case.execute(organizer_id=2, code='X', discount_idr=5_000, quantity=None)
        assert repo.coupons == {}

    @pytest.mark.asyncio
    async def test_create_referral_coupon_with_validity(self) -> None:
        # Arrange
        repo = FakeCouponRepo()
        use_case = CreateReferralCouponUseCase(
            coupon_query_repo=repo, coupon_command_repo=repo, validity_months=3
        )

        # Act
        created = await use_case.execute(user_id=1, discount_idr=10_000, code='REF-NEW')

        # Assert
        assert created.user_id == 1
        assert created.expires_at is not None
        assert created.expires_at > created.created_at + timedelta(days=85)  # type: ignore[operator]


@pytest.mark.unit
class TestListCoupons:
    @pytest.mark.asyncio
    async def test_list_by_owner(
        self, organizer_coupon: OrganizerCoupon, referral_coupon: ReferralCoupon
    ) -> None:
        # Arrange
        repo = FakeCouponRepo(organizer_coupon, referral_coupon)
        repo.usage[organizer_coupon.id] = 3  # type: ignore[index]
        use_case = ListCouponsUseCase(coupon_query_repo=repo)

        # Act
        everything = await use_case.list_all()
        by_organizer = await use_case.list_by_organizer(organizer_id=2)
        by_user = await use_case.list_by_user(user_id=1)

        # Assert
        assert len(everything) == 2
        assert [(coupon.code, count) for coupon, count in by_organizer] == [('JAZZ20', 3)]
        assert [coupon.code for coupon in by_user] == ['REF-BUDI']
