"""
Test Configuration and Fixtures

This module provides:
- Test environment variables, set before any application module reads settings
- Shared builders for users, events, coupons and transactions

Architecture:
- Unit tests (test/**/unit/): Pure use case and entity tests with mocks or in-memory fakes
- Integration tests (test/**/integration/): Real repositories on a throwaway SQLite database
- API tests (test/**/api/): FastAPI TestClient with container providers overridden by fakes
"""

# =============================================================================
# CRITICAL: Environment setup MUST happen before any other imports
# Settings are read once at import time by src.platform.config.core_setting
# =============================================================================
import os
from pathlib import Path


def _early_setup_test_environment() -> None:
    """Set test environment variables before any module imports."""
    test_log_dir = Path(__file__).parent / 'test_log'
    test_log_dir.mkdir(exist_ok=True)
    os.environ['TEST_LOG_DIR'] = str(test_log_dir)

    os.environ.setdefault('SECRET_KEY', 'test_secret_key')
    os.environ.setdefault('COUPON_EXHAUSTION_POLICY', 'mark_used')
    os.environ.setdefault('DEDUCT_POINTS_ON_PURCHASE', 'false')


# Call immediately to set env vars before any imports
_early_setup_test_environment()

from datetime import datetime, timedelta, timezone  # noqa: E402

import pytest  # noqa: E402

from src.service.purchase.domain.entity.coupon_entity import (  # noqa: E402
    OrganizerCoupon,
    ReferralCoupon,
)
from src.service.purchase.domain.entity.event_entity import EventSnapshot  # noqa: E402
from src.service.purchase.domain.entity.user_entity import UserEntity, UserRole  # noqa: E402


@pytest.fixture
def now() -> datetime:
    return datetime.now(timezone.utc)


@pytest.fixture
def customer() -> UserEntity:
    return UserEntity(
        id=1, email='buyer@example.com', name='Budi', role=UserRole.CUSTOMER, points=20_000
    )


@pytest.fixture
def organizer() -> UserEntity:
    return UserEntity(id=2, email='organizer@example.com', name='Sinta', role=UserRole.ORGANIZER)


@pytest.fixture
def admin() -> UserEntity:
    return UserEntity(id=3, email='admin@example.com', name='Admin', role=UserRole.ADMIN)


@pytest.fixture
def upcoming_event(now: datetime) -> EventSnapshot:
    return EventSnapshot(
        id=10,
        title='Jazz Night',
        organizer_id=2,
        quantity=5,
        price_idr=100_000,
        is_free=False,
        starts_at=now + timedelta(days=7),
        ends_at=now + timedelta(days=7, hours=3),
        category='Music',
        location='Jakarta',
    )


@pytest.fixture
def organizer_coupon(now: datetime) -> OrganizerCoupon:
    return OrganizerCoupon(
        id=100,
        code='JAZZ20',
        discount_idr=20_000,
        organizer_id=2,
        quantity=2,
        expires_at=now + timedelta(days=30),
    )


@pytest.fixture
def referral_coupon(now: datetime) -> ReferralCoupon:
    return ReferralCoupon(
        id=200,
        code='REF-BUDI',
        discount_idr=10_000,
        user_id=1,
        expires_at=now + timedelta(days=90),
    )
