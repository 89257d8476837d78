"""
API fixtures: the real FastAPI app with the container's data providers
overridden by the in-memory fakes, so requests exercise routing, auth,
DI wiring, use cases and error payloads end to end without a database.
"""

from contextlib import asynccontextmanager
from typing import Callable, Dict, Iterator

from dependency_injector import providers
from fastapi import FastAPI
from fastapi.testclient import TestClient
import pytest

from src.platform.app_factory import create_app
from src.platform.config.core_setting import settings
from src.platform.config.di import container
from src.platform.config.wire_modules import WIRE_MODULES
from src.service.purchase.domain.entity.coupon_entity import OrganizerCoupon, ReferralCoupon
from src.service.purchase.domain.entity.event_entity import EventSnapshot
from src.service.purchase.domain.entity.user_entity import UserEntity
from src.service.purchase.driving_adapter.http_controller.auth.jwt_auth import JwtAuth
from test.service.purchase.fakes import InMemoryPurchaseWorld


@asynccontextmanager
async def _test_lifespan(app: FastAPI):
    container.wire(modules=WIRE_MODULES)
    yield
    container.unwire()


@pytest.fixture
def world(
    customer: UserEntity,
    organizer: UserEntity,
    upcoming_event: EventSnapshot,
    organizer_coupon: OrganizerCoupon,
    referral_coupon: ReferralCoupon,
) -> InMemoryPurchaseWorld:
    return InMemoryPurchaseWorld(
        users=[customer, organizer],
        events=[upcoming_event],
        coupons=[organizer_coupon, referral_coupon],
    )


@pytest.fixture
def client(world: InMemoryPurchaseWorld) -> Iterator[TestClient]:
    overrides = {
        container.event_inventory_repo: world.event_repo,
        container.user_points_repo: world.user_repo,
        container.coupon_query_repo: world.coupon_repo,
        container.coupon_command_repo: world.coupon_repo,
        container.transaction_query_repo: world.transaction_repo,
        container.transaction_command_repo: world.transaction_repo,
        container.use_coupon_use_case: world.use_coupon_use_case,
        container.transaction_compensator: world.compensator,
        container.transaction_event_publisher: world.event_publisher,
        container.deduct_points_on_purchase: world.deduct_points_on_purchase,
    }
    for provider, fake in overrides.items():
        provider.override(providers.Object(fake))

    app = create_app(lifespan=_test_lifespan, title_suffix=' (Test)')
    with TestClient(app) as test_client:
        yield test_client

    for provider in overrides:
        provider.reset_override()


@pytest.fixture
def auth_headers() -> Callable[[UserEntity], Dict[str, str]]:
    jwt_auth = JwtAuth(secret=settings.SECRET_KEY.get_secret_value())

    def _headers(user: UserEntity) -> Dict[str, str]:
        return {'Authorization': f'Bearer {jwt_auth.create_jwt_token(user)}'}

    return _headers
