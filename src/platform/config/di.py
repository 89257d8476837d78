"""
https://python-dependency-injector.ets-labs.org/index.html
https://python-dependency-injector.ets-labs.org/examples/fastapi-sqlalchemy.html
"""

from dependency_injector import containers, providers

from src.platform.config.core_setting import Settings
from src.platform.database.orm_db_setting import Database
from src.service.purchase.app.command.rollback_coupon_usage_use_case import (
    RollbackCouponUsageUseCase,
)
from src.service.purchase.app.command.send_transaction_notification_use_case import (
    SendTransactionNotificationUseCase,
)
from src.service.purchase.app.command.transaction_compensator import TransactionCompensator
from src.service.purchase.app.command.use_coupon_use_case import UseCouponUseCase
from src.service.purchase.domain.enum.coupon_enum import CouponExhaustionPolicy
from src.service.purchase.driven_adapter.event.in_process_transaction_event_publisher import (
    InProcessTransactionEventPublisher,
)
from src.service.purchase.driven_adapter.notification.mock_email_notification_sender import (
    MockEmailNotificationSender,
)
from src.service.purchase.driven_adapter.repo.coupon_command_repo_impl import (
    CouponCommandRepoImpl,
)
from src.service.purchase.driven_adapter.repo.coupon_query_repo_impl import CouponQueryRepoImpl
from src.service.purchase.driven_adapter.repo.event_inventory_repo_impl import (
    EventInventoryRepoImpl,
)
from src.service.purchase.driven_adapter.repo.transaction_command_repo_impl import (
    TransactionCommandRepoImpl,
)
from src.service.purchase.driven_adapter.repo.transaction_query_repo_impl import (
    TransactionQueryRepoImpl,
)
from src.service.purchase.driven_adapter.repo.user_points_repo_impl import UserPointsRepoImpl
from src.service.purchase.driving_adapter.http_controller.auth.jwt_auth import JwtAuth


class Container(containers.DeclarativeContainer):
    # Configuration
    config_service = providers.Singleton(Settings)

    coupon_exhaustion_policy = providers.Factory(
        CouponExhaustionPolicy, config_service.provided.COUPON_EXHAUSTION_POLICY
    )
    referral_coupon_validity_months = providers.Callable(
        lambda settings: settings.REFERRAL_COUPON_VALIDITY_MONTHS, config_service
    )
    deduct_points_on_purchase = providers.Callable(
        lambda settings: settings.DEDUCT_POINTS_ON_PURCHASE, config_service
    )
    payment_window_hours = providers.Callable(
        lambda settings: settings.PAYMENT_WINDOW_HOURS, config_service
    )
    max_page_limit = providers.Callable(lambda settings: settings.MAX_PAGE_LIMIT, config_service)

    # Database (uses AsyncEngineManager with settings from config_service)
    database = providers.Singleton(Database)

    # Repositories (stateless - use session_factory per-request)
    event_inventory_repo = providers.Singleton(
        EventInventoryRepoImpl, session_factory=database.provided.session
    )
    user_points_repo = providers.Singleton(
        UserPointsRepoImpl, session_factory=database.provided.session
    )
    coupon_query_repo = providers.Singleton(
        CouponQueryRepoImpl, session_factory=database.provided.session
    )
    coupon_command_repo = providers.Singleton(
        CouponCommandRepoImpl, session_factory=database.provided.session
    )
    transaction_query_repo = providers.Singleton(
        TransactionQueryRepoImpl, session_factory=database.provided.session
    )
    transaction_command_repo = providers.Singleton(
        TransactionCommandRepoImpl, session_factory=database.provided.session
    )

    # Auth service
    jwt_auth = providers.Singleton(JwtAuth)

    # Notifications (post-commit, best-effort)
    notification_sender = providers.Singleton(MockEmailNotificationSender)
    send_transaction_notification_use_case = providers.Singleton(
        SendTransactionNotificationUseCase,
        notification_sender=notification_sender,
        dashboard_url=config_service.provided.DASHBOARD_URL,
        checkout_url=config_service.provided.CHECKOUT_URL,
    )
    transaction_event_publisher = providers.Singleton(
        InProcessTransactionEventPublisher,
        notification_use_case=send_transaction_notification_use_case,
    )

    # Use cases shared by other use cases (stateless, can be Singleton)
    use_coupon_use_case = providers.Singleton(
        UseCouponUseCase,
        coupon_query_repo=coupon_query_repo,
        coupon_command_repo=coupon_command_repo,
        exhaustion_policy=coupon_exhaustion_policy,
    )
    rollback_coupon_usage_use_case = providers.Singleton(
        RollbackCouponUsageUseCase,
        coupon_query_repo=coupon_query_repo,
        coupon_command_repo=coupon_command_repo,
    )
    transaction_compensator = providers.Singleton(
        TransactionCompensator,
        event_inventory_repo=event_inventory_repo,
        user_points_repo=user_points_repo,
        rollback_coupon_usage_use_case=rollback_coupon_usage_use_case,
        deduct_points_on_purchase=deduct_points_on_purchase,
    )


container = Container()
