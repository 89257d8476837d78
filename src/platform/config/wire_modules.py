"""
Wire Modules Configuration

Defines the modules that need dependency injection wiring.
Shared between production and test environments.
"""

from types import ModuleType

from src.service.purchase.app.command import (
    cancel_transaction_use_case,
    create_coupon_use_case,
    create_transaction_use_case,
    redeem_coupon_use_case,
    update_transaction_status_use_case,
)
from src.service.purchase.app.query import (
    get_transaction_stats_use_case,
    get_transaction_use_case,
    list_coupons_use_case,
    list_expiring_transactions_use_case,
    list_transactions_use_case,
)
from src.service.purchase.driving_adapter.http_controller.auth import role_auth


WIRE_MODULES: list[ModuleType] = [
    create_transaction_use_case,
    update_transaction_status_use_case,
    cancel_transaction_use_case,
    create_coupon_use_case,
    redeem_coupon_use_case,
    list_transactions_use_case,
    get_transaction_use_case,
    get_transaction_stats_use_case,
    list_expiring_transactions_use_case,
    list_coupons_use_case,
    role_auth,
]
