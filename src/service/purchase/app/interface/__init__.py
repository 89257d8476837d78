"""Application layer interfaces (Ports)"""

from src.service.purchase.app.interface.i_coupon_command_repo import ICouponCommandRepo
from src.service.purchase.app.interface.i_coupon_query_repo import ICouponQueryRepo
from src.service.purchase.app.interface.i_event_inventory_repo import IEventInventoryRepo
from src.service.purchase.app.interface.i_notification_sender import INotificationSender
from src.service.purchase.app.interface.i_transaction_command_repo import (
    ITransactionCommandRepo,
)
from src.service.purchase.app.interface.i_transaction_event_publisher import (
    ITransactionEventPublisher,
)
from src.service.purchase.app.interface.i_transaction_query_repo import ITransactionQueryRepo
from src.service.purchase.app.interface.i_user_points_repo import IUserPointsRepo

__all__ = [
    'ICouponCommandRepo',
    'ICouponQueryRepo',
    'IEventInventoryRepo',
    'INotificationSender',
    'ITransactionCommandRepo',
    'ITransactionEventPublisher',
    'ITransactionQueryRepo',
    'IUserPointsRepo',
]
