"""
Database Models

Import all models here to ensure they are registered with SQLAlchemy
"""

from src.service.purchase.driven_adapter.model.coupon_model import CouponModel
from src.service.purchase.driven_adapter.model.event_model import EventModel
from src.service.purchase.driven_adapter.model.transaction_model import TransactionModel
from src.service.purchase.driven_adapter.model.user_model import UserModel

__all__ = [
    'CouponModel',
    'EventModel',
    'TransactionModel',
    'UserModel',
]
