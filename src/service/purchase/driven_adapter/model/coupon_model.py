from datetime import datetime
from typing import Optional

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from src.platform.database.orm_db_setting import Base


class CouponModel(Base):
    """
    Both coupon variants share one table, discriminated by `type`.

    ORGANIZER rows carry organizer_id and quantity; REFERRAL rows carry user_id.
    """

    __tablename__ = 'coupon'
    __table_args__ = (
        CheckConstraint('quantity IS NULL OR quantity >= 0', name='ck_coupon_quantity_non_negative'),
        CheckConstraint('used >= 0', name='ck_coupon_used_non_negative'),
        CheckConstraint('discount_idr >= 0', name='ck_coupon_discount_non_negative'),
        CheckConstraint(
            "(type = 'ORGANIZER' AND organizer_id IS NOT NULL AND quantity IS NOT NULL "
            'AND user_id IS NULL) '
            "OR (type = 'REFERRAL' AND user_id IS NOT NULL AND organizer_id IS NULL)",
            name='ck_coupon_single_owner',
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    code: Mapped[str] = mapped_column(String(64), nullable=False, unique=True, index=True)
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    discount_idr: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(String(20), default='AVAILABLE', nullable=False)
    organizer_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey('user.id'), nullable=True, index=True
    )
    user_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey('user.id'), nullable=True, index=True
    )
    quantity: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    used: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    expires_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    used_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
