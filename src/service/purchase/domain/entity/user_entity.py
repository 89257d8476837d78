from datetime import datetime
from enum import Enum
from typing import Optional

import attrs

from src.platform.exception.exceptions import InsufficientPointsError, ValidationError


class UserRole(str, Enum):
    CUSTOMER = 'CUSTOMER'
    ORGANIZER = 'ORGANIZER'
    ADMIN = 'ADMIN'


@attrs.define
class UserEntity:
    email: str = ''
    name: str = ''
    id: Optional[int] = None
    role: UserRole = UserRole.CUSTOMER
    points: int = 0
    is_active: bool = True
    created_at: Optional[datetime] = None

    def validate_can_spend_points(self, points: int) -> None:
        """
        Raises:
            ValidationError: When a negative amount is requested
            InsufficientPointsError: When the balance does not cover the amount
        """
        if points < 0:
            raise ValidationError('points_used cannot be negative')
        if self.points < points:
            raise InsufficientPointsError(
                f'Insufficient points: requested {points}, available {self.points}'
            )
