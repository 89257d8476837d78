from abc import ABC, abstractmethod
from typing import Any


class INotificationSender(ABC):
    """Port for templated user notifications (e-mail in production)"""

    @abstractmethod
    async def notify(
        self, *, to_email: str, subject: str, template_name: str, context: dict[str, Any]
    ) -> None:
        pass
