"""Mock e-mail sender that logs instead of sending real e-mails."""

from datetime import datetime
from typing import Any, List

from src.platform.logging.loguru_io import Logger
from src.service.purchase.app.interface.i_notification_sender import INotificationSender
from src.service.purchase.driven_adapter.notification.email_templates import render_template


class MockEmailNotificationSender(INotificationSender):
    def __init__(self, *, debug: bool = True) -> None:
        self.debug = debug
        self.sent_notifications: List[dict] = []  # Store sent e-mails for testing

    @Logger.io
    async def notify(
        self, *, to_email: str, subject: str, template_name: str, context: dict[str, Any]
    ) -> None:
        body = render_template(template_name, context)
        self.sent_notifications.append(
            {
                'to': to_email,
                'subject': subject,
                'template_name': template_name,
                'context': context,
                'body': body,
                'sent_at': datetime.now(),
            }
        )

        if self.debug:
            Logger.base.info(f'📧 [MOCK-EMAIL] To: {to_email} | Subject: {subject}\n{body}')
