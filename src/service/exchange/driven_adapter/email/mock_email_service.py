"""Mock email service: records outgoing mail and logs it instead of sending."""

from datetime import datetime, timezone

from src.platform.logging.loguru_io import Logger
from src.service.exchange.app.interface.i_side_effect_repo import IEmailService


class MockEmailService(IEmailService):
    def __init__(self) -> None:
        self.sent_emails: list[dict] = []  # inspected by tests

    @Logger.io
    async def send_email(self, *, to: str, subject: str, body: str) -> bool:
        self.sent_emails.append(
            {'to': to, 'subject': subject, 'body': body, 'sent_at': datetime.now(timezone.utc)}
        )
        Logger.base.info(f'📧 [MAIL] "{subject}" queued for delivery')
        return True
