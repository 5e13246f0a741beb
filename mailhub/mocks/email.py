import logging
import uuid
from typing import List
from email.utils import format_datetime
from datetime import datetime, timezone

from mailhub.lib.shared.models.account import EmailAccount
from mailhub.lib.shared.models.email import EmailMessage, EmailAddress
from mailhub.services.email.fetcher import EmailFetcher

logger = logging.getLogger(__name__)

DEMO_RECIPIENT = EmailAddress(address="user@example.com")

class DummyEmailFetcher(EmailFetcher):
    """Demo transport: every fetch returns two fresh messages, every send succeeds"""

    def fetch_emails(self, account: EmailAccount) -> List[EmailMessage]:
        now = format_datetime(datetime.now(timezone.utc))
        return [
            EmailMessage(
                id=str(uuid.uuid4()),
                account_id=account.id,
                subject="Welcome to MailHub!",
                sender=EmailAddress(address="team@mailhub.app", name="MailHub Team"),
                to=[DEMO_RECIPIENT],
                date=now,
                body="Thank you for using MailHub! This is a demo email to showcase the email management capabilities.",
                html_body="<p>Thank you for using <strong>MailHub</strong>! This is a demo email to showcase the email management capabilities.</p>",
            ),
            EmailMessage(
                id=str(uuid.uuid4()),
                account_id=account.id,
                subject="Your verification code: 123456",
                sender=EmailAddress(address="security@example.com", name="Security"),
                to=[DEMO_RECIPIENT],
                date=now,
                body="Your verification code is: 123456. Please use it to verify your account.",
                html_body="<p>Your verification code is: <strong>123456</strong>. Please use it to verify your account.</p>",
            ),
        ]

    def send_email(self, account: EmailAccount, to: str, subject: str, body: str) -> None:
        logger.info(f"Email '{subject}' sent from {account.email} to {to} (demo mode)")
