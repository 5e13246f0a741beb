from abc import ABC, abstractmethod
from typing import List

from mailhub.lib.shared.models.account import EmailAccount
from mailhub.lib.shared.models.email import EmailMessage

class TransportError(Exception):
    """Fetching or sending mail for an account failed"""

class EmailFetcher(ABC):
    """Mail transport for a configured account (IMAP, POP3 or OAuth2 backed)"""

    @abstractmethod
    def fetch_emails(self, account: EmailAccount) -> List[EmailMessage]:
        """Returns the account's messages in fetch order. Raises TransportError on failure."""

    @abstractmethod
    def send_email(self, account: EmailAccount, to: str, subject: str, body: str) -> None:
        """Sends a message from the account. Raises TransportError on failure."""
