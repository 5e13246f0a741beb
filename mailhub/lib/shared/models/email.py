from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

class Category(str, Enum):
    MARKETING = "marketing"
    IMPORTANT = "important"
    VERIFICATION = "verification"
    NORMAL = "normal"  # routine mail, also the fallback for unknown answers

@dataclass(frozen=True)
class EmailClassification:
    category: Category
    verification_code: Optional[str] = None
    verification_link: Optional[str] = None
    should_notify: bool = False

    @classmethod
    def default(cls) -> "EmailClassification":
        """Result used whenever classification is turned off"""
        return cls(category=Category.NORMAL)

@dataclass
class EmailAddress:
    address: str
    name: Optional[str] = None

@dataclass
class EmailMessage:
    id: str
    account_id: str
    subject: str
    sender: EmailAddress # from address
    to: List[EmailAddress]
    date: str # RFC 2822, as delivered by the transport
    body: str
    cc: Optional[List[EmailAddress]] = None
    bcc: Optional[List[EmailAddress]] = None
    html_body: Optional[str] = None
    is_read: bool = False
    is_starred: bool = False
    labels: Optional[List[str]] = None
    classification: Optional[EmailClassification] = None
