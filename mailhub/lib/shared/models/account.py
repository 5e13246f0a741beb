from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

class Protocol(str, Enum):
    IMAP = "imap"
    POP3 = "pop3"
    OAUTH2 = "oauth2"

class Provider(str, Enum):
    GMAIL = "gmail"
    OUTLOOK = "outlook"
    OTHER = "other"

@dataclass
class AccountConfig:
    host: Optional[str] = None
    port: Optional[int] = None
    username: Optional[str] = None
    password: Optional[str] = None
    oauth_token: Optional[str] = None
    refresh_token: Optional[str] = None

@dataclass
class EmailAccount:
    id: str
    name: str
    email: str
    protocol: Protocol
    config: AccountConfig = field(default_factory=AccountConfig)
    provider: Optional[Provider] = None
    display_name: Optional[str] = None
    tags: Optional[List[str]] = None
