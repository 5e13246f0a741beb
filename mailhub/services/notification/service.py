import logging
import threading
from collections import deque
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Deque, List

from mailhub.lib.shared.models.email import EmailMessage

logger = logging.getLogger(__name__)

@dataclass(frozen=True)
class Notification:
    email_id: str
    account_id: str
    subject: str
    sender: str # sender address
    created_at: datetime

class NotificationService:
    def __init__(self, history_size: int = 100):
        self._history: Deque[Notification] = deque(maxlen=history_size)
        self._listeners: List[Callable[[Notification], None]] = []
        self._lock = threading.Lock()

    def add_listener(self, listener: Callable[[Notification], None]):
        """Registers a callback for every new notification (desktop push, websocket, ...)"""
        self._listeners.append(listener)

    def notify(self, email: EmailMessage) -> Notification:
        notification = Notification(
            email_id=email.id,
            account_id=email.account_id,
            subject=email.subject,
            sender=email.sender.address,
            created_at=datetime.now(timezone.utc),
        )
        with self._lock:
            self._history.append(notification)

        logger.info(f"Notification: {notification.subject} - From: {notification.sender}")
        for listener in list(self._listeners):
            try:
                listener(notification)
            except Exception as e:
                logger.error(f"Notification listener failed: {e}")
        return notification

    def recent(self) -> List[Notification]:
        """Most recent notification last"""
        with self._lock:
            return list(self._history)
