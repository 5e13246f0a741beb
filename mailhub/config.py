import os
from typing import Optional
from mailhub.lib.shared.models.util import Environment

class MailHubConfig:
    def __init__(self):
        # Determine Environment
        env_str = os.getenv("MAILHUB_ENV", "dev").lower()
        try:
            self.env = Environment(env_str)
        except ValueError:
            self.env = Environment.DEV

        self.encryption_key: Optional[str] = os.getenv("MAILHUB_ENCRYPTION_KEY")
        self.provider_timeout = float(os.getenv("MAILHUB_PROVIDER_TIMEOUT", 30))
        self.sync_workers = int(os.getenv("MAILHUB_SYNC_WORKERS", 1))
        self.notification_history = int(os.getenv("MAILHUB_NOTIFICATION_HISTORY", 100))
        self.log_level = os.getenv("MAILHUB_LOG_LEVEL", "INFO").upper()

        if self.provider_timeout <= 0:
            raise ValueError("MAILHUB_PROVIDER_TIMEOUT must be positive")
        if self.sync_workers < 1:
            raise ValueError("MAILHUB_SYNC_WORKERS must be at least 1")

        # Environment Configuration
        if self.env == Environment.TEST:
            self.data_dir = "./test_data"
        else:
            self.data_dir = os.getenv("MAILHUB_DATA_DIR", "./data")
