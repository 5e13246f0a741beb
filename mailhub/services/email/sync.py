"""
Email synchronization manager.
Fetches every configured account, classifies the messages, applies the
auto-delete / notify policy and stores what survives.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from mailhub.lib.shared.models.account import EmailAccount
from mailhub.lib.shared.models.email import Category, EmailClassification, EmailMessage
from mailhub.lib.shared.models.settings import AIConfig, AppSettings
from mailhub.lib.shared.providers.llm import ProviderError
from mailhub.services.email.fetcher import EmailFetcher
from mailhub.services.email.filter.filter import EmailClassifier
from mailhub.services.notification.service import NotificationService
from mailhub.services.storage.store import Store

logger = logging.getLogger(__name__)


@dataclass
class AccountSyncResult:
    account_id: str
    success: bool = True
    fetched: int = 0
    stored: int = 0
    dropped: int = 0 # auto-deleted marketing mail
    notified: int = 0
    classification_failures: int = 0
    error: Optional[str] = None


@dataclass
class SyncReport:
    accounts: List[AccountSyncResult] = field(default_factory=list)

    @property
    def failed_accounts(self) -> List[AccountSyncResult]:
        return [r for r in self.accounts if not r.success]

    @property
    def stored(self) -> int:
        return sum(r.stored for r in self.accounts)


class SyncManager:
    """
    Runs one sync pass over a set of accounts.

    A failing account is reported in its result and never stops the others.
    A StorageError is not caught: if the store can't be written the whole sync fails.
    """

    def __init__(
        self,
        store: Store,
        fetcher: EmailFetcher,
        notification_service: NotificationService,
        max_workers: int = 1,
        provider_timeout: float = 30.0,
        classifier_factory: Optional[Callable[[Optional[AIConfig]], EmailClassifier]] = None,
    ):
        self.store = store
        self.fetcher = fetcher
        self.notification_service = notification_service
        self.max_workers = max_workers
        self.provider_timeout = provider_timeout
        self.classifier_factory = classifier_factory or self._default_classifier

    def _default_classifier(self, ai_config: Optional[AIConfig]) -> EmailClassifier:
        return EmailClassifier(ai_config, timeout=self.provider_timeout)

    def sync_all(self) -> SyncReport:
        """Syncs every stored account using the stored settings."""
        return self.sync(self.store.list_accounts(), self.store.get_settings())

    def sync(self, accounts: List[EmailAccount], settings: AppSettings) -> SyncReport:
        classifier = self.classifier_factory(settings.ai_config) if settings.classification_enabled else None

        if self.max_workers > 1 and len(accounts) > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
                futures = [pool.submit(self.sync_account, account, settings, classifier) for account in accounts]
                results = [f.result() for f in futures]
        else:
            results = [self.sync_account(account, settings, classifier) for account in accounts]

        report = SyncReport(accounts=results)
        logger.info(
            f"Sync finished: {len(accounts)} accounts, {report.stored} new emails, "
            f"{len(report.failed_accounts)} failed"
        )
        return report

    def sync_account(self, account: EmailAccount, settings: AppSettings, classifier: Optional[EmailClassifier]) -> AccountSyncResult:
        result = AccountSyncResult(account_id=account.id)

        try:
            emails = self.fetcher.fetch_emails(account)
        except Exception as e:
            logger.warning(f"Failed to fetch emails for account {account.id}: {e}")
            result.success = False
            result.error = str(e)
            return result

        result.fetched = len(emails)
        auto_delete = bool(settings.ai_config and settings.ai_config.auto_delete)
        keep: List[EmailMessage] = []

        for email in emails:
            if self.store.has_email(email.id):
                continue

            if classifier is None:
                email.classification = EmailClassification.default()
                keep.append(email)
                continue

            try:
                email.classification = classifier.classify_email(email)
            except ProviderError as e:
                logger.warning(f"Classification unavailable for email {email.id} ({account.id}): {e}")
                result.classification_failures += 1
                keep.append(email)
                continue

            if auto_delete and email.classification.category == Category.MARKETING:
                logger.info(f"Auto-deleting marketing email '{email.subject[:50]}' ({account.id})")
                result.dropped += 1
                continue

            if email.classification.should_notify and settings.notifications:
                self.notification_service.notify(email)
                result.notified += 1

            keep.append(email)

        result.stored = self.store.add_emails(keep)
        logger.info(f"Sync completed for account {account.id}: {result.fetched} fetched, {result.stored} new")
        return result
