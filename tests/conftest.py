import pytest

from mailhub.lib.shared.models.settings import AppSettings
from mailhub.services.email.filter.filter import EmailClassifier
from mailhub.services.email.sync import SyncManager
from mailhub.services.notification.service import NotificationService
from mailhub.services.storage.store import Store
from tests.factories import make_account, make_ai_config, FakeFetcher, FakeProvider

@pytest.fixture
def store(tmp_path):
    """A fresh JSON store in a temporary data directory"""
    return Store(str(tmp_path / "data"))

@pytest.fixture
def notification_service():
    return NotificationService()

@pytest.fixture
def fake_provider():
    return FakeProvider()

@pytest.fixture
def ai_settings():
    return AppSettings(notifications=True, ai_config=make_ai_config())

@pytest.fixture
def make_sync_manager(store, notification_service, fake_provider):
    """Builds a SyncManager around a FakeFetcher, classifying with fake_provider"""
    def _make(mailboxes, failing=None, max_workers=1):
        fetcher = FakeFetcher(mailboxes, failing=failing)
        return SyncManager(
            store,
            fetcher,
            notification_service,
            max_workers=max_workers,
            classifier_factory=lambda ai_config: EmailClassifier(ai_config, provider=fake_provider),
        )
    return _make

@pytest.fixture
def accounts():
    return [make_account("acc_a", "a@example.com"), make_account("acc_b", "b@example.com")]
