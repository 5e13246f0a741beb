import copy
import json
import logging
import os
import threading
import uuid
from dataclasses import replace
from typing import Any, Callable, Dict, Iterable, List, Optional

from pydantic import TypeAdapter

from mailhub.lib.shared.models.account import EmailAccount
from mailhub.lib.shared.models.email import EmailMessage
from mailhub.lib.shared.models.settings import AppSettings
from mailhub.services.security.encryption import DataEncryptor

logger = logging.getLogger(__name__)

ACCOUNTS_FILE = "accounts.json"
EMAILS_FILE = "emails.json"
SETTINGS_FILE = "settings.json"

ACCOUNT_SECRET_FIELDS = ("password", "oauth_token", "refresh_token")

_accounts_adapter = TypeAdapter(List[EmailAccount])
_emails_adapter = TypeAdapter(List[EmailMessage])
_settings_adapter = TypeAdapter(AppSettings)


class StorageError(Exception):
    """The backing JSON files could not be read or written"""


class Store:
    """
    JSON-file backed store for accounts, emails and settings.

    Each collection has its own lock and file. A mutation builds the new collection,
    writes the whole file and only then swaps it in, so memory and disk never disagree
    after a call returns. Unknown ids on update/delete are ignored.
    """

    def __init__(self, data_dir: str, encryptor: Optional[DataEncryptor] = None):
        self.data_dir = data_dir
        self.encryptor = encryptor
        try:
            os.makedirs(data_dir, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Cannot create data directory {data_dir}: {e}") from e

        self._accounts_lock = threading.Lock()
        self._emails_lock = threading.Lock()
        self._settings_lock = threading.Lock()

        self._accounts: List[EmailAccount] = self._load(ACCOUNTS_FILE, _accounts_adapter, list, self._decode_accounts)
        self._emails: List[EmailMessage] = self._load(EMAILS_FILE, _emails_adapter, list)
        self._settings: AppSettings = self._load(SETTINGS_FILE, _settings_adapter, AppSettings, self._decode_settings)

    # --- Accounts ---

    def list_accounts(self) -> List[EmailAccount]:
        with self._accounts_lock:
            return copy.deepcopy(self._accounts)

    def get_account(self, account_id: str) -> Optional[EmailAccount]:
        with self._accounts_lock:
            for account in self._accounts:
                if account.id == account_id:
                    return copy.deepcopy(account)
        return None

    def add_account(self, account: EmailAccount) -> EmailAccount:
        account = copy.deepcopy(account)
        if not account.id:
            account.id = str(uuid.uuid4())
        with self._accounts_lock:
            self._commit_accounts(self._accounts + [account])
        return copy.deepcopy(account)

    def update_account(self, account_id: str, account: EmailAccount) -> bool:
        with self._accounts_lock:
            index = _index_of(self._accounts, account_id)
            if index is None:
                return False
            accounts = list(self._accounts)
            account = copy.deepcopy(account)
            account.id = account_id
            accounts[index] = account
            self._commit_accounts(accounts)
        return True

    def delete_account(self, account_id: str) -> None:
        with self._accounts_lock:
            self._commit_accounts([a for a in self._accounts if a.id != account_id])

    # --- Emails ---

    def list_emails(self) -> List[EmailMessage]:
        """Newest first"""
        with self._emails_lock:
            return copy.deepcopy(self._emails)

    def has_email(self, email_id: str) -> bool:
        with self._emails_lock:
            return _index_of(self._emails, email_id) is not None

    def get_email(self, email_id: str) -> Optional[EmailMessage]:
        with self._emails_lock:
            for email in self._emails:
                if email.id == email_id:
                    return copy.deepcopy(email)
        return None

    def add_email(self, email: EmailMessage) -> None:
        with self._emails_lock:
            self._commit_emails([copy.deepcopy(email)] + self._emails)

    def add_emails(self, new_emails: Iterable[EmailMessage]) -> int:
        """
        Inserts each email at the head of the list unless its id is already stored.
        Existing emails keep their relative order. Returns how many were inserted.
        """
        with self._emails_lock:
            emails = list(self._emails)
            known_ids = {e.id for e in emails}
            inserted = 0
            for email in new_emails:
                if email.id in known_ids:
                    continue
                emails.insert(0, copy.deepcopy(email))
                known_ids.add(email.id)
                inserted += 1
            if inserted:
                self._commit_emails(emails)
        return inserted

    def update_email(self, email_id: str, email: EmailMessage) -> bool:
        with self._emails_lock:
            index = _index_of(self._emails, email_id)
            if index is None:
                return False
            emails = list(self._emails)
            emails[index] = copy.deepcopy(email)
            self._commit_emails(emails)
        return True

    def delete_email(self, email_id: str) -> None:
        with self._emails_lock:
            self._commit_emails([e for e in self._emails if e.id != email_id])

    def mark_read(self, email_id: str, is_read: bool = True) -> bool:
        return self._modify_email(email_id, lambda e: replace(e, is_read=is_read))

    def set_starred(self, email_id: str, is_starred: bool) -> bool:
        return self._modify_email(email_id, lambda e: replace(e, is_starred=is_starred))

    def set_labels(self, email_id: str, labels: Optional[List[str]]) -> bool:
        return self._modify_email(email_id, lambda e: replace(e, labels=list(labels) if labels is not None else None))

    def _modify_email(self, email_id: str, change: Callable[[EmailMessage], EmailMessage]) -> bool:
        with self._emails_lock:
            index = _index_of(self._emails, email_id)
            if index is None:
                return False
            emails = list(self._emails)
            emails[index] = change(copy.deepcopy(emails[index]))
            self._commit_emails(emails)
        return True

    # --- Settings ---

    def get_settings(self) -> AppSettings:
        with self._settings_lock:
            return copy.deepcopy(self._settings)

    def update_settings(self, settings: AppSettings) -> None:
        settings = copy.deepcopy(settings)
        with self._settings_lock:
            self._save(SETTINGS_FILE, _settings_adapter, settings, self._encode_settings)
            self._settings = settings

    # --- Persistence helpers ---

    def _commit_accounts(self, accounts: List[EmailAccount]) -> None:
        self._save(ACCOUNTS_FILE, _accounts_adapter, accounts, self._encode_accounts)
        self._accounts = accounts

    def _commit_emails(self, emails: List[EmailMessage]) -> None:
        self._save(EMAILS_FILE, _emails_adapter, emails)
        self._emails = emails

    def _load(self, filename: str, adapter: TypeAdapter, default: Callable[[], Any], decode: Optional[Callable] = None) -> Any:
        path = os.path.join(self.data_dir, filename)
        if not os.path.exists(path):
            return default()
        try:
            with open(path, "r", encoding="utf-8") as f:
                raw = f.read()
        except OSError as e:
            raise StorageError(f"Cannot read {path}: {e}") from e

        try:
            data = json.loads(raw)
            if decode:
                data = decode(data)
            return adapter.validate_python(data)
        except ValueError as e:
            logger.warning(f"Ignoring unreadable {filename}, starting empty: {e}")
            return default()

    def _save(self, filename: str, adapter: TypeAdapter, value: Any, encode: Optional[Callable] = None) -> None:
        path = os.path.join(self.data_dir, filename)
        data = adapter.dump_python(value, mode="json")
        if encode:
            data = encode(data)
        tmp_path = path + ".tmp"
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, path)
        except OSError as e:
            logger.error(f"Failed to write {path}: {e}")
            raise StorageError(f"Cannot write {path}: {e}") from e

    def _encode_accounts(self, accounts: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        return [self._apply_to_account_secrets(a, self.encryptor.encrypt) for a in accounts] if self.encryptor else accounts

    def _decode_accounts(self, accounts: Any) -> Any:
        if not self.encryptor or not isinstance(accounts, list):
            return accounts
        return [self._apply_to_account_secrets(a, self.encryptor.decrypt) for a in accounts]

    def _encode_settings(self, settings: Dict[str, Any]) -> Dict[str, Any]:
        return self._apply_to_api_key(settings, self.encryptor.encrypt) if self.encryptor else settings

    def _decode_settings(self, settings: Any) -> Any:
        return self._apply_to_api_key(settings, self.encryptor.decrypt) if self.encryptor else settings

    @staticmethod
    def _apply_to_account_secrets(account: Any, fn: Callable) -> Any:
        config = account.get("config") if isinstance(account, dict) else None
        if isinstance(config, dict):
            for key in ACCOUNT_SECRET_FIELDS:
                if config.get(key):
                    config[key] = fn(config[key])
        return account

    @staticmethod
    def _apply_to_api_key(settings: Any, fn: Callable) -> Any:
        ai_config = settings.get("ai_config") if isinstance(settings, dict) else None
        if isinstance(ai_config, dict) and ai_config.get("api_key"):
            ai_config["api_key"] = fn(ai_config["api_key"])
        return settings


def _index_of(items: List[Any], item_id: str) -> Optional[int]:
    for i, item in enumerate(items):
        if item.id == item_id:
            return i
    return None
