import logging
import uvicorn
from fastapi import FastAPI, HTTPException, BackgroundTasks, Depends, Request
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from dotenv import load_dotenv
from pydantic import BaseModel
from typing import List, Optional

from mailhub.config import MailHubConfig
from mailhub.lib.shared.models.account import EmailAccount
from mailhub.lib.shared.models.email import EmailMessage
from mailhub.lib.shared.models.settings import AppSettings
from mailhub.mocks.email import DummyEmailFetcher
from mailhub.services.email.fetcher import TransportError
from mailhub.services.email.sync import SyncManager
from mailhub.services.notification.service import NotificationService
from mailhub.services.security.encryption import DataEncryptor
from mailhub.services.storage.store import Store, StorageError

from mailhub.dependencies import *

logger = logging.getLogger(__name__)

# --- Lifecycle Events ---
@asynccontextmanager
async def startup_event(app: FastAPI):
    load_dotenv()
    app.state.config = MailHubConfig()
    logging.basicConfig(level=app.state.config.log_level)

    encryptor = DataEncryptor(app.state.config.encryption_key) if app.state.config.encryption_key else None
    if encryptor is None:
        print("⚠️  MAILHUB_ENCRYPTION_KEY not set, account credentials are stored in plain text.")

    app.state.store = Store(app.state.config.data_dir, encryptor=encryptor)
    # No real IMAP/POP3 transport yet, every account is served by the demo fetcher
    app.state.email_fetcher = DummyEmailFetcher()
    app.state.notification_service = NotificationService(history_size=app.state.config.notification_history)
    app.state.sync_manager = SyncManager(
        app.state.store,
        app.state.email_fetcher,
        app.state.notification_service,
        max_workers=app.state.config.sync_workers,
        provider_timeout=app.state.config.provider_timeout,
    )
    print(f"📬 MailHub started ({app.state.config.env.value}), data in {app.state.config.data_dir}")
    try:
        yield
    finally:
        app.state.sync_manager = None
        app.state.email_fetcher = None
        app.state.notification_service = None
        app.state.store = None
        print('Services has been shutdown.')

app = FastAPI(
    title="MailHub API",
    description="Backend API for MailHub",
    version="0.1.0",
    lifespan=startup_event
)

@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError):
    return JSONResponse(status_code=500, content={"detail": f"Storage error: {exc}"})

# --- Pydantic Models ---
class EmailUpdateRequest(BaseModel):
    is_read: Optional[bool] = None
    is_starred: Optional[bool] = None
    labels: Optional[List[str]] = None

class SendEmailRequest(BaseModel):
    from_account_id: str
    to: str
    subject: str
    body: str

class SyncStatus(BaseModel):
    sync_state: str = "idle"
    sync_message: str = ""
    emails_stored: int = 0
    failed_accounts: List[str] = []

# --- Endpoints ---
sync_status = SyncStatus()

@app.get("/config-status")
async def get_config_status(config: MailHubConfig = Depends(get_config)):
    return {
        "env": config.env.value,
        "encryption_enabled": bool(config.encryption_key),
        "sync_workers": config.sync_workers,
    }

@app.get("/accounts", response_model=List[EmailAccount])
async def get_accounts(store: Store = Depends(get_store)):
    return store.list_accounts()

@app.post("/accounts", response_model=EmailAccount)
async def add_account(account: EmailAccount, store: Store = Depends(get_store)):
    return store.add_account(account)

@app.put("/accounts/{account_id}")
async def update_account(account_id: str, account: EmailAccount, store: Store = Depends(get_store)):
    updated = store.update_account(account_id, account)
    return {"status": "success", "updated": updated}

@app.delete("/accounts/{account_id}")
async def delete_account(account_id: str, store: Store = Depends(get_store)):
    store.delete_account(account_id)
    return {"status": "success"}

@app.get("/emails", response_model=List[EmailMessage])
async def get_emails(limit: Optional[int] = None, store: Store = Depends(get_store)):
    emails = store.list_emails()
    return emails[:limit] if limit is not None else emails

@app.patch("/emails/{email_id}")
async def update_email(email_id: str, request: EmailUpdateRequest, store: Store = Depends(get_store)):
    updated = False
    if request.is_read is not None:
        updated = store.mark_read(email_id, request.is_read) or updated
    if request.is_starred is not None:
        updated = store.set_starred(email_id, request.is_starred) or updated
    if "labels" in request.model_fields_set:
        updated = store.set_labels(email_id, request.labels) or updated
    return {"status": "success", "updated": updated}

@app.delete("/emails/{email_id}")
async def delete_email(email_id: str, store: Store = Depends(get_store)):
    store.delete_email(email_id)
    return {"status": "success"}

@app.post("/sync-emails")
async def sync_emails(background_tasks: BackgroundTasks, sync_manager: SyncManager = Depends(get_sync_manager)):

    def process_sync():
        logger.info("Starting background sync...")
        sync_status.sync_state = "syncing"
        sync_status.sync_message = "Syncing accounts..."
        try:
            report = sync_manager.sync_all()
            sync_status.sync_state = "completed"
            sync_status.emails_stored = report.stored
            sync_status.failed_accounts = [r.account_id for r in report.failed_accounts]
            sync_status.sync_message = f"Sync complete. Stored {report.stored} new emails."
        except StorageError as e:
            logger.error(f"Sync error: {e}")
            sync_status.sync_state = "error"
            sync_status.sync_message = f"Error: {str(e)}"
        except Exception as e:
            logger.exception(f"Unexpected sync failure: {e}")
            sync_status.sync_state = "error"
            sync_status.sync_message = f"Error: {str(e)}"

    background_tasks.add_task(process_sync)
    return {"status": "success", "message": "Sync started in background"}

@app.get("/sync-status", response_model=SyncStatus)
async def get_sync_status():
    return sync_status

@app.post("/send-email")
async def send_email(request: SendEmailRequest, store: Store = Depends(get_store), email_fetcher: EmailFetcher = Depends(get_email_fetcher)):
    account = store.get_account(request.from_account_id)
    if account is None:
        raise HTTPException(status_code=404, detail="Account not found")
    try:
        email_fetcher.send_email(account, request.to, request.subject, request.body)
    except TransportError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return {"status": "success", "message": f"Sent to {request.to}"}

@app.get("/settings", response_model=AppSettings)
async def get_settings(store: Store = Depends(get_store)):
    return store.get_settings()

@app.put("/settings")
async def update_settings(settings: AppSettings, store: Store = Depends(get_store)):
    store.update_settings(settings)
    return {"status": "success"}

@app.get("/notifications")
async def get_notifications(notification_service: NotificationService = Depends(get_notification_service)):
    return notification_service.recent()

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
