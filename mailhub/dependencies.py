from fastapi import Request
from mailhub.config import MailHubConfig
from mailhub.services.email.fetcher import EmailFetcher
from mailhub.services.email.sync import SyncManager
from mailhub.services.notification.service import NotificationService
from mailhub.services.storage.store import Store

def get_config(request: Request) -> MailHubConfig:
    return request.app.state.config

def get_store(request: Request) -> Store:
    return request.app.state.store

def get_email_fetcher(request: Request) -> EmailFetcher:
    return request.app.state.email_fetcher

def get_notification_service(request: Request) -> NotificationService:
    return request.app.state.notification_service

def get_sync_manager(request: Request) -> SyncManager:
    return request.app.state.sync_manager
