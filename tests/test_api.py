import pytest
from fastapi.testclient import TestClient

from mailhub.api import app
from mailhub.lib.shared.providers import llm
from tests.factories import FakeHTTPResponse

pytestmark = pytest.mark.offline

ACCOUNT = {
    "id": "",
    "name": "Work",
    "email": "alex@work.example.com",
    "protocol": "imap",
    "provider": "outlook",
    "config": {"host": "outlook.office365.com", "port": 993, "username": "alex", "password": "pw"},
}

@pytest.fixture
def client(tmp_path, monkeypatch):
    monkeypatch.setenv("MAILHUB_ENV", "dev")
    monkeypatch.setenv("MAILHUB_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.delenv("MAILHUB_ENCRYPTION_KEY", raising=False)
    with TestClient(app) as client:
        yield client

def add_account(client) -> str:
    response = client.post("/accounts", json=ACCOUNT)
    assert response.status_code == 200
    return response.json()["id"]

def test_config_status(client):
    response = client.get("/config-status")
    assert response.status_code == 200
    assert response.json()["env"] == "dev"
    assert response.json()["encryption_enabled"] is False

def test_account_crud(client):
    account_id = add_account(client)
    assert account_id

    updated = dict(ACCOUNT, id=account_id, name="Work (renamed)")
    assert client.put(f"/accounts/{account_id}", json=updated).json()["updated"] is True
    assert client.put("/accounts/missing", json=updated).json()["updated"] is False
    assert [a["name"] for a in client.get("/accounts").json()] == ["Work (renamed)"]

    assert client.delete(f"/accounts/{account_id}").status_code == 200
    assert client.get("/accounts").json() == []

def test_sync_without_ai_stores_demo_emails(client):
    add_account(client)

    assert client.post("/sync-emails").status_code == 200

    status = client.get("/sync-status").json()
    assert status["sync_state"] == "completed"
    assert status["emails_stored"] == 2

    emails = client.get("/emails").json()
    assert len(emails) == 2
    assert {e["classification"]["category"] for e in emails} == {"normal"}
    assert client.get("/notifications").json() == []

def test_sync_with_ai_notifies(client, monkeypatch):
    def fake_post(url, **kwargs):
        return FakeHTTPResponse({"choices": [{"message": {"content": "verification"}}]})

    monkeypatch.setattr(llm.requests, "post", fake_post)
    add_account(client)
    settings = {
        "notifications": True,
        "theme": "dark",
        "ai_config": {"enabled": True, "provider": "openai", "api_key": "sk-test", "auto_delete": True},
    }
    assert client.put("/settings", json=settings).status_code == 200
    assert client.get("/settings").json()["ai_config"]["provider"] == "openai"

    client.post("/sync-emails")

    emails = client.get("/emails").json()
    assert len(emails) == 2
    code_email = next(e for e in emails if e["subject"].startswith("Your verification code"))
    assert code_email["classification"]["category"] == "verification"
    assert code_email["classification"]["should_notify"] is True

    notifications = client.get("/notifications").json()
    assert {n["sender"] for n in notifications} == {"team@mailhub.app", "security@example.com"}

def test_email_updates_and_delete(client):
    add_account(client)
    client.post("/sync-emails")
    email_id = client.get("/emails").json()[0]["id"]

    response = client.patch(f"/emails/{email_id}", json={"is_read": True, "is_starred": True, "labels": ["inbox"]})
    assert response.json()["updated"] is True
    assert client.patch("/emails/missing", json={"is_read": True}).json()["updated"] is False

    email = client.get("/emails").json()[0]
    assert (email["is_read"], email["is_starred"], email["labels"]) == (True, True, ["inbox"])

    client.delete(f"/emails/{email_id}")
    assert [e["id"] for e in client.get("/emails").json()] != [email_id]
    assert len(client.get("/emails").json()) == 1

def test_send_email(client):
    account_id = add_account(client)
    message = {"from_account_id": account_id, "to": "bob@example.com", "subject": "Hi", "body": "Hello"}

    assert client.post("/send-email", json=message).status_code == 200
    assert client.post("/send-email", json=dict(message, from_account_id="missing")).status_code == 404

def test_account_update_ignores_body_id(client):
    account_id = add_account(client)

    client.put(f"/accounts/{account_id}", json=dict(ACCOUNT, id="other", name="Renamed"))

    assert [(a["id"], a["name"]) for a in client.get("/accounts").json()] == [(account_id, "Renamed")]

def test_unexpected_sync_failure_reports_error(client, monkeypatch):
    def broken_sync_all():
        raise RuntimeError("fetcher crashed")

    monkeypatch.setattr(client.app.state.sync_manager, "sync_all", broken_sync_all)
    client.post("/sync-emails")

    status = client.get("/sync-status").json()
    assert status["sync_state"] == "error"
    assert "fetcher crashed" in status["sync_message"]
