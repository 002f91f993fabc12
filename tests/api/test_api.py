"""Tests for the HTTP API."""
from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from policy_monitor.config import settings
from policy_monitor.main import app
from policy_monitor.scheduler.pipeline import PipelineResult, StageResult
from policy_monitor.schemas.policy import PolicyAnalysis
from policy_monitor.services.drafts.scheduler import RequestScheduler
from policy_monitor.services.drafts.service import DraftService, set_draft_service
from policy_monitor.services.notification import EmailNotifier, get_email_notifier
from policy_monitor.services.policy_store import get_policy_store


@pytest.fixture
def client(store, monkeypatch):
    monkeypatch.setattr(settings, "OPENROUTER_API_KEY", "")
    app.dependency_overrides[get_policy_store] = lambda: store
    set_draft_service(DraftService(RequestScheduler(0.0)))
    yield TestClient(app)
    app.dependency_overrides.clear()
    set_draft_service(None)


def test_root(client):
    body = client.get("/").json()
    assert body["docs"] == "/docs"


def test_list_and_get_policies(client, store, make_record):
    assert client.get("/api/v1/policies").json() == []
    store.add_or_update(make_record())

    listed = client.get("/api/v1/policies").json()
    detail = client.get("/api/v1/policies/moef-1")

    assert [p["id"] for p in listed] == ["moef-1"]
    assert "aiAnalysis" not in listed[0]
    assert detail.status_code == 200
    assert detail.json()["title"] == "Draft Rules for Prevention of Cruelty to Animals"


def test_unknown_policy_is_404(client):
    resp = client.get("/api/v1/policies/missing")
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Policy not found"


def test_stats(client, store, make_record):
    store.add_or_update(make_record())

    stats = client.get("/api/v1/policies/stats").json()

    assert stats["total"] == 1
    assert stats["pending"] == 1


def test_analyze_stored_policy(client, store, make_record):
    store.add_or_update(make_record())
    analysis = PolicyAnalysis(isAnimalWelfare=True, relevanceScore=77, urgencyLevel="high")

    with patch("policy_monitor.api.v1.policies.classify_policy", new=AsyncMock(return_value=analysis)):
        resp = client.post("/api/v1/policies/analyze", json={"policy": {"id": "moef-1"}})

    assert resp.status_code == 200
    assert resp.json()["relevanceScore"] == 77
    assert store.get("moef-1").aiAnalysis.relevanceScore == 77


def test_analyze_adhoc_policy_uses_fallback(client, store):
    resp = client.post("/api/v1/policies/analyze", json={"policy": {
        "title": "Draft animal welfare rules for dairies",
        "description": "Standards for livestock housing and veterinary care on dairy farms.",
    }})

    assert resp.status_code == 200
    assert resp.json()["isAnimalWelfare"] is True
    assert "API not configured" in resp.json()["analysis"]
    assert store.load() == []


def test_analyze_requires_some_text(client):
    resp = client.post("/api/v1/policies/analyze", json={"policy": {}})
    assert resp.status_code == 400


def test_generate_draft_normalizes_tone_and_stores(client, store, make_record):
    store.add_or_update(make_record())
    store.update_analysis("moef-1", PolicyAnalysis(isAnimalWelfare=True, relevanceScore=80))

    resp = client.post("/api/v1/policies/generate-draft",
                       json={"policy": {"id": "moef-1"}, "tone": "Data-Backed"})

    assert resp.status_code == 200
    assert resp.json()["tone"] == "dataBacked"
    assert "Draft Rules for Prevention of Cruelty to Animals" in resp.json()["draft"]
    assert store.get("moef-1").aiAnalysis.drafts["dataBacked"] == resp.json()["draft"]


def test_generate_draft_for_unanalyzed_policy_is_not_stored(client, store, make_record):
    store.add_or_update(make_record())

    resp = client.post("/api/v1/policies/generate-draft", json={"policy": {"id": "moef-1"}, "tone": "weird"})

    assert resp.json()["tone"] == "legal"
    assert not store.get("moef-1").is_analyzed


def test_generate_draft_requires_tone(client):
    resp = client.post("/api/v1/policies/generate-draft", json={"policy": {"title": "Some policy title"}})
    assert resp.status_code == 422


def test_clear(client, store, make_record):
    store.add_or_update(make_record())

    resp = client.delete("/api/v1/policies/clear")

    assert resp.json() == {"message": "All policies cleared successfully"}
    assert store.load() == []


def test_send_test_email(client):
    app.dependency_overrides[get_email_notifier] = lambda: EmailNotifier(
        host="smtp.test", port=2525, user="monitor@example.org", password="secret", recipient="team@example.org",
    )

    with patch("policy_monitor.services.notification.smtplib.SMTP") as smtp_cls:
        resp = client.post("/api/v1/policies/test-email")

    assert resp.status_code == 200
    assert resp.json() == {"message": "Test email sent successfully"}
    smtp_cls.return_value.__enter__.return_value.sendmail.assert_called_once()


def test_send_test_email_without_credentials_fails(client):
    app.dependency_overrides[get_email_notifier] = lambda: EmailNotifier(user="", password="")

    resp = client.post("/api/v1/policies/test-email")

    assert resp.status_code == 500
    assert resp.json()["detail"] == "Failed to send test email"


def test_scrape_runs_forced_check(client, store, make_record):
    store.add_or_update(make_record())
    result = PipelineResult(stages=[
        StageResult(name="scrape", status="success", summary={"scraped": 6, "added": 4}),
        StageResult(name="analyze", status="success", summary={"analyzed": 0, "relevant": 0, "emailed": 0}),
    ])
    check = AsyncMock(return_value=result)

    with patch("policy_monitor.api.v1.pipeline.execute_policy_check", new=check):
        body = client.post("/api/v1/scrape").json()

    assert check.await_args.kwargs["force"] is True
    assert body["policiesFound"] == 4
    assert body["totalPolicies"] == 1
    assert body["pipeline"]["status"] == "success"


def test_analyze_pending_endpoint(client):
    with patch("policy_monitor.api.v1.pipeline.analyze_pending_policies",
               new=AsyncMock(return_value={"analyzed": 2, "relevant": 1, "emailed": 0})):
        body = client.post("/api/v1/analyze-pending").json()

    assert body["analyzed"] == 2
    assert body["relevant"] == 1


def test_health(client, store, make_record):
    store.add_or_update(make_record())

    body = client.get("/api/v1/health").json()

    assert body["status"] == "ok"
    assert body["services"]["llm"] == "not_configured"
    assert body["stats"]["total"] == 1
