"""Tests for the discovery, grants, logs and health endpoints."""

import json

import pytest
from unittest.mock import AsyncMock, MagicMock
from fastapi import FastAPI
from fastapi.testclient import TestClient

from grant_discovery.api.auth import verify_service_token
from grant_discovery.api.routes.discovery import router as discovery_router
from grant_discovery.api.routes.grants import router as grants_router
from grant_discovery.api.routes.health import router as health_router
from grant_discovery.clients.mail_client import SendResult
from grant_discovery.clients.openai_client import SearchCompletion
from grant_discovery.log_stream import LogStream
from grant_discovery.pipeline.orchestrator import ABORT_MESSAGE, FINALIZED_MESSAGE, DiscoveryOrchestrator
from grant_discovery.repository import EXPORT_FILENAME, GrantRepository

GRANTS_RESPONSE = json.dumps([
    {"agency_name": "NSF", "program_title": "CAREER Program", "status": "OPEN"},
    {"agency_name": "EIC", "program_title": "EIC Accelerator", "status": "UPCOMING"},
])


def _make_app(search_text=GRANTS_RESPONSE, available=True, repository=None) -> FastAPI:
    """Build a test app with mocked clients and a real orchestrator."""
    app = FastAPI()
    app.include_router(health_router)
    app.include_router(discovery_router)
    app.include_router(grants_router)

    # Override auth dependency so it never hits real Settings
    async def _noop_auth():
        return None

    app.dependency_overrides[verify_service_token] = _noop_auth

    openai = MagicMock()
    openai.search_model = "gpt-4.1-mini"
    openai.is_available.return_value = available
    openai.search_completion = AsyncMock(return_value=SearchCompletion(text=search_text))

    mail = MagicMock()
    mail.send = AsyncMock(return_value=SendResult(status_code=202))

    log_stream = LogStream()
    repository = repository if repository is not None else GrantRepository()

    app.state.openai = openai
    app.state.mail = mail
    app.state.repository = repository
    app.state.log_stream = log_stream
    app.state.orchestrator = DiscoveryOrchestrator.build(
        openai, mail, repository=repository, log_stream=log_stream
    )
    return app


AUTH = {"Authorization": "Bearer test-key"}


class TestHealthRoute:
    def test_health_ok(self):
        client = TestClient(_make_app())
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {
            "status": "ok",
            "extraction_configured": True,
            "running": False,
            "grant_count": 0,
        }

    def test_health_reports_missing_key(self):
        client = TestClient(_make_app(available=False))
        assert client.get("/health").json()["extraction_configured"] is False


class TestDiscoverRoute:
    def test_discover_returns_new_grants(self):
        app = _make_app()
        client = TestClient(app)

        response = client.post("/discover", json={"keywords": ["AI"], "year": 2026}, headers=AUTH)

        assert response.status_code == 200
        body = response.json()
        assert body["new_count"] == 2
        assert [g["program_title"] for g in body["new_grants"]] == ["CAREER Program", "EIC Accelerator"]
        assert body["logs"][-1]["message"] == FINALIZED_MESSAGE
        assert len(app.state.repository) == 2

    def test_discover_sends_notification(self):
        app = _make_app()
        client = TestClient(app)

        response = client.post(
            "/discover",
            json={"keywords": ["AI"], "notificationEnabled": True, "emailRecipient": "ops@example.org"},
            headers=AUTH,
        )

        assert response.json()["notification_sent"] is True
        app.state.mail.send.assert_awaited_once()

    def test_second_discover_filters_duplicates(self):
        client = TestClient(_make_app())

        client.post("/discover", json={"keywords": ["AI"]}, headers=AUTH)
        second = client.post("/discover", json={"keywords": ["AI"]}, headers=AUTH).json()

        assert second["new_count"] == 0
        assert second["filtered_count"] == 2

    def test_log_cleared_between_runs(self):
        client = TestClient(_make_app())

        client.post("/discover", json={"keywords": ["AI"]}, headers=AUTH)
        logs = client.post("/discover", json={"keywords": ["AI"]}, headers=AUTH).json()["logs"]

        assert logs[0]["message"] == "Starting new discovery sequence..."

    def test_invalid_config_returns_422(self):
        client = TestClient(_make_app())
        response = client.post("/discover", json={"keywords": []}, headers=AUTH)
        assert response.status_code == 422

    def test_extraction_failure_returns_502(self):
        client = TestClient(_make_app(available=False))

        response = client.post("/discover", json={"keywords": ["AI"]}, headers=AUTH)

        assert response.status_code == 502
        body = response.json()
        assert body["error_type"] == "ConfigError"
        assert body["logs"][-1]["message"] == ABORT_MESSAGE

    def test_parse_failure_returns_502(self):
        client = TestClient(_make_app(search_text="Sorry, nothing found."))

        response = client.post("/discover", json={"keywords": ["AI"]}, headers=AUTH)

        assert response.status_code == 502
        assert response.json()["error_type"] == "ParseError"

    def test_busy_returns_409(self):
        app = _make_app()
        app.state.orchestrator._running = True
        client = TestClient(app)

        response = client.post("/discover", json={"keywords": ["AI"]}, headers=AUTH)

        assert response.status_code == 409
        app.state.openai.search_completion.assert_not_called()

    def test_logs_endpoint(self):
        client = TestClient(_make_app())
        client.post("/discover", json={"keywords": ["AI"]}, headers=AUTH)

        logs = client.get("/logs").json()

        assert logs[-1]["message"] == FINALIZED_MESSAGE
        assert {"id", "timestamp", "level", "message"} <= set(logs[0])


class TestGrantsRoutes:
    def test_list_grants(self, make_grant):
        repository = GrantRepository([make_grant("Alpha")])
        client = TestClient(_make_app(repository=repository))

        grants = client.get("/grants").json()

        assert [g["program_title"] for g in grants] == ["Alpha"]

    def test_export_grants(self, make_grant):
        app = _make_app(repository=GrantRepository([make_grant("Alpha")]))
        client = TestClient(app)

        response = client.get("/grants/export")

        assert response.status_code == 200
        assert EXPORT_FILENAME in response.headers["content-disposition"]
        assert json.loads(response.content)[0]["program_title"] == "Alpha"
        assert app.state.log_stream.snapshot()[-1].message == "Data exported to JSON."

    def test_clear_grants(self, make_grant):
        app = _make_app(repository=GrantRepository([make_grant("Alpha"), make_grant("Beta")]))
        client = TestClient(app)

        response = client.delete("/grants", headers=AUTH)

        assert response.json() == {"removed": 2}
        assert len(app.state.repository) == 0

    def test_clear_refused_while_running(self, make_grant):
        app = _make_app(repository=GrantRepository([make_grant("Alpha")]))
        app.state.orchestrator._running = True
        client = TestClient(app)

        response = client.delete("/grants", headers=AUTH)

        assert response.status_code == 409
        assert len(app.state.repository) == 1
