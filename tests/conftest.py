from __future__ import annotations

import json
import sys
from pathlib import Path

import httpx
import pytest
from fastapi.testclient import TestClient


# Ensure src/ is on sys.path so `import automation_console` works without installation.
sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

NEW_CUSTOMER_ID = "LGzQHIALne_MHAHWtdBIQ"
VOICE_AGENT_ID = "u4sSYc8PDieJxX_g6VMWl"
PURCHASES_ID = "ETQm3I9t8ypv6V7eYAVyv"
BLOG_CREATOR_ID = "lO1Z5m781nQe3HsPYUTch"

ENGINE_URL = "http://n8n.test"
ENGINE_KEY = "test-key"


def _workflow(workflow_id: str, name: str, active: bool = True) -> dict:
    return {
        "id": workflow_id,
        "name": name,
        "active": active,
        "updatedAt": "2026-10-01T08:00:00.000Z",
        "nodes": [
            {"id": "n1", "name": "Every Morning", "type": "n8n-nodes-base.scheduleTrigger", "parameters": {}},
            {"id": "n2", "name": "Write Post", "type": "n8n-nodes-base.openAi", "parameters": {}},
        ],
        "connections": {"Every Morning": {"main": [[{"node": "Write Post", "type": "main", "index": 0}]]}},
        "settings": {"executionOrder": "v1"},
        "staticData": None,
        "tags": [{"id": "t1", "name": "marketing"}],
        "versionId": "abc",
    }


class FakeEngine:
    """In-memory stand-in for the n8n public API, served through httpx.MockTransport."""

    def __init__(self):
        self.workflows = {
            NEW_CUSTOMER_ID: _workflow(NEW_CUSTOMER_ID, "New Customer"),
            VOICE_AGENT_ID: _workflow(VOICE_AGENT_ID, "AI Voice Agent"),
            PURCHASES_ID: _workflow(PURCHASES_ID, "Purchases"),
            BLOG_CREATOR_ID: _workflow(BLOG_CREATOR_ID, "Blog Creator"),
        }
        self.executions: dict[str, list[dict]] = {}
        self.calls: list[tuple[str, str]] = []
        self.created: list[dict] = []
        # (method, path) pairs that answer 500
        self.failures: set[tuple[str, str]] = set()
        self._next_id = 1

    def active_ids(self) -> set[str]:
        return {wf_id for wf_id, wf in self.workflows.items() if wf["active"]}

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def handle(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path.removeprefix("/api/v1")
        method = request.method
        self.calls.append((method, path))

        if request.headers.get("X-N8N-API-KEY") != ENGINE_KEY:
            return httpx.Response(401, json={"message": "unauthorized"})
        if (method, path) in self.failures:
            return httpx.Response(500, json={"message": "boom"})

        parts = [p for p in path.split("/") if p]
        if method == "GET" and parts == ["workflows"]:
            return httpx.Response(200, json={"data": list(self.workflows.values()), "nextCursor": None})
        if method == "GET" and parts == ["executions"]:
            workflow_id = request.url.params.get("workflowId")
            return httpx.Response(200, json={"data": self.executions.get(workflow_id, [])})
        if method == "POST" and parts == ["workflows"]:
            return self._create(json.loads(request.content))
        if len(parts) >= 2 and parts[0] == "workflows":
            workflow = self.workflows.get(parts[1])
            if workflow is None:
                return httpx.Response(404, json={"message": "Not Found"})
            if method == "GET" and len(parts) == 2:
                return httpx.Response(200, json=workflow)
            if method == "POST" and parts[2:] == ["activate"]:
                workflow["active"] = True
                return httpx.Response(200, json=workflow)
            if method == "POST" and parts[2:] == ["deactivate"]:
                workflow["active"] = False
                return httpx.Response(200, json=workflow)
        return httpx.Response(404, json={"message": "Not Found"})

    def _create(self, body: dict) -> httpx.Response:
        extra = set(body) - {"name", "nodes", "connections", "settings", "staticData"}
        if extra:
            return httpx.Response(400, json={"message": f"request/body must NOT have additional properties: {sorted(extra)}"})
        new_id = f"copy-{self._next_id}"
        self._next_id += 1
        self.created.append(body)
        self.workflows[new_id] = {**body, "id": new_id, "active": False}
        return httpx.Response(200, json=self.workflows[new_id])


@pytest.fixture
def app_home(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    # Keep tests hermetic: logs go under tmp_path, no real credentials leak in.
    home = tmp_path / "automation-console-home"
    monkeypatch.setenv("AUTOMATION_CONSOLE_HOME", str(home))
    for name in (
        "N8N_API_URL",
        "N8N_API_KEY",
        "ANTHROPIC_API_KEY",
        "OPENAI_API_KEY",
        "GOOGLE_SERVICE_ACCOUNT_EMAIL",
        "GOOGLE_PRIVATE_KEY",
        "CUSTOMER_SHEET_ID",
        "CONTENT_SHEET_ID",
        "REPORT_DOC_ID",
        "AUTOMATION_CONSOLE_REGISTRY",
    ):
        monkeypatch.setenv(name, "")

    # Force a clean import so module-level constants pick up the env vars above.
    for mod in list(sys.modules):
        if mod.startswith("automation_console.app"):
            sys.modules.pop(mod, None)
    return home


@pytest.fixture
def engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture
def engine_client(app_home, engine):
    from automation_console.app.services.workflow_client import WorkflowRegistryClient

    return WorkflowRegistryClient(base_url=ENGINE_URL, api_key=ENGINE_KEY, transport=engine.transport())


@pytest.fixture
def client(monkeypatch: pytest.MonkeyPatch, app_home, engine):
    from automation_console.app.services.workflow_client import workflow_client

    # Point the shared engine client at the fake engine.
    monkeypatch.setattr(workflow_client, "base_url", ENGINE_URL)
    monkeypatch.setattr(workflow_client, "api_key", ENGINE_KEY)
    monkeypatch.setattr(workflow_client, "_transport", engine.transport())

    from automation_console.app.main import app

    with TestClient(app) as test_client:
        yield test_client
