import json

import pytest
from fastapi.testclient import TestClient

from worker_agent.agents.worker_agent import AgentConfig, WorkerAgent
from worker_agent.api import service
from worker_agent.api.app import create_app
from worker_agent.config.settings import settings
from worker_agent.domain.exceptions import UpstreamError
from worker_agent.domain.models import ChatMessage, ChatResult
from worker_agent.tools.definitions import ToolCall, ToolResult


CORS = {
    "access-control-allow-origin": "*",
    "access-control-allow-methods": "GET, POST, OPTIONS",
    "access-control-allow-headers": "Content-Type",
}


@pytest.fixture
def client():
    return TestClient(create_app())


def _assert_cors(resp):
    for key, value in CORS.items():
        assert resp.headers[key] == value


def test_index_json(client):
    resp = client.get("/")
    assert resp.status_code == 200
    data = resp.json()
    assert data["name"] == "Worker Agent"
    assert data["usage"]["path"] == "/run"
    assert "\n  " in resp.text
    _assert_cors(resp)


def test_index_html(client, monkeypatch):
    monkeypatch.setattr(settings, "index_format", "html")
    resp = client.get("/")
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/html")
    assert 'fetch("/run"' in resp.text


def test_options_any_path(client):
    resp = client.options("/whatever/here")
    assert resp.status_code == 200
    assert resp.content == b""
    _assert_cors(resp)


def test_run_success(client, monkeypatch):
    seen = {}

    def fake_run(prompt, model=None):
        seen.update(prompt=prompt, model=model)
        return {"result": "done", "messages": [{"role": "user", "content": prompt}]}

    monkeypatch.setattr(service, "run_worker_agent", fake_run)
    resp = client.post("/run", json={"prompt": "list all functions"})
    assert resp.status_code == 200
    assert resp.json() == {"result": "done", "messages": [{"role": "user", "content": "list all functions"}]}
    assert resp.text.startswith('{\n  "result"')
    assert seen == {"prompt": "list all functions", "model": "openai/gpt-4o"}
    _assert_cors(resp)


def test_run_explicit_model(client, monkeypatch):
    seen = {}
    monkeypatch.setattr(service, "run_worker_agent", lambda prompt, model=None: seen.update(model=model) or {"result": "", "messages": []})
    client.post("/run", json={"prompt": "x", "model": "google/gemini-pro"})
    assert seen["model"] == "google/gemini-pro"


@pytest.mark.parametrize(
    "body",
    [{}, {"prompt": ""}, {"model": "openai/gpt-4o"}, {"prompt": 123}, {"prompt": None}, [], "text", 42],
)
def test_run_missing_prompt(client, body):
    resp = client.post("/run", content=json.dumps(body), headers={"Content-Type": "application/json"})
    assert resp.status_code == 400
    assert resp.json() == {"error": "Missing 'prompt' in request body"}
    _assert_cors(resp)


def test_run_failure_is_500(client, monkeypatch):
    def broken(prompt, model=None):
        raise UpstreamError("OpenRouter API error: 401 bad key", http_status=401, body="bad key")

    monkeypatch.setattr(service, "run_worker_agent", broken)
    resp = client.post("/run", json={"prompt": "x"})
    assert resp.status_code == 500
    assert resp.json() == {"error": "OpenRouter API error: 401 bad key"}


def test_run_malformed_body_is_500(client):
    resp = client.post("/run", content=b"{not json", headers={"Content-Type": "application/json"})
    assert resp.status_code == 500
    assert "error" in resp.json()


@pytest.mark.parametrize("method,path", [("GET", "/nope"), ("POST", "/"), ("GET", "/run"), ("GET", "/docs")])
def test_everything_else_is_404(client, method, path):
    resp = client.request(method, path)
    assert resp.status_code == 404
    assert resp.text == "Not found"
    _assert_cors(resp)


def test_service_serializes_transcript(monkeypatch):
    class Provider:
        name = "fake"

        def __init__(self):
            self.replies = [
                ChatMessage(
                    role="assistant",
                    content=None,
                    tool_calls=[ToolCall(id="call_1", name="list_workers", arguments="{}")],
                ),
                ChatMessage(role="assistant", content="There are no functions."),
            ]

        def complete(self, messages, model, tools=None):
            return ChatResult(provider="fake", model=model, message=self.replies.pop(0))

    class Executor:
        def execute(self, call):
            return ToolResult(call_id=call.id, content="No workers found.")

    agent = WorkerAgent(Provider(), Executor(), config=AgentConfig(), system_prompt="sys")
    monkeypatch.setattr(service, "_agent", agent)
    data = service.run_worker_agent("list all functions")
    assert data["result"] == "There are no functions."
    assert data["messages"] == [
        {"role": "system", "content": "sys"},
        {"role": "user", "content": "list all functions"},
        {
            "role": "assistant",
            "content": None,
            "tool_calls": [
                {"id": "call_1", "type": "function", "function": {"name": "list_workers", "arguments": "{}"}}
            ],
        },
        {"role": "tool", "content": "No workers found.", "tool_call_id": "call_1"},
        {"role": "assistant", "content": "There are no functions."},
    ]
    json.dumps(data)


def test_default_agent_uses_packaged_prompt(monkeypatch):
    monkeypatch.setattr(service, "_agent", None)
    agent = service.get_default_agent()
    assert agent is service.get_default_agent()
    assert "Cloudflare Workers" in agent._system_prompt
