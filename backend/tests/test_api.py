"""
Backend API Tests
"""

import httpx
import pytest
from fastapi.testclient import TestClient
from starlette.requests import Request

import main
from main import app
from ai_editor.api.ai import _relay
from ai_editor.services.ai_providers import AuthError, Message, RateLimitError, TaskType
from ai_editor.services.ai_service import AIService
from ai_editor.services.response_cache import ResponseCache
from tests.conftest import FakeAdapter, build_executor


@pytest.fixture
def wire(three_providers, memory_cache):
    """Install an AIService backed by a FakeAdapter on app.state."""

    def _wire(secrets, adapter=None):
        adapter = adapter or FakeAdapter()
        registry, executor = build_executor(three_providers, secrets, adapter)
        app.state.ai_service = AIService(registry, executor, memory_cache)
        app.state.response_cache = memory_cache
        return adapter

    yield _wire
    for name in ("ai_service", "response_cache"):
        if hasattr(app.state, name):
            delattr(app.state, name)


@pytest.fixture
def client():
    """Create test client."""
    return TestClient(app)


class TestHealthEndpoint:
    """Test health check endpoint."""

    def test_health_check(self, client):
        """Test health endpoint returns ok."""
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["status"] == "running"

    def test_service_not_initialized(self, client):
        response = client.get("/api/v1/ai/models/status")
        assert response.status_code == 503


class TestModelsStatus:
    """Test provider status endpoint."""

    def test_status(self, client, wire):
        wire({"a": "secret-a"})
        response = client.get("/api/v1/ai/models/status")
        assert response.status_code == 200
        data = response.json()
        assert data["autoMode"] is True
        assert data["models"]["a"]["configured"] is True
        assert data["models"]["b"]["configured"] is False
        assert "secret-a" not in response.text


class TestCompleteEndpoint:
    """Test generic completion endpoint."""

    def test_success(self, client, wire):
        wire({"a": "ka"}, FakeAdapter(results={"a": "hello"}))
        response = client.post(
            "/api/v1/ai/complete",
            json={"task_type": "general", "messages": [{"role": "user", "content": "hi"}]},
        )
        assert response.status_code == 200
        assert response.json() == {"ok": True, "providerId": "a", "text": "hello", "usedFallback": False}

    def test_no_providers_is_503(self, client, wire):
        wire({})
        response = client.post("/api/v1/ai/complete", json={"messages": [{"role": "user", "content": "hi"}]})
        assert response.status_code == 503
        assert response.json()["errorKind"] == "ConfigurationError"

    def test_all_failed_is_502(self, client, wire):
        wire({"a": "ka"}, FakeAdapter(results={"a": AuthError("a: bad key")}))
        response = client.post("/api/v1/ai/complete", json={"messages": [{"role": "user", "content": "hi"}]})
        assert response.status_code == 502
        data = response.json()
        assert data["errorKind"] == "AllProvidersFailedError"
        assert data["attempts"][0]["errorKind"] == "Unauthorized"

    def test_empty_messages_rejected(self, client, wire):
        wire({"a": "ka"})
        response = client.post("/api/v1/ai/complete", json={"messages": []})
        assert response.status_code == 422

    def test_unknown_task_type_rejected(self, client, wire):
        wire({"a": "ka"})
        response = client.post(
            "/api/v1/ai/complete",
            json={"task_type": "poetry", "messages": [{"role": "user", "content": "hi"}]},
        )
        assert response.status_code == 422


class TestEditorActions:
    """Test code action endpoints."""

    def test_generate_code(self, client, wire):
        adapter = wire({"a": "ka"}, FakeAdapter(results={"a": "function add(a, b) { return a + b; }"}))
        response = client.post("/api/v1/ai/generate-code", json={"prompt": "add two numbers"})
        assert response.status_code == 200
        assert response.json()["text"].startswith("function add")
        assert adapter.calls == ["a"]

    def test_generate_code_fallback(self, client, wire):
        wire({"a": "ka", "b": "kb"}, FakeAdapter(results={"a": RateLimitError("a: quota")}))
        response = client.post("/api/v1/ai/generate-code", json={"prompt": "add two numbers"})
        assert response.status_code == 200
        assert response.json()["providerId"] == "b"
        assert response.json()["usedFallback"] is True

    def test_generate_code_stream(self, client, wire):
        wire({"a": "ka"}, FakeAdapter(chunks={"a": [b"data: one\n\n", b"data: two\n\n"]}))
        response = client.post("/api/v1/ai/generate-code", json={"prompt": "loop", "stream": True})
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/event-stream")
        assert response.text == "data: one\n\ndata: two\n\nevent: done\ndata: done\n\n"

    def test_generate_code_stream_failure_event(self, client, wire):
        wire({"a": "ka"}, FakeAdapter(chunks={"a": AuthError("a: bad key")}))
        response = client.post("/api/v1/ai/generate-code", json={"prompt": "loop", "stream": True})
        assert response.status_code == 200
        assert "event: error" in response.text
        assert "AllProvidersFailedError" in response.text

    def test_generate_code_stream_without_providers(self, client, wire):
        wire({})
        response = client.post("/api/v1/ai/generate-code", json={"prompt": "loop", "stream": True})
        assert response.status_code == 503

    @pytest.mark.parametrize(
        "path,body",
        [
            ("/api/v1/ai/explain-code", {"code": "x = 1", "question": "why?"}),
            ("/api/v1/ai/fix-bug", {"code": "x = ", "error": "SyntaxError"}),
            ("/api/v1/ai/optimize-code", {"code": "for i in range(10): pass", "focus_area": "memory"}),
            ("/api/v1/ai/review-code", {"code": "eval(input())"}),
        ],
    )
    def test_code_actions(self, client, wire, path, body):
        wire({"a": "ka"}, FakeAdapter(results={"a": "done"}))
        response = client.post(path, json=body)
        assert response.status_code == 200
        assert response.json()["text"] == "done"

    def test_missing_code_rejected(self, client, wire):
        wire({"a": "ka"})
        response = client.post("/api/v1/ai/explain-code", json={"code": ""})
        assert response.status_code == 422


class TestResearchEndpoint:
    """Test research endpoint."""

    def test_research_cached_on_second_call(self, client, wire):
        adapter = wire({"a": "ka"}, FakeAdapter(results={"a": "findings"}))
        first = client.post("/api/v1/ai/research", json={"query": "websockets"})
        second = client.post("/api/v1/ai/research", json={"query": "websockets"})
        assert first.json()["cached"] is False
        assert second.json()["cached"] is True
        assert adapter.calls == ["a"]


class TestValidateKeysEndpoint:
    """Test API key validation endpoint."""

    def test_valid_key(self, client, wire):
        wire({}, FakeAdapter(results={"a": "ok"}))
        response = client.post("/api/v1/ai/auth/validate-keys", json={"provider": "a", "api_key": "sk-1"})
        assert response.status_code == 200
        assert response.json() == {"ok": True, "providerId": "a", "cached": False}

    def test_invalid_key_is_401(self, client, wire):
        wire({}, FakeAdapter(results={"a": AuthError("a: invalid API key")}))
        response = client.post("/api/v1/ai/auth/validate-keys", json={"provider": "a", "api_key": "sk-bad"})
        assert response.status_code == 401
        assert response.json()["errorKind"] == "Unauthorized"
        assert "sk-bad" not in response.text

    def test_unknown_provider_is_400(self, client, wire):
        wire({})
        response = client.post("/api/v1/ai/auth/validate-keys", json={"provider": "nope", "api_key": "k"})
        assert response.status_code == 400


class TestCacheEndpoints:
    """Test cache management endpoints."""

    def test_stats_delete_and_clear(self, client, wire, memory_cache):
        wire({"a": "ka"})
        memory_cache.set("research_x", {"ok": True}, 60)
        memory_cache.set("research_y", {"ok": True}, 60)

        stats = client.get("/api/v1/cache/stats").json()
        assert stats["entries"] == 2

        assert client.delete("/api/v1/cache/research_x").status_code == 200
        assert client.delete("/api/v1/cache/research_x").status_code == 404

        response = client.delete("/api/v1/cache")
        assert response.status_code == 200
        assert response.json()["message"] == "Cleared 1 cached responses"


class TestStreamRelay:
    """Test the SSE relay behind the streaming routes."""

    @staticmethod
    def _request(client_gone):
        async def receive():
            if client_gone():
                return {"type": "http.disconnect"}
            return {"type": "http.request", "body": b"", "more_body": True}

        return Request({"type": "http", "method": "POST", "headers": []}, receive)

    @pytest.mark.asyncio
    async def test_disconnect_stops_relay_and_closes_upstream(self, three_providers):
        adapter = FakeAdapter(chunks={"a": [b"data: one\n\n", b"data: two\n\n", b"data: three\n\n"]})
        _, executor = build_executor(three_providers, {"a": "ka"}, adapter)
        chunks = executor.stream(TaskType.GENERAL, [Message("user", "loop")])
        relayed = []

        async for chunk in _relay(self._request(lambda: bool(relayed)), chunks):
            relayed.append(chunk)

        assert relayed == [b"data: one\n\n"]
        assert not any(b"event: done" in chunk for chunk in relayed)
        assert adapter.closed == ["a"]

    @pytest.mark.asyncio
    async def test_connected_client_gets_done_event(self, three_providers):
        adapter = FakeAdapter(chunks={"a": [b"data: one\n\n"]})
        _, executor = build_executor(three_providers, {"a": "ka"}, adapter)
        chunks = executor.stream(TaskType.GENERAL, [Message("user", "loop")])

        relayed = [chunk async for chunk in _relay(self._request(lambda: False), chunks)]

        assert relayed == [b"data: one\n\n", b"event: done\ndata: done\n\n"]
        assert adapter.closed == ["a"]


class _RecordingAsyncClient(httpx.AsyncClient):
    instances = []

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.instances.append(self)


class _StopFailsCache(ResponseCache):
    async def stop_sweeper(self):
        await super().stop_sweeper()
        raise RuntimeError("database is locked")


class TestLifespan:
    """Test application startup and shutdown."""

    def test_shutdown_closes_http_client_when_cache_stop_fails(self, monkeypatch):
        _RecordingAsyncClient.instances = []
        monkeypatch.setattr(main.httpx, "AsyncClient", _RecordingAsyncClient)
        monkeypatch.setattr(main, "create_response_cache", lambda config: _StopFailsCache())

        try:
            with TestClient(app) as client:
                assert client.get("/health").status_code == 200
        except Exception:
            # Starlette may surface the shutdown error directly or grouped.
            pass
        finally:
            for name in ("ai_service", "response_cache"):
                if hasattr(app.state, name):
                    delattr(app.state, name)

        assert len(_RecordingAsyncClient.instances) == 1
        assert _RecordingAsyncClient.instances[0].is_closed
