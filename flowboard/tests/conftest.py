"""Shared fixtures for flowboard tests."""

import json
from typing import Any

import httpx
import pytest

from flowboard.config import Settings


@pytest.fixture(autouse=True)
def _reset_global_state():
    """Reset all module-level singletons and caches between tests."""
    yield

    # 1. Settings LRU cache
    from flowboard.config import get_settings

    get_settings.cache_clear()

    # 2. HTTP client singleton
    import flowboard.services.http_client as http_mod

    http_mod._client = None

    # 3. Executor (and its rate limiter) + shared response cache
    import flowboard.services.monday as monday_mod

    monday_mod._executor = None
    monday_mod._cache = None


@pytest.fixture
def test_settings() -> Settings:
    """Settings with safe defaults and no rate-limit pacing."""
    return Settings(
        monday_api_url="https://api.monday.test/v2",
        monday_api_token="test-token",
        monday_api_version="",
        request_timeout=5.0,
        rate_limit_max_concurrent=10,
        rate_limit_min_interval=0.0,
        rate_limit_reservoir=1000,
        rate_limit_refresh_interval=60.0,
        rate_limit_max_queue=None,
        page_size=100,
        max_pages=100,
        foundry_openai_endpoint="https://test.openai.azure.com/openai/v1/",
        foundry_api_key="test-key",
        foundry_deployment="gpt-4.1",
    )


@pytest.fixture
def mock_settings(monkeypatch, test_settings):
    """Patch ``get_settings`` everywhere it was imported by name."""
    from flowboard.config import get_settings

    get_settings.cache_clear()
    monkeypatch.setattr("flowboard.config.get_settings", lambda: test_settings)

    # (from flowboard.config import get_settings creates a local binding that
    # the flowboard.config monkeypatch above does not affect)
    for mod_path in [
        "flowboard.services.monday",
        "flowboard.services.llm",
        "flowboard.main",
    ]:
        monkeypatch.setattr(f"{mod_path}.get_settings", lambda: test_settings)

    return test_settings


class FakeMonday:
    """Records GraphQL requests and answers them from a handler function.

    The handler receives ``(operation_name, variables)`` and returns either
    a JSON-serialisable envelope or an ``httpx.Response``.  It may also raise
    an ``httpx`` transport error to simulate a network failure.
    """

    def __init__(self, handler):
        self.handler = handler
        self.calls: list[dict[str, Any]] = []

    def handle(self, request: httpx.Request) -> httpx.Response:
        from flowboard.services.graphql import operation_name

        body = json.loads(request.content or b"{}")
        name = operation_name(body.get("query", ""))
        variables = body.get("variables", {})
        self.calls.append(
            {
                "operation": name,
                "variables": variables,
                "json": body,
                "headers": request.headers,
                "url": str(request.url),
            }
        )
        result = self.handler(name, variables)
        if isinstance(result, httpx.Response):
            return result
        return httpx.Response(200, json=result)

    def operations(self) -> list[str]:
        return [c["operation"] for c in self.calls]


@pytest.fixture
def fake_monday(monkeypatch):
    """Install a FakeMonday behind the shared monday.com HTTP client.

    Only the shared client gets the mock transport, so ``ASGITransport``
    clients used to call the app are left alone.

    Usage::

        fake = fake_monday(lambda op, variables: {"data": {...}})
    """
    import flowboard.services.http_client as http_mod

    def _install(handler) -> FakeMonday:
        fake = FakeMonday(handler)
        client = httpx.AsyncClient(transport=httpx.MockTransport(fake.handle))
        monkeypatch.setattr(http_mod, "_client", client)
        return fake

    return _install


@pytest.fixture
def executor(test_settings):
    from flowboard.services.graphql import QueryExecutor

    return QueryExecutor(test_settings)
