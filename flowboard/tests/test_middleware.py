"""Tests for request IDs, security headers and CORS configuration."""

import logging

import pytest
from httpx import ASGITransport, AsyncClient

from flowboard.middleware import RequestIDLogFilter, request_id_var


@pytest.mark.asyncio
async def test_security_headers_present(mock_settings):
    """Every response includes security headers."""
    from flowboard.main import app

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as client:
        response = await client.get("/api/flowboard/health")

    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-Frame-Options"] == "DENY"
    assert response.headers["Referrer-Policy"] == "strict-origin-when-cross-origin"


@pytest.mark.asyncio
async def test_request_id_echoed(mock_settings):
    from flowboard.main import app

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as client:
        response = await client.get(
            "/api/flowboard/health", headers={"X-Request-ID": "req-123"}
        )

    assert response.headers["X-Request-ID"] == "req-123"


@pytest.mark.asyncio
async def test_request_id_generated_when_absent(mock_settings):
    from flowboard.main import app

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as client:
        first = await client.get("/api/flowboard/health")
        second = await client.get("/api/flowboard/health")

    assert first.headers["X-Request-ID"]
    assert first.headers["X-Request-ID"] != second.headers["X-Request-ID"]


@pytest.mark.asyncio
async def test_cors_allows_explicit_methods(mock_settings):
    """CORS preflight returns explicit methods, not wildcard."""
    from flowboard.main import app

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as client:
        response = await client.options(
            "/api/flowboard/health",
            headers={
                "Origin": "http://localhost:3000",
                "Access-Control-Request-Method": "GET",
            },
        )

    allowed = response.headers.get("Access-Control-Allow-Methods", "")
    assert "GET" in allowed
    assert "PATCH" in allowed
    assert allowed != "*"


@pytest.mark.asyncio
async def test_cors_allows_request_id_header(mock_settings):
    from flowboard.main import app

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as client:
        response = await client.options(
            "/api/flowboard/health",
            headers={
                "Origin": "http://localhost:3000",
                "Access-Control-Request-Method": "GET",
                "Access-Control-Request-Headers": "X-Request-ID",
            },
        )

    allowed = response.headers.get("Access-Control-Allow-Headers", "")
    assert "X-Request-ID" in allowed
    assert allowed != "*"


def test_log_filter_stamps_request_id():
    record = logging.LogRecord("t", logging.INFO, __file__, 1, "msg", None, None)
    RequestIDLogFilter().filter(record)
    assert record.request_id == "-"

    token = request_id_var.set("abc")
    try:
        RequestIDLogFilter().filter(record)
    finally:
        request_id_var.reset(token)
    assert record.request_id == "abc"
