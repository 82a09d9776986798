"""Shared HTTP client utilities — reusable httpx client and API headers."""

import logging

import httpx

from flowboard.config import Settings

logger = logging.getLogger(__name__)

# Module-level shared client (created lazily, lives for the process lifetime)
_client: httpx.AsyncClient | None = None


def get_shared_client(timeout: float = 30.0) -> httpx.AsyncClient:
    """Return a shared httpx.AsyncClient, creating it on first call."""
    global _client
    if _client is None or _client.is_closed:
        _client = httpx.AsyncClient(timeout=timeout)
    return _client


async def close_shared_client() -> None:
    """Close the shared client; the next ``get_shared_client`` makes a new one."""
    global _client
    if _client is not None and not _client.is_closed:
        await _client.aclose()
        logger.debug("Closed shared HTTP client")
    _client = None


def monday_headers(settings: Settings) -> dict[str, str]:
    """Build standard monday.com API request headers.

    Authorization is included only when a token is configured; monday.com
    expects the raw token, without a ``Bearer`` prefix.  API-Version is
    included only when pinned, otherwise the account default applies.
    """
    headers: dict[str, str] = {"Content-Type": "application/json"}
    if settings.monday_api_version:
        headers["API-Version"] = settings.monday_api_version
    if settings.monday_api_token:
        headers["Authorization"] = settings.monday_api_token
    return headers
