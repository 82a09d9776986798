"""GraphQL query executor and pagination driver for the monday.com API.

Every request goes through the shared ``RateLimiter``.  Failures are logged
once here and raised as one of the ``GraphQLClientError`` kinds; nothing is
retried.  Successful responses are returned with their envelope intact.
"""

import logging
import re
from collections.abc import Callable
from typing import Any

import httpx

from flowboard.config import Settings
from flowboard.services.errors import (
    ApiError,
    AuthenticationError,
    GraphQLClientError,
    NetworkError,
    RateLimitExceeded,
    RequestTimeout,
)
from flowboard.services.http_client import get_shared_client, monday_headers
from flowboard.services.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

ItemsAccessor = Callable[[dict[str, Any]], list[Any] | None]

_OPERATION_NAME = re.compile(r"\b(?:query|mutation)\s+(\w+)")
_AUTH_MARKERS = ("not authenticated", "unauthorized", "authentication", "invalid token")
_RATE_MARKERS = ("rate limit", "complexity budget", "too many requests")


def operation_name(operation: str) -> str:
    """Return the declared name of a GraphQL operation, or ``"anonymous"``."""
    match = _OPERATION_NAME.search(operation)
    return match.group(1) if match else "anonymous"


def path_accessor(path: str) -> ItemsAccessor:
    """Build an accessor that walks a dotted path like ``"data.boards.0.items"``.

    Numeric segments index into lists.  A missing segment yields an empty
    list rather than raising.
    """
    parts = [p for p in path.split(".") if p]

    def _walk(envelope: dict[str, Any]) -> list[Any]:
        node: Any = envelope
        for part in parts:
            if isinstance(node, list) and part.isdigit():
                index = int(part)
                node = node[index] if index < len(node) else None
            elif isinstance(node, dict):
                node = node.get(part)
            else:
                node = None
            if node is None:
                logger.debug("Path %r stopped at segment %r", path, part)
                return []
        return node if isinstance(node, list) else []

    return _walk


def _error_messages(errors: list[Any]) -> str:
    messages = []
    for err in errors:
        if isinstance(err, dict):
            messages.append(str(err.get("message", err)))
        else:
            messages.append(str(err))
    return ", ".join(messages)


class QueryExecutor:
    """Issues single GraphQL operations through a rate limiter.

    Configuration is passed in explicitly so tests never need to touch the
    process environment.
    """

    def __init__(
        self,
        settings: Settings,
        limiter: RateLimiter | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = settings
        self._limiter = limiter or RateLimiter(
            max_concurrent=settings.rate_limit_max_concurrent,
            reservoir=settings.rate_limit_reservoir,
            refresh_interval=settings.rate_limit_refresh_interval,
            min_interval=settings.rate_limit_min_interval,
            max_queue=settings.rate_limit_max_queue,
        )
        self._client = client

    @property
    def limiter(self) -> RateLimiter:
        return self._limiter

    @property
    def settings(self) -> Settings:
        return self._settings

    async def execute(
        self, operation: str, variables: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        """Run one GraphQL operation and return the full response envelope.

        Raises:
            RateLimitExceeded: limiter queue full, or HTTP 429 from the API.
            RequestTimeout: the request exceeded ``settings.request_timeout``.
            NetworkError: any other transport failure.
            AuthenticationError: the token was rejected.
            ApiError: the API returned an error payload or a non-JSON body.
        """
        variables = {k: v for k, v in (variables or {}).items() if v is not None}
        name = operation_name(operation)
        context = {"operation": name, "variables": variables}

        try:
            return await self._limiter.schedule(
                self._post, operation, variables, context
            )
        except GraphQLClientError as e:
            if not e.operation:
                e.operation, e.variables = name, variables
            logger.warning("monday.com request failed: %s", e)
            raise

    async def _post(
        self, operation: str, variables: dict[str, Any], context: dict[str, Any]
    ) -> dict[str, Any]:
        client = self._client or get_shared_client(self._settings.request_timeout)
        logger.debug("Executing %s with %s", context["operation"], variables)
        try:
            resp = await client.post(
                self._settings.monday_api_url,
                headers=monday_headers(self._settings),
                json={"query": operation, "variables": variables},
                timeout=self._settings.request_timeout,
            )
        except httpx.TimeoutException as e:
            raise RequestTimeout(
                f"Request timed out after {self._settings.request_timeout}s", **context
            ) from e
        except httpx.HTTPError as e:
            raise NetworkError(f"Network error: {e}", **context) from e

        if resp.status_code in (401, 403):
            raise AuthenticationError(
                f"Authentication failed (HTTP {resp.status_code})",
                status=resp.status_code,
                **context,
            )
        if resp.status_code == 429:
            raise RateLimitExceeded(
                "Rate limit exceeded. Please try again later.", status=429, **context
            )

        try:
            data = resp.json()
        except ValueError as e:
            raise ApiError(
                f"Invalid JSON response (HTTP {resp.status_code})",
                status=resp.status_code,
                **context,
            ) from e

        if not isinstance(data, dict):
            raise ApiError(
                "Unexpected response shape", status=resp.status_code, **context
            )

        errors = data.get("errors")
        if not errors and data.get("error_message"):
            errors = [
                {
                    "message": data["error_message"],
                    "extensions": {"code": data.get("error_code")},
                }
            ]
        if errors:
            self._raise_for_errors(errors, resp.status_code, context)

        if resp.status_code >= 400:
            raise ApiError(
                f"HTTP {resp.status_code} from monday.com",
                status=resp.status_code,
                **context,
            )
        return data

    @staticmethod
    def _raise_for_errors(
        errors: list[Any], status: int, context: dict[str, Any]
    ) -> None:
        messages = _error_messages(errors)
        lowered = messages.lower()
        if any(marker in lowered for marker in _AUTH_MARKERS):
            raise AuthenticationError(
                f"Authentication failed: {messages}", status=401, **context
            )
        if any(marker in lowered for marker in _RATE_MARKERS):
            raise RateLimitExceeded(
                f"Rate limit exceeded: {messages}", status=429, **context
            )
        raise ApiError(
            f"GraphQL Error: {messages}",
            errors=[e if isinstance(e, dict) else {"message": str(e)} for e in errors],
            status=status,
            **context,
        )

    async def fetch_all(
        self,
        operation: str,
        variables: dict[str, Any] | None,
        items: ItemsAccessor | str,
        page_size: int | None = None,
    ) -> list[Any]:
        """Fetch every page of a ``limit``/``page`` paginated query.

        Pages are requested one at a time in increasing order and their items
        appended as returned.  Stops at the first empty page.  After
        ``settings.max_pages`` fetches it stops anyway and logs a warning;
        the partial result is returned.

        Args:
            operation: GraphQL query taking ``$limit`` and ``$page``.
            variables: Base variables (pagination variables are added).
            items: Accessor returning the page's list from the envelope, or a
                dotted path such as ``"data.boards"``.
            page_size: Items per page (defaults to ``settings.page_size``).
        """
        extract = path_accessor(items) if isinstance(items, str) else items
        limit = page_size or self._settings.page_size
        max_pages = self._settings.max_pages
        all_items: list[Any] = []

        for page in range(1, max_pages + 1):
            envelope = await self.execute(
                operation, {**(variables or {}), "limit": limit, "page": page}
            )
            page_items = extract(envelope) or []
            if not page_items:
                logger.debug(
                    "Pagination of %s complete: %d items from %d pages",
                    operation_name(operation),
                    len(all_items),
                    page - 1,
                )
                return all_items
            all_items.extend(page_items)

        logger.warning(
            "Pagination safety limit of %d pages reached for %s; there might be more data",
            max_pages,
            operation_name(operation),
        )
        return all_items
