"""Shared plumbing for the monday.com domain services."""

import logging
from typing import Any

from flowboard.services.cache import TTLCache, request_key
from flowboard.services.errors import ApiError
from flowboard.services.graphql import ItemsAccessor, QueryExecutor, operation_name

logger = logging.getLogger(__name__)


class MondayService:
    """Base for services that map GraphQL envelopes to domain models.

    Reads go through a TTL cache keyed by request signature.  Every mutation
    clears the whole cache, since a write to one entity can change the shape
    of others (an item created on a board changes that board's item list).
    """

    def __init__(self, executor: QueryExecutor, cache: TTLCache | None = None) -> None:
        self._executor = executor
        self._cache = cache if cache is not None else TTLCache(ttl=0, max_size=0)

    async def _query(
        self,
        operation: str,
        variables: dict[str, Any],
        *,
        use_cache: bool = True,
    ) -> dict[str, Any]:
        key = request_key(operation_name(operation), variables)
        if use_cache:
            cached = self._cache.get(key)
            if cached is not None:
                return cached
        envelope = await self._executor.execute(operation, variables)
        self._cache.set(key, envelope)
        return envelope

    async def _query_all(
        self,
        operation: str,
        variables: dict[str, Any],
        items: ItemsAccessor,
        *,
        use_cache: bool = True,
    ) -> list[Any]:
        key = request_key("all:" + operation_name(operation), variables)
        if use_cache:
            cached = self._cache.get(key)
            if cached is not None:
                return cached
        results = await self._executor.fetch_all(operation, variables, items)
        self._cache.set(key, results)
        return results

    async def _mutate(self, operation: str, variables: dict[str, Any]) -> dict[str, Any]:
        envelope = await self._executor.execute(operation, variables)
        dropped = self._cache.invalidate()
        if dropped:
            logger.debug(
                "Invalidated %d cached responses after %s",
                dropped,
                operation_name(operation),
            )
        return envelope


def first(envelope: dict[str, Any], key: str) -> dict[str, Any] | None:
    """Return ``data[key][0]`` from an envelope, or None when the list is empty."""
    records = (envelope.get("data") or {}).get(key) or []
    return records[0] if records else None


def field(envelope: dict[str, Any], key: str) -> Any:
    """Return ``data[key]`` from a mutation envelope.

    Raises ApiError when the mutation reported success but returned nothing.
    """
    value = (envelope.get("data") or {}).get(key)
    if value is None:
        raise ApiError(f"monday.com returned no {key} payload", operation=key)
    return value
