"""Process-wide wiring for the monday.com client and domain services.

Routers depend on these factories; tests override them or reset the
module-level singletons.
"""

from functools import partial

from flowboard.config import get_settings
from flowboard.services.boards import BoardService
from flowboard.services.cache import TTLCache
from flowboard.services.columns import ColumnService
from flowboard.services.graphql import QueryExecutor
from flowboard.services.groups import GroupService
from flowboard.services.items import ItemService
from flowboard.services.workflow_ai import analyze_workflow
from flowboard.services.workflow_metrics import WorkflowAnalysisService
from flowboard.services.workspaces import WorkspaceService

# Module-level singletons (created lazily, live for the process lifetime)
_executor: QueryExecutor | None = None
_cache: TTLCache | None = None


def get_executor() -> QueryExecutor:
    """Return the shared executor (and therefore the shared rate limiter)."""
    global _executor
    if _executor is None:
        _executor = QueryExecutor(get_settings())
    return _executor


def get_cache() -> TTLCache:
    """Return the response cache shared by all domain services."""
    global _cache
    if _cache is None:
        settings = get_settings()
        _cache = TTLCache(ttl=settings.cache_ttl, max_size=settings.cache_max_size)
    return _cache


def get_board_service() -> BoardService:
    return BoardService(get_executor(), get_cache())


def get_workspace_service() -> WorkspaceService:
    return WorkspaceService(get_executor(), get_cache())


def get_item_service() -> ItemService:
    return ItemService(get_executor(), get_cache())


def get_group_service() -> GroupService:
    return GroupService(get_executor(), get_cache())


def get_column_service() -> ColumnService:
    return ColumnService(get_executor(), get_cache())


def get_workflow_service() -> WorkflowAnalysisService:
    boards = get_board_service()
    return WorkflowAnalysisService(
        boards, analyzer=partial(analyze_workflow, boards=boards)
    )
