"""Workflow analysis — cycle time, throughput, WIP and bottleneck detection.

Metrics are a pure function of a board's current groups, columns and items.
Both are fetched fresh on every call and nothing derived is cached.

Cycle time and throughput are placeholder constants: the board snapshot
carries no state-transition history to derive them from.  Historical data
is a synthetic series for the dashboard charts, not real telemetry.
"""

import logging
import math
import random
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone

from flowboard.models.board import BoardDetails, Column, Group, Item
from flowboard.models.metrics import (
    AnalysisResult,
    Bottleneck,
    HistoricalDataPoint,
    WorkflowMetrics,
)
from flowboard.services.boards import BoardService
from flowboard.services.errors import BoardNotFoundError

logger = logging.getLogger(__name__)

PLACEHOLDER_CYCLE_TIME_DAYS = 7.0
PLACEHOLDER_THROUGHPUT_PER_WEEK = 10.0

# detect_issues thresholds
HIGH_WIP = 20
BLOCKED_RATIO = 0.2
BOTTLENECK_RATIO = 0.3
LONG_CYCLE_TIME_DAYS = 14

UNKNOWN_GROUP = "__unknown__"

_BLOCKED_MARKERS = ("block", "stuck")
_COMPLETED_MARKERS = ("done", "complete")
_READY_MARKERS = ("ready", "to do")

Analyzer = Callable[[str], Awaitable[AnalysisResult]]


def _contains_any(text: str, markers: tuple[str, ...]) -> bool:
    return any(m in text for m in markers)


def _parse_date(text: str) -> datetime | None:
    """Parse a rendered date column value ("2026-01-15" or "2026-01-15 10:30")."""
    text = text.strip()
    if not text:
        return None
    try:
        dt = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        return None
    return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)


def days_between(start: datetime, end: datetime) -> int:
    """Whole days between two moments, rounded up."""
    seconds = abs((end - start).total_seconds())
    return math.ceil(seconds / 86400)


def find_status_column(columns: list[Column]) -> Column | None:
    for col in columns:
        if col.type == "status" or "status" in col.title.lower():
            return col
    return None


def find_date_column(columns: list[Column]) -> Column | None:
    return next((c for c in columns if c.type == "date"), None)


def partition_items(
    groups: list[Group], items: list[Item]
) -> dict[str, list[Item]]:
    """Bucket items by group id.

    Every board group gets a bucket (possibly empty).  Items whose group is
    absent or not on the board land in ``UNKNOWN_GROUP``.
    """
    buckets: dict[str, list[Item]] = {g.id: [] for g in groups}
    for item in items:
        group_id = item.group.id if item.group else None
        if group_id in buckets:
            buckets[group_id].append(item)
        else:
            buckets.setdefault(UNKNOWN_GROUP, []).append(item)
    return buckets


def _classify_by_status(items: list[Item], status_column: Column) -> tuple[int, int, int]:
    ready = blocked = completed = 0
    for item in items:
        cv = item.value_for(status_column.id)
        status = (cv.text or "").lower() if cv else ""
        if _contains_any(status, _BLOCKED_MARKERS):
            blocked += 1
        elif _contains_any(status, _COMPLETED_MARKERS):
            completed += 1
        elif _contains_any(status, _READY_MARKERS):
            ready += 1
    return ready, blocked, completed


def _classify_by_position(
    groups: list[Group], buckets: dict[str, list[Item]]
) -> tuple[int, int, int]:
    """First group is ready, last is completed, "blocked"/"stuck" titles are blocked.

    Blocked groups are counted on top of ready/completed, so the same items
    may be counted twice.  Issue thresholds are tuned against this.
    """
    ready = blocked = completed = 0
    ordered = sorted(groups, key=lambda g: g.position)
    if ordered:
        ready = len(buckets.get(ordered[0].id, []))
        completed = len(buckets.get(ordered[-1].id, []))
    for group in groups:
        if _contains_any(group.title.lower(), _BLOCKED_MARKERS):
            blocked += len(buckets.get(group.id, []))
    return ready, blocked, completed


def _stagnation(
    group_items: list[Item], date_column: Column | None, now: datetime
) -> float:
    if not group_items or date_column is None:
        return 0.0
    total = 0
    for item in group_items:
        cv = item.value_for(date_column.id)
        started = _parse_date(cv.text or "") if cv else None
        if started is not None:
            total += days_between(started, now)
    return total / len(group_items)


def compute_metrics(
    details: BoardDetails, items: list[Item], now: datetime | None = None
) -> WorkflowMetrics:
    """Derive workflow metrics from one board snapshot."""
    now = now or datetime.now(timezone.utc)
    groups = details.groups
    buckets = partition_items(groups, items)

    unknown = len(buckets.get(UNKNOWN_GROUP, []))
    if unknown:
        logger.debug(
            "Board %s: %d item(s) reference groups not on the board",
            details.board.id,
            unknown,
        )

    status_column = find_status_column(details.columns)
    if status_column is not None:
        ready, blocked, completed = _classify_by_status(items, status_column)
    else:
        ready, blocked, completed = _classify_by_position(groups, buckets)

    date_column = find_date_column(details.columns)
    bottlenecks = [
        Bottleneck(
            group_id=group.id,
            group_name=group.title,
            count=len(buckets[group.id]),
            stagnation=_stagnation(buckets[group.id], date_column, now),
        )
        for group in groups
    ]
    # sorted() is stable, so equal counts keep board order
    bottlenecks = sorted(bottlenecks, key=lambda b: b.count, reverse=True)

    total = len(items)
    return WorkflowMetrics(
        average_cycle_time=PLACEHOLDER_CYCLE_TIME_DAYS,
        throughput=PLACEHOLDER_THROUGHPUT_PER_WEEK,
        wip=total - completed,
        blocked_items=blocked,
        ready_items=ready,
        completed_items=completed,
        total_items=total,
        bottlenecks=bottlenecks,
    )


def issues_for(metrics: WorkflowMetrics) -> list[str]:
    """Apply the fixed health heuristics, in check order (not severity)."""
    issues: list[str] = []

    if metrics.wip > HIGH_WIP:
        issues.append(
            "High work in progress may be causing context switching and delays"
        )

    if metrics.blocked_items > metrics.wip * BLOCKED_RATIO:
        issues.append(
            "High number of blocked items detected - more than 20% of "
            "in-progress work is blocked"
        )

    worst = metrics.bottlenecks[0] if metrics.bottlenecks else None
    if worst is not None and worst.count > metrics.wip * BOTTLENECK_RATIO:
        issues.append(
            f'Bottleneck detected in "{worst.group_name}" with {worst.count} items'
        )

    if metrics.average_cycle_time > LONG_CYCLE_TIME_DAYS:
        issues.append("Long average cycle time of more than 2 weeks detected")

    return issues


def synthetic_history(
    weeks: int = 12, rng: random.Random | None = None
) -> list[HistoricalDataPoint]:
    """Random-walk throughput/cycle-time series, oldest week first.

    Mock data for the dashboard charts until real transition history exists.
    """
    rng = rng or random.Random()
    throughput = 8 + rng.random() * 4
    cycle_time = 5 + rng.random() * 3

    points: list[HistoricalDataPoint] = []
    for i in range(weeks):
        throughput = max(1.0, throughput + (rng.random() - 0.5) * 3)
        cycle_time = max(1.0, cycle_time + (rng.random() - 0.5) * 2)
        points.append(
            HistoricalDataPoint(
                period=f"Week {weeks - i}",
                throughput=round(throughput, 1),
                cycle_time=round(cycle_time, 1),
            )
        )
    points.reverse()
    return points


class WorkflowAnalysisService:
    """Workflow health for a board: metrics, issues, history and AI analysis."""

    def __init__(
        self,
        boards: BoardService,
        analyzer: Analyzer | None = None,
        clock: Callable[[], datetime] | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._boards = boards
        self._analyzer = analyzer
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._rng = rng

    async def calculate_metrics(self, board_id: str) -> WorkflowMetrics:
        """Fetch the board and its items and compute workflow metrics.

        Raises:
            BoardNotFoundError: the board does not exist.
            GraphQLClientError: any fetch failure, unchanged.
        """
        details = await self._boards.get_by_id(board_id, use_cache=False)
        if details is None:
            raise BoardNotFoundError(board_id)
        items = await self._boards.get_items(board_id, use_cache=False)

        metrics = compute_metrics(details, items, self._clock())
        logger.info(
            "Board %s: %d items, wip=%d blocked=%d completed=%d",
            board_id,
            metrics.total_items,
            metrics.wip,
            metrics.blocked_items,
            metrics.completed_items,
        )
        return metrics

    async def detect_issues(self, board_id: str) -> list[str]:
        metrics = await self.calculate_metrics(board_id)
        return issues_for(metrics)

    async def get_historical_data(
        self, board_id: str, weeks: int = 12
    ) -> list[HistoricalDataPoint]:
        """Synthetic weekly history for *board_id* (see ``synthetic_history``)."""
        return synthetic_history(weeks, self._rng)

    async def get_ai_analysis(self, board_id: str) -> AnalysisResult:
        """Ask the AI collaborator to analyse the board's workflow."""
        if self._analyzer is None:
            raise RuntimeError("No workflow analyzer configured")
        try:
            return await self._analyzer(board_id)
        except Exception:
            logger.exception("AI analysis failed for board %s", board_id)
            raise
