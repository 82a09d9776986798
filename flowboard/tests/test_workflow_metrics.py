"""Tests for workflow metrics — classification, bottlenecks, issue detection."""

import random
from datetime import datetime, timezone

import pytest

from flowboard.models.board import Board, BoardDetails, Column, Group, Item
from flowboard.services.errors import ApiError, BoardNotFoundError
from flowboard.services.workflow_metrics import (
    UNKNOWN_GROUP,
    WorkflowAnalysisService,
    compute_metrics,
    days_between,
    issues_for,
    partition_items,
    synthetic_history,
)

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)

STATUS = Column(id="status", title="Status", type="status")
DATE = Column(id="date4", title="Started", type="date")


def _details(groups, columns=()):
    return BoardDetails(
        board=Board(id="100", name="Board"),
        groups=list(groups),
        columns=list(columns),
    )


def _item(item_id, group_id=None, status=None, date=None, group_title=""):
    values = []
    if status is not None:
        values.append({"id": "status", "text": status})
    if date is not None:
        values.append({"id": "date4", "text": date})
    data = {"id": item_id, "name": f"Item {item_id}", "column_values": values}
    if group_id is not None:
        data["group"] = {"id": group_id, "title": group_title}
    return Item.model_validate(data)


GROUPS = [
    Group(id="backlog", title="Backlog", position=1),
    Group(id="doing", title="In Progress", position=2),
    Group(id="blocked", title="Blocked", position=3),
    Group(id="done", title="Done", position=4),
]


class TestStatusClassification:
    """Boards with a status column classify items by rendered status text."""

    def test_done_blocked_ready(self):
        items = [
            _item("1", "backlog", status="Done"),
            _item("2", "backlog", status="Blocked"),
            _item("3", "backlog", status="Ready"),
        ]
        metrics = compute_metrics(_details(GROUPS, [STATUS]), items, NOW)

        assert metrics.completed_items == 1
        assert metrics.blocked_items == 1
        assert metrics.ready_items == 1
        assert metrics.total_items == 3
        assert metrics.wip == 2

    def test_matching_is_case_insensitive_substring(self):
        items = [
            _item("1", "doing", status="STUCK on review"),
            _item("2", "doing", status="Completed"),
            _item("3", "doing", status="To Do"),
            _item("4", "doing", status="Working on it"),
            _item("5", "doing", status=""),
            _item("6", "doing"),  # no status value at all
        ]
        metrics = compute_metrics(_details(GROUPS, [STATUS]), items, NOW)

        assert metrics.blocked_items == 1
        assert metrics.completed_items == 1
        assert metrics.ready_items == 1
        assert metrics.wip == 5

    def test_blocked_takes_precedence_over_done(self):
        items = [_item("1", "doing", status="Done but blocked")]
        metrics = compute_metrics(_details(GROUPS, [STATUS]), items, NOW)
        assert metrics.blocked_items == 1
        assert metrics.completed_items == 0

    def test_title_containing_status_counts_as_status_column(self):
        column = Column(id="status", title="Deal Status", type="color")
        items = [_item("1", "doing", status="Done")]
        metrics = compute_metrics(_details(GROUPS, [column]), items, NOW)
        assert metrics.completed_items == 1


class TestPositionalFallback:
    """Without a status column, group positions decide ready/completed."""

    def test_first_group_ready_last_group_completed(self):
        shuffled = [GROUPS[2], GROUPS[3], GROUPS[0], GROUPS[1]]
        items = [
            _item("1", "backlog"),
            _item("2", "backlog"),
            _item("3", "doing"),
            _item("4", "done"),
        ]
        metrics = compute_metrics(_details(shuffled), items, NOW)

        assert metrics.ready_items == 2
        assert metrics.completed_items == 1
        assert metrics.wip == 3

    def test_blocked_group_titles_can_double_count(self):
        groups = [
            Group(id="stuck", title="Stuck", position=1),
            Group(id="done", title="Done", position=2),
        ]
        items = [_item("1", "stuck"), _item("2", "stuck"), _item("3", "done")]
        metrics = compute_metrics(_details(groups), items, NOW)

        # Items in the first group are both ready and blocked
        assert metrics.ready_items == 2
        assert metrics.blocked_items == 2
        assert metrics.completed_items == 1

    def test_no_groups_yields_zero_buckets(self):
        metrics = compute_metrics(_details([]), [_item("1", "ghost")], NOW)
        assert metrics.ready_items == 0
        assert metrics.completed_items == 0
        assert metrics.wip == 1
        assert metrics.bottlenecks == []


class TestBottlenecks:
    def test_sorted_by_descending_count_with_stable_ties(self):
        items = [
            _item("1", "doing"),
            _item("2", "doing"),
            _item("3", "doing"),
            _item("4", "blocked"),
            _item("5", "done"),
        ]
        metrics = compute_metrics(_details(GROUPS), items, NOW)

        ids = [b.group_id for b in metrics.bottlenecks]
        assert ids == ["doing", "blocked", "done", "backlog"]
        counts = [b.count for b in metrics.bottlenecks]
        assert counts == sorted(counts, reverse=True)

    def test_stagnation_averages_days_rounded_up(self):
        items = [
            _item("1", "doing", date="2026-02-27"),  # 2.5 days -> 3
            _item("2", "doing", date="2026-02-28"),  # 1.5 days -> 2
            _item("3", "doing", date=""),  # no date contributes 0
        ]
        metrics = compute_metrics(_details(GROUPS, [DATE]), items, NOW)
        doing = next(b for b in metrics.bottlenecks if b.group_id == "doing")
        assert doing.stagnation == pytest.approx(5 / 3)

    def test_stagnation_zero_without_date_column(self):
        items = [_item("1", "doing", date="2020-01-01")]
        metrics = compute_metrics(_details(GROUPS), items, NOW)
        assert all(b.stagnation == 0 for b in metrics.bottlenecks)

    def test_unparseable_date_contributes_zero(self):
        items = [_item("1", "doing", date="next tuesday")]
        metrics = compute_metrics(_details(GROUPS, [DATE]), items, NOW)
        doing = next(b for b in metrics.bottlenecks if b.group_id == "doing")
        assert doing.stagnation == 0

    def test_unknown_group_items_do_not_raise(self):
        items = [_item("1", "archived"), _item("2"), _item("3", "doing")]
        buckets = partition_items(GROUPS, items)
        assert [i.id for i in buckets[UNKNOWN_GROUP]] == ["1", "2"]

        metrics = compute_metrics(_details(GROUPS), items, NOW)
        assert metrics.total_items == 3
        assert sum(b.count for b in metrics.bottlenecks) == 1


def test_days_between_rounds_up_and_is_symmetric():
    start = datetime(2026, 1, 1, tzinfo=timezone.utc)
    assert days_between(start, datetime(2026, 1, 1, 1, tzinfo=timezone.utc)) == 1
    assert days_between(start, datetime(2026, 1, 3, tzinfo=timezone.utc)) == 2
    assert days_between(datetime(2026, 1, 3, tzinfo=timezone.utc), start) == 2
    assert days_between(start, start) == 0


class TestIssues:
    def _metrics(self, **overrides):
        items = [_item("1", "doing", status="Done")]
        base = compute_metrics(_details(GROUPS, [STATUS]), items, NOW)
        return base.model_copy(update=overrides)

    def test_healthy_board_has_no_issues(self):
        metrics = self._metrics(wip=10, blocked_items=1, bottlenecks=[])
        assert issues_for(metrics) == []

    def test_all_checks_fire_in_order(self):
        from flowboard.models.metrics import Bottleneck

        metrics = self._metrics(
            wip=25,
            blocked_items=6,
            average_cycle_time=15,
            bottlenecks=[Bottleneck(group_id="g", group_name="Review", count=10, stagnation=0)],
        )
        issues = issues_for(metrics)
        assert len(issues) == 4
        assert issues[0].startswith("High work in progress")
        assert issues[1].startswith("High number of blocked items")
        assert issues[2] == 'Bottleneck detected in "Review" with 10 items'
        assert issues[3].startswith("Long average cycle time")

    def test_thresholds_are_strict(self):
        from flowboard.models.metrics import Bottleneck

        metrics = self._metrics(
            wip=20,
            blocked_items=4,
            bottlenecks=[Bottleneck(group_id="g", group_name="Review", count=6, stagnation=0)],
        )
        assert issues_for(metrics) == []


class TestSyntheticHistory:
    def test_chronological_weeks(self):
        points = synthetic_history(4, random.Random(1))
        assert [p.period for p in points] == ["Week 1", "Week 2", "Week 3", "Week 4"]

    def test_values_floored_and_rounded(self):
        points = synthetic_history(52, random.Random(7))
        for p in points:
            assert p.throughput >= 1
            assert p.cycle_time >= 1
            assert round(p.throughput, 1) == p.throughput


class FakeBoards:
    """Stands in for BoardService; records whether the cache was bypassed."""

    def __init__(self, details, items, error=None):
        self.details = details
        self.items = items
        self.error = error
        self.use_cache_flags: list[bool] = []

    async def get_by_id(self, board_id, *, use_cache=True):
        self.use_cache_flags.append(use_cache)
        if self.error:
            raise self.error
        return self.details

    async def get_items(self, board_id, group_id=None, *, use_cache=True):
        self.use_cache_flags.append(use_cache)
        return self.items


class TestWorkflowAnalysisService:
    @pytest.mark.asyncio
    async def test_calculate_metrics_fetches_fresh(self):
        items = [_item("1", "doing", status="Done"), _item("2", "doing", status="Stuck")]
        boards = FakeBoards(_details(GROUPS, [STATUS]), items)
        service = WorkflowAnalysisService(boards, clock=lambda: NOW)

        metrics = await service.calculate_metrics("100")
        assert metrics.wip == metrics.total_items - metrics.completed_items
        assert boards.use_cache_flags == [False, False]

    @pytest.mark.asyncio
    async def test_missing_board_raises(self):
        service = WorkflowAnalysisService(FakeBoards(None, []))
        with pytest.raises(BoardNotFoundError):
            await service.calculate_metrics("404")

    @pytest.mark.asyncio
    async def test_fetch_failure_propagates_unchanged(self):
        error = ApiError("boom", operation="GetBoardById")
        service = WorkflowAnalysisService(FakeBoards(None, [], error=error))
        with pytest.raises(ApiError) as exc_info:
            await service.calculate_metrics("100")
        assert exc_info.value is error

    @pytest.mark.asyncio
    async def test_detect_issues_flags_high_blocked_ratio(self):
        items = [
            _item("1", "backlog", status="Done"),
            _item("2", "backlog", status="Blocked"),
            _item("3", "backlog", status="Ready"),
        ]
        service = WorkflowAnalysisService(FakeBoards(_details(GROUPS, [STATUS]), items))
        issues = await service.detect_issues("100")
        assert any("blocked items" in i for i in issues)

    @pytest.mark.asyncio
    async def test_historical_data_uses_injected_rng(self):
        boards = FakeBoards(_details(GROUPS), [])
        a = WorkflowAnalysisService(boards, rng=random.Random(3))
        b = WorkflowAnalysisService(boards, rng=random.Random(3))
        assert await a.get_historical_data("100", 6) == await b.get_historical_data("100", 6)

    @pytest.mark.asyncio
    async def test_ai_analysis_delegates_to_analyzer(self):
        from flowboard.models.metrics import AnalysisResult

        seen = []

        async def analyzer(board_id):
            seen.append(board_id)
            return AnalysisResult(efficiency_score=80)

        service = WorkflowAnalysisService(FakeBoards(None, []), analyzer=analyzer)
        result = await service.get_ai_analysis("100")
        assert result.efficiency_score == 80
        assert seen == ["100"]
