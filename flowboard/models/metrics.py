"""Derived workflow metrics and AI analysis result models."""

from typing import Literal

from pydantic import AliasChoices, BaseModel, Field


class Bottleneck(BaseModel):
    """Item count and average stagnation for one workflow stage."""

    group_id: str
    group_name: str
    count: int
    stagnation: float  # average days since the item's date column value


class WorkflowMetrics(BaseModel):
    """Workflow health snapshot, recomputed on every request."""

    average_cycle_time: float  # days
    throughput: float  # items per week
    wip: int
    blocked_items: int
    ready_items: int
    completed_items: int
    total_items: int
    bottlenecks: list[Bottleneck] = []


class HistoricalDataPoint(BaseModel):
    period: str
    throughput: float
    cycle_time: float


class AnalysisBottleneck(BaseModel):
    description: str
    severity: Literal["low", "medium", "high"] = "medium"
    suggestions: list[str] = []


class AnalysisResult(BaseModel):
    """Structured answer from the AI workflow analyst."""

    bottlenecks: list[AnalysisBottleneck] = []
    efficiency_score: float = Field(
        0, validation_alias=AliasChoices("efficiency_score", "efficiencyScore")
    )
    general_suggestions: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("general_suggestions", "generalSuggestions"),
    )
