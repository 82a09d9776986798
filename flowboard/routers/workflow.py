"""Workflow analysis endpoints — metrics, issues, history, AI insights."""

from fastapi import APIRouter, Depends, Query

from flowboard.services.monday import get_workflow_service
from flowboard.services.workflow_metrics import WorkflowAnalysisService

router = APIRouter(prefix="/workflow", tags=["workflow"])


@router.get("/{board_id}/metrics")
async def workflow_metrics(
    board_id: str,
    workflow: WorkflowAnalysisService = Depends(get_workflow_service),
):
    """Compute WIP, blocked/ready/completed counts and bottlenecks for a board."""
    return await workflow.calculate_metrics(board_id)


@router.get("/{board_id}/issues")
async def workflow_issues(
    board_id: str,
    workflow: WorkflowAnalysisService = Depends(get_workflow_service),
):
    return {"issues": await workflow.detect_issues(board_id)}


@router.get("/{board_id}/history")
async def workflow_history(
    board_id: str,
    weeks: int = Query(12, ge=1, le=52),
    workflow: WorkflowAnalysisService = Depends(get_workflow_service),
):
    """Weekly throughput and cycle time (synthetic series)."""
    history = await workflow.get_historical_data(board_id, weeks)
    return {"history": history, "synthetic": True}


@router.get("/{board_id}/analysis")
async def workflow_analysis(
    board_id: str,
    workflow: WorkflowAnalysisService = Depends(get_workflow_service),
):
    return await workflow.get_ai_analysis(board_id)
