"""Group endpoints — read and edit the workflow stages of a board.

Creating and deleting groups lives on the boards router.
"""

from fastapi import APIRouter, Depends, HTTPException

from flowboard.models.board import GroupUpdate
from flowboard.services.groups import GroupService
from flowboard.services.monday import get_group_service

router = APIRouter(prefix="/boards/{board_id}/groups", tags=["groups"])


@router.get("")
async def list_groups(board_id: str, groups: GroupService = Depends(get_group_service)):
    """List a board's groups in workflow order."""
    return {"groups": await groups.get_all(board_id)}


@router.get("/{group_id}")
async def get_group(
    board_id: str, group_id: str, groups: GroupService = Depends(get_group_service)
):
    group = await groups.get_by_id(board_id, group_id)
    if group is None:
        raise HTTPException(status_code=404, detail=f"Group {group_id} not found")
    return group


@router.patch("/{group_id}")
async def update_group(
    board_id: str,
    group_id: str,
    body: GroupUpdate,
    groups: GroupService = Depends(get_group_service),
):
    if body.title is None and body.color is None:
        raise HTTPException(status_code=422, detail="Provide a title or a color")
    return await groups.update(board_id, group_id, title=body.title, color=body.color)
