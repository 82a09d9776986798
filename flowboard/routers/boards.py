"""Board endpoints — proxies monday.com board data."""

from fastapi import APIRouter, Depends, HTTPException, Query

from flowboard.models.board import BoardCreate, BoardUpdate, GroupCreate, ItemCreate
from flowboard.services.boards import BoardService
from flowboard.services.monday import get_board_service

router = APIRouter(prefix="/boards", tags=["boards"])


@router.get("")
async def list_boards(
    workspace_id: str | None = Query(None),
    boards: BoardService = Depends(get_board_service),
):
    """List all boards, optionally filtered to one workspace."""
    return {"boards": await boards.get_all(workspace_id)}


@router.get("/{board_id}")
async def get_board(board_id: str, boards: BoardService = Depends(get_board_service)):
    """Get a board with its groups and columns."""
    details = await boards.get_by_id(board_id)
    if details is None:
        raise HTTPException(status_code=404, detail=f"Board {board_id} not found")
    return details


@router.get("/{board_id}/items")
async def list_board_items(
    board_id: str,
    group_id: str | None = Query(None),
    boards: BoardService = Depends(get_board_service),
):
    items = await boards.get_items(board_id, group_id)
    return {"items": items, "total": len(items)}


@router.post("", status_code=201)
async def create_board(
    body: BoardCreate, boards: BoardService = Depends(get_board_service)
):
    return await boards.create(
        body.name,
        board_kind=body.board_kind,
        workspace_id=body.workspace_id,
        template_id=body.template_id,
    )


@router.patch("/{board_id}")
async def update_board(
    board_id: str,
    body: BoardUpdate,
    boards: BoardService = Depends(get_board_service),
):
    return await boards.update(board_id, name=body.name, description=body.description)


@router.delete("/{board_id}")
async def delete_board(
    board_id: str, boards: BoardService = Depends(get_board_service)
):
    return {"id": await boards.delete(board_id)}


@router.post("/{board_id}/groups", status_code=201)
async def create_group(
    board_id: str,
    body: GroupCreate,
    boards: BoardService = Depends(get_board_service),
):
    return await boards.create_group(board_id, body.group_name)


@router.post("/{board_id}/items", status_code=201)
async def create_item(
    board_id: str,
    body: ItemCreate,
    boards: BoardService = Depends(get_board_service),
):
    return await boards.create_item(
        board_id, body.group_id, body.item_name, body.column_values
    )


@router.delete("/{board_id}/groups/{group_id}")
async def delete_group(
    board_id: str, group_id: str, boards: BoardService = Depends(get_board_service)
):
    return {"id": await boards.delete_group(board_id, group_id)}
