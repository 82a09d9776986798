"""Column endpoints — column definitions of a board and their labels."""

from fastapi import APIRouter, Depends, HTTPException

from flowboard.models.board import ColumnCreate, ColumnUpdate
from flowboard.services.columns import ColumnService
from flowboard.services.monday import get_column_service

router = APIRouter(prefix="/boards/{board_id}/columns", tags=["columns"])


def _not_found(column_id: str) -> HTTPException:
    return HTTPException(status_code=404, detail=f"Column {column_id} not found")


@router.get("")
async def list_columns(
    board_id: str, columns: ColumnService = Depends(get_column_service)
):
    return {"columns": await columns.get_all(board_id)}


@router.get("/{column_id}")
async def get_column(
    board_id: str, column_id: str, columns: ColumnService = Depends(get_column_service)
):
    column = await columns.get_by_id(board_id, column_id)
    if column is None:
        raise _not_found(column_id)
    return column


@router.get("/{column_id}/options")
async def list_column_options(
    board_id: str, column_id: str, columns: ColumnService = Depends(get_column_service)
):
    """Selectable labels of a status or dropdown column (empty for others)."""
    options = await columns.get_options(board_id, column_id)
    if options is None:
        raise _not_found(column_id)
    return {"options": options}


@router.post("", status_code=201)
async def create_column(
    board_id: str,
    body: ColumnCreate,
    columns: ColumnService = Depends(get_column_service),
):
    return await columns.create(
        board_id, body.title, body.column_type, defaults=body.defaults
    )


@router.patch("/{column_id}")
async def update_column(
    board_id: str,
    column_id: str,
    body: ColumnUpdate,
    columns: ColumnService = Depends(get_column_service),
):
    if body.title is None and body.description is None:
        raise HTTPException(status_code=422, detail="Provide a title or a description")
    column = await columns.update(
        board_id, column_id, title=body.title, description=body.description
    )
    if column is None:
        raise _not_found(column_id)
    return column


@router.delete("/{column_id}")
async def delete_column(
    board_id: str, column_id: str, columns: ColumnService = Depends(get_column_service)
):
    return {"id": await columns.delete(board_id, column_id)}
