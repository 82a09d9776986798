"""Item endpoints — single-item lookups and edits."""

from fastapi import APIRouter, Depends, HTTPException

from flowboard.models.board import ItemColumnsUpdate, ItemMove
from flowboard.services.items import ItemService
from flowboard.services.monday import get_item_service

router = APIRouter(prefix="/items", tags=["items"])


@router.get("/{item_id}")
async def get_item(item_id: str, items: ItemService = Depends(get_item_service)):
    item = await items.get_by_id(item_id)
    if item is None:
        raise HTTPException(status_code=404, detail=f"Item {item_id} not found")
    return item


@router.patch("/{item_id}")
async def update_item_columns(
    item_id: str,
    body: ItemColumnsUpdate,
    items: ItemService = Depends(get_item_service),
):
    """Change several column values of an item at once."""
    return await items.update_column_values(item_id, body.board_id, body.column_values)


@router.post("/{item_id}/move")
async def move_item(
    item_id: str,
    body: ItemMove,
    items: ItemService = Depends(get_item_service),
):
    return await items.move_to_group(item_id, body.group_id)


@router.delete("/{item_id}")
async def delete_item(item_id: str, items: ItemService = Depends(get_item_service)):
    return {"id": await items.delete(item_id)}
