"""Item service — single items on monday.com.

Listing and creating items belong to ``BoardService`` (``get_items`` and
``create_item``); this service adds the per-item operations: lookup,
column updates, moves and deletion.
"""

import json
import logging
from typing import Any

from flowboard.models.board import Item
from flowboard.services.base import MondayService, field, first

logger = logging.getLogger(__name__)

_ITEM_FIELDS = """
    id
    name
    state
    created_at
    updated_at
    board {
      id
      name
    }
    group {
      id
      title
    }
    column_values {
      id
      text
      value
      type
    }
"""

GET_ITEM_BY_ID = """
query GetItemById($itemId: ID!) {
  items(ids: [$itemId]) {%s  }
}
""" % _ITEM_FIELDS

UPDATE_COLUMN_VALUES = """
mutation UpdateItem($itemId: ID!, $boardId: ID!, $columnValues: JSON!) {
  change_multiple_column_values(item_id: $itemId, board_id: $boardId, column_values: $columnValues) {
    id
    name
    state
    updated_at
  }
}
"""

MOVE_ITEM = """
mutation MoveItemToGroup($itemId: ID!, $groupId: String!) {
  move_item_to_group(item_id: $itemId, group_id: $groupId) {
    id
    group {
      id
      title
    }
  }
}
"""

DELETE_ITEM = """
mutation DeleteItem($itemId: ID!) {
  delete_item(item_id: $itemId) {
    id
  }
}
"""


class ItemService(MondayService):
    """Items on monday.com."""

    async def get_by_id(self, item_id: str, *, use_cache: bool = True) -> Item | None:
        envelope = await self._query(
            GET_ITEM_BY_ID, {"itemId": item_id}, use_cache=use_cache
        )
        raw = first(envelope, "items")
        return Item.model_validate(raw) if raw is not None else None

    async def update_column_values(
        self, item_id: str, board_id: str, column_values: dict[str, Any]
    ) -> Item:
        envelope = await self._mutate(
            UPDATE_COLUMN_VALUES,
            {
                "itemId": item_id,
                "boardId": board_id,
                "columnValues": json.dumps(column_values),
            },
        )
        return Item.model_validate(field(envelope, "change_multiple_column_values"))

    async def move_to_group(self, item_id: str, group_id: str) -> Item:
        envelope = await self._mutate(
            MOVE_ITEM, {"itemId": item_id, "groupId": group_id}
        )
        return Item.model_validate(field(envelope, "move_item_to_group"))

    async def delete(self, item_id: str) -> str:
        envelope = await self._mutate(DELETE_ITEM, {"itemId": item_id})
        logger.info("Deleted item %s", item_id)
        return str(field(envelope, "delete_item")["id"])
