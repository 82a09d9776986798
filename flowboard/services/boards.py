"""Board service — boards, their groups and their items on monday.com.

Thin mapping layer: builds fixed GraphQL templates, delegates to the query
executor and converts the envelopes into ``flowboard.models.board`` models.
"""

import json
import logging
from typing import Any

from flowboard.models.board import Board, BoardDetails, Column, Group, GroupRef, Item
from flowboard.services.base import MondayService, field, first

logger = logging.getLogger(__name__)

_BOARD_FIELDS = """
      id
      name
      description
      board_kind
      state
      workspace_id
      created_at
      updated_at
"""

GET_BOARDS = """
query GetBoards($limit: Int, $page: Int, $workspaceId: [ID]) {
  boards(limit: $limit, page: $page, workspace_ids: $workspaceId) {%s  }
}
""" % _BOARD_FIELDS

GET_BOARD_BY_ID = """
query GetBoardById($id: ID!) {
  boards(ids: [$id]) {%s
    groups {
      id
      title
      color
      position
    }
    columns {
      id
      title
      type
      settings_str
    }
  }
}
""" % _BOARD_FIELDS

GET_BOARD_ITEMS = """
query GetBoardItems($boardId: ID!, $limit: Int, $page: Int, $groupId: String) {
  boards(ids: [$boardId]) {
    items(limit: $limit, page: $page, group_id: $groupId) {
      id
      name
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
    }
  }
}
"""

CREATE_BOARD = """
mutation CreateBoard($name: String!, $boardKind: BoardKind!, $workspaceId: ID, $templateId: ID) {
  create_board(board_name: $name, board_kind: $boardKind, workspace_id: $workspaceId, template_id: $templateId) {
    id
    name
    board_kind
    workspace_id
  }
}
"""

UPDATE_BOARD = """
mutation UpdateBoard($boardId: ID!, $name: String, $description: String) {
  update_board(board_id: $boardId, board_name: $name, board_description: $description) {
    id
    name
    description
  }
}
"""

DELETE_BOARD = """
mutation DeleteBoard($boardId: ID!) {
  delete_board(board_id: $boardId) {
    id
  }
}
"""

CREATE_GROUP = """
mutation CreateGroup($boardId: ID!, $groupName: String!) {
  create_group(board_id: $boardId, group_name: $groupName) {
    id
    title
  }
}
"""

DELETE_GROUP = """
mutation DeleteGroup($boardId: ID!, $groupId: String!) {
  delete_group(board_id: $boardId, group_id: $groupId) {
    id
  }
}
"""

CREATE_ITEM = """
mutation CreateItem($boardId: ID!, $groupId: String!, $itemName: String!, $columnValues: JSON) {
  create_item(board_id: $boardId, group_id: $groupId, item_name: $itemName, column_values: $columnValues) {
    id
    name
  }
}
"""


def _boards_page(envelope: dict[str, Any]) -> list[Any]:
    return (envelope.get("data") or {}).get("boards") or []


def _board_items_page(envelope: dict[str, Any]) -> list[Any]:
    board = first(envelope, "boards")
    return (board or {}).get("items") or []


class BoardService(MondayService):
    """Boards on monday.com: CRUD plus group and item accessors."""

    async def get_all(
        self, workspace_id: str | None = None, *, use_cache: bool = True
    ) -> list[Board]:
        """Return every board, optionally restricted to one workspace."""
        raw = await self._query_all(
            GET_BOARDS,
            {"workspaceId": [workspace_id] if workspace_id else None},
            _boards_page,
            use_cache=use_cache,
        )
        return [Board.model_validate(b) for b in raw]

    async def get_by_id(
        self, board_id: str, *, use_cache: bool = True
    ) -> BoardDetails | None:
        """Return the board with its groups and columns, or None if missing."""
        envelope = await self._query(
            GET_BOARD_BY_ID, {"id": board_id}, use_cache=use_cache
        )
        raw = first(envelope, "boards")
        if raw is None:
            logger.info("Board %s not found", board_id)
            return None

        board_data = {k: v for k, v in raw.items() if k not in ("groups", "columns")}
        return BoardDetails(
            board=Board.model_validate(board_data),
            groups=[Group.model_validate(g) for g in raw.get("groups") or []],
            columns=[Column.model_validate(c) for c in raw.get("columns") or []],
        )

    async def get_items(
        self,
        board_id: str,
        group_id: str | None = None,
        *,
        use_cache: bool = True,
    ) -> list[Item]:
        """Return every item on a board (optionally in one group), in API order."""
        raw = await self._query_all(
            GET_BOARD_ITEMS,
            {"boardId": board_id, "groupId": group_id},
            _board_items_page,
            use_cache=use_cache,
        )
        return [Item.model_validate(i) for i in raw]

    async def create(
        self,
        name: str,
        board_kind: str = "public",
        workspace_id: str | None = None,
        template_id: str | None = None,
    ) -> Board:
        envelope = await self._mutate(
            CREATE_BOARD,
            {
                "name": name,
                "boardKind": board_kind,
                "workspaceId": workspace_id,
                "templateId": template_id,
            },
        )
        board = Board.model_validate(field(envelope, "create_board"))
        logger.info("Created board %s (%s)", board.id, board.name)
        return board

    async def update(
        self,
        board_id: str,
        name: str | None = None,
        description: str | None = None,
    ) -> Board:
        envelope = await self._mutate(
            UPDATE_BOARD,
            {"boardId": board_id, "name": name, "description": description},
        )
        return Board.model_validate(field(envelope, "update_board"))

    async def delete(self, board_id: str) -> str:
        """Delete a board and return its id."""
        envelope = await self._mutate(DELETE_BOARD, {"boardId": board_id})
        deleted = field(envelope, "delete_board")
        logger.info("Deleted board %s", board_id)
        return str(deleted["id"])

    async def create_group(self, board_id: str, group_name: str) -> GroupRef:
        envelope = await self._mutate(
            CREATE_GROUP, {"boardId": board_id, "groupName": group_name}
        )
        return GroupRef.model_validate(field(envelope, "create_group"))

    async def delete_group(self, board_id: str, group_id: str) -> str:
        envelope = await self._mutate(
            DELETE_GROUP, {"boardId": board_id, "groupId": group_id}
        )
        return str(field(envelope, "delete_group")["id"])

    async def create_item(
        self,
        board_id: str,
        group_id: str,
        item_name: str,
        column_values: dict[str, Any] | None = None,
    ) -> Item:
        """Create an item in a group.  Column values are sent JSON-encoded."""
        envelope = await self._mutate(
            CREATE_ITEM,
            {
                "boardId": board_id,
                "groupId": group_id,
                "itemName": item_name,
                "columnValues": json.dumps(column_values or {}),
            },
        )
        return Item.model_validate(field(envelope, "create_item"))
