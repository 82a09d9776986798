"""Column service — column definitions of a board and their label options."""

import json
import logging
from typing import Any

from flowboard.models.board import Column, ColumnOption
from flowboard.services.base import MondayService, field, first

logger = logging.getLogger(__name__)

# Column types whose settings carry a fixed set of labels
LABELLED_TYPES = ("status", "color", "dropdown")

_COLUMN_FIELDS = """
      id
      title
      type
      description
      settings_str
      archived
      width
"""

GET_COLUMNS = """
query GetColumns($boardId: ID!) {
  boards(ids: [$boardId]) {
    columns {%s    }
  }
}
""" % _COLUMN_FIELDS

GET_COLUMN_BY_ID = """
query GetColumnById($boardId: ID!, $columnId: String!) {
  boards(ids: [$boardId]) {
    columns(ids: [$columnId]) {%s    }
  }
}
""" % _COLUMN_FIELDS

CREATE_COLUMN = """
mutation CreateColumn($boardId: ID!, $title: String!, $columnType: ColumnType!, $defaults: JSON) {
  create_column(board_id: $boardId, title: $title, column_type: $columnType, defaults: $defaults) {
    id
    title
    type
    settings_str
  }
}
"""

CHANGE_COLUMN_TITLE = """
mutation ChangeColumnTitle($boardId: ID!, $columnId: String!, $title: String!) {
  change_column_title(board_id: $boardId, column_id: $columnId, title: $title) {
    id
    title
    type
  }
}
"""

CHANGE_COLUMN_DESCRIPTION = """
mutation ChangeColumnDescription($boardId: ID!, $columnId: String!, $value: String!) {
  change_column_metadata(board_id: $boardId, column_id: $columnId, column_property: description, value: $value) {
    id
    title
    type
    description
  }
}
"""

DELETE_COLUMN = """
mutation DeleteColumn($boardId: ID!, $columnId: String!) {
  delete_column(board_id: $boardId, column_id: $columnId) {
    id
  }
}
"""


def _columns(envelope: dict[str, Any]) -> list[Any]:
    board = first(envelope, "boards")
    return (board or {}).get("columns") or []


def label_options(column: Column) -> list[ColumnOption]:
    """Parse the selectable labels out of a column's ``settings_str``.

    Status columns store ``{"labels": {"<index>": "<name>"}, "labels_colors":
    {"<index>": {"color": ...}}}``; dropdowns store a list of
    ``{"id", "name"}``.  Other column types, and settings that do not parse,
    have no options.
    """
    if column.type not in LABELLED_TYPES or not column.settings_str:
        return []
    try:
        settings = json.loads(column.settings_str)
    except ValueError:
        logger.warning("Unparseable settings for column %s", column.id)
        return []
    if not isinstance(settings, dict):
        return []

    labels = settings.get("labels") or {}
    colors = settings.get("labels_colors") or {}
    if isinstance(labels, dict):
        return [
            ColumnOption(
                id=index,
                label=name,
                color=(colors.get(index) or {}).get("color"),
            )
            for index, name in labels.items()
            if name
        ]
    return [
        ColumnOption(id=label["id"], label=label.get("name", ""))
        for label in labels
        if isinstance(label, dict) and "id" in label
    ]


class ColumnService(MondayService):
    """Columns on one monday.com board."""

    async def get_all(self, board_id: str, *, use_cache: bool = True) -> list[Column]:
        envelope = await self._query(
            GET_COLUMNS, {"boardId": board_id}, use_cache=use_cache
        )
        return [Column.model_validate(c) for c in _columns(envelope)]

    async def get_by_id(
        self, board_id: str, column_id: str, *, use_cache: bool = True
    ) -> Column | None:
        envelope = await self._query(
            GET_COLUMN_BY_ID,
            {"boardId": board_id, "columnId": column_id},
            use_cache=use_cache,
        )
        raw = _columns(envelope)
        if not raw:
            logger.info("Column %s not found on board %s", column_id, board_id)
            return None
        return Column.model_validate(raw[0])

    async def create(
        self,
        board_id: str,
        title: str,
        column_type: str,
        defaults: dict[str, Any] | None = None,
    ) -> Column:
        """Add a column.  *defaults* (e.g. status labels) are sent JSON-encoded."""
        envelope = await self._mutate(
            CREATE_COLUMN,
            {
                "boardId": board_id,
                "title": title,
                "columnType": column_type,
                "defaults": json.dumps(defaults) if defaults else None,
            },
        )
        column = Column.model_validate(field(envelope, "create_column"))
        logger.info("Created %s column %s on board %s", column.type, column.id, board_id)
        return column

    async def update(
        self,
        board_id: str,
        column_id: str,
        title: str | None = None,
        description: str | None = None,
    ) -> Column | None:
        """Change a column's title and/or description.

        Returns the column as re-read after the change, or None if it no
        longer exists.

        Raises:
            ValueError: neither field was given.
        """
        if title is None and description is None:
            raise ValueError("Nothing to update: pass a title or a description")
        variables = {"boardId": board_id, "columnId": column_id}
        if title is not None:
            await self._mutate(CHANGE_COLUMN_TITLE, {**variables, "title": title})
        if description is not None:
            await self._mutate(
                CHANGE_COLUMN_DESCRIPTION, {**variables, "value": description}
            )
        return await self.get_by_id(board_id, column_id)

    async def delete(self, board_id: str, column_id: str) -> str:
        envelope = await self._mutate(
            DELETE_COLUMN, {"boardId": board_id, "columnId": column_id}
        )
        logger.info("Deleted column %s from board %s", column_id, board_id)
        return str(field(envelope, "delete_column")["id"])

    async def get_options(
        self, board_id: str, column_id: str, *, use_cache: bool = True
    ) -> list[ColumnOption] | None:
        """Selectable labels of a status or dropdown column.

        Returns None when the column does not exist and an empty list for
        column types without labels.
        """
        column = await self.get_by_id(board_id, column_id, use_cache=use_cache)
        if column is None:
            return None
        return label_options(column)
