"""Group service — the workflow stages of a board.

Creating and deleting groups stays on ``BoardService``; this service reads
groups and edits their attributes.
"""

import logging
from typing import Any

from flowboard.models.board import Group
from flowboard.services.base import MondayService, field, first

logger = logging.getLogger(__name__)

_GROUP_FIELDS = """
      id
      title
      color
      position
      archived
"""

GET_GROUPS = """
query GetBoardGroups($boardId: ID!) {
  boards(ids: [$boardId]) {
    groups {%s    }
  }
}
""" % _GROUP_FIELDS

GET_GROUP_BY_ID = """
query GetGroupById($boardId: ID!, $groupId: String!) {
  boards(ids: [$boardId]) {
    groups(ids: [$groupId]) {%s    }
  }
}
""" % _GROUP_FIELDS

UPDATE_GROUP = """
mutation UpdateGroup($boardId: ID!, $groupId: String!, $attribute: GroupAttributes!, $value: String!) {
  update_group(board_id: $boardId, group_id: $groupId, group_attribute: $attribute, new_value: $value) {
    id
    title
    color
    position
  }
}
"""


def _groups(envelope: dict[str, Any]) -> list[Any]:
    board = first(envelope, "boards")
    return (board or {}).get("groups") or []


class GroupService(MondayService):
    """Groups on one monday.com board."""

    async def get_all(self, board_id: str, *, use_cache: bool = True) -> list[Group]:
        """Return the board's groups in ascending position order."""
        envelope = await self._query(
            GET_GROUPS, {"boardId": board_id}, use_cache=use_cache
        )
        groups = [Group.model_validate(g) for g in _groups(envelope)]
        return sorted(groups, key=lambda g: g.position)

    async def get_by_id(
        self, board_id: str, group_id: str, *, use_cache: bool = True
    ) -> Group | None:
        envelope = await self._query(
            GET_GROUP_BY_ID,
            {"boardId": board_id, "groupId": group_id},
            use_cache=use_cache,
        )
        raw = _groups(envelope)
        if not raw:
            logger.info("Group %s not found on board %s", group_id, board_id)
            return None
        return Group.model_validate(raw[0])

    async def update(
        self,
        board_id: str,
        group_id: str,
        title: str | None = None,
        color: str | None = None,
    ) -> Group:
        """Change a group's title and/or color.

        monday.com updates one attribute per mutation, so each given field
        is sent separately and the last answer is returned.

        Raises:
            ValueError: neither field was given.
        """
        changes = {"title": title, "color": color}
        changes = {k: v for k, v in changes.items() if v is not None}
        if not changes:
            raise ValueError("Nothing to update: pass a title or a color")

        updated: dict[str, Any] = {}
        for attribute, value in changes.items():
            envelope = await self._mutate(
                UPDATE_GROUP,
                {
                    "boardId": board_id,
                    "groupId": group_id,
                    "attribute": attribute,
                    "value": value,
                },
            )
            updated = field(envelope, "update_group")
        return Group.model_validate(updated)
