"""Workspace service — workspaces and their members on monday.com."""

import logging
from typing import Any

from flowboard.models.workspace import Workspace, WorkspaceUser
from flowboard.services.base import MondayService, field, first

logger = logging.getLogger(__name__)

GET_WORKSPACES = """
query GetWorkspaces($limit: Int, $page: Int) {
  workspaces(limit: $limit, page: $page) {
    id
    name
    description
    kind
    state
    created_at
  }
}
"""

GET_WORKSPACE_BY_ID = """
query GetWorkspaceById($id: ID!) {
  workspaces(ids: [$id]) {
    id
    name
    description
    kind
    state
    created_at
  }
}
"""

GET_WORKSPACE_USERS = """
query GetWorkspaceUsers($workspaceId: ID!, $limit: Int, $page: Int) {
  workspace_users(workspace_id: $workspaceId, limit: $limit, page: $page) {
    id
    user {
      id
      name
      email
    }
    role
  }
}
"""

CREATE_WORKSPACE = """
mutation CreateWorkspace($name: String!, $kind: WorkspaceKind!, $description: String) {
  create_workspace(name: $name, kind: $kind, description: $description) {
    id
    name
    description
    kind
    state
  }
}
"""

UPDATE_WORKSPACE = """
mutation UpdateWorkspace($id: ID!, $name: String, $description: String) {
  update_workspace(id: $id, attributes: {name: $name, description: $description}) {
    id
    name
    description
  }
}
"""

DELETE_WORKSPACE = """
mutation DeleteWorkspace($id: ID!) {
  delete_workspace(workspace_id: $id) {
    id
  }
}
"""


def _workspaces_page(envelope: dict[str, Any]) -> list[Any]:
    return (envelope.get("data") or {}).get("workspaces") or []


def _workspace_users_page(envelope: dict[str, Any]) -> list[Any]:
    return (envelope.get("data") or {}).get("workspace_users") or []


class WorkspaceService(MondayService):
    """Workspaces on monday.com."""

    async def get_all(self, *, use_cache: bool = True) -> list[Workspace]:
        raw = await self._query_all(
            GET_WORKSPACES, {}, _workspaces_page, use_cache=use_cache
        )
        return [Workspace.model_validate(w) for w in raw]

    async def get_by_id(
        self, workspace_id: str, *, use_cache: bool = True
    ) -> Workspace | None:
        """Return the workspace, or None when no workspace has that id."""
        envelope = await self._query(
            GET_WORKSPACE_BY_ID, {"id": workspace_id}, use_cache=use_cache
        )
        raw = first(envelope, "workspaces")
        return Workspace.model_validate(raw) if raw is not None else None

    async def get_users(
        self, workspace_id: str, *, use_cache: bool = True
    ) -> list[WorkspaceUser]:
        raw = await self._query_all(
            GET_WORKSPACE_USERS,
            {"workspaceId": workspace_id},
            _workspace_users_page,
            use_cache=use_cache,
        )
        return [WorkspaceUser.model_validate(u) for u in raw]

    async def create(
        self, name: str, kind: str = "open", description: str | None = None
    ) -> Workspace:
        envelope = await self._mutate(
            CREATE_WORKSPACE, {"name": name, "kind": kind, "description": description}
        )
        workspace = Workspace.model_validate(field(envelope, "create_workspace"))
        logger.info("Created workspace %s (%s)", workspace.id, workspace.name)
        return workspace

    async def update(
        self,
        workspace_id: str,
        name: str | None = None,
        description: str | None = None,
    ) -> Workspace:
        envelope = await self._mutate(
            UPDATE_WORKSPACE,
            {"id": workspace_id, "name": name, "description": description},
        )
        return Workspace.model_validate(field(envelope, "update_workspace"))

    async def delete(self, workspace_id: str) -> str:
        envelope = await self._mutate(DELETE_WORKSPACE, {"id": workspace_id})
        logger.info("Deleted workspace %s", workspace_id)
        return str(field(envelope, "delete_workspace")["id"])
