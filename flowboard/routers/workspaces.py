"""Workspace endpoints."""

from fastapi import APIRouter, Depends, HTTPException

from flowboard.models.workspace import WorkspaceCreate, WorkspaceUpdate
from flowboard.services.monday import get_workspace_service
from flowboard.services.workspaces import WorkspaceService

router = APIRouter(prefix="/workspaces", tags=["workspaces"])


@router.get("")
async def list_workspaces(
    workspaces: WorkspaceService = Depends(get_workspace_service),
):
    return {"workspaces": await workspaces.get_all()}


@router.get("/{workspace_id}")
async def get_workspace(
    workspace_id: str,
    workspaces: WorkspaceService = Depends(get_workspace_service),
):
    workspace = await workspaces.get_by_id(workspace_id)
    if workspace is None:
        raise HTTPException(
            status_code=404, detail=f"Workspace {workspace_id} not found"
        )
    return workspace


@router.get("/{workspace_id}/users")
async def list_workspace_users(
    workspace_id: str,
    workspaces: WorkspaceService = Depends(get_workspace_service),
):
    return {"users": await workspaces.get_users(workspace_id)}


@router.post("", status_code=201)
async def create_workspace(
    body: WorkspaceCreate,
    workspaces: WorkspaceService = Depends(get_workspace_service),
):
    return await workspaces.create(body.name, kind=body.kind, description=body.description)


@router.patch("/{workspace_id}")
async def update_workspace(
    workspace_id: str,
    body: WorkspaceUpdate,
    workspaces: WorkspaceService = Depends(get_workspace_service),
):
    return await workspaces.update(
        workspace_id, name=body.name, description=body.description
    )


@router.delete("/{workspace_id}")
async def delete_workspace(
    workspace_id: str,
    workspaces: WorkspaceService = Depends(get_workspace_service),
):
    return {"id": await workspaces.delete(workspace_id)}
