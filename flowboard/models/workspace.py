"""Workspace models."""

from pydantic import BaseModel, ConfigDict

_MONDAY_CONFIG = ConfigDict(coerce_numbers_to_str=True, extra="ignore", frozen=True)


class Workspace(BaseModel):
    model_config = _MONDAY_CONFIG

    id: str
    name: str
    description: str | None = None
    kind: str = "open"  # open, closed
    state: str = "active"
    created_at: str | None = None
    updated_at: str | None = None


class User(BaseModel):
    model_config = _MONDAY_CONFIG

    id: str
    name: str = ""
    email: str = ""


class WorkspaceUser(BaseModel):
    model_config = _MONDAY_CONFIG

    id: str
    user: User
    role: str = "member"  # admin, member, viewer


class WorkspaceCreate(BaseModel):
    name: str
    kind: str = "open"
    description: str | None = None


class WorkspaceUpdate(BaseModel):
    name: str | None = None
    description: str | None = None
