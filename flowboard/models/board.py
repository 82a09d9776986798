"""Board, group, column and item models as returned by monday.com."""

from pydantic import BaseModel, ConfigDict

_MONDAY_CONFIG = ConfigDict(coerce_numbers_to_str=True, extra="ignore", frozen=True)


class Board(BaseModel):
    """Board metadata snapshot (groups and columns are kept separately)."""

    model_config = _MONDAY_CONFIG

    id: str
    name: str
    description: str | None = None
    board_kind: str = "public"  # public, private, share
    state: str = "active"
    workspace_id: str | None = None
    created_at: str | None = None
    updated_at: str | None = None


class Group(BaseModel):
    """A workflow stage.  Ordering is by ascending ``position`` only."""

    model_config = _MONDAY_CONFIG

    id: str
    title: str
    color: str = ""
    position: float = 0  # monday.com serialises positions as numeric strings
    archived: bool | None = None


class Column(BaseModel):
    model_config = _MONDAY_CONFIG

    id: str
    title: str
    type: str
    description: str | None = None
    settings_str: str | None = None  # opaque, format depends on column type


class ColumnOption(BaseModel):
    """One selectable label of a status or dropdown column."""

    model_config = _MONDAY_CONFIG

    id: str
    label: str
    color: str | None = None


class ColumnValue(BaseModel):
    model_config = _MONDAY_CONFIG

    id: str
    text: str | None = None
    value: str | None = None
    type: str | None = None


class GroupRef(BaseModel):
    model_config = _MONDAY_CONFIG

    id: str
    title: str = ""


class BoardRef(BaseModel):
    model_config = _MONDAY_CONFIG

    id: str
    name: str | None = None


class Item(BaseModel):
    """A unit of work belonging to one group on one board."""

    model_config = _MONDAY_CONFIG

    id: str
    name: str = ""
    state: str | None = None
    created_at: str | None = None
    updated_at: str | None = None
    board: BoardRef | None = None
    group: GroupRef | None = None
    column_values: list[ColumnValue] = []

    def value_for(self, column_id: str) -> ColumnValue | None:
        """Return this item's value for *column_id*, if any."""
        for cv in self.column_values:
            if cv.id == column_id:
                return cv
        return None


class BoardDetails(BaseModel):
    """A by-id board lookup, split into the board and its collections."""

    model_config = _MONDAY_CONFIG

    board: Board
    groups: list[Group] = []
    columns: list[Column] = []


class BoardCreate(BaseModel):
    name: str
    board_kind: str = "public"
    workspace_id: str | None = None
    template_id: str | None = None


class BoardUpdate(BaseModel):
    name: str | None = None
    description: str | None = None


class GroupCreate(BaseModel):
    group_name: str


class ItemCreate(BaseModel):
    group_id: str
    item_name: str
    column_values: dict = {}


class ItemColumnsUpdate(BaseModel):
    board_id: str
    column_values: dict


class ItemMove(BaseModel):
    group_id: str


class GroupUpdate(BaseModel):
    title: str | None = None
    color: str | None = None


class ColumnCreate(BaseModel):
    title: str
    column_type: str
    defaults: dict | None = None


class ColumnUpdate(BaseModel):
    title: str | None = None
    description: str | None = None
