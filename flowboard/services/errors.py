"""Error kinds raised by the monday.com query client.

Every client failure derives from ``GraphQLClientError`` so that routers can
map the whole family in one exception handler.  A by-id lookup that matches
nothing is not an error: services return ``None`` for it.
"""

from typing import Any


class GraphQLClientError(Exception):
    """Base class for failures talking to the remote GraphQL API."""

    def __init__(
        self,
        message: str,
        *,
        operation: str = "",
        variables: dict[str, Any] | None = None,
        status: int | None = None,
    ) -> None:
        super().__init__(message)
        self.operation = operation
        self.variables = variables or {}
        self.status = status

    def __str__(self) -> str:
        base = super().__str__()
        if self.operation:
            base = f"{base} (operation={self.operation}"
            ids = {k: v for k, v in self.variables.items() if _is_identifier(k)}
            if ids:
                base += ", " + ", ".join(f"{k}={v}" for k, v in sorted(ids.items()))
            base += ")"
        return base


class RateLimitExceeded(GraphQLClientError):
    """The limiter queue is full, or the remote API rejected us for rate."""


class NetworkError(GraphQLClientError):
    """Transport-level failure (connection refused, DNS, reset, ...)."""


class RequestTimeout(NetworkError):
    """The request did not complete before the configured deadline."""


class AuthenticationError(GraphQLClientError):
    """The API token was rejected by the remote system."""


class ApiError(GraphQLClientError):
    """The remote system answered with a GraphQL error payload."""

    def __init__(
        self,
        message: str,
        *,
        errors: list[dict[str, Any]] | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.errors = errors or []


class BoardNotFoundError(LookupError):
    """A metrics computation was requested for a board that does not exist."""

    def __init__(self, board_id: str) -> None:
        super().__init__(f"Board with ID {board_id} not found")
        self.board_id = board_id


class AnalysisError(Exception):
    """The AI analysis collaborator returned something we could not use."""


def _is_identifier(key: str) -> bool:
    lowered = key.lower()
    return lowered == "id" or lowered.endswith("id") or lowered.endswith("ids")
