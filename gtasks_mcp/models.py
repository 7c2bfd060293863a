"""Pydantic models for the Google Tasks MCP server."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

# Maximum number of results to request per Google Tasks API call.
MAX_TASK_RESULTS = 100

# Reserved task list id for the caller's default list.
DEFAULT_TASK_LIST = "@default"

# Tasks and task lists are passed through as the raw JSON the API returns.
Task = dict[str, Any]
TaskList = dict[str, Any]


class TaskStatus(str, Enum):
    """Task status values accepted by the Tasks API."""

    NEEDS_ACTION = "needsAction"
    COMPLETED = "completed"


class TaskListFilter(BaseModel):
    """Filters for listing and searching tasks.

    Everything except ``task_list_id`` is passed through to the ``tasks.list``
    endpoint, and only when explicitly set.
    """

    task_list_id: Optional[str] = Field(
        default=None,
        description="Task list ID. If omitted, tasks from all lists are returned.",
    )
    show_completed: Optional[bool] = Field(
        default=None, description="Whether to include completed tasks"
    )
    show_hidden: Optional[bool] = Field(
        default=None, description="Whether to include hidden tasks"
    )
    show_deleted: Optional[bool] = Field(
        default=None, description="Whether to include deleted tasks"
    )
    show_assigned: Optional[bool] = Field(
        default=None, description="Whether to include assigned tasks"
    )
    completed_min: Optional[str] = Field(
        default=None, description="Lower bound for completion date (RFC 3339)"
    )
    completed_max: Optional[str] = Field(
        default=None, description="Upper bound for completion date (RFC 3339)"
    )
    due_min: Optional[str] = Field(
        default=None, description="Lower bound for due date (RFC 3339)"
    )
    due_max: Optional[str] = Field(
        default=None, description="Upper bound for due date (RFC 3339)"
    )
    updated_min: Optional[str] = Field(
        default=None, description="Lower bound for last modification time (RFC 3339)"
    )

    def to_query_params(self) -> dict[str, Any]:
        """Build ``tasks.list`` query parameters from the set filters."""
        params: dict[str, Any] = {"maxResults": MAX_TASK_RESULTS}

        flags = {
            "showCompleted": self.show_completed,
            "showHidden": self.show_hidden,
            "showDeleted": self.show_deleted,
            "showAssigned": self.show_assigned,
        }
        for name, value in flags.items():
            if value is not None:
                params[name] = value

        bounds = {
            "completedMin": self.completed_min,
            "completedMax": self.completed_max,
            "dueMin": self.due_min,
            "dueMax": self.due_max,
            "updatedMin": self.updated_min,
        }
        for name, value in bounds.items():
            if value:
                params[name] = value

        return params


class PaginationMetadata(BaseModel):
    """Machine-readable pagination info attached to list/search results."""

    model_config = ConfigDict(populate_by_name=True)

    page_size: int = Field(alias="pageSize")
    total: int
    offset: int
    returned: int
    next_cursor: Optional[str] = Field(default=None, alias="nextCursor")


@dataclass
class TaskPage:
    """One page of a merged task set."""

    items: list[Task]
    offset: int
    total: int
    next_cursor: Optional[str] = None

    @property
    def returned(self) -> int:
        return len(self.items)


@dataclass
class ListFetchOutcome:
    """Settled result of fetching one task list during fan-out."""

    task_list_id: str
    tasks: list[Task] = field(default_factory=list)
    error: Optional[BaseException] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None
