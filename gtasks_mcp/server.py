"""Google Tasks MCP server.

This server provides:
- Paginated list and search over one or all task lists
- Task CRUD plus move and clear-completed
- Task list management
- Tasks as ``gtasks:///{task_id}`` resources
"""

import asyncio
import logging
from typing import Annotated, Optional

import uvicorn
from mcp.server.fastmcp import FastMCP
from pydantic import Field

from .client import TasksApiClient
from .config import ServerConfig
from .formatting import format_task_details
from .models import TaskListFilter
from .resources import TaskResourceHandler, task_uri
from .services import TaskListService, TaskService

logger = logging.getLogger(__name__)

SERVER_NAME = "gtasks"

TaskListIdArg = Annotated[
    Optional[str],
    Field(description="Task list ID. If omitted, tasks from all lists are returned."),
]
ShowCompletedArg = Annotated[
    Optional[bool], Field(description="Whether to include completed tasks. Default: true.")
]
ShowHiddenArg = Annotated[
    Optional[bool], Field(description="Whether to include hidden tasks. Default: true.")
]
ShowDeletedArg = Annotated[
    Optional[bool], Field(description="Whether to include deleted tasks. Default: false.")
]
ShowAssignedArg = Annotated[
    Optional[bool], Field(description="Whether to include assigned tasks. Default: true.")
]
CompletedMinArg = Annotated[
    Optional[str],
    Field(description="Lower bound for task completion date (RFC 3339 timestamp)."),
]
CompletedMaxArg = Annotated[
    Optional[str],
    Field(description="Upper bound for task completion date (RFC 3339 timestamp)."),
]
DueMinArg = Annotated[
    Optional[str], Field(description="Lower bound for task due date (RFC 3339 timestamp).")
]
DueMaxArg = Annotated[
    Optional[str], Field(description="Upper bound for task due date (RFC 3339 timestamp).")
]
UpdatedMinArg = Annotated[
    Optional[str],
    Field(description="Lower bound for task last modification time (RFC 3339 timestamp)."),
]
CursorArg = Annotated[
    Optional[str],
    Field(description="Cursor for pagination, as returned by the previous call."),
]


def build_server(client: TasksApiClient, name: str = SERVER_NAME) -> FastMCP:
    """Create the MCP server around an authenticated Tasks API client.

    Args:
        client: The client every tool and resource uses.
        name: Server name reported to MCP clients.

    Returns:
        A FastMCP server with all tools and resources registered.
    """
    mcp = FastMCP(
        name=name,
        instructions="Google Tasks: list, search and manage tasks and task lists",
    )

    task_service = TaskService(client)
    task_list_service = TaskListService(client)
    resource_handler = TaskResourceHandler(client)

    # ============== TASK RESOURCES ==============

    @mcp.resource("gtasks:///{task_id}", name="task", mime_type="text/plain")
    async def read_task(task_id: str) -> str:
        """A single Google Tasks task."""
        task = await resource_handler.read(task_id)
        return format_task_details(task)

    @mcp.resource("gtasks:///", name="tasks", mime_type="text/plain")
    async def list_task_resources() -> str:
        """Every task across all task lists, one resource URI per line."""
        tasks = await resource_handler.list()
        return "\n".join(f"{task_uri(t)} - {t.get('title') or 'Untitled'}" for t in tasks)

    # ============== READ TOOLS ==============

    @mcp.tool(name="list", description="List all tasks in Google Tasks")
    async def list_tasks(
        cursor: CursorArg = None,
        task_list_id: TaskListIdArg = None,
        show_completed: ShowCompletedArg = None,
        show_hidden: ShowHiddenArg = None,
        show_deleted: ShowDeletedArg = None,
        show_assigned: ShowAssignedArg = None,
        completed_min: CompletedMinArg = None,
        completed_max: CompletedMaxArg = None,
        due_min: DueMinArg = None,
        due_max: DueMaxArg = None,
        updated_min: UpdatedMinArg = None,
    ) -> str:
        filters = TaskListFilter(
            task_list_id=task_list_id,
            show_completed=show_completed,
            show_hidden=show_hidden,
            show_deleted=show_deleted,
            show_assigned=show_assigned,
            completed_min=completed_min,
            completed_max=completed_max,
            due_min=due_min,
            due_max=due_max,
            updated_min=updated_min,
        )
        logger.info(f"list: cursor={cursor} filters={filters.model_dump(exclude_none=True)}")
        return await task_service.list(filters, cursor)

    @mcp.tool(name="search", description="Search for a task in Google Tasks")
    async def search_tasks(
        query: Annotated[str, Field(description="Search query")],
        cursor: CursorArg = None,
        task_list_id: TaskListIdArg = None,
        show_completed: ShowCompletedArg = None,
        show_hidden: ShowHiddenArg = None,
        show_deleted: ShowDeletedArg = None,
        show_assigned: ShowAssignedArg = None,
        completed_min: CompletedMinArg = None,
        completed_max: CompletedMaxArg = None,
        due_min: DueMinArg = None,
        due_max: DueMaxArg = None,
        updated_min: UpdatedMinArg = None,
    ) -> str:
        filters = TaskListFilter(
            task_list_id=task_list_id,
            show_completed=show_completed,
            show_hidden=show_hidden,
            show_deleted=show_deleted,
            show_assigned=show_assigned,
            completed_min=completed_min,
            completed_max=completed_max,
            due_min=due_min,
            due_max=due_max,
            updated_min=updated_min,
        )
        logger.info(f"search: query={query!r} cursor={cursor}")
        return await task_service.search(query, filters, cursor)

    # ============== TASK WRITE TOOLS ==============

    @mcp.tool(name="create", description="Create a new task in Google Tasks")
    async def create_task(
        title: Annotated[str, Field(description="Task title")],
        task_list_id: Annotated[Optional[str], Field(description="Task list ID")] = None,
        notes: Annotated[Optional[str], Field(description="Task notes")] = None,
        due: Annotated[Optional[str], Field(description="Due date (RFC 3339 timestamp)")] = None,
        parent: Annotated[
            Optional[str],
            Field(description="Parent task ID. If set, the new task becomes a subtask."),
        ] = None,
        previous: Annotated[
            Optional[str],
            Field(description="Previous sibling task ID. New task is placed after this one."),
        ] = None,
    ) -> str:
        logger.info(f"create: task_list_id={task_list_id} title={title!r}")
        return await task_service.create(
            title,
            task_list_id=task_list_id,
            notes=notes,
            due=due,
            parent=parent,
            previous=previous,
        )

    @mcp.tool(name="update", description="Update an existing task in Google Tasks")
    async def update_task(
        id: Annotated[str, Field(description="Task ID")],
        task_list_id: Annotated[Optional[str], Field(description="Task list ID")] = None,
        title: Annotated[Optional[str], Field(description="Task title")] = None,
        notes: Annotated[Optional[str], Field(description="Task notes")] = None,
        status: Annotated[
            Optional[str],
            Field(description="Task status (needsAction or completed)"),
        ] = None,
        due: Annotated[Optional[str], Field(description="Due date (RFC 3339 timestamp)")] = None,
    ) -> str:
        logger.info(f"update: task_list_id={task_list_id} id={id}")
        return await task_service.update(
            id, task_list_id=task_list_id, title=title, notes=notes, status=status, due=due
        )

    @mcp.tool(name="delete", description="Delete a task in Google Tasks")
    async def delete_task(
        task_list_id: Annotated[str, Field(description="Task list ID")],
        id: Annotated[str, Field(description="Task id")],
    ) -> str:
        logger.info(f"delete: task_list_id={task_list_id} id={id}")
        return await task_service.delete(id, task_list_id=task_list_id)

    @mcp.tool(name="clear", description="Clear completed tasks from a Google Tasks task list")
    async def clear_tasks(
        task_list_id: Annotated[str, Field(description="Task list ID")],
    ) -> str:
        logger.info(f"clear: task_list_id={task_list_id}")
        return await task_service.clear(task_list_id)

    @mcp.tool(
        name="move_task",
        description=(
            "Move a task to a different position or parent within a task list, "
            "or to a different task list"
        ),
    )
    async def move_task(
        task_list_id: Annotated[str, Field(description="Source task list ID")],
        task_id: Annotated[str, Field(description="Task ID to move")],
        parent: Annotated[
            Optional[str], Field(description="New parent task ID. Omit to move to top level.")
        ] = None,
        previous: Annotated[
            Optional[str],
            Field(description="Previous sibling task ID. Task is placed after this one."),
        ] = None,
        destination_tasklist: Annotated[
            Optional[str],
            Field(description="Destination task list ID. Omit to stay in the same list."),
        ] = None,
    ) -> str:
        logger.info(f"move_task: task_list_id={task_list_id} task_id={task_id}")
        return await task_service.move(
            task_list_id,
            task_id,
            parent=parent,
            previous=previous,
            destination_tasklist=destination_tasklist,
        )

    # ============== TASK LIST TOOLS ==============

    @mcp.tool(name="list_task_lists", description="List all task lists in Google Tasks")
    async def list_task_lists() -> str:
        return await task_list_service.list()

    @mcp.tool(name="get_task_list", description="Get a specific task list by ID")
    async def get_task_list(
        task_list_id: Annotated[str, Field(description="Task list ID")],
    ) -> str:
        return await task_list_service.get(task_list_id)

    @mcp.tool(name="create_task_list", description="Create a new task list in Google Tasks")
    async def create_task_list(
        title: Annotated[str, Field(description="Task list title")],
    ) -> str:
        logger.info(f"create_task_list: title={title!r}")
        return await task_list_service.create(title)

    @mcp.tool(
        name="update_task_list", description="Update an existing task list in Google Tasks"
    )
    async def update_task_list(
        task_list_id: Annotated[str, Field(description="Task list ID")],
        title: Annotated[
            Optional[str], Field(description="New title for the task list")
        ] = None,
    ) -> str:
        logger.info(f"update_task_list: task_list_id={task_list_id}")
        return await task_list_service.update(task_list_id, title)

    @mcp.tool(name="delete_task_list", description="Delete a task list in Google Tasks")
    async def delete_task_list(
        task_list_id: Annotated[str, Field(description="Task list ID")],
    ) -> str:
        logger.info(f"delete_task_list: task_list_id={task_list_id}")
        return await task_list_service.delete(task_list_id)

    return mcp


def create_client(config: ServerConfig) -> TasksApiClient:
    """Build the Tasks API client configured from ``config``."""
    return TasksApiClient.from_credentials(
        config.credentials, base_url=config.base_url, timeout=config.timeout
    )


async def serve(
    mcp: FastMCP,
    client: TasksApiClient,
    transport: str = "stdio",
    host: str = "0.0.0.0",
    port: int = 8000,
    log_level: str = "INFO",
):
    """Serve ``mcp`` until shutdown, then close ``client``."""
    async with client:
        if transport == "streamable-http":
            logger.info(f"Starting {mcp.name} on http://{host}:{port}")
            config = uvicorn.Config(
                mcp.streamable_http_app(),
                host=host,
                port=port,
                log_level=log_level.lower(),
            )
            await uvicorn.Server(config).serve()
        else:
            logger.info(f"Starting {mcp.name} on stdio")
            await mcp.run_stdio_async()
    logger.info(f"{mcp.name} stopped")


def run_server(
    mcp: FastMCP,
    client: TasksApiClient,
    transport: str = "stdio",
    host: str = "0.0.0.0",
    port: int = 8000,
    log_level: str = "INFO",
):
    """Run the MCP server in a fresh event loop.

    Args:
        mcp: The server built by ``build_server``.
        client: The client ``mcp`` was built around. Closed on shutdown.
        transport: 'stdio' or 'streamable-http'.
        host: Bind address for streamable-http.
        port: Port for streamable-http.
        log_level: uvicorn log level for streamable-http.
    """
    asyncio.run(
        serve(mcp, client, transport=transport, host=host, port=port, log_level=log_level)
    )
