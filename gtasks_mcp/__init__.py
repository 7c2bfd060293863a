"""Google Tasks MCP server - paginated, multi-list task access for agents."""

from .aggregator import fetch_tasks
from .auth import CredentialsError, load_credentials
from .client import TasksApiClient, TasksApiError
from .config import ConfigError, ServerConfig, load_config
from .models import PaginationMetadata, TaskListFilter, TaskPage, TaskStatus
from .pagination import TASK_PAGE_SIZE, InvalidCursorError, paginate
from .resources import TaskNotFoundError, TaskResourceHandler
from .server import build_server, create_client, run_server, serve
from .services import TaskListService, TaskService

__all__ = [
    "build_server",
    "create_client",
    "run_server",
    "serve",
    "load_credentials",
    "fetch_tasks",
    "paginate",
    "load_config",
    "TASK_PAGE_SIZE",
    "TasksApiClient",
    "TasksApiError",
    "TaskService",
    "TaskListService",
    "TaskResourceHandler",
    "TaskListFilter",
    "TaskPage",
    "TaskStatus",
    "PaginationMetadata",
    "ServerConfig",
    "ConfigError",
    "CredentialsError",
    "InvalidCursorError",
    "TaskNotFoundError",
]


def main():
    """Entry point for the Google Tasks MCP server."""
    from .__main__ import main as run

    return run()
