"""Offset-cursor pagination over a merged task set."""

from typing import Optional

from .models import PaginationMetadata, Task, TaskPage

# Number of tasks returned per paginated response.
TASK_PAGE_SIZE = 20

INVALID_CURSOR_MESSAGE = "Invalid cursor. Use the cursor returned by the previous call."


class InvalidCursorError(ValueError):
    """The cursor is malformed or points past the end of the results."""

    def __init__(self, message: str = INVALID_CURSOR_MESSAGE):
        super().__init__(message)


def parse_cursor(cursor: Optional[str]) -> int:
    """Decode a cursor into a non-negative offset.

    A missing or empty cursor means the first page.
    """
    if not cursor:
        return 0
    # isdigit() alone admits non-ASCII digits such as "²"
    if not (cursor.isascii() and cursor.isdigit()):
        raise InvalidCursorError()
    return int(cursor)


def paginate(
    items: list[Task],
    cursor: Optional[str] = None,
    page_size: int = TASK_PAGE_SIZE,
) -> TaskPage:
    """Return the page of ``items`` that starts at ``cursor``.

    Raises:
        InvalidCursorError: The cursor does not decode, or it is at or past the
            end of a non-empty result set.
    """
    offset = parse_cursor(cursor)
    if items and offset >= len(items):
        raise InvalidCursorError()

    page = items[offset:offset + page_size]
    next_offset = offset + len(page)
    next_cursor = str(next_offset) if next_offset < len(items) else None

    return TaskPage(items=page, offset=offset, total=len(items), next_cursor=next_cursor)


def pagination_metadata(page: TaskPage, page_size: int = TASK_PAGE_SIZE) -> PaginationMetadata:
    return PaginationMetadata(
        page_size=page_size,
        total=page.total,
        offset=page.offset,
        returned=page.returned,
        next_cursor=page.next_cursor,
    )
