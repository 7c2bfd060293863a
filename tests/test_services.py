"""Tests for the task and task list services."""

import json

import pytest

from conftest import make_tasks
from gtasks_mcp.client import TasksApiError
from gtasks_mcp.models import TaskListFilter
from gtasks_mcp.pagination import InvalidCursorError
from gtasks_mcp.services import TaskListService, TaskService, matches_query


def pagination_of(text: str) -> dict:
    """Decode the JSON pagination trailer of a list/search result."""
    return json.loads(text.rsplit("\n\n", 1)[1])["pagination"]


class TestMatchesQuery:
    """Test the search predicate."""

    def test_title_match_is_case_insensitive(self):
        assert matches_query({"title": "Buy Milk", "notes": ""}, "milk")

    def test_notes_match(self):
        assert matches_query({"title": "", "notes": "urgent milk run"}, "MILK")

    def test_no_match(self):
        assert not matches_query({"title": "Call mom", "notes": "sunday"}, "milk")

    def test_missing_fields_do_not_match(self):
        assert not matches_query({"id": "1"}, "milk")
        assert not matches_query({"title": None, "notes": None}, "milk")


class TestTaskServiceList:
    """Test the paginated list operation."""

    @pytest.mark.asyncio
    async def test_first_page_text(self, fake_api):
        fake_api.add_list("a", make_tasks("a", 30))
        fake_api.add_list("b", make_tasks("b", 15))

        text = await TaskService(fake_api).list()

        assert text.startswith("Found 45 tasks. Showing 1-20 of 45.\n")
        assert "a task 0\n" in text
        assert "\nNext cursor: 20\n\n" in text
        assert pagination_of(text) == {
            "pageSize": 20,
            "total": 45,
            "offset": 0,
            "returned": 20,
            "nextCursor": "20",
        }

    @pytest.mark.asyncio
    async def test_walk_pages_with_cursor(self, fake_api):
        fake_api.add_list("a", make_tasks("a", 30))
        fake_api.add_list("b", make_tasks("b", 15))
        service = TaskService(fake_api)

        cursors = []
        returned = []
        cursor = None
        while True:
            meta = pagination_of(await service.list(cursor=cursor))
            returned.append(meta["returned"])
            cursor = meta["nextCursor"]
            cursors.append(cursor)
            if cursor is None:
                break

        assert returned == [20, 20, 5]
        assert cursors == ["20", "40", None]

    @pytest.mark.asyncio
    async def test_last_page_has_no_cursor_line(self, fake_api):
        fake_api.add_list("a", make_tasks("a", 45))

        text = await TaskService(fake_api).list(cursor="40")

        assert text.startswith("Found 45 tasks. Showing 41-45 of 45.\n")
        assert "Next cursor:" not in text

    @pytest.mark.asyncio
    async def test_empty_result(self, fake_api):
        fake_api.add_list("a", [])

        text = await TaskService(fake_api).list()

        assert text.startswith("Found 0 tasks.\nNo tasks on this page.")
        assert pagination_of(text)["nextCursor"] is None
        assert pagination_of(text)["total"] == 0

    @pytest.mark.asyncio
    async def test_invalid_cursor(self, fake_api):
        fake_api.add_list("a", make_tasks("a", 10))

        with pytest.raises(InvalidCursorError):
            await TaskService(fake_api).list(cursor="1000")

    @pytest.mark.asyncio
    async def test_repeated_cursor_is_idempotent(self, fake_api):
        fake_api.add_list("a", make_tasks("a", 50))
        service = TaskService(fake_api)

        assert await service.list(cursor="20") == await service.list(cursor="20")

    @pytest.mark.asyncio
    async def test_partial_failure_still_succeeds(self, fake_api):
        fake_api.add_list("a", make_tasks("a", 2))
        fake_api.add_list("b", make_tasks("b", 2))
        fake_api.add_list("c", make_tasks("c", 2))
        fake_api.failing.add("b")

        page = await TaskService(fake_api).list_page()

        assert [t["id"] for t in page.items] == ["a-0", "a-1", "c-0", "c-1"]
        assert page.total == 4

    @pytest.mark.asyncio
    async def test_single_list_failure_surfaces(self, fake_api):
        fake_api.add_list("a", make_tasks("a", 2))
        fake_api.failing.add("a")

        with pytest.raises(TasksApiError):
            await TaskService(fake_api).list(TaskListFilter(task_list_id="a"))


class TestTaskServiceSearch:
    """Test the search operation."""

    @pytest.mark.asyncio
    async def test_search_narrows_before_paging(self, fake_api):
        tasks = make_tasks("a", 25)
        tasks[3]["title"] = "Buy MILK"
        tasks[11]["notes"] = "urgent milk run"
        tasks[24]["title"] = "milkshake"
        fake_api.add_list("a", tasks)

        text = await TaskService(fake_api).search("milk")

        assert text.startswith('Found 3 tasks matching "milk". Showing 1-3 of 3.\n')
        meta = pagination_of(text)
        assert meta["total"] == 3
        assert meta["returned"] == 3
        assert meta["nextCursor"] is None

    @pytest.mark.asyncio
    async def test_search_pages_over_matches(self, fake_api):
        tasks = make_tasks("a", 60)
        for task in tasks[::2]:
            task["notes"] = "errand"
        fake_api.add_list("a", tasks)
        service = TaskService(fake_api)

        first = await service.search_page("ERRAND")
        second = await service.search_page("ERRAND", cursor=first.next_cursor)

        assert first.total == 30
        assert first.next_cursor == "20"
        assert [t["id"] for t in second.items] == [f"a-{i}" for i in range(40, 60, 2)]
        assert second.next_cursor is None

    @pytest.mark.asyncio
    async def test_search_no_matches(self, fake_api):
        fake_api.add_list("a", make_tasks("a", 5))

        text = await TaskService(fake_api).search("nothing")

        assert text.startswith('Found 0 tasks matching "nothing".\n')


class TestTaskServiceWrites:
    """Test the write-path operations."""

    @pytest.mark.asyncio
    async def test_create_defaults_to_default_list(self, fake_api):
        text = await TaskService(fake_api).create("Write report", notes="by friday")

        assert text == "Task created: Write report"
        assert fake_api.calls[-1] == (
            "insert_task",
            "@default",
            {"title": "Write report", "notes": "by friday"},
            None,
            None,
        )

    @pytest.mark.asyncio
    async def test_create_subtask(self, fake_api):
        await TaskService(fake_api).create(
            "Child", task_list_id="work", parent="p1", previous="s1", due="2025-03-01T00:00:00Z"
        )

        assert fake_api.calls[-1] == (
            "insert_task",
            "work",
            {"title": "Child", "due": "2025-03-01T00:00:00Z"},
            "p1",
            "s1",
        )

    @pytest.mark.asyncio
    async def test_update_sends_only_provided_fields(self, fake_api):
        text = await TaskService(fake_api).update("t1", status="completed", notes="")

        assert text == "Task updated: patched"
        assert fake_api.calls[-1] == (
            "patch_task",
            "@default",
            "t1",
            {"id": "t1", "notes": "", "status": "completed"},
        )

    @pytest.mark.asyncio
    async def test_update_rejects_unknown_status(self, fake_api):
        with pytest.raises(ValueError):
            await TaskService(fake_api).update("t1", status="done")

    @pytest.mark.asyncio
    async def test_delete(self, fake_api):
        text = await TaskService(fake_api).delete("t1")

        assert text == "Task t1 deleted"
        assert fake_api.calls[-1] == ("delete_task", "@default", "t1")

    @pytest.mark.asyncio
    async def test_clear(self, fake_api):
        assert await TaskService(fake_api).clear() == "Tasks from tasklist @default cleared"
        assert await TaskService(fake_api).clear("work") == "Tasks from tasklist work cleared"

    @pytest.mark.asyncio
    async def test_move(self, fake_api):
        text = await TaskService(fake_api).move("work", "t1", destination_tasklist="home")

        assert text == "Task moved: moved task (ID: t1)"
        assert fake_api.calls[-1] == ("move_task", "work", "t1", None, None, "home")


class TestTaskListService:
    """Test task list management."""

    @pytest.mark.asyncio
    async def test_list_drains_registry(self):
        from conftest import FakeTasksApi

        api = FakeTasksApi(page_size=1)
        api.add_list("a", [], title="Work")
        api.add_list("b", [], title="Home")

        text = await TaskListService(api).list()

        assert text.startswith("Found 2 task lists:\n")
        assert "Work - ID: a - Updated: None" in text
        assert "Home - ID: b" in text

    @pytest.mark.asyncio
    async def test_get(self, fake_api):
        fake_api.add_list("a", [], title="Work")

        text = await TaskListService(fake_api).get("a")

        assert text.splitlines()[:2] == ["Title: Work", "ID: a"]

    @pytest.mark.asyncio
    async def test_create_update_delete(self, fake_api):
        service = TaskListService(fake_api)

        assert await service.create("Groceries") == "Task list created: Groceries (ID: list-0)"
        assert await service.update("list-0", "Food") == "Task list updated: Food"
        assert await service.delete("list-0") == "Task list list-0 deleted"
