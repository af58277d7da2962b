"""
Tests for TaskService against a fake osascript executor.
"""

import pytest
from conftest import task

from omnifocus_mcp.omnifocus_api.errors import AutomationExecutionError
from omnifocus_mcp.services.task_service import TaskService, build_rrule


@pytest.fixture
def service(bridge, clock):
    return TaskService(bridge, clock)


class TestGetTasks:
    def test_filters_are_reapplied(self, service, fake_executor):
        fake_executor.queue([
            task("a", "Open"),
            task("b", "Done", completed=True),
            task("c", "Also open", flagged=True),
        ])
        result = service.get_tasks()
        assert not result.is_error
        assert result.text.startswith("Found 2 tasks:\n")
        assert [t["id"] for t in result.data] == ["a", "c"]

    def test_single_result_wording(self, service, fake_executor):
        fake_executor.queue([task("a", "Only")])
        assert service.get_tasks().text.startswith("Found 1 task:\n")

    def test_parse_failure_becomes_error_result(self, service, fake_executor):
        fake_executor.queue("garbage")
        result = service.get_tasks()
        assert result.is_error
        assert result.text.startswith("Error retrieving tasks: Failed to parse OmniFocus response")


class TestCreateTask:
    def test_inbox_task(self, service, fake_executor):
        fake_executor.queue({"id": "t1", "name": "Buy milk"})
        result = service.create_task(name="Buy milk")
        assert result.text == 'Task created successfully: "Buy milk"'
        assert "doc.inboxTasks.push(task);" in fake_executor.scripts[0]

    def test_project_and_tags(self, service, fake_executor):
        fake_executor.queue({"id": "t1", "name": "Draft"})
        service.create_task(name="Draft", project="Writing", tags=["deep"])
        script = fake_executor.scripts[0]
        assert "doc.projects.push(project);" in script
        assert "project.tasks.push(task);" in script
        assert '["deep"]' in script
        assert "app.add(tag, {to: task.tags});" in script

    def test_validation_happens_before_any_process(self, service, fake_executor):
        result = service.create_task(name="X", due_date="2025-02-30")
        assert result.is_error
        assert result.text == "Error creating task: Invalid due date format. Use YYYY-MM-DD or YYYY-MM-DDTHH:mm:ss"
        assert fake_executor.scripts == []

    def test_automation_failure(self, service, fake_executor):
        fake_executor.queue(AutomationExecutionError("OmniFocus automation failed (code 1): boom", stderr="boom"))
        result = service.create_task(name="X")
        assert result.is_error
        assert "boom" in result.text


def test_batch_records_each_item(service, fake_executor):
    fake_executor.queue({"id": "1", "name": "First"}, {"id": "3", "name": "Third"})
    result = service.create_tasks_batch([
        {"name": "First"},
        {"name": "Second", "due_date": "tomorrow"},
        {"name": "Third"},
    ])
    assert not result.is_error
    assert result.text.splitlines() == [
        "Batch task creation results:",
        "✓ Created: First",
        '✗ Failed to create "Second": Invalid due date format. Use YYYY-MM-DD or YYYY-MM-DDTHH:mm:ss',
        "✓ Created: Third",
    ]
    assert len(fake_executor.scripts) == 2
    assert [item["success"] for item in result.data] == [True, False, True]


def test_batch_continues_after_automation_failure(service, fake_executor):
    fake_executor.queue(AutomationExecutionError("down"), {"id": "2", "name": "B"})
    result = service.create_tasks_batch([{"name": "A"}, {"name": "B"}])
    assert result.text.splitlines()[1] == '✗ Failed to create "A": down'
    assert result.text.splitlines()[2] == "✓ Created: B"


class TestUpdateCompleteDelete:
    def test_update_not_found(self, service, fake_executor):
        fake_executor.queue({"error": "Task not found: nope"})
        result = service.update_task("nope", flagged=True)
        assert result.is_error
        assert result.text == "Error updating task: Task not found: nope"

    def test_update(self, service, fake_executor):
        fake_executor.queue({"id": "a", "name": "Renamed"})
        result = service.update_task("a", name="Renamed")
        assert result.text == 'Task updated successfully: "Renamed"'
        assert 'task.name = "Renamed";' in fake_executor.scripts[0]

    def test_complete(self, service, fake_executor):
        fake_executor.queue({"id": "a", "name": "Pay rent"})
        assert service.complete_task("a").text == 'Task completed: "Pay rent"'
        assert "app.markComplete(task);" in fake_executor.scripts[0]

    def test_delete(self, service, fake_executor):
        fake_executor.queue({"id": "a", "name": "Old"})
        assert service.delete_task("a").text == 'Task deleted: "Old"'
        assert "app.delete(task);" in fake_executor.scripts[0]


def test_search(service, fake_executor):
    fake_executor.queue([task("a", "Email Bob"), task("b", "Call Ann")])
    result = service.search_tasks("email")
    assert result.text.startswith('Found 1 task matching "email":\n')
    assert "task.completed()" in fake_executor.scripts[0]


class TestRecurring:
    def test_rrule(self):
        rule = {"frequency": "weekly", "interval": 2, "days_of_week": ["monday", "wednesday"]}
        assert build_rrule(rule) == "FREQ=WEEKLY;INTERVAL=2;BYDAY=MO,WE"
        assert build_rrule({"frequency": "daily", "days_of_week": ["monday"]}) == "FREQ=DAILY;INTERVAL=1"

    def test_create(self, service, fake_executor):
        fake_executor.queue({"id": "r1", "name": "Water plants"})
        result = service.create_recurring_task(
            "Water plants", {"frequency": "weekly", "interval": 1, "repeat_from": "completion_date"},
            first_due_date="2025-01-20",
        )
        assert result.text == 'Recurring task created successfully: "Water plants" (weekly)'
        script = fake_executor.scripts[0]
        assert '"FREQ=WEEKLY;INTERVAL=1"' in script
        assert '"start after completion"' in script
        assert 'task.dueDate = new Date("2025-01-20");' in script


def test_defer_reports_each_task(service, fake_executor):
    fake_executor.queue(
        {"id": "a", "name": "A", "deferDate": "2025-01-20T12:00:00.000Z", "dueDate": None},
        {"error": "Task not found: B"},
    )
    result = service.defer_tasks(["A", "B"], "2025-01-20")
    lines = result.text.splitlines()
    assert lines[0] == "Defer results:"
    assert lines[1].startswith("A: deferred to ")
    assert "due date adjusted" not in lines[1]
    assert lines[2] == "Task not found: B"
    assert len(fake_executor.scripts) == 2
    assert '"2025-01-15T10:00:00+00:00"' in fake_executor.scripts[0]


def test_defer_with_due_adjustment(service, fake_executor):
    fake_executor.queue({"id": "a", "name": "A", "deferDate": "2025-01-20T12:00:00.000Z",
                         "dueDate": "2025-01-25T12:00:00.000Z"})
    result = service.defer_tasks(["A"], "2025-01-20", adjust_due_dates=True)
    assert "due date adjusted to " in result.text
    assert "if (true && oldDue)" in fake_executor.scripts[0]


def test_organize(service, fake_executor):
    fake_executor.queue(
        {"id": "a", "name": "A", "actions": ["moved to Work", "added tag: deep"]},
        {"id": "b", "name": "B", "actions": []},
    )
    result = service.organize_tasks(["A", "B"], target_project="Work", add_tags=["deep"])
    assert result.text.splitlines() == [
        "Organization results:",
        "A: moved to Work, added tag: deep",
        "B: no changes",
    ]
    script = fake_executor.scripts[0]
    assert "app.move(task, {to: target.tasks.end});" in script
    assert 'actions.push("added tag: " + _tagNames[_t]);' in script
