from datetime import datetime, timezone

from conftest import project, task

from omnifocus_mcp.omnifocus_api.data_models import ProjectRecord, TaskRecord, ToolResult


def test_task_record_round_trip():
    raw = task("a", "Write", dueDate="2025-01-20T09:00:00.000Z", tags=["deep"])
    record = TaskRecord.from_dict(raw)
    assert record.to_dict() == raw
    assert record.due_at == datetime(2025, 1, 20, 9, 0, tzinfo=timezone.utc)
    assert record.defer_at is None


def test_task_record_tolerates_null_note_and_tags():
    record = TaskRecord.from_dict({"id": "a", "name": "Bare", "note": None, "tags": None})
    assert record.note == ""
    assert record.tags == []


def test_project_tasks_only_serialized_when_loaded():
    assert "tasks" not in ProjectRecord.from_dict(project("p1", "A")).to_dict()
    assert ProjectRecord.from_dict(project("p1", "A", tasks=[])).to_dict()["tasks"] == []


def test_tool_result_content():
    assert ToolResult("ok").to_content() == {"content": [{"type": "text", "text": "ok"}], "isError": False}
    failed = ToolResult.error("Error: boom")
    assert failed.is_error
    assert failed.to_content()["isError"] is True
