"""
Task operations: listing, creation (single, batch, recurring), updates,
completion, deletion, search and the bulk defer/organize helpers.
"""

from typing import Any, Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError

from ..omnifocus_api import search_filters
from ..omnifocus_api.data_models import TaskRecord, ToolResult
from ..omnifocus_api.errors import LogicalNotFoundError, OmniFocusError
from ..omnifocus_api.script_builder import (
    RECORD_HELPERS,
    assignment_lines,
    find_or_create_project_script,
    find_or_create_tag_script,
    find_project_script,
    find_task_script,
    js_date,
    json_return,
    list_records_script,
    not_found_return,
    optional_date,
    optional_literal,
    task_record_script,
)
from ..omnifocus_api.utils import js_literal, plural
from ..tool_schemas import CreateTaskArgs, to_validation_error
from ..utils.logger import get_logger
from .base import BaseService, date_string, dump_json, reports_errors

log = get_logger(__name__)

RRULE_FREQUENCIES = {
    "daily": "DAILY",
    "weekly": "WEEKLY",
    "monthly": "MONTHLY",
    "yearly": "YEARLY",
}

RRULE_DAYS = {
    "sunday": "SU",
    "monday": "MO",
    "tuesday": "TU",
    "wednesday": "WE",
    "thursday": "TH",
    "friday": "FR",
    "saturday": "SA",
}

REPETITION_METHODS = {
    "due_date": "fixed repetition",
    "completion_date": "start after completion",
}


def build_rrule(repeat_rule: Dict[str, Any]) -> str:
    """``{"frequency": "weekly", "interval": 2, "days_of_week": ["monday"]}``
    becomes ``FREQ=WEEKLY;INTERVAL=2;BYDAY=MO``.
    """
    frequency = repeat_rule["frequency"]
    parts = [
        f"FREQ={RRULE_FREQUENCIES[frequency]}",
        f"INTERVAL={int(repeat_rule.get('interval') or 1)}",
    ]
    days = repeat_rule.get("days_of_week") or []
    if frequency == "weekly" and days:
        parts.append("BYDAY=" + ",".join(RRULE_DAYS[d] for d in days))
    return ";".join(parts)


def assign_tags_script(task_var: str, tags: List[str], actions_var: Optional[str] = None) -> str:
    """Find-or-create each tag and add it to the task."""
    record = f'\n  {actions_var}.push("added tag: " + _tagNames[_t]);' if actions_var else ""
    return f"""
var _tagNames = {js_literal(list(tags))};
for (var _t = 0; _t < _tagNames.length; _t++) {{
{find_or_create_tag_script("_tagNames[_t]", "tag")}
  app.add(tag, {{to: {task_var}.tags}});{record}
}}
"""


def placement_script(project: Optional[str]) -> str:
    """Put ``task`` into *project* (created if missing) or the inbox."""
    if project:
        return find_or_create_project_script(project) + "project.tasks.push(task);\n"
    return "doc.inboxTasks.push(task);\n"


def generate_get_tasks_script(completed: bool = False) -> str:
    return list_records_script(
        "task", task_record_script("task"), "task", skip_condition=f"task.completed() !== {js_literal(completed)}"
    )


def generate_search_tasks_script(include_completed: bool = False) -> str:
    return list_records_script(
        "task", task_record_script("task"), "task", skip_condition=None if include_completed else "task.completed()"
    )


def generate_create_task_script(
    name: str,
    note: Optional[str] = None,
    project: Optional[str] = None,
    tags: Optional[List[str]] = None,
    due_date: Optional[str] = None,
    defer_date: Optional[str] = None,
    flagged: Optional[bool] = None,
    estimated_minutes: Optional[int] = None,
) -> str:
    script = f"var task = app.Task({{name: {js_literal(name)}}});\n"
    script += placement_script(project)
    script += assignment_lines("task", [
        ("note", optional_literal(note)),
        ("flagged", optional_literal(flagged)),
        ("estimatedMinutes", optional_literal(estimated_minutes)),
        ("dueDate", optional_date(due_date)),
        ("deferDate", optional_date(defer_date)),
    ])
    if tags:
        script += assign_tags_script("task", tags)
    script += "\n" + json_return("{id: task.id(), name: task.name()}")
    return script


def generate_update_task_script(
    task_id: str,
    name: Optional[str] = None,
    note: Optional[str] = None,
    flagged: Optional[bool] = None,
    due_date: Optional[str] = None,
    defer_date: Optional[str] = None,
) -> str:
    assignments = assignment_lines("task", [
        ("name", optional_literal(name)),
        ("note", optional_literal(note)),
        ("flagged", optional_literal(flagged)),
        ("dueDate", optional_date(due_date)),
        ("deferDate", optional_date(defer_date)),
    ])
    return f"""{find_task_script(task_id)}
if (task === null) {{
  {not_found_return("Task", js_literal(task_id))}
}} else {{
{assignments}
  {json_return("{id: task.id(), name: task.name()}")}
}}
"""


def generate_complete_task_script(task_id: str) -> str:
    return f"""{find_task_script(task_id)}
if (task === null) {{
  {not_found_return("Task", js_literal(task_id))}
}} else {{
  app.markComplete(task);
  {json_return("{id: task.id(), name: task.name()}")}
}}
"""


def generate_delete_task_script(task_id: str) -> str:
    return f"""{find_task_script(task_id)}
if (task === null) {{
  {not_found_return("Task", js_literal(task_id))}
}} else {{
  var taskName = task.name();
  var taskId = task.id();
  app.delete(task);
  {json_return("{id: taskId, name: taskName}")}
}}
"""


def generate_create_recurring_task_script(
    name: str,
    repeat_rule: Dict[str, Any],
    note: Optional[str] = None,
    project: Optional[str] = None,
    tags: Optional[List[str]] = None,
    first_due_date: Optional[str] = None,
) -> str:
    method = REPETITION_METHODS[repeat_rule.get("repeat_from") or "due_date"]
    script = f"var task = app.Task({{name: {js_literal(name)}}});\n"
    script += placement_script(project)
    script += assignment_lines("task", [
        ("note", optional_literal(note)),
        ("dueDate", optional_date(first_due_date)),
    ])
    script += (
        f"\ntask.repetitionRule = {{recurrence: {js_literal(build_rrule(repeat_rule))}, "
        f"repetitionMethod: {js_literal(method)}}};\n"
    )
    if tags:
        script += assign_tags_script("task", tags)
    script += "\n" + json_return("{id: task.id(), name: task.name()}")
    return script


def generate_defer_task_script(token: str, defer_to: str, adjust_due_dates: bool, now_iso: str) -> str:
    """Defer one task; with *adjust_due_dates* the due date moves by the same offset."""
    return f"""{RECORD_HELPERS}
{find_task_script(token)}
if (task === null) {{
  {not_found_return("Task", js_literal(token))}
}} else {{
  var now = {js_date(now_iso)};
  var newDefer = {js_date(defer_to)};
  var oldDefer = task.deferDate();
  var oldDue = task.dueDate();
  var newDue = null;
  task.deferDate = newDefer;
  if ({js_literal(adjust_due_dates)} && oldDue) {{
    newDue = new Date(oldDue.getTime() + (newDefer - (oldDefer || now)));
    task.dueDate = newDue;
  }}
  {json_return("{id: task.id(), name: task.name(), deferDate: isoDate(newDefer), dueDate: isoDate(newDue)}")}
}}
"""


def generate_organize_task_script(
    token: str,
    target_project: Optional[str] = None,
    add_tags: Optional[List[str]] = None,
    remove_tags: Optional[List[str]] = None,
) -> str:
    body = "var actions = [];\n"
    if target_project:
        body += find_project_script(target_project, "target") + f"""
if (target === null) {{
  actions.push("project not found: " + {js_literal(target_project)});
}} else {{
  app.move(task, {{to: target.tasks.end}});
  actions.push("moved to " + target.name());
}}
"""
    if add_tags:
        body += assign_tags_script("task", add_tags, actions_var="actions")
    if remove_tags:
        body += f"""
var _removeNames = {js_literal(list(remove_tags))};
var _taskTags = task.tags();
for (var _r = 0; _r < _taskTags.length; _r++) {{
  if (_removeNames.indexOf(_taskTags[_r].name()) !== -1) {{
    actions.push("removed tag: " + _taskTags[_r].name());
    app.remove(_taskTags[_r], {{from: task.tags}});
  }}
}}
"""
    return f"""{find_task_script(token)}
if (task === null) {{
  {not_found_return("Task", js_literal(token))}
}} else {{
{body}
  {json_return("{id: task.id(), name: task.name(), actions: actions}")}
}}
"""


class TaskService(BaseService):
    """Task operations against a live OmniFocus document."""

    def _load_tasks(self, script: str) -> List[TaskRecord]:
        return [TaskRecord.from_dict(item) for item in self.bridge.execute_and_parse(script)]

    @reports_errors("retrieving tasks")
    def get_tasks(
        self,
        completed: bool = False,
        flagged: Optional[bool] = None,
        project: Optional[str] = None,
        tag: Optional[str] = None,
        due_today: Optional[bool] = None,
        due_soon: Optional[bool] = None,
    ) -> ToolResult:
        tasks = self._load_tasks(generate_get_tasks_script(completed))
        tasks = search_filters.filter_tasks(
            tasks,
            self.clock(),
            completed=completed,
            flagged=flagged,
            project=project,
            tag=tag,
            due_today=due_today,
            due_soon=due_soon,
        )
        data = [t.to_dict() for t in tasks]
        return ToolResult(f"Found {plural(len(data), 'task')}:\n{dump_json(data)}", data)

    def _create(self, fields: Any) -> Dict[str, Any]:
        try:
            args = CreateTaskArgs.model_validate(fields)
        except PydanticValidationError as e:
            raise to_validation_error(e) from e
        created = self.bridge.execute_checked(generate_create_task_script(**args.model_dump()))
        log.info("Created task %s", created.get("id"))
        return created

    @reports_errors("creating task")
    def create_task(self, **fields) -> ToolResult:
        created = self._create(fields)
        return ToolResult(f'Task created successfully: "{created["name"]}"', created)

    def create_tasks_batch(self, tasks: List[Dict[str, Any]]) -> ToolResult:
        """Create each task in its own round trip. Failures never stop the batch."""
        lines = []
        data = []
        for item in tasks:
            label = item.get("name") if isinstance(item, dict) else item
            try:
                created = self._create(item)
            except OmniFocusError as e:
                lines.append(f'✗ Failed to create "{label}": {e}')
                data.append({"name": label, "success": False, "error": str(e)})
                continue
            lines.append(f"✓ Created: {created['name']}")
            data.append({"name": created["name"], "id": created.get("id"), "success": True})
        return ToolResult("Batch task creation results:\n" + "\n".join(lines), data)

    @reports_errors("updating task")
    def update_task(self, task_id: str, **fields) -> ToolResult:
        updated = self.bridge.execute_checked(generate_update_task_script(task_id, **fields))
        return ToolResult(f'Task updated successfully: "{updated["name"]}"', updated)

    @reports_errors("completing task")
    def complete_task(self, task_id: str) -> ToolResult:
        done = self.bridge.execute_checked(generate_complete_task_script(task_id))
        return ToolResult(f'Task completed: "{done["name"]}"', done)

    @reports_errors("deleting task")
    def delete_task(self, task_id: str) -> ToolResult:
        deleted = self.bridge.execute_checked(generate_delete_task_script(task_id))
        return ToolResult(f'Task deleted: "{deleted["name"]}"', deleted)

    @reports_errors("searching tasks")
    def search_tasks(
        self,
        query: str,
        include_completed: bool = False,
        date_range: Optional[Dict[str, Optional[str]]] = None,
        projects: Optional[List[str]] = None,
        tags: Optional[List[str]] = None,
    ) -> ToolResult:
        date_range = date_range or {}
        tasks = self._load_tasks(generate_search_tasks_script(include_completed))
        found = search_filters.search_tasks(
            tasks,
            query,
            include_completed=include_completed,
            date_start=date_range.get("start"),
            date_end=date_range.get("end"),
            projects=projects,
            tags=tags,
        )
        data = [t.to_dict() for t in found]
        return ToolResult(f'Found {plural(len(data), "task")} matching "{query}":\n{dump_json(data)}', data)

    @reports_errors("creating recurring task")
    def create_recurring_task(
        self,
        name: str,
        repeat_rule: Dict[str, Any],
        note: Optional[str] = None,
        project: Optional[str] = None,
        tags: Optional[List[str]] = None,
        first_due_date: Optional[str] = None,
    ) -> ToolResult:
        script = generate_create_recurring_task_script(
            name, repeat_rule, note=note, project=project, tags=tags, first_due_date=first_due_date
        )
        created = self.bridge.execute_checked(script)
        created["recurrence"] = build_rrule(repeat_rule)
        return ToolResult(
            f'Recurring task created successfully: "{created["name"]}" ({repeat_rule["frequency"]})', created
        )

    def defer_tasks(self, tasks: List[str], defer_to: str, adjust_due_dates: bool = False) -> ToolResult:
        lines = []
        data = []
        now_iso = self.clock().isoformat()
        for token in tasks:
            try:
                result = self.bridge.execute_checked(
                    generate_defer_task_script(token, defer_to, adjust_due_dates, now_iso)
                )
            except LogicalNotFoundError as e:
                lines.append(str(e))
                data.append({"task": token, "success": False, "error": str(e)})
                continue
            except OmniFocusError as e:
                lines.append(f'Failed to defer "{token}": {e}')
                data.append({"task": token, "success": False, "error": str(e)})
                continue
            line = f"{result['name']}: deferred to {date_string(result['deferDate'])}"
            if result.get("dueDate"):
                line += f", due date adjusted to {date_string(result['dueDate'])}"
            lines.append(line)
            data.append(dict(result, task=token, success=True))
        return ToolResult("Defer results:\n" + "\n".join(lines), data)

    def organize_tasks(
        self,
        tasks: List[str],
        target_project: Optional[str] = None,
        add_tags: Optional[List[str]] = None,
        remove_tags: Optional[List[str]] = None,
    ) -> ToolResult:
        lines = []
        data = []
        for token in tasks:
            script = generate_organize_task_script(token, target_project, add_tags, remove_tags)
            try:
                result = self.bridge.execute_checked(script)
            except LogicalNotFoundError as e:
                lines.append(str(e))
                data.append({"task": token, "success": False, "error": str(e)})
                continue
            except OmniFocusError as e:
                lines.append(f'Failed to organize "{token}": {e}')
                data.append({"task": token, "success": False, "error": str(e)})
                continue
            actions = result.get("actions") or []
            lines.append(f"{result['name']}: {', '.join(actions) if actions else 'no changes'}")
            data.append(dict(result, task=token, success=True))
        return ToolResult("Organization results:\n" + "\n".join(lines), data)
