"""Housekeeping: old completed tasks and the overdue report."""

from typing import List, Sequence

from ..omnifocus_api import search_filters
from ..omnifocus_api.data_models import TaskRecord, ToolResult
from ..omnifocus_api.script_builder import json_return, list_records_script, task_record_script
from ..omnifocus_api.utils import js_literal, plural
from ..utils.logger import get_logger
from .base import BaseService, date_string, reports_errors

log = get_logger(__name__)

FLAG = " 🚩"


def generate_list_tasks_script(completed: bool) -> str:
    skip = "!task.completed()" if completed else "task.completed()"
    return list_records_script("task", task_record_script("task"), "task", skip_condition=skip)


def generate_cleanup_script(task_ids: Sequence[str], action: str, dry_run: bool) -> str:
    """Archive (clear the flag) or delete the given tasks in one pass over the document."""
    return f"""var dryRun = {js_literal(dry_run)};
var action = {js_literal(action)};
var wanted = {{}};
var _ids = {js_literal(list(task_ids))};
for (var _w = 0; _w < _ids.length; _w++) {{
  wanted[_ids[_w]] = true;
}}
var processed = 0;
var results = [];
var _tasks = doc.flattenedTasks();
for (var _c = _tasks.length - 1; _c >= 0; _c--) {{
  var task = _tasks[_c];
  var taskId = task.id();
  if (!wanted[taskId]) continue;
  try {{
    if (!dryRun) {{
      if (action === "delete") {{
        app.delete(task);
      }} else {{
        task.flagged = false;
      }}
      processed++;
    }}
    results.push({{id: taskId, ok: true, error: null}});
  }} catch (e) {{
    results.push({{id: taskId, ok: false, error: String(e)}});
  }}
}}
{json_return("{dryRun: dryRun, processed: processed, results: results}")}
"""


class MaintenanceService(BaseService):

    def _load_tasks(self, completed: bool) -> List[TaskRecord]:
        raw = self.bridge.execute_and_parse(generate_list_tasks_script(completed))
        return [TaskRecord.from_dict(item) for item in raw]

    @reports_errors("cleaning up completed tasks")
    def cleanup_completed(self, older_than_days: float = 30, action: str = "archive", dry_run: bool = False) -> ToolResult:
        days = int(older_than_days) if float(older_than_days).is_integer() else older_than_days
        candidates = search_filters.cleanup_candidates(self._load_tasks(True), self.clock(), older_than_days)
        out = f"Found {len(candidates)} completed {'task' if len(candidates) == 1 else 'tasks'} older than {days} days\n"

        processed = 0
        failures = {}
        if candidates:
            response = self.bridge.execute_and_parse(
                generate_cleanup_script([t.id for t in candidates], action, dry_run)
            )
            processed = response.get("processed", 0)
            failures = {r["id"]: r.get("error") for r in response.get("results", []) if not r.get("ok")}

        if dry_run:
            out += "\nDRY RUN - No changes made. Tasks that would be affected:\n"
            for task in candidates:
                out += (
                    f"- {task.name} (completed {date_string(task.completionDate)}, "
                    f"project: {task.project or 'No project'})\n"
                )
        else:
            out += f"\nProcessed {plural(processed, 'task')} ({'deleted' if action == 'delete' else 'cleaned up'})"
            for task_id, error in failures.items():
                out += f"\nFailed to process {task_id}: {error}"
            log.info("Cleanup processed %d of %d task(s)", processed, len(candidates))

        data = {
            "found": len(candidates),
            "processed": processed,
            "dryRun": dry_run,
            "tasks": [t.to_dict() for t in candidates],
            "failures": failures,
        }
        return ToolResult(out, data)

    @reports_errors("retrieving overdue tasks")
    def get_overdue_tasks(self, group_by: str = "days_overdue", include_defer_dates: bool = False) -> ToolResult:
        overdue = search_filters.find_overdue(self._load_tasks(False), self.clock(), include_defer_dates)
        if not overdue:
            return ToolResult("No overdue tasks found!", [])

        out = f"Found {plural(len(overdue), 'overdue task')}:\n\n"
        if group_by == "days_overdue":
            for label, items in search_filters.group_overdue(overdue, group_by).items():
                out += f"Overdue by {label}:\n"
                for item in items:
                    project = f" ({item.task.project})" if item.task.project else ""
                    out += f"  - {item.task.name}{project}{FLAG if item.task.flagged else ''}\n"
                out += "\n"
        elif group_by == "project":
            for label, items in search_filters.group_overdue(overdue, group_by).items():
                out += f"{label}:\n"
                for item in items:
                    out += (
                        f"  - {item.task.name} ({search_filters.days_label(item.days_overdue)} overdue)"
                        f"{FLAG if item.task.flagged else ''}\n"
                    )
                out += "\n"
        else:
            for item in overdue:
                out += f"- {item.task.name} ({search_filters.days_label(item.days_overdue)} overdue)"
                if item.task.project:
                    out += f" - {item.task.project}"
                if item.task.flagged:
                    out += FLAG
                out += "\n"
        return ToolResult(out, [item.to_dict() for item in overdue])
