"""Projects, tags and the weekly review."""

from typing import Any, Dict, List, Optional

from ..omnifocus_api import renaming, search_filters
from ..omnifocus_api.data_models import ProjectRecord, TagRecord, ToolResult
from ..omnifocus_api.script_builder import (
    RECORD_HELPERS,
    assignment_lines,
    find_folder_script,
    find_project_script,
    json_return,
    list_records_script,
    not_found_return,
    optional_date,
    optional_literal,
    project_record_script,
    tag_record_script,
)
from ..omnifocus_api.utils import js_literal, plural
from ..utils.logger import get_logger
from .base import BaseService, dump_json, reports_errors

log = get_logger(__name__)


def generate_create_project_script(
    name: str,
    note: Optional[str] = None,
    folder: Optional[str] = None,
    sequential: bool = False,
    due_date: Optional[str] = None,
    defer_date: Optional[str] = None,
    tasks: Optional[List[Dict[str, Any]]] = None,
) -> str:
    script = f"var project = app.Project({{name: {js_literal(name)}}});\n"
    if folder:
        script += find_folder_script(folder) + f"""
if (folder === null) {{
  folder = app.Folder({{name: {js_literal(folder)}}});
  doc.folders.push(folder);
}}
folder.projects.push(project);
"""
    else:
        script += "doc.projects.push(project);\n"
    script += assignment_lines("project", [
        ("note", optional_literal(note)),
        ("sequential", "true" if sequential else None),
        ("dueDate", optional_date(due_date)),
        ("deferDate", optional_date(defer_date)),
    ])
    script += "\nvar createdTasks = [];\n"
    for index, task in enumerate(tasks or []):
        var = f"_task{index}"
        script += f"var {var} = app.Task({{name: {js_literal(task['name'])}}});\n"
        script += f"project.tasks.push({var});\n"
        lines = assignment_lines(var, [
            ("note", optional_literal(task.get("note"))),
            ("flagged", optional_literal(task.get("flagged"))),
            ("dueDate", optional_date(task.get("due_date"))),
            ("deferDate", optional_date(task.get("defer_date"))),
            ("estimatedMinutes", optional_literal(task.get("estimated_minutes"))),
        ])
        if lines:
            script += lines + "\n"
        script += f"createdTasks.push({var}.name());\n"
    script += json_return("{id: project.id(), name: project.name(), tasks: createdTasks}")
    return script


def generate_get_projects_script(status: str = "active", include_tasks: bool = False) -> str:
    skip = None if status == "all" else f"statusName(project) !== {js_literal(status)}"
    return list_records_script("project", project_record_script("project", include_tasks), "project", skip)


def generate_get_tags_script() -> str:
    return list_records_script("tag", tag_record_script("tag"), "tag")


def generate_mark_reviewed_script(project_id: str, now_iso: str, notes: Optional[str] = None) -> str:
    note_lines = ""
    if notes:
        note_lines = f"""
  var reviewDate = {js_literal(now_iso[:10])};
  project.note = (project.note() || "") + "\\n\\n--- Review " + reviewDate + " ---\\n" + {js_literal(notes)};"""
    return f"""{RECORD_HELPERS}
{find_project_script(project_id)}
if (project === null) {{
  {not_found_return("Project", js_literal(project_id))}
}} else {{
  project.lastReviewDate = new Date({js_literal(now_iso)});{note_lines}
  {json_return("{id: project.id(), name: project.name(), lastReviewDate: isoDate(project.lastReviewDate())}")}
}}
"""


class ProjectService(BaseService):

    @reports_errors("creating project")
    def create_project(
        self,
        name: str,
        note: Optional[str] = None,
        folder: Optional[str] = None,
        sequential: bool = False,
        due_date: Optional[str] = None,
        defer_date: Optional[str] = None,
        tasks: Optional[List[Dict[str, Any]]] = None,
    ) -> ToolResult:
        script = generate_create_project_script(name, note, folder, sequential, due_date, defer_date, tasks)
        created = self.bridge.execute_checked(script)
        text = f'Project created successfully: "{created["name"]}"'
        added = created.get("tasks") or []
        if added:
            text += f"\nAdded {plural(len(added), 'task')}: {', '.join(added)}"
        return ToolResult(text, created)

    def _load_projects(self, status: str, include_tasks: bool = False) -> List[ProjectRecord]:
        raw = self.bridge.execute_and_parse(generate_get_projects_script(status, include_tasks))
        return [ProjectRecord.from_dict(item) for item in raw]

    @reports_errors("retrieving projects")
    def get_projects(self, folder: Optional[str] = None, status: str = "active") -> ToolResult:
        projects = [
            p for p in self._load_projects(status)
            if (status == "all" or p.status == status) and (not folder or p.folder == folder)
        ]
        data = [p.to_dict() for p in projects]
        return ToolResult(f"Found {plural(len(data), 'project')}:\n{dump_json(data)}", data)

    def _load_tags(self) -> List[TagRecord]:
        return [TagRecord.from_dict(item) for item in self.bridge.execute_and_parse(generate_get_tags_script())]

    @reports_errors("retrieving tags")
    def get_tags(self) -> ToolResult:
        data = [t.to_dict() for t in self._load_tags()]
        return ToolResult(f"Found {plural(len(data), 'tag')}:\n{dump_json(data)}", data)

    @reports_errors("updating tag names")
    def update_tag_names(self, dry_run: bool = False) -> ToolResult:
        """Strip emojis from tag names, merging into an existing tag on collision."""
        tags = self._load_tags()
        decisions = renaming.plan_emoji_renames((t.id, t.name) for t in tags)
        if not decisions:
            return ToolResult("Updated 0 tags:\n", [])

        script = renaming.apply_renames_script("tag", decisions, dry_run, renaming.TAG_MERGE_SCRIPT)
        response = self.bridge.execute_and_parse(script)
        outcome = {r["id"]: r for r in response.get("results", [])}

        lines = []
        data = []
        for decision in decisions:
            result = outcome.get(decision.id, {"ok": False, "error": "no result reported"})
            old, new = decision.old_name, decision.new_name
            if not result.get("ok"):
                lines.append(f"Failed to update tag '{old}': {result.get('error')}")
            elif decision.action == renaming.MERGE:
                verb = "Would merge" if dry_run else "Merged"
                lines.append(f"{verb} tag '{old}' into existing tag '{new}'")
            else:
                verb = "Would rename" if dry_run else "Renamed"
                lines.append(f"{verb} tag '{old}' to '{new}'")
            data.append(dict(decision.to_dict(), ok=bool(result.get("ok")), error=result.get("error")))
        if not dry_run:
            log.info("Applied %d tag name change(s)", len(decisions))
        return ToolResult(f"Updated {plural(len(decisions), 'tag')}:\n" + "\n".join(lines), data)

    @reports_errors("retrieving projects for review")
    def get_projects_for_review(self, review_interval_days: float = 7) -> ToolResult:
        projects = self._load_projects("active", include_tasks=True)
        candidates = search_filters.projects_needing_review(projects, self.clock(), review_interval_days)
        if not candidates:
            return ToolResult("No projects need review!", [])

        out = f"Found {plural(len(candidates), 'project')} for review:\n\n"
        for c in candidates:
            out += c.project.name
            if c.project.folder:
                out += f" ({c.project.folder})"
            out += "\n"
            if c.never_reviewed:
                out += "  Never reviewed\n"
            else:
                out += f"  Last reviewed: {c.days_since_review} days ago\n"
            out += f"  Tasks: {c.total} total, {c.completed} completed"
            if c.overdue:
                out += f", {c.overdue} overdue"
            out += "\n\n"
        return ToolResult(out, [c.to_dict() for c in candidates])

    @reports_errors("marking project reviewed")
    def mark_project_reviewed(self, project_id: str, notes: Optional[str] = None) -> ToolResult:
        script = generate_mark_reviewed_script(project_id, self.clock().isoformat(), notes)
        reviewed = self.bridge.execute_checked(script)
        return ToolResult(f'Project marked as reviewed: "{reviewed["name"]}"', reviewed)
