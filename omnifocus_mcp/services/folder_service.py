"""Folder listing, creation, renaming and deletion."""

from typing import List, Optional

from ..omnifocus_api import renaming
from ..omnifocus_api.data_models import FolderRecord, ToolResult
from ..omnifocus_api.script_builder import (
    RECORD_HELPERS,
    find_folder_script,
    folder_record_script,
    json_return,
    list_records_script,
    not_found_return,
)
from ..omnifocus_api.utils import js_literal
from ..utils.logger import get_logger
from .base import BaseService, reports_errors

log = get_logger(__name__)


def generate_get_folders_script(status: str = "active") -> str:
    skip = None if status == "all" else f"statusName(folder) !== {js_literal(status)}"
    return list_records_script("folder", folder_record_script("folder"), "folder", skip)


def generate_create_folder_script(name: str, note: Optional[str] = None, parent_folder: Optional[str] = None) -> str:
    container = "parent" if parent_folder else "doc"
    body = f"var folder = app.Folder({{name: {js_literal(name)}}});\n{container}.folders.push(folder);\n"
    if note is not None:
        body += f"folder.note = {js_literal(note)};\n"
    body += json_return(folder_record_script("folder"))
    if not parent_folder:
        return f"{RECORD_HELPERS}\n{body}\n"
    return f"""{RECORD_HELPERS}
{find_folder_script(parent_folder, "parent")}
if (parent === null) {{
  {not_found_return("Parent folder", js_literal(parent_folder))}
}} else {{
{body}
}}
"""


def generate_update_folder_name_script(folder_id: str, name: str) -> str:
    return f"""{find_folder_script(folder_id)}
if (folder === null) {{
  {not_found_return("Folder", js_literal(folder_id))}
}} else {{
  var oldName = folder.name();
  folder.name = {js_literal(name)};
  {json_return("{id: folder.id(), oldName: oldName, newName: folder.name()}")}
}}
"""


def generate_delete_folder_script(folder_id: str) -> str:
    return f"""{find_folder_script(folder_id)}
if (folder === null) {{
  {not_found_return("Folder", js_literal(folder_id))}
}} else {{
  var folderName = folder.name();
  var folderId = folder.id();
  app.delete(folder);
  {json_return("{id: folderId, name: folderName}")}
}}
"""


class FolderService(BaseService):

    def _load_folders(self, status: str) -> List[FolderRecord]:
        raw = self.bridge.execute_and_parse(generate_get_folders_script(status))
        return [FolderRecord.from_dict(item) for item in raw]

    @reports_errors("retrieving folders")
    def get_folders(self, status: str = "active") -> ToolResult:
        folders = [f for f in self._load_folders(status) if status == "all" or f.status == status]
        blocks = [
            f"• {f.name} (ID: {f.id})\n  Status: {f.status}\n  Projects: {f.projectCount}\n  Notes: {f.note or 'None'}"
            for f in folders
        ]
        text = f"Found {len(folders)} folders:\n\n" + "\n\n".join(blocks)
        return ToolResult(text, [f.to_dict() for f in folders])

    @reports_errors("creating folder")
    def create_folder(self, name: str, note: Optional[str] = None, parent_folder: Optional[str] = None) -> ToolResult:
        created = self.bridge.execute_checked(generate_create_folder_script(name, note, parent_folder))
        return ToolResult(f'Successfully created folder "{created["name"]}" (ID: {created["id"]})', created)

    @reports_errors("updating folder name")
    def update_folder_name(self, folder_id: str, name: str) -> ToolResult:
        result = self.bridge.execute_checked(generate_update_folder_name_script(folder_id, name))
        return ToolResult(
            f'Successfully renamed folder from "{result["oldName"]}" to "{result["newName"]}" (ID: {result["id"]})',
            result,
        )

    @reports_errors("deleting folder")
    def delete_folder(self, folder_id: str) -> ToolResult:
        result = self.bridge.execute_checked(generate_delete_folder_script(folder_id))
        return ToolResult(f'Successfully deleted folder "{result["name"]}" (ID: {result["id"]})', result)

    @reports_errors("removing emojis from folder names")
    def remove_emojis_from_folder_names(self, dry_run: bool = False) -> ToolResult:
        """Strip emojis from every folder name.

        A folder whose cleaned name is already taken is merged: its projects and
        sub-folders move into the existing folder and it is deleted.
        """
        folders = self._load_folders("all")
        decisions = renaming.plan_emoji_renames((f.id, f.name) for f in folders)
        if not decisions:
            return ToolResult("No folders with emojis found.", [])

        script = renaming.apply_renames_script("folder", decisions, dry_run, renaming.FOLDER_MERGE_SCRIPT)
        response = self.bridge.execute_and_parse(script)
        outcome = {r["id"]: r for r in response.get("results", [])}

        lines = []
        data = []
        for decision in decisions:
            result = outcome.get(decision.id, {"ok": False, "error": "no result reported"})
            line = f'• "{decision.old_name}" → "{decision.new_name}" (ID: {decision.id})'
            if decision.action == renaming.MERGE:
                line += " [merged into existing folder]"
            if not result.get("ok"):
                line += f" failed: {result.get('error')}"
            lines.append(line)
            data.append(dict(decision.to_dict(), ok=bool(result.get("ok")), error=result.get("error")))

        action = "would be renamed" if dry_run else "were renamed"
        if not dry_run:
            log.info("Applied %d folder name change(s)", len(decisions))
        return ToolResult(f"{len(decisions)} folders {action}:\n\n" + "\n".join(lines), data)
