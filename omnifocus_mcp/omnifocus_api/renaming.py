"""
Emoji clean-up planning for tag and folder names.

The plan is computed in Python from a snapshot of ``(id, name)`` pairs and is
the same whether or not it is applied afterwards.
"""

import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .script_builder import find_entity_script, json_return
from .utils import js_literal

EMOJI_RANGES: Tuple[Tuple[int, int], ...] = (
    (0x1F600, 0x1F64F),
    (0x1F300, 0x1F5FF),
    (0x1F680, 0x1F6FF),
    (0x1F1E0, 0x1F1FF),
    (0x2600, 0x26FF),
    (0x2700, 0x27BF),
    (0x1F900, 0x1F9FF),
    (0x1F018, 0x1F270),
    (0x238C, 0x2454),
    (0x20D0, 0x20FF),
    (0xFE00, 0xFE0F),
)

EMOJI_PATTERN = re.compile("[" + "".join(f"{chr(lo)}-{chr(hi)}" for lo, hi in EMOJI_RANGES) + "]")

RENAME = "rename"
MERGE = "merge"


def strip_emoji(text: str) -> str:
    """Remove characters in the emoji ranges, then trim surrounding whitespace."""
    return EMOJI_PATTERN.sub("", text).strip()


@dataclass
class RenameDecision:
    id: str
    old_name: str
    new_name: str
    action: str
    target_id: Optional[str] = None

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "oldName": self.old_name,
            "newName": self.new_name,
            "action": self.action,
            "targetId": self.target_id,
        }


def plan_emoji_renames(entities: Iterable[Tuple[str, str]]) -> List[RenameDecision]:
    """Decide, in traversal order, which entities to rename and which to merge.

    Each decision is taken against the names as they stand after the earlier
    decisions: a renamed entity answers to its new name and a merged entity no
    longer exists. A stripped name that collides with another live entity's
    name merges into that entity.
    """
    entities = list(entities)
    live: Dict[str, str] = dict(entities)
    decisions = []

    for entity_id, name in entities:
        if entity_id not in live:
            continue
        new_name = strip_emoji(name)
        if not new_name or new_name == name:
            continue

        target_id = None
        for other_id, other_name in live.items():
            if other_id != entity_id and other_name == new_name:
                target_id = other_id
                break

        if target_id is None:
            live[entity_id] = new_name
            decisions.append(RenameDecision(entity_id, name, new_name, RENAME))
        else:
            del live[entity_id]
            decisions.append(RenameDecision(entity_id, name, new_name, MERGE, target_id))
    return decisions


TAG_MERGE_SCRIPT = """
var _moved = source.tasks();
for (var _m = 0; _m < _moved.length; _m++) {
  app.add(target, {to: _moved[_m].tags});
  app.remove(source, {from: _moved[_m].tags});
}
app.delete(source);
"""

FOLDER_MERGE_SCRIPT = """
var _movedProjects = source.projects();
for (var _m = 0; _m < _movedProjects.length; _m++) {
  app.move(_movedProjects[_m], {to: target.projects.end});
}
var _movedFolders = source.folders();
for (var _n = 0; _n < _movedFolders.length; _n++) {
  app.move(_movedFolders[_n], {to: target.folders.end});
}
app.delete(source);
"""


def apply_renames_script(kind: str, decisions: Sequence[RenameDecision], dry_run: bool, merge_script: str) -> str:
    """One snippet applying every decision, each in its own try/catch.

    With ``dryRun`` set the entities are still resolved but nothing changes.
    Prints ``{dryRun, results: [{id, ok, error}]}``.
    """
    plan = [d.to_dict() for d in decisions]
    label = kind.capitalize()
    return f"""var dryRun = {js_literal(dry_run)};
var plan = {js_literal(plan)};
var results = [];
for (var _p = 0; _p < plan.length; _p++) {{
  var item = plan[_p];
  try {{
{find_entity_script(kind, "item.id", "source")}
    if (source === null) {{
      results.push({{id: item.id, ok: false, error: {js_literal(label + " not found: ")} + item.id}});
      continue;
    }}
    if (item.action === "merge") {{
{find_entity_script(kind, "item.targetId", "target")}
      if (target === null) {{
        results.push({{id: item.id, ok: false, error: {js_literal(label + " not found: ")} + item.targetId}});
        continue;
      }}
      if (!dryRun) {{
{merge_script}
      }}
    }} else if (!dryRun) {{
      source.name = item.newName;
    }}
    results.push({{id: item.id, ok: true, error: null}});
  }} catch (e) {{
    results.push({{id: item.id, ok: false, error: String(e)}});
  }}
}}
{json_return("{dryRun: dryRun, results: results}")}
"""
