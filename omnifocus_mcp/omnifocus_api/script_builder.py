"""
Reusable JXA snippet fragments: finders, record formatters and small helpers.

Every function here is pure. Caller-supplied values are always encoded with
:func:`js_literal`; expressions passed as ``*_expr`` arguments are trusted JS
produced by other builders (a literal or a loop variable name).
"""

from typing import Any, Dict, Iterable, Optional

from .utils import js_literal

ENTITY_COLLECTIONS: Dict[str, str] = {
    "task": "doc.flattenedTasks()",
    "project": "doc.flattenedProjects()",
    "folder": "doc.flattenedFolders()",
    "tag": "doc.flattenedTags()",
}

RECORD_HELPERS = """
function isoDate(d) {
  return d ? d.toISOString() : null;
}
function folderName(c) {
  try {
    return c && c.class() === 'folder' ? c.name() : null;
  } catch (e) {
    return null;
  }
}
function statusName(o) {
  var s = String(o.status()).replace(/ status$/, '');
  return s === 'done' ? 'completed' : s;
}
function tagNames(o) {
  return o.tags().map(function (t) { return t.name(); });
}
"""


def json_return(expr: str) -> str:
    """Final statement of every snippet: its value is what osascript prints."""
    return f"JSON.stringify({expr});"


def error_return(message_expr: str) -> str:
    return json_return(f"{{error: {message_expr}}}")


def not_found_return(label: str, token_expr: str) -> str:
    return error_return(f"{js_literal(label + ' not found: ')} + {token_expr}")


def js_date(value: str) -> str:
    return f"new Date({js_literal(value)})"


def find_entity_script(kind: str, token_expr: str, var_name: Optional[str] = None) -> str:
    """Bind *var_name* to the entity whose id equals the token, else the first
    entity whose name equals it, else ``null``.

    One linear pass over the flattened collection: an id match ends the scan,
    a name match is remembered as the fallback.
    """
    var_name = var_name or kind
    collection = ENTITY_COLLECTIONS[kind]
    items = f"_{var_name}Items"
    index = f"_{var_name}Index"
    by_name = f"_{var_name}ByName"
    token = f"_{var_name}Token"
    return f"""
var {token} = {token_expr};
var {items} = {collection};
var {var_name} = null;
var {by_name} = null;
for (var {index} = 0; {index} < {items}.length; {index}++) {{
  if ({items}[{index}].id() === {token}) {{
    {var_name} = {items}[{index}];
    break;
  }}
  if ({by_name} === null && {items}[{index}].name() === {token}) {{
    {by_name} = {items}[{index}];
  }}
}}
if ({var_name} === null) {{
  {var_name} = {by_name};
}}
"""


def find_task_script(identifier: str, var_name: str = "task") -> str:
    return find_entity_script("task", js_literal(identifier), var_name)


def find_project_script(identifier: str, var_name: str = "project") -> str:
    return find_entity_script("project", js_literal(identifier), var_name)


def find_folder_script(identifier: str, var_name: str = "folder") -> str:
    return find_entity_script("folder", js_literal(identifier), var_name)


def find_tag_script(identifier: str, var_name: str = "tag") -> str:
    return find_entity_script("tag", js_literal(identifier), var_name)


def find_or_create_tag_script(name_expr: str, var_name: str = "tag") -> str:
    """Bind *var_name* to the tag named by *name_expr*, creating it at top level if absent."""
    lookup = f"_{var_name}Lookup"
    index = f"_{var_name}LookupIndex"
    return f"""
var {lookup} = doc.flattenedTags();
var {var_name} = null;
for (var {index} = 0; {index} < {lookup}.length; {index}++) {{
  if ({lookup}[{index}].name() === {name_expr}) {{
    {var_name} = {lookup}[{index}];
    break;
  }}
}}
if ({var_name} === null) {{
  {var_name} = app.Tag({{name: {name_expr}}});
  doc.tags.push({var_name});
}}
"""


def find_or_create_project_script(name: str, var_name: str = "project") -> str:
    """Find a project by id-or-name; create it at top level when missing."""
    return find_project_script(name, var_name) + f"""
if ({var_name} === null) {{
  {var_name} = app.Project({{name: {js_literal(name)}}});
  doc.projects.push({var_name});
}}
"""


def task_record_script(var: str = "task") -> str:
    return f"""{{
  id: {var}.id(),
  name: {var}.name(),
  note: {var}.note() || "",
  completed: {var}.completed(),
  flagged: {var}.flagged(),
  dueDate: isoDate({var}.dueDate()),
  deferDate: isoDate({var}.deferDate()),
  completionDate: isoDate({var}.completionDate()),
  creationDate: isoDate({var}.creationDate()),
  estimatedMinutes: {var}.estimatedMinutes() || null,
  project: {var}.containingProject() ? {var}.containingProject().name() : null,
  tags: tagNames({var})
}}"""


def project_record_script(var: str = "project", include_tasks: bool = False) -> str:
    tasks_field = ""
    if include_tasks:
        tasks_field = f""",
  tasks: {var}.tasks().map(function (t) {{
    return {{completed: t.completed(), dueDate: isoDate(t.dueDate())}};
  }})"""
    return f"""{{
  id: {var}.id(),
  name: {var}.name(),
  note: {var}.note() || "",
  status: statusName({var}),
  sequential: {var}.sequential(),
  dueDate: isoDate({var}.dueDate()),
  deferDate: isoDate({var}.deferDate()),
  folder: folderName({var}.container()),
  lastReviewDate: isoDate({var}.lastReviewDate()),
  taskCount: {var}.tasks().length,
  completedTaskCount: {var}.tasks().filter(function (t) {{ return t.completed(); }}).length{tasks_field}
}}"""


def folder_record_script(var: str = "folder") -> str:
    return f"""{{
  id: {var}.id(),
  name: {var}.name(),
  note: {var}.note() || "",
  status: statusName({var}),
  parent: folderName({var}.container()),
  projectCount: {var}.projects().length,
  folderCount: {var}.folders().length,
  projects: {var}.projects().map(function (p) {{ return p.name(); }}),
  folders: {var}.folders().map(function (f) {{ return f.name(); }})
}}"""


def tag_record_script(var: str = "tag") -> str:
    return f"""{{
  id: {var}.id(),
  name: {var}.name(),
  taskCount: {var}.tasks().length
}}"""


def list_records_script(kind: str, record_script: str, var_name: str, skip_condition: Optional[str] = None) -> str:
    """Snippet returning ``[record, ...]`` for every entity of *kind*.

    *skip_condition* is a JS boolean expression over *var_name*; matching
    entities are left out before they are formatted.
    """
    skip = f"  if ({skip_condition}) continue;\n" if skip_condition else ""
    return f"""{RECORD_HELPERS}
var _items = {ENTITY_COLLECTIONS[kind]};
var result = [];
for (var _i = 0; _i < _items.length; _i++) {{
  var {var_name} = _items[_i];
{skip}  result.push({record_script});
}}
{json_return("result")}
"""


def assignment_lines(var: str, assignments: Iterable[tuple]) -> str:
    """Render ``var.prop = value;`` lines, skipping pairs whose value is None.

    Each pair is ``(property, js_expression_or_None)``.
    """
    lines = []
    for prop, expr in assignments:
        if expr is None:
            continue
        lines.append(f"{var}.{prop} = {expr};")
    return "\n".join(lines)


def optional_literal(value: Any) -> Optional[str]:
    return None if value is None else js_literal(value)


def optional_date(value: Optional[str]) -> Optional[str]:
    return None if value is None else js_date(value)
