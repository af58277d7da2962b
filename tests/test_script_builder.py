from omnifocus_mcp.omnifocus_api.script_builder import (
    find_entity_script,
    find_folder_script,
    find_project_script,
    find_tag_script,
    find_task_script,
    list_records_script,
    task_record_script,
)
from omnifocus_mcp.omnifocus_api.utils import js_literal
from omnifocus_mcp.services.folder_service import generate_create_folder_script
from omnifocus_mcp.services.project_service import generate_create_project_script
from omnifocus_mcp.services.task_service import (
    generate_create_task_script,
    generate_get_tasks_script,
    generate_update_task_script,
)


def test_js_literal_escapes_everything():
    assert js_literal("🔥") == '"\\ud83d\\udd25"'
    assert js_literal(None) == "null"
    assert js_literal(True) == "true"
    assert js_literal(["a", 1]) == '["a", 1]'


def test_builders_are_deterministic():
    kwargs = dict(name="Write report", project="Work", tags=["deep", "focus"], due_date="2025-01-20")
    assert generate_create_task_script(**kwargs) == generate_create_task_script(**kwargs)


def test_caller_text_only_appears_as_a_literal():
    name = 'x"); app.quit(); ("'
    script = generate_create_task_script(name)
    assert js_literal(name) in script
    assert 'x");' not in script


def test_absent_fields_emit_no_assignment():
    script = generate_create_task_script("Plain")
    for prop in ("note", "flagged", "dueDate", "deferDate", "estimatedMinutes"):
        assert f"task.{prop} =" not in script
    assert "doc.inboxTasks.push(task);" in script
    assert "app.add(tag" not in script


def test_supplied_fields_are_assigned():
    script = generate_create_task_script(
        "Call", note="re: invoice", flagged=True, estimated_minutes=15, due_date="2025-01-20", tags=["phone"]
    )
    assert 'task.note = "re: invoice";' in script
    assert "task.flagged = true;" in script
    assert "task.estimatedMinutes = 15;" in script
    assert 'task.dueDate = new Date("2025-01-20");' in script
    assert "app.add(tag, {to: task.tags});" in script


def test_update_only_touches_given_fields():
    script = generate_update_task_script("abc", flagged=False)
    assert "task.flagged = false;" in script
    assert "task.name =" not in script
    assert "task.dueDate =" not in script
    assert '"Task not found: "' in script


def test_finder_prefers_identifier_and_stops_on_it():
    script = find_task_script("abc")
    assert script.index(".id() === _taskToken") < script.index(".name() === _taskToken")
    assert "break;" in script
    assert "task = _taskByName;" in script


def test_finders_do_not_share_loop_variables():
    source = find_entity_script("tag", "item.id", "source")
    target = find_entity_script("tag", "item.targetId", "target")
    assert "_sourceIndex" in source and "_sourceIndex" not in target
    assert "_targetIndex" in target


def test_snippets_end_with_json_stringify():
    scripts = [
        generate_get_tasks_script(),
        generate_create_task_script("A"),
        generate_create_project_script("P", tasks=[{"name": "T"}]),
        generate_create_folder_script("F"),
        list_records_script("task", task_record_script("task"), "task"),
    ]
    for script in scripts:
        tail = script[script.rindex("JSON.stringify("):]
        assert tail.rstrip().endswith(");")
        assert "\nvar " not in tail


def test_get_tasks_pushes_completed_prefilter():
    assert "task.completed() !== false" in generate_get_tasks_script()
    assert "task.completed() !== true" in generate_get_tasks_script(completed=True)


def test_each_kind_scans_its_flattened_collection():
    assert "doc.flattenedProjects()" in find_project_script("Work")
    assert "doc.flattenedFolders()" in find_folder_script("Home")
    tag = find_tag_script("it's")
    assert "doc.flattenedTags()" in tag
    assert "var _tagToken = \"it's\";" in tag
