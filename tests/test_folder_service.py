import pytest
from conftest import folder

from omnifocus_mcp.services.folder_service import FolderService


@pytest.fixture
def service(bridge, clock):
    return FolderService(bridge, clock)


def test_get_folders_format(service, fake_executor):
    fake_executor.queue([
        folder("f1", "Work", projectCount=3, note="Day job"),
        folder("f2", "Home"),
    ])
    result = service.get_folders()
    assert result.text == (
        "Found 2 folders:\n\n"
        "• Work (ID: f1)\n  Status: active\n  Projects: 3\n  Notes: Day job\n\n"
        "• Home (ID: f2)\n  Status: active\n  Projects: 0\n  Notes: None"
    )


def test_create_folder_under_parent(service, fake_executor):
    fake_executor.queue(folder("f9", "Clients", parent="Work"))
    result = service.create_folder("Clients", parent_folder="Work")
    assert result.text == 'Successfully created folder "Clients" (ID: f9)'
    assert "parent.folders.push(folder);" in fake_executor.scripts[0]


def test_create_folder_missing_parent(service, fake_executor):
    fake_executor.queue({"error": "Parent folder not found: Nowhere"})
    result = service.create_folder("Clients", parent_folder="Nowhere")
    assert result.is_error
    assert result.text == "Error creating folder: Parent folder not found: Nowhere"


def test_create_top_level_folder(service, fake_executor):
    fake_executor.queue(folder("f3", "Archive"))
    service.create_folder("Archive")
    assert "doc.folders.push(folder);" in fake_executor.scripts[0]


def test_update_folder_name(service, fake_executor):
    fake_executor.queue({"id": "f1", "oldName": "Wrk", "newName": "Work"})
    result = service.update_folder_name("Wrk", "Work")
    assert result.text == 'Successfully renamed folder from "Wrk" to "Work" (ID: f1)'


def test_delete_folder(service, fake_executor):
    fake_executor.queue({"id": "f1", "name": "Old"})
    assert service.delete_folder("f1").text == 'Successfully deleted folder "Old" (ID: f1)'
    assert "app.delete(folder);" in fake_executor.scripts[0]


def test_remove_emojis_nothing_to_do(service, fake_executor):
    fake_executor.queue([folder("f1", "Work")])
    assert service.remove_emojis_from_folder_names().text == "No folders with emojis found."
    assert len(fake_executor.scripts) == 1


def test_remove_emojis_merges_into_existing(service, fake_executor):
    fake_executor.queue(
        [folder("f1", "💼 Work"), folder("f2", "Work"), folder("f3", "🏠 Home")],
        {"dryRun": False, "results": [{"id": "f1", "ok": True, "error": None}, {"id": "f3", "ok": True, "error": None}]},
    )
    result = service.remove_emojis_from_folder_names()
    assert result.text == (
        "2 folders were renamed:\n\n"
        '• "💼 Work" → "Work" (ID: f1) [merged into existing folder]\n'
        '• "🏠 Home" → "Home" (ID: f3)'
    )
    script = fake_executor.scripts[1]
    assert "app.move(_movedProjects[_m], {to: target.projects.end});" in script
    assert [d["action"] for d in result.data] == ["merge", "rename"]


def test_remove_emojis_dry_run(service, fake_executor):
    fake_executor.queue(
        [folder("f3", "🏠 Home")],
        {"dryRun": True, "results": [{"id": "f3", "ok": True, "error": None}]},
    )
    result = service.remove_emojis_from_folder_names(dry_run=True)
    assert result.text.startswith("1 folders would be renamed:")
    assert fake_executor.scripts[1].startswith("var dryRun = true;")
