import json
from datetime import datetime, timezone

import pytest

from omnifocus_mcp.omnifocus_api.jxa_client import JXAExecutor, OmniFocusBridge

NOW = datetime(2025, 1, 15, 10, 0, 0, tzinfo=timezone.utc)


class FakeExecutor(JXAExecutor):
    """Records every snippet and answers from a queue instead of spawning osascript.

    Queued dicts and lists are JSON-encoded, strings are returned verbatim and
    exceptions are raised.
    """

    def __init__(self):
        super().__init__()
        self.scripts = []
        self.outputs = []

    def queue(self, *outputs):
        self.outputs.extend(outputs)
        return self

    def run(self, script):
        self.scripts.append(script)
        if not self.outputs:
            raise AssertionError("unexpected osascript call:\n" + script)
        output = self.outputs.pop(0)
        if isinstance(output, Exception):
            raise output
        if isinstance(output, str):
            return output
        return json.dumps(output)


def task(id, name, **fields):
    record = {
        "id": id,
        "name": name,
        "note": "",
        "completed": False,
        "flagged": False,
        "dueDate": None,
        "deferDate": None,
        "completionDate": None,
        "creationDate": None,
        "estimatedMinutes": None,
        "project": None,
        "tags": [],
    }
    record.update(fields)
    return record


def project(id, name, **fields):
    record = {
        "id": id,
        "name": name,
        "note": "",
        "status": "active",
        "sequential": False,
        "dueDate": None,
        "deferDate": None,
        "folder": None,
        "lastReviewDate": None,
        "taskCount": 0,
        "completedTaskCount": 0,
    }
    record.update(fields)
    return record


def folder(id, name, **fields):
    record = {
        "id": id,
        "name": name,
        "note": "",
        "status": "active",
        "parent": None,
        "projectCount": 0,
        "folderCount": 0,
        "projects": [],
        "folders": [],
    }
    record.update(fields)
    return record


@pytest.fixture
def fake_executor():
    return FakeExecutor()


@pytest.fixture
def bridge(fake_executor):
    return OmniFocusBridge(fake_executor)


@pytest.fixture
def clock():
    return lambda: NOW
