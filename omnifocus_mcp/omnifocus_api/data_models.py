"""
Data models representing OmniFocus objects as returned by the record formatters,
plus the uniform result every tool call produces.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from .utils import parse_iso


@dataclass
class TaskRecord:
    id: str
    name: str
    note: str = ""
    completed: bool = False
    flagged: bool = False
    dueDate: Optional[str] = None
    deferDate: Optional[str] = None
    completionDate: Optional[str] = None
    creationDate: Optional[str] = None
    estimatedMinutes: Optional[int] = None
    project: Optional[str] = None
    tags: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TaskRecord":
        return cls(
            id=data["id"],
            name=data["name"],
            note=data.get("note") or "",
            completed=bool(data.get("completed", False)),
            flagged=bool(data.get("flagged", False)),
            dueDate=data.get("dueDate"),
            deferDate=data.get("deferDate"),
            completionDate=data.get("completionDate"),
            creationDate=data.get("creationDate"),
            estimatedMinutes=data.get("estimatedMinutes"),
            project=data.get("project"),
            tags=list(data.get("tags") or []),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "note": self.note,
            "completed": self.completed,
            "flagged": self.flagged,
            "dueDate": self.dueDate,
            "deferDate": self.deferDate,
            "completionDate": self.completionDate,
            "creationDate": self.creationDate,
            "estimatedMinutes": self.estimatedMinutes,
            "project": self.project,
            "tags": list(self.tags),
        }

    @property
    def due_at(self) -> Optional[datetime]:
        return parse_iso(self.dueDate)

    @property
    def defer_at(self) -> Optional[datetime]:
        return parse_iso(self.deferDate)

    @property
    def completed_at(self) -> Optional[datetime]:
        return parse_iso(self.completionDate)

    @property
    def created_at(self) -> Optional[datetime]:
        return parse_iso(self.creationDate)


@dataclass
class ProjectRecord:
    id: str
    name: str
    note: str = ""
    status: str = "active"
    sequential: bool = False
    dueDate: Optional[str] = None
    deferDate: Optional[str] = None
    folder: Optional[str] = None
    lastReviewDate: Optional[str] = None
    taskCount: int = 0
    completedTaskCount: int = 0
    tasks: Optional[List[Dict[str, Any]]] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProjectRecord":
        return cls(
            id=data["id"],
            name=data["name"],
            note=data.get("note") or "",
            status=data.get("status", "active"),
            sequential=bool(data.get("sequential", False)),
            dueDate=data.get("dueDate"),
            deferDate=data.get("deferDate"),
            folder=data.get("folder"),
            lastReviewDate=data.get("lastReviewDate"),
            taskCount=data.get("taskCount", 0),
            completedTaskCount=data.get("completedTaskCount", 0),
            tasks=data.get("tasks"),
        )

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "name": self.name,
            "note": self.note,
            "status": self.status,
            "sequential": self.sequential,
            "dueDate": self.dueDate,
            "deferDate": self.deferDate,
            "folder": self.folder,
            "lastReviewDate": self.lastReviewDate,
            "taskCount": self.taskCount,
            "completedTaskCount": self.completedTaskCount,
        }
        if self.tasks is not None:
            data["tasks"] = self.tasks
        return data

    @property
    def last_reviewed_at(self) -> Optional[datetime]:
        return parse_iso(self.lastReviewDate)


@dataclass
class FolderRecord:
    id: str
    name: str
    note: str = ""
    status: str = "active"
    parent: Optional[str] = None
    projectCount: int = 0
    folderCount: int = 0
    projects: List[str] = field(default_factory=list)
    folders: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FolderRecord":
        return cls(
            id=data["id"],
            name=data["name"],
            note=data.get("note") or "",
            status=data.get("status", "active"),
            parent=data.get("parent"),
            projectCount=data.get("projectCount", 0),
            folderCount=data.get("folderCount", 0),
            projects=list(data.get("projects") or []),
            folders=list(data.get("folders") or []),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "note": self.note,
            "status": self.status,
            "parent": self.parent,
            "projectCount": self.projectCount,
            "folderCount": self.folderCount,
            "projects": list(self.projects),
            "folders": list(self.folders),
        }


@dataclass
class TagRecord:
    id: str
    name: str
    taskCount: int = 0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TagRecord":
        return cls(id=data["id"], name=data["name"], taskCount=data.get("taskCount", 0))

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "taskCount": self.taskCount}


@dataclass
class ToolResult:
    """One text block for the caller plus the structured payload behind it."""

    text: str
    data: Any = None
    is_error: bool = False

    @classmethod
    def error(cls, text: str, data: Any = None) -> "ToolResult":
        return cls(text=text, data=data, is_error=True)

    def to_content(self) -> Dict[str, Any]:
        return {
            "content": [{"type": "text", "text": self.text}],
            "isError": self.is_error,
        }
