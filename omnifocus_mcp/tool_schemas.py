"""Argument models for every tool, plus conversion of their validation errors."""

from __future__ import annotations

import re
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from dateutil.parser import isoparse
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from .omnifocus_api.errors import ValidationError

DATE_ONLY = re.compile(r"^\d{4}-\d{2}-\d{2}$")

DATE_LABELS = {
    "due_date": "due date",
    "defer_date": "defer date",
    "first_due_date": "first due date",
    "defer_to": "defer date",
    "start": "start date",
    "end": "end date",
}


def check_date(value: Optional[str], label: str) -> Optional[str]:
    """Accept ``YYYY-MM-DD`` (a real calendar date) or ISO-8601 with a time part."""
    if value is None:
        return value
    if isinstance(value, str):
        if DATE_ONLY.match(value):
            try:
                datetime.strptime(value, "%Y-%m-%d")
                return value
            except ValueError:
                pass
        elif "T" in value:
            try:
                isoparse(value)
                return value
            except ValueError:
                pass
    raise ValueError(f"Invalid {label} format. Use YYYY-MM-DD or YYYY-MM-DDTHH:mm:ss")


def require_name(value: Any, label: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"{label} name is required and must be a non-empty string")
    return value.strip()


def check_minutes(value: Any) -> Optional[int]:
    if value is None:
        return value
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise ValueError("Estimated minutes must be a positive number")
    return int(value)


def to_validation_error(error: PydanticValidationError) -> ValidationError:
    """Flatten a pydantic error into one readable :class:`ValidationError`."""
    messages = []
    for item in error.errors():
        msg = item.get("msg", "")
        if msg.startswith("Value error, "):
            messages.append(msg[len("Value error, "):])
            continue
        loc = ".".join(str(part) for part in item.get("loc", ()))
        messages.append(f"{loc}: {msg}" if loc else msg)
    return ValidationError("; ".join(messages))


class ArgsModel(BaseModel):
    model_config = ConfigDict(extra="ignore", use_enum_values=True, validate_default=True)

    @field_validator("due_date", "defer_date", "first_due_date", "defer_to", "start", "end", check_fields=False)
    @classmethod
    def _dates(cls, v, info):
        return check_date(v, DATE_LABELS[info.field_name])


class ItemStatus(str, Enum):
    active = "active"
    completed = "completed"
    dropped = "dropped"
    all = "all"


class Period(str, Enum):
    today = "today"
    week = "week"
    month = "month"
    year = "year"
    all = "all"


class StatisticsGroup(str, Enum):
    project = "project"
    tag = "tag"
    none = "none"


class OverdueGroup(str, Enum):
    project = "project"
    days_overdue = "days_overdue"
    priority = "priority"
    none = "none"


class Frequency(str, Enum):
    daily = "daily"
    weekly = "weekly"
    monthly = "monthly"
    yearly = "yearly"


class Weekday(str, Enum):
    sunday = "sunday"
    monday = "monday"
    tuesday = "tuesday"
    wednesday = "wednesday"
    thursday = "thursday"
    friday = "friday"
    saturday = "saturday"


class RepeatFrom(str, Enum):
    due_date = "due_date"
    completion_date = "completion_date"


class CleanupAction(str, Enum):
    archive = "archive"
    delete = "delete"


# --- tasks ---

class GetTasksArgs(ArgsModel):
    project: Optional[str] = Field(None, description="Filter by project name")
    tag: Optional[str] = Field(None, description="Filter by tag/context")
    completed: bool = Field(False, description="Include completed tasks")
    flagged: Optional[bool] = Field(None, description="Filter flagged tasks only")
    due_today: Optional[bool] = Field(None, description="Filter tasks due today")
    due_soon: Optional[bool] = Field(None, description="Filter tasks due within 7 days")


class CreateTaskArgs(ArgsModel):
    name: str = Field(..., description="Task name")
    note: Optional[str] = Field(None, description="Task note/description")
    project: Optional[str] = Field(None, description="Project name to add task to")
    tags: Optional[List[str]] = Field(None, description="Tags to assign to the task")
    due_date: Optional[str] = Field(
        None, description="Due date in ISO format (YYYY-MM-DD or YYYY-MM-DDTHH:mm:ss)"
    )
    defer_date: Optional[str] = Field(None, description="Defer date in ISO format")
    flagged: Optional[bool] = Field(None, description="Mark as flagged")
    estimated_minutes: Optional[int] = Field(None, description="Estimated time in minutes")

    @field_validator("name", mode="before")
    @classmethod
    def _name(cls, v):
        return require_name(v, "Task")

    @field_validator("estimated_minutes", mode="before")
    @classmethod
    def _minutes(cls, v):
        return check_minutes(v)


class CreateTasksBatchArgs(ArgsModel):
    tasks: List[Dict[str, Any]] = Field(
        ..., description="Array of tasks to create; each item takes the create_task fields"
    )


class UpdateTaskArgs(ArgsModel):
    task_id: str = Field(..., description="Task ID or name to update")
    name: Optional[str] = Field(None, description="New task name")
    note: Optional[str] = Field(None, description="New task note")
    flagged: Optional[bool] = Field(None, description="Update flagged status")
    due_date: Optional[str] = Field(None, description="New due date")
    defer_date: Optional[str] = Field(None, description="New defer date")

    @field_validator("task_id")
    @classmethod
    def _task_id(cls, v):
        if not v.strip():
            raise ValueError("Task ID is required and must be a non-empty string")
        return v

    @field_validator("name")
    @classmethod
    def _name(cls, v):
        if v is not None and not v.strip():
            raise ValueError("Task name must be a non-empty string")
        return v.strip() if v is not None else v


class TaskRefArgs(ArgsModel):
    task_id: str = Field(..., description="Task ID or name")


class DateRange(ArgsModel):
    start: Optional[str] = Field(None, description="Start date in ISO format")
    end: Optional[str] = Field(None, description="End date in ISO format")


class SearchTasksArgs(ArgsModel):
    query: str = Field(..., description="Search text in task names and notes")
    include_completed: bool = Field(False, description="Include completed tasks in search")
    date_range: Optional[DateRange] = Field(None, description="Filter by date range")
    projects: Optional[List[str]] = Field(None, description="Limit search to specific projects")
    tags: Optional[List[str]] = Field(None, description="Limit search to tasks with these tags")


class RepeatRule(ArgsModel):
    frequency: Frequency = Field(..., description="Repeat frequency")
    interval: int = Field(1, ge=1, description="Interval between repeats (e.g., 2 for every 2 weeks)")
    days_of_week: Optional[List[Weekday]] = Field(None, description="For weekly repeats, specific days")
    repeat_from: RepeatFrom = Field(RepeatFrom.due_date, description="Calculate next occurrence from")


class CreateRecurringTaskArgs(ArgsModel):
    name: str = Field(..., description="Task name")
    note: Optional[str] = Field(None, description="Task note")
    project: Optional[str] = Field(None, description="Project for the recurring task")
    tags: Optional[List[str]] = Field(None, description="Tags for the task")
    repeat_rule: RepeatRule
    first_due_date: Optional[str] = Field(None, description="First due date for the recurring task")

    @field_validator("name", mode="before")
    @classmethod
    def _name(cls, v):
        return require_name(v, "Task")


class DeferTasksArgs(ArgsModel):
    tasks: List[str] = Field(..., description="Task names or IDs to defer")
    defer_to: str = Field(..., description="New defer date in ISO format")
    adjust_due_dates: bool = Field(False, description="Also adjust due dates by same amount")


class OrganizeTasksArgs(ArgsModel):
    tasks: List[str] = Field(..., description="Array of task names or IDs")
    target_project: Optional[str] = Field(None, description="Project to move tasks to")
    add_tags: Optional[List[str]] = Field(None, description="Tags to add to all tasks")
    remove_tags: Optional[List[str]] = Field(None, description="Tags to remove from all tasks")


# --- projects and tags ---

class ProjectTaskArgs(ArgsModel):
    name: str
    note: Optional[str] = None
    due_date: Optional[str] = None
    defer_date: Optional[str] = None
    flagged: Optional[bool] = None
    estimated_minutes: Optional[int] = None

    @field_validator("name", mode="before")
    @classmethod
    def _name(cls, v):
        return require_name(v, "Task")

    @field_validator("estimated_minutes", mode="before")
    @classmethod
    def _minutes(cls, v):
        return check_minutes(v)


class CreateProjectArgs(ArgsModel):
    name: str = Field(..., description="Project name")
    note: Optional[str] = Field(None, description="Project note/description")
    folder: Optional[str] = Field(None, description="Folder to place project in")
    sequential: bool = Field(False, description="Whether tasks must be completed sequentially")
    due_date: Optional[str] = Field(None, description="Project due date")
    defer_date: Optional[str] = Field(None, description="Project defer date")
    tasks: Optional[List[ProjectTaskArgs]] = Field(None, description="Initial tasks to add to the project")

    @field_validator("name", mode="before")
    @classmethod
    def _name(cls, v):
        return require_name(v, "Project")


class GetProjectsArgs(ArgsModel):
    folder: Optional[str] = Field(None, description="Filter by folder name")
    status: ItemStatus = Field(ItemStatus.active, description="Project status filter")


class NoArgs(ArgsModel):
    pass


class DryRunArgs(ArgsModel):
    dry_run: bool = Field(False, description="Preview changes without making them")


class ReviewArgs(ArgsModel):
    review_interval_days: float = Field(7, gt=0, description="Projects not reviewed in X days")


class MarkReviewedArgs(ArgsModel):
    project_id: str = Field(..., description="Project name or ID to mark as reviewed")
    notes: Optional[str] = Field(None, description="Review notes to add")


# --- statistics and maintenance ---

class StatisticsArgs(ArgsModel):
    period: Period = Field(Period.week, description="Time period for statistics")
    group_by: StatisticsGroup = Field(StatisticsGroup.none, description="Group statistics by category")


class CleanupArgs(ArgsModel):
    older_than_days: float = Field(30, ge=0, description="Tasks completed more than X days ago")
    action: CleanupAction = Field(CleanupAction.archive, description="What to do with old tasks")
    dry_run: bool = Field(False, description="Preview what would be affected without making changes")


class OverdueArgs(ArgsModel):
    group_by: OverdueGroup = Field(OverdueGroup.days_overdue, description="How to group overdue tasks")
    include_defer_dates: bool = Field(False, description="Include tasks with future defer dates")


# --- folders ---

class GetFoldersArgs(ArgsModel):
    status: ItemStatus = Field(ItemStatus.active, description="Filter by folder status")


class UpdateFolderNameArgs(ArgsModel):
    folder_id: str = Field(..., description="Folder ID or name to update")
    name: str = Field(..., description="New folder name")

    @field_validator("folder_id", "name")
    @classmethod
    def _required(cls, v):
        if not v.strip():
            raise ValueError("Both folder_id and name are required")
        return v


class CreateFolderArgs(ArgsModel):
    name: str = Field(..., description="Folder name")
    note: Optional[str] = Field(None, description="Folder description")
    parent_folder: Optional[str] = Field(None, description="Parent folder name or ID")

    @field_validator("name")
    @classmethod
    def _name(cls, v):
        return require_name(v, "Folder")


class FolderRefArgs(ArgsModel):
    folder_id: str = Field(..., description="Folder ID or name to delete")
