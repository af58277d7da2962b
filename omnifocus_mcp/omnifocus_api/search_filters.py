"""
Result-side filtering over task and project records: listing filters, search,
overdue detection and grouping, review staleness and cleanup candidates.

All functions are pure; the current time is always passed in.
"""

from collections import OrderedDict
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional, Sequence

from .data_models import ProjectRecord, TaskRecord
from .utils import day_bounds, parse_iso, plural

DAY = timedelta(days=1)
DUE_SOON_WINDOW = timedelta(days=7)
NO_PROJECT = "No Project"


def is_due_today(task: TaskRecord, now: datetime) -> bool:
    due = task.due_at
    if due is None:
        return False
    start_of_today, start_of_tomorrow, _ = day_bounds(now)
    return start_of_today <= due < start_of_tomorrow


def is_due_soon(task: TaskRecord, now: datetime) -> bool:
    """Due within the next week, overdue tasks included."""
    due = task.due_at
    if due is None:
        return False
    return due <= now + DUE_SOON_WINDOW


def filter_tasks(
    tasks: Iterable[TaskRecord],
    now: datetime,
    completed: bool = False,
    flagged: Optional[bool] = None,
    project: Optional[str] = None,
    tag: Optional[str] = None,
    due_today: Optional[bool] = None,
    due_soon: Optional[bool] = None,
) -> List[TaskRecord]:
    """AND-combine the listing predicates. Unset predicates match everything."""
    result = []
    for task in tasks:
        if task.completed != completed:
            continue
        if project and task.project != project:
            continue
        if flagged and not task.flagged:
            continue
        if tag and tag not in task.tags:
            continue
        if due_today and not is_due_today(task, now):
            continue
        if due_soon and not is_due_soon(task, now):
            continue
        result.append(task)
    return result


def search_tasks(
    tasks: Iterable[TaskRecord],
    query: str,
    include_completed: bool = False,
    date_start: Optional[str] = None,
    date_end: Optional[str] = None,
    projects: Optional[Sequence[str]] = None,
    tags: Optional[Sequence[str]] = None,
) -> List[TaskRecord]:
    """Case-insensitive text search with optional date range, project and tag filters.

    The date range applies to the due date, falling back to the defer date;
    tasks with neither are excluded once a bound is given. ``projects`` is
    "any of", ``tags`` is "all of".
    """
    needle = query.lower()
    start = parse_iso(date_start)
    end = parse_iso(date_end)
    result = []
    for task in tasks:
        if task.completed and not include_completed:
            continue
        if needle not in task.name.lower() and needle not in (task.note or "").lower():
            continue
        if start or end:
            task_date = task.due_at or task.defer_at
            if task_date is None:
                continue
            if start and task_date < start:
                continue
            if end and task_date > end:
                continue
        if projects and task.project not in projects:
            continue
        if tags and not all(t in task.tags for t in tags):
            continue
        result.append(task)
    return result


@dataclass
class OverdueTask:
    task: TaskRecord
    days_overdue: int

    def to_dict(self) -> Dict:
        return {
            "id": self.task.id,
            "name": self.task.name,
            "dueDate": self.task.dueDate,
            "daysOverdue": self.days_overdue,
            "project": self.task.project,
            "flagged": self.task.flagged,
            "tags": list(self.task.tags),
        }


def find_overdue(tasks: Iterable[TaskRecord], now: datetime, include_defer_dates: bool = False) -> List[OverdueTask]:
    """Incomplete tasks due before the end of today, most overdue first.

    Tasks deferred past the end of today are dropped unless
    *include_defer_dates* is set.
    """
    _, _, end_of_today = day_bounds(now)
    overdue = []
    for task in tasks:
        if task.completed:
            continue
        due = task.due_at
        if due is None or due >= end_of_today:
            continue
        if not include_defer_dates:
            defer = task.defer_at
            if defer is not None and defer > end_of_today:
                continue
        days = (end_of_today - due) // DAY
        overdue.append(OverdueTask(task=task, days_overdue=days))
    overdue.sort(key=lambda o: o.days_overdue, reverse=True)
    return overdue


def days_label(days: int) -> str:
    return plural(days, "day")


def group_overdue(overdue: Sequence[OverdueTask], group_by: str) -> "OrderedDict[str, List[OverdueTask]]":
    """Group by ``days_overdue`` or ``project``; anything else yields one unnamed group."""
    groups: "OrderedDict[str, List[OverdueTask]]" = OrderedDict()
    for item in overdue:
        if group_by == "days_overdue":
            key = days_label(item.days_overdue)
        elif group_by == "project":
            key = item.task.project or NO_PROJECT
        else:
            key = ""
        groups.setdefault(key, []).append(item)
    return groups


@dataclass
class ReviewCandidate:
    project: ProjectRecord
    days_since_review: Optional[int]
    total: int
    completed: int
    overdue: int

    @property
    def never_reviewed(self) -> bool:
        return self.days_since_review is None

    def to_dict(self) -> Dict:
        return {
            "id": self.project.id,
            "name": self.project.name,
            "lastReviewDate": self.project.lastReviewDate,
            "daysSinceReview": self.days_since_review,
            "folder": self.project.folder,
            "taskCounts": {
                "total": self.total,
                "completed": self.completed,
                "overdue": self.overdue,
            },
        }


def projects_needing_review(
    projects: Iterable[ProjectRecord], now: datetime, review_interval_days: float = 7
) -> List[ReviewCandidate]:
    """Active projects never reviewed or reviewed longer ago than the interval.

    Never-reviewed projects come first in traversal order, then the rest by
    days since review, oldest first.
    """
    interval = timedelta(days=review_interval_days)
    candidates = []
    for project in projects:
        if project.status != "active":
            continue
        last = project.last_reviewed_at
        if last is not None and now - last <= interval:
            continue
        total = completed = overdue = 0
        for task in project.tasks or []:
            total += 1
            if task.get("completed"):
                completed += 1
            else:
                due = parse_iso(task.get("dueDate"))
                if due is not None and due < now:
                    overdue += 1
        days = None if last is None else (now - last) // DAY
        candidates.append(ReviewCandidate(project, days, total, completed, overdue))

    never = [c for c in candidates if c.never_reviewed]
    dated = sorted((c for c in candidates if not c.never_reviewed), key=lambda c: c.days_since_review, reverse=True)
    return never + dated


def cleanup_candidates(tasks: Iterable[TaskRecord], now: datetime, older_than_days: float = 30) -> List[TaskRecord]:
    """Completed tasks whose completion date is at least *older_than_days* old."""
    cutoff = now - timedelta(days=older_than_days)
    result = []
    for task in tasks:
        if not task.completed:
            continue
        done = task.completed_at
        if done is None or done > cutoff:
            continue
        result.append(task)
    return result
