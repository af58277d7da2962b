"""Productivity statistics over a rolling period ending now."""

from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Dict, Iterable, Optional

from dateutil.relativedelta import relativedelta

from .data_models import TaskRecord
from .utils import day_bounds, round_half_up

DUE_SOON_WINDOW = timedelta(days=7)


def period_start(period: str, now: datetime) -> datetime:
    if period == "today":
        return day_bounds(now)[0]
    if period == "week":
        return now - timedelta(days=7)
    if period == "month":
        return now - relativedelta(months=1)
    if period == "year":
        return now - relativedelta(years=1)
    if period == "all":
        return datetime(2000, 1, 1, tzinfo=now.tzinfo)
    raise ValueError(f"Unknown period: {period}")


@dataclass
class Tally:
    total: int = 0
    completed: int = 0
    overdue: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {"total": self.total, "completed": self.completed, "overdue": self.overdue}


@dataclass
class Statistics:
    period: str
    total: int = 0
    completed: int = 0
    incomplete: int = 0
    overdue: int = 0
    due_soon: int = 0
    flagged: int = 0
    has_project: int = 0
    by_project: "OrderedDict[str, Tally]" = field(default_factory=OrderedDict)
    by_tag: "OrderedDict[str, Tally]" = field(default_factory=OrderedDict)

    @property
    def completion_rate(self) -> int:
        if self.total == 0:
            return 0
        return round_half_up(self.completed / self.total * 100)

    def to_dict(self) -> Dict:
        return {
            "period": self.period,
            "total": self.total,
            "completed": self.completed,
            "incomplete": self.incomplete,
            "overdue": self.overdue,
            "due_soon": self.due_soon,
            "flagged": self.flagged,
            "has_project": self.has_project,
            "completion_rate": self.completion_rate,
            "by_project": {k: v.to_dict() for k, v in self.by_project.items()},
            "by_tag": {k: v.to_dict() for k, v in self.by_tag.items()},
        }


def in_period(task: TaskRecord, start: datetime) -> bool:
    """Membership rule for a period window.

    A task created before the window start only counts if it is completed and
    its completion date is not before the start. A completed task without a
    completion date is kept; a task without a creation date always counts.
    """
    created = task.created_at
    if created is None or created >= start:
        return True
    if not task.completed:
        return False
    completed_at = task.completed_at
    return completed_at is None or completed_at >= start


def _count(tally: Tally, task: TaskRecord, now: datetime) -> None:
    tally.total += 1
    if task.completed:
        tally.completed += 1
    else:
        due = task.due_at
        if due is not None and due < now:
            tally.overdue += 1


def aggregate_statistics(
    tasks: Iterable[TaskRecord], now: datetime, period: str = "week", group_by: Optional[str] = None
) -> Statistics:
    start = period_start(period, now)
    soon = now + DUE_SOON_WINDOW
    stats = Statistics(period=period)

    for task in tasks:
        if not in_period(task, start):
            continue

        stats.total += 1
        if task.completed:
            stats.completed += 1
        else:
            stats.incomplete += 1
            due = task.due_at
            if due is not None:
                if due < now:
                    stats.overdue += 1
                elif due < soon:
                    stats.due_soon += 1

        if task.flagged:
            stats.flagged += 1

        if task.project:
            stats.has_project += 1
            if group_by == "project":
                _count(stats.by_project.setdefault(task.project, Tally()), task, now)

        if group_by == "tag":
            for tag in task.tags:
                _count(stats.by_tag.setdefault(tag, Tally()), task, now)

    return stats
