from conftest import NOW, project, task

from omnifocus_mcp.omnifocus_api import search_filters
from omnifocus_mcp.omnifocus_api.data_models import ProjectRecord, TaskRecord


def _tasks(*records):
    return [TaskRecord.from_dict(r) for r in records]


class TestFilterTasks:
    def test_due_today_window(self):
        tasks = _tasks(
            task("a", "today", dueDate="2025-01-15T20:00:00.000Z"),
            task("b", "tomorrow midnight", dueDate="2025-01-16T00:00:00.000Z"),
            task("c", "no date"),
        )
        found = search_filters.filter_tasks(tasks, NOW, due_today=True)
        assert [t.id for t in found] == ["a"]

    def test_due_soon_includes_overdue(self):
        tasks = _tasks(
            task("a", "next week", dueDate="2025-01-20T00:00:00.000Z"),
            task("b", "overdue", dueDate="2025-01-10T00:00:00.000Z"),
            task("c", "far", dueDate="2025-01-30T00:00:00.000Z"),
            task("d", "no date"),
        )
        found = search_filters.filter_tasks(tasks, NOW, due_soon=True)
        assert [t.id for t in found] == ["a", "b"]

    def test_predicates_are_and_combined(self):
        tasks = _tasks(
            task("a", "match", flagged=True, project="Work", tags=["deep"]),
            task("b", "wrong project", flagged=True, project="Home", tags=["deep"]),
            task("c", "not flagged", project="Work", tags=["deep"]),
            task("d", "done", flagged=True, project="Work", tags=["deep"], completed=True),
        )
        found = search_filters.filter_tasks(tasks, NOW, flagged=True, project="Work", tag="deep")
        assert [t.id for t in found] == ["a"]


class TestSearchTasks:
    def test_case_insensitive_name_and_note(self):
        tasks = _tasks(
            task("a", "Email Bob"),
            task("b", "Call", note="about the EMAIL"),
            task("c", "Other"),
            task("d", "email done", completed=True),
        )
        assert [t.id for t in search_filters.search_tasks(tasks, "email")] == ["a", "b"]
        assert len(search_filters.search_tasks(tasks, "email", include_completed=True)) == 3

    def test_date_range_uses_due_then_defer(self):
        tasks = _tasks(
            task("a", "x due", dueDate="2025-01-10T00:00:00.000Z"),
            task("b", "x defer", deferDate="2025-01-12T00:00:00.000Z"),
            task("c", "x undated"),
            task("d", "x late", dueDate="2025-02-10T00:00:00.000Z"),
        )
        found = search_filters.search_tasks(tasks, "x", date_start="2025-01-01", date_end="2025-01-31")
        assert [t.id for t in found] == ["a", "b"]

    def test_date_only_bounds_are_utc_midnight(self):
        tasks = _tasks(
            task("a", "x first instant", dueDate="2025-01-01T00:00:00.000Z"),
            task("b", "x just before", dueDate="2024-12-31T23:59:59.000Z"),
            task("c", "x on end day", dueDate="2025-01-31T12:00:00.000Z"),
        )
        found = search_filters.search_tasks(tasks, "x", date_start="2025-01-01", date_end="2025-01-31")
        assert [t.id for t in found] == ["a"]

    def test_projects_any_tags_all(self):
        tasks = _tasks(
            task("a", "x", project="Work", tags=["a", "b"]),
            task("b", "x", project="Home", tags=["a"]),
            task("c", "x", project="Errands", tags=["a", "b"]),
        )
        found = search_filters.search_tasks(tasks, "x", projects=["Work", "Home"], tags=["a", "b"])
        assert [t.id for t in found] == ["a"]


class TestOverdue:
    def test_yesterday_is_one_day_overdue(self):
        tasks = _tasks(task("a", "late", dueDate="2025-01-14T09:00:00.000Z"))
        overdue = search_filters.find_overdue(tasks, NOW)
        assert len(overdue) == 1
        assert overdue[0].days_overdue == 1
        assert overdue[0].to_dict()["daysOverdue"] == 1

    def test_later_today_counts_as_overdue(self):
        tasks = _tasks(task("a", "tonight", dueDate="2025-01-15T22:00:00.000Z"))
        assert [o.days_overdue for o in search_filters.find_overdue(tasks, NOW)] == [0]

    def test_excludes_completed_and_future(self):
        tasks = _tasks(
            task("a", "done", dueDate="2025-01-01T00:00:00.000Z", completed=True),
            task("b", "tomorrow", dueDate="2025-01-16T09:00:00.000Z"),
            task("c", "no due"),
        )
        assert search_filters.find_overdue(tasks, NOW) == []

    def test_future_deferred_only_with_flag(self):
        tasks = _tasks(
            task("a", "deferred", dueDate="2025-01-10T00:00:00.000Z", deferDate="2025-01-20T00:00:00.000Z"),
        )
        assert search_filters.find_overdue(tasks, NOW) == []
        assert len(search_filters.find_overdue(tasks, NOW, include_defer_dates=True)) == 1

    def test_sorted_most_overdue_first(self):
        tasks = _tasks(
            task("a", "one", dueDate="2025-01-14T12:00:00.000Z"),
            task("b", "five", dueDate="2025-01-10T12:00:00.000Z", project="Work"),
            task("c", "also one", dueDate="2025-01-14T13:00:00.000Z"),
        )
        overdue = search_filters.find_overdue(tasks, NOW)
        assert [o.task.id for o in overdue] == ["b", "a", "c"]

        by_days = search_filters.group_overdue(overdue, "days_overdue")
        assert list(by_days) == ["5 days", "1 day"]
        assert [o.task.id for o in by_days["1 day"]] == ["a", "c"]

        by_project = search_filters.group_overdue(overdue, "project")
        assert list(by_project) == ["Work", "No Project"]


class TestReview:
    def test_order_and_counts(self):
        projects = [
            ProjectRecord.from_dict(project("p1", "Ten days", lastReviewDate="2025-01-05T10:00:00.000Z")),
            ProjectRecord.from_dict(project("p2", "Fresh", lastReviewDate="2025-01-12T10:00:00.000Z")),
            ProjectRecord.from_dict(project(
                "p3", "Never",
                tasks=[
                    {"completed": True, "dueDate": None},
                    {"completed": False, "dueDate": "2025-01-01T00:00:00.000Z"},
                    {"completed": False, "dueDate": None},
                ],
            )),
            ProjectRecord.from_dict(project("p4", "Twenty days", lastReviewDate="2024-12-26T10:00:00.000Z")),
            ProjectRecord.from_dict(project("p5", "Dropped", status="dropped")),
        ]
        candidates = search_filters.projects_needing_review(projects, NOW, 7)
        assert [c.project.id for c in candidates] == ["p3", "p4", "p1"]
        never = candidates[0]
        assert never.never_reviewed
        assert (never.total, never.completed, never.overdue) == (3, 1, 1)
        assert candidates[1].days_since_review == 20
        assert candidates[2].days_since_review == 10

    def test_exactly_one_interval_is_not_stale(self):
        projects = [
            ProjectRecord.from_dict(project("p1", "Weekly", lastReviewDate="2025-01-08T10:00:00.000Z")),
            ProjectRecord.from_dict(project("p2", "Just over", lastReviewDate="2025-01-08T09:59:59.000Z")),
        ]
        candidates = search_filters.projects_needing_review(projects, NOW, 7)
        assert [c.project.id for c in candidates] == ["p2"]


class TestCleanup:
    def test_selects_old_completed_tasks(self):
        tasks = _tasks(
            task("a", "old", completed=True, completionDate="2024-12-01T00:00:00.000Z"),
            task("b", "recent", completed=True, completionDate="2025-01-10T00:00:00.000Z"),
            task("c", "exactly cutoff", completed=True, completionDate="2024-12-16T10:00:00.000Z"),
            task("d", "no date", completed=True),
            task("e", "open"),
        )
        found = search_filters.cleanup_candidates(tasks, NOW, 30)
        assert [t.id for t in found] == ["a", "c"]
