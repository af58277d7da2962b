"""Productivity statistics."""

from ..omnifocus_api.aggregation import aggregate_statistics
from ..omnifocus_api.data_models import TaskRecord, ToolResult
from ..omnifocus_api.script_builder import list_records_script, task_record_script
from .base import BaseService, reports_errors


def generate_statistics_script() -> str:
    return list_records_script("task", task_record_script("task"), "task")


class StatisticsService(BaseService):

    @reports_errors("computing statistics")
    def get_statistics(self, period: str = "week", group_by: str = "none") -> ToolResult:
        raw = self.bridge.execute_and_parse(generate_statistics_script())
        tasks = [TaskRecord.from_dict(item) for item in raw]
        stats = aggregate_statistics(tasks, self.clock(), period=period, group_by=group_by)

        out = (
            f"Statistics for {period}:\n"
            f"Total tasks: {stats.total}\n"
            f"Completed: {stats.completed} ({stats.completion_rate}%)\n"
            f"Incomplete: {stats.incomplete}\n"
            f"Overdue: {stats.overdue}\n"
            f"Due soon: {stats.due_soon}\n"
            f"Flagged: {stats.flagged}\n"
            f"With project: {stats.has_project}\n"
        )
        sections = (("project", "By Project", stats.by_project), ("tag", "By Tag", stats.by_tag))
        for key, title, tallies in sections:
            if group_by == key and tallies:
                out += f"\n{title}:\n"
                for name, t in tallies.items():
                    out += f"  {name}: {t.total} total, {t.completed} completed, {t.overdue} overdue\n"
        return ToolResult(out, stats.to_dict())
