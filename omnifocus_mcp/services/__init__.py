"""
Domain services. Each one holds an OmniFocusBridge and a clock, builds the
snippets for its operations and turns the records into tool results.
"""

from .folder_service import FolderService
from .maintenance_service import MaintenanceService
from .project_service import ProjectService
from .statistics_service import StatisticsService
from .task_service import TaskService

__all__ = [
    'FolderService',
    'MaintenanceService',
    'ProjectService',
    'StatisticsService',
    'TaskService',
]
