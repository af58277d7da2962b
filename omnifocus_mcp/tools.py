"""
The operation table: every tool name, its argument model, its description and
the service method that handles it.

:meth:`ToolRegistry.invoke` is the one entry point transports call. It never
raises; unknown names, invalid arguments and unexpected failures all come back
as error results.
"""

from collections import OrderedDict
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional, Type

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from . import tool_schemas as schemas
from .omnifocus_api.data_models import ToolResult
from .omnifocus_api.jxa_client import JXAExecutor, OmniFocusBridge
from .services import FolderService, MaintenanceService, ProjectService, StatisticsService, TaskService
from .services.base import Clock
from .utils.config import BridgeSettings
from .utils.logger import get_logger

log = get_logger(__name__)


class Operation(str, Enum):
    GET_TASKS = "get_tasks"
    CREATE_TASK = "create_task"
    CREATE_TASKS_BATCH = "create_tasks_batch"
    UPDATE_TASK = "update_task"
    COMPLETE_TASK = "complete_task"
    DELETE_TASK = "delete_task"
    CREATE_PROJECT = "create_project"
    GET_PROJECTS = "get_projects"
    GET_TAGS = "get_tags"
    UPDATE_TAG_NAMES = "update_tag_names"
    ORGANIZE_TASKS = "organize_tasks"
    SEARCH_TASKS = "search_tasks"
    GET_STATISTICS = "get_statistics"
    CREATE_RECURRING_TASK = "create_recurring_task"
    DEFER_TASKS = "defer_tasks"
    CLEANUP_COMPLETED = "cleanup_completed"
    GET_OVERDUE_TASKS = "get_overdue_tasks"
    GET_PROJECTS_FOR_REVIEW = "get_projects_for_review"
    MARK_PROJECT_REVIEWED = "mark_project_reviewed"
    GET_FOLDERS = "get_folders"
    UPDATE_FOLDER_NAME = "update_folder_name"
    REMOVE_EMOJIS_FROM_FOLDER_NAMES = "remove_emojis_from_folder_names"
    CREATE_FOLDER = "create_folder"
    DELETE_FOLDER = "delete_folder"


@dataclass(frozen=True)
class ToolSpec:
    operation: Operation
    description: str
    args_model: Type[BaseModel]
    handler: Callable[..., ToolResult]

    @property
    def name(self) -> str:
        return self.operation.value

    def input_schema(self) -> Dict[str, Any]:
        return self.args_model.model_json_schema()


class ToolRegistry:
    def __init__(self, specs: Iterable[ToolSpec]):
        self._specs: "OrderedDict[str, ToolSpec]" = OrderedDict((s.name, s) for s in specs)

    def __len__(self) -> int:
        return len(self._specs)

    def __contains__(self, name: str) -> bool:
        return name in self._specs

    def get(self, name: str) -> Optional[ToolSpec]:
        return self._specs.get(name)

    def list_tools(self) -> List[Dict[str, Any]]:
        return [
            {"name": s.name, "description": s.description, "inputSchema": s.input_schema()}
            for s in self._specs.values()
        ]

    def invoke(self, name: str, arguments: Optional[Dict[str, Any]] = None) -> ToolResult:
        spec = self._specs.get(name)
        if spec is None:
            log.warning("Unknown tool requested: %s", name)
            return ToolResult.error(f"Error: Unknown tool: {name}")

        try:
            args = spec.args_model.model_validate(arguments or {})
        except PydanticValidationError as e:
            error = schemas.to_validation_error(e)
            log.info("Rejected %s arguments: %s", name, error)
            return ToolResult.error(f"Error: {error}")

        log.debug("Invoking %s", name)
        try:
            return spec.handler(**args.model_dump())
        except Exception as e:
            log.exception("Tool %s failed", name)
            return ToolResult.error(f"Error: {e}")


def build_registry(
    bridge: Optional[OmniFocusBridge] = None,
    clock: Optional[Clock] = None,
    settings: Optional[BridgeSettings] = None,
) -> ToolRegistry:
    """Wire the services to a bridge and return the full operation table."""
    if bridge is None:
        settings = settings or BridgeSettings.from_env()
        bridge = OmniFocusBridge(JXAExecutor(settings.app_name, settings.osascript))

    tasks = TaskService(bridge, clock)
    projects = ProjectService(bridge, clock)
    folders = FolderService(bridge, clock)
    statistics = StatisticsService(bridge, clock)
    maintenance = MaintenanceService(bridge, clock)

    op = Operation
    return ToolRegistry([
        ToolSpec(op.GET_TASKS, "Get tasks from OmniFocus with optional filtering",
                 schemas.GetTasksArgs, tasks.get_tasks),
        ToolSpec(op.CREATE_TASK, "Create a new task in OmniFocus",
                 schemas.CreateTaskArgs, tasks.create_task),
        ToolSpec(op.CREATE_TASKS_BATCH, "Create multiple tasks at once",
                 schemas.CreateTasksBatchArgs, tasks.create_tasks_batch),
        ToolSpec(op.UPDATE_TASK, "Update an existing task",
                 schemas.UpdateTaskArgs, tasks.update_task),
        ToolSpec(op.COMPLETE_TASK, "Mark a task as completed",
                 schemas.TaskRefArgs, tasks.complete_task),
        ToolSpec(op.DELETE_TASK, "Delete a task from OmniFocus",
                 schemas.TaskRefArgs, tasks.delete_task),
        ToolSpec(op.CREATE_PROJECT, "Create a new project in OmniFocus with optional tasks",
                 schemas.CreateProjectArgs, projects.create_project),
        ToolSpec(op.GET_PROJECTS, "Get all projects from OmniFocus",
                 schemas.GetProjectsArgs, projects.get_projects),
        ToolSpec(op.GET_TAGS, "Get all tags from OmniFocus",
                 schemas.NoArgs, projects.get_tags),
        ToolSpec(op.UPDATE_TAG_NAMES,
                 "Remove emojis from all tag names in OmniFocus. A tag whose cleaned name already "
                 "exists is merged into the existing tag; otherwise it is renamed.",
                 schemas.DryRunArgs, projects.update_tag_names),
        ToolSpec(op.ORGANIZE_TASKS, "Bulk organize tasks by moving to projects or adding tags",
                 schemas.OrganizeTasksArgs, tasks.organize_tasks),
        ToolSpec(op.SEARCH_TASKS, "Search tasks with advanced query capabilities",
                 schemas.SearchTasksArgs, tasks.search_tasks),
        ToolSpec(op.GET_STATISTICS, "Get productivity statistics and analytics",
                 schemas.StatisticsArgs, statistics.get_statistics),
        ToolSpec(op.CREATE_RECURRING_TASK, "Create a task that repeats on a schedule",
                 schemas.CreateRecurringTaskArgs, tasks.create_recurring_task),
        ToolSpec(op.DEFER_TASKS, "Bulk defer tasks to a future date",
                 schemas.DeferTasksArgs, tasks.defer_tasks),
        ToolSpec(op.CLEANUP_COMPLETED, "Archive or remove old completed tasks",
                 schemas.CleanupArgs, maintenance.cleanup_completed),
        ToolSpec(op.GET_OVERDUE_TASKS, "Get all overdue tasks with grouping options",
                 schemas.OverdueArgs, maintenance.get_overdue_tasks),
        ToolSpec(op.GET_PROJECTS_FOR_REVIEW, "Get projects that need review",
                 schemas.ReviewArgs, projects.get_projects_for_review),
        ToolSpec(op.MARK_PROJECT_REVIEWED, "Mark a project as reviewed",
                 schemas.MarkReviewedArgs, projects.mark_project_reviewed),
        ToolSpec(op.GET_FOLDERS, "Get all folders from OmniFocus with optional filtering",
                 schemas.GetFoldersArgs, folders.get_folders),
        ToolSpec(op.UPDATE_FOLDER_NAME, "Update a folder name",
                 schemas.UpdateFolderNameArgs, folders.update_folder_name),
        ToolSpec(op.REMOVE_EMOJIS_FROM_FOLDER_NAMES,
                 "Remove emojis from all folder names in OmniFocus, merging into an existing "
                 "folder when the cleaned name is taken",
                 schemas.DryRunArgs, folders.remove_emojis_from_folder_names),
        ToolSpec(op.CREATE_FOLDER, "Create a new folder in OmniFocus",
                 schemas.CreateFolderArgs, folders.create_folder),
        ToolSpec(op.DELETE_FOLDER, "Delete a folder from OmniFocus",
                 schemas.FolderRefArgs, folders.delete_folder),
    ])
