# apps/projects/application/services.py
import logging
from datetime import datetime
from typing import Callable, List, Optional

from django.utils import timezone

from apps.core.application.saga import Saga
from apps.core.domain.errors import (
    InconsistencyError,
    InvalidInputError,
    NotFoundError,
    QuotaExceededError,
    surface_faults,
)
from apps.core.domain.guard import AuthorizationGuard, ResourceKind
from apps.core.domain.identifiers import parse_id
from apps.projects.domain.aggregate import ProjectAggregate
from apps.projects.domain.entities import CounterDelta, ProjectEntity
from apps.projects.ports.repositories import IProjectRepository
from apps.tasks.domain.entities import TaskEntity, TaskStatus
from apps.tasks.ports.repositories import ITaskRepository

logger = logging.getLogger(__name__)

MAX_PROJECTS_PER_USER = 4


def clean_text(value: Optional[str], message: str, strip: bool = False) -> str:
    if value is None or not str(value).strip():
        raise InvalidInputError(message)
    return str(value).strip() if strip else str(value)


async def apply_delta(projects: IProjectRepository, project_id: int, delta: CounterDelta,
                      missing_message: str = "Project not found") -> ProjectEntity:
    """
    Aplikuje deltę liczników atomowo w magazynie.
    Odmowa magazynu oznacza albo brak projektu (NotFound), albo złamany
    niezmiennik liczników (InconsistencyError).
    """
    updated = await projects.apply_counter_delta(project_id, delta)
    if updated is not None:
        return updated

    if await projects.get_by_id(project_id) is None:
        raise NotFoundError(missing_message)
    raise InconsistencyError(f"Counter delta {delta} rejected for project {project_id}")


class ProjectService:
    def __init__(self, projects: IProjectRepository, tasks: ITaskRepository,
                 max_projects: int = MAX_PROJECTS_PER_USER,
                 clock: Callable[[], datetime] = timezone.now):
        self.projects = projects
        self.tasks = tasks
        self.max_projects = max_projects
        self.clock = clock
        self.guard = AuthorizationGuard({ResourceKind.PROJECT: self._resolve_owner})

    async def _resolve_owner(self, project: Optional[ProjectEntity]) -> Optional[ProjectEntity]:
        return project

    async def _load_owned(self, project_id, caller_id, include_deleted: bool = False) -> ProjectEntity:
        """Łańcuch: poprawne ID -> istnieje -> należy do wywołującego."""
        pid = parse_id(project_id, "Project not found")
        project = await self.projects.get_by_id(pid, include_deleted=include_deleted)
        return await self.guard.require(ResourceKind.PROJECT, caller_id, project)

    @surface_faults
    async def list(self, caller_id: int) -> List[ProjectEntity]:
        return await self.projects.list_by_owner(caller_id)

    @surface_faults
    async def create(self, caller_id: int, title: str, description: str) -> ProjectEntity:
        title = clean_text(title, "Title is required", strip=True)
        description = clean_text(description, "Description is required")

        if await self.projects.count_by_owner(caller_id) >= self.max_projects:
            raise QuotaExceededError(f"Maximum number of projects reached ({self.max_projects})")

        created = await self.projects.create(ProjectEntity(
            id=None,
            user_id=caller_id,
            title=title,
            description=description,
            created_at=self.clock(),
        ))

        # Dwa równoległe create mogły przejść sprawdzenie limitu; wtedy wycofujemy swój
        if await self.projects.count_by_owner(caller_id) > self.max_projects:
            await self.projects.delete(created.id)
            raise QuotaExceededError(f"Maximum number of projects reached ({self.max_projects})")

        logger.info("Project %s created for user %s", created.id, caller_id)
        return created

    @surface_faults
    async def get(self, project_id, caller_id: int) -> ProjectEntity:
        return await self._load_owned(project_id, caller_id)

    @surface_faults
    async def update(self, project_id, caller_id: int, title: str, description: str) -> ProjectEntity:
        title = clean_text(title, "Title is required", strip=True)
        description = clean_text(description, "Description is required")

        project = await self._load_owned(project_id, caller_id)
        # Pełna podmiana tytułu i opisu, liczniki bez zmian
        updated = await self.projects.update_details(project.id, title, description)
        if updated is None:
            raise NotFoundError("Project not found")
        return updated

    @surface_faults
    async def delete(self, project_id, caller_id: int) -> int:
        """
        Kaskadowe usunięcie: tombstone -> zadania -> projekt.
        Przerwane usuwanie można powtórzyć (projekt z tombstone jest nadal
        widoczny dla tej ścieżki). Zwraca liczbę usuniętych zadań.
        """
        project = await self._load_owned(project_id, caller_id, include_deleted=True)

        if not project.is_deleted():
            await self.projects.mark_deleted(project.id, self.clock())

        removed = await self.tasks.delete_by_project(project.id)
        await self.projects.delete(project.id)

        logger.info("Project %s removed together with %d tasks", project.id, removed)
        return removed

    @surface_faults
    async def list_tasks(self, project_id, caller_id: int) -> List[TaskEntity]:
        project = await self._load_owned(project_id, caller_id)
        return await self.tasks.list_by_project(project.id)

    @surface_faults
    async def create_task(self, project_id, caller_id: int, title: str, description: str) -> TaskEntity:
        title = clean_text(title, "Title is required", strip=True)
        description = clean_text(description, "Description is required")

        project = await self._load_owned(project_id, caller_id)
        delta = ProjectAggregate(project).on_task_created()

        task = TaskEntity(
            id=None,
            project_id=project.id,
            title=title,
            description=description,
            status=TaskStatus.PENDING,
            created_at=self.clock(),
        )

        # Najpierw licznik, potem zadanie: żaden czytelnik nie zobaczy zadania,
        # którego nie ma w taskCount
        async with Saga("create task") as saga:
            await saga.step(
                lambda: apply_delta(self.projects, project.id, delta),
                compensate=lambda _: self.projects.apply_counter_delta(project.id, delta.inverted()),
                label="bump task count",
            )
            created = await saga.step(
                lambda: self.tasks.create(task),
                compensate=lambda t: self.tasks.delete_if_status(t.id, t.status),
                label="insert task",
            )
            # Równoległe kaskadowe usuwanie mogło w międzyczasie postawić tombstone
            if await self.projects.get_by_id(project.id) is None:
                raise NotFoundError("Project not found")

        logger.info("Task %s created in project %s", created.id, project.id)
        return created

    @surface_faults
    async def reconcile(self, project_id, caller_id: int) -> ProjectEntity:
        project = await self._load_owned(project_id, caller_id)
        fixed, _ = await reconcile_project(self.projects, self.tasks, project, fix=True)
        return fixed


async def reconcile_project(projects: IProjectRepository, tasks: ITaskRepository,
                            project: ProjectEntity, fix: bool = False):
    """
    Ścieżka naprawcza: przelicza liczniki ze skanu zadań.
    Zwraca (projekt, czy_był_dryf).
    """
    statuses = await tasks.statuses_by_project(project.id)
    expected = ProjectAggregate.reconcile(project, statuses)
    drifted = (expected.task_count, expected.completed_tasks) != (project.task_count, project.completed_tasks)

    if drifted:
        logger.warning(
            "Project %s counters drifted: stored %d/%d, actual %d/%d",
            project.id, project.completed_tasks, project.task_count,
            expected.completed_tasks, expected.task_count,
        )
        if fix:
            updated = await projects.set_counters(project.id, expected.task_count, expected.completed_tasks)
            if updated is None:
                raise NotFoundError("Project not found")
            return updated, True
    return (expected if fix else project), drifted
