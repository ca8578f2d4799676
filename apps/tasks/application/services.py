# apps/tasks/application/services.py
import asyncio
import logging
from datetime import datetime
from typing import Callable, Optional, Tuple

from django.utils import timezone

from apps.core.application.saga import Saga
from apps.core.domain.errors import InconsistencyError, InternalFault, NotFoundError, surface_faults
from apps.core.domain.guard import AuthorizationGuard, ResourceKind
from apps.core.domain.identifiers import parse_id
from apps.projects.application.services import apply_delta
from apps.projects.domain.aggregate import ProjectAggregate
from apps.projects.domain.entities import ProjectEntity
from apps.projects.ports.repositories import IProjectRepository
from apps.tasks.domain.entities import TaskEntity
from apps.tasks.domain.lifecycle import TaskLifecycle, TaskPatch, Transition
from apps.tasks.ports.repositories import ITaskRepository

logger = logging.getLogger(__name__)

# Ile razy ponawiamy compare-and-set po przegranym wyścigu
MAX_CAS_ATTEMPTS = 3
# Odstęp przed ponowieniem (sekundy, rośnie liniowo z numerem próby)
RETRY_DELAY = 0.01


class TaskService:
    def __init__(self, tasks: ITaskRepository, projects: IProjectRepository,
                 lifecycle: Optional[TaskLifecycle] = None,
                 clock: Callable[[], datetime] = timezone.now):
        self.tasks = tasks
        self.projects = projects
        self.lifecycle = lifecycle or TaskLifecycle()
        self.clock = clock
        self.guard = AuthorizationGuard({ResourceKind.TASK: self._resolve_owner})

    async def _resolve_owner(self, task: Optional[TaskEntity]) -> Optional[ProjectEntity]:
        # Zadanie nie ma właściciela, dziedziczy go po projekcie
        if task is None:
            return None
        return await self.projects.get_by_id(task.project_id)

    async def _load_owned(self, task_id, caller_id) -> Tuple[TaskEntity, ProjectEntity]:
        tid = parse_id(task_id, "Task not found")
        task = await self.tasks.get_by_id(tid)
        # Osierocone zadanie (projekt zniknął) to dla klienta po prostu "Task not found"
        project = await self.guard.require(ResourceKind.TASK, caller_id, task)
        return task, project

    @surface_faults
    async def get(self, task_id, caller_id: int) -> TaskEntity:
        task, _ = await self._load_owned(task_id, caller_id)
        return task

    @surface_faults
    async def update(self, task_id, caller_id: int, patch: TaskPatch) -> TaskEntity:
        task, project = await self._load_owned(task_id, caller_id)

        for attempt in range(MAX_CAS_ATTEMPTS):
            transition = self.lifecycle.apply(task, patch, now=self.clock())
            if not transition.changed:
                return task

            try:
                stored = await self._commit(transition, project)
            except InconsistencyError:
                # Liczniki jeszcze nie nadążyły za równoległą zmianą; saga już cofnęła zapis
                if attempt + 1 == MAX_CAS_ATTEMPTS:
                    raise
                logger.warning("Task %s: project %s counters not settled, retrying update", task.id, project.id)
                stored = False
            if stored:
                return transition.after

            # Przegrany wyścig: ktoś zmienił status (albo usunął zadanie), ładujemy od nowa
            logger.info("Task %s changed concurrently, retrying update (%d)", task.id, attempt + 1)
            await asyncio.sleep(RETRY_DELAY * (attempt + 1))
            task, project = await self._load_owned(task.id, caller_id)

        raise InternalFault(f"Task {task.id} keeps changing concurrently, update abandoned")

    async def _commit(self, transition: Transition, project: ProjectEntity) -> bool:
        before, after = transition.before, transition.after

        async with Saga("update task") as saga:
            stored = await saga.step(
                lambda: self.tasks.update_if_status(after, expected_status=before.status),
                compensate=lambda ok: self._write_back(before, after) if ok else _nothing(),
                label="write task",
            )
            if not stored:
                return False

            if transition.flipped:
                # Delta dopiero po wygranym CAS: tylko zwycięzca wyścigu zmienia liczniki
                delta = ProjectAggregate(project).on_task_status_changed(
                    transition.was_completed, transition.will_be_completed
                )
                await saga.step(
                    lambda: apply_delta(self.projects, project.id, delta, missing_message="Task not found"),
                    label="adjust completed count",
                )
                logger.info(
                    "Task %s %s, project %s completedTasks %+d",
                    after.id, "completed" if transition.will_be_completed else "reopened",
                    project.id, delta.completed,
                )
        return True

    async def _write_back(self, before: TaskEntity, after: TaskEntity) -> bool:
        return await self.tasks.update_if_status(before, expected_status=after.status)

    @surface_faults
    async def delete(self, task_id, caller_id: int) -> None:
        task, project = await self._load_owned(task_id, caller_id)

        for attempt in range(MAX_CAS_ATTEMPTS):
            try:
                if await self._remove(task, project):
                    logger.info("Task %s removed from project %s", task.id, project.id)
                    return
            except InconsistencyError:
                # Np. zadanie już Completed, a completedTasks jeszcze nie podbite; zadanie przywrócone
                if attempt + 1 == MAX_CAS_ATTEMPTS:
                    raise
                logger.warning("Task %s: project %s counters not settled, retrying delete", task.id, project.id)

            await asyncio.sleep(RETRY_DELAY * (attempt + 1))
            current = await self.tasks.get_by_id(task.id)
            if current is None:
                raise NotFoundError("Task not found")
            task = current
            project = await self.guard.require(ResourceKind.TASK, caller_id, task)

        raise InternalFault(f"Task {task.id} keeps changing concurrently, delete abandoned")

    async def _remove(self, task: TaskEntity, project: ProjectEntity) -> bool:
        async with Saga("delete task") as saga:
            removed = await saga.step(
                lambda: self.tasks.delete_if_status(task.id, task.status),
                compensate=lambda ok: self.tasks.restore(task) if ok else _nothing(),
                label="remove task",
            )
            if not removed:
                return False

            # was_completed = status faktycznie usunięty (delete jest warunkowy)
            delta = ProjectAggregate(project).on_task_deleted(task.is_completed())
            updated = await self.projects.apply_counter_delta(project.id, delta)
            if updated is None and await self.projects.get_by_id(project.id) is not None:
                # Projekt żyje, a magazyn odrzucił deltę -> saga przywróci zadanie
                raise InconsistencyError(f"Counter delta {delta} rejected for project {project.id}")
            # Projekt zniknął (kaskada w toku): nie ma czego korygować
        return True


async def _nothing():
    return None
