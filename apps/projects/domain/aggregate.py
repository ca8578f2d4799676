# apps/projects/domain/aggregate.py
from dataclasses import replace
from typing import Iterable

from apps.core.domain.errors import InconsistencyError
from apps.projects.domain.entities import CounterDelta, ProjectEntity

COMPLETED_STATUS = 'Completed'


def check_counters(task_count: int, completed_tasks: int) -> None:
    """Niezmiennik: 0 <= completed_tasks <= task_count."""
    if task_count < 0 or completed_tasks < 0 or completed_tasks > task_count:
        raise InconsistencyError(
            f"Project counters out of range: taskCount={task_count}, completedTasks={completed_tasks}"
        )


class ProjectAggregate:
    """
    Zdenormalizowane liczniki projektu (taskCount / completedTasks).

    Liczniki zmieniają się tylko przyrostowo, w chwili gdy znane jest
    zdarzenie (utworzenie, usunięcie, zmiana "ukończoności" zadania).
    Każda operacja zwraca CounterDelta, którą serwis aplikuje atomowo w magazynie.
    Pełne przeliczenie (reconcile) jest tylko ścieżką naprawczą.
    """

    def __init__(self, project: ProjectEntity):
        self._project = project

    @property
    def project(self) -> ProjectEntity:
        return self._project

    @property
    def task_count(self) -> int:
        return self._project.task_count

    @property
    def completed_tasks(self) -> int:
        return self._project.completed_tasks

    def on_task_created(self) -> CounterDelta:
        return self._apply(CounterDelta(tasks=1))

    def on_task_deleted(self, was_completed: bool) -> CounterDelta:
        return self._apply(CounterDelta(tasks=-1, completed=-1 if was_completed else 0))

    def on_task_status_changed(self, was_completed: bool, will_be_completed: bool) -> CounterDelta:
        if was_completed == will_be_completed:
            return CounterDelta()
        return self._apply(CounterDelta(completed=1 if will_be_completed else -1))

    def _apply(self, delta: CounterDelta) -> CounterDelta:
        task_count = self._project.task_count + delta.tasks
        completed = self._project.completed_tasks + delta.completed
        check_counters(task_count, completed)

        self._project = replace(self._project, task_count=task_count, completed_tasks=completed)
        return delta

    @staticmethod
    def reconcile(project: ProjectEntity, statuses: Iterable[str]) -> ProjectEntity:
        """Przelicza liczniki od zera na podstawie statusów żywych zadań."""
        statuses = [str(getattr(s, 'value', s)) for s in statuses]
        completed = sum(1 for s in statuses if s == COMPLETED_STATUS)
        return replace(project, task_count=len(statuses), completed_tasks=completed)
