# apps/tasks/domain/lifecycle.py
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional, Union

from apps.core.domain.errors import InvalidInputError
from apps.tasks.domain.entities import TaskEntity, TaskStatus


@dataclass(frozen=True)
class TaskPatch:
    """Częściowa aktualizacja: None = pole nieobecne w żądaniu."""
    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[Union[str, TaskStatus]] = None


@dataclass(frozen=True)
class Transition:
    before: TaskEntity
    after: TaskEntity

    @property
    def was_completed(self) -> bool:
        return self.before.is_completed()

    @property
    def will_be_completed(self) -> bool:
        return self.after.is_completed()

    @property
    def flipped(self) -> bool:
        """Czy zmieniła się "ukończoność" (jedyny fakt istotny dla liczników)."""
        return self.was_completed != self.will_be_completed

    @property
    def changed(self) -> bool:
        return self.before != self.after


class TaskLifecycle:
    """
    Maszyna stanów pola status/completed_at.

    Przejścia między Pending, InProgress i Completed są dowolne;
    obowiązkowe są tylko efekty uboczne na completed_at.
    """

    @staticmethod
    def parse_status(value: Union[str, TaskStatus]) -> TaskStatus:
        try:
            return TaskStatus(value)
        except ValueError:
            allowed = ", ".join(s.value for s in TaskStatus)
            raise InvalidInputError(f"Status must be one of: {allowed}")

    def apply(self, task: TaskEntity, patch: TaskPatch, now: datetime) -> Transition:
        changes = {}

        if patch.title is not None:
            title = patch.title.strip()
            if not title:
                raise InvalidInputError("Title is required")
            changes['title'] = title

        if patch.description is not None:
            if not patch.description.strip():
                raise InvalidInputError("Description is required")
            changes['description'] = patch.description

        if patch.status is not None:
            new_status = self.parse_status(patch.status)
            changes['status'] = new_status

            was_completed = task.is_completed()
            will_be_completed = new_status == TaskStatus.COMPLETED
            if will_be_completed and not was_completed:
                changes['completed_at'] = now
            elif was_completed and not will_be_completed:
                changes['completed_at'] = None

        return Transition(before=task, after=replace(task, **changes))
