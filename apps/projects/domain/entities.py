# apps/projects/domain/entities.py
from dataclasses import dataclass
from typing import Optional
from datetime import datetime


@dataclass(frozen=True)
class ProjectEntity:
    # frozen: liczniki zmienia wyłącznie ProjectAggregate (przez replace)
    id: Optional[int]  # ID może być None przed zapisem
    user_id: int
    title: str
    description: str
    task_count: int = 0
    completed_tasks: int = 0
    created_at: Optional[datetime] = None

    # Tombstone: projekt w trakcie kaskadowego usuwania
    deleted_at: Optional[datetime] = None

    def is_deleted(self) -> bool:
        return self.deleted_at is not None


@dataclass(frozen=True)
class CounterDelta:
    tasks: int = 0
    completed: int = 0

    def inverted(self) -> 'CounterDelta':
        return CounterDelta(tasks=-self.tasks, completed=-self.completed)
