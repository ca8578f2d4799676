# apps/tasks/domain/entities.py
from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from enum import Enum


class TaskStatus(str, Enum):
    PENDING = 'Pending'
    IN_PROGRESS = 'InProgress'
    COMPLETED = 'Completed'


@dataclass(frozen=True)
class TaskEntity:
    id: Optional[int]  # ID może być None przed zapisem
    project_id: int
    title: str
    description: str
    status: TaskStatus = TaskStatus.PENDING

    # Ustawiane dokładnie przy wejściu w Completed, czyszczone przy wyjściu
    completed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    def is_completed(self) -> bool:
        return self.status == TaskStatus.COMPLETED
