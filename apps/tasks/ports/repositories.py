# apps/tasks/ports/repositories.py
from abc import ABC, abstractmethod
from typing import List, Optional
from apps.tasks.domain.entities import TaskEntity, TaskStatus


class ITaskRepository(ABC):
    @abstractmethod
    async def get_by_id(self, task_id: int) -> Optional[TaskEntity]:
        pass

    @abstractmethod
    async def list_by_project(self, project_id: int) -> List[TaskEntity]:
        """Zadania projektu, najnowsze pierwsze."""
        pass

    @abstractmethod
    async def create(self, task: TaskEntity) -> TaskEntity:
        """Zapisuje nowe zadanie i zwraca encję z nadanym ID. NotFoundError, gdy projektu już nie ma."""
        pass

    @abstractmethod
    async def update_if_status(self, task: TaskEntity, expected_status: TaskStatus) -> bool:
        """
        Compare-and-set: zapisuje pola zadania tylko wtedy, gdy w magazynie
        nadal jest expected_status. False = ktoś nas wyprzedził (albo zadania nie ma).
        """
        pass

    @abstractmethod
    async def delete_if_status(self, task_id: int, expected_status: TaskStatus) -> bool:
        pass

    @abstractmethod
    async def delete_by_project(self, project_id: int) -> int:
        """Zwykłe usunięcie wszystkich zadań projektu (bez liczników)."""
        pass

    @abstractmethod
    async def restore(self, task: TaskEntity) -> TaskEntity:
        """Ponowne wstawienie usuniętego zadania z tym samym ID (kompensacja)."""
        pass

    @abstractmethod
    async def statuses_by_project(self, project_id: int) -> List[str]:
        pass
