# apps/projects/ports/repositories.py
from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from apps.projects.domain.entities import CounterDelta, ProjectEntity


class IProjectRepository(ABC):
    @abstractmethod
    async def get_by_id(self, project_id: int, include_deleted: bool = False) -> Optional[ProjectEntity]:
        """Projekty z tombstone są domyślnie niewidoczne."""
        pass

    @abstractmethod
    async def list_by_owner(self, user_id: int) -> List[ProjectEntity]:
        """Żywe projekty użytkownika, najnowsze pierwsze."""
        pass

    @abstractmethod
    async def list_all(self) -> List[ProjectEntity]:
        pass

    @abstractmethod
    async def count_by_owner(self, user_id: int) -> int:
        pass

    @abstractmethod
    async def create(self, project: ProjectEntity) -> ProjectEntity:
        pass

    @abstractmethod
    async def update_details(self, project_id: int, title: str, description: str) -> Optional[ProjectEntity]:
        """Zwraca None, jeśli projektu (żywego) już nie ma."""
        pass

    @abstractmethod
    async def apply_counter_delta(self, project_id: int, delta: CounterDelta) -> Optional[ProjectEntity]:
        """
        Atomowa zmiana liczników po stronie magazynu (bez read-modify-write).
        Zwraca None, gdy projekt zniknął / ma tombstone albo wynik złamałby
        niezmiennik 0 <= completed <= total (wtedy nic nie jest zapisywane).
        """
        pass

    @abstractmethod
    async def set_counters(self, project_id: int, task_count: int, completed_tasks: int) -> Optional[ProjectEntity]:
        """Tylko dla ścieżki naprawczej (reconcile)."""
        pass

    @abstractmethod
    async def mark_deleted(self, project_id: int, when: datetime) -> bool:
        pass

    @abstractmethod
    async def delete(self, project_id: int) -> bool:
        pass
