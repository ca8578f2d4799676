# tests/conftest.py
import pytest

from apps.projects.application.services import ProjectService
from apps.tasks.application.services import TaskService

from .fakes import FakeClock, InMemoryProjectRepository, InMemoryTaskRepository

OWNER = 1
STRANGER = 2


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def projects() -> InMemoryProjectRepository:
    return InMemoryProjectRepository()


@pytest.fixture()
def tasks(projects) -> InMemoryTaskRepository:
    return InMemoryTaskRepository(projects)


@pytest.fixture()
def project_service(projects, tasks, clock) -> ProjectService:
    """ProjectService na repozytoriach w pamięci (bez bazy)."""
    return ProjectService(projects=projects, tasks=tasks, clock=clock)


@pytest.fixture()
def task_service(projects, tasks, clock) -> TaskService:
    return TaskService(tasks=tasks, projects=projects, clock=clock)
