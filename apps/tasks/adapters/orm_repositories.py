# apps/tasks/adapters/orm_repositories.py
from typing import List, Optional

from django.db import IntegrityError

from apps.core.domain.errors import NotFoundError
from apps.tasks.domain.entities import TaskEntity, TaskStatus
from apps.tasks.ports.repositories import ITaskRepository
from apps.tasks.models import Task as TaskModel


class DjangoTaskRepository(ITaskRepository):
    def to_entity(self, model: TaskModel) -> TaskEntity:
        """Konwertuje Model Django -> Czystą Encję."""
        return TaskEntity(
            id=model.id,
            project_id=model.project_id,
            title=model.title,
            description=model.description,
            status=TaskStatus(model.status),
            completed_at=model.completed_at,
            created_at=model.created_at,
        )

    def _data(self, task: TaskEntity) -> dict:
        return {
            'title': task.title,
            'description': task.description,
            'status': task.status.value,
            'completed_at': task.completed_at,
        }

    async def get_by_id(self, task_id: int) -> Optional[TaskEntity]:
        obj = await TaskModel.objects.filter(id=task_id).afirst()
        return self.to_entity(obj) if obj else None

    async def list_by_project(self, project_id: int) -> List[TaskEntity]:
        qs = TaskModel.objects.filter(project_id=project_id).order_by('-created_at', '-id')
        return [self.to_entity(t) async for t in qs]

    async def create(self, task: TaskEntity) -> TaskEntity:
        data = self._data(task)
        if task.created_at:
            data['created_at'] = task.created_at
        try:
            obj = await TaskModel.objects.acreate(project_id=task.project_id, **data)
        except IntegrityError:
            # Klucz obcy: projekt zniknął (kaskadowe usuwanie) między odczytem a zapisem
            raise NotFoundError("Project not found")
        return self.to_entity(obj)

    async def update_if_status(self, task: TaskEntity, expected_status: TaskStatus) -> bool:
        # Jeden UPDATE ... WHERE status = expected, więc dwa równoległe
        # przejścia do Completed nie mogą oba "wygrać"
        updated = await TaskModel.objects.filter(
            id=task.id, status=expected_status.value
        ).aupdate(**self._data(task))
        return updated == 1

    async def delete_if_status(self, task_id: int, expected_status: TaskStatus) -> bool:
        deleted, _ = await TaskModel.objects.filter(id=task_id, status=expected_status.value).adelete()
        return deleted > 0

    async def delete_by_project(self, project_id: int) -> int:
        deleted, _ = await TaskModel.objects.filter(project_id=project_id).adelete()
        return deleted

    async def restore(self, task: TaskEntity) -> TaskEntity:
        obj = await TaskModel.objects.acreate(
            id=task.id,
            project_id=task.project_id,
            created_at=task.created_at,
            **self._data(task)
        )
        return self.to_entity(obj)

    async def statuses_by_project(self, project_id: int) -> List[str]:
        qs = TaskModel.objects.filter(project_id=project_id).values_list('status', flat=True)
        return [s async for s in qs]
