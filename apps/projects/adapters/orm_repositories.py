# apps/projects/adapters/orm_repositories.py
from datetime import datetime
from typing import List, Optional

from django.db.models import F

from apps.projects.domain.entities import CounterDelta, ProjectEntity
from apps.projects.models import Project as ProjectModel
from apps.projects.ports.repositories import IProjectRepository


class DjangoProjectRepository(IProjectRepository):
    def to_entity(self, model: ProjectModel) -> ProjectEntity:
        """Konwertuje Model Django -> Czystą Encję."""
        return ProjectEntity(
            id=model.id,
            user_id=model.user_id,
            title=model.title,
            description=model.description,
            task_count=model.task_count,
            completed_tasks=model.completed_tasks,
            created_at=model.created_at,
            deleted_at=model.deleted_at,
        )

    def _live(self):
        return ProjectModel.objects.filter(deleted_at__isnull=True)

    async def get_by_id(self, project_id: int, include_deleted: bool = False) -> Optional[ProjectEntity]:
        qs = ProjectModel.objects.all() if include_deleted else self._live()
        obj = await qs.filter(id=project_id).afirst()
        return self.to_entity(obj) if obj else None

    async def list_by_owner(self, user_id: int) -> List[ProjectEntity]:
        qs = self._live().filter(user_id=user_id).order_by('-created_at', '-id')
        return [self.to_entity(p) async for p in qs]

    async def list_all(self) -> List[ProjectEntity]:
        return [self.to_entity(p) async for p in self._live().order_by('id')]

    async def count_by_owner(self, user_id: int) -> int:
        return await self._live().filter(user_id=user_id).acount()

    async def create(self, project: ProjectEntity) -> ProjectEntity:
        data = {
            'user_id': project.user_id,
            'title': project.title,
            'description': project.description,
        }
        if project.created_at:
            data['created_at'] = project.created_at

        obj = await ProjectModel.objects.acreate(**data)
        return self.to_entity(obj)

    async def update_details(self, project_id: int, title: str, description: str) -> Optional[ProjectEntity]:
        updated = await self._live().filter(id=project_id).aupdate(title=title, description=description)
        if not updated:
            return None
        return await self.get_by_id(project_id)

    async def apply_counter_delta(self, project_id: int, delta: CounterDelta) -> Optional[ProjectEntity]:
        qs = self._live().filter(id=project_id)

        # Warunki w WHERE: UPDATE nie dotknie wiersza, jeśli wynik złamałby niezmiennik
        if delta.tasks < 0:
            qs = qs.filter(task_count__gte=-delta.tasks)
        if delta.completed < 0:
            qs = qs.filter(completed_tasks__gte=-delta.completed)
        qs = qs.filter(completed_tasks__lte=F('task_count') + (delta.tasks - delta.completed))

        updated = await qs.aupdate(
            task_count=F('task_count') + delta.tasks,
            completed_tasks=F('completed_tasks') + delta.completed,
        )
        if not updated:
            return None
        return await self.get_by_id(project_id)

    async def set_counters(self, project_id: int, task_count: int, completed_tasks: int) -> Optional[ProjectEntity]:
        updated = await self._live().filter(id=project_id).aupdate(
            task_count=task_count, completed_tasks=completed_tasks
        )
        if not updated:
            return None
        return await self.get_by_id(project_id)

    async def mark_deleted(self, project_id: int, when: datetime) -> bool:
        updated = await self._live().filter(id=project_id).aupdate(deleted_at=when)
        return updated > 0

    async def delete(self, project_id: int) -> bool:
        deleted, _ = await ProjectModel.objects.filter(id=project_id).adelete()
        return deleted > 0
