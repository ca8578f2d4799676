# apps/tasks/views.py
from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods

from apps.core.http import api_view, form_errors_response, json_body, token_required
from apps.projects.adapters.orm_repositories import DjangoProjectRepository
from .adapters.orm_repositories import DjangoTaskRepository
from .application.services import TaskService
from .domain.entities import TaskEntity
from .domain.lifecycle import TaskPatch
from .forms import TaskUpdateForm


def build_task_service() -> TaskService:
    # Manual Dependency Injection
    return TaskService(tasks=DjangoTaskRepository(), projects=DjangoProjectRepository())


def task_to_dict(task: TaskEntity) -> dict:
    return {
        'id': task.id,
        'project': task.project_id,
        'title': task.title,
        'description': task.description,
        'status': task.status.value,
        'completedAt': task.completed_at.isoformat() if task.completed_at else None,
        'createdAt': task.created_at.isoformat() if task.created_at else None,
    }


@csrf_exempt
@require_http_methods(["GET", "PUT", "DELETE"])
@api_view
@token_required
async def task_detail_view(request, pk):
    service = build_task_service()
    caller_id = request.identity.id

    if request.method == "GET":
        task = await service.get(pk, caller_id)
        return JsonResponse(task_to_dict(task))

    if request.method == "PUT":
        form = TaskUpdateForm(json_body(request))
        if not form.is_valid():
            return form_errors_response(form)

        task = await service.update(pk, caller_id, TaskPatch(**form.present_fields()))
        return JsonResponse(task_to_dict(task))

    await service.delete(pk, caller_id)
    return JsonResponse({'message': "Task removed"})
