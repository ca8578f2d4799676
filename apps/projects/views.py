from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods

from apps.core.http import api_view, form_errors_response, json_body, token_required
from apps.tasks.adapters.orm_repositories import DjangoTaskRepository
from apps.tasks.views import task_to_dict
from .adapters.orm_repositories import DjangoProjectRepository
from .application.services import ProjectService
from .domain.entities import ProjectEntity
from .forms import NewTaskForm, ProjectForm


def build_project_service() -> ProjectService:
    # Manual Dependency Injection (jak w widokach zadań)
    return ProjectService(projects=DjangoProjectRepository(), tasks=DjangoTaskRepository())


def project_to_dict(project: ProjectEntity) -> dict:
    return {
        'id': project.id,
        'user': project.user_id,
        'title': project.title,
        'description': project.description,
        'taskCount': project.task_count,
        'completedTasks': project.completed_tasks,
        'createdAt': project.created_at.isoformat() if project.created_at else None,
    }


@csrf_exempt
@require_http_methods(["GET", "POST"])
@api_view
@token_required
async def project_list_view(request):
    """Lista projektów użytkownika (najnowsze pierwsze) albo utworzenie nowego."""
    service = build_project_service()

    if request.method == "GET":
        projects = await service.list(request.identity.id)
        return JsonResponse([project_to_dict(p) for p in projects], safe=False)

    form = ProjectForm(json_body(request))
    if not form.is_valid():
        return form_errors_response(form)

    project = await service.create(
        request.identity.id, form.cleaned_data['title'], form.cleaned_data['description']
    )
    return JsonResponse(project_to_dict(project), status=201)


@csrf_exempt
@require_http_methods(["GET", "PUT", "DELETE"])
@api_view
@token_required
async def project_detail_view(request, pk):
    service = build_project_service()
    caller_id = request.identity.id

    if request.method == "GET":
        return JsonResponse(project_to_dict(await service.get(pk, caller_id)))

    if request.method == "PUT":
        form = ProjectForm(json_body(request))
        if not form.is_valid():
            return form_errors_response(form)
        project = await service.update(
            pk, caller_id, form.cleaned_data['title'], form.cleaned_data['description']
        )
        return JsonResponse(project_to_dict(project))

    await service.delete(pk, caller_id)
    return JsonResponse({'message': "Project removed"})


@csrf_exempt
@require_http_methods(["GET", "POST"])
@api_view
@token_required
async def project_tasks_view(request, pk):
    service = build_project_service()
    caller_id = request.identity.id

    if request.method == "GET":
        tasks = await service.list_tasks(pk, caller_id)
        return JsonResponse([task_to_dict(t) for t in tasks], safe=False)

    form = NewTaskForm(json_body(request))
    if not form.is_valid():
        return form_errors_response(form)

    task = await service.create_task(
        pk, caller_id, form.cleaned_data['title'], form.cleaned_data['description']
    )
    return JsonResponse(task_to_dict(task), status=201)


@csrf_exempt
@require_http_methods(["POST"])
@api_view
@token_required
async def project_reconcile_view(request, pk):
    """Przelicza liczniki projektu ze skanu zadań (ścieżka naprawcza)."""
    project = await build_project_service().reconcile(pk, request.identity.id)
    return JsonResponse(project_to_dict(project))
