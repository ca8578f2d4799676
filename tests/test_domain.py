# tests/test_domain.py
from datetime import datetime, timezone

import pytest

from apps.core.domain.errors import ErrorKind, InconsistencyError, InvalidInputError, NotFoundError
from apps.core.domain.guard import AuthorizationGuard, Decision, ResourceKind
from apps.core.domain.identifiers import parse_id
from apps.projects.domain.aggregate import ProjectAggregate
from apps.projects.domain.entities import CounterDelta, ProjectEntity
from apps.tasks.domain.entities import TaskEntity, TaskStatus
from apps.tasks.domain.lifecycle import TaskLifecycle, TaskPatch

NOW = datetime(2024, 5, 1, 9, 30, tzinfo=timezone.utc)


def make_project(task_count=0, completed_tasks=0) -> ProjectEntity:
    return ProjectEntity(id=1, user_id=7, title="P1", description="d",
                         task_count=task_count, completed_tasks=completed_tasks)


def make_task(status=TaskStatus.PENDING, completed_at=None) -> TaskEntity:
    return TaskEntity(id=3, project_id=1, title="T1", description="d",
                      status=status, completed_at=completed_at)


# --- AuthorizationGuard ---

def test_guard_allows_owner_and_denies_others() -> None:
    assert AuthorizationGuard.authorize(7, 7) is Decision.ALLOW
    assert AuthorizationGuard.authorize("7", 7) is Decision.ALLOW
    assert AuthorizationGuard.authorize(8, 7) is Decision.DENY
    assert AuthorizationGuard.authorize(None, 7) is Decision.DENY


@pytest.mark.asyncio
async def test_guard_reports_missing_resource_before_authorization() -> None:
    async def resolver(resource):
        return None

    guard = AuthorizationGuard({ResourceKind.TASK: resolver})

    with pytest.raises(NotFoundError) as exc:
        await guard.require(ResourceKind.TASK, 99, make_task())
    assert exc.value.message == "Task not found"


@pytest.mark.asyncio
async def test_guard_resolves_task_owner_through_project() -> None:
    project = make_project()

    async def resolver(task):
        return project if task.project_id == project.id else None

    guard = AuthorizationGuard({ResourceKind.TASK: resolver})

    assert await guard.require(ResourceKind.TASK, 7, make_task()) is project
    with pytest.raises(Exception) as exc:
        await guard.require(ResourceKind.TASK, 8, make_task())
    assert exc.value.kind is ErrorKind.UNAUTHORIZED


@pytest.mark.parametrize("raw", ["abc", "", None, "12x", "-1", 0, True])
def test_parse_id_turns_malformed_ids_into_not_found(raw) -> None:
    with pytest.raises(NotFoundError):
        parse_id(raw, "Project not found")


def test_parse_id_accepts_numeric_strings() -> None:
    assert parse_id(" 42 ", "x") == 42
    assert parse_id(5, "x") == 5


# --- ProjectAggregate ---

def test_aggregate_counts_created_and_deleted_tasks() -> None:
    aggregate = ProjectAggregate(make_project(task_count=2, completed_tasks=1))

    assert aggregate.on_task_created() == CounterDelta(tasks=1)
    assert aggregate.on_task_deleted(was_completed=True) == CounterDelta(tasks=-1, completed=-1)
    assert (aggregate.task_count, aggregate.completed_tasks) == (2, 0)


def test_aggregate_status_change_is_noop_when_completedness_does_not_flip() -> None:
    aggregate = ProjectAggregate(make_project(task_count=1, completed_tasks=1))

    delta = aggregate.on_task_status_changed(was_completed=True, will_be_completed=True)

    assert delta == CounterDelta()
    assert aggregate.completed_tasks == 1


def test_aggregate_status_change_moves_completed_counter() -> None:
    aggregate = ProjectAggregate(make_project(task_count=1))

    assert aggregate.on_task_status_changed(False, True) == CounterDelta(completed=1)
    assert aggregate.on_task_status_changed(True, False) == CounterDelta(completed=-1)
    assert aggregate.completed_tasks == 0


def test_aggregate_refuses_to_go_negative() -> None:
    aggregate = ProjectAggregate(make_project())

    with pytest.raises(InconsistencyError) as exc:
        aggregate.on_task_deleted(was_completed=False)
    assert exc.value.kind is ErrorKind.INTERNAL_FAULT
    assert aggregate.task_count == 0


def test_aggregate_refuses_more_completed_than_tasks() -> None:
    aggregate = ProjectAggregate(make_project(task_count=1, completed_tasks=1))

    with pytest.raises(InconsistencyError):
        aggregate.on_task_status_changed(False, True)


def test_project_counters_cannot_be_assigned_directly() -> None:
    project = make_project()
    with pytest.raises(AttributeError):
        project.task_count = 10


def test_reconcile_recomputes_counters_from_statuses() -> None:
    drifted = make_project(task_count=5, completed_tasks=4)

    fixed = ProjectAggregate.reconcile(drifted, ["Pending", "Completed", TaskStatus.COMPLETED])

    assert (fixed.task_count, fixed.completed_tasks) == (3, 2)


# --- TaskLifecycle ---

def test_entering_completed_sets_completed_at() -> None:
    transition = TaskLifecycle().apply(make_task(), TaskPatch(status="Completed"), now=NOW)

    assert transition.after.status is TaskStatus.COMPLETED
    assert transition.after.completed_at == NOW
    assert transition.flipped


def test_leaving_completed_clears_completed_at() -> None:
    task = make_task(status=TaskStatus.COMPLETED, completed_at=NOW)

    transition = TaskLifecycle().apply(task, TaskPatch(status="InProgress"), now=NOW)

    assert transition.after.completed_at is None
    assert transition.was_completed and not transition.will_be_completed


def test_completed_again_keeps_original_timestamp() -> None:
    earlier = datetime(2024, 1, 1, tzinfo=timezone.utc)
    task = make_task(status=TaskStatus.COMPLETED, completed_at=earlier)

    transition = TaskLifecycle().apply(task, TaskPatch(status="Completed"), now=NOW)

    assert transition.after.completed_at == earlier
    assert not transition.flipped
    assert not transition.changed


def test_pending_to_in_progress_does_not_touch_completed_at() -> None:
    transition = TaskLifecycle().apply(make_task(), TaskPatch(status="InProgress"), now=NOW)

    assert transition.after.status is TaskStatus.IN_PROGRESS
    assert transition.after.completed_at is None
    assert not transition.flipped


def test_patch_changes_only_present_fields() -> None:
    transition = TaskLifecycle().apply(make_task(), TaskPatch(title="  New title "), now=NOW)

    assert transition.after.title == "New title"
    assert transition.after.description == "d"
    assert transition.after.status is TaskStatus.PENDING


def test_empty_patch_changes_nothing() -> None:
    assert not TaskLifecycle().apply(make_task(), TaskPatch(), now=NOW).changed


@pytest.mark.parametrize("patch", [
    TaskPatch(title="   "),
    TaskPatch(description=""),
    TaskPatch(status="Done"),
    TaskPatch(status=""),
])
def test_invalid_patch_values_are_validation_errors(patch) -> None:
    with pytest.raises(InvalidInputError):
        TaskLifecycle().apply(make_task(), patch, now=NOW)
