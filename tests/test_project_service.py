# tests/test_project_service.py
from dataclasses import replace

import pytest

from apps.core.domain.errors import (
    InternalFault,
    InvalidInputError,
    NotFoundError,
    QuotaExceededError,
    UnauthorizedError,
)
from apps.tasks.domain.entities import TaskStatus

from .conftest import OWNER, STRANGER


@pytest.mark.asyncio
async def test_create_project_starts_with_zero_counters(project_service) -> None:
    project = await project_service.create(OWNER, "  P1  ", "d")

    assert project.id is not None
    assert project.title == "P1"
    assert (project.task_count, project.completed_tasks) == (0, 0)
    assert project.user_id == OWNER


@pytest.mark.asyncio
@pytest.mark.parametrize("title, description", [("", "d"), ("   ", "d"), ("P1", ""), (None, "d")])
async def test_create_project_requires_title_and_description(project_service, title, description) -> None:
    with pytest.raises(InvalidInputError):
        await project_service.create(OWNER, title, description)


@pytest.mark.asyncio
async def test_fifth_project_is_rejected(project_service) -> None:
    for i in range(4):
        await project_service.create(OWNER, f"P{i}", "d")

    with pytest.raises(QuotaExceededError) as exc:
        await project_service.create(OWNER, "P5", "d")

    assert "(4)" in exc.value.message
    assert len(await project_service.list(OWNER)) == 4
    # Limit jest per użytkownik
    assert (await project_service.create(STRANGER, "Other", "d")).user_id == STRANGER


@pytest.mark.asyncio
async def test_deleted_project_frees_a_slot(project_service) -> None:
    created = [await project_service.create(OWNER, f"P{i}", "d") for i in range(4)]

    await project_service.delete(created[0].id, OWNER)

    assert (await project_service.create(OWNER, "P5", "d")).title == "P5"


@pytest.mark.asyncio
async def test_list_returns_only_own_projects_newest_first(project_service) -> None:
    first = await project_service.create(OWNER, "first", "d")
    await project_service.create(STRANGER, "foreign", "d")
    second = await project_service.create(OWNER, "second", "d")

    listed = await project_service.list(OWNER)

    assert [p.id for p in listed] == [second.id, first.id]


@pytest.mark.asyncio
async def test_get_checks_existence_then_ownership(project_service) -> None:
    project = await project_service.create(OWNER, "P1", "d")

    assert (await project_service.get(str(project.id), OWNER)).id == project.id
    with pytest.raises(UnauthorizedError):
        await project_service.get(project.id, STRANGER)
    with pytest.raises(NotFoundError):
        await project_service.get(999, OWNER)
    with pytest.raises(NotFoundError):
        await project_service.get("not-an-id", OWNER)


@pytest.mark.asyncio
async def test_update_replaces_details_and_keeps_counters(project_service) -> None:
    project = await project_service.create(OWNER, "P1", "d")
    await project_service.create_task(project.id, OWNER, "T1", "d")

    updated = await project_service.update(project.id, OWNER, "Renamed", "new description")

    assert (updated.title, updated.description) == ("Renamed", "new description")
    assert updated.task_count == 1


@pytest.mark.asyncio
async def test_update_by_stranger_is_unauthorized_and_changes_nothing(project_service, projects) -> None:
    project = await project_service.create(OWNER, "P1", "d")

    with pytest.raises(UnauthorizedError):
        await project_service.update(project.id, STRANGER, "Hijacked", "x")

    assert projects.rows[project.id].title == "P1"


@pytest.mark.asyncio
async def test_update_validates_before_lookup(project_service) -> None:
    with pytest.raises(InvalidInputError):
        await project_service.update(999, OWNER, "", "d")


@pytest.mark.asyncio
async def test_create_task_bumps_task_count(project_service, projects) -> None:
    project = await project_service.create(OWNER, "P1", "d")

    task = await project_service.create_task(project.id, OWNER, "T1", "d")

    assert task.status is TaskStatus.PENDING
    assert task.completed_at is None
    assert task.project_id == project.id
    assert projects.rows[project.id].task_count == 1


@pytest.mark.asyncio
async def test_create_task_guard_chain(project_service, tasks) -> None:
    project = await project_service.create(OWNER, "P1", "d")

    with pytest.raises(UnauthorizedError):
        await project_service.create_task(project.id, STRANGER, "T1", "d")
    with pytest.raises(NotFoundError):
        await project_service.create_task("zzz", OWNER, "T1", "d")
    with pytest.raises(InvalidInputError):
        await project_service.create_task(project.id, OWNER, "T1", " ")

    assert tasks.rows == {}


@pytest.mark.asyncio
async def test_list_tasks_newest_first(project_service) -> None:
    project = await project_service.create(OWNER, "P1", "d")
    t1 = await project_service.create_task(project.id, OWNER, "T1", "d")
    t2 = await project_service.create_task(project.id, OWNER, "T2", "d")

    listed = await project_service.list_tasks(project.id, OWNER)

    assert [t.id for t in listed] == [t2.id, t1.id]
    with pytest.raises(UnauthorizedError):
        await project_service.list_tasks(project.id, STRANGER)


@pytest.mark.asyncio
async def test_delete_cascades_to_all_tasks(project_service, task_service, projects, tasks) -> None:
    project = await project_service.create(OWNER, "P1", "d")
    other = await project_service.create(OWNER, "P2", "d")
    doomed = [await project_service.create_task(project.id, OWNER, f"T{i}", "d") for i in range(3)]
    survivor = await project_service.create_task(other.id, OWNER, "keep", "d")

    removed = await project_service.delete(project.id, OWNER)

    assert removed == 3
    assert project.id not in projects.rows
    for task in doomed:
        with pytest.raises(NotFoundError):
            await task_service.get(task.id, OWNER)
    assert (await task_service.get(survivor.id, OWNER)).id == survivor.id


@pytest.mark.asyncio
async def test_delete_by_stranger_is_unauthorized(project_service, projects) -> None:
    project = await project_service.create(OWNER, "P1", "d")

    with pytest.raises(UnauthorizedError):
        await project_service.delete(project.id, STRANGER)

    assert not projects.rows[project.id].is_deleted()


@pytest.mark.asyncio
async def test_interrupted_delete_hides_project_and_can_be_resumed(project_service, projects, tasks) -> None:
    project = await project_service.create(OWNER, "P1", "d")
    await project_service.create_task(project.id, OWNER, "T1", "d")
    tasks.fail('delete_by_project')

    with pytest.raises(InternalFault):
        await project_service.delete(project.id, OWNER)

    # Tombstone: projekt niewidoczny, ale nowe zadania już do niego nie trafią
    assert await project_service.list(OWNER) == []
    with pytest.raises(NotFoundError):
        await project_service.get(project.id, OWNER)
    with pytest.raises(NotFoundError):
        await project_service.create_task(project.id, OWNER, "late", "d")

    assert await project_service.delete(project.id, OWNER) == 1
    assert projects.rows == {}
    assert tasks.rows == {}


@pytest.mark.asyncio
async def test_task_insert_failure_reverts_counter(project_service, projects, tasks) -> None:
    project = await project_service.create(OWNER, "P1", "d")
    tasks.fail('create')

    with pytest.raises(InternalFault):
        await project_service.create_task(project.id, OWNER, "T1", "d")

    assert tasks.rows == {}
    assert projects.rows[project.id].task_count == 0


@pytest.mark.asyncio
async def test_counter_failure_leaves_no_task_behind(project_service, projects, tasks) -> None:
    project = await project_service.create(OWNER, "P1", "d")
    projects.fail('apply_counter_delta')

    with pytest.raises(InternalFault):
        await project_service.create_task(project.id, OWNER, "T1", "d")

    assert tasks.rows == {}
    assert projects.rows[project.id].task_count == 0


@pytest.mark.asyncio
async def test_store_failure_surfaces_as_internal_fault(project_service, projects) -> None:
    projects.fail('list_by_owner')

    with pytest.raises(InternalFault):
        await project_service.list(OWNER)


@pytest.mark.asyncio
async def test_reconcile_repairs_drifted_counters(project_service, projects) -> None:
    project = await project_service.create(OWNER, "P1", "d")
    await project_service.create_task(project.id, OWNER, "T1", "d")
    projects.rows[project.id] = replace(projects.rows[project.id], task_count=4, completed_tasks=2)

    fixed = await project_service.reconcile(project.id, OWNER)

    assert (fixed.task_count, fixed.completed_tasks) == (1, 0)
    with pytest.raises(UnauthorizedError):
        await project_service.reconcile(project.id, STRANGER)


@pytest.mark.asyncio
async def test_task_create_racing_cascade_delete_is_not_found(project_service, projects, tasks) -> None:
    project = await project_service.create(OWNER, "P1", "d")
    insert = tasks.create

    async def insert_after_cascade(task):
        # Właściciel usuwa projekt między podbiciem licznika a zapisem zadania
        await project_service.delete(project.id, OWNER)
        return await insert(task)

    tasks.create = insert_after_cascade

    with pytest.raises(NotFoundError) as exc:
        await project_service.create_task(project.id, OWNER, "T1", "d")

    assert exc.value.message == "Project not found"
    assert tasks.rows == {}
    assert projects.rows == {}


@pytest.mark.asyncio
async def test_concurrent_create_over_quota_backs_out(project_service, projects) -> None:
    for i in range(3):
        await project_service.create(OWNER, f"P{i}", "d")
    insert = projects.create

    async def insert_alongside_other_request(project):
        # Drugie żądanie zmieściło się w limicie tuż przed nami
        await insert(replace(project, title="concurrent"))
        return await insert(project)

    projects.create = insert_alongside_other_request

    with pytest.raises(QuotaExceededError):
        await project_service.create(OWNER, "P3", "d")

    titles = sorted(p.title for p in projects.rows.values())
    assert titles == ["P0", "P1", "P2", "concurrent"]
