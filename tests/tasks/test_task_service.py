from __future__ import annotations

import pytest

from opsdesk.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from opsdesk.services.task_service import TaskService


def test_create_task_defaults(staff):
    task = TaskService.create_task(user=staff, data={"title": "  Write report "})

    assert task.title == "Write report"
    assert task.status == "TODO"
    assert task.priority == "MEDIUM"
    assert task.creator_id == staff.id
    assert task.assignee_id is None


def test_create_task_requires_title(staff):
    with pytest.raises(ValidationError, match="Title is required"):
        TaskService.create_task(user=staff, data={"title": "  "})


def test_create_task_rejects_unknown_assignee_and_priority(staff):
    with pytest.raises(ValidationError, match="Assignee does not exist"):
        TaskService.create_task(user=staff, data={"title": "x", "assigneeId": 999})
    with pytest.raises(ValidationError, match="priority must be one of"):
        TaskService.create_task(user=staff, data={"title": "x", "priority": "CRITICAL"})


def test_list_orders_by_priority_then_newest(staff):
    low = TaskService.create_task(user=staff, data={"title": "low", "priority": "LOW"})
    urgent = TaskService.create_task(user=staff, data={"title": "urgent", "priority": "URGENT"})
    medium_old = TaskService.create_task(user=staff, data={"title": "m1"})
    medium_new = TaskService.create_task(user=staff, data={"title": "m2"})

    ids = [t.id for t in TaskService.list_tasks(user=staff)]

    assert ids == [urgent.id, medium_new.id, medium_old.id, low.id]


def test_staff_only_sees_own_or_assigned_tasks(staff, manager, make_user):
    other = make_user()
    mine = TaskService.create_task(user=staff, data={"title": "mine"})
    assigned = TaskService.create_task(user=manager, data={"title": "for sita", "assigneeId": staff.id})
    TaskService.create_task(user=other, data={"title": "not mine"})

    staff_ids = {t.id for t in TaskService.list_tasks(user=staff)}
    manager_ids = {t.id for t in TaskService.list_tasks(user=manager)}

    assert staff_ids == {mine.id, assigned.id}
    assert len(manager_ids) == 3


def test_list_filters_by_status(staff):
    TaskService.create_task(user=staff, data={"title": "a"})
    done = TaskService.create_task(user=staff, data={"title": "b", "status": "COMPLETED"})

    assert [t.id for t in TaskService.list_tasks(user=staff, status="COMPLETED")] == [done.id]
    assert len(TaskService.list_tasks(user=staff, status="all")) == 2


def test_update_task_partial(staff):
    task = TaskService.create_task(user=staff, data={"title": "a", "dueDate": "2026-03-10"})

    TaskService.update_task(user=staff, task_id=task.id, data={"status": "IN_PROGRESS", "dueDate": None})

    assert task.status == "IN_PROGRESS"
    assert task.due_date is None
    assert task.title == "a"


def test_delete_requires_creator_or_admin(staff, make_user, admin):
    task = TaskService.create_task(user=staff, data={"title": "a"})
    with pytest.raises(AuthorizationError):
        TaskService.delete_task(user=make_user(), task_id=task.id)
    TaskService.delete_task(user=admin, task_id=task.id)
    with pytest.raises(NotFoundError, match="Task not found"):
        TaskService.get_task(task.id)


def test_comments_are_oldest_first(staff):
    task = TaskService.create_task(user=staff, data={"title": "a"})
    first = TaskService.add_comment(user=staff, task_id=task.id, content="first")
    second = TaskService.add_comment(user=staff, task_id=task.id, content="second")

    assert [c.id for c in TaskService.list_comments(task.id)] == [first.id, second.id]
    with pytest.raises(ValidationError, match="Content is required"):
        TaskService.add_comment(user=staff, task_id=task.id, content="")


def test_set_due_date_checks_participation(staff, make_user):
    task = TaskService.create_task(user=staff, data={"title": "a"})
    with pytest.raises(AuthorizationError):
        TaskService.set_due_date(user=make_user(), task_id=task.id, due_date="2026-04-01")

    TaskService.set_due_date(user=staff, task_id=task.id, due_date="2026-04-01")
    assert task.due_date.date().isoformat() == "2026-04-01"
