from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import case, or_

from ..common.datetime_utils import optional_datetime
from ..common.validators import require_non_empty, validate_enum, validate_string
from ..core.enums import PRIORITY_WEIGHT, TaskPriority, TaskStatus, values_of
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..extensions import db
from ..models.task import Task, TaskComment
from ..models.user import User
from .base import get_or_404, optional_int

log = logging.getLogger(__name__)


def _priority_order():
    return case(PRIORITY_WEIGHT, value=Task.priority, else_=0)


def _check_user(user_id: Optional[int], field_name: str) -> Optional[int]:
    if user_id is not None and db.session.get(User, user_id) is None:
        raise ValidationError(f"{field_name} does not exist")
    return user_id


class TaskService:
    @staticmethod
    def list_tasks(*, user: User, status: Optional[str] = None, assignee_id: Optional[int] = None) -> list[Task]:
        query = Task.query
        if not user.is_manager:
            query = query.filter(or_(Task.assignee_id == user.id, Task.creator_id == user.id))
        if status and status != "all":
            query = query.filter(Task.status == status)
        if assignee_id is not None:
            query = query.filter(Task.assignee_id == assignee_id)
        return query.order_by(_priority_order().desc(), Task.created_at.desc(), Task.id.desc()).all()

    @staticmethod
    def create_task(*, user: User, data: dict) -> Task:
        title = require_non_empty(data.get("title"), "Title", "Title is required")
        task = Task(
            title=validate_string(title, "Title", max_length=255),
            description=validate_string(data.get("description"), "Description") or None,
            priority=validate_enum(data.get("priority"), "priority", values_of(TaskPriority), default=TaskPriority.MEDIUM.value),
            status=validate_enum(data.get("status"), "status", values_of(TaskStatus), default=TaskStatus.TODO.value),
            due_date=optional_datetime(data.get("dueDate"), "dueDate"),
            assignee_id=_check_user(optional_int(data.get("assigneeId"), "assigneeId"), "Assignee"),
            project_id=optional_int(data.get("projectId"), "projectId"),
            creator_id=user.id,
        )
        db.session.add(task)
        db.session.commit()
        log.info("Task %s created by %s", task.id, user.id)
        return task

    @staticmethod
    def get_task(task_id: int) -> Task:
        return get_or_404(Task, task_id, "Task not found")

    @staticmethod
    def update_task(*, user: User, task_id: int, data: dict) -> Task:
        task = get_or_404(Task, task_id, "Task not found")

        if "title" in data:
            task.title = require_non_empty(data["title"], "Title", "Title is required")
        if "description" in data:
            task.description = validate_string(data["description"], "Description") or None
        if "status" in data:
            task.status = validate_enum(data["status"], "status", values_of(TaskStatus), required=True)
        if "priority" in data:
            task.priority = validate_enum(data["priority"], "priority", values_of(TaskPriority), required=True)
        if "dueDate" in data:
            task.due_date = optional_datetime(data["dueDate"], "dueDate")
        if "assigneeId" in data:
            task.assignee_id = _check_user(optional_int(data["assigneeId"], "assigneeId"), "Assignee")
        if "projectId" in data:
            task.project_id = optional_int(data["projectId"], "projectId")

        db.session.commit()
        return task

    @staticmethod
    def delete_task(*, user: User, task_id: int) -> None:
        task = get_or_404(Task, task_id, "Task not found")
        if task.creator_id != user.id and not user.is_admin:
            raise AuthorizationError("Forbidden")
        db.session.delete(task)
        db.session.commit()
        log.info("Task %s deleted by %s", task_id, user.id)

    @staticmethod
    def set_due_date(*, user: User, task_id: int, due_date) -> Task:
        task = get_or_404(Task, task_id, "Task not found")
        if not (user.is_manager or user.id in (task.creator_id, task.assignee_id)):
            raise AuthorizationError("Forbidden")
        task.due_date = optional_datetime(due_date, "dueDate")
        db.session.commit()
        return task

    @staticmethod
    def list_comments(task_id: int) -> list[TaskComment]:
        if db.session.get(Task, task_id) is None:
            raise NotFoundError("Task not found")
        return (
            TaskComment.query.filter_by(task_id=task_id)
            .order_by(TaskComment.created_at.asc(), TaskComment.id.asc())
            .all()
        )

    @staticmethod
    def add_comment(*, user: User, task_id: int, content) -> TaskComment:
        content = require_non_empty(content, "Content", "Content is required")
        if db.session.get(Task, task_id) is None:
            raise NotFoundError("Task not found")
        comment = TaskComment(task_id=task_id, author_id=user.id, content=content)
        db.session.add(comment)
        db.session.commit()
        return comment
