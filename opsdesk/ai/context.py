"""Per-user dashboard snapshot fed to the assistant as plain text."""
from __future__ import annotations

from dataclasses import dataclass, field

from sqlalchemy import or_

from ..common.datetime_utils import short_date
from ..core.constants import (
    AI_CONTEXT_ATTENDANCE_LIMIT,
    AI_CONTEXT_LEAVE_LIMIT,
    AI_CONTEXT_PAGE_LIMIT,
    AI_CONTEXT_TASK_LIMIT,
)
from ..core.enums import AttendanceStatus, RequestStatus, TaskPriority, TaskStatus
from ..models.attendance import Attendance
from ..models.leave import LeaveRequest
from ..models.message import Message
from ..models.page import CustomPage
from ..models.task import Task
from ..models.user import User

ACTIVE_TASK_LINES = 8
PAGE_LINES = 3
CLOSED_TASK_STATUSES = (TaskStatus.COMPLETED.value, TaskStatus.CANCELLED.value)


@dataclass
class UserSnapshot:
    user: User
    tasks: list = field(default_factory=list)
    leaves: list = field(default_factory=list)
    attendance: list = field(default_factory=list)
    unread_messages: int = 0
    pages: list = field(default_factory=list)

    @property
    def first_name(self) -> str:
        return self.user.first_name or self.user.full_name.split(" ")[0]

    def tasks_with(self, *, status=None, priority=None) -> list:
        return [
            t for t in self.tasks
            if (status is None or t.status == status) and (priority is None or t.priority == priority)
        ]

    def leaves_with(self, status) -> list:
        return [l for l in self.leaves if l.status == status]

    def attendance_with(self, status) -> list:
        return [a for a in self.attendance if a.status == status]


def gather_snapshot(user: User) -> UserSnapshot:
    tasks = Task.query
    if not user.is_super_admin:
        tasks = tasks.filter(or_(Task.assignee_id == user.id, Task.creator_id == user.id))

    return UserSnapshot(
        user=user,
        tasks=tasks.order_by(Task.created_at.desc(), Task.id.desc()).limit(AI_CONTEXT_TASK_LIMIT).all(),
        leaves=(
            LeaveRequest.query.filter_by(requester_id=user.id)
            .order_by(LeaveRequest.created_at.desc())
            .limit(AI_CONTEXT_LEAVE_LIMIT)
            .all()
        ),
        attendance=(
            Attendance.query.filter_by(user_id=user.id)
            .order_by(Attendance.date.desc())
            .limit(AI_CONTEXT_ATTENDANCE_LIMIT)
            .all()
        ),
        unread_messages=Message.query.filter_by(receiver_id=user.id, is_read=False).count(),
        pages=(
            CustomPage.query.filter_by(user_id=user.id)
            .order_by(CustomPage.updated_at.desc())
            .limit(AI_CONTEXT_PAGE_LIMIT)
            .all()
        ),
    )


def build_context_string(snapshot: UserSnapshot) -> str:
    user = snapshot.user
    lines = [f"User: {user.full_name} ({user.role})"]
    if user.department:
        lines.append(f"Department: {user.department}")
    if user.position:
        lines.append(f"Position: {user.position}")

    lines.append(f"\nTASKS ({len(snapshot.tasks)} total):")
    lines.append(
        f"- TODO: {len(snapshot.tasks_with(status=TaskStatus.TODO.value))}, "
        f"In Progress: {len(snapshot.tasks_with(status=TaskStatus.IN_PROGRESS.value))}, "
        f"Review: {len(snapshot.tasks_with(status=TaskStatus.REVIEW.value))}, "
        f"Completed: {len(snapshot.tasks_with(status=TaskStatus.COMPLETED.value))}"
    )
    lines.append(
        f"- Priority: {len(snapshot.tasks_with(priority=TaskPriority.URGENT.value))} urgent, "
        f"{len(snapshot.tasks_with(priority=TaskPriority.HIGH.value))} high"
    )
    active = [t for t in snapshot.tasks if t.status not in CLOSED_TASK_STATUSES]
    if active:
        lines.append("Active tasks:")
        for task in active[:ACTIVE_TASK_LINES]:
            assignee = f" -> Assigned to {task.assignee.first_name}" if task.assignee else ""
            due = f" (due: {short_date(task.due_date)})" if task.due_date else ""
            lines.append(f"  * {task.title} [{task.status}] {task.priority}{assignee}{due}")

    pending = snapshot.leaves_with(RequestStatus.PENDING.value)
    approved = snapshot.leaves_with(RequestStatus.APPROVED.value)
    lines.append(f"\nLEAVES: {len(pending)} pending, {len(approved)} approved")
    if pending:
        lines.append("Pending requests:")
        for leave in pending:
            lines.append(f"  * {leave.type}: {short_date(leave.start_date)} - {short_date(leave.end_date)}")

    lines.append(
        f"\nATTENDANCE (last {len(snapshot.attendance)} days): "
        f"{len(snapshot.attendance_with(AttendanceStatus.PRESENT.value))} present, "
        f"{len(snapshot.attendance_with(AttendanceStatus.LATE.value))} late, "
        f"{len(snapshot.attendance_with(AttendanceStatus.ABSENT.value))} absent"
    )
    lines.append(f"\nMESSAGES: {snapshot.unread_messages} unread")

    if snapshot.pages:
        lines.append(f"\nPAGES: {len(snapshot.pages)} custom pages")
        for page in snapshot.pages[:PAGE_LINES]:
            lines.append(f"  * [Page] {page.title}")

    return "\n".join(lines)
