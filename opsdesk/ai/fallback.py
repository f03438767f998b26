"""Keyword responder used when the chat provider is unavailable."""
from __future__ import annotations

import re

from ..core.enums import AttendanceStatus, RequestStatus, TaskPriority, TaskStatus
from .context import UserSnapshot

_GREETING = re.compile(r"\b(hello|hi|hey)\b")


def keyword_reply(prompt: str, snapshot: UserSnapshot) -> str:
    text = prompt.lower()

    if "task" in text or "how many" in text:
        return _tasks_reply(snapshot)
    if "leave" in text or "vacation" in text:
        pending = len(snapshot.leaves_with(RequestStatus.PENDING.value))
        approved = len(snapshot.leaves_with(RequestStatus.APPROVED.value))
        return f"Leaves: {pending} pending, {approved} approved.\n\nVisit the Leaves page to request time off or check status."
    if "attendance" in text or "clock" in text:
        present = len(snapshot.attendance_with(AttendanceStatus.PRESENT.value))
        late = len(snapshot.attendance_with(AttendanceStatus.LATE.value))
        return (
            f"Attendance (last {len(snapshot.attendance)} days): {present} present, {late} late.\n\n"
            "Go to Attendance to clock in/out."
        )
    if _GREETING.search(text):
        urgent = len(
            [t for t in snapshot.tasks_with(priority=TaskPriority.URGENT.value) if t.status != TaskStatus.COMPLETED.value]
        )
        return (
            f"Hi {snapshot.first_name}! I'm active and ready to help.\n\n"
            f"Quick Status:\n- Tasks: {len(snapshot.tasks)} ({urgent} urgent)\n"
            f"- Messages: {snapshot.unread_messages} unread\n\nAsk me anything!"
        )
    if "summary" in text or "overview" in text:
        return (
            "Your Dashboard Summary\n\n"
            f"- Tasks: {len(snapshot.tasks)} total\n"
            f"- Leaves: {len(snapshot.leaves_with(RequestStatus.PENDING.value))} pending\n"
            f"- Attendance: {len(snapshot.attendance_with(AttendanceStatus.PRESENT.value))} present\n"
            f"- Messages: {snapshot.unread_messages} unread"
        )
    return (
        "I can help you with your dashboard data.\n\n"
        'Try asking about:\n- "How many tasks?"\n- "My leave status"\n- "Unread messages"'
    )


def _tasks_reply(snapshot: UserSnapshot) -> str:
    todo = len(snapshot.tasks_with(status=TaskStatus.TODO.value))
    in_progress = len(snapshot.tasks_with(status=TaskStatus.IN_PROGRESS.value))
    important = len(
        [t for t in snapshot.tasks if t.priority in (TaskPriority.URGENT.value, TaskPriority.HIGH.value)]
    )

    reply = f"You have {len(snapshot.tasks)} tasks total: {todo} to do, {in_progress} in progress."
    if important:
        reply += f"\n\nAttention: You have {important} high priority tasks!"
    if snapshot.tasks:
        reply += "\n\nRecent tasks:"
        for task in snapshot.tasks[:3]:
            reply += f"\n* {task.title} ({task.status.replace('_', ' ')})"
    return reply + "\n\nCheck the Tasks page for full details."
