from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..common.datetime_utils import now_local, short_date
from ..core.enums import RequestStatus, TaskStatus, UserStatus
from ..models.attendance import Attendance
from ..models.leave import LeaveRequest
from ..models.message import Message
from ..models.task import Task
from ..models.user import User
from .announcement_service import active_announcements

RECENT_ACTIVITY_LIMIT = 5


def format_time_ago(moment: datetime, now: Optional[datetime] = None) -> str:
    seconds = ((now or now_local()) - moment).total_seconds()
    minutes = int(seconds // 60)
    hours = int(seconds // 3600)
    days = int(seconds // 86400)
    if minutes < 1:
        return "Just now"
    if minutes < 60:
        return f"{minutes}m ago"
    if hours < 24:
        return f"{hours}h ago"
    if days < 7:
        return f"{days}d ago"
    return short_date(moment)


class DashboardService:
    @staticmethod
    def stats(*, user: User, now: Optional[datetime] = None) -> dict:
        now = now or now_local()
        total_tasks = Task.query.count()
        completed_tasks = Task.query.filter_by(status=TaskStatus.COMPLETED.value).count()

        recent = Task.query.order_by(Task.updated_at.desc(), Task.id.desc()).limit(RECENT_ACTIVITY_LIMIT).all()
        activity = [
            {
                "id": task.id,
                "type": "task",
                "title": task.title,
                "description": f"Assigned to {task.assignee.full_name}" if task.assignee else "Unassigned",
                "time": format_time_ago(task.updated_at, now),
            }
            for task in recent
        ]

        return {
            "stats": {
                "totalUsers": User.query.count(),
                "activeUsers": User.query.filter_by(status=UserStatus.ACTIVE.value).count(),
                "totalTasks": total_tasks,
                "completedTasks": completed_tasks,
                "activeTasks": total_tasks - completed_tasks,
                "pendingLeaves": LeaveRequest.query.filter_by(status=RequestStatus.PENDING.value).count(),
                "todayAttendance": Attendance.query.filter(Attendance.date >= now.date()).count(),
                "unreadMessages": Message.query.filter_by(receiver_id=user.id, is_read=False).count(),
                "newAnnouncements": active_announcements(now).count(),
            },
            "recentActivity": activity,
        }
