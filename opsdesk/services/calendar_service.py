"""Calendar feed assembled from task due dates, leave spans and invoice due dates."""
from __future__ import annotations

from collections import OrderedDict
from datetime import date, datetime, timedelta
from typing import Iterable, Optional

from ..common.datetime_utils import now_local, optional_date
from ..core.exceptions import ValidationError
from ..models.invoice import Invoice
from ..models.leave import LeaveRequest
from ..models.task import Task
from ..models.user import User
from .base import get_or_404, optional_int
from .invoice_service import InvoiceService
from .leave_service import LeaveService
from .task_service import TaskService

EVENT_TYPES = ("task", "leave", "invoice")
RANGES = {"30": 30, "90": 90, "all": None}


def _day(value) -> date:
    return value.date() if isinstance(value, datetime) else value


def task_event(task: Task, today: date) -> dict:
    return {
        "id": f"task-{task.id}",
        "sourceId": task.id,
        "type": "task",
        "title": task.title,
        "date": (_day(task.due_date) if task.due_date else today).isoformat(),
        "meta": f"{task.status} • {task.priority}",
        "isUndated": task.due_date is None,
    }


def invoice_event(invoice: Invoice, today: date) -> dict:
    client_name = invoice.client.name if invoice.client else "Client"
    return {
        "id": f"invoice-{invoice.id}",
        "sourceId": invoice.id,
        "type": "invoice",
        "title": f"Invoice {invoice.invoice_number}",
        "date": (_day(invoice.due_date) if invoice.due_date else today).isoformat(),
        "meta": f"{client_name} • ${invoice.total:g}",
        "isUndated": invoice.due_date is None,
    }


def leave_events(leave: LeaveRequest) -> list[dict]:
    """One event per calendar day of the leave, each carrying the full span."""
    span = leave.span_days
    events = []
    day = leave.start_date
    while day <= leave.end_date:
        events.append(
            {
                "id": f"leave-{leave.id}-{day.isoformat()}",
                "sourceId": leave.id,
                "type": "leave",
                "title": f"{leave.type} Leave",
                "date": day.isoformat(),
                "startDate": leave.start_date.isoformat(),
                "endDate": leave.end_date.isoformat(),
                "spanDays": span,
                "meta": leave.status,
                "isUndated": False,
            }
        )
        day += timedelta(days=1)
    return events


def build_events(
    tasks: Iterable[Task], leaves: Iterable[LeaveRequest], invoices: Iterable[Invoice], today: date
) -> list[dict]:
    events = [task_event(t, today) for t in tasks]
    for leave in leaves:
        events.extend(leave_events(leave))
    events.extend(invoice_event(i, today) for i in invoices)
    return events


def filter_events(
    events: list[dict],
    *,
    today: date,
    range_key: str = "30",
    event_type: Optional[str] = None,
    query: Optional[str] = None,
) -> list[dict]:
    if range_key not in RANGES:
        raise ValidationError("range must be one of: 30, 90, all")
    if event_type and event_type != "all":
        if event_type not in EVENT_TYPES:
            raise ValidationError("type must be one of: all, task, leave, invoice")
        events = [e for e in events if e["type"] == event_type]
    if query and query.strip():
        needle = query.strip().lower()
        events = [e for e in events if needle in e["title"].lower() or needle in (e.get("meta") or "").lower()]

    days = RANGES[range_key]
    if days is None:
        return events
    end = today + timedelta(days=days)
    return [e for e in events if e["isUndated"] or today <= date.fromisoformat(e["date"]) <= end]


def group_by_date(events: Iterable[dict]) -> "OrderedDict[str, list[dict]]":
    """Dated events keyed by YYYY-MM-DD in ascending order."""
    groups: dict[str, list[dict]] = {}
    for event in events:
        if event["isUndated"]:
            continue
        groups.setdefault(event["date"], []).append(event)
    return OrderedDict(sorted(groups.items()))


class CalendarService:
    @staticmethod
    def feed(
        *,
        user: User,
        range_key: str = "30",
        event_type: Optional[str] = None,
        query: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> dict:
        today = (now or now_local()).date()
        tasks = Task.query
        leaves = LeaveRequest.query
        invoices = Invoice.query
        if not user.is_manager:
            tasks = tasks.filter((Task.creator_id == user.id) | (Task.assignee_id == user.id))
            leaves = leaves.filter(LeaveRequest.requester_id == user.id)
            invoices = invoices.filter(Invoice.creator_id == user.id)

        events = build_events(tasks.all(), leaves.all(), invoices.all(), today)
        events = filter_events(events, today=today, range_key=range_key, event_type=event_type, query=query)
        return {
            "events": events,
            "groups": group_by_date(events),
            "undated": [e for e in events if e["isUndated"]],
        }

    @staticmethod
    def reschedule(*, user: User, data: dict) -> dict:
        """Move an event to a new day using the owning module's permission rules."""
        event_type = data.get("type")
        source_id = optional_int(data.get("sourceId"), "sourceId")
        target = optional_date(data.get("date"), "date")
        if event_type not in EVENT_TYPES or not source_id or target is None:
            raise ValidationError("type, sourceId and date are required")

        if event_type == "task":
            return TaskService.set_due_date(user=user, task_id=source_id, due_date=target.isoformat()).to_dict()
        if event_type == "invoice":
            return InvoiceService.set_due_date(user=user, invoice_id=source_id, due_date=target.isoformat()).to_dict()

        leave = get_or_404(LeaveRequest, source_id, "Leave request not found")
        span = max(1, optional_int(data.get("spanDays"), "spanDays") or leave.span_days)
        end = target + timedelta(days=span - 1)
        return LeaveService.move_dates(
            user=user, leave_id=source_id, start_date=target.isoformat(), end_date=end.isoformat()
        ).to_dict()
