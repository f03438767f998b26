from __future__ import annotations

from datetime import date, datetime

import pytest

from opsdesk.core.exceptions import AuthorizationError, ValidationError
from opsdesk.services.calendar_service import CalendarService, filter_events, group_by_date
from opsdesk.services.invoice_service import InvoiceService
from opsdesk.services.leave_service import LeaveService
from opsdesk.services.task_service import TaskService

NOW = datetime(2026, 3, 2, 9, 0)
TODAY = NOW.date()


def _event(event_id, day, *, kind="task", title="Event", undated=False):
    return {"id": event_id, "type": kind, "title": title, "date": day, "meta": "", "isUndated": undated}


def test_feed_merges_tasks_leaves_and_invoices(staff):
    TaskService.create_task(user=staff, data={"title": "Report", "dueDate": "2026-03-05", "priority": "HIGH"})
    LeaveService.create_leave(
        user=staff, data={"type": "SICK", "startDate": "2026-03-03", "endDate": "2026-03-04", "reason": "flu"}
    )
    InvoiceService.create_invoice(
        user=staff,
        data={"clientName": "Acme", "items": [{"quantity": 1, "unitPrice": 99.5}], "dueDate": "2026-03-20"},
    )

    feed = CalendarService.feed(user=staff, now=NOW)

    by_type = {}
    for e in feed["events"]:
        by_type.setdefault(e["type"], []).append(e)
    assert by_type["task"][0]["meta"] == "TODO • HIGH"
    assert [e["date"] for e in by_type["leave"]] == ["2026-03-03", "2026-03-04"]
    assert by_type["leave"][0]["spanDays"] == 2
    assert by_type["invoice"][0]["meta"] == "Acme • $99.5"
    assert list(feed["groups"]) == ["2026-03-03", "2026-03-04", "2026-03-05", "2026-03-20"]
    assert feed["undated"] == []


def test_undated_task_lands_on_today(staff):
    TaskService.create_task(user=staff, data={"title": "Someday"})

    feed = CalendarService.feed(user=staff, now=NOW)

    event = feed["events"][0]
    assert event["isUndated"] is True
    assert event["date"] == TODAY.isoformat()
    assert feed["undated"] == [event]
    assert feed["groups"] == {}


def test_filter_events_by_range_type_and_query():
    events = [
        _event("a", "2026-03-10", title="Design review"),
        _event("b", "2026-05-20", title="Quarterly"),
        _event("c", "2026-03-12", kind="leave", title="ANNUAL Leave"),
        _event("d", "2026-03-02", title="Undated", undated=True),
        _event("e", "2026-02-01", title="Past"),
    ]

    assert [e["id"] for e in filter_events(events, today=TODAY)] == ["a", "c", "d"]
    assert [e["id"] for e in filter_events(events, today=TODAY, range_key="90")] == ["a", "b", "c", "d"]
    assert len(filter_events(events, today=TODAY, range_key="all")) == 5
    assert [e["id"] for e in filter_events(events, today=TODAY, event_type="leave")] == ["c"]
    assert [e["id"] for e in filter_events(events, today=TODAY, range_key="all", query="REVIEW")] == ["a"]


@pytest.mark.parametrize("kwargs", [{"range_key": "7"}, {"event_type": "meeting"}])
def test_filter_events_rejects_unknown_options(kwargs):
    with pytest.raises(ValidationError):
        filter_events([], today=TODAY, **kwargs)


def test_group_by_date_sorts_and_skips_undated():
    groups = group_by_date([_event("b", "2026-03-09"), _event("a", "2026-03-01"), _event("u", "2026-03-02", undated=True)])
    assert list(groups) == ["2026-03-01", "2026-03-09"]


def test_staff_feed_excludes_other_users(staff, make_user, manager):
    TaskService.create_task(user=make_user(), data={"title": "Not mine", "dueDate": "2026-03-05"})

    assert CalendarService.feed(user=staff, now=NOW)["events"] == []
    assert len(CalendarService.feed(user=manager, now=NOW)["events"]) == 1


def test_reschedule_task_and_leave(staff):
    task = TaskService.create_task(user=staff, data={"title": "Move me", "dueDate": "2026-03-05"})
    leave = LeaveService.create_leave(
        user=staff, data={"type": "ANNUAL", "startDate": "2026-03-10", "endDate": "2026-03-12", "reason": "trip"}
    )

    moved = CalendarService.reschedule(user=staff, data={"type": "task", "sourceId": task.id, "date": "2026-03-08"})
    shifted = CalendarService.reschedule(
        user=staff, data={"type": "leave", "sourceId": leave.id, "date": "2026-03-20", "spanDays": 3}
    )

    assert moved["dueDate"].startswith("2026-03-08")
    assert (shifted["startDate"], shifted["endDate"]) == ("2026-03-20", "2026-03-22")


def test_reschedule_leave_keeps_its_length_without_span(staff):
    leave = LeaveService.create_leave(
        user=staff, data={"type": "ANNUAL", "startDate": "2026-03-10", "endDate": "2026-03-12", "reason": "trip"}
    )

    shifted = CalendarService.reschedule(user=staff, data={"type": "leave", "sourceId": leave.id, "date": "2026-03-20"})

    assert (shifted["startDate"], shifted["endDate"]) == ("2026-03-20", "2026-03-22")


def test_reschedule_leave_rejects_oversized_span(staff):
    leave = LeaveService.create_leave(
        user=staff, data={"type": "ANNUAL", "startDate": "2026-03-10", "endDate": "2026-03-12", "reason": "trip"}
    )
    with pytest.raises(ValidationError, match="longer than 365 days"):
        CalendarService.reschedule(
            user=staff, data={"type": "leave", "sourceId": leave.id, "date": "2026-03-20", "spanDays": 36500}
        )


def test_reschedule_respects_ownership(staff, make_user):
    task = TaskService.create_task(user=staff, data={"title": "Mine"})
    with pytest.raises(AuthorizationError):
        CalendarService.reschedule(user=make_user(), data={"type": "task", "sourceId": task.id, "date": "2026-03-08"})
    with pytest.raises(ValidationError, match="type, sourceId and date are required"):
        CalendarService.reschedule(user=staff, data={"type": "meeting", "sourceId": task.id, "date": "2026-03-08"})


def test_calendar_endpoint(client, staff, login):
    login(staff)
    assert client.get("/api/calendar?range=all&type=task").status_code == 200
    assert client.get("/api/calendar?range=7").status_code == 400
