from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, Optional

from sqlalchemy import or_, select

from ..common.datetime_utils import now_local, optional_datetime
from ..common.validators import require_non_empty, validate_string
from ..core.enums import AttendeeStatus
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..extensions import db
from ..models.meeting import Meeting, MeetingAttendee
from ..models.user import User
from .base import get_or_404

log = logging.getLogger(__name__)

RESPONSES = (AttendeeStatus.ACCEPTED.value, AttendeeStatus.DECLINED.value, AttendeeStatus.TENTATIVE.value)


def _attendee_ids(raw, creator_id: int) -> list[int]:
    if raw in (None, ""):
        return []
    if not isinstance(raw, list):
        raise ValidationError("attendeeIds must be a list")
    ids: list[int] = []
    for value in raw:
        try:
            uid = int(value)
        except (TypeError, ValueError):
            raise ValidationError("attendeeIds must contain user ids")
        if uid != creator_id and uid not in ids:
            ids.append(uid)
    if ids and User.query.filter(User.id.in_(ids)).count() != len(ids):
        raise ValidationError("Some attendees do not exist")
    return ids


def _time_window(start, end) -> tuple[datetime, datetime]:
    start_time = optional_datetime(start, "startTime")
    end_time = optional_datetime(end, "endTime")
    if not start_time or not end_time:
        raise ValidationError("Start and end time are required")
    if end_time <= start_time:
        raise ValidationError("End time must be after start time")
    return start_time, end_time


class MeetingService:
    @staticmethod
    def create_meeting(*, user: User, data: dict) -> Meeting:
        title = require_non_empty(data.get("title"), "Title", "Title is required")
        start_time, end_time = _time_window(data.get("startTime"), data.get("endTime"))

        meeting = Meeting(
            title=validate_string(title, "Title", max_length=255),
            description=validate_string(data.get("description"), "Description") or None,
            start_time=start_time,
            end_time=end_time,
            location=validate_string(data.get("location"), "Location", max_length=255) or None,
            meeting_link=validate_string(data.get("meetingLink"), "Meeting link", max_length=500) or None,
            creator_id=user.id,
        )
        meeting.attendees.append(
            MeetingAttendee(user_id=user.id, status=AttendeeStatus.ACCEPTED.value, responded_at=now_local())
        )
        for uid in _attendee_ids(data.get("attendeeIds"), user.id):
            meeting.attendees.append(MeetingAttendee(user_id=uid, status=AttendeeStatus.PENDING.value))

        db.session.add(meeting)
        db.session.commit()
        log.info("Meeting %s created by %s with %s attendees", meeting.id, user.id, len(meeting.attendees))
        return meeting

    @staticmethod
    def list_meetings(*, user: User, upcoming: bool = False, now: Optional[datetime] = None) -> list[Meeting]:
        attending = select(MeetingAttendee.meeting_id).where(MeetingAttendee.user_id == user.id)
        query = Meeting.query.filter(or_(Meeting.creator_id == user.id, Meeting.id.in_(attending)))
        if upcoming:
            query = query.filter(Meeting.end_time >= (now or now_local()))
        return query.order_by(Meeting.start_time.asc()).all()

    @staticmethod
    def get_meeting(*, user: User, meeting_id: int) -> Meeting:
        meeting = get_or_404(Meeting, meeting_id, "Meeting not found")
        if meeting.creator_id != user.id and meeting.attendee_for(user.id) is None:
            raise AuthorizationError("Forbidden")
        return meeting

    @staticmethod
    def _editable(user: User, meeting_id: int) -> Meeting:
        meeting = get_or_404(Meeting, meeting_id, "Meeting not found")
        if meeting.creator_id != user.id and not user.is_admin:
            raise AuthorizationError("Forbidden")
        return meeting

    @staticmethod
    def update_meeting(*, user: User, meeting_id: int, data: dict) -> Meeting:
        meeting = MeetingService._editable(user, meeting_id)

        if "title" in data:
            meeting.title = require_non_empty(data["title"], "Title", "Title is required")
        for key, attr in (("description", "description"), ("location", "location"), ("meetingLink", "meeting_link")):
            if key in data:
                setattr(meeting, attr, validate_string(data[key], key) or None)
        if "startTime" in data or "endTime" in data:
            meeting.start_time, meeting.end_time = _time_window(
                data.get("startTime", meeting.start_time.isoformat()),
                data.get("endTime", meeting.end_time.isoformat()),
            )
        if "attendeeIds" in data:
            MeetingService._replace_attendees(meeting, _attendee_ids(data["attendeeIds"], meeting.creator_id))

        db.session.commit()
        return meeting

    @staticmethod
    def _replace_attendees(meeting: Meeting, wanted: Iterable[int]) -> None:
        wanted = set(wanted)
        for attendee in list(meeting.attendees):
            if attendee.user_id != meeting.creator_id and attendee.user_id not in wanted:
                meeting.attendees.remove(attendee)
        present = {a.user_id for a in meeting.attendees}
        for uid in sorted(wanted - present):
            meeting.attendees.append(MeetingAttendee(user_id=uid, status=AttendeeStatus.PENDING.value))

    @staticmethod
    def delete_meeting(*, user: User, meeting_id: int) -> None:
        meeting = MeetingService._editable(user, meeting_id)
        db.session.delete(meeting)
        db.session.commit()

    @staticmethod
    def respond(*, user: User, meeting_id: int, status) -> MeetingAttendee:
        if status not in RESPONSES:
            raise ValidationError("Invalid status")
        get_or_404(Meeting, meeting_id, "Meeting not found")
        attendee = MeetingAttendee.query.filter_by(meeting_id=meeting_id, user_id=user.id).first()
        if attendee is None:
            raise NotFoundError("You are not invited")

        attendee.status = status
        attendee.responded_at = now_local()
        db.session.commit()
        return attendee
