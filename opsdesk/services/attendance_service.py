from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Optional

import pandas as pd
from flask import current_app, has_app_context

from ..common.datetime_utils import now_local, parse_clock
from ..core.constants import ADMIN_HISTORY_LIMIT, DEFAULT_HISTORY_LIMIT, DEFAULT_LATE_AFTER, DEFAULT_REPORT_DAYS
from ..core.enums import AttendanceStatus
from ..core.exceptions import AuthorizationError, ValidationError
from ..extensions import db
from ..models.attendance import Attendance
from ..models.user import User

log = logging.getLogger(__name__)

CLOCK_IN = "clock-in"
CLOCK_OUT = "clock-out"


@dataclass(frozen=True)
class ToggleResult:
    action: str
    record: Attendance


def late_cutoff() -> time:
    raw = DEFAULT_LATE_AFTER
    if has_app_context():
        raw = current_app.config.get("LATE_AFTER", DEFAULT_LATE_AFTER)
    return parse_clock(raw)


def classify_clock_in(moment: datetime, cutoff: Optional[time] = None) -> AttendanceStatus:
    """LATE strictly after the cutoff minute, PRESENT otherwise."""
    cutoff = cutoff or late_cutoff()
    if moment.time().replace(second=0, microsecond=0) > cutoff:
        return AttendanceStatus.LATE
    return AttendanceStatus.PRESENT


def _format_minutes(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


class AttendanceService:
    @staticmethod
    def today_record(user_id: int, *, now: Optional[datetime] = None) -> Optional[Attendance]:
        now = now or now_local()
        return Attendance.query.filter_by(user_id=user_id, date=now.date()).first()

    @staticmethod
    def clock_in(user: User, *, now: Optional[datetime] = None) -> Attendance:
        now = now or now_local()
        if AttendanceService.today_record(user.id, now=now):
            raise ValidationError("Already clocked in today")

        record = Attendance(
            user_id=user.id,
            date=now.date(),
            clock_in=now,
            status=classify_clock_in(now).value,
        )
        db.session.add(record)
        db.session.commit()
        log.info("User %s clocked in (%s)", user.id, record.status)
        return record

    @staticmethod
    def clock_out(user: User, *, now: Optional[datetime] = None) -> Attendance:
        now = now or now_local()
        record = AttendanceService.today_record(user.id, now=now)
        if not record:
            raise ValidationError("Not clocked in today")
        if record.clock_out:
            raise ValidationError("Already clocked out")

        record.clock_out = now
        db.session.commit()
        log.info("User %s clocked out", user.id)
        return record

    @staticmethod
    def apply_action(user: User, action, *, now: Optional[datetime] = None) -> Attendance:
        if action == CLOCK_IN:
            return AttendanceService.clock_in(user, now=now)
        if action == CLOCK_OUT:
            return AttendanceService.clock_out(user, now=now)
        raise ValidationError("Invalid action")

    @staticmethod
    def toggle(user: User, *, now: Optional[datetime] = None) -> ToggleResult:
        record = AttendanceService.today_record(user.id, now=now)
        if record is None:
            return ToggleResult(CLOCK_IN, AttendanceService.clock_in(user, now=now))
        if record.clock_out is None:
            return ToggleResult(CLOCK_OUT, AttendanceService.clock_out(user, now=now))
        raise ValidationError("You have already clocked in and out today")

    @staticmethod
    def list_records(
        *,
        user: User,
        target_user_id: Optional[int] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> list[Attendance]:
        user_id = user.id
        if target_user_id is not None and target_user_id != user.id:
            if not user.is_admin:
                raise AuthorizationError("Forbidden")
            user_id = target_user_id

        query = Attendance.query.filter(Attendance.user_id == user_id)
        if start:
            query = query.filter(Attendance.date >= start)
        if end:
            query = query.filter(Attendance.date <= end)
        return query.order_by(Attendance.date.desc()).limit(DEFAULT_HISTORY_LIMIT).all()

    @staticmethod
    def history(
        *,
        user: User,
        start: Optional[date] = None,
        end: Optional[date] = None,
        target_user_id: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> list[Attendance]:
        if not user.is_admin:
            raise AuthorizationError("Forbidden")
        today = (now or now_local()).date()
        end = end or today
        start = start or end - timedelta(days=DEFAULT_REPORT_DAYS)
        if end < start:
            raise ValidationError("End date must be on or after start date")

        query = Attendance.query.filter(Attendance.date >= start, Attendance.date <= end)
        if target_user_id is not None:
            query = query.filter(Attendance.user_id == target_user_id)
        return (
            query.order_by(Attendance.date.desc(), Attendance.clock_in.desc())
            .limit(ADMIN_HISTORY_LIMIT)
            .all()
        )

    @staticmethod
    def report_rows(records: list[Attendance]) -> tuple[list[dict], list[dict]]:
        """Flatten records into export rows plus a per-user worked-time summary."""
        rows: list[dict] = []
        summary: dict[int, dict] = {}
        for r in records:
            minutes = r.worked_minutes
            rows.append(
                {
                    "user_id": r.user_id,
                    "full_name": r.user.full_name if r.user else "Unknown",
                    "email": r.user.email if r.user else "",
                    "date": r.date.strftime("%Y-%m-%d"),
                    "clock_in": r.clock_in.strftime("%H:%M"),
                    "clock_out": r.clock_out.strftime("%H:%M") if r.clock_out else "-",
                    "worked_hours": _format_minutes(minutes),
                    "status": r.status,
                }
            )
            s = summary.setdefault(
                r.user_id,
                {
                    "user_id": r.user_id,
                    "full_name": r.user.full_name if r.user else "Unknown",
                    "days": 0,
                    "late_days": 0,
                    "total_minutes": 0,
                },
            )
            s["days"] += 1
            s["late_days"] += 1 if r.status == AttendanceStatus.LATE.value else 0
            s["total_minutes"] += minutes

        summary_rows = []
        for s in summary.values():
            summary_rows.append(
                {
                    "user_id": s["user_id"],
                    "full_name": s["full_name"],
                    "days": s["days"],
                    "late_days": s["late_days"],
                    "total_hours": _format_minutes(int(s["total_minutes"])),
                }
            )
        summary_rows.sort(key=lambda x: x["full_name"])
        return rows, summary_rows

    @staticmethod
    def export_excel(records: list[Attendance]) -> io.BytesIO:
        rows, summary = AttendanceService.report_rows(records)
        output = io.BytesIO()
        with pd.ExcelWriter(output, engine="openpyxl") as writer:
            pd.DataFrame(rows, columns=list(rows[0]) if rows else None).to_excel(
                writer, index=False, sheet_name="Attendance"
            )
            pd.DataFrame(summary).to_excel(writer, index=False, sheet_name="Summary")
        output.seek(0)
        return output
