from __future__ import annotations

import logging
from typing import Optional

from ..common.datetime_utils import optional_date
from ..common.validators import require_non_empty, validate_enum
from ..core.constants import MAX_LEAVE_DAYS
from ..core.enums import LeaveType, RequestStatus, values_of
from ..core.exceptions import AuthorizationError, ValidationError
from ..extensions import db
from ..models.leave import LeaveRequest
from ..models.user import User
from .base import get_or_404

log = logging.getLogger(__name__)

DECISIONS = (RequestStatus.APPROVED.value, RequestStatus.REJECTED.value)


def check_span(start, end) -> None:
    if end < start:
        raise ValidationError("End date must be on or after start date")
    if (end - start).days + 1 > MAX_LEAVE_DAYS:
        raise ValidationError(f"Leave cannot be longer than {MAX_LEAVE_DAYS} days")


class LeaveService:
    @staticmethod
    def list_leaves(*, user: User, status: Optional[str] = None) -> list[LeaveRequest]:
        query = LeaveRequest.query
        if not user.is_manager:
            query = query.filter(LeaveRequest.requester_id == user.id)
        if status and status != "all":
            query = query.filter(LeaveRequest.status == status)
        return query.order_by(LeaveRequest.created_at.desc(), LeaveRequest.id.desc()).all()

    @staticmethod
    def create_leave(*, user: User, data: dict) -> LeaveRequest:
        if not all(data.get(k) for k in ("type", "startDate", "endDate", "reason")):
            raise ValidationError("All fields required")

        leave_type = validate_enum(data["type"], "type", values_of(LeaveType), required=True)
        start = optional_date(data["startDate"], "startDate")
        end = optional_date(data["endDate"], "endDate")
        check_span(start, end)

        leave = LeaveRequest(
            requester_id=user.id,
            type=leave_type,
            start_date=start,
            end_date=end,
            reason=require_non_empty(data["reason"], "Reason", "All fields required"),
            status=RequestStatus.PENDING.value,
        )
        db.session.add(leave)
        db.session.commit()
        log.info("Leave %s requested by %s (%s..%s)", leave.id, user.id, start, end)
        return leave

    @staticmethod
    def decide(*, user: User, leave_id: int, status) -> LeaveRequest:
        if not user.is_manager:
            raise AuthorizationError("Forbidden")
        if status not in DECISIONS:
            raise ValidationError("Invalid status")

        leave = get_or_404(LeaveRequest, leave_id, "Leave request not found")
        leave.status = status
        leave.approver_id = user.id
        db.session.commit()
        log.info("Leave %s %s by %s", leave.id, status, user.id)
        return leave

    @staticmethod
    def move_dates(*, user: User, leave_id: int, start_date, end_date) -> LeaveRequest:
        leave = get_or_404(LeaveRequest, leave_id, "Leave request not found")
        if not (user.is_admin or leave.requester_id == user.id):
            raise AuthorizationError("Forbidden")

        start = optional_date(start_date, "startDate")
        end = optional_date(end_date, "endDate")
        if not start or not end:
            raise ValidationError("startDate and endDate are required")
        check_span(start, end)

        leave.start_date = start
        leave.end_date = end
        db.session.commit()
        return leave
