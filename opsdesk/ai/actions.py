"""Extraction and dispatch of the action token embedded in assistant replies.

A reply may carry one token of the form ``[[ACTION:{"type": "...", ...}]]``.
The JSON payload is read with a real decoder so nested objects and
brackets inside strings do not end the token early.
"""
from __future__ import annotations

import json
import logging
import re
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Callable, Optional

from ..core.exceptions import DomainError
from ..extensions import db
from ..models.user import User
from ..services.attendance_service import CLOCK_IN, CLOCK_OUT, AttendanceService
from ..services.invoice_service import InvoiceService
from ..services.task_service import TaskService

log = logging.getLogger(__name__)

_TOKEN_START = re.compile(r"\[\[ACTION:\s*")
_TOKEN_END = "]]"
_decoder = json.JSONDecoder()

CREATE_TASK = "CREATE_TASK"
TOGGLE_ATTENDANCE = "TOGGLE_ATTENDANCE"
CREATE_INVOICE = "CREATE_INVOICE"


@dataclass(frozen=True)
class ParsedAction:
    type: Optional[str]
    payload: dict = field(default_factory=dict)
    error: Optional[str] = None


@dataclass
class ActionResult:
    type: Optional[str]
    success: bool
    message: str
    data: Any = None

    def to_dict(self) -> dict:
        return asdict(self)


def _strip(text: str, start: int, end: int) -> str:
    return (text[:start].rstrip() + " " + text[end:].lstrip()).strip()


def extract_action(text: str) -> tuple[str, Optional[ParsedAction]]:
    """Return the reply without its first action token, and the parsed token (or None)."""
    match = _TOKEN_START.search(text)
    if match is None:
        return text, None

    try:
        obj, end = _decoder.raw_decode(text, match.end())
    except ValueError:
        close = text.find(_TOKEN_END, match.end())
        stop = len(text) if close == -1 else close + len(_TOKEN_END)
        return _strip(text, match.start(), stop), ParsedAction(type=None, error="Malformed action payload")

    rest = text[end:]
    stripped = rest.lstrip()
    if stripped.startswith(_TOKEN_END):
        end += len(rest) - len(stripped) + len(_TOKEN_END)
    cleaned = _strip(text, match.start(), end)

    if not isinstance(obj, dict) or not isinstance(obj.get("type"), str):
        return cleaned, ParsedAction(type=None, error="Action is missing a type")

    payload = obj.get("data")
    if not isinstance(payload, dict):
        payload = {k: v for k, v in obj.items() if k != "type"}
    return cleaned, ParsedAction(type=obj["type"].strip().upper(), payload=payload)


def _create_task(user: User, payload: dict, now: Optional[datetime]) -> ActionResult:
    data = {k: payload[k] for k in ("title", "description", "priority", "dueDate", "assigneeId") if k in payload}
    task = TaskService.create_task(user=user, data=data)
    return ActionResult(CREATE_TASK, True, f'Created task "{task.title}"', task.to_dict())


def _attendance_message(action: str, moment: datetime) -> str:
    verb = "Clocked in" if action == CLOCK_IN else "Clocked out"
    return f"{verb} at {moment:%H:%M}"


def _toggle_attendance(user: User, payload: dict, now: Optional[datetime]) -> ActionResult:
    result = AttendanceService.toggle(user, now=now)
    moment = result.record.clock_in if result.action == CLOCK_IN else result.record.clock_out
    return ActionResult(TOGGLE_ATTENDANCE, True, _attendance_message(result.action, moment), result.record.to_dict())


def _clock(action: str) -> Callable[[User, dict, Optional[datetime]], ActionResult]:
    def handler(user: User, payload: dict, now: Optional[datetime]) -> ActionResult:
        record = AttendanceService.apply_action(user, action, now=now)
        moment = record.clock_in if action == CLOCK_IN else record.clock_out
        return ActionResult(TOGGLE_ATTENDANCE, True, _attendance_message(action, moment), record.to_dict())

    return handler


def _create_invoice(user: User, payload: dict, now: Optional[datetime]) -> ActionResult:
    invoice = InvoiceService.create_invoice(user=user, data=payload)
    message = f"Created invoice {invoice.invoice_number} for {invoice.client.name} (total {invoice.total:.2f})"
    return ActionResult(CREATE_INVOICE, True, message, invoice.to_dict())


HANDLERS: dict[str, Callable[[User, dict, Optional[datetime]], ActionResult]] = {
    CREATE_TASK: _create_task,
    TOGGLE_ATTENDANCE: _toggle_attendance,
    "CLOCK_IN": _clock(CLOCK_IN),
    "CLOCK_OUT": _clock(CLOCK_OUT),
    CREATE_INVOICE: _create_invoice,
}


def dispatch_action(user: User, action: ParsedAction, *, now: Optional[datetime] = None) -> ActionResult:
    """Run the action for the user. Rule violations come back as a failed result."""
    if action.error:
        return ActionResult(action.type, False, action.error)
    handler = HANDLERS.get(action.type)
    if handler is None:
        return ActionResult(action.type, False, f"Unknown action type: {action.type}")

    try:
        result = handler(user, action.payload, now)
    except DomainError as e:
        db.session.rollback()
        log.info("Action %s rejected for user %s: %s", action.type, user.id, e)
        return ActionResult(action.type, False, str(e))

    log.info("Action %s executed for user %s", action.type, user.id)
    return result
