from __future__ import annotations

import logging
from typing import Any, Optional

from flask import has_request_context, request
from sqlalchemy.exc import SQLAlchemyError

from ..core.enums import AuditAction, AuditResource
from ..extensions import db
from ..models.audit import AuditLog

log = logging.getLogger(__name__)

IP_ADDRESS_MAX = 64
USER_AGENT_MAX = 255


def client_ip(headers, remote_addr: Optional[str]) -> str:
    forwarded = headers.get("X-Forwarded-For")
    if forwarded:
        ip = forwarded.split(",")[0].strip()
    else:
        ip = headers.get("X-Real-IP") or remote_addr or "unknown-ip"
    return ip[:IP_ADDRESS_MAX]


class AuditService:
    @staticmethod
    def record(
        *,
        user_id: int,
        action: AuditAction,
        resource: AuditResource,
        resource_id: Optional[Any] = None,
        details: Optional[dict] = None,
    ) -> Optional[AuditLog]:
        """Write an audit row inside a savepoint of the current session.

        A failed insert is logged and dropped; the caller's transaction
        carries on and its commit persists the row.
        """
        ip_address = user_agent = "unknown"
        if has_request_context():
            ip_address = client_ip(request.headers, request.remote_addr)
            user_agent = request.headers.get("User-Agent", "unknown")[:USER_AGENT_MAX]

        entry = AuditLog(
            user_id=user_id,
            action=action.value,
            resource=resource.value,
            resource_id=str(resource_id) if resource_id is not None else None,
            details=details,
            ip_address=ip_address,
            user_agent=user_agent,
        )
        db.session.flush()
        try:
            with db.session.begin_nested():
                db.session.add(entry)
        except SQLAlchemyError as e:
            log.warning("audit write failed user=%s %s %s id=%s: %s", user_id, action.value, resource.value, resource_id, e)
            return None

        log.info("audit user=%s %s %s id=%s", user_id, action.value, resource.value, resource_id)
        return entry
