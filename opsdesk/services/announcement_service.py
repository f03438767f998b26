from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import or_

from ..common.datetime_utils import now_local, optional_datetime
from ..common.validators import require_non_empty, validate_enum, validate_string
from ..core.enums import AnnouncementPriority, values_of
from ..core.exceptions import AuthorizationError
from ..extensions import db
from ..models.announcement import Announcement
from ..models.user import User
from .base import get_or_404


def active_announcements(now: Optional[datetime] = None):
    now = now or now_local()
    return Announcement.query.filter(
        Announcement.is_published.is_(True),
        or_(Announcement.expires_at.is_(None), Announcement.expires_at > now),
    )


class AnnouncementService:
    @staticmethod
    def list_announcements(*, now: Optional[datetime] = None) -> list[Announcement]:
        return active_announcements(now).order_by(Announcement.created_at.desc(), Announcement.id.desc()).all()

    @staticmethod
    def create_announcement(*, user: User, data: dict) -> Announcement:
        if not user.is_admin:
            raise AuthorizationError("Forbidden")
        announcement = Announcement(
            title=validate_string(
                require_non_empty(data.get("title"), "Title", "Title and content are required"), "Title", max_length=255
            ),
            content=require_non_empty(data.get("content"), "Content", "Title and content are required"),
            priority=validate_enum(
                data.get("priority"), "priority", values_of(AnnouncementPriority),
                default=AnnouncementPriority.NORMAL.value,
            ),
            is_published=bool(data.get("isPublished", True)),
            expires_at=optional_datetime(data.get("expiresAt"), "expiresAt"),
            author_id=user.id,
        )
        db.session.add(announcement)
        db.session.commit()
        return announcement

    @staticmethod
    def delete_announcement(*, user: User, announcement_id: int) -> None:
        if not user.is_admin:
            raise AuthorizationError("Forbidden")
        announcement = get_or_404(Announcement, announcement_id, "Announcement not found")
        db.session.delete(announcement)
        db.session.commit()
