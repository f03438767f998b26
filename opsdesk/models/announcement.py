# File: opsdesk/models/announcement.py
from datetime import datetime

from opsdesk.common.datetime_utils import iso
from opsdesk.core.enums import AnnouncementPriority
from opsdesk.extensions import db


class Announcement(db.Model):
    __tablename__ = 'announcements'

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255), nullable=False)
    content = db.Column(db.Text, nullable=False)
    priority = db.Column(db.String(20), nullable=False, default=AnnouncementPriority.NORMAL.value)
    is_published = db.Column(db.Boolean, nullable=False, default=True)
    expires_at = db.Column(db.DateTime)
    author_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.now)

    author = db.relationship('User')

    def to_dict(self):
        return {
            'id': self.id,
            'title': self.title,
            'content': self.content,
            'priority': self.priority,
            'isPublished': self.is_published,
            'expiresAt': iso(self.expires_at),
            'author': self.author.to_summary() if self.author else None,
            'createdAt': iso(self.created_at),
        }
