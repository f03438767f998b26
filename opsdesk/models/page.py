# File: opsdesk/models/page.py
from datetime import datetime

from opsdesk.common.datetime_utils import iso
from opsdesk.core.constants import PAGE_DEFAULT_ICON, PAGE_DEFAULT_TITLE
from opsdesk.extensions import db


class CustomPage(db.Model):
    __tablename__ = 'custom_pages'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    title = db.Column(db.String(255), nullable=False, default=PAGE_DEFAULT_TITLE)
    icon = db.Column(db.String(32), default=PAGE_DEFAULT_ICON)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.now)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)

    owner = db.relationship('User', backref=db.backref('pages', passive_deletes=True))
    blocks = db.relationship(
        'Block', backref='page', cascade='all, delete-orphan', order_by='Block.order',
    )

    def to_dict(self, with_blocks=False):
        data = {
            'id': self.id,
            'title': self.title,
            'icon': self.icon,
            'userId': self.user_id,
            'createdAt': iso(self.created_at),
            'updatedAt': iso(self.updated_at),
        }
        if with_blocks:
            data['blocks'] = [b.to_dict() for b in self.blocks]
        return data


class Block(db.Model):
    __tablename__ = 'blocks'

    id = db.Column(db.Integer, primary_key=True)
    page_id = db.Column(db.Integer, db.ForeignKey('custom_pages.id', ondelete='CASCADE'), nullable=False)
    type = db.Column(db.String(50), nullable=False, default='text')
    content = db.Column(db.JSON, nullable=False, default=dict)
    order = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.now)

    @property
    def text(self):
        content = self.content or {}
        value = content.get('text') if isinstance(content, dict) else None
        return value if isinstance(value, str) else ''

    def to_dict(self):
        return {
            'id': self.id,
            'pageId': self.page_id,
            'type': self.type,
            'content': self.content,
            'order': self.order,
        }
