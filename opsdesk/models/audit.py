# File: opsdesk/models/audit.py
from datetime import datetime

from opsdesk.common.datetime_utils import iso
from opsdesk.extensions import db


class AuditLog(db.Model):
    __tablename__ = 'audit_logs'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='SET NULL'))
    action = db.Column(db.String(20), nullable=False)
    resource = db.Column(db.String(30), nullable=False)
    resource_id = db.Column(db.String(64))
    details = db.Column(db.JSON)
    ip_address = db.Column(db.String(64))
    user_agent = db.Column(db.String(255))
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.now)

    def to_dict(self):
        return {
            'id': self.id,
            'userId': self.user_id,
            'action': self.action,
            'resource': self.resource,
            'resourceId': self.resource_id,
            'details': self.details,
            'createdAt': iso(self.created_at),
        }
