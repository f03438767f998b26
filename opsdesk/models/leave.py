# File: opsdesk/models/leave.py
from datetime import datetime

from opsdesk.common.datetime_utils import iso
from opsdesk.core.enums import RequestStatus
from opsdesk.extensions import db


class LeaveRequest(db.Model):
    __tablename__ = 'leave_requests'

    id = db.Column(db.Integer, primary_key=True)
    requester_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    approver_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='SET NULL'))
    type = db.Column(db.String(20), nullable=False)
    status = db.Column(db.String(20), nullable=False, default=RequestStatus.PENDING.value)
    start_date = db.Column(db.Date, nullable=False)
    end_date = db.Column(db.Date, nullable=False)
    reason = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.now)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)

    requester = db.relationship('User', foreign_keys=[requester_id])
    approver = db.relationship('User', foreign_keys=[approver_id])

    @property
    def span_days(self):
        return max(1, (self.end_date - self.start_date).days + 1)

    def to_dict(self):
        return {
            'id': self.id,
            'type': self.type,
            'status': self.status,
            'startDate': iso(self.start_date),
            'endDate': iso(self.end_date),
            'reason': self.reason,
            'requesterId': self.requester_id,
            'approverId': self.approver_id,
            'requester': self.requester.to_summary() if self.requester else None,
            'approver': self.approver.to_summary() if self.approver else None,
            'createdAt': iso(self.created_at),
        }
