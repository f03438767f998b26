# File: opsdesk/models/meeting.py
from datetime import datetime

from opsdesk.common.datetime_utils import iso
from opsdesk.core.enums import AttendeeStatus
from opsdesk.extensions import db


class Meeting(db.Model):
    __tablename__ = 'meetings'

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text)
    start_time = db.Column(db.DateTime, nullable=False)
    end_time = db.Column(db.DateTime, nullable=False)
    location = db.Column(db.String(255))
    meeting_link = db.Column(db.String(500))
    creator_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.now)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)

    creator = db.relationship('User')
    attendees = db.relationship(
        'MeetingAttendee', backref='meeting', cascade='all, delete-orphan', order_by='MeetingAttendee.id',
    )

    def attendee_for(self, user_id):
        for attendee in self.attendees:
            if attendee.user_id == user_id:
                return attendee
        return None

    def to_dict(self):
        return {
            'id': self.id,
            'title': self.title,
            'description': self.description,
            'startTime': iso(self.start_time),
            'endTime': iso(self.end_time),
            'location': self.location,
            'meetingLink': self.meeting_link,
            'creatorId': self.creator_id,
            'creator': self.creator.to_summary() if self.creator else None,
            'attendees': [a.to_dict() for a in self.attendees],
        }


class MeetingAttendee(db.Model):
    __tablename__ = 'meeting_attendees'
    __table_args__ = (db.UniqueConstraint('meeting_id', 'user_id', name='uq_meeting_attendee'),)

    id = db.Column(db.Integer, primary_key=True)
    meeting_id = db.Column(db.Integer, db.ForeignKey('meetings.id', ondelete='CASCADE'), nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    status = db.Column(db.String(20), nullable=False, default=AttendeeStatus.PENDING.value)
    responded_at = db.Column(db.DateTime)

    user = db.relationship('User')

    def to_dict(self):
        return {
            'userId': self.user_id,
            'status': self.status,
            'respondedAt': iso(self.responded_at),
            'user': self.user.to_summary() if self.user else None,
        }
