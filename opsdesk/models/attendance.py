# File: opsdesk/models/attendance.py
from opsdesk.common.datetime_utils import iso
from opsdesk.core.enums import AttendanceStatus
from opsdesk.extensions import db


class Attendance(db.Model):
    __tablename__ = 'attendance'
    __table_args__ = (db.UniqueConstraint('user_id', 'date', name='uq_attendance_user_date'),)

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    date = db.Column(db.Date, nullable=False)
    clock_in = db.Column(db.DateTime, nullable=False)
    clock_out = db.Column(db.DateTime)
    status = db.Column(db.String(20), nullable=False, default=AttendanceStatus.PRESENT.value)
    notes = db.Column(db.Text)

    user = db.relationship('User', backref=db.backref('attendances', passive_deletes=True))

    @property
    def worked_minutes(self):
        if not self.clock_out:
            return 0
        return max(0, int((self.clock_out - self.clock_in).total_seconds() // 60))

    def to_dict(self):
        return {
            'id': self.id,
            'userId': self.user_id,
            'date': iso(self.date),
            'clockIn': iso(self.clock_in),
            'clockOut': iso(self.clock_out),
            'status': self.status,
            'notes': self.notes,
            'workedMinutes': self.worked_minutes,
            'user': self.user.to_summary() if self.user else None,
        }
