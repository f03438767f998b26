# File: opsdesk/models/project.py
from datetime import datetime

from opsdesk.common.datetime_utils import iso
from opsdesk.core.enums import ProjectRole, ProjectStatus
from opsdesk.extensions import db


class Project(db.Model):
    __tablename__ = 'projects'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text)
    color = db.Column(db.String(20), nullable=False, default='#3b82f6')
    status = db.Column(db.String(20), nullable=False, default=ProjectStatus.ACTIVE.value)
    client_id = db.Column(db.Integer, db.ForeignKey('clients.id', ondelete='SET NULL'))
    created_by_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.now)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)

    client = db.relationship('Client')
    created_by = db.relationship('User')
    members = db.relationship(
        'ProjectMember', backref='project', cascade='all, delete-orphan', order_by='ProjectMember.id',
    )
    tasks = db.relationship('Task', backref='project', lazy='dynamic')

    def member_role(self, user_id):
        for member in self.members:
            if member.user_id == user_id:
                return member.role
        return None

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'color': self.color,
            'status': self.status,
            'client': {'id': self.client.id, 'name': self.client.name} if self.client else None,
            'createdBy': self.created_by.to_summary() if self.created_by else None,
            'members': [m.to_dict() for m in self.members],
            'taskCount': self.tasks.count(),
            'updatedAt': iso(self.updated_at),
        }


class ProjectMember(db.Model):
    __tablename__ = 'project_members'
    __table_args__ = (db.UniqueConstraint('project_id', 'user_id', name='uq_project_member'),)

    id = db.Column(db.Integer, primary_key=True)
    project_id = db.Column(db.Integer, db.ForeignKey('projects.id', ondelete='CASCADE'), nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    role = db.Column(db.String(20), nullable=False, default=ProjectRole.MEMBER.value)

    user = db.relationship('User')

    def to_dict(self):
        return {
            'userId': self.user_id,
            'role': self.role,
            'user': self.user.to_summary() if self.user else None,
        }
