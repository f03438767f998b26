# File: opsdesk/models/task.py
from datetime import datetime

from opsdesk.common.datetime_utils import iso
from opsdesk.core.enums import TaskPriority, TaskStatus
from opsdesk.extensions import db


class Task(db.Model):
    __tablename__ = 'tasks'

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text)
    status = db.Column(db.String(20), nullable=False, default=TaskStatus.TODO.value)
    priority = db.Column(db.String(20), nullable=False, default=TaskPriority.MEDIUM.value)
    due_date = db.Column(db.DateTime)
    creator_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    assignee_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='SET NULL'))
    project_id = db.Column(db.Integer, db.ForeignKey('projects.id', ondelete='SET NULL'))
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.now)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)

    creator = db.relationship('User', foreign_keys=[creator_id])
    assignee = db.relationship('User', foreign_keys=[assignee_id])
    comments = db.relationship(
        'TaskComment', backref='task', cascade='all, delete-orphan',
        order_by='TaskComment.created_at',
    )

    def to_dict(self):
        return {
            'id': self.id,
            'title': self.title,
            'description': self.description,
            'status': self.status,
            'priority': self.priority,
            'dueDate': iso(self.due_date),
            'creatorId': self.creator_id,
            'assigneeId': self.assignee_id,
            'projectId': self.project_id,
            'creator': self.creator.to_summary() if self.creator else None,
            'assignee': self.assignee.to_summary() if self.assignee else None,
            'commentCount': len(self.comments),
            'createdAt': iso(self.created_at),
            'updatedAt': iso(self.updated_at),
        }


class TaskComment(db.Model):
    __tablename__ = 'task_comments'

    id = db.Column(db.Integer, primary_key=True)
    task_id = db.Column(db.Integer, db.ForeignKey('tasks.id', ondelete='CASCADE'), nullable=False)
    author_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    content = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.now)

    author = db.relationship('User')

    def to_dict(self):
        return {
            'id': self.id,
            'taskId': self.task_id,
            'content': self.content,
            'author': self.author.to_summary() if self.author else None,
            'createdAt': iso(self.created_at),
        }
