# File: opsdesk/models/message.py
from datetime import datetime

from opsdesk.common.datetime_utils import iso
from opsdesk.extensions import db


class Conversation(db.Model):
    __tablename__ = 'conversations'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200))
    is_group = db.Column(db.Boolean, nullable=False, default=False)
    # Direct conversations pin both participants here; groups use ConversationMember.
    user1_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'))
    user2_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'))
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.now)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.now)

    user1 = db.relationship('User', foreign_keys=[user1_id])
    user2 = db.relationship('User', foreign_keys=[user2_id])
    members = db.relationship(
        'ConversationMember', backref='conversation', cascade='all, delete-orphan',
        order_by='ConversationMember.id',
    )
    messages = db.relationship(
        'Message', backref='conversation', cascade='all, delete-orphan', lazy='dynamic',
    )

    def member_ids(self):
        if self.is_group:
            return [m.user_id for m in self.members]
        return [self.user1_id, self.user2_id]

    def has_member(self, user_id):
        return user_id in self.member_ids()


class ConversationMember(db.Model):
    __tablename__ = 'conversation_members'
    __table_args__ = (db.UniqueConstraint('conversation_id', 'user_id', name='uq_conversation_member'),)

    id = db.Column(db.Integer, primary_key=True)
    conversation_id = db.Column(db.Integer, db.ForeignKey('conversations.id', ondelete='CASCADE'), nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    joined_at = db.Column(db.DateTime, nullable=False, default=datetime.now)

    user = db.relationship('User')


class Message(db.Model):
    __tablename__ = 'messages'

    id = db.Column(db.Integer, primary_key=True)
    conversation_id = db.Column(db.Integer, db.ForeignKey('conversations.id', ondelete='CASCADE'), nullable=False)
    sender_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    receiver_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'))
    content = db.Column(db.Text, nullable=False, default='')
    attachments = db.Column(db.JSON, nullable=False, default=list)
    is_read = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.now)

    sender = db.relationship('User', foreign_keys=[sender_id])
    receiver = db.relationship('User', foreign_keys=[receiver_id])

    def to_dict(self):
        return {
            'id': self.id,
            'conversationId': self.conversation_id,
            'content': self.content,
            'attachments': self.attachments or [],
            'isRead': self.is_read,
            'senderId': self.sender_id,
            'receiverId': self.receiver_id,
            'sender': self.sender.to_summary() if self.sender else None,
            'receiver': self.receiver.to_summary() if self.receiver else None,
            'createdAt': iso(self.created_at),
        }
