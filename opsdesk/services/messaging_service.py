from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import and_, or_, select

from ..common.datetime_utils import iso, now_local
from ..common.validators import require_non_empty, sanitize_html
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..extensions import db
from ..models.message import Conversation, ConversationMember, Message
from ..models.user import User
from .base import get_or_404, optional_int

log = logging.getLogger(__name__)


def _direct_between(a: int, b: int) -> Optional[Conversation]:
    return Conversation.query.filter(
        Conversation.is_group.is_(False),
        or_(
            and_(Conversation.user1_id == a, Conversation.user2_id == b),
            and_(Conversation.user1_id == b, Conversation.user2_id == a),
        ),
    ).first()


def _unread_filter(conversation: Conversation, user_id: int):
    if conversation.is_group:
        return and_(Message.sender_id != user_id, Message.is_read.is_(False))
    return and_(Message.receiver_id == user_id, Message.is_read.is_(False))


def _last_message(conversation: Conversation) -> Optional[dict]:
    last = conversation.messages.order_by(Message.created_at.desc(), Message.id.desc()).first()
    if last is None:
        return None
    return {
        "content": last.content,
        "createdAt": iso(last.created_at),
        "senderId": last.sender_id,
        "senderName": last.sender.full_name if last.sender else "",
    }


def _delete_conversation(conversation: Conversation) -> None:
    Message.query.filter_by(conversation_id=conversation.id).delete(synchronize_session=False)
    db.session.delete(conversation)


class MessagingService:
    @staticmethod
    def direct_messages(*, user: User, other_user_id: int) -> list[Message]:
        conversation = _direct_between(user.id, other_user_id)
        if conversation is None:
            return []
        return conversation.messages.order_by(Message.created_at.asc(), Message.id.asc()).all()

    @staticmethod
    def conversation_messages(*, user: User, conversation_id: int) -> list[Message]:
        conversation = get_or_404(Conversation, conversation_id, "Conversation not found")
        if not conversation.has_member(user.id):
            raise AuthorizationError("Forbidden")
        return conversation.messages.order_by(Message.created_at.asc(), Message.id.asc()).all()

    @staticmethod
    def send(*, user: User, data: dict) -> Message:
        content = data.get("content") or ""
        if not isinstance(content, str):
            raise ValidationError("content must be a string")
        attachments = data.get("attachments") or []
        if not isinstance(attachments, list):
            raise ValidationError("attachments must be a list")

        receiver_id = optional_int(data.get("receiverId"), "receiverId")
        conversation_id = optional_int(data.get("conversationId"), "conversationId")
        if not (receiver_id or conversation_id) or (not content.strip() and not attachments):
            raise ValidationError("Missing receiverId or content/attachments")

        if conversation_id:
            conversation = get_or_404(Conversation, conversation_id, "Conversation not found")
            if not conversation.has_member(user.id):
                raise AuthorizationError("Forbidden")
            if not conversation.is_group:
                receiver_id = conversation.user2_id if conversation.user1_id == user.id else conversation.user1_id
        else:
            if receiver_id == user.id:
                raise ValidationError("Cannot message yourself")
            if db.session.get(User, receiver_id) is None:
                raise NotFoundError("Receiver not found")
            conversation = _direct_between(user.id, receiver_id)
            if conversation is None:
                conversation = Conversation(is_group=False, user1_id=user.id, user2_id=receiver_id)
                db.session.add(conversation)
                db.session.flush()

        message = Message(
            conversation_id=conversation.id,
            sender_id=user.id,
            receiver_id=None if conversation.is_group else receiver_id,
            content=sanitize_html(content),
            attachments=attachments,
        )
        db.session.add(message)
        conversation.updated_at = now_local()
        db.session.commit()
        return message

    @staticmethod
    def mark_read(*, user: User, conversation_id) -> int:
        conversation_id = optional_int(conversation_id, "conversationId")
        if not conversation_id:
            raise ValidationError("Missing conversationId")
        conversation = get_or_404(Conversation, conversation_id, "Conversation not found")
        if not conversation.has_member(user.id):
            raise AuthorizationError("Forbidden")

        updated = (
            Message.query.filter(Message.conversation_id == conversation.id, _unread_filter(conversation, user.id))
            .update({Message.is_read: True}, synchronize_session=False)
        )
        db.session.commit()
        return updated

    @staticmethod
    def unread_count(*, user: User) -> int:
        return Message.query.filter(Message.receiver_id == user.id, Message.is_read.is_(False)).count()

    @staticmethod
    def list_conversations(*, user: User) -> list[dict]:
        direct = Conversation.query.filter(
            Conversation.is_group.is_(False),
            or_(Conversation.user1_id == user.id, Conversation.user2_id == user.id),
        ).all()
        member_of = select(ConversationMember.conversation_id).where(ConversationMember.user_id == user.id)
        groups = Conversation.query.filter(Conversation.is_group.is_(True), Conversation.id.in_(member_of)).all()

        items = []
        for conv in direct:
            other = conv.user2 if conv.user1_id == user.id else conv.user1
            items.append(
                {
                    "id": conv.id,
                    "isGroup": False,
                    "name": conv.name,
                    "otherUser": other.to_summary() if other else None,
                    "memberDetails": None,
                    "lastMessage": _last_message(conv),
                    "unreadCount": conv.messages.filter(_unread_filter(conv, user.id)).count(),
                    "updatedAt": conv.updated_at,
                }
            )
        for conv in groups:
            items.append(
                {
                    "id": conv.id,
                    "isGroup": True,
                    "name": conv.name,
                    "otherUser": None,
                    "memberDetails": [m.user.to_summary() for m in conv.members if m.user],
                    "memberCount": len(conv.members),
                    "lastMessage": _last_message(conv),
                    "unreadCount": conv.messages.filter(_unread_filter(conv, user.id)).count(),
                    "updatedAt": conv.updated_at,
                }
            )

        items.sort(key=lambda c: c["updatedAt"], reverse=True)
        for item in items:
            item["updatedAt"] = iso(item["updatedAt"])
        return items

    @staticmethod
    def create_group(*, user: User, data: dict) -> Conversation:
        name = data.get("name")
        member_ids = data.get("memberIds") or []
        if not isinstance(name, str) or not name.strip() or not isinstance(member_ids, list) or not member_ids:
            raise ValidationError("Group name and at least one member required")

        ids = [user.id]
        for raw in member_ids:
            uid = optional_int(raw, "memberIds")
            if uid is not None and uid not in ids:
                ids.append(uid)
        if len(ids) < 2:
            raise ValidationError("Group name and at least one member required")
        if User.query.filter(User.id.in_(ids)).count() != len(ids):
            raise ValidationError("Some members do not exist")

        # The creator is always the first member row.
        conversation = Conversation(
            name=require_non_empty(name, "Group name"),
            is_group=True,
            members=[ConversationMember(user_id=uid) for uid in ids],
        )
        db.session.add(conversation)
        db.session.commit()
        log.info("Group conversation %s created by %s", conversation.id, user.id)
        return conversation

    @staticmethod
    def group_to_dict(conversation: Conversation) -> dict:
        return {
            "id": conversation.id,
            "name": conversation.name,
            "isGroup": True,
            "memberDetails": [m.user.to_summary() for m in conversation.members if m.user],
            "memberCount": len(conversation.members),
            "createdAt": iso(conversation.created_at),
        }

    @staticmethod
    def delete_group(*, user: User, conversation_id: int) -> None:
        conversation = get_or_404(Conversation, conversation_id, "Conversation not found")
        if not conversation.is_group:
            raise ValidationError("Cannot delete a direct conversation")
        creator_id = conversation.members[0].user_id if conversation.members else None
        if creator_id != user.id and not user.is_admin:
            raise AuthorizationError("Only the group creator or admin can delete this group")
        _delete_conversation(conversation)
        db.session.commit()

    @staticmethod
    def leave_group(*, user: User, conversation_id: int) -> bool:
        """Remove the user from a group. Returns True when the group was deleted."""
        conversation = get_or_404(Conversation, conversation_id, "Conversation not found")
        if not conversation.is_group:
            raise ValidationError("Cannot leave a direct conversation")
        membership = next((m for m in conversation.members if m.user_id == user.id), None)
        if membership is None:
            raise ValidationError("You are not a member of this group")

        conversation.members.remove(membership)
        if len(conversation.members) <= 1:
            _delete_conversation(conversation)
            db.session.commit()
            return True
        db.session.commit()
        return False
