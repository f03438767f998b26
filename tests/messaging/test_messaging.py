from __future__ import annotations

import pytest

from opsdesk.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from opsdesk.models.message import Conversation, Message
from opsdesk.services.messaging_service import MessagingService


def test_first_direct_message_opens_conversation(staff, manager):
    message = MessagingService.send(user=staff, data={"receiverId": manager.id, "content": "hi"})
    reply = MessagingService.send(user=manager, data={"receiverId": staff.id, "content": "hello"})

    assert message.conversation_id == reply.conversation_id
    assert Conversation.query.count() == 1
    assert [m.content for m in MessagingService.direct_messages(user=staff, other_user_id=manager.id)] == ["hi", "hello"]


def test_send_validation(staff):
    with pytest.raises(ValidationError, match="Missing receiverId"):
        MessagingService.send(user=staff, data={"content": "hi"})
    with pytest.raises(ValidationError, match="Missing receiverId"):
        MessagingService.send(user=staff, data={"receiverId": 2, "content": "  "})
    with pytest.raises(ValidationError, match="Cannot message yourself"):
        MessagingService.send(user=staff, data={"receiverId": staff.id, "content": "me"})
    with pytest.raises(NotFoundError, match="Receiver not found"):
        MessagingService.send(user=staff, data={"receiverId": 999, "content": "?"})


def test_content_is_sanitized(staff, manager):
    message = MessagingService.send(
        user=staff, data={"receiverId": manager.id, "content": "hi <b onclick=go()>there</b><script>x</script>"}
    )
    assert message.content.startswith("hi <b>there</b>")
    assert "<script" not in message.content
    assert "onclick" not in message.content


def test_attachment_only_message_allowed(staff, manager):
    message = MessagingService.send(
        user=staff, data={"receiverId": manager.id, "attachments": [{"name": "a.pdf", "url": "/f/a.pdf"}]}
    )
    assert message.attachments[0]["name"] == "a.pdf"


def test_unread_and_mark_read(staff, manager):
    first = MessagingService.send(user=staff, data={"receiverId": manager.id, "content": "one"})
    MessagingService.send(user=staff, data={"receiverId": manager.id, "content": "two"})

    assert MessagingService.unread_count(user=manager) == 2
    assert MessagingService.mark_read(user=manager, conversation_id=first.conversation_id) == 2
    assert MessagingService.unread_count(user=manager) == 0


def test_outsider_cannot_read_conversation(staff, manager, make_user):
    message = MessagingService.send(user=staff, data={"receiverId": manager.id, "content": "secret"})
    with pytest.raises(AuthorizationError):
        MessagingService.conversation_messages(user=make_user(), conversation_id=message.conversation_id)


def test_group_lifecycle(staff, manager, make_user):
    third = make_user()
    group = MessagingService.create_group(user=staff, data={"name": "Team", "memberIds": [manager.id, third.id]})
    MessagingService.send(user=manager, data={"conversationId": group.id, "content": "hey team"})

    convs = MessagingService.list_conversations(user=staff)
    assert convs[0]["isGroup"] is True
    assert convs[0]["memberCount"] == 3
    assert convs[0]["unreadCount"] == 1
    assert convs[0]["lastMessage"]["content"] == "hey team"

    assert MessagingService.leave_group(user=third, conversation_id=group.id) is False
    assert MessagingService.leave_group(user=manager, conversation_id=group.id) is True
    assert Conversation.query.count() == 0
    assert Message.query.count() == 0


def test_group_needs_name_and_members(staff):
    with pytest.raises(ValidationError, match="Group name and at least one member required"):
        MessagingService.create_group(user=staff, data={"name": "Solo", "memberIds": []})
    with pytest.raises(ValidationError, match="Group name and at least one member required"):
        MessagingService.create_group(user=staff, data={"name": "Solo", "memberIds": [staff.id]})


def test_only_creator_or_admin_deletes_group(staff, manager, admin):
    group = MessagingService.create_group(user=staff, data={"name": "Team", "memberIds": [manager.id]})
    with pytest.raises(AuthorizationError, match="Only the group creator or admin"):
        MessagingService.delete_group(user=manager, conversation_id=group.id)
    MessagingService.delete_group(user=admin, conversation_id=group.id)
    assert Conversation.query.count() == 0


def test_messaging_endpoints(client, staff, manager, login):
    login(staff)
    sent = client.post("/api/messages", json={"receiverId": manager.id, "content": "ping"})
    assert sent.status_code == 201
    assert client.get("/api/messages").status_code == 400
    assert len(client.get(f"/api/messages?userId={manager.id}").get_json()) == 1

    client.post("/api/auth/logout")
    login(manager)
    assert client.get("/api/messages/unread").get_json() == {"count": 1}
    conversation_id = sent.get_json()["conversationId"]
    read = client.post("/api/messages/read", json={"conversationId": conversation_id})
    assert read.get_json() == {"success": True, "updated": 1}
    convs = client.get("/api/conversations").get_json()
    assert convs[0]["otherUser"]["id"] == staff.id
