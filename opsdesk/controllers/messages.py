# File: opsdesk/controllers/messages.py
from flask import Blueprint, jsonify
from flask_login import current_user, login_required

from opsdesk.core.exceptions import ValidationError
from opsdesk.services.messaging_service import MessagingService
from opsdesk.utils import get_json_body, query_int

messages_bp = Blueprint('messages', __name__, url_prefix='/api')


@messages_bp.route('/messages', methods=['GET'])
@login_required
def list_messages():
    conversation_id = query_int('conversationId')
    other_user_id = query_int('userId')
    if conversation_id:
        messages = MessagingService.conversation_messages(user=current_user, conversation_id=conversation_id)
    elif other_user_id:
        messages = MessagingService.direct_messages(user=current_user, other_user_id=other_user_id)
    else:
        raise ValidationError('userId or conversationId is required')
    return jsonify([m.to_dict() for m in messages])


@messages_bp.route('/messages', methods=['POST'])
@login_required
def send_message():
    message = MessagingService.send(user=current_user, data=get_json_body())
    return jsonify(message.to_dict()), 201


@messages_bp.route('/messages/read', methods=['POST'])
@login_required
def mark_read():
    updated = MessagingService.mark_read(user=current_user, conversation_id=get_json_body().get('conversationId'))
    return jsonify({'success': True, 'updated': updated})


@messages_bp.route('/messages/unread', methods=['GET'])
@login_required
def unread_count():
    return jsonify({'count': MessagingService.unread_count(user=current_user)})


@messages_bp.route('/conversations', methods=['GET'])
@login_required
def list_conversations():
    return jsonify(MessagingService.list_conversations(user=current_user))


@messages_bp.route('/conversations/group', methods=['POST'])
@login_required
def create_group():
    conversation = MessagingService.create_group(user=current_user, data=get_json_body())
    return jsonify(MessagingService.group_to_dict(conversation)), 201


@messages_bp.route('/conversations/<int:conversation_id>', methods=['DELETE'])
@login_required
def delete_group(conversation_id):
    MessagingService.delete_group(user=current_user, conversation_id=conversation_id)
    return jsonify({'success': True})


@messages_bp.route('/conversations/<int:conversation_id>/leave', methods=['POST'])
@login_required
def leave_group(conversation_id):
    deleted = MessagingService.leave_group(user=current_user, conversation_id=conversation_id)
    return jsonify({'success': True, 'groupDeleted': deleted})
