# File: opsdesk/controllers/meetings.py
from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required

from opsdesk.services.meeting_service import MeetingService
from opsdesk.utils import get_json_body

meetings_bp = Blueprint('meetings', __name__, url_prefix='/api/meetings')


@meetings_bp.route('', methods=['GET'])
@login_required
def list_meetings():
    upcoming = request.args.get('upcoming', '').lower() == 'true'
    return jsonify([m.to_dict() for m in MeetingService.list_meetings(user=current_user, upcoming=upcoming)])


@meetings_bp.route('', methods=['POST'])
@login_required
def create_meeting():
    meeting = MeetingService.create_meeting(user=current_user, data=get_json_body())
    return jsonify(meeting.to_dict()), 201


@meetings_bp.route('/<int:meeting_id>', methods=['GET'])
@login_required
def get_meeting(meeting_id):
    return jsonify(MeetingService.get_meeting(user=current_user, meeting_id=meeting_id).to_dict())


@meetings_bp.route('/<int:meeting_id>', methods=['PUT'])
@login_required
def update_meeting(meeting_id):
    meeting = MeetingService.update_meeting(user=current_user, meeting_id=meeting_id, data=get_json_body())
    return jsonify(meeting.to_dict())


@meetings_bp.route('/<int:meeting_id>', methods=['DELETE'])
@login_required
def delete_meeting(meeting_id):
    MeetingService.delete_meeting(user=current_user, meeting_id=meeting_id)
    return jsonify({'success': True})


@meetings_bp.route('/<int:meeting_id>/respond', methods=['POST'])
@login_required
def respond(meeting_id):
    attendee = MeetingService.respond(user=current_user, meeting_id=meeting_id, status=get_json_body().get('status'))
    return jsonify(attendee.to_dict())
