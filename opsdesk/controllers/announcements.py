# File: opsdesk/controllers/announcements.py
from flask import Blueprint, jsonify
from flask_login import current_user, login_required

from opsdesk.services.announcement_service import AnnouncementService
from opsdesk.utils import admin_required, get_json_body

announcements_bp = Blueprint('announcements', __name__, url_prefix='/api/announcements')


@announcements_bp.route('', methods=['GET'])
@login_required
def list_announcements():
    return jsonify([a.to_dict() for a in AnnouncementService.list_announcements()])


@announcements_bp.route('', methods=['POST'])
@admin_required
def create_announcement():
    announcement = AnnouncementService.create_announcement(user=current_user, data=get_json_body())
    return jsonify(announcement.to_dict()), 201


@announcements_bp.route('/<int:announcement_id>', methods=['DELETE'])
@admin_required
def delete_announcement(announcement_id):
    AnnouncementService.delete_announcement(user=current_user, announcement_id=announcement_id)
    return jsonify({'success': True})
