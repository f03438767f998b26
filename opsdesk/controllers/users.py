# File: opsdesk/controllers/users.py
from flask import Blueprint, jsonify
from flask_login import current_user, login_required

from opsdesk.services.user_service import UserService
from opsdesk.utils import admin_required, get_json_body

users_bp = Blueprint('users', __name__, url_prefix='/api/users')


@users_bp.route('', methods=['GET'])
@login_required
def list_users():
    return jsonify([u.to_dict() for u in UserService.list_directory()])


@users_bp.route('', methods=['POST'])
@admin_required
def create_user():
    user = UserService.create_user(actor=current_user, data=get_json_body())
    return jsonify(user.to_dict()), 201


@users_bp.route('/me', methods=['GET'])
@login_required
def me():
    return jsonify(current_user.to_dict())


@users_bp.route('/me', methods=['PUT'])
@login_required
def update_me():
    user = UserService.update_profile(user=current_user, data=get_json_body())
    return jsonify(user.to_dict())


@users_bp.route('/<int:user_id>', methods=['GET'])
@login_required
def get_user(user_id):
    return jsonify(UserService.get(user_id).to_dict())


@users_bp.route('/<int:user_id>', methods=['PUT'])
@login_required
def update_user(user_id):
    user = UserService.update_user(actor=current_user, user_id=user_id, data=get_json_body())
    return jsonify(user.to_dict())


@users_bp.route('/<int:user_id>', methods=['DELETE'])
@admin_required
def delete_user(user_id):
    UserService.delete_user(actor=current_user, user_id=user_id)
    return jsonify({'success': True})
