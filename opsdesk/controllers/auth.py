# File: opsdesk/controllers/auth.py
from flask import Blueprint, jsonify
from flask_login import current_user, login_required, login_user, logout_user

from opsdesk.services.user_service import AuthService, UserService
from opsdesk.utils import admin_required, get_json_body

auth_bp = Blueprint('auth', __name__, url_prefix='/api')


@auth_bp.route('/auth/login', methods=['POST'])
def login():
    data = get_json_body()
    user = AuthService.authenticate(data.get('email'), data.get('password'))
    login_user(user, remember=bool(data.get('remember')))
    return jsonify({'user': user.to_dict(), 'mustChangePassword': user.must_change_password})


@auth_bp.route('/auth/logout', methods=['POST'])
@login_required
def logout():
    logout_user()
    return jsonify({'success': True})


@auth_bp.route('/register', methods=['POST'])
@admin_required
def register():
    user = UserService.register(actor=current_user, data=get_json_body())
    return jsonify(user.to_dict()), 201
