# File: opsdesk/controllers/admin.py
from flask import Blueprint, jsonify
from flask_login import current_user, login_required

from opsdesk.services.dashboard_service import DashboardService

admin_bp = Blueprint('admin', __name__, url_prefix='/api/admin')


@admin_bp.route('/stats', methods=['GET'])
@login_required
def stats():
    response = jsonify(DashboardService.stats(user=current_user))
    response.headers['Cache-Control'] = 'private, max-age=30'
    return response
