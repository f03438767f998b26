# File: opsdesk/controllers/calendar.py
from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required

from opsdesk.services.calendar_service import CalendarService
from opsdesk.utils import get_json_body

calendar_bp = Blueprint('calendar', __name__, url_prefix='/api/calendar')


@calendar_bp.route('', methods=['GET'])
@login_required
def feed():
    return jsonify(
        CalendarService.feed(
            user=current_user,
            range_key=request.args.get('range', '30'),
            event_type=request.args.get('type'),
            query=request.args.get('q'),
        )
    )


@calendar_bp.route('/reschedule', methods=['POST'])
@login_required
def reschedule():
    return jsonify(CalendarService.reschedule(user=current_user, data=get_json_body()))
