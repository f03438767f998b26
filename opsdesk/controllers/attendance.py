# File: opsdesk/controllers/attendance.py
from flask import Blueprint, jsonify, request, send_file
from flask_login import current_user, login_required

from opsdesk.common.datetime_utils import now_local, optional_date
from opsdesk.services.attendance_service import CLOCK_IN, AttendanceService
from opsdesk.utils import admin_required, get_json_body, query_int

attendance_bp = Blueprint('attendance', __name__, url_prefix='/api/attendance')

XLSX_MIMETYPE = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'


def _range():
    return (
        optional_date(request.args.get('startDate'), 'startDate'),
        optional_date(request.args.get('endDate'), 'endDate'),
    )


@attendance_bp.route('', methods=['POST'])
@login_required
def clock():
    action = get_json_body().get('action')
    record = AttendanceService.apply_action(current_user, action)
    return jsonify(record.to_dict()), 201 if action == CLOCK_IN else 200


@attendance_bp.route('', methods=['GET'])
@login_required
def list_records():
    start, end = _range()
    records = AttendanceService.list_records(
        user=current_user, target_user_id=query_int('userId'), start=start, end=end,
    )
    return jsonify([r.to_dict() for r in records])


@attendance_bp.route('/history', methods=['GET'])
@admin_required
def history():
    start, end = _range()
    records = AttendanceService.history(user=current_user, start=start, end=end, target_user_id=query_int('userId'))
    return jsonify([r.to_dict() for r in records])


@attendance_bp.route('/export', methods=['GET'])
@admin_required
def export():
    start, end = _range()
    records = AttendanceService.history(user=current_user, start=start, end=end, target_user_id=query_int('userId'))
    output = AttendanceService.export_excel(records)
    filename = f"attendance_{now_local():%Y%m%d}.xlsx"
    return send_file(output, download_name=filename, as_attachment=True, mimetype=XLSX_MIMETYPE)
