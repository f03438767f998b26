# File: opsdesk/controllers/leaves.py
from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required

from opsdesk.services.leave_service import LeaveService
from opsdesk.utils import get_json_body

leaves_bp = Blueprint('leaves', __name__, url_prefix='/api/leaves')


@leaves_bp.route('', methods=['GET'])
@login_required
def list_leaves():
    leaves = LeaveService.list_leaves(user=current_user, status=request.args.get('status'))
    return jsonify([l.to_dict() for l in leaves])


@leaves_bp.route('', methods=['POST'])
@login_required
def create_leave():
    leave = LeaveService.create_leave(user=current_user, data=get_json_body())
    return jsonify(leave.to_dict()), 201


@leaves_bp.route('/<int:leave_id>', methods=['PUT'])
@login_required
def decide(leave_id):
    leave = LeaveService.decide(user=current_user, leave_id=leave_id, status=get_json_body().get('status'))
    return jsonify(leave.to_dict())


@leaves_bp.route('/<int:leave_id>/dates', methods=['PUT'])
@login_required
def move_dates(leave_id):
    data = get_json_body()
    leave = LeaveService.move_dates(
        user=current_user, leave_id=leave_id, start_date=data.get('startDate'), end_date=data.get('endDate'),
    )
    return jsonify(leave.to_dict())
