# File: opsdesk/controllers/payroll.py
from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required

from opsdesk.services.payroll_service import PayeeService, PaymentService, payee_to_dict
from opsdesk.utils import admin_required, get_json_body, query_int

payroll_bp = Blueprint('payroll', __name__, url_prefix='/api')


@payroll_bp.route('/payees', methods=['GET'])
@login_required
def list_payees():
    return jsonify([payee_to_dict(p) for p in PayeeService.list_payees(actor=current_user)])


@payroll_bp.route('/payees', methods=['POST'])
@admin_required
def create_payee():
    data = get_json_body()
    result = PayeeService.upsert_payee(actor=current_user, user_id=data.get('userId'), data=data)
    return jsonify(result), 201


@payroll_bp.route('/payees/<int:user_id>', methods=['GET'])
@login_required
def get_payee(user_id):
    return jsonify(PayeeService.get_payee(actor=current_user, user_id=user_id))


@payroll_bp.route('/payees/<int:user_id>', methods=['PUT'])
@admin_required
def update_payee(user_id):
    return jsonify(PayeeService.upsert_payee(actor=current_user, user_id=user_id, data=get_json_body()))


@payroll_bp.route('/payees/<int:user_id>', methods=['DELETE'])
@admin_required
def delete_payee(user_id):
    PayeeService.delete_payee(actor=current_user, user_id=user_id)
    return jsonify({'success': True})


@payroll_bp.route('/payments', methods=['GET'])
@admin_required
def list_payments():
    payments = PaymentService.list_payments(
        actor=current_user,
        payee_id=query_int('payeeId'),
        status=request.args.get('status'),
        limit=query_int('limit'),
    )
    return jsonify([p.to_dict() for p in payments])


@payroll_bp.route('/payments', methods=['POST'])
@admin_required
def create_payment():
    payment = PaymentService.create_payment(actor=current_user, data=get_json_body())
    return jsonify(payment.to_dict()), 201


@payroll_bp.route('/payments/<int:payment_id>', methods=['GET'])
@login_required
def get_payment(payment_id):
    return jsonify(PaymentService.get_payment(actor=current_user, payment_id=payment_id).to_dict())


@payroll_bp.route('/payments/<int:payment_id>', methods=['PUT'])
@admin_required
def update_payment(payment_id):
    payment = PaymentService.update_payment(actor=current_user, payment_id=payment_id, data=get_json_body())
    return jsonify(payment.to_dict())


@payroll_bp.route('/payments/<int:payment_id>', methods=['DELETE'])
@admin_required
def delete_payment(payment_id):
    PaymentService.delete_payment(actor=current_user, payment_id=payment_id)
    return jsonify({'success': True})
