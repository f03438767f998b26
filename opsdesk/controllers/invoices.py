# File: opsdesk/controllers/invoices.py
from flask import Blueprint, jsonify
from flask_login import current_user, login_required

from opsdesk.services.invoice_service import ClientService, InvoiceService
from opsdesk.utils import get_json_body

invoices_bp = Blueprint('invoices', __name__, url_prefix='/api')


@invoices_bp.route('/invoices', methods=['GET'])
@login_required
def list_invoices():
    return jsonify([i.to_dict() for i in InvoiceService.list_invoices(user=current_user)])


@invoices_bp.route('/invoices', methods=['POST'])
@login_required
def create_invoice():
    invoice = InvoiceService.create_invoice(user=current_user, data=get_json_body())
    return jsonify(invoice.to_dict()), 201


@invoices_bp.route('/invoices/<int:invoice_id>', methods=['GET'])
@login_required
def get_invoice(invoice_id):
    return jsonify(InvoiceService.get_invoice(user=current_user, invoice_id=invoice_id).to_dict())


@invoices_bp.route('/invoices/<int:invoice_id>', methods=['PUT'])
@login_required
def update_invoice(invoice_id):
    invoice = InvoiceService.update_invoice(user=current_user, invoice_id=invoice_id, data=get_json_body())
    return jsonify(invoice.to_dict())


@invoices_bp.route('/invoices/<int:invoice_id>', methods=['DELETE'])
@login_required
def delete_invoice(invoice_id):
    InvoiceService.delete_invoice(user=current_user, invoice_id=invoice_id)
    return jsonify({'success': True})


@invoices_bp.route('/invoices/<int:invoice_id>/due-date', methods=['PUT'])
@login_required
def set_due_date(invoice_id):
    invoice = InvoiceService.set_due_date(
        user=current_user, invoice_id=invoice_id, due_date=get_json_body().get('dueDate'),
    )
    return jsonify(invoice.to_dict())


@invoices_bp.route('/clients', methods=['GET'])
@login_required
def list_clients():
    return jsonify([c.to_dict() for c in ClientService.list_clients()])


@invoices_bp.route('/clients', methods=['POST'])
@login_required
def create_client():
    client = ClientService.create_client(user=current_user, data=get_json_body())
    return jsonify(client.to_dict()), 201
