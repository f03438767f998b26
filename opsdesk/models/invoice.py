# File: opsdesk/models/invoice.py
from datetime import datetime

from opsdesk.common.datetime_utils import iso
from opsdesk.core.enums import InvoiceStatus
from opsdesk.extensions import db


class Client(db.Model):
    __tablename__ = 'clients'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    email = db.Column(db.String(255), nullable=False, default='')
    phone = db.Column(db.String(50), nullable=False, default='')
    address = db.Column(db.Text, nullable=False, default='')
    company = db.Column(db.String(200))
    status = db.Column(db.String(20), nullable=False, default='ACTIVE')
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.now)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'email': self.email,
            'phone': self.phone,
            'address': self.address,
            'company': self.company,
            'status': self.status,
        }


class Invoice(db.Model):
    __tablename__ = 'invoices'

    id = db.Column(db.Integer, primary_key=True)
    invoice_number = db.Column(db.String(20), unique=True, nullable=False)
    client_id = db.Column(db.Integer, db.ForeignKey('clients.id'), nullable=False)
    creator_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    status = db.Column(db.String(20), nullable=False, default=InvoiceStatus.DRAFT.value)
    issue_date = db.Column(db.DateTime, nullable=False, default=datetime.now)
    due_date = db.Column(db.DateTime)
    subtotal = db.Column(db.Float, nullable=False, default=0)
    tax_rate = db.Column(db.Float, nullable=False, default=0)
    tax_amount = db.Column(db.Float, nullable=False, default=0)
    total = db.Column(db.Float, nullable=False, default=0)
    notes = db.Column(db.Text)
    billed_by_name = db.Column(db.String(200))
    billed_by_position = db.Column(db.String(200))
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.now)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)

    client = db.relationship('Client', backref='invoices')
    creator = db.relationship('User')
    items = db.relationship(
        'InvoiceItem', backref='invoice', cascade='all, delete-orphan', order_by='InvoiceItem.id',
    )

    def to_dict(self):
        return {
            'id': self.id,
            'invoiceNumber': self.invoice_number,
            'status': self.status,
            'issueDate': iso(self.issue_date),
            'dueDate': iso(self.due_date),
            'subtotal': self.subtotal,
            'taxRate': self.tax_rate,
            'taxAmount': self.tax_amount,
            'total': self.total,
            'notes': self.notes,
            'billedByName': self.billed_by_name,
            'billedByPosition': self.billed_by_position,
            'clientId': self.client_id,
            'creatorId': self.creator_id,
            'client': self.client.to_dict() if self.client else None,
            'items': [item.to_dict() for item in self.items],
            'createdAt': iso(self.created_at),
        }


class InvoiceItem(db.Model):
    __tablename__ = 'invoice_items'

    id = db.Column(db.Integer, primary_key=True)
    invoice_id = db.Column(db.Integer, db.ForeignKey('invoices.id', ondelete='CASCADE'), nullable=False)
    description = db.Column(db.String(500), nullable=False, default='')
    quantity = db.Column(db.Float, nullable=False, default=1)
    unit_price = db.Column(db.Float, nullable=False, default=0)
    total = db.Column(db.Float, nullable=False, default=0)

    def to_dict(self):
        return {
            'id': self.id,
            'description': self.description,
            'quantity': self.quantity,
            'unitPrice': self.unit_price,
            'total': self.total,
        }
