from __future__ import annotations

import logging
from typing import Optional

from ..common.datetime_utils import now_local, optional_datetime
from ..common.validators import require_non_empty, validate_enum, validate_number, validate_string
from ..core.constants import CLIENT_NAME_MAX_LENGTH
from ..core.enums import AuditAction, AuditResource, InvoiceStatus, values_of
from ..core.exceptions import AuthorizationError, ValidationError
from ..extensions import db
from ..models.invoice import Client, Invoice, InvoiceItem
from ..models.user import User
from .audit_service import AuditService
from .base import get_or_404, optional_int

log = logging.getLogger(__name__)


def build_items(raw_items) -> tuple[list[InvoiceItem], float]:
    """Turn request line items into InvoiceItem rows and return them with the subtotal."""
    if not isinstance(raw_items, list) or not raw_items:
        raise ValidationError("Missing required fields (Client Name or Items)")

    items: list[InvoiceItem] = []
    subtotal = 0.0
    for raw in raw_items:
        if not isinstance(raw, dict):
            raise ValidationError("Invoice items must be objects")
        quantity = validate_number(raw.get("quantity", 1), "quantity")
        unit_price = validate_number(raw.get("unitPrice", 0), "unitPrice")
        total = quantity * unit_price
        subtotal += total
        items.append(
            InvoiceItem(
                description=validate_string(raw.get("description"), "description", max_length=500),
                quantity=quantity,
                unit_price=unit_price,
                total=total,
            )
        )
    return items, subtotal


def next_invoice_number() -> str:
    n = Invoice.query.count() + 1
    number = f"INV-{n:04d}"
    while Invoice.query.filter_by(invoice_number=number).first() is not None:
        n += 1
        number = f"INV-{n:04d}"
    return number


class ClientService:
    @staticmethod
    def list_clients() -> list[Client]:
        return Client.query.order_by(Client.name.asc()).all()

    @staticmethod
    def create_client(*, user: User, data: dict) -> Client:
        if not user.is_manager:
            raise AuthorizationError("Forbidden")
        client = Client(
            name=validate_string(data.get("name"), "Name", max_length=CLIENT_NAME_MAX_LENGTH, required=True),
            email=validate_string(data.get("email"), "Email", max_length=255),
            phone=validate_string(data.get("phone"), "Phone", max_length=50),
            address=validate_string(data.get("address"), "Address", max_length=1000),
            company=validate_string(data.get("company"), "Company", max_length=200) or None,
        )
        db.session.add(client)
        db.session.flush()
        AuditService.record(user_id=user.id, action=AuditAction.CREATE, resource=AuditResource.CLIENT, resource_id=client.id)
        db.session.commit()
        return client

    @staticmethod
    def find_or_create(name: str, email: Optional[str] = None, address: Optional[str] = None) -> Client:
        name = validate_string(name, "Client name", max_length=CLIENT_NAME_MAX_LENGTH, required=True)
        query = Client.query.filter(Client.name == name)
        if email:
            query = query.filter(Client.email == email)
        client = query.first()
        if client:
            return client
        client = Client(name=name, email=email or "", address=address or "", phone="")
        db.session.add(client)
        db.session.flush()
        log.info("Created client %s (%s) for invoice", client.id, name)
        return client


class InvoiceService:
    @staticmethod
    def list_invoices(*, user: User) -> list[Invoice]:
        query = Invoice.query
        if not user.is_super_admin:
            query = query.filter(Invoice.creator_id == user.id)
        return query.order_by(Invoice.created_at.desc(), Invoice.id.desc()).all()

    @staticmethod
    def _visible(user: User, invoice_id: int) -> Invoice:
        invoice = get_or_404(Invoice, invoice_id, "Invoice not found")
        if invoice.creator_id != user.id and not user.is_super_admin:
            raise AuthorizationError("Forbidden")
        return invoice

    @staticmethod
    def get_invoice(*, user: User, invoice_id: int) -> Invoice:
        return InvoiceService._visible(user, invoice_id)

    @staticmethod
    def create_invoice(*, user: User, data: dict) -> Invoice:
        client_name = data.get("clientName")
        client_id = optional_int(data.get("clientId"), "clientId")
        if not (client_name or client_id) or not data.get("items"):
            raise ValidationError("Missing required fields (Client Name or Items)")

        if client_id:
            client = get_or_404(Client, client_id, "Client not found")
        else:
            client = ClientService.find_or_create(client_name, data.get("clientEmail"), data.get("clientAddress"))

        items, subtotal = build_items(data["items"])
        tax_rate = validate_number(data.get("taxRate") or 0, "taxRate", maximum=1)
        tax_amount = subtotal * tax_rate

        invoice = Invoice(
            invoice_number=next_invoice_number(),
            status=validate_enum(data.get("status"), "status", values_of(InvoiceStatus), default=InvoiceStatus.DRAFT.value),
            issue_date=optional_datetime(data.get("issueDate"), "issueDate") or now_local(),
            due_date=optional_datetime(data.get("dueDate"), "dueDate"),
            client_id=client.id,
            creator_id=user.id,
            subtotal=subtotal,
            tax_rate=tax_rate,
            tax_amount=tax_amount,
            total=subtotal + tax_amount,
            notes=validate_string(data.get("notes"), "notes") or None,
            billed_by_name=data.get("billedByName"),
            billed_by_position=data.get("billedByPosition"),
            items=items,
        )
        db.session.add(invoice)
        db.session.flush()
        AuditService.record(
            user_id=user.id,
            action=AuditAction.CREATE,
            resource=AuditResource.INVOICE,
            resource_id=invoice.id,
            details={"invoiceNumber": invoice.invoice_number, "total": invoice.total},
        )
        db.session.commit()
        log.info("Invoice %s created by %s", invoice.invoice_number, user.id)
        return invoice

    @staticmethod
    def update_invoice(*, user: User, invoice_id: int, data: dict) -> Invoice:
        invoice = InvoiceService._visible(user, invoice_id)

        if "status" in data:
            invoice.status = validate_enum(data["status"], "status", values_of(InvoiceStatus), required=True)
        if "dueDate" in data:
            invoice.due_date = optional_datetime(data["dueDate"], "dueDate")
        if "issueDate" in data and data["issueDate"]:
            invoice.issue_date = optional_datetime(data["issueDate"], "issueDate")
        for key, attr in (("notes", "notes"), ("billedByName", "billed_by_name"), ("billedByPosition", "billed_by_position")):
            if key in data:
                setattr(invoice, attr, data[key])

        client = invoice.client
        if data.get("clientName"):
            client.name = validate_string(data["clientName"], "Client name", max_length=CLIENT_NAME_MAX_LENGTH, required=True)
        if "clientEmail" in data:
            client.email = data["clientEmail"] or ""
        if "clientAddress" in data:
            client.address = data["clientAddress"] or ""

        if "items" in data or "taxRate" in data:
            if "items" in data:
                items, subtotal = build_items(data["items"])
                invoice.items = items
            else:
                subtotal = sum(item.total for item in invoice.items)
            tax_rate = validate_number(data.get("taxRate", invoice.tax_rate) or 0, "taxRate", maximum=1)
            invoice.subtotal = subtotal
            invoice.tax_rate = tax_rate
            invoice.tax_amount = subtotal * tax_rate
            invoice.total = subtotal + invoice.tax_amount

        AuditService.record(user_id=user.id, action=AuditAction.UPDATE, resource=AuditResource.INVOICE, resource_id=invoice.id)
        db.session.commit()
        return invoice

    @staticmethod
    def delete_invoice(*, user: User, invoice_id: int) -> None:
        invoice = InvoiceService._visible(user, invoice_id)
        AuditService.record(
            user_id=user.id,
            action=AuditAction.DELETE,
            resource=AuditResource.INVOICE,
            resource_id=invoice.id,
            details={"invoiceNumber": invoice.invoice_number},
        )
        db.session.delete(invoice)
        db.session.commit()

    @staticmethod
    def set_due_date(*, user: User, invoice_id: int, due_date) -> Invoice:
        invoice = get_or_404(Invoice, invoice_id, "Invoice not found")
        if not (user.is_manager or invoice.creator_id == user.id):
            raise AuthorizationError("Forbidden")
        invoice.due_date = optional_datetime(due_date, "dueDate")
        db.session.commit()
        return invoice
