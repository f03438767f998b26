from __future__ import annotations

import pytest

from opsdesk.core.exceptions import AuthorizationError, ValidationError
from opsdesk.models.audit import AuditLog
from opsdesk.models.invoice import Client
from opsdesk.services.invoice_service import ClientService, InvoiceService

ITEMS = [
    {"description": "Design", "quantity": 2, "unitPrice": 100},
    {"description": "Hosting", "quantity": 1, "unitPrice": 50},
]


def test_create_invoice_computes_totals_and_number(staff):
    invoice = InvoiceService.create_invoice(
        user=staff, data={"clientName": "Acme", "items": ITEMS, "taxRate": 0.13, "dueDate": "2026-03-31"}
    )

    assert invoice.invoice_number == "INV-0001"
    assert invoice.subtotal == 250
    assert invoice.tax_amount == pytest.approx(32.5)
    assert invoice.total == pytest.approx(282.5)
    assert invoice.status == "DRAFT"
    assert [i.total for i in invoice.items] == [200, 50]


def test_invoice_numbers_increment(staff):
    first = InvoiceService.create_invoice(user=staff, data={"clientName": "Acme", "items": ITEMS})
    second = InvoiceService.create_invoice(user=staff, data={"clientName": "Acme", "items": ITEMS})

    assert (first.invoice_number, second.invoice_number) == ("INV-0001", "INV-0002")
    assert first.client_id == second.client_id
    assert Client.query.count() == 1


def test_invoice_number_skips_taken_numbers(staff):
    first = InvoiceService.create_invoice(user=staff, data={"clientName": "Acme", "items": ITEMS})
    InvoiceService.create_invoice(user=staff, data={"clientName": "Acme", "items": ITEMS})
    InvoiceService.delete_invoice(user=staff, invoice_id=first.id)

    third = InvoiceService.create_invoice(user=staff, data={"clientName": "Acme", "items": ITEMS})

    assert third.invoice_number == "INV-0003"


@pytest.mark.parametrize("data", [{"items": ITEMS}, {"clientName": "Acme"}, {"clientName": "Acme", "items": []}])
def test_missing_client_or_items(staff, data):
    with pytest.raises(ValidationError, match="Missing required fields"):
        InvoiceService.create_invoice(user=staff, data=data)


def test_tax_rate_must_be_a_fraction(staff):
    with pytest.raises(ValidationError, match="taxRate"):
        InvoiceService.create_invoice(user=staff, data={"clientName": "Acme", "items": ITEMS, "taxRate": 13})


def test_invoices_are_private_to_creator_except_super_admin(staff, make_user, super_admin):
    invoice = InvoiceService.create_invoice(user=staff, data={"clientName": "Acme", "items": ITEMS})
    other = make_user()

    assert InvoiceService.list_invoices(user=other) == []
    with pytest.raises(AuthorizationError):
        InvoiceService.get_invoice(user=other, invoice_id=invoice.id)
    assert [i.id for i in InvoiceService.list_invoices(user=super_admin)] == [invoice.id]


def test_update_recomputes_totals_when_tax_changes(staff):
    invoice = InvoiceService.create_invoice(user=staff, data={"clientName": "Acme", "items": ITEMS})

    InvoiceService.update_invoice(user=staff, invoice_id=invoice.id, data={"taxRate": 0.1, "status": "SENT"})

    assert invoice.status == "SENT"
    assert invoice.total == pytest.approx(275)


def test_update_replaces_items(staff):
    invoice = InvoiceService.create_invoice(user=staff, data={"clientName": "Acme", "items": ITEMS})

    InvoiceService.update_invoice(
        user=staff, invoice_id=invoice.id, data={"items": [{"description": "One", "quantity": 3, "unitPrice": 10}]}
    )

    assert len(invoice.items) == 1
    assert invoice.subtotal == 30


def test_invoice_changes_are_audited(staff):
    invoice = InvoiceService.create_invoice(user=staff, data={"clientName": "Acme", "items": ITEMS})
    InvoiceService.delete_invoice(user=staff, invoice_id=invoice.id)

    actions = [(a.action, a.resource) for a in AuditLog.query.order_by(AuditLog.id).all()]
    assert actions == [("CREATE", "INVOICE"), ("DELETE", "INVOICE")]


def test_create_client_requires_manager(staff, manager):
    with pytest.raises(AuthorizationError):
        ClientService.create_client(user=staff, data={"name": "Globex"})
    client = ClientService.create_client(user=manager, data={"name": "Globex", "email": "ap@globex.test"})
    assert [c.id for c in ClientService.list_clients()] == [client.id]


def test_invoice_endpoints(client, staff, login):
    login(staff)
    resp = client.post("/api/invoices", json={"clientName": "Acme", "items": ITEMS})
    assert resp.status_code == 201
    body = resp.get_json()
    assert body["client"]["name"] == "Acme"
    assert body["items"][0]["unitPrice"] == 100

    due = client.put(f"/api/invoices/{body['id']}/due-date", json={"dueDate": "2026-04-15"})
    assert due.get_json()["dueDate"].startswith("2026-04-15")
