from __future__ import annotations

import pytest

from opsdesk.core.exceptions import AuthorizationError, ValidationError
from opsdesk.models.audit import AuditLog
from opsdesk.services.payroll_service import PayeeService, PaymentService, payee_to_dict

BANK = {"bankName": "Nabil Bank", "accountNumber": "0011223344556677", "accountHolder": "Sita Rai"}
SALARY = {"baseSalary": 50000, "taxDeduction": 500}
PAYMENT = {"paymentDate": "2026-03-01", "payPeriodStart": "2026-02-01", "payPeriodEnd": "2026-02-28"}


def test_upsert_payee_creates_then_updates(admin, staff):
    created = PayeeService.upsert_payee(actor=admin, user_id=staff.id, data={"bankDetails": BANK, "salaryInfo": SALARY})

    assert created["bankDetails"]["accountNumber"] == "****6677"
    assert created["salaryInfo"]["currency"] == "NPR"
    assert created["salaryInfo"]["payFrequency"] == "MONTHLY"

    PayeeService.upsert_payee(actor=admin, user_id=staff.id, data={"salaryInfo": {**SALARY, "baseSalary": 60000}})

    assert staff.salary_info.base_salary == 60000
    actions = [(a.action, a.resource) for a in AuditLog.query.order_by(AuditLog.id).all()]
    assert actions == [("CREATE", "BANK_DETAILS"), ("CREATE", "SALARY_INFO"), ("UPDATE", "SALARY_INFO")]


def test_admin_manages_staff_only(admin, manager):
    with pytest.raises(AuthorizationError, match="Admin can only manage Staff payee information"):
        PayeeService.upsert_payee(actor=admin, user_id=manager.id, data={"bankDetails": BANK})


def test_super_admin_manages_anyone(super_admin, manager):
    PayeeService.upsert_payee(actor=super_admin, user_id=manager.id, data={"bankDetails": BANK})
    assert manager.bank_details.bank_name == "Nabil Bank"


def test_upsert_requires_user_id(admin):
    with pytest.raises(ValidationError, match="User ID is required"):
        PayeeService.upsert_payee(actor=admin, user_id=None, data={"bankDetails": BANK})


def test_staff_sees_own_details_unmasked_without_salary(admin, staff, make_user):
    PayeeService.upsert_payee(actor=admin, user_id=staff.id, data={"bankDetails": BANK, "salaryInfo": SALARY})

    mine = PayeeService.get_payee(actor=staff, user_id=staff.id)

    assert mine["bankDetails"]["accountNumber"] == BANK["accountNumber"]
    assert mine["salaryInfo"] is None
    with pytest.raises(AuthorizationError):
        PayeeService.get_payee(actor=make_user(), user_id=staff.id)


def test_list_payees_scoped_by_role(super_admin, admin, manager, staff):
    assert {u.id for u in PayeeService.list_payees(actor=staff)} == {staff.id}
    assert {u.id for u in PayeeService.list_payees(actor=admin)} == {admin.id, staff.id}
    assert len(PayeeService.list_payees(actor=super_admin)) == 4


def test_payment_net_pay_and_currency(admin, staff):
    PayeeService.upsert_payee(
        actor=admin, user_id=staff.id, data={"salaryInfo": {**SALARY, "currency": "USD"}}
    )

    payment = PaymentService.create_payment(
        actor=admin, data={**PAYMENT, "payeeId": staff.id, "deductions": 2000, "bonuses": 500}
    )

    assert payment.base_salary == 50000
    assert payment.net_pay == 48500
    assert payment.amount == 48500
    assert payment.currency == "USD"
    assert payment.status == "PENDING"
    assert payee_to_dict(staff)["lastPayment"]["id"] == payment.id


def test_payment_rules(admin, manager, staff):
    with pytest.raises(ValidationError, match="Missing required fields"):
        PaymentService.create_payment(actor=admin, data={"payeeId": staff.id})
    with pytest.raises(AuthorizationError, match="Admin can only process payments for Staff"):
        PaymentService.create_payment(actor=admin, data={**PAYMENT, "payeeId": manager.id})
    with pytest.raises(AuthorizationError):
        PaymentService.create_payment(actor=staff, data={**PAYMENT, "payeeId": staff.id})


def test_payee_reads_own_payment_and_only_super_admin_deletes(admin, staff, super_admin, make_user):
    payment = PaymentService.create_payment(actor=admin, data={**PAYMENT, "payeeId": staff.id, "baseSalary": 1000})

    assert PaymentService.get_payment(actor=staff, payment_id=payment.id).id == payment.id
    with pytest.raises(AuthorizationError):
        PaymentService.get_payment(actor=make_user(), payment_id=payment.id)

    PaymentService.update_payment(actor=admin, payment_id=payment.id, data={"status": "COMPLETED"})
    assert payment.status == "COMPLETED"

    with pytest.raises(AuthorizationError):
        PaymentService.delete_payment(actor=admin, payment_id=payment.id)
    PaymentService.delete_payment(actor=super_admin, payment_id=payment.id)
    assert PaymentService.list_payments(actor=admin) == []


def test_delete_payee_info(super_admin, admin, staff):
    PayeeService.upsert_payee(actor=admin, user_id=staff.id, data={"bankDetails": BANK, "salaryInfo": SALARY})
    with pytest.raises(AuthorizationError):
        PayeeService.delete_payee(actor=admin, user_id=staff.id)

    PayeeService.delete_payee(actor=super_admin, user_id=staff.id)

    assert staff.bank_details is None
    assert staff.salary_info is None


def test_payroll_endpoints(client, admin, staff, login):
    login(admin)
    resp = client.post("/api/payees", json={"userId": staff.id, "bankDetails": BANK})
    assert resp.status_code == 201
    listed = client.get("/api/payees").get_json()
    assert {p["id"] for p in listed} == {admin.id, staff.id}
    payment = client.post("/api/payments", json={**PAYMENT, "payeeId": staff.id, "baseSalary": 100})
    assert payment.status_code == 201
    assert payment.get_json()["netPay"] == 100
