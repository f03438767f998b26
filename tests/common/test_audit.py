from __future__ import annotations

from opsdesk.core.enums import AuditAction, AuditResource
from opsdesk.extensions import db
from opsdesk.models.audit import AuditLog
from opsdesk.models.payroll import CustomBank
from opsdesk.services.audit_service import AuditService, client_ip


def test_client_ip_prefers_forwarded_header():
    assert client_ip({"X-Forwarded-For": "10.0.0.1, 10.0.0.2"}, "127.0.0.1") == "10.0.0.1"
    assert client_ip({"X-Real-IP": "10.0.0.9"}, "127.0.0.1") == "10.0.0.9"
    assert client_ip({}, None) == "unknown-ip"


def test_client_ip_is_capped_to_column_width():
    assert len(client_ip({"X-Forwarded-For": "9" * 500}, None)) == 64


def test_oversized_forwarded_header_does_not_break_audited_request(client, staff, login):
    login(staff)

    resp = client.post(
        "/api/banks",
        json={"country": "NP", "name": "Valley Co-op"},
        headers={"X-Forwarded-For": "1" * 300 + ", 10.0.0.2"},
    )

    assert resp.status_code == 201
    entry = AuditLog.query.filter_by(resource="CUSTOM_BANK").one()
    assert entry.ip_address == "1" * 64


def test_failed_audit_insert_keeps_caller_transaction(staff):
    bank = CustomBank(country="NP", name="Valley Co-op", created_by_id=staff.id)
    db.session.add(bank)

    entry = AuditService.record(
        user_id=staff.id,
        action=AuditAction.CREATE,
        resource=AuditResource.CUSTOM_BANK,
        details={"unserializable": object()},
    )
    db.session.commit()

    assert entry is None
    assert CustomBank.query.filter_by(name="Valley Co-op").count() == 1
    assert AuditLog.query.count() == 0
