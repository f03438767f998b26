"""Payee bank/salary records and salary payments.

Every read and write of payroll data stages an AuditLog row that is
committed together with the request's own changes.
"""
from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import or_

from ..common.datetime_utils import optional_date
from ..common.validators import validate_enum, validate_number, validate_string
from ..core.constants import PAYMENTS_DEFAULT_LIMIT
from ..core.enums import AuditAction, AuditResource, PaymentStatus, Role, UserStatus, values_of
from ..core.exceptions import AuthorizationError, ValidationError
from ..extensions import db
from ..models.payroll import BankDetails, Payment, SalaryInfo
from ..models.user import User
from .audit_service import AuditService
from .base import get_or_404, optional_int

log = logging.getLogger(__name__)


def _can_manage(actor: User, target: User) -> bool:
    if actor.is_super_admin:
        return True
    return actor.role == Role.ADMIN.value and target.role == Role.STAFF.value


def _can_view(actor: User, target: User) -> bool:
    return actor.id == target.id or _can_manage(actor, target)


def _apply_bank_details(target: User, raw: dict) -> BankDetails:
    if not isinstance(raw, dict):
        raise ValidationError("bankDetails must be an object")
    details = target.bank_details or BankDetails(user_id=target.id)
    details.bank_name = validate_string(raw.get("bankName"), "Bank name", max_length=200, required=True)
    details.bank_code = validate_string(raw.get("bankCode"), "Bank code", max_length=50) or None
    details.branch_name = validate_string(raw.get("branchName"), "Branch name", max_length=200) or None
    details.branch_code = validate_string(raw.get("branchCode"), "Branch code", max_length=50) or None
    details.account_number = validate_string(raw.get("accountNumber"), "Account number", max_length=64, required=True)
    details.account_holder = validate_string(raw.get("accountHolder"), "Account holder", max_length=200, required=True)
    details.account_type = raw.get("accountType") or "SAVINGS"
    details.country = raw.get("country") or "NP"
    if details.id is None:
        db.session.add(details)
        target.bank_details = details
    return details


def _apply_salary_info(target: User, raw: dict) -> SalaryInfo:
    if not isinstance(raw, dict):
        raise ValidationError("salaryInfo must be an object")
    info = target.salary_info or SalaryInfo(user_id=target.id)
    info.base_salary = validate_number(raw.get("baseSalary"), "baseSalary", required=True)
    info.currency = raw.get("currency") or "NPR"
    info.pay_frequency = raw.get("payFrequency") or "MONTHLY"
    info.payment_method = raw.get("paymentMethod") or "BANK_TRANSFER"
    if raw.get("type") or info.type is None:
        info.type = raw.get("type") or "FIXED"
    info.tax_deduction = validate_number(raw.get("taxDeduction") or 0, "taxDeduction")
    info.other_deductions = validate_number(raw.get("otherDeductions") or 0, "otherDeductions")
    info.deduction_notes = raw.get("deductionNotes") or None
    if info.id is None:
        db.session.add(info)
        target.salary_info = info
    return info


def payee_to_dict(user: User, *, masked: bool = True, with_salary: bool = True) -> dict:
    last = (
        Payment.query.filter_by(payee_id=user.id)
        .order_by(Payment.payment_date.desc(), Payment.id.desc())
        .first()
    )
    data = user.to_summary()
    data.update(
        {
            "email": user.email,
            "role": user.role,
            "department": user.department,
            "position": user.position,
            "status": user.status,
            "bankDetails": user.bank_details.to_dict(masked=masked) if user.bank_details else None,
            "salaryInfo": user.salary_info.to_dict() if with_salary and user.salary_info else None,
            "lastPayment": (
                {"id": last.id, "paymentDate": last.payment_date.isoformat(), "status": last.status, "netPay": last.net_pay}
                if last
                else None
            ),
        }
    )
    return data


class PayeeService:
    @staticmethod
    def list_payees(*, actor: User) -> list[User]:
        query = User.query
        if actor.is_super_admin:
            pass
        elif actor.role == Role.ADMIN.value:
            query = query.filter(
                User.status == UserStatus.ACTIVE.value,
                or_(User.role.in_((Role.STAFF.value, Role.ADMIN.value)), User.id == actor.id),
            )
        else:
            query = query.filter(User.id == actor.id)

        payees = query.order_by(User.role.asc(), User.first_name.asc()).all()
        AuditService.record(
            user_id=actor.id,
            action=AuditAction.VIEW,
            resource=AuditResource.USER,
            details={"count": len(payees), "type": "PAYEES_LIST"},
        )
        db.session.commit()
        return payees

    @staticmethod
    def get_payee(*, actor: User, user_id: int) -> dict:
        target = get_or_404(User, user_id, "Payee not found")
        if not _can_view(actor, target):
            raise AuthorizationError("Forbidden")

        AuditService.record(
            user_id=actor.id,
            action=AuditAction.VIEW,
            resource=AuditResource.BANK_DETAILS,
            resource_id=target.id,
            details={"type": "PAYEE_DETAILS"},
        )
        db.session.commit()
        return payee_to_dict(target, masked=False, with_salary=actor.is_admin)

    @staticmethod
    def upsert_payee(*, actor: User, user_id, data: dict) -> dict:
        if not actor.is_admin:
            raise AuthorizationError("Forbidden")
        user_id = optional_int(user_id, "userId")
        if not user_id:
            raise ValidationError("User ID is required")
        target = get_or_404(User, user_id, "User not found")
        if not _can_manage(actor, target):
            raise AuthorizationError("Admin can only manage Staff payee information")

        result = {}
        if data.get("bankDetails"):
            is_new = target.bank_details is None
            details = _apply_bank_details(target, data["bankDetails"])
            db.session.flush()
            AuditService.record(
                user_id=actor.id,
                action=AuditAction.CREATE if is_new else AuditAction.UPDATE,
                resource=AuditResource.BANK_DETAILS,
                resource_id=details.id,
                details={"userId": target.id, "bankName": details.bank_name, "accountType": details.account_type},
            )
            result["bankDetails"] = details.to_dict()
        if data.get("salaryInfo"):
            is_new = target.salary_info is None
            info = _apply_salary_info(target, data["salaryInfo"])
            db.session.flush()
            AuditService.record(
                user_id=actor.id,
                action=AuditAction.CREATE if is_new else AuditAction.UPDATE,
                resource=AuditResource.SALARY_INFO,
                resource_id=info.id,
                details={"userId": target.id, "baseSalary": info.base_salary, "currency": info.currency},
            )
            result["salaryInfo"] = info.to_dict()

        db.session.commit()
        log.info("Payee %s updated by %s (%s)", target.id, actor.id, ", ".join(result) or "no changes")
        return result

    @staticmethod
    def delete_payee(*, actor: User, user_id: int) -> None:
        if not actor.is_super_admin:
            raise AuthorizationError("Forbidden")
        target = get_or_404(User, user_id, "User not found")
        BankDetails.query.filter_by(user_id=target.id).delete(synchronize_session=False)
        SalaryInfo.query.filter_by(user_id=target.id).delete(synchronize_session=False)
        AuditService.record(
            user_id=actor.id,
            action=AuditAction.DELETE,
            resource=AuditResource.BANK_DETAILS,
            resource_id=target.id,
            details={"type": "PAYEE_INFO"},
        )
        db.session.commit()
        db.session.expire(target)


class PaymentService:
    @staticmethod
    def list_payments(
        *, actor: User, payee_id: Optional[int] = None, status: Optional[str] = None, limit: Optional[int] = None
    ) -> list[Payment]:
        if not actor.is_admin:
            raise AuthorizationError("Forbidden")
        query = Payment.query
        if payee_id:
            query = query.filter(Payment.payee_id == payee_id)
        if status:
            query = query.filter(Payment.status == status)
        payments = (
            query.order_by(Payment.payment_date.desc(), Payment.id.desc())
            .limit(limit or PAYMENTS_DEFAULT_LIMIT)
            .all()
        )
        AuditService.record(
            user_id=actor.id,
            action=AuditAction.VIEW,
            resource=AuditResource.PAYMENT,
            details={"count": len(payments), "payeeId": payee_id, "status": status},
        )
        db.session.commit()
        return payments

    @staticmethod
    def create_payment(*, actor: User, data: dict) -> Payment:
        if not actor.is_admin:
            raise AuthorizationError("Forbidden")
        payee_id = optional_int(data.get("payeeId"), "payeeId")
        if not all((payee_id, data.get("paymentDate"), data.get("payPeriodStart"), data.get("payPeriodEnd"))):
            raise ValidationError("Missing required fields")

        payee = get_or_404(User, payee_id, "Payee not found")
        if actor.role == Role.ADMIN.value and payee.role != Role.STAFF.value:
            raise AuthorizationError("Admin can only process payments for Staff")

        salary_info = payee.salary_info
        salary = validate_number(data.get("baseSalary") or 0, "baseSalary") or (salary_info.base_salary if salary_info else 0)
        deductions = validate_number(data.get("deductions") or 0, "deductions")
        bonuses = validate_number(data.get("bonuses") or 0, "bonuses")
        net_pay = salary - deductions + bonuses

        payment = Payment(
            payer_id=actor.id,
            payee_id=payee.id,
            amount=net_pay,
            currency=salary_info.currency if salary_info else "NPR",
            payment_date=optional_date(data["paymentDate"], "paymentDate"),
            pay_period_start=optional_date(data["payPeriodStart"], "payPeriodStart"),
            pay_period_end=optional_date(data["payPeriodEnd"], "payPeriodEnd"),
            base_salary=salary,
            deductions=deductions,
            bonuses=bonuses,
            net_pay=net_pay,
            status=validate_enum(data.get("status"), "status", values_of(PaymentStatus), default=PaymentStatus.PENDING.value),
            notes=data.get("notes") or None,
        )
        db.session.add(payment)
        db.session.flush()
        AuditService.record(
            user_id=actor.id,
            action=AuditAction.CREATE,
            resource=AuditResource.PAYMENT,
            resource_id=payment.id,
            details={"payeeId": payee.id, "amount": net_pay, "currency": payment.currency, "status": payment.status},
        )
        db.session.commit()
        log.info("Payment %s of %s %s recorded for %s", payment.id, net_pay, payment.currency, payee.id)
        return payment

    @staticmethod
    def get_payment(*, actor: User, payment_id: int) -> Payment:
        payment = get_or_404(Payment, payment_id, "Payment not found")
        if payment.payee_id != actor.id and not actor.is_admin:
            raise AuthorizationError("Forbidden")
        AuditService.record(
            user_id=actor.id, action=AuditAction.VIEW, resource=AuditResource.PAYMENT, resource_id=payment.id
        )
        db.session.commit()
        return payment

    @staticmethod
    def update_payment(*, actor: User, payment_id: int, data: dict) -> Payment:
        if not actor.is_admin:
            raise AuthorizationError("Forbidden")
        payment = get_or_404(Payment, payment_id, "Payment not found")
        if data.get("status"):
            payment.status = validate_enum(data["status"], "status", values_of(PaymentStatus), required=True)
        if "notes" in data:
            payment.notes = data["notes"] or None
        AuditService.record(
            user_id=actor.id,
            action=AuditAction.UPDATE,
            resource=AuditResource.PAYMENT,
            resource_id=payment.id,
            details={"status": payment.status, "notes": payment.notes},
        )
        db.session.commit()
        return payment

    @staticmethod
    def delete_payment(*, actor: User, payment_id: int) -> None:
        if not actor.is_super_admin:
            raise AuthorizationError("Forbidden")
        payment = get_or_404(Payment, payment_id, "Payment not found")
        AuditService.record(
            user_id=actor.id,
            action=AuditAction.DELETE,
            resource=AuditResource.PAYMENT,
            resource_id=payment.id,
            details={"payeeId": payment.payee_id, "amount": payment.amount},
        )
        db.session.delete(payment)
        db.session.commit()
