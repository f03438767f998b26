# File: opsdesk/models/payroll.py
from datetime import datetime

from opsdesk.common.datetime_utils import iso
from opsdesk.core.enums import PaymentStatus
from opsdesk.extensions import db


def mask_account_number(account_number):
    if not account_number:
        return None
    return f"****{account_number[-4:]}"


class BankDetails(db.Model):
    __tablename__ = 'bank_details'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'), unique=True, nullable=False)
    bank_name = db.Column(db.String(200), nullable=False)
    bank_code = db.Column(db.String(50))
    branch_name = db.Column(db.String(200))
    branch_code = db.Column(db.String(50))
    account_number = db.Column(db.String(64), nullable=False)
    account_holder = db.Column(db.String(200), nullable=False)
    account_type = db.Column(db.String(20), nullable=False, default='SAVINGS')
    country = db.Column(db.String(2), nullable=False, default='NP')

    user = db.relationship('User', backref=db.backref('bank_details', uselist=False, passive_deletes=True))

    def to_dict(self, masked=True):
        return {
            'id': self.id,
            'bankName': self.bank_name,
            'bankCode': self.bank_code,
            'branchName': self.branch_name,
            'branchCode': self.branch_code,
            'accountNumber': mask_account_number(self.account_number) if masked else self.account_number,
            'accountHolder': self.account_holder,
            'accountType': self.account_type,
            'country': self.country,
        }


class SalaryInfo(db.Model):
    __tablename__ = 'salary_info'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'), unique=True, nullable=False)
    base_salary = db.Column(db.Float, nullable=False, default=0)
    currency = db.Column(db.String(3), nullable=False, default='NPR')
    pay_frequency = db.Column(db.String(20), nullable=False, default='MONTHLY')
    payment_method = db.Column(db.String(20), nullable=False, default='BANK_TRANSFER')
    type = db.Column(db.String(20), nullable=False, default='FIXED')
    tax_deduction = db.Column(db.Float, nullable=False, default=0)
    other_deductions = db.Column(db.Float, nullable=False, default=0)
    deduction_notes = db.Column(db.Text)

    user = db.relationship('User', backref=db.backref('salary_info', uselist=False, passive_deletes=True))

    def to_dict(self):
        return {
            'id': self.id,
            'baseSalary': self.base_salary,
            'currency': self.currency,
            'payFrequency': self.pay_frequency,
            'paymentMethod': self.payment_method,
            'type': self.type,
            'taxDeduction': self.tax_deduction,
            'otherDeductions': self.other_deductions,
            'deductionNotes': self.deduction_notes,
        }


class Payment(db.Model):
    __tablename__ = 'payments'

    id = db.Column(db.Integer, primary_key=True)
    payer_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    payee_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    amount = db.Column(db.Float, nullable=False)
    currency = db.Column(db.String(3), nullable=False, default='NPR')
    payment_date = db.Column(db.Date, nullable=False)
    pay_period_start = db.Column(db.Date, nullable=False)
    pay_period_end = db.Column(db.Date, nullable=False)
    base_salary = db.Column(db.Float, nullable=False, default=0)
    deductions = db.Column(db.Float, nullable=False, default=0)
    bonuses = db.Column(db.Float, nullable=False, default=0)
    net_pay = db.Column(db.Float, nullable=False, default=0)
    status = db.Column(db.String(20), nullable=False, default=PaymentStatus.PENDING.value)
    notes = db.Column(db.Text)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.now)

    payer = db.relationship('User', foreign_keys=[payer_id])
    payee = db.relationship('User', foreign_keys=[payee_id])

    def to_dict(self):
        return {
            'id': self.id,
            'payerId': self.payer_id,
            'payeeId': self.payee_id,
            'payer': self.payer.to_summary() if self.payer else None,
            'payee': self.payee.to_summary() if self.payee else None,
            'amount': self.amount,
            'currency': self.currency,
            'paymentDate': iso(self.payment_date),
            'payPeriodStart': iso(self.pay_period_start),
            'payPeriodEnd': iso(self.pay_period_end),
            'baseSalary': self.base_salary,
            'deductions': self.deductions,
            'bonuses': self.bonuses,
            'netPay': self.net_pay,
            'status': self.status,
            'notes': self.notes,
        }


class CustomBank(db.Model):
    __tablename__ = 'custom_banks'
    __table_args__ = (db.UniqueConstraint('country', 'name', name='uq_custom_bank_country_name'),)

    id = db.Column(db.Integer, primary_key=True)
    country = db.Column(db.String(2), nullable=False)
    name = db.Column(db.String(200), nullable=False)
    code = db.Column(db.String(20))
    created_by_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='SET NULL'))
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.now)

    def to_dict(self):
        return {
            'id': self.id,
            'country': self.country,
            'name': self.name,
            'code': self.code,
            'isCustom': True,
        }
