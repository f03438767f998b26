from __future__ import annotations

import logging
from typing import Optional

from ..common.validators import validate_string
from ..core.enums import AuditAction, AuditResource
from ..core.exceptions import AuthorizationError, ValidationError
from ..data import banks as directory
from ..extensions import db
from ..models.payroll import CustomBank
from ..models.user import User
from .audit_service import AuditService
from .base import get_or_404, optional_int

log = logging.getLogger(__name__)


class BankService:
    @staticmethod
    def countries() -> list[dict]:
        return directory.get_all_countries()

    @staticmethod
    def banks_for_country(country: str) -> list[dict]:
        """Static banks for the country followed by custom ones not already listed."""
        banks = directory.get_banks_by_country(country)
        known = {b["name"].lower() for b in banks}
        for custom in CustomBank.query.filter_by(country=country).order_by(CustomBank.name.asc()).all():
            if custom.name.lower() not in known:
                banks.append(custom.to_dict())
        return banks

    @staticmethod
    def search(query: str) -> list[dict]:
        return directory.search_banks(query)

    @staticmethod
    def add_custom_bank(*, user: User, data: dict) -> CustomBank:
        country = data.get("country")
        name = data.get("name")
        if not isinstance(country, str) or not country.strip() or not isinstance(name, str) or not name.strip():
            raise ValidationError("Country and bank name are required")
        country = country.strip().upper()
        name = validate_string(name, "Bank name", max_length=200, required=True)

        if CustomBank.query.filter_by(country=country, name=name).first() is not None:
            raise ValidationError("This bank already exists for the selected country")

        bank = CustomBank(
            country=country,
            name=name,
            code=validate_string(data.get("code"), "Bank code", max_length=20) or None,
            created_by_id=user.id,
        )
        db.session.add(bank)
        db.session.flush()
        AuditService.record(
            user_id=user.id,
            action=AuditAction.CREATE,
            resource=AuditResource.CUSTOM_BANK,
            resource_id=bank.id,
            details={"country": country, "name": name},
        )
        db.session.commit()
        return bank

    @staticmethod
    def delete_custom_bank(*, user: User, bank_id: Optional[str]) -> None:
        if not user.is_admin:
            raise AuthorizationError("Forbidden")
        bank_id = optional_int(bank_id, "id")
        if not bank_id:
            raise ValidationError("Bank ID is required")
        bank = get_or_404(CustomBank, bank_id, "Bank not found")
        AuditService.record(
            user_id=user.id,
            action=AuditAction.DELETE,
            resource=AuditResource.CUSTOM_BANK,
            resource_id=bank.id,
            details={"country": bank.country, "name": bank.name},
        )
        db.session.delete(bank)
        db.session.commit()
