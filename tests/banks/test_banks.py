from __future__ import annotations

import pytest

from opsdesk.core.exceptions import AuthorizationError, ValidationError
from opsdesk.data.banks import CURRENCIES, get_all_countries, get_banks_by_country, get_currency_info, search_banks
from opsdesk.models.audit import AuditLog
from opsdesk.services.bank_service import BankService


def test_priority_countries_come_first():
    codes = [c["code"] for c in get_all_countries()]
    assert codes[:3] == ["NP", "IN", "PK"]
    names = [c["name"] for c in get_all_countries()[3:]]
    assert names == sorted(names, key=str.lower)


def test_digital_wallets_are_flagged():
    wallets = {b["name"]: b for b in get_banks_by_country("NP") if b.get("isDigital")}
    assert "eSewa" in wallets
    assert "code" not in wallets["eSewa"]


def test_unknown_country_is_empty():
    assert get_banks_by_country("XX") == []
    assert get_currency_info("XX") is None


def test_search_matches_name_or_code():
    hits = search_banks("nabil")
    assert hits[0]["countryCode"] == "NP"
    assert hits[0]["bank"]["name"] == "Nabil Bank"
    assert any(h["bank"]["name"] == "Nabil Bank" for h in search_banks("naborpka"))


def test_currency_list_is_unique():
    currencies = [c["currency"] for c in CURRENCIES]
    assert len(currencies) == len(set(currencies))
    assert currencies[0] == "NPR"


def test_custom_bank_is_listed_once(staff):
    bank = BankService.add_custom_bank(user=staff, data={"country": "np", "name": "Valley Co-op"})

    assert bank.country == "NP"
    names = [b["name"] for b in BankService.banks_for_country("NP")]
    assert names[-1] == "Valley Co-op"
    assert names.count("Valley Co-op") == 1
    assert AuditLog.query.filter_by(resource="CUSTOM_BANK", action="CREATE").count() == 1


def test_custom_bank_validation(staff):
    with pytest.raises(ValidationError, match="Country and bank name are required"):
        BankService.add_custom_bank(user=staff, data={"country": "NP"})
    BankService.add_custom_bank(user=staff, data={"country": "NP", "name": "Valley Co-op"})
    with pytest.raises(ValidationError, match="already exists"):
        BankService.add_custom_bank(user=staff, data={"country": "NP", "name": "Valley Co-op"})


def test_delete_custom_bank_admin_only(staff, admin):
    bank = BankService.add_custom_bank(user=staff, data={"country": "NP", "name": "Valley Co-op"})
    with pytest.raises(AuthorizationError):
        BankService.delete_custom_bank(user=staff, bank_id=str(bank.id))
    with pytest.raises(ValidationError, match="Bank ID is required"):
        BankService.delete_custom_bank(user=admin, bank_id=None)
    BankService.delete_custom_bank(user=admin, bank_id=str(bank.id))
    assert "Valley Co-op" not in [b["name"] for b in BankService.banks_for_country("NP")]


def test_bank_endpoints(client, staff, login):
    login(staff)
    directory = client.get("/api/banks").get_json()
    assert directory["priorityCountries"] == ["NP", "IN", "PK"]
    assert directory["countries"][0]["code"] == "NP"

    nepal = client.get("/api/banks?country=np").get_json()
    assert nepal["country"]["currency"] == "NPR"
    assert len(nepal["banks"]) > 0

    assert client.get("/api/banks?q=khalti").get_json()[0]["bank"]["isDigital"] is True
    assert client.post("/api/banks", json={"country": "NP", "name": "Hill Bank"}).status_code == 201
    assert client.delete("/api/banks?id=1").status_code == 403
