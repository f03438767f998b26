"""Static directory of banks by ISO country code.

The table lives in banks.json next to this module and is loaded once at import.
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

DEFAULT_FLAG = "🏳️"
DEFAULT_PRIORITY = 999
PRIORITY_COUNTRIES = ("NP", "IN", "PK")

with (Path(__file__).parent / "banks.json").open(encoding="utf-8") as fh:
    WORLD_BANKS: dict = json.load(fh)


def _priority(entry: dict) -> int:
    value = entry.get("priority")
    return DEFAULT_PRIORITY if value is None else value


def _bank(raw: dict) -> dict:
    bank = {"name": raw["name"]}
    if raw.get("code"):
        bank["code"] = raw["code"]
    if raw.get("is_digital"):
        bank["isDigital"] = True
    return bank


def get_all_countries() -> list[dict]:
    """Countries sorted by priority (lower first), then by name."""
    countries = [
        {
            "code": code,
            "name": data["country"],
            "currency": data["currency"],
            "flag": data.get("flag") or DEFAULT_FLAG,
            "priority": data.get("priority"),
        }
        for code, data in WORLD_BANKS.items()
    ]
    return sorted(countries, key=lambda c: (_priority(c), c["name"].lower()))


def get_banks_by_country(country_code: str) -> list[dict]:
    data = WORLD_BANKS.get(country_code)
    return [_bank(b) for b in data["banks"]] if data else []


def get_country_info(country_code: str) -> Optional[dict]:
    data = WORLD_BANKS.get(country_code)
    if data is None:
        return None
    return {
        "code": country_code,
        "country": data["country"],
        "currency": data["currency"],
        "currencySymbol": data["currency_symbol"],
        "flag": data.get("flag") or DEFAULT_FLAG,
        "priority": data.get("priority"),
        "banks": [_bank(b) for b in data["banks"]],
    }


def search_banks(query: str) -> list[dict]:
    """Case-insensitive match on bank name or code across all countries."""
    needle = query.lower()
    results = []
    for code, data in WORLD_BANKS.items():
        for bank in data["banks"]:
            if needle in bank["name"].lower() or (bank.get("code") and needle in bank["code"].lower()):
                results.append(
                    {
                        "country": data["country"],
                        "countryCode": code,
                        "flag": data.get("flag") or DEFAULT_FLAG,
                        "bank": _bank(bank),
                    }
                )
    return results


def get_currency_info(country_code: str) -> Optional[dict]:
    data = WORLD_BANKS.get(country_code)
    if data is None:
        return None
    return {"currency": data["currency"], "symbol": data["currency_symbol"]}


def _build_currencies() -> list[dict]:
    unique: dict[str, dict] = {}
    for code, data in WORLD_BANKS.items():
        key = data["currency"].strip().upper()
        existing = unique.get(key)
        if existing is None or _priority(data) < _priority(existing):
            unique[key] = {
                "countryCode": code,
                "country": data["country"],
                "currency": data["currency"].strip(),
                "symbol": data["currency_symbol"],
                "flag": data.get("flag") or DEFAULT_FLAG,
                "priority": data.get("priority"),
            }
    return sorted(unique.values(), key=lambda c: (_priority(c), c["currency"]))


CURRENCIES = _build_currencies()
