from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List

PREMIUM_AREAS = ("nairobi", "westlands", "karen")
OUTSKIRT_AREAS = ("thika", "kiambu", "ruaka", "kikuyu", "limuru")

COVERAGE_MESSAGES: Dict[str, str] = {
    "premium": "We provide premium same-week service in your area",
    "standard": "Standard service available with 3-5 day installation",
    "limited": "Service available with extended installation timeline",
}

SERVICE_AREAS: List[Dict[str, object]] = [
    {"name": "Nairobi Central", "deliveryTime": "1-2 days", "premium": True},
    {"name": "Westlands", "deliveryTime": "1-2 days", "premium": True},
    {"name": "Karen", "deliveryTime": "1-2 days", "premium": True},
    {"name": "Thika", "deliveryTime": "3-4 days", "premium": False},
    {"name": "Kiambu", "deliveryTime": "3-4 days", "premium": False},
    {"name": "Kikuyu", "deliveryTime": "3-4 days", "premium": False},
    {"name": "Other Areas", "deliveryTime": "5-7 days", "premium": False},
]


@dataclass(frozen=True)
class Coverage:
    coverage: str
    installation_days: int

    @property
    def message(self) -> str:
        return COVERAGE_MESSAGES.get(self.coverage, "Service availability may vary")


def check_coverage(address: str) -> Coverage:
    """
    Same substring policy as pricing zones, with a wider outskirts list.
    """
    normalized = address.lower()
    if any(a in normalized for a in PREMIUM_AREAS):
        return Coverage("premium", 2)
    if any(a in normalized for a in OUTSKIRT_AREAS):
        return Coverage("standard", 4)
    return Coverage("limited", 7)
