from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Tuple

from app.core.errors import ValidationError
from app.models.enums import Material, MeshType, WarrantyTier


# KES per m²
MATERIAL_UNIT_PRICE: Dict[Material, float] = {
    Material.fiberglass: 1500.0,
    Material.polyester: 1800.0,
    Material.stainless: 3500.0,
}

TYPE_MULTIPLIER: Dict[MeshType, float] = {
    MeshType.fixed: 1.0,
    MeshType.sliding: 1.2,
    MeshType.retractable: 1.5,
    MeshType.pleated: 1.8,
    MeshType.magnetic: 1.3,
    MeshType.velcro: 1.1,
}

# KES per m²
WARRANTY_UNIT_PRICE: Dict[WarrantyTier, float] = {
    WarrantyTier.basic: 0.0,
    WarrantyTier.standard: 300.0,
    WarrantyTier.premium: 600.0,
}

# Ordered: first group that matches wins, so "Thika Road, Nairobi" is 1.0.
LOCATION_ZONES: Tuple[Tuple[Tuple[str, ...], float], ...] = (
    (("nairobi", "westlands", "karen"), 1.0),
    (("thika", "kiambu"), 1.2),
)
DEFAULT_LOCATION_FACTOR = 1.5

INSTALLATION_TIME: Dict[float, str] = {
    1.0: "3-5 working days",
    1.2: "5-7 working days",
    1.5: "7-10 working days",
}


@dataclass(frozen=True)
class PricingResult:
    total_area: float
    base_cost: float
    warranty_cost: float
    total_cost: float
    location_factor: float

    def as_dict(self) -> Dict[str, float]:
        return {
            "totalArea": self.total_area,
            "baseCost": self.base_cost,
            "warrantyCost": self.warranty_cost,
            "totalCost": self.total_cost,
        }


def _enum(enum_cls, value: Any, field: str):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationError(
            f"Invalid {field}: {value!r}. Expected one of: {allowed}.",
            details={"field": field},
        )


def _dimension(raw: Any, field: str, index: int) -> float:
    try:
        value = float(raw)
    except (TypeError, ValueError):
        raise ValidationError(
            f"Measurement {index}: {field} must be a number.",
            details={"field": f"measurements[{index}].{field}"},
        )
    if not math.isfinite(value) or value <= 0:
        raise ValidationError(
            f"Measurement {index}: {field} must be greater than 0.",
            details={"field": f"measurements[{index}].{field}"},
        )
    return value


def normalize_measurements(measurements: Iterable[Any]) -> List[Dict[str, float]]:
    """
    Accepts mappings or objects with width/height attributes (meters).
    Returns plain dicts suitable for JSON storage.
    """
    out: List[Dict[str, float]] = []
    for i, m in enumerate(measurements or []):
        if isinstance(m, Mapping):
            w, h = m.get("width"), m.get("height")
        else:
            w, h = getattr(m, "width", None), getattr(m, "height", None)
        out.append({"width": _dimension(w, "width", i), "height": _dimension(h, "height", i)})

    if not out:
        raise ValidationError(
            "At least one measurement is required.",
            details={"field": "measurements"},
        )
    return out


def location_factor(location: str) -> float:
    """
    Substring match on the lower-cased location, zones tested in order.
    Anything unrecognised falls into the outer zone.
    """
    normalized = (location or "").lower()
    for needles, factor in LOCATION_ZONES:
        if any(n in normalized for n in needles):
            return factor
    return DEFAULT_LOCATION_FACTOR


def installation_time(location: str) -> str:
    return INSTALLATION_TIME[location_factor(location)]


def total_area(measurements: Iterable[Any]) -> float:
    """
    area = Σ width × height
    """
    return math.fsum(m["width"] * m["height"] for m in normalize_measurements(measurements))


def calculate_quote(
    *,
    window_count: int,
    measurements: Iterable[Any],
    material: Any,
    mesh_type: Any,
    location: str,
    warranty: Any,
) -> PricingResult:
    """
    base     = area × material_price × type_multiplier × location_factor
    warranty = area × warranty_price
    total    = base + warranty

    Pure: no I/O, deterministic for the same inputs.
    """
    if isinstance(window_count, bool) or not isinstance(window_count, int) or window_count < 1:
        raise ValidationError(
            "windowCount must be a positive integer.",
            details={"field": "windowCount"},
        )

    mat = _enum(Material, material, "material")
    typ = _enum(MeshType, mesh_type, "type")
    tier = _enum(WarrantyTier, warranty, "warranty")

    if not isinstance(location, str) or not location.strip():
        raise ValidationError("location is required.", details={"field": "location"})

    rows = normalize_measurements(measurements)
    area = math.fsum(m["width"] * m["height"] for m in rows)
    factor = location_factor(location)

    base_cost = area * MATERIAL_UNIT_PRICE[mat] * TYPE_MULTIPLIER[typ] * factor
    warranty_cost = area * WARRANTY_UNIT_PRICE[tier]

    return PricingResult(
        total_area=area,
        base_cost=base_cost,
        warranty_cost=warranty_cost,
        total_cost=base_cost + warranty_cost,
        location_factor=factor,
    )


def build_breakdown(
    *, material: Any, mesh_type: Any, location: str, warranty: Any
) -> Dict[str, str]:
    mat = _enum(Material, material, "material")
    typ = _enum(MeshType, mesh_type, "type")
    tier = _enum(WarrantyTier, warranty, "warranty")
    return {
        "material": f"{mat.value} @ KES {MATERIAL_UNIT_PRICE[mat]:g}/m²",
        "type": f"{typ.value} (x{TYPE_MULTIPLIER[typ]:g})",
        "location": f"{location} (x{location_factor(location):.1f})",
        "warranty": f"{tier.value} @ KES {WARRANTY_UNIT_PRICE[tier]:g}/m²",
    }


def next_steps(location: str) -> List[str]:
    return [
        "We'll call to confirm measurements",
        "50% deposit required via M-Pesa",
        f"Installation in {installation_time(location)}",
    ]
