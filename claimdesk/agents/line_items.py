"""
Line-Item Estimate Generator

Turns a severity and the assessed damage areas into a priced, ordered list
of repair line items. Output depends only on the inputs.
"""
import logging
import math
from typing import Iterable, List, Tuple

from claimdesk.core.hashing import seed_from_string
from claimdesk.core.models import EstimateLineItem
from claimdesk.core.states import EstimateCategory, Severity

logger = logging.getLogger(__name__)

SEVERITY_MULTIPLIER = {
    Severity.LOW: 0.80,
    Severity.MEDIUM: 1.15,
    Severity.HIGH: 1.55,
}

FALLBACK_AREA = "Damage area"
PAINT_BASE = 340
CALIBRATION_BASE = 420
SHOP_SUPPLIES_BASE = 160
MIN_ITEMS = 3
MAX_ITEMS = 6
CURRENCY_STEP = 5
CURRENCY_FLOOR = 50

# Checked in order; first substring hit wins
_AREA_LABELS: Tuple[Tuple[str, str], ...] = (
    ("rear bumper", "Rear bumper"),
    ("front bumper", "Front bumper"),
    ("bumper", "Bumper"),
    ("quarter", "Quarter panel"),
    ("door", "Door panel"),
    ("fender", "Fender"),
    ("hood", "Hood"),
    ("headlight", "Headlight assembly"),
    ("windshield", "Windshield"),
)


def round_currency(value: float) -> int:
    """Round half-up to the nearest 5 currency units, never below 50."""
    return max(CURRENCY_FLOOR, int(math.floor(value / CURRENCY_STEP + 0.5)) * CURRENCY_STEP)


def normalize_damage_area(value: str) -> str:
    lower = value.lower()
    for needle, label in _AREA_LABELS:
        if needle in lower:
            return label
    return value


def base_costs(area: str) -> Tuple[int, int]:
    """(parts, labor) base cost for a canonical damage area."""
    lower = area.lower()
    if "headlight" in lower or "windshield" in lower:
        return 520, 240
    if "hood" in lower or "quarter" in lower:
        return 640, 320
    if "door" in lower or "fender" in lower:
        return 460, 280
    return 420, 250


def _unique_areas(damage_areas: Iterable[str]) -> List[str]:
    areas: List[str] = []
    for raw in damage_areas:
        label = normalize_damage_area(raw)
        if label and label not in areas:
            areas.append(label)
    return areas or [FALLBACK_AREA]


def generate_line_items(
    claim_id: str,
    severity: Severity,
    damage_areas: Iterable[str],
) -> List[EstimateLineItem]:
    """
    Generate AI-suggested estimate line items.

    Every damage area gets a parts and a labor item; Medium and High add
    paint, High adds calibration, and a shop-supplies item pads short lists.
    At most six items are returned.
    """
    severity = Severity(severity)
    areas = _unique_areas(damage_areas)
    multiplier = SEVERITY_MULTIPLIER[severity]
    seed = seed_from_string(f"{claim_id}|{severity.value}|{'|'.join(areas)}")
    id_prefix = f"ai-{claim_id.lower()}"

    items: List[EstimateLineItem] = []

    def add(description: str, category: EstimateCategory, amount: float) -> None:
        items.append(
            EstimateLineItem(
                id=f"{id_prefix}-{len(items) + 1}",
                description=description,
                category=category,
                amount=round_currency(amount),
            )
        )

    for area_index, area in enumerate(areas):
        parts, labor = base_costs(area)
        variance = ((seed + area_index * 17) % 41) - 20
        add(f"{area} parts replacement", EstimateCategory.PARTS, (parts + variance * 2) * multiplier)
        add(f"{area} labor and alignment", EstimateCategory.LABOR, (labor + variance) * multiplier)

    if severity is not Severity.LOW:
        add("Blend and refinish affected panels", EstimateCategory.PAINT, PAINT_BASE * multiplier)
    if severity is Severity.HIGH:
        add("Post-repair calibration and scan", EstimateCategory.MISC, CALIBRATION_BASE * multiplier)

    if len(items) < MIN_ITEMS:
        add("Shop supplies and setup", EstimateCategory.MISC, SHOP_SUPPLIES_BASE * multiplier)

    items = items[:MAX_ITEMS]
    logger.debug(f"Generated {len(items)} line items for claim {claim_id} ({severity.value})")
    return items


def sum_line_items(items: Iterable[EstimateLineItem]) -> int:
    return sum(item.amount or 0 for item in items)
