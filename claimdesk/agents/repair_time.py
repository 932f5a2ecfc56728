"""
Repair-Time Estimator

Maps a severity band, the damage types and the vehicle body type to a
repair duration range in days.
"""
import logging
from typing import Iterable, List, Optional, Tuple, Union

from pydantic import BaseModel, Field

from claimdesk.core.states import Severity

logger = logging.getLogger(__name__)

MINOR = "minor"
MODERATE = "moderate"
SEVERE = "severe"

BASE_DAYS = {
    MINOR: (2, 4),
    MODERATE: (5, 9),
    SEVERE: (10, 16),
}
UNKNOWN_SEVERITY_DAYS = (5, 9)
TOTAL_LOSS_DAYS = (10, 21)
BUMPER_ONLY_DAYS = (2, 6)

MAX_RATIONALE = 4


class RepairTimeEstimate(BaseModel):
    """Predicted repair duration with its confidence and rationale."""
    min_days: int
    max_days: int
    confidence: float = Field(..., ge=0, le=1)
    rationale: List[str] = Field(default_factory=list)


def normalize_severity_band(severity: Optional[Union[str, Severity]]) -> Optional[str]:
    """Map Low/Medium/High or minor/moderate/severe wording onto a band."""
    if isinstance(severity, Severity):
        severity = severity.value
    raw = (severity or "").strip().lower()
    if not raw:
        return None
    if raw == "low" or "minor" in raw:
        return MINOR
    if raw == "medium" or "moderate" in raw:
        return MODERATE
    if raw == "high" or "severe" in raw:
        return SEVERE
    return None


def _normalize_damage_types(damage_types: Optional[Union[str, Iterable[str]]]) -> List[str]:
    if not damage_types:
        return []
    if isinstance(damage_types, str):
        damage_types = [damage_types]
    return [item.strip() for item in damage_types if item and item.strip()]


def _vehicle_surcharge(body_type: str) -> Tuple[int, int]:
    if body_type == "ev" or "electric" in body_type or body_type == "luxury":
        return 1, 2
    if body_type == "truck":
        return 0, 1
    return 0, 0


def estimate_repair_time(
    severity: Optional[Union[str, Severity]],
    damage_types: Optional[Union[str, Iterable[str]]] = None,
    body_type: Optional[str] = None,
    is_total_loss: bool = False,
) -> RepairTimeEstimate:
    """
    Estimate how many days a repair will take.

    Args:
        severity: Low/Medium/High or minor/moderate/severe; unknown wording
            keeps the moderate range at reduced confidence
        damage_types: Damage labels from the assessment
        body_type: Vehicle body type (EV, Luxury and Truck add days)
        is_total_loss: Potential total loss flag, overrides everything else

    Returns:
        RepairTimeEstimate with min_days <= max_days
    """
    band = normalize_severity_band(severity)
    types = _normalize_damage_types(damage_types)
    has_types = bool(types)

    body_label = (body_type or "").strip()
    body_lower = body_label.lower()

    bumper_only = not is_total_loss and has_types and all("bumper" in t.lower() for t in types)

    if is_total_loss:
        min_days, max_days = TOTAL_LOSS_DAYS
    elif band is not None:
        min_days, max_days = BASE_DAYS[band]
    else:
        min_days, max_days = UNKNOWN_SEVERITY_DAYS

    if bumper_only:
        min_days, max_days = BUMPER_ONLY_DAYS
    elif not is_total_loss:
        extra_min, extra_max = _vehicle_surcharge(body_lower)
        min_days += extra_min
        max_days += extra_max

    if max_days < min_days:
        max_days = min_days

    confidence = 0.65 if band is not None else 0.50
    if not has_types:
        confidence -= 0.05
    confidence = min(0.90, max(0.45, confidence))

    rationale: List[str] = []
    if is_total_loss:
        rationale.append(
            "Potential total loss flagged; timeline may include inspection, parts and valuation steps."
        )
    elif band is not None:
        rationale.append(f"Based on photo-based severity ({band}) and typical shop timelines.")
    else:
        rationale.append(
            "Based on typical shop timelines for similar claims when severity is not yet confirmed."
        )

    if bumper_only:
        rationale.append("Damage appears limited to bumper-related components, which often repairs faster.")
    elif has_types:
        listed = ", ".join(types[:2])
        suffix = "..." if len(types) > 2 else ""
        rationale.append(f"Damage types considered: {listed}{suffix}.")
    else:
        rationale.append("Damage type details were not provided; estimate may change after shop inspection.")

    if not is_total_loss and not bumper_only and any(_vehicle_surcharge(body_lower)):
        rationale.append(
            f"Adjusted for vehicle type ({body_label}) due to parts availability and calibrations."
        )

    logger.debug(
        f"Repair time estimate: band={band}, types={types}, body={body_label or 'n/a'}, "
        f"range={min_days}-{max_days} days, confidence={confidence:.2f}"
    )

    return RepairTimeEstimate(
        min_days=min_days,
        max_days=max_days,
        confidence=round(confidence, 4),
        rationale=rationale[:MAX_RATIONALE],
    )


def recommend_rental_days(max_days: int) -> int:
    """Round a repair duration up to a standard rental booking length."""
    if max_days <= 3:
        return 3
    if max_days <= 5:
        return 5
    if max_days <= 7:
        return 7
    if max_days <= 10:
        return 10
    return 14
