"""
Damage Assessment Agent

Produces the pseudo-AI damage assessment for a claim. There is no model
behind it: every field is derived from a hash of a stable seed string, so
re-running the assessment for the same claim never drifts.
"""
import logging
from typing import Optional

from claimdesk.agents.latency import ASSESSMENT_DELAY_MS, simulate_latency
from claimdesk.agents.repair_time import estimate_repair_time
from claimdesk.core.hashing import hash_string
from claimdesk.core.models import AIAssessment, Claim
from claimdesk.core.states import RecommendedNextStep, Severity

logger = logging.getLogger(__name__)

DAMAGE_TYPES = (
    "Front bumper",
    "Rear bumper",
    "Driver-side door",
    "Passenger-side door",
    "Quarter panel",
    "Hood",
    "Headlight",
    "Windshield",
)

SEVERITY_LEVELS = (Severity.LOW, Severity.MEDIUM, Severity.HIGH)

MIN_CONFIDENCE = 65
CONFIDENCE_SPREAD = 31  # 65..95
ESCALATE_BELOW = 0.70
REVIEW_BELOW = 0.85


def build_assessment_seed(claim: Claim) -> str:
    """Seed string from the claim id, vehicle, submission time and first photo."""
    first_photo = claim.photos[0].name if claim.photos else "no-photo"
    return "|".join(
        [
            claim.id,
            claim.vehicle.make,
            claim.vehicle.model,
            claim.submitted_at.isoformat(),
            first_photo,
        ]
    )


def _recommended_next_step(severity: Severity, confidence: float) -> RecommendedNextStep:
    if severity is Severity.HIGH or confidence < ESCALATE_BELOW:
        return RecommendedNextStep.ESCALATE
    if severity is Severity.MEDIUM or confidence < REVIEW_BELOW:
        return RecommendedNextStep.REVIEW
    return RecommendedNextStep.APPROVE


def assess_from_seed(seed: str, body_type: Optional[str] = None) -> AIAssessment:
    """Synchronous core of ``generate_assessment``."""
    value = hash_string(seed)
    severity = SEVERITY_LEVELS[value % len(SEVERITY_LEVELS)]
    confidence = (MIN_CONFIDENCE + value % CONFIDENCE_SPREAD) / 100

    first = value % len(DAMAGE_TYPES)
    second = (first + 3) % len(DAMAGE_TYPES)
    damage_types = [DAMAGE_TYPES[first]]
    if value % 2 == 1:
        damage_types.append(DAMAGE_TYPES[second])

    repair_time = estimate_repair_time(severity, damage_types, body_type=body_type)

    return AIAssessment(
        damage_types=damage_types,
        severity=severity,
        confidence=confidence,
        recommended_next_step=_recommended_next_step(severity, confidence),
        estimated_repair_days_min=repair_time.min_days,
        estimated_repair_days_max=repair_time.max_days,
        repair_time_confidence=repair_time.confidence,
        rationale=repair_time.rationale,
    )


async def generate_assessment(seed: str, body_type: Optional[str] = None) -> AIAssessment:
    """
    Generate the damage assessment for a seed.

    Args:
        seed: Stable seed string, see ``build_assessment_seed``
        body_type: Optional vehicle body type for the repair-time estimate

    Returns:
        AIAssessment; identical seeds always give identical assessments
    """
    await simulate_latency(delay_ms=ASSESSMENT_DELAY_MS)

    assessment = assess_from_seed(seed, body_type=body_type)
    logger.info(
        f"Assessment for seed '{seed}': severity={assessment.severity.value}, "
        f"confidence={assessment.confidence:.2f}, damage={assessment.damage_types}, "
        f"next_step={assessment.recommended_next_step.value}"
    )
    return assessment


async def assess_claim(claim: Claim) -> AIAssessment:
    return await generate_assessment(build_assessment_seed(claim), body_type=claim.vehicle.body_type)
