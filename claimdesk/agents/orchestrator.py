"""
Case File Orchestrator

Coordinates the assessment, estimate, duration, comparables and signal
agents and aggregates their results into one explainable case file with a
final Authorize / Escalate / Needs More Photos recommendation.
"""
import logging
from typing import List, Optional

from pydantic import BaseModel

from claimdesk.agents.assessment_agent import assess_claim
from claimdesk.agents.comparables import ComparableClaimQuery, find_comparable_claims, typical_cost_range
from claimdesk.agents.evaluator import evaluate_signals
from claimdesk.agents.line_items import generate_line_items, sum_line_items
from claimdesk.agents.repair_time import recommend_rental_days
from claimdesk.core.models import (
    AIAssessment,
    CaseFile,
    Claim,
    CostRange,
    CoverageSplit,
    DamageSummary,
    DurationFinding,
    EstimateFinding,
    EstimateLineItem,
    FinalRecommendation,
    NextStepFinding,
    SeverityFinding,
    Signal,
    SimilarClaims,
    clamp01,
    normalize_confidence,
    utc_now,
)
from claimdesk.core.states import CaseDecision, CaseNextStep, Severity, SignalSeverity, TriState

logger = logging.getLogger(__name__)

PIPELINE_STEPS = (
    "Analyzing damage and localization cues",
    "Estimating severity and recommended next step",
    "Generating estimate line items and cost range",
    "Retrieving similar historical claims",
    "Evaluating anomaly / needs-review signals",
    "Preparing final recommendation package",
)

COST_BANDS = {
    Severity.LOW: CostRange(min=500, max=1500),
    Severity.MEDIUM: CostRange(min=1500, max=4000),
    Severity.HIGH: CostRange(min=4000, max=9000),
}

CONFIDENCE_FLOOR_THRESHOLD = 0.60
COMPARABLE_LIMIT = 3


class CaseFileBundle(BaseModel):
    """Case file together with the intermediate results it was built from."""
    case_file: CaseFile
    assessment: AIAssessment
    suggested_line_items: List[EstimateLineItem]
    signals: List[Signal]


def route_next_step(drivable: TriState, severity: Severity) -> CaseNextStep:
    """Tow when not drivable or High, Repair when Low, otherwise Inspection."""
    if drivable is TriState.NO or severity is Severity.HIGH:
        return CaseNextStep.TOW
    if severity is Severity.LOW:
        return CaseNextStep.REPAIR
    return CaseNextStep.INSPECTION


def decide_final_recommendation(
    confidence_floor: float,
    signals: List[Signal],
    next_step: CaseNextStep,
    severity: Severity,
) -> FinalRecommendation:
    """Apply the decision table; the first matching row wins."""
    if confidence_floor < CONFIDENCE_FLOOR_THRESHOLD:
        return FinalRecommendation(
            decision=CaseDecision.NEEDS_MORE_PHOTOS,
            confidence=clamp01(min(0.58, confidence_floor)),
            explanation="Confidence is below threshold; request additional photos before final authorization.",
        )

    if any(signal.severity is SignalSeverity.WARNING for signal in signals):
        return FinalRecommendation(
            decision=CaseDecision.ESCALATE,
            confidence=clamp01(max(0.62, confidence_floor - 0.08)),
            explanation="Warning-level AI signals indicate additional senior review is recommended.",
        )

    if next_step is CaseNextStep.TOW or severity is Severity.HIGH:
        return FinalRecommendation(
            decision=CaseDecision.ESCALATE,
            confidence=clamp01(max(0.64, confidence_floor - 0.05)),
            explanation="Tow/high-severity profile indicates escalation before authorization.",
        )

    return FinalRecommendation(
        decision=CaseDecision.AUTHORIZE,
        confidence=clamp01(max(0.66, confidence_floor)),
        explanation="Damage pattern and confidence are sufficient for direct authorization.",
    )


def _severity_explanation(claim: Claim, areas: List[str], confidence: float) -> str:
    parts = []
    if areas:
        parts.append(f"Detected impact areas: {', '.join(areas)}.")
    if claim.drivable is TriState.NO:
        parts.append("Vehicle is not drivable, increasing impact concern.")
    parts.append(f"Confidence {round(confidence * 100)}% from mocked visual pattern matching.")
    return " ".join(parts)


def _next_step_explanation(step: CaseNextStep, severity: Severity, drivable: TriState) -> str:
    if step is CaseNextStep.TOW:
        status = "not drivable" if drivable is TriState.NO else "requiring caution"
        return f"Tow is recommended due to {severity.value.lower()} severity and drivable status {status}."
    if step is CaseNextStep.REPAIR:
        return "Repair routing is recommended directly with no additional escalation required."
    return "Inspection is recommended before authorization to validate estimate assumptions."


def _coverage_split(claim: Claim, total: int) -> Optional[CoverageSplit]:
    if claim.policy is None:
        return None
    deductible = claim.policy.deductible
    customer_pays = min(deductible, total)
    return CoverageSplit(
        deductible=deductible,
        customer_pays=customer_pays,
        insurer_pays=max(0, total - customer_pays),
        above_deductible=total >= deductible,
    )


class CaseFileOrchestrator:
    """
    Builds case files for claims.

    Decision logic:
    - The confidence floor is the lowest of the severity, next-step,
      estimate and duration confidences
    - A floor below 0.60 always asks for more photos
    - Warning signals, a tow or High severity escalate
    - Everything else is authorized
    """

    async def generate_bundle(self, claim: Claim) -> CaseFileBundle:
        logger.info(f"Building case file for claim {claim.id}")

        logger.info(f"[{claim.id}] {PIPELINE_STEPS[0]}")
        assessment = await assess_claim(claim)

        logger.info(f"[{claim.id}] {PIPELINE_STEPS[1]}")
        severity = assessment.severity
        severity_confidence = normalize_confidence(assessment.confidence)
        next_step = route_next_step(claim.drivable, severity)
        penalty = 0.06 if next_step is CaseNextStep.INSPECTION else 0.02
        next_step_confidence = clamp01(severity_confidence - penalty)

        logger.info(f"[{claim.id}] {PIPELINE_STEPS[2]}")
        line_items = generate_line_items(claim.id, severity, assessment.damage_types)
        total = sum_line_items(line_items)
        duration_confidence = normalize_confidence(assessment.repair_time_confidence)
        estimate_confidence = clamp01((severity_confidence + duration_confidence) / 2)

        logger.info(f"[{claim.id}] {PIPELINE_STEPS[3]}")
        matches = find_comparable_claims(
            ComparableClaimQuery(
                vehicle_make=claim.vehicle.make,
                vehicle_model=claim.vehicle.model,
                severity=severity,
                damage_areas=assessment.damage_types,
            ),
            limit=COMPARABLE_LIMIT,
        )
        cost_range = typical_cost_range(matches)

        logger.info(f"[{claim.id}] {PIPELINE_STEPS[4]}")
        signals = evaluate_signals(claim.model_copy(update={"ai_assessment": assessment}))

        logger.info(f"[{claim.id}] {PIPELINE_STEPS[5]}")
        confidence_floor = min(
            severity_confidence,
            next_step_confidence,
            estimate_confidence,
            duration_confidence,
        )
        recommendation = decide_final_recommendation(confidence_floor, signals, next_step, severity)

        rental_days = None
        if claim.policy is not None and claim.policy.rental_coverage:
            rental_days = recommend_rental_days(assessment.estimated_repair_days_max)

        case_file = CaseFile(
            created_at=utc_now(),
            damage_summary=DamageSummary(
                impacted_areas=list(assessment.damage_types),
                photo_count=len(claim.photos),
                drivable=claim.drivable,
                has_other_party=claim.has_other_party,
            ),
            severity=SeverityFinding(
                value=severity,
                confidence=severity_confidence,
                explanation=_severity_explanation(claim, assessment.damage_types, severity_confidence),
            ),
            next_step=NextStepFinding(
                value=next_step,
                confidence=next_step_confidence,
                explanation=_next_step_explanation(next_step, severity, claim.drivable),
            ),
            estimate=EstimateFinding(
                cost_band=COST_BANDS[severity],
                line_items=line_items,
                total=total,
                confidence=estimate_confidence,
                explanation=(
                    f"Generated {len(line_items)} AI line items from "
                    f"{severity.value.lower()} severity and impacted areas."
                ),
            ),
            duration=DurationFinding(
                min_days=assessment.estimated_repair_days_min,
                max_days=assessment.estimated_repair_days_max,
                confidence=duration_confidence,
                explanation=(
                    f"{severity.value} severity typically requires staged parts, labor, and paint "
                    f"operations over {assessment.estimated_repair_days_min}-"
                    f"{assessment.estimated_repair_days_max} days."
                ),
                recommended_rental_days=rental_days,
            ),
            similar_claims=SimilarClaims(
                matches=matches,
                typical_cost_range=CostRange(min=cost_range[0], max=cost_range[1]) if cost_range else None,
            ),
            signals=signals,
            final_recommendation=recommendation,
            coverage_split=_coverage_split(claim, total),
        )

        logger.info(
            f"Case file for claim {claim.id}: decision={recommendation.decision.value}, "
            f"floor={confidence_floor:.2f}, next_step={next_step.value}, total={total}"
        )

        return CaseFileBundle(
            case_file=case_file,
            assessment=assessment,
            suggested_line_items=line_items,
            signals=signals,
        )


# Shared orchestrator instance
orchestrator = CaseFileOrchestrator()


async def synthesize_case_file(claim: Claim) -> CaseFile:
    """Run the full decision pipeline for a claim and return a fresh case file."""
    bundle = await orchestrator.generate_bundle(claim)
    return bundle.case_file
