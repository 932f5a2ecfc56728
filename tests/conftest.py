"""
Shared fixtures for the ClaimDesk test suite.

Simulated latency is switched off for every test so the async agents
return immediately.
"""
import os
from datetime import datetime, timezone
from typing import List, Optional

import pytest

os.environ["CLAIMDESK_LATENCY_SCALE"] = "0"
os.environ.pop("CLAIMDESK_STORE_PATH", None)

from claimdesk.agents.line_items import generate_line_items, sum_line_items  # noqa: E402
from claimdesk.config import get_settings  # noqa: E402
from claimdesk.core.models import (  # noqa: E402
    AIAssessment,
    CaseFile,
    Claim,
    CostRange,
    DamageSummary,
    DurationFinding,
    EstimateFinding,
    FinalRecommendation,
    NextStepFinding,
    Photo,
    PolicySnapshot,
    SeverityFinding,
    SimilarClaims,
    Vehicle,
)
from claimdesk.core.states import (  # noqa: E402
    CaseDecision,
    CaseNextStep,
    ClaimStatus,
    RecommendedNextStep,
    Severity,
    TriState,
)
from claimdesk.repository.claim_store import ClaimStore, InMemoryClaimRepository  # noqa: E402

SUBMITTED_AT = datetime(2026, 2, 5, 16, 40, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def no_latency(monkeypatch):
    """Disable simulated delays and re-read settings for each test."""
    monkeypatch.setenv("CLAIMDESK_LATENCY_SCALE", "0")
    monkeypatch.delenv("CLAIMDESK_STORE_PATH", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def build_claim(
    claim_id: str = "CLM-TEST01",
    status: ClaimStatus = ClaimStatus.NEW,
    drivable: TriState = TriState.YES,
    photos: Optional[List[Photo]] = None,
    **overrides,
) -> Claim:
    if photos is None:
        photos = [
            Photo(id="p1", name="front-bumper.jpg", url="https://example.com/front.jpg"),
            Photo(id="p2", name="wide-shot.jpg", url="https://example.com/wide.jpg"),
        ]
    data = dict(
        id=claim_id,
        vehicle=Vehicle(year=2020, make="Toyota", model="Camry", body_type="Sedan"),
        status=status,
        submitted_at=SUBMITTED_AT,
        drivable=drivable,
        has_other_party=TriState.NO,
        photos=photos,
        policy=PolicySnapshot(policy_id="POL-TEST", deductible=500, rental_coverage=True),
    )
    data.update(overrides)
    return Claim(**data)


def build_assessment(
    severity: Severity = Severity.LOW,
    confidence: float = 0.9,
    damage_types: Optional[List[str]] = None,
    next_step: RecommendedNextStep = RecommendedNextStep.APPROVE,
    repair_time_confidence: float = 0.65,
) -> AIAssessment:
    return AIAssessment(
        damage_types=damage_types or ["Front bumper"],
        severity=severity,
        confidence=confidence,
        recommended_next_step=next_step,
        estimated_repair_days_min=2,
        estimated_repair_days_max=6,
        repair_time_confidence=repair_time_confidence,
    )


def build_case_file(
    claim_id: str = "CLM-TEST01",
    severity: Severity = Severity.LOW,
    decision: CaseDecision = CaseDecision.AUTHORIZE,
    damage_areas: Optional[List[str]] = None,
) -> CaseFile:
    """Minimal case file whose estimate is the generated line items."""
    areas = damage_areas or ["Front bumper"]
    line_items = generate_line_items(claim_id, severity, areas)
    return CaseFile(
        damage_summary=DamageSummary(
            impacted_areas=areas,
            photo_count=2,
            drivable=TriState.YES,
            has_other_party=TriState.NO,
        ),
        severity=SeverityFinding(value=severity, confidence=0.9, explanation="test"),
        next_step=NextStepFinding(value=CaseNextStep.REPAIR, confidence=0.88, explanation="test"),
        estimate=EstimateFinding(
            cost_band=CostRange(min=500, max=1500),
            line_items=line_items,
            total=sum_line_items(line_items),
            confidence=0.78,
            explanation="test",
        ),
        duration=DurationFinding(min_days=2, max_days=6, confidence=0.65, explanation="test"),
        similar_claims=SimilarClaims(matches=[]),
        signals=[],
        final_recommendation=FinalRecommendation(decision=decision, confidence=0.7, explanation="test"),
    )


def build_assessed_claim(status: ClaimStatus = ClaimStatus.IN_REVIEW, **overrides) -> Claim:
    """Claim carrying a Low-severity assessment and its case file."""
    claim = build_claim(status=status, **overrides)
    return claim.model_copy(
        update={
            "ai_assessment": build_assessment(),
            "ai_case_file": build_case_file(claim.id),
        }
    )


@pytest.fixture
def claim() -> Claim:
    return build_claim()


@pytest.fixture
def assessed_claim() -> Claim:
    return build_assessed_claim()


@pytest.fixture
def store() -> ClaimStore:
    return ClaimStore(InMemoryClaimRepository())
