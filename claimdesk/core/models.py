"""
Claim Pydantic Models

Defines the claim record, the pseudo-AI outputs and the synthesized case
file, with validation of the invariants every consumer relies on.
"""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .states import (
    CaseDecision,
    CaseNextStep,
    ClaimSource,
    ClaimStatus,
    CoverageType,
    EstimateCategory,
    OverrideField,
    RecommendedNextStep,
    Severity,
    SignalSeverity,
    TowStatus,
    TriState,
)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def clamp01(value: float) -> float:
    return min(1.0, max(0.0, value))


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive timestamps as UTC so all claim timestamps compare."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def normalize_confidence(value: float) -> float:
    """Map a 0-1 or 0-100 confidence onto the canonical 0-1 scale."""
    return clamp01(value if value <= 1 else value / 100)


class Vehicle(BaseModel):
    year: int
    make: str
    model: str
    body_type: Optional[str] = Field(default=None, description="Sedan, SUV, Truck, EV or Luxury")
    estimated_value: Optional[int] = None

    @property
    def label(self) -> str:
        return f"{self.year} {self.make} {self.model}"


class Photo(BaseModel):
    id: str
    name: str
    url: str = ""


class PolicySnapshot(BaseModel):
    policy_id: str
    insured_name: Optional[str] = None
    coverage: CoverageType = CoverageType.COLLISION
    deductible: int = Field(default=0, ge=0)
    rental_coverage: bool = False


class OtherPartyDetails(BaseModel):
    no_info: bool = False
    other_driver_name: Optional[str] = None
    other_contact: Optional[str] = None
    other_vehicle_plate: Optional[str] = None
    other_vehicle_state: Optional[str] = None
    other_vehicle_make_model: Optional[str] = None
    insurance_carrier: Optional[str] = None
    policy_number: Optional[str] = None
    notes: Optional[str] = None


class IncidentDetails(BaseModel):
    incident_description: Optional[str] = None
    incident_narration_text: Optional[str] = None
    tow_requested: bool = False
    tow_id: Optional[str] = None
    tow_status: Optional[TowStatus] = None
    other_party_details: Optional[OtherPartyDetails] = None


class PhotoRequest(BaseModel):
    requested: bool = False
    requested_at: Optional[datetime] = None
    checklist: List[str] = Field(default_factory=list)


class AIAssessment(BaseModel):
    """
    Pseudo-AI damage assessment.

    Confidences are stored on the 0-1 scale; values arriving on the 0-100
    scale (older snapshots) are normalized on validation.
    """
    damage_types: List[str] = Field(..., min_length=1)
    severity: Severity
    confidence: float = Field(..., description="Normalized 0-1 confidence")
    recommended_next_step: RecommendedNextStep
    estimated_repair_days_min: int = Field(default=5, ge=0)
    estimated_repair_days_max: int = Field(default=9, ge=0)
    repair_time_confidence: float = 0.5
    rationale: List[str] = Field(default_factory=list)

    @field_validator("confidence", "repair_time_confidence", mode="before")
    @classmethod
    def _normalize_confidence(cls, value: Any) -> float:
        # Only ValueError is reported as a ValidationError; float(None) raises TypeError.
        if isinstance(value, bool) or not isinstance(value, (int, float, str)):
            raise ValueError("confidence must be a number")
        try:
            number = float(value)
        except ValueError as e:
            raise ValueError("confidence must be a number") from e
        return normalize_confidence(number)

    @model_validator(mode="after")
    def _clamp_duration(self) -> "AIAssessment":
        if self.estimated_repair_days_max < self.estimated_repair_days_min:
            self.estimated_repair_days_max = self.estimated_repair_days_min
        return self


class EstimateLineItem(BaseModel):
    id: str
    description: str
    category: EstimateCategory
    amount: int = Field(..., ge=0)


class AgentDecision(BaseModel):
    """Values the agent finalized, with a reason for every override."""
    severity: Optional[Severity] = None
    recommended_next_step: Optional[RecommendedNextStep] = None
    estimated_repair_cost: Optional[int] = Field(default=None, ge=0)
    line_items: List[EstimateLineItem] = Field(default_factory=list)
    override_reasons: Dict[OverrideField, str] = Field(default_factory=dict)

    def reason_for(self, field: OverrideField) -> str:
        return (self.override_reasons.get(field) or "").strip()


class SeniorApproval(BaseModel):
    reviewed: bool = False
    note: str = ""
    reviewed_at: Optional[datetime] = None
    approved_at: Optional[datetime] = None


class ClaimEvent(BaseModel):
    """Entry in the claim timeline. Events are appended, never edited."""
    model_config = ConfigDict(frozen=True)

    id: str
    at: datetime = Field(default_factory=utc_now)
    type: str
    message: str

    @field_validator("at")
    @classmethod
    def _utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)


class Signal(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    severity: SignalSeverity
    title: str
    recommended_action: str


class ComparableClaimRecord(BaseModel):
    """Historical claim in the read-only comparables catalog."""
    model_config = ConfigDict(frozen=True)

    id: str
    vehicle_make: str
    vehicle_model: str
    severity: Severity
    damage_areas: List[str]
    final_repair_cost: int
    repair_duration_days: int
    short_description: str


class ComparableClaimMatch(ComparableClaimRecord):
    score: int
    overlap_areas: List[str] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Case file
# ---------------------------------------------------------------------------

class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class CostRange(_Frozen):
    min: int
    max: int


class DamageSummary(_Frozen):
    impacted_areas: List[str]
    photo_count: int
    drivable: TriState
    has_other_party: TriState


class SeverityFinding(_Frozen):
    value: Severity
    confidence: float = Field(..., ge=0, le=1)
    explanation: str


class NextStepFinding(_Frozen):
    value: CaseNextStep
    confidence: float = Field(..., ge=0, le=1)
    explanation: str


class EstimateFinding(_Frozen):
    cost_band: CostRange
    line_items: List[EstimateLineItem]
    total: int
    confidence: float = Field(..., ge=0, le=1)
    explanation: str


class DurationFinding(_Frozen):
    min_days: int
    max_days: int
    confidence: float = Field(..., ge=0, le=1)
    explanation: str
    recommended_rental_days: Optional[int] = None


class SimilarClaims(_Frozen):
    matches: List[ComparableClaimMatch]
    typical_cost_range: Optional[CostRange] = None


class FinalRecommendation(_Frozen):
    decision: CaseDecision
    confidence: float = Field(..., ge=0, le=1)
    explanation: str


class CoverageSplit(_Frozen):
    deductible: int
    customer_pays: int
    insurer_pays: int
    above_deductible: bool


class CaseFile(_Frozen):
    """
    Explainable case file produced by one run of the decision pipeline.

    A re-run always produces a new case file; an existing one is never
    modified.
    """
    created_at: datetime = Field(default_factory=utc_now)
    damage_summary: DamageSummary
    severity: SeverityFinding
    next_step: NextStepFinding
    estimate: EstimateFinding
    duration: DurationFinding
    similar_claims: SimilarClaims
    signals: List[Signal]
    final_recommendation: FinalRecommendation
    coverage_split: Optional[CoverageSplit] = None


# ---------------------------------------------------------------------------
# Claim
# ---------------------------------------------------------------------------

class ClaimCreate(BaseModel):
    """Request model for a claim submitted through the intake flow."""
    vehicle: Vehicle
    drivable: TriState = TriState.UNKNOWN
    has_other_party: TriState = TriState.UNKNOWN
    photos: List[Photo] = Field(default_factory=list)
    policy: Optional[PolicySnapshot] = None
    incident: Optional[IncidentDetails] = None
    submitted_at: Optional[datetime] = None

    @field_validator("drivable", "has_other_party", mode="before")
    @classmethod
    def _tri_state(cls, value: object) -> TriState:
        return TriState.from_value(value)

    @field_validator("submitted_at")
    @classmethod
    def _utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(value)


class Claim(BaseModel):
    """
    Auto Insurance Claim Model

    Represents a claim moving through the agent review workflow with its
    full timeline. The claim owns its assessment, decision and events;
    writers replace them wholesale on a copy of the claim.
    """
    id: str = Field(..., min_length=1, description="Unique claim identifier")
    vehicle: Vehicle
    status: ClaimStatus = Field(default=ClaimStatus.NEW, description="Current workflow status")
    submitted_at: datetime
    drivable: TriState = TriState.UNKNOWN
    has_other_party: TriState = TriState.UNKNOWN
    source: ClaimSource = ClaimSource.MOCK
    queue_label: Optional[str] = None
    read_only_imported: bool = Field(
        default=False,
        description="Imported snapshot; never mutated"
    )
    policy: Optional[PolicySnapshot] = None
    incident: Optional[IncidentDetails] = None
    photo_request: PhotoRequest = Field(default_factory=PhotoRequest)
    photos: List[Photo] = Field(default_factory=list)
    ai_assessment: Optional[AIAssessment] = None
    ai_case_file: Optional[CaseFile] = None
    agent_decision: Optional[AgentDecision] = None
    senior_approval: Optional[SeniorApproval] = None
    agent_notes: str = ""
    assignee: Optional[str] = None
    opened_at: Optional[datetime] = None
    ai_assessed_at: Optional[datetime] = None
    draft_saved_at: Optional[datetime] = None
    submitted_for_approval_at: Optional[datetime] = None
    approved_at: Optional[datetime] = None
    authorized_at: Optional[datetime] = None
    last_updated_at: Optional[datetime] = None
    events: List[ClaimEvent] = Field(
        default_factory=list,
        description="Append-only timeline of state-changing actions"
    )

    @field_validator("drivable", "has_other_party", mode="before")
    @classmethod
    def _tri_state(cls, value: object) -> TriState:
        return TriState.from_value(value)

    @field_validator(
        "submitted_at",
        "opened_at",
        "ai_assessed_at",
        "draft_saved_at",
        "submitted_for_approval_at",
        "approved_at",
        "authorized_at",
        "last_updated_at",
    )
    @classmethod
    def _utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(value)

    @model_validator(mode="after")
    def _default_last_updated(self) -> "Claim":
        if self.last_updated_at is None:
            self.last_updated_at = self.submitted_at
        return self

    def touch(self, at: Optional[datetime] = None) -> None:
        """Advance last_updated_at without ever moving it backwards."""
        at = at or utc_now()
        if self.last_updated_at is None or at > self.last_updated_at:
            self.last_updated_at = at

    def record_status_change(self, new_status: ClaimStatus, at: Optional[datetime] = None) -> None:
        """Record a status transition."""
        self.status = new_status
        self.touch(at)

    def add_event(self, event_type: str, message: str, at: Optional[datetime] = None) -> ClaimEvent:
        """Append an entry to the timeline."""
        event = ClaimEvent(
            id=f"{self.id}-{len(self.events) + 1}-{event_type}",
            at=at or utc_now(),
            type=event_type,
            message=message,
        )
        self.events.append(event)
        self.touch(event.at)
        return event

    @property
    def notes_text(self) -> str:
        """Agent notes and incident description, for language checks."""
        description = self.incident.incident_description if self.incident else None
        return f"{self.agent_notes or ''} {description or ''}"
