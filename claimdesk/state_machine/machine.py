"""
Claim State Machine

Manages the agent review workflow: assessment, drafts, submission for
approval, senior approval and photo requests, with override-reason
guardrails.
"""
import logging
from typing import Dict, List, Optional, Set

from pydantic import BaseModel

from claimdesk.agents.line_items import sum_line_items
from claimdesk.core.errors import ErrorType
from claimdesk.core.models import (
    AIAssessment,
    AgentDecision,
    CaseFile,
    Claim,
    PhotoRequest,
    SeniorApproval,
    normalize_confidence,
    utc_now,
)
from claimdesk.core.states import CaseDecision, ClaimStatus, OverrideField

logger = logging.getLogger(__name__)

LOW_CONFIDENCE_THRESHOLD = 0.60
ESTIMATE_DIVERGENCE_LIMIT = 0.10

DEFAULT_PHOTO_CHECKLIST = [
    "Wide shot showing the whole vehicle",
    "Close-up of each damaged area",
    "Photo of the license plate or VIN",
]

OVERRIDE_LABELS: Dict[OverrideField, str] = {
    OverrideField.SEVERITY: "severity",
    OverrideField.RECOMMENDED_NEXT_STEP: "recommended next step",
    OverrideField.ESTIMATED_REPAIR_COST: "estimated repair cost",
    OverrideField.FINAL_ESTIMATE_VS_TOTAL: "final estimate vs line-item total",
}


class TransitionResult(BaseModel):
    """
    Outcome of a workflow action.

    A rejected action carries the claim it was given, untouched, plus an
    advisory message for the agent.
    """
    ok: bool
    claim: Claim
    message: str
    error_type: Optional[ErrorType] = None


def _rejected(claim: Claim, message: str, error_type: ErrorType) -> TransitionResult:
    logger.warning(f"Action rejected for claim {claim.id}: {message}")
    return TransitionResult(ok=False, claim=claim, message=message, error_type=error_type)


class ClaimStateMachine:
    """
    State machine for the agent review workflow.

    Every successful action works on a deep copy of the claim, so the
    caller's instance is never modified, and appends exactly one event.
    """

    # Transitions an agent can drive directly. A low-confidence assessment
    # may additionally force any non-terminal claim into NEEDS_MORE_PHOTOS.
    TRANSITIONS: Dict[ClaimStatus, Set[ClaimStatus]] = {
        ClaimStatus.NEW: {ClaimStatus.IN_REVIEW, ClaimStatus.NEEDS_MORE_PHOTOS},
        ClaimStatus.IN_REVIEW: {ClaimStatus.PENDING_APPROVAL, ClaimStatus.NEEDS_MORE_PHOTOS},
        ClaimStatus.NEEDS_MORE_PHOTOS: {ClaimStatus.IN_REVIEW},
        ClaimStatus.PENDING_APPROVAL: {ClaimStatus.AUTHORIZED},
        ClaimStatus.AUTHORIZED: set(),  # Terminal state
    }

    def get_valid_transitions(self, claim: Claim) -> List[ClaimStatus]:
        if claim.read_only_imported:
            return []
        return sorted(self.TRANSITIONS.get(claim.status, set()), key=lambda status: status.value)

    def can_transition(self, claim: Claim, target: ClaimStatus) -> bool:
        return target in self.get_valid_transitions(claim)

    def _guard_mutable(self, claim: Claim) -> Optional[TransitionResult]:
        if claim.read_only_imported:
            return _rejected(claim, "Imported claims are read-only.", ErrorType.READ_ONLY_CLAIM)
        return None

    # ------------------------------------------------------------------
    # Override detection
    # ------------------------------------------------------------------

    def detect_overrides(self, claim: Claim, decision: AgentDecision) -> Set[OverrideField]:
        """
        Fields where the agent's decision departs from the AI output.

        The line-item check compares the agent's final estimate with the
        sum of the agent's line items, or of the suggested line items when
        the agent kept none; it is skipped when that total is zero.
        """
        overrides: Set[OverrideField] = set()
        assessment = claim.ai_assessment
        case_file = claim.ai_case_file

        if assessment is not None:
            if decision.severity is not None and decision.severity != assessment.severity:
                overrides.add(OverrideField.SEVERITY)
            if (
                decision.recommended_next_step is not None
                and decision.recommended_next_step != assessment.recommended_next_step
            ):
                overrides.add(OverrideField.RECOMMENDED_NEXT_STEP)

        final_estimate = decision.estimated_repair_cost
        if final_estimate is None:
            return overrides

        if case_file is not None and final_estimate != case_file.estimate.total:
            overrides.add(OverrideField.ESTIMATED_REPAIR_COST)

        line_items = decision.line_items or (case_file.estimate.line_items if case_file else [])
        total = sum_line_items(line_items)
        if total > 0 and abs(final_estimate - total) / total > ESTIMATE_DIVERGENCE_LIMIT:
            overrides.add(OverrideField.FINAL_ESTIMATE_VS_TOTAL)

        return overrides

    def missing_override_reasons(self, claim: Claim, decision: AgentDecision) -> List[OverrideField]:
        """Overridden fields that still lack a non-empty reason, in field order."""
        overrides = self.detect_overrides(claim, decision)
        return [field for field in OverrideField if field in overrides and not decision.reason_for(field)]

    def _guard_reasons(self, claim: Claim, decision: AgentDecision) -> Optional[TransitionResult]:
        missing = self.missing_override_reasons(claim, decision)
        if not missing:
            return None
        labels = ", ".join(OVERRIDE_LABELS[field] for field in missing)
        return _rejected(
            claim,
            f"Add an override reason for: {labels}.",
            ErrorType.MISSING_OVERRIDE_REASON,
        )

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def open_claim(self, claim: Claim, assignee: Optional[str] = None) -> TransitionResult:
        """Record that an agent opened the claim."""
        rejection = self._guard_mutable(claim)
        if rejection:
            return rejection

        now = utc_now()
        updated = claim.model_copy(deep=True)
        if updated.opened_at is None:
            updated.opened_at = now
        if assignee:
            updated.assignee = assignee
        updated.add_event("claim_opened", f"Claim opened by {assignee or 'agent'}.", now)
        return TransitionResult(ok=True, claim=updated, message="Claim opened.")

    def apply_assessment(
        self,
        claim: Claim,
        assessment: AIAssessment,
        case_file: CaseFile,
    ) -> TransitionResult:
        """
        Store a fresh assessment and case file on the claim.

        A confidence below 0.60, or a case file asking for more photos,
        forces the claim into NEEDS_MORE_PHOTOS from any status except
        AUTHORIZED. Otherwise a NEW claim moves to IN_REVIEW.
        """
        rejection = self._guard_mutable(claim)
        if rejection:
            return rejection
        if claim.status is ClaimStatus.AUTHORIZED:
            return _rejected(claim, "Authorized claims cannot be re-assessed.", ErrorType.INVALID_TRANSITION)

        now = utc_now()
        updated = claim.model_copy(deep=True)
        updated.ai_assessment = assessment
        updated.ai_case_file = case_file
        updated.ai_assessed_at = now

        confidence = normalize_confidence(assessment.confidence)
        needs_photos = (
            confidence < LOW_CONFIDENCE_THRESHOLD
            or case_file.final_recommendation.decision is CaseDecision.NEEDS_MORE_PHOTOS
        )

        if needs_photos:
            updated.photo_request = PhotoRequest(
                requested=True,
                requested_at=now,
                checklist=list(DEFAULT_PHOTO_CHECKLIST),
            )
            updated.record_status_change(ClaimStatus.NEEDS_MORE_PHOTOS, now)
            message = (
                f"AI assessment completed with {round(confidence * 100)}% confidence; "
                f"additional photos required."
            )
        else:
            if updated.status is ClaimStatus.NEW:
                updated.record_status_change(ClaimStatus.IN_REVIEW, now)
            message = (
                f"AI assessment completed: {assessment.severity.value} severity, "
                f"{case_file.final_recommendation.decision.value} recommended."
            )

        updated.add_event("ai_assessment_completed", message, now)
        logger.info(f"Claim {claim.id}: {message} Status {claim.status.value} -> {updated.status.value}")
        return TransitionResult(ok=True, claim=updated, message=message)

    def save_draft(
        self,
        claim: Claim,
        decision: AgentDecision,
        notes: Optional[str] = None,
    ) -> TransitionResult:
        rejection = self._guard_mutable(claim)
        if rejection:
            return rejection
        if claim.status is ClaimStatus.AUTHORIZED:
            return _rejected(claim, "Authorized claims cannot be edited.", ErrorType.INVALID_TRANSITION)
        rejection = self._guard_reasons(claim, decision)
        if rejection:
            return rejection

        now = utc_now()
        updated = claim.model_copy(deep=True)
        updated.agent_decision = decision.model_copy(deep=True)
        if notes is not None:
            updated.agent_notes = notes
        updated.draft_saved_at = now
        if updated.status in (ClaimStatus.NEW, ClaimStatus.NEEDS_MORE_PHOTOS):
            updated.record_status_change(ClaimStatus.IN_REVIEW, now)

        updated.add_event("draft_saved", "Agent saved a draft decision.", now)
        return TransitionResult(ok=True, claim=updated, message="Draft saved.")

    def submit_for_approval(
        self,
        claim: Claim,
        decision: AgentDecision,
        notes: Optional[str] = None,
    ) -> TransitionResult:
        rejection = self._guard_mutable(claim)
        if rejection:
            return rejection
        if claim.status is not ClaimStatus.IN_REVIEW:
            return _rejected(
                claim,
                f"Only claims In Review can be submitted for approval (current status: {claim.status.value}).",
                ErrorType.INVALID_TRANSITION,
            )
        rejection = self._guard_reasons(claim, decision)
        if rejection:
            return rejection

        now = utc_now()
        updated = claim.model_copy(deep=True)
        updated.agent_decision = decision.model_copy(deep=True)
        if notes is not None:
            updated.agent_notes = notes
        updated.submitted_for_approval_at = now
        updated.senior_approval = SeniorApproval()
        updated.record_status_change(ClaimStatus.PENDING_APPROVAL, now)

        estimate = decision.estimated_repair_cost
        detail = f" Final estimate ${estimate:,}." if estimate is not None else ""
        updated.add_event("submitted_for_approval", f"Submitted for senior approval.{detail}", now)
        return TransitionResult(ok=True, claim=updated, message="Submitted for approval.")

    def approve(self, claim: Claim, senior_reviewed: bool, note: str = "") -> TransitionResult:
        rejection = self._guard_mutable(claim)
        if rejection:
            return rejection
        if claim.status is not ClaimStatus.PENDING_APPROVAL:
            return _rejected(
                claim,
                f"Only claims Pending Approval can be authorized (current status: {claim.status.value}).",
                ErrorType.INVALID_TRANSITION,
            )
        if not senior_reviewed:
            return _rejected(
                claim,
                "Confirm senior review before authorizing the claim.",
                ErrorType.SENIOR_REVIEW_REQUIRED,
            )

        now = utc_now()
        updated = claim.model_copy(deep=True)
        updated.senior_approval = SeniorApproval(
            reviewed=True,
            note=note,
            reviewed_at=now,
            approved_at=now,
        )
        updated.approved_at = now
        updated.authorized_at = now
        updated.record_status_change(ClaimStatus.AUTHORIZED, now)

        message = "Claim authorized after senior review."
        if note.strip():
            message = f"{message} Note: {note.strip()}"
        updated.add_event("claim_authorized", message, now)
        logger.info(f"Claim {claim.id} authorized")
        return TransitionResult(ok=True, claim=updated, message="Claim authorized.")

    def request_photos(self, claim: Claim, checklist: Optional[List[str]] = None) -> TransitionResult:
        rejection = self._guard_mutable(claim)
        if rejection:
            return rejection
        if claim.status not in (ClaimStatus.NEW, ClaimStatus.IN_REVIEW):
            return _rejected(
                claim,
                f"Photos can only be requested for New or In Review claims (current status: {claim.status.value}).",
                ErrorType.INVALID_TRANSITION,
            )

        items = [item.strip() for item in (checklist or DEFAULT_PHOTO_CHECKLIST) if item.strip()]
        now = utc_now()
        updated = claim.model_copy(deep=True)
        updated.photo_request = PhotoRequest(requested=True, requested_at=now, checklist=items)
        updated.record_status_change(ClaimStatus.NEEDS_MORE_PHOTOS, now)
        updated.add_event("photos_requested", f"Requested additional photos: {'; '.join(items)}.", now)
        return TransitionResult(ok=True, claim=updated, message="Additional photos requested.")
