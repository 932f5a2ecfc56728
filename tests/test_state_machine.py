"""
Tests for the agent review state machine and its guardrails.
"""
import pytest

from claimdesk.core.errors import ErrorType
from claimdesk.core.models import AgentDecision
from claimdesk.core.states import (
    CaseDecision,
    ClaimStatus,
    OverrideField,
    RecommendedNextStep,
    Severity,
)
from claimdesk.state_machine.machine import DEFAULT_PHOTO_CHECKLIST, ClaimStateMachine

from conftest import build_assessed_claim, build_assessment, build_case_file, build_claim


@pytest.fixture
def machine():
    return ClaimStateMachine()


def _ai_decision(claim, **changes):
    """Decision that keeps every AI value unless overridden."""
    values = dict(
        severity=claim.ai_assessment.severity,
        recommended_next_step=claim.ai_assessment.recommended_next_step,
        estimated_repair_cost=claim.ai_case_file.estimate.total,
    )
    values.update(changes)
    return AgentDecision(**values)


class TestTransitions:
    def test_valid_transitions(self, machine):
        assert machine.get_valid_transitions(build_claim(status=ClaimStatus.NEW)) == [
            ClaimStatus.IN_REVIEW,
            ClaimStatus.NEEDS_MORE_PHOTOS,
        ]
        assert machine.get_valid_transitions(build_claim(status=ClaimStatus.AUTHORIZED)) == []

    def test_imported_claims_have_no_transitions(self, machine):
        claim = build_claim(read_only_imported=True)
        assert machine.get_valid_transitions(claim) == []
        assert not machine.can_transition(claim, ClaimStatus.IN_REVIEW)


class TestApplyAssessment:
    def test_new_claim_moves_to_review(self, machine, claim):
        result = machine.apply_assessment(claim, build_assessment(), build_case_file())
        assert result.ok
        assert result.claim.status is ClaimStatus.IN_REVIEW
        assert result.claim.ai_assessed_at is not None
        assert result.claim.events[-1].type == "ai_assessment_completed"
        # caller's claim untouched
        assert claim.status is ClaimStatus.NEW
        assert claim.ai_assessment is None

    def test_low_confidence_forces_more_photos(self, machine):
        claim = build_claim(status=ClaimStatus.IN_REVIEW)
        result = machine.apply_assessment(claim, build_assessment(confidence=0.55), build_case_file())
        assert result.claim.status is ClaimStatus.NEEDS_MORE_PHOTOS
        assert result.claim.photo_request.requested
        assert result.claim.photo_request.checklist == DEFAULT_PHOTO_CHECKLIST
        assert "55%" in result.message

    def test_photo_decision_forces_more_photos_from_pending(self, machine):
        claim = build_claim(status=ClaimStatus.PENDING_APPROVAL)
        case_file = build_case_file(decision=CaseDecision.NEEDS_MORE_PHOTOS)
        result = machine.apply_assessment(claim, build_assessment(confidence=0.8), case_file)
        assert result.claim.status is ClaimStatus.NEEDS_MORE_PHOTOS

    def test_pending_claim_keeps_status(self, machine):
        claim = build_claim(status=ClaimStatus.PENDING_APPROVAL)
        result = machine.apply_assessment(claim, build_assessment(), build_case_file())
        assert result.claim.status is ClaimStatus.PENDING_APPROVAL

    def test_authorized_rejected(self, machine):
        claim = build_claim(status=ClaimStatus.AUTHORIZED)
        result = machine.apply_assessment(claim, build_assessment(confidence=0.5), build_case_file())
        assert not result.ok
        assert result.error_type is ErrorType.INVALID_TRANSITION
        assert result.claim is claim

    def test_imported_rejected(self, machine):
        claim = build_claim(read_only_imported=True)
        result = machine.apply_assessment(claim, build_assessment(), build_case_file())
        assert result.error_type is ErrorType.READ_ONLY_CLAIM


class TestOverrides:
    def test_matching_decision_has_no_overrides(self, machine, assessed_claim):
        assert machine.detect_overrides(assessed_claim, _ai_decision(assessed_claim)) == set()

    def test_severity_and_next_step(self, machine, assessed_claim):
        decision = _ai_decision(
            assessed_claim,
            severity=Severity.HIGH,
            recommended_next_step=RecommendedNextStep.ESCALATE,
        )
        assert machine.missing_override_reasons(assessed_claim, decision) == [
            OverrideField.SEVERITY,
            OverrideField.RECOMMENDED_NEXT_STEP,
        ]

    def test_small_cost_change_needs_cost_reason_only(self, machine, assessed_claim):
        total = assessed_claim.ai_case_file.estimate.total
        decision = _ai_decision(assessed_claim, estimated_repair_cost=total + 5)
        assert machine.detect_overrides(assessed_claim, decision) == {OverrideField.ESTIMATED_REPAIR_COST}

    def test_large_divergence_from_line_items(self, machine, assessed_claim):
        total = assessed_claim.ai_case_file.estimate.total
        decision = _ai_decision(assessed_claim, estimated_repair_cost=round(total * 1.5))
        assert machine.detect_overrides(assessed_claim, decision) == {
            OverrideField.ESTIMATED_REPAIR_COST,
            OverrideField.FINAL_ESTIMATE_VS_TOTAL,
        }

    def test_agent_line_items_take_precedence(self, machine, assessed_claim):
        items = assessed_claim.ai_case_file.estimate.line_items[:1]
        decision = _ai_decision(assessed_claim, estimated_repair_cost=items[0].amount, line_items=items)
        assert OverrideField.FINAL_ESTIMATE_VS_TOTAL not in machine.detect_overrides(assessed_claim, decision)

    def test_zero_total_skips_divergence_check(self, machine):
        claim = build_claim(status=ClaimStatus.IN_REVIEW)
        decision = AgentDecision(estimated_repair_cost=5000)
        assert machine.detect_overrides(claim, decision) == set()

    def test_blank_reason_does_not_count(self, machine, assessed_claim):
        decision = _ai_decision(
            assessed_claim,
            severity=Severity.MEDIUM,
            override_reasons={OverrideField.SEVERITY: "   "},
        )
        assert machine.missing_override_reasons(assessed_claim, decision) == [OverrideField.SEVERITY]


class TestSaveDraft:
    def test_missing_reason_blocks_and_leaves_claim_unchanged(self, machine, assessed_claim):
        before = assessed_claim.model_dump()
        decision = _ai_decision(assessed_claim, severity=Severity.HIGH)

        result = machine.save_draft(assessed_claim, decision)

        assert not result.ok
        assert result.error_type is ErrorType.MISSING_OVERRIDE_REASON
        assert "severity" in result.message
        assert result.claim is assessed_claim
        assert assessed_claim.model_dump() == before

    def test_with_reason(self, machine):
        claim = build_assessed_claim(status=ClaimStatus.NEW)
        decision = _ai_decision(
            claim,
            severity=Severity.HIGH,
            override_reasons={OverrideField.SEVERITY: "Frame damage visible underneath"},
        )

        result = machine.save_draft(claim, decision, notes="Checked underside photos")

        assert result.ok
        assert result.claim.status is ClaimStatus.IN_REVIEW
        assert result.claim.agent_decision.severity is Severity.HIGH
        assert result.claim.agent_notes == "Checked underside photos"
        assert [e.type for e in result.claim.events] == ["draft_saved"]

    def test_pending_claim_keeps_status(self, machine):
        claim = build_assessed_claim(status=ClaimStatus.PENDING_APPROVAL)
        result = machine.save_draft(claim, _ai_decision(claim))
        assert result.ok
        assert result.claim.status is ClaimStatus.PENDING_APPROVAL

    def test_authorized_rejected(self, machine):
        claim = build_assessed_claim(status=ClaimStatus.AUTHORIZED)
        result = machine.save_draft(claim, _ai_decision(claim))
        assert result.error_type is ErrorType.INVALID_TRANSITION


class TestSubmitForApproval:
    def test_requires_in_review(self, machine):
        claim = build_assessed_claim(status=ClaimStatus.NEW)
        result = machine.submit_for_approval(claim, _ai_decision(claim))
        assert result.error_type is ErrorType.INVALID_TRANSITION

    def test_divergent_estimate_needs_both_reasons(self, machine, assessed_claim):
        total = assessed_claim.ai_case_file.estimate.total
        decision = _ai_decision(
            assessed_claim,
            estimated_repair_cost=total * 2,
            override_reasons={OverrideField.ESTIMATED_REPAIR_COST: "Shop quote received"},
        )

        result = machine.submit_for_approval(assessed_claim, decision)
        assert result.error_type is ErrorType.MISSING_OVERRIDE_REASON
        assert "final estimate vs line-item total" in result.message

        decision.override_reasons[OverrideField.FINAL_ESTIMATE_VS_TOTAL] = "Hidden damage found"
        result = machine.submit_for_approval(assessed_claim, decision)
        assert result.ok
        assert result.claim.status is ClaimStatus.PENDING_APPROVAL
        assert result.claim.senior_approval.reviewed is False
        assert result.claim.submitted_for_approval_at is not None


class TestApprove:
    def test_requires_senior_review(self, machine):
        claim = build_assessed_claim(status=ClaimStatus.PENDING_APPROVAL)
        before = claim.model_dump()

        result = machine.approve(claim, senior_reviewed=False)

        assert result.error_type is ErrorType.SENIOR_REVIEW_REQUIRED
        assert claim.model_dump() == before

    def test_authorizes(self, machine):
        claim = build_assessed_claim(status=ClaimStatus.PENDING_APPROVAL)

        result = machine.approve(claim, senior_reviewed=True, note="Looks right")

        assert result.ok
        assert result.claim.status is ClaimStatus.AUTHORIZED
        assert result.claim.senior_approval.reviewed
        assert result.claim.authorized_at == result.claim.approved_at
        assert "Looks right" in result.claim.events[-1].message

    def test_only_pending_claims(self, machine, assessed_claim):
        result = machine.approve(assessed_claim, senior_reviewed=True)
        assert result.error_type is ErrorType.INVALID_TRANSITION


class TestRequestPhotos:
    def test_from_review(self, machine, assessed_claim):
        result = machine.request_photos(assessed_claim, ["Rear three-quarter view", " "])
        assert result.claim.status is ClaimStatus.NEEDS_MORE_PHOTOS
        assert result.claim.photo_request.checklist == ["Rear three-quarter view"]

    def test_default_checklist(self, machine, claim):
        result = machine.request_photos(claim)
        assert result.claim.photo_request.checklist == DEFAULT_PHOTO_CHECKLIST

    def test_not_from_pending(self, machine):
        result = machine.request_photos(build_claim(status=ClaimStatus.PENDING_APPROVAL))
        assert result.error_type is ErrorType.INVALID_TRANSITION


class TestTimeline:
    def test_each_action_appends_one_event_and_time_moves_forward(self, machine):
        claim = build_assessed_claim(status=ClaimStatus.NEW)
        decision = _ai_decision(claim)
        steps = [
            lambda c: machine.open_claim(c, "agent.kim"),
            lambda c: machine.save_draft(c, decision),
            lambda c: machine.submit_for_approval(c, decision),
            lambda c: machine.approve(c, senior_reviewed=True),
        ]

        for step in steps:
            result = step(claim)
            assert result.ok, result.message
            assert len(result.claim.events) == len(claim.events) + 1
            assert result.claim.last_updated_at >= claim.last_updated_at
            claim = result.claim

        assert [e.type for e in claim.events] == [
            "claim_opened",
            "draft_saved",
            "submitted_for_approval",
            "claim_authorized",
        ]
        assert claim.assignee == "agent.kim"
