"""
Tests for the review-signal evaluator.
"""
from claimdesk.agents.evaluator import evaluate_signals, has_duplicate_photos
from claimdesk.core.models import IncidentDetails, Photo
from claimdesk.core.states import Severity, SignalSeverity

from conftest import build_assessment, build_claim


def _ids(claim):
    return [signal.id for signal in evaluate_signals(claim)]


class TestPhotoCoverage:
    def test_single_photo_flags_missing_wide_shot(self):
        claim = build_claim(photos=[Photo(id="p1", name="close.jpg", url="https://example.com/1.jpg")])
        signals = evaluate_signals(claim)
        assert [s.id for s in signals] == ["missing_wide_shot"]
        assert signals[0].severity is SignalSeverity.INFO

    def test_two_photos_pass(self):
        assert _ids(build_claim()) == []


class TestConfidence:
    def test_low_confidence_is_warning(self):
        claim = build_claim(ai_assessment=build_assessment(confidence=0.55))
        signals = evaluate_signals(claim)
        assert [s.id for s in signals] == ["very_low_confidence"]
        assert signals[0].severity is SignalSeverity.WARNING

    def test_percent_scale_is_normalized(self):
        claim = build_claim(ai_assessment=build_assessment(confidence=72))
        assert _ids(claim) == []

    def test_no_assessment_no_signal(self):
        assert "very_low_confidence" not in _ids(build_claim())


class TestSeverityLanguage:
    def test_high_severity_with_minor_notes(self):
        claim = build_claim(
            ai_assessment=build_assessment(severity=Severity.HIGH),
            agent_notes="Customer says it is just a scratch",
        )
        assert _ids(claim) == ["severity_notes_mismatch"]

    def test_incident_description_is_checked(self):
        claim = build_claim(
            ai_assessment=build_assessment(severity=Severity.HIGH),
            incident=IncidentDetails(incident_description="Cosmetic damage to the door"),
        )
        assert "severity_notes_mismatch" in _ids(claim)

    def test_low_severity_ignored(self):
        claim = build_claim(
            ai_assessment=build_assessment(severity=Severity.LOW),
            agent_notes="minor dent",
        )
        assert _ids(claim) == []


class TestDuplicatePhotos:
    def test_same_name_after_trim_and_case(self):
        claim = build_claim(photos=[
            Photo(id="p1", name="Front.JPG", url="https://example.com/1.jpg"),
            Photo(id="p2", name=" front.jpg ", url="https://example.com/2.jpg"),
        ])
        assert _ids(claim) == ["duplicate_photos"]

    def test_same_url(self):
        claim = build_claim(photos=[
            Photo(id="p1", name="a.jpg", url="data:image/png;base64,AAAA"),
            Photo(id="p2", name="b.jpg", url="data:image/png;base64,AAAA"),
        ])
        assert has_duplicate_photos(claim)

    def test_missing_urls_compare_by_name_only(self):
        claim = build_claim(photos=[
            Photo(id="p1", name="a.jpg"),
            Photo(id="p2", name="b.jpg"),
        ])
        assert not has_duplicate_photos(claim)


class TestOrdering:
    def test_signals_in_check_order(self):
        claim = build_claim(
            photos=[Photo(id="p1", name="only.jpg", url="")],
            ai_assessment=build_assessment(severity=Severity.HIGH, confidence=0.5),
            agent_notes="small dent",
        )
        assert _ids(claim) == ["missing_wide_shot", "very_low_confidence", "severity_notes_mismatch"]
