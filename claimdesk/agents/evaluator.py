"""
Review-Signal Evaluator

Inspects a claim's photos, notes and assessment for red flags. Each check
is independent and contributes at most one advisory signal.
"""
import logging
from typing import Callable, List, Optional

from claimdesk.core.hashing import hash_hex
from claimdesk.core.models import Claim, Signal, normalize_confidence
from claimdesk.core.states import Severity, SignalSeverity

logger = logging.getLogger(__name__)

MIN_PHOTO_COUNT_FOR_WIDE_SHOT = 2
LOW_CONFIDENCE_THRESHOLD = 0.60
MINOR_LANGUAGE_PATTERNS = (
    "minor",
    "small",
    "light",
    "cosmetic",
    "just a scratch",
    "only a scratch",
)


def check_photo_coverage(claim: Claim) -> Optional[Signal]:
    if len(claim.photos) >= MIN_PHOTO_COUNT_FOR_WIDE_SHOT:
        return None
    return Signal(
        id="missing_wide_shot",
        severity=SignalSeverity.INFO,
        title="Needs review: Limited photo coverage",
        recommended_action="Request more photos to include a wide vehicle view.",
    )


def check_confidence(claim: Claim) -> Optional[Signal]:
    if claim.ai_assessment is None:
        return None
    if normalize_confidence(claim.ai_assessment.confidence) >= LOW_CONFIDENCE_THRESHOLD:
        return None
    return Signal(
        id="very_low_confidence",
        severity=SignalSeverity.WARNING,
        title="Needs review: Very low AI confidence",
        recommended_action="Request more photos or escalate for manual review.",
    )


def check_severity_language(claim: Claim) -> Optional[Signal]:
    if claim.ai_assessment is None or claim.ai_assessment.severity is not Severity.HIGH:
        return None
    text = claim.notes_text.lower()
    if not any(pattern in text for pattern in MINOR_LANGUAGE_PATTERNS):
        return None
    return Signal(
        id="severity_notes_mismatch",
        severity=SignalSeverity.WARNING,
        title="Needs review: Severity and note language mismatch",
        recommended_action="Escalate to senior adjuster to confirm final severity.",
    )


def has_duplicate_photos(claim: Claim) -> bool:
    """
    True when two photos share a trimmed, lowercased name or a URL hash.
    Photos without a URL are compared by name only.

    The URL hash compares the encoded string, not the image content, so
    the same image encoded twice is not caught.
    """
    seen_names = set()
    seen_url_hashes = set()
    for photo in claim.photos:
        name = photo.name.strip().lower()
        if name:
            if name in seen_names:
                return True
            seen_names.add(name)
        if not photo.url:
            continue
        url_hash = hash_hex(photo.url)
        if url_hash in seen_url_hashes:
            return True
        seen_url_hashes.add(url_hash)
    return False


def check_duplicate_photos(claim: Claim) -> Optional[Signal]:
    if len(claim.photos) <= 1 or not has_duplicate_photos(claim):
        return None
    return Signal(
        id="duplicate_photos",
        severity=SignalSeverity.INFO,
        title="Needs review: Potential duplicate photos detected",
        recommended_action="Request additional distinct angles for validation.",
    )


# Evaluation order fixes the display order of the signals
SIGNAL_CHECKS: List[Callable[[Claim], Optional[Signal]]] = [
    check_photo_coverage,
    check_confidence,
    check_severity_language,
    check_duplicate_photos,
]


def evaluate_signals(claim: Claim) -> List[Signal]:
    """
    Run every review check against a claim.

    Args:
        claim: The claim to inspect, with its assessment attached

    Returns:
        Signals in check order; an empty list when nothing fired
    """
    signals = [signal for signal in (check(claim) for check in SIGNAL_CHECKS) if signal is not None]

    logger.info(f"Signal evaluation for claim {claim.id}: {[s.id for s in signals] or 'none'}")
    return signals
