"""
Default claim queue loaded when the store is empty, missing or corrupt.
"""
from datetime import datetime
from typing import List, Optional
from urllib.parse import quote

from claimdesk.core.models import (
    Claim,
    ClaimEvent,
    IncidentDetails,
    OtherPartyDetails,
    Photo,
    PolicySnapshot,
    SeniorApproval,
    Vehicle,
)
from claimdesk.core.states import ClaimSource, ClaimStatus, CoverageType, TowStatus, TriState

INSURED_NAMES = (
    "Jordan Smith",
    "Morgan Lee",
    "Avery Chen",
    "Riley Johnson",
    "Casey Patel",
    "Taylor Brooks",
)
DEDUCTIBLES = (500, 1000, 1500, 2000)

STATUS_HINTS = {
    ClaimStatus.AUTHORIZED: "Repairs are already authorized and a shop assignment is pending.",
    ClaimStatus.PENDING_APPROVAL: "Estimate is prepared and waiting for approval.",
    ClaimStatus.NEEDS_MORE_PHOTOS: "Additional photos are required before final review.",
    ClaimStatus.IN_REVIEW: "Agent review is in progress pending final estimate confirmation.",
    ClaimStatus.NEW: "Awaiting full agent review and estimate finalization.",
}

# id, (year, make, model), status, submitted_at, drivable, has_other_party, [(photo id, caption)]
_SEED_ROWS = (
    ("CLM-210301", (2021, "Toyota", "RAV4"), ClaimStatus.NEW, "2026-02-05T16:40:00+00:00", True, False,
     [("rav4-front", "Front Bumper"), ("rav4-wide", "Wide Vehicle")]),
    ("CLM-210302", (2020, "Honda", "Accord"), ClaimStatus.IN_REVIEW, "2026-02-05T18:12:00+00:00", False, True,
     [("accord-rear", "Rear Quarter Panel"), ("accord-side", "Passenger Side")]),
    ("CLM-210303", (2019, "Ford", "F-150"), ClaimStatus.AUTHORIZED, "2026-02-04T21:25:00+00:00", True, False,
     [("f150-front", "Front Grill")]),
    ("CLM-210304", (2022, "Nissan", "Altima"), ClaimStatus.NEW, "2026-02-04T18:32:00+00:00", True, True,
     [("altima-side", "Driver Door")]),
    ("CLM-210305", (2018, "Chevrolet", "Malibu"), ClaimStatus.PENDING_APPROVAL, "2026-02-04T16:18:00+00:00", False, True,
     [("malibu-rear", "Rear Impact")]),
    ("CLM-210306", (2023, "Hyundai", "Tucson"), ClaimStatus.AUTHORIZED, "2026-02-04T14:50:00+00:00", True, False,
     [("tucson-front", "Front Corner")]),
    ("CLM-210307", (2020, "Subaru", "Outback"), ClaimStatus.NEW, "2026-02-04T13:21:00+00:00", True, False,
     [("outback-quarter", "Quarter Panel")]),
    ("CLM-210308", (2021, "Kia", "Sportage"), ClaimStatus.NEEDS_MORE_PHOTOS, "2026-02-04T11:59:00+00:00", False, True,
     [("sportage-bumper", "Rear Bumper")]),
    ("CLM-210309", (2017, "Jeep", "Cherokee"), ClaimStatus.AUTHORIZED, "2026-02-04T10:45:00+00:00", True, False,
     [("cherokee-side", "Passenger Side")]),
    ("CLM-210310", (2024, "Tesla", "Model 3"), ClaimStatus.NEW, "2026-02-04T09:22:00+00:00", True, True,
     [("model3-front", "Front Bumper")]),
    ("CLM-210311", (2019, "BMW", "X3"), ClaimStatus.PENDING_APPROVAL, "2026-02-04T08:14:00+00:00", False, True,
     [("x3-rear", "Rear Hatch")]),
    ("CLM-210312", (2016, "Mazda", "CX-5"), ClaimStatus.AUTHORIZED, "2026-02-04T06:37:00+00:00", True, False,
     [("cx5-side", "Side Swipe")]),
    ("CLM-210313", (2022, "Volkswagen", "Jetta"), ClaimStatus.NEW, "2026-02-03T22:19:00+00:00", True, False,
     [("jetta-front", "Front Fender")]),
    ("CLM-210314", (2018, "Toyota", "Corolla"), ClaimStatus.NEEDS_MORE_PHOTOS, "2026-02-03T20:50:00+00:00", False, True,
     [("corolla-rear", "Rear End")]),
    ("CLM-210315", (2021, "Ford", "Escape"), ClaimStatus.AUTHORIZED, "2026-02-03T19:06:00+00:00", True, False,
     [("escape-front", "Front Damage")]),
)


def placeholder_photo_url(caption: str) -> str:
    return f"https://placehold.co/640x400?text={quote(caption)}"


def build_mock_policy(claim_id: str) -> PolicySnapshot:
    seed = sum(ord(char) for char in claim_id)
    return PolicySnapshot(
        policy_id=f"POL-AGT-{claim_id[-4:]}",
        insured_name=INSURED_NAMES[seed % len(INSURED_NAMES)],
        coverage=CoverageType.COLLISION if seed % 2 == 0 else CoverageType.COMPREHENSIVE,
        deductible=DEDUCTIBLES[seed % len(DEDUCTIBLES)],
        rental_coverage=seed % 3 != 0,
    )


def build_mock_incident(vehicle: Vehicle, status: ClaimStatus, drivable: bool, has_other_party: bool) -> IncidentDetails:
    other_party = None
    if has_other_party:
        other_party = OtherPartyDetails(
            other_driver_name="Collected at scene",
            other_contact="On file",
            other_vehicle_plate="On file",
            other_vehicle_state="CA",
            other_vehicle_make_model="On file",
            insurance_carrier="On file",
            policy_number="On file",
            notes="Captured during intake workflow.",
        )
    return IncidentDetails(
        incident_description=f"Customer reported impact to {vehicle.make} {vehicle.model}. {STATUS_HINTS[status]}",
        incident_narration_text=f"Vehicle {'remained drivable' if drivable else 'was not drivable'} at intake.",
        tow_requested=not drivable,
        tow_status=None if drivable else TowStatus.DISPATCHED,
        other_party_details=other_party,
    )


def _senior_approval(status: ClaimStatus, submitted_at: datetime) -> Optional[SeniorApproval]:
    if status is ClaimStatus.AUTHORIZED:
        return SeniorApproval(
            reviewed=True,
            note="Seeded as previously approved in demo data.",
            reviewed_at=submitted_at,
            approved_at=submitted_at,
        )
    if status is ClaimStatus.PENDING_APPROVAL:
        return SeniorApproval()
    return None


def default_claims() -> List[Claim]:
    """Fresh copy of the demo queue. Each call builds new objects."""
    claims = []
    for claim_id, (year, make, model), status, submitted, drivable, other_party, photos in _SEED_ROWS:
        submitted_at = datetime.fromisoformat(submitted)
        vehicle = Vehicle(year=year, make=make, model=model)
        authorized = status is ClaimStatus.AUTHORIZED
        claims.append(
            Claim(
                id=claim_id,
                vehicle=vehicle,
                status=status,
                submitted_at=submitted_at,
                drivable=TriState.from_value(drivable),
                has_other_party=TriState.from_value(other_party),
                source=ClaimSource.MOCK,
                policy=build_mock_policy(claim_id),
                incident=build_mock_incident(vehicle, status, drivable, other_party),
                photos=[
                    Photo(id=photo_id, name=f"{photo_id}.jpg", url=placeholder_photo_url(caption))
                    for photo_id, caption in photos
                ],
                senior_approval=_senior_approval(status, submitted_at),
                approved_at=submitted_at if authorized else None,
                authorized_at=submitted_at if authorized else None,
                events=[
                    ClaimEvent(
                        id=f"{claim_id}-created",
                        at=submitted_at,
                        type="claim_created",
                        message="Claim entered agent queue.",
                    )
                ],
            )
        )
    return claims
