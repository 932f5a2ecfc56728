"""
Historical claims used as comparables. Read-only reference data.
"""
from typing import Tuple

from claimdesk.core.models import ComparableClaimRecord
from claimdesk.core.states import Severity


COMPARABLE_CLAIMS: Tuple[ComparableClaimRecord, ...] = (
    ComparableClaimRecord(
        id="HIST-1001",
        vehicle_make="Toyota",
        vehicle_model="Camry",
        severity=Severity.LOW,
        damage_areas=["Front bumper"],
        final_repair_cost=980,
        repair_duration_days=3,
        short_description="Parking-lot tap, bumper cover scuffed and refinished.",
    ),
    ComparableClaimRecord(
        id="HIST-1002",
        vehicle_make="Honda",
        vehicle_model="Civic",
        severity=Severity.LOW,
        damage_areas=["Rear bumper"],
        final_repair_cost=860,
        repair_duration_days=2,
        short_description="Low-speed rear tap, bumper cover repaired.",
    ),
    ComparableClaimRecord(
        id="HIST-1003",
        vehicle_make="Toyota",
        vehicle_model="RAV4",
        severity=Severity.MEDIUM,
        damage_areas=["Front bumper", "Headlight"],
        final_repair_cost=2650,
        repair_duration_days=6,
        short_description="Front corner impact, bumper and headlamp replaced.",
    ),
    ComparableClaimRecord(
        id="HIST-1004",
        vehicle_make="Honda",
        vehicle_model="Accord",
        severity=Severity.MEDIUM,
        damage_areas=["Quarter panel", "Rear bumper"],
        final_repair_cost=3120,
        repair_duration_days=7,
        short_description="Rear quarter crease with bumper reinforcement repair.",
    ),
    ComparableClaimRecord(
        id="HIST-1005",
        vehicle_make="Ford",
        vehicle_model="F-150",
        severity=Severity.HIGH,
        damage_areas=["Front bumper", "Hood", "Headlight"],
        final_repair_cost=7850,
        repair_duration_days=14,
        short_description="Frontal collision, hood and lamp assembly replaced, sensors recalibrated.",
    ),
    ComparableClaimRecord(
        id="HIST-1006",
        vehicle_make="Nissan",
        vehicle_model="Altima",
        severity=Severity.MEDIUM,
        damage_areas=["Driver-side door"],
        final_repair_cost=2240,
        repair_duration_days=5,
        short_description="Side swipe, driver door skin replaced and blended.",
    ),
    ComparableClaimRecord(
        id="HIST-1007",
        vehicle_make="Subaru",
        vehicle_model="Outback",
        severity=Severity.LOW,
        damage_areas=["Passenger-side door"],
        final_repair_cost=1180,
        repair_duration_days=3,
        short_description="Door ding and paint transfer, paintless repair plus refinish.",
    ),
    ComparableClaimRecord(
        id="HIST-1008",
        vehicle_make="Kia",
        vehicle_model="Sportage",
        severity=Severity.HIGH,
        damage_areas=["Rear bumper", "Quarter panel", "Tail lamp"],
        final_repair_cost=6420,
        repair_duration_days=12,
        short_description="Rear-end collision with quarter panel section replacement.",
    ),
    ComparableClaimRecord(
        id="HIST-1009",
        vehicle_make="Tesla",
        vehicle_model="Model 3",
        severity=Severity.MEDIUM,
        damage_areas=["Front bumper", "Fender"],
        final_repair_cost=3890,
        repair_duration_days=9,
        short_description="Front fender and bumper replacement at certified EV shop.",
    ),
    ComparableClaimRecord(
        id="HIST-1010",
        vehicle_make="Chevrolet",
        vehicle_model="Silverado",
        severity=Severity.MEDIUM,
        damage_areas=["Rear bumper", "Tailgate"],
        final_repair_cost=2780,
        repair_duration_days=6,
        short_description="Rear step bumper and tailgate replaced.",
    ),
    ComparableClaimRecord(
        id="HIST-1011",
        vehicle_make="BMW",
        vehicle_model="X3",
        severity=Severity.HIGH,
        damage_areas=["Front bumper", "Hood", "Windshield"],
        final_repair_cost=8740,
        repair_duration_days=15,
        short_description="Front-end collision with glass replacement and ADAS calibration.",
    ),
    ComparableClaimRecord(
        id="HIST-1012",
        vehicle_make="Mazda",
        vehicle_model="CX-5",
        severity=Severity.LOW,
        damage_areas=["Windshield"],
        final_repair_cost=640,
        repair_duration_days=1,
        short_description="Stone chip spread, windshield replaced.",
    ),
    ComparableClaimRecord(
        id="HIST-1013",
        vehicle_make="Hyundai",
        vehicle_model="Tucson",
        severity=Severity.MEDIUM,
        damage_areas=["Hood", "Front bumper"],
        final_repair_cost=3340,
        repair_duration_days=8,
        short_description="Hood buckle and bumper replacement after low-speed frontal.",
    ),
    ComparableClaimRecord(
        id="HIST-1014",
        vehicle_make="Volkswagen",
        vehicle_model="Jetta",
        severity=Severity.HIGH,
        damage_areas=["Driver-side door", "Quarter panel"],
        final_repair_cost=5960,
        repair_duration_days=11,
        short_description="T-bone impact, door and quarter panel replaced.",
    ),
)
