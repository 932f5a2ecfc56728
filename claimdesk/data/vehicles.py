"""
Demo policy / vehicle scenarios served by the simulated lookups.
"""
from typing import Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from claimdesk.core.models import PolicySnapshot, Vehicle
from claimdesk.core.states import CoverageType


class DemoScenario(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    label: str
    policy: PolicySnapshot
    plate: Optional[str] = None
    state: Optional[str] = None
    vin: Optional[str] = None
    vehicle: Vehicle


DEMO_SCENARIOS: Tuple[DemoScenario, ...] = (
    DemoScenario(
        id="scenario-a",
        label="A: $500 deductible / 2018 Toyota Camry (Sedan)",
        policy=PolicySnapshot(
            policy_id="POL-500-A",
            insured_name="Jordan Smith",
            coverage=CoverageType.COLLISION,
            deductible=500,
            rental_coverage=True,
        ),
        plate="7ABC123",
        state="CA",
        vin="4T1BF1FK2JU123456",
        vehicle=Vehicle(year=2018, make="Toyota", model="Camry", body_type="Sedan", estimated_value=18000),
    ),
    DemoScenario(
        id="scenario-b",
        label="B: $1000 deductible / 2021 Honda CR-V (SUV)",
        policy=PolicySnapshot(
            policy_id="POL-1000-B",
            insured_name="Morgan Lee",
            coverage=CoverageType.COLLISION,
            deductible=1000,
            rental_coverage=False,
        ),
        plate="8HJK542",
        state="WA",
        vin="2HKRW2H55MH654321",
        vehicle=Vehicle(year=2021, make="Honda", model="CR-V", body_type="SUV", estimated_value=28000),
    ),
    DemoScenario(
        id="scenario-c",
        label="C: $2000 deductible / 2023 Tesla Model Y (EV)",
        policy=PolicySnapshot(
            policy_id="POL-2000-C",
            insured_name="Avery Chen",
            coverage=CoverageType.COMPREHENSIVE,
            deductible=2000,
            rental_coverage=True,
        ),
        plate="9TES123",
        state="CA",
        vin="7SAYGDEE8PF456789",
        vehicle=Vehicle(year=2023, make="Tesla", model="Model Y", body_type="EV", estimated_value=38000),
    ),
    DemoScenario(
        id="scenario-d",
        label="D: $1000 deductible / 2017 Ford F-150 (Truck)",
        policy=PolicySnapshot(
            policy_id="POL-1000-D",
            insured_name="Riley Johnson",
            coverage=CoverageType.COLLISION,
            deductible=1000,
            rental_coverage=True,
        ),
        plate="6TRK777",
        state="TX",
        vin="1FTEW1EP1HFA98765",
        vehicle=Vehicle(year=2017, make="Ford", model="F-150", body_type="Truck", estimated_value=24000),
    ),
)

# "STATE:PLATE" -> scenario
PLATE_INDEX: Dict[str, DemoScenario] = {
    f"{scenario.state}:{scenario.plate}": scenario
    for scenario in DEMO_SCENARIOS
    if scenario.plate and scenario.state
}

VIN_INDEX: Dict[str, DemoScenario] = {
    scenario.vin: scenario for scenario in DEMO_SCENARIOS if scenario.vin
}


def get_scenario(scenario_id: str) -> DemoScenario:
    """Scenario by id, falling back to the first one."""
    for scenario in DEMO_SCENARIOS:
        if scenario.id == scenario_id:
            return scenario
    return DEMO_SCENARIOS[0]
