"""
Vehicle Lookup Agent

Simulated plate and VIN lookups against the demo scenarios. Two identifier
patterns always fail so the retry path can be exercised: plates ending in
"9" and VINs ending in "Z".
"""
import logging
from typing import Optional

from claimdesk.agents.latency import simulate_latency
from claimdesk.core.errors import VehicleLookupError
from claimdesk.core.hashing import hash_string
from claimdesk.core.models import Vehicle
from claimdesk.data.vehicles import DEMO_SCENARIOS, PLATE_INDEX, VIN_INDEX, DemoScenario

logger = logging.getLogger(__name__)


def pick_scenario_by_seed(seed: str) -> DemoScenario:
    return DEMO_SCENARIOS[hash_string(seed) % len(DEMO_SCENARIOS)]


async def lookup_vehicle_by_plate(state: str, plate: str) -> Vehicle:
    state = state.strip().upper()
    plate = plate.strip().upper()
    await simulate_latency(f"plate-{state}-{plate}")

    if plate.endswith("9"):
        logger.warning(f"Plate lookup failed for {state}:{plate}")
        raise VehicleLookupError("Plate lookup failed (simulated). Try VIN.", identifier=plate)

    key = f"{state}:{plate}"
    scenario = PLATE_INDEX.get(key) or pick_scenario_by_seed(key)
    logger.info(f"Plate {key} resolved to {scenario.vehicle.label} ({scenario.id})")
    return scenario.vehicle


async def lookup_vehicle_by_vin(vin: str) -> Vehicle:
    vin = vin.strip().upper()
    await simulate_latency(f"vin-{vin}")

    if vin.endswith("Z"):
        logger.warning(f"VIN lookup failed for {vin}")
        raise VehicleLookupError("VIN lookup failed (simulated).", identifier=vin)

    scenario = VIN_INDEX.get(vin) or pick_scenario_by_seed(vin)
    logger.info(f"VIN {vin} resolved to {scenario.vehicle.label} ({scenario.id})")
    return scenario.vehicle


async def lookup_vehicle(identifier: str, state: Optional[str] = None) -> Vehicle:
    """
    Resolve a vehicle from a plate (when a state is given) or a VIN.

    Args:
        identifier: License plate or VIN
        state: Two-letter registration state for plate lookups

    Returns:
        The matching demo vehicle; unknown identifiers map to a demo
        vehicle chosen by hash

    Raises:
        VehicleLookupError: For the seeded failure identifiers. The error is
            retryable and its message can be shown to the user as is.
    """
    if state:
        return await lookup_vehicle_by_plate(state, identifier)
    return await lookup_vehicle_by_vin(identifier)
