"""
Vision Agent Module

Simulated plate / VIN extraction from an uploaded image. No image is read:
the result is derived from the file name, so the same upload always yields
the same extraction.
"""
import logging
from typing import Optional

from pydantic import BaseModel

from claimdesk.agents.latency import simulate_latency
from claimdesk.core.hashing import hash_string
from claimdesk.data.vehicles import DEMO_SCENARIOS

logger = logging.getLogger(__name__)

FALLBACK_PLATE = "7ABC123"
FALLBACK_STATE = "CA"
FALLBACK_VIN = "1HGCM82633A123456"


class PlateExtraction(BaseModel):
    """Structured result from plate extraction."""
    plate: str
    state: Optional[str] = None
    confidence: float
    notes: str


class VinExtraction(BaseModel):
    """Structured result from VIN extraction."""
    vin: str
    confidence: float
    notes: str


def build_extraction_notes(confidence: float, blurry: bool) -> str:
    if blurry or confidence <= 0.55:
        return "Low image quality detected. Confirm manually."
    if confidence < 0.75:
        return "Some characters may be ambiguous. Confirm before lookup."
    return "Extraction appears clear. Confirm before lookup."


async def extract_plate_and_state(image_name: str) -> PlateExtraction:
    """
    Extract a license plate and registration state from an image.

    Args:
        image_name: Uploaded file name

    Returns:
        PlateExtraction; names containing "plate" read clearly, names
        containing "blurry" read poorly
    """
    await simulate_latency(f"extract-plate-{image_name}")

    name = image_name.lower()
    blurry = "blurry" in name
    confidence = 0.52 if blurry else 0.86 if "plate" in name else 0.55

    candidates = [scenario for scenario in DEMO_SCENARIOS if scenario.plate]
    if candidates:
        scenario = candidates[hash_string(image_name) % len(candidates)]
        plate, state = scenario.plate, scenario.state
    else:
        plate, state = FALLBACK_PLATE, FALLBACK_STATE

    result = PlateExtraction(
        plate=plate,
        state=state,
        confidence=confidence,
        notes=build_extraction_notes(confidence, blurry),
    )
    logger.info(f"Plate extraction for '{image_name}': {result.state}:{result.plate} ({confidence:.2f})")
    return result


async def extract_vin(image_name: str) -> VinExtraction:
    """Extract a VIN from an image; names containing "vin" read clearly."""
    await simulate_latency(f"extract-vin-{image_name}")

    name = image_name.lower()
    blurry = "blurry" in name
    confidence = 0.50 if blurry else 0.88 if "vin" in name else 0.55

    candidates = [scenario for scenario in DEMO_SCENARIOS if scenario.vin]
    vin = candidates[hash_string(image_name) % len(candidates)].vin if candidates else FALLBACK_VIN

    result = VinExtraction(
        vin=vin,
        confidence=confidence,
        notes=build_extraction_notes(confidence, blurry),
    )
    logger.info(f"VIN extraction for '{image_name}': {result.vin} ({confidence:.2f})")
    return result
