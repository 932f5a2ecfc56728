# Agents module
from .assessment_agent import assess_claim, build_assessment_seed, generate_assessment
from .comparables import find_comparable_claims
from .evaluator import evaluate_signals
from .line_items import generate_line_items, sum_line_items
from .orchestrator import CaseFileBundle, CaseFileOrchestrator, synthesize_case_file
from .repair_time import estimate_repair_time, recommend_rental_days
from .tow_dispatch import next_tow_status, poll_tow_status
from .vehicle_lookup import lookup_vehicle
from .vision_agent import PlateExtraction, VinExtraction, extract_plate_and_state, extract_vin

__all__ = [
    "assess_claim",
    "build_assessment_seed",
    "generate_assessment",
    "find_comparable_claims",
    "evaluate_signals",
    "generate_line_items",
    "sum_line_items",
    "CaseFileBundle",
    "CaseFileOrchestrator",
    "synthesize_case_file",
    "estimate_repair_time",
    "recommend_rental_days",
    "next_tow_status",
    "poll_tow_status",
    "lookup_vehicle",
    "PlateExtraction",
    "VinExtraction",
    "extract_plate_and_state",
    "extract_vin",
]
