"""
Comparable-Claims Matcher

Scores the historical claims catalog against the current claim's severity,
damage-area and vehicle-type signature.
"""
import logging
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from pydantic import BaseModel, Field

from claimdesk.core.models import ComparableClaimMatch, ComparableClaimRecord
from claimdesk.core.states import Severity
from claimdesk.data.comparable_claims import COMPARABLE_CLAIMS

logger = logging.getLogger(__name__)

MIN_RESULTS = 3
MAX_RESULTS = 5

SEVERITY_MATCH_POINTS = 2
VEHICLE_MATCH_POINTS = 1

_AREA_TOKENS = (
    ("front", ("front",)),
    ("rear", ("rear",)),
    ("bumper", ("bumper",)),
    ("door", ("door",)),
    ("fender", ("fender", "quarter")),
    ("hood", ("hood",)),
    ("headlight", ("headlight", "lamp")),
    ("windshield", ("windshield", "glass")),
)

_TRUCK_KEYWORDS = ("f-150", "silverado", "ram", "tacoma")
_WAGON_KEYWORDS = ("outback", "wagon")
_SUV_KEYWORDS = (
    "rav4", "sportage", "x3", "cx-5", "escape", "tucson", "rogue", "suv", "wrangler",
)


class ComparableClaimQuery(BaseModel):
    """Signature of the claim being matched."""
    vehicle_make: str
    vehicle_model: str
    severity: Severity
    damage_areas: List[str] = Field(default_factory=list)


def normalize_damage_area(value: str) -> List[str]:
    """Map a free-text damage area onto the canonical token set."""
    lower = value.lower()
    tokens = [token for token, needles in _AREA_TOKENS if any(n in lower for n in needles)]
    if not tokens:
        tokens.append(lower.strip())
    return tokens


def normalize_damage_areas(areas: Iterable[str]) -> List[str]:
    tokens: List[str] = []
    for area in areas:
        for token in normalize_damage_area(area):
            if token and token not in tokens:
                tokens.append(token)
    return tokens


def infer_vehicle_type(make: str, model: str) -> str:
    value = f"{make} {model}".lower()
    if any(keyword in value for keyword in _TRUCK_KEYWORDS):
        return "truck"
    if any(keyword in value for keyword in _WAGON_KEYWORDS):
        return "wagon"
    if any(keyword in value for keyword in _SUV_KEYWORDS):
        return "suv"
    return "sedan"


def score_candidate(
    query: ComparableClaimQuery,
    candidate: ComparableClaimRecord,
) -> ComparableClaimMatch:
    query_areas = set(normalize_damage_areas(query.damage_areas))
    query_type = infer_vehicle_type(query.vehicle_make, query.vehicle_model)
    query_make = query.vehicle_make.strip().lower()

    score = 0
    if candidate.severity == query.severity:
        score += SEVERITY_MATCH_POINTS

    overlap = [area for area in normalize_damage_areas(candidate.damage_areas) if area in query_areas]
    score += len(overlap)

    candidate_make = candidate.vehicle_make.strip().lower()
    candidate_type = infer_vehicle_type(candidate.vehicle_make, candidate.vehicle_model)
    if candidate_make == query_make or candidate_type == query_type:
        score += VEHICLE_MATCH_POINTS

    return ComparableClaimMatch(**candidate.model_dump(), score=score, overlap_areas=overlap)


def find_comparable_claims(
    query: Union[ComparableClaimQuery, dict],
    limit: int = MAX_RESULTS,
    catalog: Sequence[ComparableClaimRecord] = COMPARABLE_CLAIMS,
) -> List[ComparableClaimMatch]:
    """
    Rank catalog claims by similarity to the query.

    Candidates scoring zero are dropped. Ties on score go to the cheaper
    final repair cost. The result holds between 3 and 5 matches (``limit``
    is clipped into that band) unless fewer candidates scored.
    """
    if isinstance(query, dict):
        query = ComparableClaimQuery(**query)

    matches = [score_candidate(query, candidate) for candidate in catalog]
    matches = [match for match in matches if match.score > 0]
    matches.sort(key=lambda match: (-match.score, match.final_repair_cost))

    size = max(MIN_RESULTS, min(MAX_RESULTS, limit))
    result = matches[:size]
    logger.debug(
        f"Comparable claims for {query.vehicle_make} {query.vehicle_model} "
        f"({query.severity.value}): {[m.id for m in result]}"
    )
    return result


def typical_cost_range(matches: Sequence[ComparableClaimMatch]) -> Optional[Tuple[int, int]]:
    if not matches:
        return None
    costs = [match.final_repair_cost for match in matches]
    return min(costs), max(costs)
