"""
Tests for the comparable-claims matcher.
"""
from claimdesk.agents.comparables import (
    ComparableClaimQuery,
    find_comparable_claims,
    infer_vehicle_type,
    normalize_damage_areas,
    score_candidate,
    typical_cost_range,
)
from claimdesk.core.models import ComparableClaimRecord
from claimdesk.core.states import Severity


def _record(record_id, make="Acme", model="Roadster", severity=Severity.LOW, areas=None, cost=1000):
    return ComparableClaimRecord(
        id=record_id,
        vehicle_make=make,
        vehicle_model=model,
        severity=severity,
        damage_areas=areas or ["Hood"],
        final_repair_cost=cost,
        repair_duration_days=4,
        short_description="test record",
    )


CAMRY_QUERY = ComparableClaimQuery(
    vehicle_make="Toyota",
    vehicle_model="Camry",
    severity=Severity.LOW,
    damage_areas=["Front bumper"],
)


class TestNormalization:
    def test_damage_area_tokens(self):
        assert normalize_damage_areas(["Front bumper", "Rear quarter panel"]) == [
            "front", "bumper", "rear", "fender",
        ]

    def test_unknown_area_kept_lowercase(self):
        assert normalize_damage_areas(["Tailgate"]) == ["tailgate"]

    def test_vehicle_type(self):
        assert infer_vehicle_type("Ford", "F-150") == "truck"
        assert infer_vehicle_type("Subaru", "Outback") == "wagon"
        assert infer_vehicle_type("Toyota", "RAV4") == "suv"
        assert infer_vehicle_type("Toyota", "Camry") == "sedan"


class TestScoring:
    def test_score_components(self):
        match = score_candidate(CAMRY_QUERY, _record("X", make="Toyota", areas=["Front bumper"]))
        # severity 2 + overlap 2 + make 1
        assert match.score == 5
        assert match.overlap_areas == ["front", "bumper"]

    def test_best_match_first(self):
        matches = find_comparable_claims(CAMRY_QUERY, limit=3)
        assert [m.id for m in matches] == ["HIST-1001", "HIST-1002", "HIST-1003"]

    def test_ties_prefer_cheaper_claim(self):
        matches = find_comparable_claims(CAMRY_QUERY, limit=5)
        assert [m.id for m in matches] == ["HIST-1001", "HIST-1002", "HIST-1003", "HIST-1009", "HIST-1012"]

    def test_sorted_by_score(self):
        matches = find_comparable_claims(CAMRY_QUERY, limit=5)
        scores = [m.score for m in matches]
        assert scores == sorted(scores, reverse=True)


class TestResultSize:
    def test_limit_clipped_to_three_and_five(self):
        assert len(find_comparable_claims(CAMRY_QUERY, limit=1)) == 3
        assert len(find_comparable_claims(CAMRY_QUERY, limit=10)) == 5

    def test_zero_scores_dropped(self):
        catalog = [
            _record("A", severity=Severity.LOW, cost=900),
            _record("B", severity=Severity.LOW, cost=800),
            _record("C", make="Ford", model="F-150", severity=Severity.HIGH, areas=["Tailgate"]),
        ]
        query = ComparableClaimQuery(
            vehicle_make="Honda",
            vehicle_model="CR-V SUV",
            severity=Severity.LOW,
            damage_areas=["Windshield"],
        )
        matches = find_comparable_claims(query, catalog=catalog)
        assert [m.id for m in matches] == ["B", "A"]

    def test_accepts_dict_query(self):
        matches = find_comparable_claims(CAMRY_QUERY.model_dump())
        assert matches[0].id == "HIST-1001"


class TestTypicalCostRange:
    def test_min_max(self):
        matches = find_comparable_claims(CAMRY_QUERY, limit=3)
        assert typical_cost_range(matches) == (860, 2650)

    def test_empty(self):
        assert typical_cost_range([]) is None
