"""
Tests for the simulated vehicle lookups and plate / VIN extraction.
"""
import pytest

from claimdesk.agents.latency import lookup_delay_ms
from claimdesk.agents.vehicle_lookup import lookup_vehicle, lookup_vehicle_by_plate, lookup_vehicle_by_vin
from claimdesk.agents.vision_agent import build_extraction_notes, extract_plate_and_state, extract_vin
from claimdesk.core.errors import ErrorType, VehicleLookupError
from claimdesk.data.vehicles import DEMO_SCENARIOS, get_scenario

DEMO_VEHICLES = [scenario.vehicle for scenario in DEMO_SCENARIOS]


class TestPlateLookup:
    @pytest.mark.asyncio
    async def test_known_plate(self):
        vehicle = await lookup_vehicle_by_plate("ca", " 7abc123 ")
        assert (vehicle.make, vehicle.model, vehicle.year) == ("Toyota", "Camry", 2018)

    @pytest.mark.asyncio
    async def test_plate_ending_in_nine_fails(self):
        with pytest.raises(VehicleLookupError) as exc_info:
            await lookup_vehicle_by_plate("CA", "5XYZ129")
        error = exc_info.value
        assert error.message == "Plate lookup failed (simulated). Try VIN."
        assert error.retryable
        assert error.to_dict(hint="Try VIN")["error_type"] == ErrorType.LOOKUP_FAILED.value

    @pytest.mark.asyncio
    async def test_unknown_plate_is_stable(self):
        first = await lookup_vehicle_by_plate("NV", "1NEW234")
        second = await lookup_vehicle_by_plate("NV", "1NEW234")
        assert first == second
        assert first in DEMO_VEHICLES


class TestVinLookup:
    @pytest.mark.asyncio
    async def test_known_vin(self):
        vehicle = await lookup_vehicle_by_vin("7sayGDEE8PF456789")
        assert vehicle.model == "Model Y"

    @pytest.mark.asyncio
    async def test_vin_ending_in_z_fails(self):
        with pytest.raises(VehicleLookupError, match="VIN lookup failed"):
            await lookup_vehicle_by_vin("1HGCM82633A12345Z")

    @pytest.mark.asyncio
    async def test_dispatch(self):
        by_plate = await lookup_vehicle("8HJK542", state="WA")
        by_vin = await lookup_vehicle("1FTEW1EP1HFA98765")
        assert by_plate.model == "CR-V"
        assert by_vin.model == "F-150"


class TestExtraction:
    @pytest.mark.asyncio
    async def test_clear_plate_photo(self):
        result = await extract_plate_and_state("rear-plate.jpg")
        assert result.confidence == pytest.approx(0.86)
        assert result.notes == "Extraction appears clear. Confirm before lookup."
        assert (result.plate, result.state) in {(s.plate, s.state) for s in DEMO_SCENARIOS}

    @pytest.mark.asyncio
    async def test_blurry_plate_photo(self):
        result = await extract_plate_and_state("blurry-plate.jpg")
        assert result.confidence == pytest.approx(0.52)
        assert result.notes.startswith("Low image quality")

    @pytest.mark.asyncio
    async def test_generic_photo(self):
        result = await extract_plate_and_state("IMG_0042.jpg")
        assert result.confidence == pytest.approx(0.55)

    @pytest.mark.asyncio
    async def test_vin_photo(self):
        clear = await extract_vin("dash-vin.png")
        blurry = await extract_vin("blurry.png")
        assert clear.confidence == pytest.approx(0.88)
        assert blurry.confidence == pytest.approx(0.50)
        assert clear.vin in {s.vin for s in DEMO_SCENARIOS}

    @pytest.mark.asyncio
    async def test_same_file_same_result(self):
        assert await extract_vin("vin-1.jpg") == await extract_vin("vin-1.jpg")

    def test_notes_for_middling_confidence(self):
        assert build_extraction_notes(0.7, blurry=False).startswith("Some characters may be ambiguous")


class TestScenarios:
    def test_get_scenario_falls_back_to_first(self):
        assert get_scenario("scenario-c").policy.deductible == 2000
        assert get_scenario("nope").id == "scenario-a"

    def test_lookup_delay_range(self):
        for key in ("plate-CA-7ABC123", "vin-X", ""):
            assert 250 <= lookup_delay_ms(key) <= 600
