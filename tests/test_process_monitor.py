"""
Tests for the process monitor and its request-sequence guard.
"""
import asyncio

import pytest

from claimdesk.agents.orchestrator import CaseFileOrchestrator
from claimdesk.monitors.process_monitor import ProcessMonitor, RequestSequenceGuard


class GatedOrchestrator(CaseFileOrchestrator):
    """Holds the first request until released."""

    def __init__(self):
        self.calls = 0
        self.release = asyncio.Event()

    async def generate_bundle(self, claim):
        self.calls += 1
        if self.calls == 1:
            await self.release.wait()
        return await super().generate_bundle(claim)


class TestRequestSequenceGuard:
    def test_latest_token_is_current(self):
        guard = RequestSequenceGuard()
        first = guard.issue("CLM-1")
        second = guard.issue("CLM-1")
        assert not guard.is_current("CLM-1", first)
        assert guard.is_current("CLM-1", second)

    def test_slots_are_independent(self):
        guard = RequestSequenceGuard()
        token = guard.issue("CLM-1")
        guard.issue("CLM-2")
        assert guard.is_current("CLM-1", token)
        assert not guard.is_current("CLM-3", 1)


class TestProcessMonitor:
    @pytest.mark.asyncio
    async def test_assessment_is_stored(self, store):
        monitor = ProcessMonitor(store)

        result = await monitor.run_assessment("CLM-210301")

        assert result.ok
        stored = store.get("CLM-210301")
        assert stored.ai_case_file is not None
        assert stored.ai_assessment == result.claim.ai_assessment
        assert stored.events[-1].type == "ai_assessment_completed"

    @pytest.mark.asyncio
    async def test_unknown_claim(self, store):
        assert await ProcessMonitor(store).run_assessment("CLM-NOPE") is None

    @pytest.mark.asyncio
    async def test_superseded_result_is_discarded(self, store):
        gated = GatedOrchestrator()
        monitor = ProcessMonitor(store, orchestrator=gated)

        first = asyncio.create_task(monitor.run_assessment("CLM-210301"))
        await asyncio.sleep(0)
        second_result = await monitor.run_assessment("CLM-210301")
        gated.release.set()
        first_result = await first

        assert first_result is None
        assert second_result.ok
        events = [e.type for e in store.get("CLM-210301").events]
        assert events.count("ai_assessment_completed") == 1

    @pytest.mark.asyncio
    async def test_authorized_claim_is_not_reassessed(self, store):
        result = await ProcessMonitor(store).run_assessment("CLM-210303")
        assert not result.ok
        assert store.get("CLM-210303").ai_case_file is None
