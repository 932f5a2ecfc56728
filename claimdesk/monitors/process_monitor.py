"""
Process Monitor

Runs the case-file pipeline for claims and applies the results through the
state machine. A request-sequence guard drops results that were superseded
by a newer request for the same claim while they were in flight.
"""
import logging
from typing import Dict, Optional

from claimdesk.agents.orchestrator import CaseFileOrchestrator, orchestrator as default_orchestrator
from claimdesk.repository.claim_store import ClaimStore
from claimdesk.state_machine.machine import ClaimStateMachine, TransitionResult

logger = logging.getLogger(__name__)


class RequestSequenceGuard:
    """
    Issues increasing tokens per slot.

    A result is current only while its token is the latest one issued for
    its slot; there is no cancellation, stale results are just ignored.
    """

    def __init__(self):
        self._latest: Dict[str, int] = {}

    def issue(self, slot: str) -> int:
        token = self._latest.get(slot, 0) + 1
        self._latest[slot] = token
        return token

    def is_current(self, slot: str, token: int) -> bool:
        return self._latest.get(slot) == token


class ProcessMonitor:
    """
    Runs assessments for claims held in a ClaimStore.

    When two assessments for one claim overlap, only the most recently
    requested one is applied.
    """

    def __init__(
        self,
        store: ClaimStore,
        state_machine: Optional[ClaimStateMachine] = None,
        orchestrator: Optional[CaseFileOrchestrator] = None,
    ):
        """
        Initialize the process monitor.

        Args:
            store: Owner of the claim records
            state_machine: The state machine to apply results with
            orchestrator: Case file pipeline to run
        """
        self.store = store
        self.state_machine = state_machine or ClaimStateMachine()
        self.orchestrator = orchestrator or default_orchestrator
        self.guard = RequestSequenceGuard()

    async def run_assessment(self, claim_id: str) -> Optional[TransitionResult]:
        """
        Assess a claim and persist the outcome.

        Args:
            claim_id: Claim to assess

        Returns:
            The transition result; None when the claim does not exist or
            the result was superseded by a newer request
        """
        claim = self.store.get(claim_id)
        if claim is None:
            logger.warning(f"Assessment requested for unknown claim {claim_id}")
            return None

        token = self.guard.issue(claim_id)
        logger.info(f"Claim {claim_id} assessment requested (request #{token})")

        bundle = await self.orchestrator.generate_bundle(claim)

        if not self.guard.is_current(claim_id, token):
            logger.info(f"Discarding superseded assessment #{token} for claim {claim_id}")
            return None

        # Re-read: the record may have changed while the pipeline ran
        latest = self.store.get(claim_id) or claim
        result = self.state_machine.apply_assessment(latest, bundle.assessment, bundle.case_file)
        if result.ok:
            stored = self.store.update(result.claim)
            if stored is not None:
                result = result.model_copy(update={"claim": stored})
        return result
