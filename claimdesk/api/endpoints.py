"""
FastAPI Endpoints for the Agent Review Workflow

Provides the REST API used by the agent console: the claim queue, AI
assessments and case files, draft / submit / approve actions, snapshot
import and the simulated vehicle lookups.
"""
import logging
from typing import Any, Dict, List, Optional, Union

from fastapi import APIRouter, Body, Depends, File, HTTPException, Query, Request, UploadFile, status
from pydantic import BaseModel, Field

from claimdesk.agents.tow_dispatch import poll_tow_status
from claimdesk.agents.vehicle_lookup import lookup_vehicle
from claimdesk.agents.vision_agent import PlateExtraction, VinExtraction, extract_plate_and_state, extract_vin
from claimdesk.core.errors import ErrorType, VehicleLookupError
from claimdesk.core.models import AgentDecision, CaseFile, Claim, ClaimCreate, ClaimEvent, Vehicle
from claimdesk.core.states import ClaimStatus, TowStatus
from claimdesk.monitors.process_monitor import ProcessMonitor
from claimdesk.repository.claim_store import ClaimStore
from claimdesk.state_machine.machine import ClaimStateMachine, TransitionResult

logger = logging.getLogger(__name__)

# Initialize routers
router = APIRouter(prefix="/claims", tags=["claims"])
vehicles_router = APIRouter(prefix="/vehicles", tags=["vehicles"])

state_machine = ClaimStateMachine()


def get_store(request: Request) -> ClaimStore:
    return request.app.state.claim_store


def get_monitor(request: Request) -> ProcessMonitor:
    return request.app.state.process_monitor


class ClaimResponse(BaseModel):
    """Response model for claim operations."""
    claim: Claim
    message: str
    next_valid_states: List[ClaimStatus]


class DecisionRequest(BaseModel):
    """Agent decision submitted with a draft save or approval request."""
    decision: AgentDecision = Field(default_factory=AgentDecision)
    notes: Optional[str] = None


class ApproveRequest(BaseModel):
    senior_reviewed: bool = False
    note: str = ""


class PhotoRequestBody(BaseModel):
    checklist: Optional[List[str]] = None


class OpenRequest(BaseModel):
    assignee: Optional[str] = None


class EventCreate(BaseModel):
    type: str = "agent_note"
    message: str = Field(..., min_length=1)


class TowStatusResponse(BaseModel):
    claim_id: str
    tow_id: str
    tow_status: TowStatus


class ImportResponse(BaseModel):
    imported: List[Claim]
    dropped: int
    message: str


def _get_claim_or_404(store: ClaimStore, claim_id: str) -> Claim:
    claim = store.get(claim_id)
    if not claim:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Claim {claim_id} not found"
        )
    return claim


def _respond(store: ClaimStore, result: TransitionResult) -> ClaimResponse:
    """Persist a successful transition, or raise 409 with the advisory message."""
    if not result.ok:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={
                "error_type": result.error_type.value if result.error_type else ErrorType.INVALID_TRANSITION.value,
                "message": result.message,
            },
        )
    claim = store.update(result.claim) or result.claim
    return ClaimResponse(
        claim=claim,
        message=result.message,
        next_valid_states=state_machine.get_valid_transitions(claim),
    )


# ============================================
# QUEUE
# ============================================

@router.get("/dashboard/summary")
async def get_dashboard_summary(store: ClaimStore = Depends(get_store)):
    """Get summary statistics for the agent console."""
    claims = store.list_claims()

    status_counts = {}
    for claim_status in ClaimStatus:
        status_counts[claim_status.value] = sum(1 for c in claims if c.status is claim_status)

    return {
        "total_claims": len(claims),
        "status_counts": status_counts,
        "imported": sum(1 for c in claims if c.read_only_imported),
        "needs_attention": status_counts[ClaimStatus.NEEDS_MORE_PHOTOS.value]
        + status_counts[ClaimStatus.PENDING_APPROVAL.value],
        "claims": [
            {
                "id": c.id,
                "vehicle": c.vehicle.label,
                "status": c.status.value,
                "source": c.source.value,
                "queue_label": c.queue_label,
                "read_only": c.read_only_imported,
                "decision": c.ai_case_file.final_recommendation.decision.value if c.ai_case_file else None,
                "submitted_at": c.submitted_at.isoformat(),
                "last_updated_at": c.last_updated_at.isoformat() if c.last_updated_at else None,
            }
            for c in claims
        ],
    }


@router.get("/", response_model=List[Claim])
async def list_claims(
    status_filter: Optional[ClaimStatus] = Query(default=None, alias="status"),
    store: ClaimStore = Depends(get_store),
) -> List[Claim]:
    """
    List the claim queue, optionally filtered by status.
    """
    return store.list_claims(status_filter)


@router.post("/", response_model=ClaimResponse, status_code=status.HTTP_201_CREATED)
async def create_claim(claim_data: ClaimCreate, store: ClaimStore = Depends(get_store)) -> ClaimResponse:
    """
    Create a claim from intake data.

    The claim starts in NEW status at the top of the agent queue.
    """
    claim = store.create_claim(claim_data)
    logger.info(f"Created new claim {claim.id} for {claim.vehicle.label}")

    return ClaimResponse(
        claim=claim,
        message=f"Claim created successfully with ID {claim.id}",
        next_valid_states=state_machine.get_valid_transitions(claim),
    )


@router.post("/import", response_model=ImportResponse)
async def import_snapshot(
    snapshot: Union[List[Dict[str, Any]], Dict[str, Any]] = Body(...),
    store: ClaimStore = Depends(get_store),
) -> ImportResponse:
    """
    Import customer-flow claims as read-only records.

    Records missing an id, vehicle or submission time are dropped.
    """
    records = snapshot if isinstance(snapshot, list) else [snapshot]
    imported = store.import_snapshot(records)
    dropped = len(records) - len(imported)
    return ImportResponse(
        imported=imported,
        dropped=dropped,
        message=f"Imported {len(imported)} claim(s); dropped {dropped}.",
    )


@router.post("/reset-demo", response_model=List[Claim])
async def reset_demo(store: ClaimStore = Depends(get_store)) -> List[Claim]:
    """Restore the seeded demo queue."""
    return store.reset_demo()


@router.get("/{claim_id}", response_model=ClaimResponse)
async def get_claim(claim_id: str, store: ClaimStore = Depends(get_store)) -> ClaimResponse:
    """
    Get details of a specific claim.
    """
    claim = _get_claim_or_404(store, claim_id)
    return ClaimResponse(
        claim=claim,
        message=f"Claim {claim_id} retrieved",
        next_valid_states=state_machine.get_valid_transitions(claim),
    )


@router.get("/{claim_id}/events", response_model=List[ClaimEvent])
async def get_claim_events(claim_id: str, store: ClaimStore = Depends(get_store)) -> List[ClaimEvent]:
    """
    Get the timeline of a claim, oldest first.
    """
    return _get_claim_or_404(store, claim_id).events


@router.post("/{claim_id}/events", response_model=List[ClaimEvent], status_code=status.HTTP_201_CREATED)
async def add_claim_event(
    claim_id: str,
    event: EventCreate,
    store: ClaimStore = Depends(get_store),
) -> List[ClaimEvent]:
    """Append an agent note to the timeline."""
    claim = _get_claim_or_404(store, claim_id)
    if claim.read_only_imported:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"error_type": ErrorType.READ_ONLY_CLAIM.value, "message": "Imported claims are read-only."},
        )
    updated = store.append_event(claim_id, event.type, event.message)
    return updated.events if updated else claim.events


# ============================================
# AI ASSESSMENT
# ============================================

@router.post("/{claim_id}/assess", response_model=ClaimResponse)
async def assess_claim(
    claim_id: str,
    store: ClaimStore = Depends(get_store),
    monitor: ProcessMonitor = Depends(get_monitor),
) -> ClaimResponse:
    """
    Run the AI pipeline for a claim and store the new case file.

    A confidence below 60% moves the claim to NEEDS_MORE_PHOTOS.
    """
    _get_claim_or_404(store, claim_id)

    result = await monitor.run_assessment(claim_id)
    if result is None:
        claim = _get_claim_or_404(store, claim_id)
        return ClaimResponse(
            claim=claim,
            message="Assessment superseded by a newer request.",
            next_valid_states=state_machine.get_valid_transitions(claim),
        )
    if not result.ok:
        return _respond(store, result)

    return ClaimResponse(
        claim=result.claim,
        message=result.message,
        next_valid_states=state_machine.get_valid_transitions(result.claim),
    )


@router.get("/{claim_id}/case-file", response_model=CaseFile)
async def get_case_file(claim_id: str, store: ClaimStore = Depends(get_store)) -> CaseFile:
    """
    Get the latest case file of a claim.
    """
    claim = _get_claim_or_404(store, claim_id)
    if claim.ai_case_file is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Claim {claim_id} has not been assessed yet"
        )
    return claim.ai_case_file


# ============================================
# AGENT ACTIONS
# ============================================

@router.post("/{claim_id}/open", response_model=ClaimResponse)
async def open_claim(
    claim_id: str,
    request: Optional[OpenRequest] = None,
    store: ClaimStore = Depends(get_store),
) -> ClaimResponse:
    claim = _get_claim_or_404(store, claim_id)
    return _respond(store, state_machine.open_claim(claim, request.assignee if request else None))


@router.post("/{claim_id}/draft", response_model=ClaimResponse)
async def save_draft(
    claim_id: str,
    request: DecisionRequest,
    store: ClaimStore = Depends(get_store),
) -> ClaimResponse:
    """
    Save the agent's draft decision.

    Blocked while any overridden field lacks a reason.
    """
    claim = _get_claim_or_404(store, claim_id)
    return _respond(store, state_machine.save_draft(claim, request.decision, request.notes))


@router.post("/{claim_id}/submit", response_model=ClaimResponse)
async def submit_for_approval(
    claim_id: str,
    request: DecisionRequest,
    store: ClaimStore = Depends(get_store),
) -> ClaimResponse:
    """
    Submit an In Review claim for senior approval.
    """
    claim = _get_claim_or_404(store, claim_id)
    return _respond(store, state_machine.submit_for_approval(claim, request.decision, request.notes))


@router.post("/{claim_id}/approve", response_model=ClaimResponse)
async def approve_claim(
    claim_id: str,
    request: ApproveRequest,
    store: ClaimStore = Depends(get_store),
) -> ClaimResponse:
    """
    Senior approval of a Pending Approval claim.

    The senior-review checkbox must be set; the claim becomes AUTHORIZED.
    """
    claim = _get_claim_or_404(store, claim_id)
    return _respond(store, state_machine.approve(claim, request.senior_reviewed, request.note))


@router.post("/{claim_id}/request-photos", response_model=ClaimResponse)
async def request_photos(
    claim_id: str,
    request: Optional[PhotoRequestBody] = None,
    store: ClaimStore = Depends(get_store),
) -> ClaimResponse:
    claim = _get_claim_or_404(store, claim_id)
    checklist = request.checklist if request else None
    return _respond(store, state_machine.request_photos(claim, checklist))


@router.post("/{claim_id}/tow-status", response_model=TowStatusResponse)
async def refresh_tow_status(claim_id: str, store: ClaimStore = Depends(get_store)) -> TowStatusResponse:
    """
    Poll the tow dispatcher and record the tow's next stage.
    """
    claim = _get_claim_or_404(store, claim_id)
    incident = claim.incident
    if incident is None or not incident.tow_requested:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Claim {claim_id} has no tow request"
        )
    if claim.read_only_imported:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"error_type": ErrorType.READ_ONLY_CLAIM.value, "message": "Imported claims are read-only."},
        )

    tow_id = incident.tow_id or claim.id
    tow_status = await poll_tow_status(tow_id, incident.tow_status)
    store.record_tow_status(claim_id, tow_status)
    return TowStatusResponse(claim_id=claim_id, tow_id=tow_id, tow_status=tow_status)


# ============================================
# VEHICLE LOOKUP / EXTRACTION
# ============================================

@vehicles_router.get("/lookup", response_model=Vehicle)
async def lookup(identifier: str, state: Optional[str] = None) -> Vehicle:
    """
    Look up a vehicle by plate (with ``state``) or by VIN.

    Seeded failures answer 404 with ``retryable: true``.
    """
    try:
        return await lookup_vehicle(identifier, state)
    except VehicleLookupError as e:
        hint = "Try a VIN lookup instead." if state else "Check the VIN and try again."
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.to_dict(hint=hint))


@vehicles_router.post("/extract-plate", response_model=PlateExtraction)
async def extract_plate(image: UploadFile = File(..., description="Photo of the license plate")) -> PlateExtraction:
    return await extract_plate_and_state(image.filename or "")


@vehicles_router.post("/extract-vin", response_model=VinExtraction)
async def extract_vin_from_image(image: UploadFile = File(..., description="Photo of the VIN plate")) -> VinExtraction:
    return await extract_vin(image.filename or "")
