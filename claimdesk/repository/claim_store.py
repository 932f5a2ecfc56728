"""
Claim Store

Repository implementations plus the session-scoped store that owns the
claim queue. The decision core never touches storage directly; the API
and the process monitor go through a ``ClaimStore``.

Storage is prototype-grade: read failures fall back to the seeded demo
queue and write failures are logged and dropped.
"""
import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

from pydantic import ValidationError

from claimdesk.config import Settings, get_settings
from claimdesk.core.errors import ErrorType
from claimdesk.core.hashing import hash_string
from claimdesk.core.models import Claim, ClaimCreate, ClaimEvent, IncidentDetails, utc_now
from claimdesk.core.states import ClaimSource, ClaimStatus, TowStatus
from claimdesk.data.seed_claims import default_claims

logger = logging.getLogger(__name__)

IMPORTED_QUEUE_LABEL = "Most Recent Submission"
REQUIRED_IMPORT_FIELDS = ("id", "vehicle", "submitted_at")


class ClaimRepository(ABC):
    """Persistence interface for the claim queue."""

    @abstractmethod
    def load(self) -> List[Claim]:
        """Return the stored claims, or the seeded queue when there are none."""

    @abstractmethod
    def save(self, claims: List[Claim]) -> None:
        """Replace the stored queue."""

    def append_event(self, claim_id: str, event: ClaimEvent) -> None:
        """Append an event to one claim. Imported and unknown claims are skipped."""
        claims = self.load()
        changed = False
        for claim in claims:
            if claim.id != claim_id or claim.read_only_imported:
                continue
            if any(existing.id == event.id for existing in claim.events):
                return
            claim.events.append(event)
            claim.touch(event.at)
            changed = True
        if changed:
            self.save(claims)


class InMemoryClaimRepository(ClaimRepository):
    """Keeps serialized claims in process memory."""

    def __init__(self, claims: Optional[Iterable[Claim]] = None):
        self._records: List[Dict[str, Any]] = [claim.model_dump(mode="json") for claim in claims or []]

    def load(self) -> List[Claim]:
        if not self._records:
            claims = default_claims()
            self.save(claims)
            return claims
        return [Claim.model_validate(record) for record in self._records]

    def save(self, claims: List[Claim]) -> None:
        self._records = [claim.model_dump(mode="json") for claim in claims]


class JsonFileClaimRepository(ClaimRepository):
    """Stores the queue as a JSON array in a local file."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def _read_records(self) -> List[Any]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return []
        except OSError as e:
            logger.warning(f"[{ErrorType.STORAGE_FAILED.value}] Could not read {self.path}: {e}")
            return []

        if not raw.strip():
            return []
        try:
            data = json.loads(raw)
        except ValueError as e:
            logger.warning(f"[{ErrorType.STORAGE_FAILED.value}] Corrupt claim store {self.path}: {e}")
            return []
        if not isinstance(data, list):
            logger.warning(f"[{ErrorType.STORAGE_FAILED.value}] Claim store {self.path} is not a list")
            return []
        return data

    def load(self) -> List[Claim]:
        claims = []
        for record in self._read_records():
            try:
                claims.append(Claim.model_validate(record))
            except ValidationError as e:
                logger.warning(
                    f"[{ErrorType.VALIDATION_FAILED.value}] Dropping unreadable stored claim: "
                    f"{e.error_count()} validation errors"
                )

        if not claims:
            claims = default_claims()
            self.save(claims)
        return claims

    def save(self, claims: List[Claim]) -> None:
        payload = json.dumps([claim.model_dump(mode="json") for claim in claims], indent=2)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(payload, encoding="utf-8")
        except OSError as e:
            logger.warning(f"[{ErrorType.STORAGE_FAILED.value}] Could not write {self.path}: {e}")


def normalize_imported_claim(value: Any) -> Optional[Claim]:
    """
    Turn one snapshot record into a read-only imported claim.

    Records missing an id, a vehicle or a submission time are dropped, as
    are records that fail validation.
    """
    if not isinstance(value, dict):
        return None
    if any(not value.get(field) for field in REQUIRED_IMPORT_FIELDS):
        return None

    record = dict(value)
    record.update(
        source=ClaimSource.CUSTOMER_FLOW,
        queue_label=IMPORTED_QUEUE_LABEL,
        read_only_imported=True,
        assignee=None,
    )
    if not record.get("status"):
        record["status"] = ClaimStatus.NEW
    if not isinstance(record.get("photos"), list):
        record["photos"] = []

    try:
        claim = Claim.model_validate(record)
    except ValidationError as e:
        logger.warning(
            f"[{ErrorType.VALIDATION_FAILED.value}] Dropping imported claim {value.get('id')}: "
            f"{e.error_count()} validation errors"
        )
        return None

    if not isinstance(value.get("events"), list):
        claim.events = [
            ClaimEvent(
                id=f"{claim.id}-imported",
                at=claim.submitted_at,
                type="claim_imported",
                message="Imported from customer workflow snapshot.",
            )
        ]
    return claim


class ClaimStore:
    """
    Session-scoped owner of the claim queue.

    All writes are whole-record read-modify-write through the repository.
    Claim and tow ids come from counters on the store instance.
    """

    def __init__(self, repository: Optional[ClaimRepository] = None):
        self.repository = repository or InMemoryClaimRepository()
        self._claim_counter = 1
        self._tow_counter = 1

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list_claims(self, status: Optional[ClaimStatus] = None) -> List[Claim]:
        claims = self.repository.load()
        if status is not None:
            claims = [claim for claim in claims if claim.status is status]
        return claims

    def get(self, claim_id: str) -> Optional[Claim]:
        for claim in self.repository.load():
            if claim.id == claim_id:
                return claim
        return None

    # ------------------------------------------------------------------
    # Ids
    # ------------------------------------------------------------------

    def next_claim_id(self) -> str:
        existing = {claim.id for claim in self.repository.load()}
        while True:
            claim_id = f"CLM-{self._claim_counter:06d}"
            self._claim_counter += 1
            if claim_id not in existing:
                return claim_id

    def next_tow_id(self, seed: str) -> str:
        tow_id = f"TOW-{self._tow_counter:05d}-{hash_string(seed) % 1000}"
        self._tow_counter += 1
        return tow_id

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def add(self, claim: Claim) -> Claim:
        """Queue a claim after any imported claims at the head."""
        claims = [existing for existing in self.repository.load() if existing.id != claim.id]
        position = sum(1 for existing in claims if existing.read_only_imported)
        claims.insert(position, claim)
        self.repository.save(claims)
        logger.info(f"Queued claim {claim.id} ({claim.vehicle.label})")
        return claim

    def create_claim(self, payload: ClaimCreate) -> Claim:
        """Build a NEW claim from intake data and queue it."""
        claim_id = self.next_claim_id()
        submitted_at = payload.submitted_at or utc_now()

        incident = payload.incident.model_copy(deep=True) if payload.incident else None
        if incident is None and payload.drivable.as_bool() is False:
            incident = IncidentDetails(tow_requested=True)
        if incident is not None and incident.tow_requested and not incident.tow_id:
            incident.tow_id = self.next_tow_id(f"{claim_id}-{payload.vehicle.make}-{payload.vehicle.model}")
            incident.tow_status = incident.tow_status or TowStatus.REQUESTED

        claim = Claim(
            id=claim_id,
            vehicle=payload.vehicle,
            submitted_at=submitted_at,
            drivable=payload.drivable,
            has_other_party=payload.has_other_party,
            photos=payload.photos,
            policy=payload.policy,
            incident=incident,
        )
        claim.add_event("claim_created", "Claim entered agent queue.", submitted_at)
        return self.add(claim)

    def update(self, claim: Claim) -> Optional[Claim]:
        """
        Replace the stored record for ``claim.id``.

        Returns the stored claim, which is the untouched original when it
        is an imported claim, or None when no such claim exists.
        """
        claims = self.repository.load()
        for index, existing in enumerate(claims):
            if existing.id != claim.id:
                continue
            if existing.read_only_imported:
                logger.warning(f"Ignoring update to imported claim {claim.id}")
                return existing
            updated = claim.model_copy(deep=True)
            updated.touch(existing.last_updated_at)
            updated.touch()
            claims[index] = updated
            self.repository.save(claims)
            return updated

        logger.warning(f"Update for unknown claim {claim.id}")
        return None

    def append_event(self, claim_id: str, event_type: str, message: str) -> Optional[Claim]:
        claim = self.get(claim_id)
        if claim is None or claim.read_only_imported:
            return claim
        event = ClaimEvent(
            id=f"{claim.id}-{len(claim.events) + 1}-{event_type}",
            type=event_type,
            message=message,
        )
        self.repository.append_event(claim_id, event)
        return self.get(claim_id)

    def record_tow_status(self, claim_id: str, tow_status: TowStatus) -> Optional[Claim]:
        """Store the latest tow status, logging a timeline event when it changed."""
        claim = self.get(claim_id)
        if claim is None or claim.incident is None or claim.read_only_imported:
            return claim
        if claim.incident.tow_status is tow_status:
            return claim

        updated = claim.model_copy(deep=True)
        updated.incident.tow_status = tow_status
        updated.add_event("tow_status_updated", f"Tow {tow_status.value}.")
        return self.update(updated)

    def import_snapshot(self, raw: Union[Dict[str, Any], List[Any]]) -> List[Claim]:
        """
        Import customer-flow claims as read-only records at the head of the
        queue. A new snapshot replaces the previously imported claims.
        """
        records = raw if isinstance(raw, list) else [raw]
        imported = [claim for claim in map(normalize_imported_claim, records) if claim is not None]
        dropped = len(records) - len(imported)
        if dropped:
            logger.warning(
                f"[{ErrorType.VALIDATION_FAILED.value}] Dropped {dropped} invalid record(s) from imported snapshot"
            )
        if not imported:
            return []

        imported_ids = {claim.id for claim in imported}
        remaining = [
            claim
            for claim in self.repository.load()
            if not claim.read_only_imported and claim.id not in imported_ids
        ]
        self.repository.save(imported + remaining)
        logger.info(f"Imported {len(imported)} claim(s) from customer workflow snapshot")
        return imported

    def reset_demo(self) -> List[Claim]:
        """Restore the seeded queue, keeping any imported claims at the head."""
        imported = [claim for claim in self.repository.load() if claim.read_only_imported]
        claims = imported + default_claims()
        self.repository.save(claims)
        self._claim_counter = 1
        self._tow_counter = 1
        logger.info("Claim queue reset to demo data")
        return claims


def build_claim_store(settings: Optional[Settings] = None) -> ClaimStore:
    """Store backed by a JSON file when a path is configured, else memory."""
    settings = settings or get_settings()
    if settings.store_path:
        logger.info(f"Using JSON claim store at {settings.store_path}")
        return ClaimStore(JsonFileClaimRepository(settings.store_path))
    return ClaimStore(InMemoryClaimRepository())
