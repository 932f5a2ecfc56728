"""
Claim State Definitions

Defines the claim lifecycle states and the enumerations shared by the
decision engine and the agent review console.
"""
from enum import Enum
from typing import Optional


class ClaimStatus(str, Enum):
    """
    Enum representing the possible states of a claim in the agent queue.

    Standard Flow: NEW -> IN_REVIEW -> PENDING_APPROVAL -> AUTHORIZED
    With Photo Request: IN_REVIEW <-> NEEDS_MORE_PHOTOS
    """
    NEW = "New"
    IN_REVIEW = "In Review"
    PENDING_APPROVAL = "Pending Approval"
    NEEDS_MORE_PHOTOS = "Needs More Photos"
    AUTHORIZED = "Authorized"  # Terminal


class Severity(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class RecommendedNextStep(str, Enum):
    """Next step suggested by the damage assessment."""
    APPROVE = "Approve"
    REVIEW = "Review"
    ESCALATE = "Escalate"


class CaseNextStep(str, Enum):
    """Routing chosen for the vehicle in the case file."""
    TOW = "Tow"
    REPAIR = "Repair"
    INSPECTION = "Inspection"


class CaseDecision(str, Enum):
    AUTHORIZE = "Authorize"
    ESCALATE = "Escalate"
    NEEDS_MORE_PHOTOS = "Needs More Photos"


class SignalSeverity(str, Enum):
    INFO = "Info"
    WARNING = "Warning"


class EstimateCategory(str, Enum):
    PARTS = "Parts"
    LABOR = "Labor"
    PAINT = "Paint"
    MISC = "Misc"


class CoverageType(str, Enum):
    COLLISION = "collision"
    COMPREHENSIVE = "comprehensive"


class TowStatus(str, Enum):
    REQUESTED = "requested"
    DISPATCHED = "dispatched"
    ARRIVING = "arriving"
    COMPLETE = "complete"


class ClaimSource(str, Enum):
    MOCK = "mock"
    CUSTOMER_FLOW = "customer_flow"


class OverrideField(str, Enum):
    """Agent decision fields that need a reason when they diverge from the AI."""
    SEVERITY = "severity"
    RECOMMENDED_NEXT_STEP = "recommended_next_step"
    ESTIMATED_REPAIR_COST = "estimated_repair_cost"
    FINAL_ESTIMATE_VS_TOTAL = "final_estimate_vs_total"


class TriState(str, Enum):
    """
    Yes / no / unknown answer to an intake question.

    Intake forms send ``True``, ``False`` or ``None``; ``from_value`` maps
    those onto the enum so an unknown answer is never read as "no".
    """
    YES = "yes"
    NO = "no"
    UNKNOWN = "unknown"

    @classmethod
    def from_value(cls, value: object) -> "TriState":
        if isinstance(value, cls):
            return value
        if value is True:
            return cls.YES
        if value is False:
            return cls.NO
        if value is None:
            return cls.UNKNOWN
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in ("yes", "true"):
                return cls.YES
            if lowered in ("no", "false"):
                return cls.NO
            if lowered in ("", "unknown", "null", "none"):
                return cls.UNKNOWN
        raise ValueError(f"Cannot interpret {value!r} as yes/no/unknown")

    def as_bool(self) -> Optional[bool]:
        if self is TriState.YES:
            return True
        if self is TriState.NO:
            return False
        return None
