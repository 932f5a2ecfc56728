# Core module - states, models and shared helpers
from .states import (
    CaseDecision,
    CaseNextStep,
    ClaimStatus,
    OverrideField,
    RecommendedNextStep,
    Severity,
    SignalSeverity,
    TriState,
)
from .models import AIAssessment, AgentDecision, CaseFile, Claim, ClaimCreate, ClaimEvent, Signal
from .errors import ErrorType, VehicleLookupError

__all__ = [
    "CaseDecision",
    "CaseNextStep",
    "ClaimStatus",
    "OverrideField",
    "RecommendedNextStep",
    "Severity",
    "SignalSeverity",
    "TriState",
    "AIAssessment",
    "AgentDecision",
    "CaseFile",
    "Claim",
    "ClaimCreate",
    "ClaimEvent",
    "Signal",
    "ErrorType",
    "VehicleLookupError",
]
