"""
Error types for the claims workflow.

Guardrail violations are reported as values (see ``TransitionResult`` in the
state machine); only the simulated lookups raise, and what they raise is
always recoverable.
"""
from enum import Enum
from typing import Optional


class ErrorType(str, Enum):
    """Enumeration of error types in the claims workflow."""

    # Intake / import
    VALIDATION_FAILED = "VALIDATION_FAILED"

    # Simulated external lookups
    LOOKUP_FAILED = "LOOKUP_FAILED"

    # State machine guardrails
    INVALID_TRANSITION = "INVALID_TRANSITION"
    MISSING_OVERRIDE_REASON = "MISSING_OVERRIDE_REASON"
    SENIOR_REVIEW_REQUIRED = "SENIOR_REVIEW_REQUIRED"
    READ_ONLY_CLAIM = "READ_ONLY_CLAIM"

    # Persistence
    STORAGE_FAILED = "STORAGE_FAILED"


class VehicleLookupError(Exception):
    """
    A simulated plate / VIN lookup failed.

    The failure is deterministic for the seeded identifiers and the caller
    may retry with a different identifier.
    """

    def __init__(
        self,
        message: str,
        identifier: str,
        retryable: bool = True,
        error_type: ErrorType = ErrorType.LOOKUP_FAILED,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.identifier = identifier
        self.retryable = retryable
        self.error_type = error_type

    def to_dict(self, hint: Optional[str] = None) -> dict:
        payload = {
            "error_type": self.error_type.value,
            "message": self.message,
            "identifier": self.identifier,
            "retryable": self.retryable,
        }
        if hint:
            payload["hint"] = hint
        return payload
