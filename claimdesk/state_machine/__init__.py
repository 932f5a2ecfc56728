# State machine module
from .machine import ClaimStateMachine, TransitionResult

__all__ = ["ClaimStateMachine", "TransitionResult"]
