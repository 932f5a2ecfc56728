# Repository module - claim persistence
from .claim_store import (
    ClaimRepository,
    ClaimStore,
    InMemoryClaimRepository,
    JsonFileClaimRepository,
    build_claim_store,
)

__all__ = [
    "ClaimRepository",
    "ClaimStore",
    "InMemoryClaimRepository",
    "JsonFileClaimRepository",
    "build_claim_store",
]
