"""
Simulated latency for the mock AI and lookup calls.
"""
import asyncio
from typing import Optional

from claimdesk.config import get_settings
from claimdesk.core.hashing import hash_string

ASSESSMENT_DELAY_MS = 500


def lookup_delay_ms(key: str) -> int:
    """Deterministic 250-600 ms delay for a lookup keyed by ``key``."""
    return 250 + hash_string(key) % 351


async def simulate_latency(key: Optional[str] = None, delay_ms: Optional[int] = None) -> None:
    """Sleep for the simulated delay, scaled by the configured latency scale."""
    if delay_ms is None:
        delay_ms = lookup_delay_ms(key or "")
    scale = get_settings().latency_scale
    if scale <= 0:
        return
    await asyncio.sleep(delay_ms * scale / 1000)
