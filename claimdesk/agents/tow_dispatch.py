"""
Tow Dispatch Agent

Simulated tow dispatcher. Each poll advances a tow one stage along
requested -> dispatched -> arriving -> complete and then holds at complete.
"""
import logging
from typing import Optional

from claimdesk.agents.latency import simulate_latency
from claimdesk.core.states import TowStatus

logger = logging.getLogger(__name__)

TOW_STATUS_ORDER = [
    TowStatus.REQUESTED,
    TowStatus.DISPATCHED,
    TowStatus.ARRIVING,
    TowStatus.COMPLETE,
]


def next_tow_status(current: Optional[TowStatus]) -> TowStatus:
    """A tow with no recorded status counts as just requested."""
    position = TOW_STATUS_ORDER.index(current) if current else 0
    return TOW_STATUS_ORDER[min(position + 1, len(TOW_STATUS_ORDER) - 1)]


async def poll_tow_status(tow_id: str, current: Optional[TowStatus]) -> TowStatus:
    """
    Ask the dispatcher for the latest status of a tow.

    Args:
        tow_id: Tow reference, used as the latency key
        current: Last status recorded on the claim

    Returns:
        The next stage, or COMPLETE once the tow has finished
    """
    await simulate_latency(f"tow-status-{tow_id}")
    status = next_tow_status(current)
    logger.info(f"Tow {tow_id} is {status.value}")
    return status
