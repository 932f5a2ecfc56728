# Monitors module
from .process_monitor import ProcessMonitor, RequestSequenceGuard

__all__ = ["ProcessMonitor", "RequestSequenceGuard"]
