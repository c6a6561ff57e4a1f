"""Kernel time – Clock port and implementations."""
from entry_export.kernel.time.clock import Clock, FrozenClock, SystemClock

__all__ = ["Clock", "FrozenClock", "SystemClock"]
