"""
Factory for creating tick sources.

Architecture Decision: Factory Pattern
Instantiates the backend named in the tracker preferences.
"""

from .base import TickSource


def create_tick_source(backend: str = "qt", interval_ms: int = 1000) -> TickSource:
    """
    Create the tick source for the configured backend.

    Args:
        backend: 'qt', 'asyncio' or 'manual'
        interval_ms: Tick period in milliseconds

    Returns:
        TickSource instance
    """
    if backend == "qt":
        from .qt_source import QtTickSource
        return QtTickSource(interval_ms)
    elif backend == "asyncio":
        from .asyncio_source import AsyncioTickSource
        return AsyncioTickSource(interval_ms)
    elif backend == "manual":
        from .manual_source import ManualTickSource
        return ManualTickSource(interval_ms)
    else:
        raise ValueError(f"Unknown tick backend: {backend}")
