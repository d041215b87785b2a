"""Periodic tick sources that drive the running timer"""

from .base import TickSource
from .factory import create_tick_source
from .manual_source import ManualTickSource

__all__ = ["TickSource", "ManualTickSource", "create_tick_source"]
