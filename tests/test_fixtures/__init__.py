"""
Test Fixtures Package

Shared test utilities and helpers for consistent testing across all modules.
"""

from .event_factory import CanonicalEventFactory, StreamLineFactory
from .in_memory_queue import InMemoryQueue

__all__ = ["CanonicalEventFactory", "InMemoryQueue", "StreamLineFactory"]
