"""
Event definitions for RideSense.

This package contains all event types used in the system, organized by functional area.
Each module defines events related to a specific subsystem.
"""

# Re-export core types
from ridesense.core.events import EventType, BaseEvent
