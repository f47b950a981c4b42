"""
Core event system for RideSense.

This module defines the base event model and the event type enum that form the
foundation of the typed event system. All events in the system should inherit
from BaseEvent.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from enum import Enum
import time
import uuid

class EventType(str, Enum):
    """
    Enum defining all event types in the system.

    Using string-based enum to ensure JSON serialization works properly.
    """
    # Application lifecycle events
    APPLICATION_STARTUP_COMPLETED = "application_startup_completed"

    # Detection events
    DETECTION_STATE_CHANGED = "detection_state_changed"
    RIDE_DETECTED = "ride_detected"
    RIDE_ENDED = "ride_ended"

    # System events
    SERVICE_ERROR = "service_error"
    SERVICE_STATE_CHANGED = "service_state_changed"

def generate_trace_id() -> str:
    """Generate a unique trace ID for event tracing."""
    return str(uuid.uuid4())

class BaseEvent(BaseModel):
    """
    Base model for all events with common metadata.

    All events in the system should inherit from this class and specify the event type
    and any additional payload fields required for that event.
    """
    # Allow extra attributes, keep enum values rather than enum objects
    model_config = ConfigDict(extra="allow", use_enum_values=True)

    type: EventType
    producer_name: str = ""
    timestamp: float = Field(default_factory=time.time)
    trace_id: Optional[str] = Field(default_factory=generate_trace_id)
