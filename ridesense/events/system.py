"""
System events for RideSense.

This module defines events related to application lifecycle, service state,
and service failures.
"""

from typing import Dict, Any, Optional, Literal
from ridesense.core.events import BaseEvent, EventType

class ApplicationStartupCompletedEvent(BaseEvent):
    """
    Event published when application startup has completed.

    This event signals that all services have been started and detection
    is running.
    """
    type: Literal[EventType.APPLICATION_STARTUP_COMPLETED] = EventType.APPLICATION_STARTUP_COMPLETED

class ServiceStateChangedEvent(BaseEvent):
    """
    Event published when a service changes state.

    This event is used to communicate service lifecycle changes
    (starting, running, stopping, stopped, etc.).
    """
    type: Literal[EventType.SERVICE_STATE_CHANGED] = EventType.SERVICE_STATE_CHANGED
    service_name: str
    state: str  # 'registered', 'starting', 'running', 'stopping', 'stopped', 'error'
    error: Optional[str] = None  # Present only if state is 'error'

class ServiceErrorEvent(BaseEvent):
    """
    Event published when a service encounters a recoverable error.

    Detection keeps running after these; they exist so that observers can
    surface degraded operation.
    """
    type: Literal[EventType.SERVICE_ERROR] = EventType.SERVICE_ERROR
    service_name: str
    error_type: str
    error_message: str
    details: Optional[Dict[str, Any]] = None
