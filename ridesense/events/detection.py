"""
Detection events for RideSense.

This module defines the events the detection service publishes: every new
detection state, and the ride start/end transitions derived from it.
"""

from typing import Literal, Optional
from ridesense.core.events import BaseEvent, EventType
from ridesense.detection.models import DetectionState, Location

class DetectionStateChangedEvent(BaseEvent):
    """
    Event published for every detection state the controller publishes.

    Consumers (e.g. a companion screen) render confidence and reason from it.
    Duplicates of an unchanged state may occur.
    """
    type: Literal[EventType.DETECTION_STATE_CHANGED] = EventType.DETECTION_STATE_CHANGED
    state: DetectionState

class RideDetectedEvent(BaseEvent):
    """
    Event published when detection flips from not-riding to riding.

    Published once per transition, not on every tick that keeps detecting.
    """
    type: Literal[EventType.RIDE_DETECTED] = EventType.RIDE_DETECTED
    confidence: float
    reason: str
    last_known_location: Optional[Location] = None

class RideEndedEvent(BaseEvent):
    """
    Event published when a previously detected ride is no longer detected.

    ``monitoring`` is False when the ride ended because monitoring stopped.
    """
    type: Literal[EventType.RIDE_ENDED] = EventType.RIDE_ENDED
    confidence: float
    reason: str
    monitoring: bool = True
