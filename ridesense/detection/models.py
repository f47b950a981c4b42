"""
Data model for the detection engine.

All values crossing a thread or task boundary are immutable so they can be
shared without copying.
"""

import math
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field
from ridesense.providers.base import Location, ProviderError, SensorKind

__all__ = ["DetectionState", "Location", "MotionSample", "ProviderError", "SensorKind"]

class MotionSample(BaseModel):
    """A single 3-axis motion reading. Ordering is implied by buffer position."""
    model_config = ConfigDict(frozen=True)

    x: float
    y: float
    z: float

    @property
    def magnitude(self) -> float:
        """Euclidean norm of the reading."""
        return math.sqrt(self.x * self.x + self.y * self.y + self.z * self.z)

class DetectionState(BaseModel):
    """
    Snapshot of the detector's output.

    A new instance is published on every tick and on start/stop; instances are
    never mutated after construction.
    """
    model_config = ConfigDict(frozen=True)

    is_monitoring: bool = False
    subway_detected: bool = False
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    reason: str = ""
    last_known_location: Optional[Location] = None
