"""
Provider interfaces for RideSense.

The detection engine never talks to device APIs directly. Motion sensors,
positioning and wireless scanning are reached through the narrow interfaces
below, so platform bindings and simulators can be swapped freely.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Callable, Optional, Set, Union
from pydantic import BaseModel, ConfigDict

class SensorKind(str, Enum):
    """Motion sensor kinds delivered by a MotionSource."""
    ACCEL = "accel"  # linear acceleration, m/s²
    GYRO = "gyro"    # angular rate, rad/s

class Location(BaseModel):
    """A position fix as reported by the positioning provider."""
    model_config = ConfigDict(frozen=True)

    latitude: float
    longitude: float

class ProviderError(Exception):
    """Raised by a provider when it cannot answer a request."""

# Callback receiving (kind, x, y, z)
MotionCallback = Callable[[Union[SensorKind, str], float, float, float], None]

class MotionSource(ABC):
    """
    Delivers accelerometer and gyroscope events to registered callbacks.

    Events may arrive on any thread at sensor-driven frequency. Both
    ``register`` and ``unregister`` are synchronous and idempotent.
    """

    @abstractmethod
    def register(self, callback: MotionCallback) -> None:
        """Start delivering motion events to ``callback``."""

    @abstractmethod
    def unregister(self, callback: MotionCallback) -> None:
        """Stop delivering motion events to ``callback``."""

class PositionProvider(ABC):
    """Answers requests for the device's current position fix."""

    @abstractmethod
    async def current_fix(self) -> Optional[Location]:
        """
        Get the current position fix.

        Returns:
            The fix, or None when the provider has no position available

        Raises:
            ProviderError: If the provider failed to answer
        """

class NetworkSnapshotProvider(ABC):
    """Lists the wireless networks visible to the device."""

    @abstractmethod
    def current_identifiers(self) -> Set[str]:
        """
        Get the identifiers of the currently visible networks.

        Best effort: implementations return an empty set instead of raising.
        """
