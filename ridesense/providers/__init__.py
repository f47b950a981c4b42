"""
Provider layer for RideSense.

This package defines the interfaces through which the detection engine reaches
motion sensors, positioning and wireless scanning, plus simulated
implementations used for development.
"""

from .base import (
    Location,
    MotionCallback,
    MotionSource,
    NetworkSnapshotProvider,
    PositionProvider,
    ProviderError,
    SensorKind,
)
from .simulated import SimulatedMotionSource, SimulatedPositionProvider, StaticNetworkProvider
