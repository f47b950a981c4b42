"""
Ride detection engine.

Motion samples are buffered per sensor kind; on every tick the controller
scores positioning loss, motion pattern and network churn, fuses the three
scores and publishes a new DetectionState.
"""

from .models import DetectionState, Location, MotionSample, ProviderError, SensorKind
from .buffer import SampleBuffer
from .motion import MotionPatternAnalyzer, MotionScores
from .signal_loss import SignalLossDetector, SignalLossResult
from .network_churn import NetworkChurnDetector
from .fusion import ConfidenceFusionEngine, FusionResult
from .state import DetectionStateStream
from .controller import DetectionController

__all__ = [
    'DetectionState',
    'Location',
    'MotionSample',
    'ProviderError',
    'SensorKind',
    'SampleBuffer',
    'MotionPatternAnalyzer',
    'MotionScores',
    'SignalLossDetector',
    'SignalLossResult',
    'NetworkChurnDetector',
    'ConfidenceFusionEngine',
    'FusionResult',
    'DetectionStateStream',
    'DetectionController'
]
