"""
Confidence fusion.

Combines the independent detector scores into one bounded confidence value
and a short explanation of which signals contributed.
"""

from dataclasses import dataclass
from typing import Sequence

REASON_THRESHOLD = 0.5
NORMAL_STATE = "normal state"

# Reported in GPS, sensor, network order
FACTOR_LABELS = (
    "weak positioning",
    "transit motion pattern",
    "network environment change",
)

@dataclass(frozen=True)
class FusionResult:
    confidence: float
    subway_detected: bool
    reason: str

class ConfidenceFusionEngine:
    """Weighted sum of detector scores, clamped to [0, 1]."""

    def __init__(self,
                 weights: Sequence[float] = (0.4, 0.5, 0.1),
                 detection_threshold: float = 0.7):
        if len(weights) != len(FACTOR_LABELS):
            raise ValueError(f"Expected {len(FACTOR_LABELS)} fusion weights, got {len(weights)}")
        self.weights = tuple(float(w) for w in weights)
        self.detection_threshold = detection_threshold

    def confidence(self, signal_loss: float, sensor_pattern: float, network_churn: float) -> float:
        scores = (signal_loss, sensor_pattern, network_churn)
        total = sum(w * s for w, s in zip(self.weights, scores))
        return min(1.0, max(0.0, total))

    @staticmethod
    def reason(signal_loss: float, sensor_pattern: float, network_churn: float) -> str:
        scores = (signal_loss, sensor_pattern, network_churn)
        factors = [label for label, s in zip(FACTOR_LABELS, scores) if s > REASON_THRESHOLD]
        if not factors:
            return NORMAL_STATE
        return "detected: " + ", ".join(factors)

    def fuse(self, signal_loss: float, sensor_pattern: float, network_churn: float) -> FusionResult:
        confidence = self.confidence(signal_loss, sensor_pattern, network_churn)
        return FusionResult(
            confidence=confidence,
            subway_detected=confidence > self.detection_threshold,
            reason=self.reason(signal_loss, sensor_pattern, network_churn),
        )
