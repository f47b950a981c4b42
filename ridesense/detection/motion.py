"""
Motion pattern analysis.

Scores how closely the recent accelerometer and gyroscope readings resemble
riding a train: a steady, slightly elevated vibration, moderate rotation from
curves and braking, and an acceleration signal that stays consistent over the
window.
"""

import statistics
from dataclasses import dataclass
from typing import List, Sequence
import structlog
from .buffer import SampleBuffer
from .models import MotionSample

MOVING_AVERAGE_WIDTH = 3

@dataclass(frozen=True)
class MotionScores:
    """Sub-scores of one analysis pass."""
    vibration: float = 0.0
    rotation: float = 0.0
    consistency: float = 0.0
    score: float = 0.0
    accel_peaks: int = 0  # samples above the acceleration threshold
    gyro_peaks: int = 0   # samples above the angular-rate threshold

def magnitudes(samples: Sequence[MotionSample]) -> List[float]:
    return [s.magnitude for s in samples]

def vibration_score(accel: Sequence[MotionSample]) -> float:
    """
    Score the vibration pattern of the acceleration magnitudes.

    Trains produce a constant vibration slightly above gravity with low spread;
    a magnitude close to or below gravity means the device is at rest.
    """
    if not accel:
        return 0.0
    values = magnitudes(accel)
    mean = statistics.fmean(values)
    variance = statistics.pvariance(values, mu=mean)

    if mean > 11.0 and variance < 4.0:
        return 0.8
    if mean > 9.5 and variance < 6.0:
        return 0.6
    if mean < 9.2:
        return 0.1
    return 0.3

def rotation_score(gyro: Sequence[MotionSample]) -> float:
    """Score angular-rate activity: curves and stops cause moderate rotation."""
    if not gyro:
        return 0.0
    values = magnitudes(gyro)
    max_rate = max(values)
    avg_rate = statistics.fmean(values)

    if max_rate > 1.5 and avg_rate > 0.3:
        return 0.7
    if max_rate > 1.0 and avg_rate > 0.2:
        return 0.5
    if avg_rate < 0.1:
        return 0.1
    return 0.3

def consistency_score(accel: Sequence[MotionSample]) -> float:
    """
    Score how steady the acceleration signal is.

    Each moving average of the magnitudes is compared against every magnitude
    in the window; the mean squared deviation, averaged over all moving
    averages, is the spread we grade.
    """
    values = magnitudes(accel)
    if len(values) < MOVING_AVERAGE_WIDTH:
        return 0.0

    moving_averages = [
        statistics.fmean(values[i:i + MOVING_AVERAGE_WIDTH])
        for i in range(len(values) - MOVING_AVERAGE_WIDTH + 1)
    ]
    variance = statistics.fmean(
        statistics.fmean((v - avg) ** 2 for v in values)
        for avg in moving_averages
    )

    if variance < 2.0:
        return 0.8
    if variance < 4.0:
        return 0.6
    if variance < 8.0:
        return 0.3
    return 0.1

class MotionPatternAnalyzer:
    """
    Combines the vibration, rotation and consistency sub-scores.

    The analyzer only reads the buffers; it never mutates them.
    """

    def __init__(self,
                 accel_buffer: SampleBuffer,
                 gyro_buffer: SampleBuffer,
                 min_samples: int = 10,
                 accel_threshold: float = 12.0,
                 gyro_threshold: float = 2.0):
        self.accel_buffer = accel_buffer
        self.gyro_buffer = gyro_buffer
        self.min_samples = min_samples
        self.accel_threshold = accel_threshold
        self.gyro_threshold = gyro_threshold
        self.logger = structlog.get_logger(component="motion")

    def analyze(self) -> MotionScores:
        """
        Analyze the most recent window of both buffers.

        Returns neutral all-zero scores until each buffer holds at least
        ``min_samples`` samples.
        """
        accel = self.accel_buffer.last_n(self.min_samples)
        gyro = self.gyro_buffer.last_n(self.min_samples)

        if len(accel) < self.min_samples or len(gyro) < self.min_samples:
            self.logger.debug("Not enough motion samples", accel=len(accel), gyro=len(gyro))
            return MotionScores()

        vibration = vibration_score(accel)
        rotation = rotation_score(gyro)
        consistency = consistency_score(accel)

        scores = MotionScores(
            vibration=vibration,
            rotation=rotation,
            consistency=consistency,
            score=(vibration + rotation + consistency) / 3.0,
            accel_peaks=sum(1 for m in magnitudes(accel) if m > self.accel_threshold),
            gyro_peaks=sum(1 for m in magnitudes(gyro) if m > self.gyro_threshold),
        )
        self.logger.debug(
            "Motion analyzed",
            vibration=vibration,
            rotation=rotation,
            consistency=consistency,
            accel_peaks=scores.accel_peaks,
            gyro_peaks=scores.gyro_peaks,
        )
        return scores
