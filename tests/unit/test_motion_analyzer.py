"""
Unit tests for the MotionPatternAnalyzer.

These tests feed hand-built sample windows through the vibration, rotation
and consistency scoring and check the combined sensor score.
"""

import math
import unittest

from ridesense.detection.buffer import SampleBuffer
from ridesense.detection.models import MotionSample
from ridesense.detection.motion import (
    MotionPatternAnalyzer,
    consistency_score,
    rotation_score,
    vibration_score,
)

def vertical(values):
    """Samples whose magnitude equals the given values."""
    return [MotionSample(x=0.0, y=0.0, z=v) for v in values]

class TestVibrationScore(unittest.TestCase):
    """Vibration scoring from acceleration magnitudes."""

    def test_train_vibration(self):
        """Mean 11.5 with variance 3 scores as a train."""
        spread = math.sqrt(3.0)
        window = vertical([11.5 + spread, 11.5 - spread] * 5)
        self.assertEqual(vibration_score(window), 0.8)

    def test_public_transit_vibration(self):
        self.assertEqual(vibration_score(vertical([10.0] * 10)), 0.6)

    def test_resting_device(self):
        self.assertEqual(vibration_score(vertical([9.0] * 10)), 0.1)

    def test_unclear_vibration(self):
        # Mean 9.3: above rest, below transit
        self.assertEqual(vibration_score(vertical([9.3] * 10)), 0.3)

    def test_high_variance_is_unclear(self):
        window = vertical([8.0, 15.0] * 5)
        self.assertEqual(vibration_score(window), 0.3)

class TestRotationScore(unittest.TestCase):
    """Rotation scoring from angular-rate magnitudes."""

    def test_strong_rotation(self):
        window = vertical([0.35] * 9 + [1.6])
        self.assertEqual(rotation_score(window), 0.7)

    def test_moderate_rotation(self):
        window = vertical([0.25] * 9 + [1.2])
        self.assertEqual(rotation_score(window), 0.5)

    def test_still(self):
        self.assertEqual(rotation_score(vertical([0.05] * 10)), 0.1)

    def test_otherwise(self):
        self.assertEqual(rotation_score(vertical([0.35] * 10)), 0.3)

    def test_empty_window(self):
        self.assertEqual(rotation_score([]), 0.0)

class TestConsistencyScore(unittest.TestCase):
    """Consistency scoring around the moving averages."""

    def test_constant_signal_is_consistent(self):
        self.assertEqual(consistency_score(vertical([10.0] * 10)), 0.8)

    def test_spread_bands(self):
        # Alternating 10±d: moving averages are 10±d/3, so the spread is 10·d²/9
        self.assertEqual(consistency_score(vertical([11.7, 8.3] * 5)), 0.6)
        self.assertEqual(consistency_score(vertical([12.4, 7.6] * 5)), 0.3)
        self.assertEqual(consistency_score(vertical([14.0, 6.0] * 5)), 0.1)

class TestMotionPatternAnalyzer(unittest.TestCase):
    """Test cases for the combined analyzer."""

    def setUp(self):
        self.accel = SampleBuffer(50)
        self.gyro = SampleBuffer(50)
        self.analyzer = MotionPatternAnalyzer(self.accel, self.gyro, min_samples=10)

    def _fill(self, buffer, values):
        for s in vertical(values):
            buffer.push(s)

    def test_neutral_before_enough_samples(self):
        """Fewer than 10 samples in either buffer yields a zero score."""
        self._fill(self.accel, [11.5] * 9)
        self._fill(self.gyro, [0.5] * 10)
        self.assertEqual(self.analyzer.analyze().score, 0.0)

        self._fill(self.accel, [11.5])
        self.gyro.clear()
        self._fill(self.gyro, [0.5] * 9)
        self.assertEqual(self.analyzer.analyze().score, 0.0)

    def test_train_pattern(self):
        self._fill(self.accel, [11.5] * 10)
        self._fill(self.gyro, [0.35] * 9 + [1.6])

        scores = self.analyzer.analyze()

        self.assertEqual(scores.vibration, 0.8)
        self.assertEqual(scores.rotation, 0.7)
        self.assertEqual(scores.consistency, 0.8)
        self.assertAlmostEqual(scores.score, (0.8 + 0.7 + 0.8) / 3)

    def test_uses_most_recent_window(self):
        """Old samples outside the window do not affect the score."""
        self._fill(self.accel, [30.0, 1.0] * 10)
        self._fill(self.accel, [11.5] * 10)
        self._fill(self.gyro, [0.35] * 10)

        self.assertEqual(self.analyzer.analyze().vibration, 0.8)

    def test_peak_counts(self):
        self._fill(self.accel, [11.5] * 8 + [12.5, 13.0])
        self._fill(self.gyro, [0.3] * 9 + [2.5])

        scores = self.analyzer.analyze()

        self.assertEqual(scores.accel_peaks, 2)
        self.assertEqual(scores.gyro_peaks, 1)

if __name__ == "__main__":
    unittest.main()
