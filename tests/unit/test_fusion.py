"""
Unit tests for the ConfidenceFusionEngine.
"""

import unittest

from ridesense.detection.fusion import ConfidenceFusionEngine, NORMAL_STATE

class TestConfidenceFusionEngine(unittest.TestCase):
    """Test cases for weighted fusion and reason strings."""

    def setUp(self):
        self.engine = ConfidenceFusionEngine()

    def test_weighted_confidence_detects_ride(self):
        """0.8/0.8/0.2 fuses to 0.74, above the 0.7 threshold."""
        result = self.engine.fuse(0.8, 0.8, 0.2)

        self.assertAlmostEqual(result.confidence, 0.74)
        self.assertTrue(result.subway_detected)

    def test_threshold_is_exclusive(self):
        engine = ConfidenceFusionEngine(weights=(1.0, 0.0, 0.0), detection_threshold=0.7)
        self.assertFalse(engine.fuse(0.7, 0.0, 0.0).subway_detected)

    def test_confidence_is_clamped(self):
        engine = ConfidenceFusionEngine(weights=(1.0, 1.0, 1.0))
        self.assertEqual(engine.confidence(1.0, 1.0, 1.0), 1.0)
        self.assertEqual(engine.confidence(-1.0, 0.0, 0.0), 0.0)

    def test_confidence_always_in_range(self):
        steps = [i / 10 for i in range(11)]
        for gps in steps:
            for sensor in steps:
                for network in steps:
                    confidence = self.engine.confidence(gps, sensor, network)
                    self.assertGreaterEqual(confidence, 0.0)
                    self.assertLessEqual(confidence, 1.0)

    def test_reason_lists_factors_in_order(self):
        reason = self.engine.fuse(0.8, 0.7, 0.6).reason
        self.assertEqual(
            reason,
            "detected: weak positioning, transit motion pattern, network environment change"
        )

    def test_reason_skips_weak_factors(self):
        self.assertEqual(self.engine.fuse(0.8, 0.5, 0.2).reason, "detected: weak positioning")
        self.assertEqual(self.engine.fuse(0.3, 0.6, 0.7).reason,
                         "detected: transit motion pattern, network environment change")

    def test_normal_state(self):
        self.assertEqual(self.engine.fuse(0.5, 0.5, 0.5).reason, NORMAL_STATE)

    def test_weights_must_have_three_entries(self):
        with self.assertRaises(ValueError):
            ConfidenceFusionEngine(weights=(0.5, 0.5))

if __name__ == "__main__":
    unittest.main()
