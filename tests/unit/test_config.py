"""Unit tests for the configuration models."""

import os
import unittest
from unittest.mock import patch

from pydantic import ValidationError

from ridesense.core.config import ApplicationConfig, DetectionConfig, LogLevel, SimulationConfig

class TestDetectionConfig(unittest.TestCase):

    def test_defaults(self):
        config = DetectionConfig()

        self.assertEqual(config.accel_threshold, 12.0)
        self.assertEqual(config.gyro_threshold, 2.0)
        self.assertEqual(config.position_loss_threshold_ms, 30_000)
        self.assertEqual(config.position_timeout_ms, 1_500)
        self.assertEqual(config.min_detection_samples, 10)
        self.assertEqual(config.detection_confidence_threshold, 0.7)
        self.assertEqual(config.tick_interval_ms, 2_000)
        self.assertEqual(config.error_backoff_ms, 5_000)
        self.assertEqual(config.sample_buffer_capacity, 50)
        self.assertEqual(config.fusion_weights, (0.4, 0.5, 0.1))

    @patch.dict(os.environ, {"RIDESENSE_DETECTION_TICK_INTERVAL_MS": "500"})
    def test_environment_override(self):
        self.assertEqual(DetectionConfig().tick_interval_ms, 500)

    def test_confidence_threshold_range(self):
        with self.assertRaises(ValidationError):
            DetectionConfig(detection_confidence_threshold=1.5)

    def test_negative_weights_rejected(self):
        with self.assertRaises(ValidationError):
            DetectionConfig(fusion_weights=(0.5, -0.1, 0.6))

    def test_non_positive_timings_rejected(self):
        with self.assertRaises(ValidationError):
            DetectionConfig(tick_interval_ms=0)

    def test_capacity_must_hold_a_window(self):
        with self.assertRaises(ValidationError):
            DetectionConfig(sample_buffer_capacity=5, min_detection_samples=10)

class TestApplicationConfig(unittest.TestCase):

    def test_nested_defaults(self):
        config = ApplicationConfig()

        self.assertEqual(config.log_level, LogLevel.INFO)
        self.assertTrue(config.event.tracing_enabled)
        self.assertEqual(config.service.service_shutdown_timeout, 5.0)
        self.assertEqual(config.simulation.motion_profile, "train")

    def test_unknown_motion_profile_rejected(self):
        with self.assertRaises(ValidationError):
            SimulationConfig(motion_profile="bicycle")

if __name__ == "__main__":
    unittest.main()
