"""Unit tests for RideSenseApplication wiring and shutdown."""

import unittest

from ridesense.core.config import ApplicationConfig, DetectionConfig
from ridesense.core.events import EventType
from ridesense.main import RideSenseApplication

class TestRideSenseApplication(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        self.app = RideSenseApplication(ApplicationConfig(
            detection=DetectionConfig(tick_interval_ms=50, position_timeout_ms=100)
        ))

    async def asyncTearDown(self):
        await self.app.shutdown()

    async def test_initialize_wires_detection_events(self):
        await self.app.initialize()

        service = self.app.services["detection"]
        self.assertTrue(service.is_running)

        flow = self.app.event_registry.get_event_flow(EventType.RIDE_DETECTED)
        self.assertEqual(flow["producers"], {"DetectionService"})
        self.assertEqual(flow["consumers"], {"ridesense"})

    async def test_shutdown_closes_detection(self):
        await self.app.initialize()
        service = self.app.services["detection"]

        await self.app.shutdown()

        self.assertEqual(self.app.services, {})
        self.assertFalse(service.is_running)
        self.assertTrue(service.controller.is_closed)
        self.assertFalse(service.controller.motion_source.running)

if __name__ == "__main__":
    unittest.main()
