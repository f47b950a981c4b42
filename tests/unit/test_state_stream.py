"""Unit tests for the DetectionStateStream."""

import unittest

from ridesense.detection.models import DetectionState
from ridesense.detection.state import DetectionStateStream

class TestDetectionStateStream(unittest.TestCase):

    def setUp(self):
        self.stream = DetectionStateStream()

    def test_initial_state_is_idle(self):
        state = self.stream.value
        self.assertFalse(state.is_monitoring)
        self.assertFalse(state.subway_detected)
        self.assertEqual(state.confidence, 0.0)
        self.assertEqual(state.reason, "")
        self.assertIsNone(state.last_known_location)

    def test_observers_see_states_in_publish_order(self):
        seen = []
        self.stream.subscribe(lambda s: seen.append(s.reason))

        for reason in ("a", "b", "c"):
            self.stream.publish(DetectionState(reason=reason))

        self.assertEqual(seen, ["a", "b", "c"])
        self.assertEqual(self.stream.value.reason, "c")

    def test_value_is_updated_before_observers_run(self):
        seen = []
        self.stream.subscribe(lambda s: seen.append(self.stream.value is s))

        self.stream.publish(DetectionState(reason="x"))
        self.assertEqual(seen, [True])

    def test_unsubscribe_stops_notifications(self):
        seen = []
        handle = self.stream.subscribe(seen.append)
        self.stream.publish(DetectionState(reason="first"))

        self.stream.unsubscribe(handle)
        self.stream.publish(DetectionState(reason="second"))

        self.assertEqual([s.reason for s in seen], ["first"])
        self.assertEqual(len(self.stream), 0)

    def test_unsubscribe_unknown_handle_is_ignored(self):
        self.stream.unsubscribe(12345)

    def test_failing_observer_does_not_block_others(self):
        def broken(state):
            raise RuntimeError("observer failed")

        seen = []
        self.stream.subscribe(broken)
        self.stream.subscribe(seen.append)

        self.stream.publish(DetectionState(reason="still delivered"))
        self.assertEqual(len(seen), 1)

if __name__ == "__main__":
    unittest.main()
