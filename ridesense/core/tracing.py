"""
Event tracing for RideSense.

Keeps a bounded history of published events so detection behaviour can be
inspected after the fact (how often the state changed, who produced what).
"""

import time
import logging
from typing import Dict, List, Optional, Any, Deque
from collections import deque, Counter
from .events import BaseEvent

class EventTracer:
    """
    Records recently published events in a fixed-size ring.

    Oldest entries are dropped once ``max_events`` is reached.
    """

    def __init__(self, max_events: int = 1000):
        self.max_events = max_events
        self.events: Deque[Dict[str, Any]] = deque(maxlen=max_events)
        self.logger = logging.getLogger(__name__)

    def record_event(self, event: BaseEvent) -> None:
        """
        Record an event in the trace buffer.

        Args:
            event: The event to record
        """
        self.events.append({
            'timestamp': time.time(),
            'trace_id': event.trace_id,
            'type': event.type,
            'producer': event.producer_name,
            'event_data': event.model_dump(exclude={'trace_id', 'type', 'producer_name'})
        })
        self.logger.debug(f"Recorded event {event.type} from {event.producer_name}")

    def get_trace(self, trace_id: Optional[str] = None) -> List[Dict[str, Any]]:
        """Get all recorded events, or only those carrying ``trace_id``."""
        if trace_id is None:
            return list(self.events)
        return [e for e in self.events if e['trace_id'] == trace_id]

    def get_event_count(self) -> int:
        return len(self.events)

    def get_event_rate(self, window_seconds: int = 60) -> float:
        """
        Calculate the event rate over a time window.

        Args:
            window_seconds: Time window in seconds

        Returns:
            Events per second over the window
        """
        window_start = time.time() - window_seconds
        in_window = sum(1 for e in self.events if e['timestamp'] >= window_start)
        return in_window / window_seconds if in_window else 0.0

    def get_event_stats(self) -> Dict[str, Any]:
        """
        Get statistics about recorded events.

        Returns:
            Dictionary with total count, per-type and per-producer counts, and rate
        """
        return {
            'total_events': len(self.events),
            'event_types': dict(Counter(e['type'] for e in self.events)),
            'producers': dict(Counter(e['producer'] for e in self.events)),
            'rate_per_second': self.get_event_rate()
        }
