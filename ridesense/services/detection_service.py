"""
Detection service for RideSense.

This service owns the DetectionController and turns what it publishes into
events on the bus:

- every DetectionState becomes a DetectionStateChangedEvent
- the first state that detects a ride produces a RideDetectedEvent
- the first state that no longer does produces a RideEndedEvent
- failed ticks are reported as ServiceErrorEvents

The controller notifies observers synchronously from its tick task; the
service only enqueues there and a single forwarder task publishes, so events
leave the service in the order the states were published.
"""

import asyncio
from typing import Optional, Tuple, Union
from ridesense.core.bus import EventBus
from ridesense.core.config import ApplicationConfig
from ridesense.core.events import BaseEvent, EventType
from ridesense.core.registry import ServiceRegistry
from ridesense.core.service import BaseService
from ridesense.detection.controller import DetectionController
from ridesense.detection.models import DetectionState
from ridesense.events.detection import DetectionStateChangedEvent, RideDetectedEvent, RideEndedEvent
from ridesense.events.system import ServiceErrorEvent
from ridesense.providers.base import MotionSource, NetworkSnapshotProvider, PositionProvider

QueueItem = Tuple[str, Union[DetectionState, Exception]]

class DetectionService(BaseService):
    """Runs ride detection for as long as the service is running."""

    PRODUCES_EVENTS = {
        EventType.DETECTION_STATE_CHANGED: {
            'schema': DetectionStateChangedEvent,
            'description': "The detection controller published a new state"
        },
        EventType.RIDE_DETECTED: {
            'schema': RideDetectedEvent,
            'description': "A train ride has started being detected"
        },
        EventType.RIDE_ENDED: {
            'schema': RideEndedEvent,
            'description': "A previously detected train ride is no longer detected"
        },
        EventType.SERVICE_ERROR: {
            'schema': ServiceErrorEvent,
            'description': "A detection tick failed and was skipped"
        },
    }

    def __init__(self,
                 event_bus: EventBus,
                 service_registry: ServiceRegistry,
                 motion_source: MotionSource,
                 position_provider: PositionProvider,
                 network_provider: NetworkSnapshotProvider,
                 config: Optional[ApplicationConfig] = None,
                 name: Optional[str] = None):
        """
        Initialize the detection service.

        Args:
            event_bus: The event bus to publish detection events on
            service_registry: The service registry for lifecycle tracking
            motion_source: Delivers accelerometer and gyroscope events
            position_provider: Answers position fix requests
            network_provider: Lists visible wireless networks
            config: Application configuration (defaults if omitted)
            name: Optional service name
        """
        config = config or ApplicationConfig()
        super().__init__(event_bus, service_registry, name=name, config=config)
        self.controller = DetectionController(
            motion_source,
            position_provider,
            network_provider,
            config=config.detection,
            error_handler=self._on_tick_error,
        )
        self._queue: "asyncio.Queue[QueueItem]" = asyncio.Queue()
        self._forwarder: Optional[asyncio.Task] = None
        self._subscription: Optional[int] = None
        self._riding = False

    @property
    def riding(self) -> bool:
        """Whether the last forwarded state reported a ride."""
        return self._riding

    async def handle_event(self, event: BaseEvent) -> None:
        # Nothing is consumed; detection is driven by the controller's own ticks
        self.logger.debug("Ignoring event", event_type=event.type)

    async def _on_start(self) -> None:
        self._riding = False
        self._subscription = self.controller.state.subscribe(self._on_state)
        try:
            await self.controller.start()
        except Exception:
            self.controller.state.unsubscribe(self._subscription)
            self._subscription = None
            self._drain_queue()
            raise
        self._forwarder = asyncio.create_task(self._forward_loop(), name="ridesense-detection-events")

    async def _on_stop(self) -> None:
        await self.controller.stop()
        if self._subscription is not None:
            self.controller.state.unsubscribe(self._subscription)
            self._subscription = None

        # Let the stopped state (and anything queued before it) go out first
        try:
            await asyncio.wait_for(self._queue.join(), timeout=self.config.service.service_shutdown_timeout)
        except asyncio.TimeoutError:
            self.logger.warning("Timed out flushing detection events", pending=self._queue.qsize())

        forwarder, self._forwarder = self._forwarder, None
        if forwarder:
            forwarder.cancel()
            try:
                await forwarder
            except asyncio.CancelledError:
                pass
        self._drain_queue()

    async def close(self) -> None:
        """Stop the service if running and release the controller for good."""
        if self.is_running:
            await self.stop()
        await self.controller.cleanup()

    def _drain_queue(self) -> None:
        while not self._queue.empty():
            self._queue.get_nowait()
            self._queue.task_done()

    def _on_state(self, state: DetectionState) -> None:
        self._queue.put_nowait(("state", state))

    def _on_tick_error(self, error: Exception) -> None:
        self._queue.put_nowait(("error", error))

    async def _forward_loop(self) -> None:
        while True:
            kind, payload = await self._queue.get()
            try:
                if kind == "state":
                    await self._forward_state(payload)
                else:
                    await self._forward_error(payload)
            except Exception as e:
                self.logger.error(f"Error forwarding detection event: {e}", exc_info=True)
            finally:
                self._queue.task_done()

    async def _forward_state(self, state: DetectionState) -> None:
        await self.publish(DetectionStateChangedEvent(producer_name=self.name, state=state))

        if state.subway_detected and not self._riding:
            self._riding = True
            self.logger.info("Ride detected", confidence=round(state.confidence, 3), reason=state.reason)
            await self.publish(RideDetectedEvent(
                producer_name=self.name,
                confidence=state.confidence,
                reason=state.reason,
                last_known_location=state.last_known_location,
            ))
        elif not state.subway_detected and self._riding:
            self._riding = False
            self.logger.info("Ride ended", confidence=round(state.confidence, 3), reason=state.reason)
            await self.publish(RideEndedEvent(
                producer_name=self.name,
                confidence=state.confidence,
                reason=state.reason,
                monitoring=state.is_monitoring,
            ))

    async def _forward_error(self, error: Exception) -> None:
        await self.publish(ServiceErrorEvent(
            producer_name=self.name,
            service_name=self.name,
            error_type=type(error).__name__,
            error_message=str(error),
            details={'backoff_ms': self.controller.config.error_backoff_ms},
        ))
