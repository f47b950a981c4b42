"""
Detection controller.

Owns the sample buffers and detectors, drives the periodic detection tick and
publishes the resulting DetectionState. The controller has two states:

    Idle  --start()-->  Monitoring  --stop()-->  Idle

``cleanup()`` stops monitoring and closes the controller for good.
"""

import asyncio
import time
from typing import Callable, Optional, Union
import structlog
from ridesense.core.config import DetectionConfig
from ridesense.providers.base import MotionSource, NetworkSnapshotProvider, PositionProvider
from .buffer import SampleBuffer
from .fusion import ConfidenceFusionEngine
from .models import DetectionState, MotionSample, SensorKind
from .motion import MotionPatternAnalyzer
from .network_churn import NetworkChurnDetector
from .signal_loss import SignalLossDetector
from .state import DetectionStateStream

MONITORING_STARTED = "monitoring started"
MONITORING_STOPPED = "monitoring stopped"

class DetectionController:
    """
    State machine and scheduler for ride detection.

    Motion samples may arrive from any thread through ``on_motion``. All other
    methods must be called from the event loop that runs the controller.
    """

    def __init__(self,
                 motion_source: MotionSource,
                 position_provider: PositionProvider,
                 network_provider: NetworkSnapshotProvider,
                 config: Optional[DetectionConfig] = None,
                 clock: Callable[[], float] = time.monotonic,
                 error_handler: Optional[Callable[[Exception], None]] = None):
        """
        Initialize the controller in the Idle state.

        Args:
            motion_source: Delivers accelerometer and gyroscope events
            position_provider: Answers position fix requests
            network_provider: Lists the currently visible wireless networks
            config: Detection thresholds and timings (defaults if omitted)
            clock: Monotonic clock in seconds, used for positioning gaps
            error_handler: Called with the exception of every failed tick
        """
        self.config = config or DetectionConfig()
        self.motion_source = motion_source
        self.error_handler = error_handler
        self.logger = structlog.get_logger(component="controller")

        self.accel_buffer = SampleBuffer(self.config.sample_buffer_capacity)
        self.gyro_buffer = SampleBuffer(self.config.sample_buffer_capacity)

        self.motion_analyzer = MotionPatternAnalyzer(
            self.accel_buffer,
            self.gyro_buffer,
            min_samples=self.config.min_detection_samples,
            accel_threshold=self.config.accel_threshold,
            gyro_threshold=self.config.gyro_threshold,
        )
        self.signal_loss = SignalLossDetector(
            position_provider,
            loss_threshold_ms=self.config.position_loss_threshold_ms,
            timeout_ms=self.config.position_timeout_ms,
            clock=clock,
        )
        self.network_churn = NetworkChurnDetector(network_provider)
        self.fusion = ConfidenceFusionEngine(
            weights=self.config.fusion_weights,
            detection_threshold=self.config.detection_confidence_threshold,
        )

        self.state = DetectionStateStream()

        self._monitoring = False
        self._closed = False
        # Bumped on every start/stop; ticks of an older generation never publish
        self._generation = 0
        self._task: Optional[asyncio.Task] = None
        self._lock = asyncio.Lock()

    @property
    def is_monitoring(self) -> bool:
        return self._monitoring

    @property
    def is_closed(self) -> bool:
        return self._closed

    def on_motion(self, kind: Union[SensorKind, str], x: float, y: float, z: float) -> None:
        """Motion event callback; safe to call from sensor threads."""
        if not self._monitoring:
            return
        try:
            kind = SensorKind(kind)
        except ValueError:
            self.logger.warning("Dropping motion event of unknown kind", kind=kind)
            return
        sample = MotionSample(x=x, y=y, z=z)
        if kind is SensorKind.ACCEL:
            self.accel_buffer.push(sample)
        else:
            self.gyro_buffer.push(sample)

    async def start(self) -> None:
        """
        Begin monitoring.

        Does nothing if already monitoring.

        Raises:
            RuntimeError: If the controller has been cleaned up
        """
        async with self._lock:
            if self._closed:
                raise RuntimeError("Detection controller has been cleaned up")
            if self._monitoring:
                self.logger.debug("Monitoring already running")
                return

            self._monitoring = True
            self._generation += 1
            self.state.publish(self.state.value.model_copy(update={
                "is_monitoring": True,
                "reason": MONITORING_STARTED,
            }))

            self.signal_loss.reset()
            # A sensor thread may have pushed a sample after the last stop cleared
            self.accel_buffer.clear()
            self.gyro_buffer.clear()
            self.motion_source.register(self.on_motion)
            self.network_churn.capture_initial()

            self._task = asyncio.create_task(
                self._run(self._generation), name="ridesense-detection"
            )
            self.logger.info("Monitoring started")

    async def stop(self) -> None:
        """
        End monitoring and publish the stopped state.

        Once this returns no tick started before the call can publish anymore.
        """
        async with self._lock:
            was_monitoring = self._monitoring
            self._monitoring = False
            self._generation += 1

            self.state.publish(self.state.value.model_copy(update={
                "is_monitoring": False,
                "subway_detected": False,
                "confidence": 0.0,
                "reason": MONITORING_STOPPED,
            }))

            self.motion_source.unregister(self.on_motion)
            await self._cancel_task()

            self.accel_buffer.clear()
            self.gyro_buffer.clear()
            if was_monitoring:
                self.logger.info("Monitoring stopped")

    async def cleanup(self) -> None:
        """Stop monitoring and close the controller; it cannot be restarted."""
        await self.stop()
        self._closed = True
        self.logger.debug("Controller closed")

    async def _cancel_task(self) -> None:
        task, self._task = self._task, None
        if task is None or task.done():
            return
        task.cancel()
        # A stop issued from inside the tick task cannot wait for itself
        if task is asyncio.current_task():
            return
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def evaluate(self) -> DetectionState:
        """
        Run one detection cycle and return the resulting state without publishing it.

        Detector failures are absorbed by the detectors themselves; anything
        raised from here is an unexpected error in analysis or fusion.
        """
        signal = await self.signal_loss.evaluate()
        motion = self.motion_analyzer.analyze()
        network = self.network_churn.evaluate()

        result = self.fusion.fuse(signal.score, motion.score, network)
        self.logger.debug(
            "Detection tick",
            signal_loss=signal.score,
            sensor_pattern=motion.score,
            network_churn=network,
            confidence=result.confidence,
        )
        return DetectionState(
            is_monitoring=True,
            subway_detected=result.subway_detected,
            confidence=result.confidence,
            reason=result.reason,
            last_known_location=signal.location or self.state.value.last_known_location,
        )

    async def _run(self, generation: int) -> None:
        """Tick loop; one tick at a time, sleeping between ticks."""
        while generation == self._generation:
            interval_ms = self.config.tick_interval_ms
            try:
                state = await self.evaluate()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                self.logger.error("Detection tick failed", error=str(e), exc_info=True)
                interval_ms = self.config.error_backoff_ms
                if self.error_handler and generation == self._generation:
                    try:
                        self.error_handler(e)
                    except Exception as handler_error:
                        self.logger.error(f"Error in tick error handler: {handler_error}")
            else:
                if generation != self._generation:
                    break
                self.state.publish(state)

            await asyncio.sleep(interval_ms / 1000.0)
