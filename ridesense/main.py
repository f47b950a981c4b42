"""
Main entry point for RideSense.

This module wires the event system, the detection service and the simulated
providers together and runs until interrupted. It handles signal management,
logging setup, and system lifecycle.
"""

import asyncio
import logging
import signal
import sys
import structlog
from typing import Optional

from ridesense.core import EventRegistry, ServiceRegistry, EventBus, EventTracer, get_config
from ridesense.core.config import ApplicationConfig
from ridesense.core.events import BaseEvent, EventType
from ridesense.events.system import ApplicationStartupCompletedEvent
from ridesense.providers import (
    Location,
    SimulatedMotionSource,
    SimulatedPositionProvider,
    StaticNetworkProvider,
)
from ridesense.services import DetectionService

def setup_logging(level: str = "INFO"):
    """Configure structured logging for the application."""
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer()
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, level, logging.INFO),
        stream=sys.stdout,
    )

class RideSenseApplication:
    """
    Main application class for RideSense.

    This class builds the event system, starts the detection service on top of
    the simulated providers and reports detection events as they happen.
    """

    def __init__(self, config: Optional[ApplicationConfig] = None):
        """Initialize the RideSense application."""
        self.logger = structlog.get_logger(app="ridesense")
        self.config = config or get_config()

        self.event_registry = EventRegistry()
        self.service_registry = ServiceRegistry()

        if self.config.event.tracing_enabled:
            self.event_tracer = EventTracer(max_events=self.config.event.max_trace_events)
        else:
            self.event_tracer = None

        self.event_bus = EventBus(self.event_registry, self.event_tracer)
        self.event_registry.register_event(
            EventType.APPLICATION_STARTUP_COMPLETED,
            ApplicationStartupCompletedEvent,
            "All services started"
        )

        self.services = {}
        self._running = True

    def _build_detection_service(self) -> DetectionService:
        sim = self.config.simulation
        return DetectionService(
            event_bus=self.event_bus,
            service_registry=self.service_registry,
            motion_source=SimulatedMotionSource(sim.motion_profile, sim.sample_rate_hz),
            position_provider=SimulatedPositionProvider(
                Location(latitude=sim.latitude, longitude=sim.longitude),
                tunnel_after_s=sim.tunnel_after_s,
            ),
            network_provider=StaticNetworkProvider(sim.networks, tunnel_after_s=sim.tunnel_after_s),
            config=self.config,
        )

    async def _report(self, event: BaseEvent) -> None:
        """Log ride transitions for whoever watches the console."""
        if event.type == EventType.RIDE_DETECTED:
            self.logger.info("Train ride detected", confidence=round(event.confidence, 2), reason=event.reason)
        elif event.type == EventType.RIDE_ENDED:
            self.logger.info("Train ride ended", reason=event.reason)
        elif event.type == EventType.DETECTION_STATE_CHANGED:
            self.logger.debug("Detection state", **event.state.model_dump(exclude={"last_known_location"}))

    async def initialize(self):
        """Start all services."""
        self.logger.info("Initializing RideSense")

        for event_type in (EventType.DETECTION_STATE_CHANGED, EventType.RIDE_DETECTED, EventType.RIDE_ENDED):
            self.event_bus.subscribe(event_type, self._report, "ridesense")

        try:
            self.services["detection"] = await self._init_service(self._build_detection_service())
            self._log_event_flows()

            await self.event_bus.publish(
                ApplicationStartupCompletedEvent(producer_name="ridesense"),
                "ridesense"
            )
            self.logger.info("RideSense initialization complete")

        except Exception as e:
            self.logger.error("Failed to initialize application", error=str(e), exc_info=True)
            raise

    def _log_event_flows(self):
        """Log who produces and who consumes each detection event."""
        for event_type in (EventType.DETECTION_STATE_CHANGED, EventType.RIDE_DETECTED, EventType.RIDE_ENDED):
            flow = self.event_registry.get_event_flow(event_type)
            self.logger.debug(
                "Event flow",
                event_type=event_type.value,
                producers=sorted(flow["producers"]),
                consumers=sorted(flow["consumers"]),
            )

    async def _init_service(self, service):
        """
        Start a service, bounded by the configured startup timeout.

        Args:
            service: The service instance to start

        Returns:
            The started service
        """
        self.logger.info(f"Starting service: {service.name}")
        try:
            await asyncio.wait_for(service.start(), timeout=self.config.service.service_startup_timeout)
            return service
        except Exception as e:
            self.logger.error(f"Failed to start service: {service.name}", error=str(e), exc_info=True)
            raise

    async def run(self):
        """Run the application main loop."""
        try:
            while self._running:
                await asyncio.sleep(1)

        except asyncio.CancelledError:
            self.logger.info("Application task cancelled")

        finally:
            await self.shutdown()

    async def shutdown(self):
        """Stop all services in reverse start order."""
        if not self.services:
            return

        self._running = False
        self.logger.info("Shutting down RideSense")

        for name, service in reversed(list(self.services.items())):
            try:
                self.logger.info(f"Stopping service: {name}")
                await asyncio.wait_for(service.close(), timeout=self.config.service.service_shutdown_timeout)
            except Exception as e:
                self.logger.error(f"Error stopping service {name}: {e}")
        self.services.clear()

        if self.event_tracer:
            self.logger.info("Event statistics", **self.event_tracer.get_event_stats())
        self.logger.info("RideSense shutdown complete")

    def handle_signal(self, sig):
        """
        Handle termination signals.

        Args:
            sig: The signal received
        """
        self.logger.info(f"Received signal {sig.name}, shutting down")
        self._running = False

async def main():
    """Application entry point."""
    config = get_config()
    setup_logging("DEBUG" if config.debug else config.log_level.value)

    app = RideSenseApplication(config)

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, lambda s=sig: app.handle_signal(s))

    await app.initialize()
    await app.run()

def cli():
    """Console script entry point."""
    try:
        asyncio.run(main())
    except Exception as e:
        logging.error(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)

if __name__ == "__main__":
    cli()
