"""
Base service implementation for RideSense.

This module provides the BaseService class that all services should inherit from,
defining the core service lifecycle and event handling interfaces.
"""

import asyncio
import structlog
from abc import ABC, abstractmethod
from typing import Dict, Set, Any, Optional, ClassVar
from .events import EventType, BaseEvent
from .registry import ServiceRegistry
from .bus import EventBus

class BaseService(ABC):
    """
    Base class for all services.

    This class provides:
    - Service lifecycle management (start/stop)
    - Typed event publishing and handling
    - Service registration and dependency management
    - Structured logging with context

    Subclasses declare the events they produce and consume, and hook their own
    setup and teardown into ``_on_start`` / ``_on_stop``.
    """

    # Map of EventType to {'schema': event class, 'description': str}
    PRODUCES_EVENTS: ClassVar[Dict[EventType, Dict[str, Any]]] = {}

    # Map of EventType to handler method name
    CONSUMES_EVENTS: ClassVar[Dict[EventType, str]] = {}

    REQUIRED_SERVICES: ClassVar[Set[str]] = set()

    def __init__(self,
                 event_bus: EventBus,
                 service_registry: ServiceRegistry,
                 name: Optional[str] = None,
                 config: Optional[Any] = None):
        """
        Initialize the service.

        Args:
            event_bus: The event bus for publishing and subscribing to events
            service_registry: The service registry for service lifecycle management
            name: Optional service name (defaults to class name)
            config: Optional service configuration
        """
        self.event_bus = event_bus
        self.service_registry = service_registry
        self.name = name or self.__class__.__name__
        self.config = config

        self.logger = structlog.get_logger(service=self.name)

        self._running = False
        self._lock = asyncio.Lock()

        for event_type, event_info in self.PRODUCES_EVENTS.items():
            event_bus.registry.register_producer(self.name, event_type)
            if 'schema' in event_info and 'description' in event_info:
                event_bus.registry.register_event(
                    event_type,
                    event_info['schema'],
                    event_info['description']
                )

        # Every service announces its own lifecycle
        from ridesense.events.system import ServiceStateChangedEvent
        event_bus.registry.register_event(
            EventType.SERVICE_STATE_CHANGED,
            ServiceStateChangedEvent,
            "A service moved to a new lifecycle state"
        )
        event_bus.registry.register_producer(self.name, EventType.SERVICE_STATE_CHANGED)

        self.service_registry.register_service(self.name, self)

        for dependency in self.REQUIRED_SERVICES:
            self.service_registry.register_dependency(self.name, dependency)

    @property
    def is_running(self) -> bool:
        return self._running

    async def start(self) -> None:
        """
        Start the service.

        This method:
        1. Checks all required services are running
        2. Subscribes to events
        3. Performs service-specific initialization
        """
        async with self._lock:
            if self._running:
                self.logger.warning("Service already running")
                return

            for dependency in self.service_registry.get_dependencies(self.name):
                if self.service_registry.get_service_state(dependency) != 'running':
                    raise RuntimeError(f"Required service {dependency} is not running")

            self.service_registry.set_service_state(self.name, 'starting')

            for event_type, handler_name in self.CONSUMES_EVENTS.items():
                self.event_bus.subscribe(event_type, getattr(self, handler_name), self.name)

            # Running before _on_start so start-up publishes are not dropped
            self._running = True
            try:
                await self._on_start()
            except Exception as e:
                self._running = False
                self.service_registry.set_service_state(self.name, 'error')
                self.logger.error("Service failed to start", error=str(e))
                await self.publish_service_state('error', error=str(e))
                raise

            self.service_registry.set_service_state(self.name, 'running')
            self.logger.info("Service started")
            await self.publish_service_state('running')

    async def stop(self) -> None:
        """
        Stop the service.

        This method:
        1. Performs service-specific cleanup
        2. Unsubscribes from events
        3. Marks the service as stopped
        """
        async with self._lock:
            if not self._running:
                self.logger.warning("Service already stopped")
                return

            await self.publish_service_state('stopping')

            try:
                await self._on_stop()
            finally:
                for event_type, handler_name in self.CONSUMES_EVENTS.items():
                    self.event_bus.unsubscribe(event_type, getattr(self, handler_name))

                self._running = False
                self.service_registry.set_service_state(self.name, 'stopped')
                self.logger.info("Service stopped")

            await self.publish_service_state('stopped')

    async def publish(self, event: BaseEvent) -> None:
        """
        Publish an event through the bus.

        Args:
            event: The event to publish
        """
        if not self._running:
            self.logger.warning("Attempted publish while stopped", event_type=event.type)
            return

        await self.event_bus.publish(event, self.name)

    async def publish_service_state(self, state: str, error: Optional[str] = None) -> None:
        """
        Publish a service state change event.

        Args:
            state: New state of the service
            error: Error message when the state is 'error'
        """
        from ridesense.events.system import ServiceStateChangedEvent

        event = ServiceStateChangedEvent(
            producer_name=self.name,
            service_name=self.name,
            state=state,
            error=error
        )
        await self.event_bus.publish(event, self.name)

    async def _on_start(self) -> None:
        """Service-specific start-up; runs with the service lock held."""

    async def _on_stop(self) -> None:
        """Service-specific teardown; runs with the service lock held."""

    @abstractmethod
    async def handle_event(self, event: BaseEvent) -> None:
        """
        Handle an event from the event bus.

        Handlers registered in CONSUMES_EVENTS should funnel into this method
        to standardize event handling.

        Args:
            event: The event to handle
        """
