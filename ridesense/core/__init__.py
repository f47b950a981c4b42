"""
Core framework for RideSense.

This package provides the fundamental components of the RideSense architecture:
- Event system with typed event definitions
- Service registry and lifecycle management
- Configuration management
- Event tracing
"""

from .events import EventType, BaseEvent
from .registry import EventRegistry, ServiceRegistry
from .bus import EventBus
from .tracing import EventTracer
from .service import BaseService
from .config import get_config, ApplicationConfig, DetectionConfig

__all__ = [
    'EventType',
    'BaseEvent',
    'EventRegistry',
    'ServiceRegistry',
    'EventBus',
    'EventTracer',
    'BaseService',
    'get_config',
    'ApplicationConfig',
    'DetectionConfig'
]
