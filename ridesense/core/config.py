"""
Configuration management for RideSense.

This module provides Pydantic settings models for type-safe configuration with
validation and environment variable integration. Every heuristic constant used
by the detection engine lives in DetectionConfig and is handed to the
controller at construction time.
"""

from typing import Tuple
from enum import Enum
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

class LogLevel(str, Enum):
    """Log levels for the application."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

class BaseConfig(BaseSettings):
    """
    Base configuration class with common settings for all components.

    All other configuration classes should inherit from this class.
    """
    model_config = SettingsConfigDict(env_file=".env", env_prefix="RIDESENSE_", extra="ignore")

    debug: bool = False
    log_level: LogLevel = LogLevel.INFO

class EventConfig(BaseConfig):
    """Configuration for the event system."""
    model_config = SettingsConfigDict(env_prefix="RIDESENSE_EVENT_")

    max_trace_events: int = 1000
    tracing_enabled: bool = True

class ServiceConfig(BaseConfig):
    """Configuration for service management."""
    model_config = SettingsConfigDict(env_prefix="RIDESENSE_SERVICE_")

    service_startup_timeout: float = 10.0  # seconds
    service_shutdown_timeout: float = 5.0  # seconds

class DetectionConfig(BaseConfig):
    """
    Tunable thresholds and timings for the detection engine.

    Durations are in milliseconds, accelerations in m/s² and angular rates in rad/s.
    """
    model_config = SettingsConfigDict(env_prefix="RIDESENSE_DETECTION_")

    accel_threshold: float = 12.0
    gyro_threshold: float = 2.0
    position_loss_threshold_ms: int = 30_000
    position_timeout_ms: int = 1_500
    min_detection_samples: int = 10
    detection_confidence_threshold: float = 0.7
    tick_interval_ms: int = 2_000
    error_backoff_ms: int = 5_000
    sample_buffer_capacity: int = 50
    # GPS, sensor, network
    fusion_weights: Tuple[float, float, float] = (0.4, 0.5, 0.1)

    @field_validator("fusion_weights")
    @classmethod
    def validate_weights(cls, v):
        """Weights must all be non-negative."""
        if any(w < 0 for w in v):
            raise ValueError("Fusion weights must be non-negative")
        return v

    @field_validator("detection_confidence_threshold")
    @classmethod
    def validate_confidence_threshold(cls, v):
        if not 0.0 <= v <= 1.0:
            raise ValueError("Detection confidence threshold must be between 0.0 and 1.0")
        return v

    @field_validator(
        "position_loss_threshold_ms",
        "position_timeout_ms",
        "tick_interval_ms",
        "error_backoff_ms",
        "min_detection_samples",
    )
    @classmethod
    def validate_positive(cls, v):
        if v <= 0:
            raise ValueError("Value must be positive")
        return v

    @model_validator(mode="after")
    def validate_capacity(self):
        """The buffers must be able to hold a full analysis window."""
        if self.sample_buffer_capacity < self.min_detection_samples:
            raise ValueError("sample_buffer_capacity must be at least min_detection_samples")
        return self

class SimulationConfig(BaseConfig):
    """Configuration for the simulated sensor providers used by the demo app."""
    model_config = SettingsConfigDict(env_prefix="RIDESENSE_SIMULATION_")

    motion_profile: str = "train"
    sample_rate_hz: float = 20.0
    tunnel_after_s: float = 10.0
    latitude: float = 37.4979
    longitude: float = 127.0276
    networks: Tuple[str, ...] = ("home-ap",)

    @field_validator("motion_profile")
    @classmethod
    def validate_profile(cls, v):
        """Validate the motion profile is one the simulator knows."""
        valid_profiles = ["stationary", "walking", "train"]
        if v not in valid_profiles:
            raise ValueError(f"Motion profile must be one of {valid_profiles}")
        return v

    @field_validator("sample_rate_hz")
    @classmethod
    def validate_rate(cls, v):
        if v <= 0:
            raise ValueError("Sample rate must be positive")
        return v

class ApplicationConfig(BaseConfig):
    """
    Main application configuration that combines all component configurations.

    This is the top-level configuration class that should be used by the application.
    """
    model_config = SettingsConfigDict(env_file=".env", env_nested_delimiter="__")

    event: EventConfig = Field(default_factory=EventConfig)
    service: ServiceConfig = Field(default_factory=ServiceConfig)
    detection: DetectionConfig = Field(default_factory=DetectionConfig)
    simulation: SimulationConfig = Field(default_factory=SimulationConfig)

def get_config() -> ApplicationConfig:
    """
    Get the application configuration.

    Returns:
        The validated ApplicationConfig instance
    """
    return ApplicationConfig()
