"""
Service implementations for RideSense.

Services wrap the detection engine and communicate its results to the rest
of the application through events.
"""

from .detection_service import DetectionService
