"""
RideSense - transit ride detection for a mobile companion app.

This package infers, without any dedicated transit API, whether the device's
carrier is currently riding a train. It continuously fuses three noisy
signals into a single confidence score:

- Device motion (accelerometer + gyroscope vibration and rotation patterns)
- Positioning availability (how long the last location fix is overdue)
- Wireless-network churn (how far the visible network set drifted)
"""

__version__ = "1.0.0"
