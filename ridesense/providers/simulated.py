"""
Simulated providers for development and demos.

These stand in for device sensor bindings when running RideSense on a
workstation. The motion source synthesizes accelerometer and gyroscope
readings for a few motion profiles; positioning and network providers switch
to "underground" behaviour after a configurable delay.

Do NOT use these in production data paths.
"""

import random
import threading
import time
from typing import Callable, Iterable, List, Optional, Set, Tuple
import structlog
from .base import (
    Location,
    MotionCallback,
    MotionSource,
    NetworkSnapshotProvider,
    PositionProvider,
    ProviderError,
    SensorKind,
)

GRAVITY = 9.81

def _train_sample(rng: random.Random) -> Tuple[Tuple[float, float, float], Tuple[float, float, float]]:
    # Steady vibration above gravity, moderate rotation with occasional curves
    accel = (rng.gauss(0.0, 0.3), rng.gauss(0.0, 0.3), 11.5 + rng.gauss(0.0, 0.5))
    rate = 1.6 if rng.random() < 0.15 else 0.35 + rng.gauss(0.0, 0.05)
    return accel, (0.0, 0.0, rate)

def _walking_sample(rng: random.Random) -> Tuple[Tuple[float, float, float], Tuple[float, float, float]]:
    accel = (rng.gauss(0.0, 1.5), rng.gauss(0.0, 1.5), GRAVITY + rng.gauss(0.0, 3.0))
    return accel, (rng.gauss(0.0, 0.4), rng.gauss(0.0, 0.4), rng.gauss(0.0, 0.4))

def _stationary_sample(rng: random.Random) -> Tuple[Tuple[float, float, float], Tuple[float, float, float]]:
    accel = (rng.gauss(0.0, 0.02), rng.gauss(0.0, 0.02), GRAVITY + rng.gauss(0.0, 0.02))
    return accel, (rng.gauss(0.0, 0.01), rng.gauss(0.0, 0.01), rng.gauss(0.0, 0.01))

PROFILES = {
    "train": _train_sample,
    "walking": _walking_sample,
    "stationary": _stationary_sample,
}

class SimulatedMotionSource(MotionSource):
    """
    Motion source backed by a daemon thread.

    The thread runs while at least one callback is registered and delivers one
    accelerometer and one gyroscope event per period.
    """

    def __init__(self, profile: str = "train", sample_rate_hz: float = 20.0, seed: Optional[int] = None):
        if profile not in PROFILES:
            raise ValueError(f"Unknown motion profile: {profile}")
        self.profile = profile
        self.period = 1.0 / sample_rate_hz
        self._rng = random.Random(seed)
        self._callbacks: List[MotionCallback] = []
        self._lock = threading.Lock()
        # Set while a worker runs; each worker owns its own event
        self._stop_event: Optional[threading.Event] = None
        self.logger = structlog.get_logger(provider="simulated_motion")

    @property
    def running(self) -> bool:
        return self._stop_event is not None

    def register(self, callback: MotionCallback) -> None:
        with self._lock:
            if callback in self._callbacks:
                return
            self._callbacks.append(callback)
            if self._stop_event is None:
                self._stop_event = threading.Event()
                threading.Thread(
                    target=self._run, args=(self._stop_event,), name="simulated-motion", daemon=True
                ).start()
                self.logger.info("Motion simulation started", profile=self.profile)

    def unregister(self, callback: MotionCallback) -> None:
        with self._lock:
            if callback in self._callbacks:
                self._callbacks.remove(callback)
            if self._callbacks or self._stop_event is None:
                return
            self._stop_event.set()
            self._stop_event = None
            self.logger.info("Motion simulation stopped")

    def emit(self) -> None:
        """Generate one accelerometer and one gyroscope event."""
        accel, gyro = PROFILES[self.profile](self._rng)
        with self._lock:
            callbacks = list(self._callbacks)
        for callback in callbacks:
            callback(SensorKind.ACCEL, *accel)
            callback(SensorKind.GYRO, *gyro)

    def _run(self, stop_event: threading.Event) -> None:
        while not stop_event.wait(self.period):
            try:
                self.emit()
            except Exception as e:
                self.logger.error("Motion callback failed", error=repr(e))

class SimulatedPositionProvider(PositionProvider):
    """
    Reports a fixed location until the simulated train enters a tunnel.

    Set ``failing`` to make every request raise ProviderError.
    """

    def __init__(self,
                 location: Location,
                 tunnel_after_s: Optional[float] = None,
                 clock: Callable[[], float] = time.monotonic):
        self.location = location
        self.tunnel_after_s = tunnel_after_s
        self.failing = False
        self._clock = clock
        self._started_at = clock()

    def underground(self) -> bool:
        if self.tunnel_after_s is None:
            return False
        return self._clock() - self._started_at >= self.tunnel_after_s

    async def current_fix(self) -> Optional[Location]:
        if self.failing:
            raise ProviderError("Positioning unavailable")
        if self.underground():
            return None
        return self.location

class StaticNetworkProvider(NetworkSnapshotProvider):
    """
    Network provider returning a settable set of identifiers.

    With ``tunnel_after_s`` set, the set becomes empty once the delay elapsed.
    """

    def __init__(self,
                 identifiers: Iterable[str] = (),
                 tunnel_after_s: Optional[float] = None,
                 clock: Callable[[], float] = time.monotonic):
        self._identifiers: Set[str] = set(identifiers)
        self.tunnel_after_s = tunnel_after_s
        self._clock = clock
        self._started_at = clock()

    def set_identifiers(self, identifiers: Iterable[str]) -> None:
        self._identifiers = set(identifiers)

    def current_identifiers(self) -> Set[str]:
        if self.tunnel_after_s is not None and self._clock() - self._started_at >= self.tunnel_after_s:
            return set()
        return set(self._identifiers)
