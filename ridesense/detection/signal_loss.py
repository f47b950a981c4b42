"""
Positioning signal loss detection.

Underground the positioning provider stops producing fixes; the longer it has
been silent, the more likely the device is in a tunnel.
"""

import asyncio
import time
from dataclasses import dataclass
from typing import Callable, Optional
import structlog
from ridesense.providers.base import PositionProvider
from .models import Location, ProviderError

SCORE_FIX = 0.0
SCORE_BRIEF_LOSS = 0.3
SCORE_PROVIDER_ERROR = 0.5
SCORE_SIGNAL_LOST = 0.8

@dataclass(frozen=True)
class SignalLossResult:
    score: float
    location: Optional[Location] = None

class SignalLossDetector:
    """
    Scores how long positioning has been unavailable.

    Every evaluation asks the provider exactly once and never raises: a failing
    or stalled provider yields a neutral-high score instead.
    """

    def __init__(self,
                 provider: PositionProvider,
                 loss_threshold_ms: int = 30_000,
                 timeout_ms: int = 1_500,
                 clock: Callable[[], float] = time.monotonic):
        """
        Args:
            provider: Source of position fixes
            loss_threshold_ms: Silence after which the signal counts as lost
            timeout_ms: Upper bound for a single provider call
            clock: Monotonic clock in seconds (injectable for tests)
        """
        self.provider = provider
        self.loss_threshold_ms = loss_threshold_ms
        self.timeout_ms = timeout_ms
        self._clock = clock
        self._last_fix_at: Optional[float] = None
        self.logger = structlog.get_logger(component="signal_loss")

    def reset(self) -> None:
        """Forget the last fix; the next silent evaluation counts as a loss."""
        self._last_fix_at = None

    def elapsed_since_fix_ms(self) -> Optional[float]:
        if self._last_fix_at is None:
            return None
        return (self._clock() - self._last_fix_at) * 1000.0

    async def evaluate(self) -> SignalLossResult:
        try:
            location = await asyncio.wait_for(
                self.provider.current_fix(), timeout=self.timeout_ms / 1000.0
            )
        except asyncio.CancelledError:
            raise
        except asyncio.TimeoutError:
            self.logger.warning("Position provider timed out", timeout_ms=self.timeout_ms)
            return SignalLossResult(SCORE_PROVIDER_ERROR)
        except ProviderError as e:
            self.logger.warning(f"Position provider failed: {e}")
            return SignalLossResult(SCORE_PROVIDER_ERROR)
        except Exception as e:
            self.logger.warning("Unexpected position provider error", error=repr(e))
            return SignalLossResult(SCORE_PROVIDER_ERROR)

        if location is not None:
            self._last_fix_at = self._clock()
            return SignalLossResult(SCORE_FIX, location)

        elapsed = self.elapsed_since_fix_ms()
        # Never having seen a fix counts as an unbounded gap
        if elapsed is None or elapsed > self.loss_threshold_ms:
            return SignalLossResult(SCORE_SIGNAL_LOST)
        return SignalLossResult(SCORE_BRIEF_LOSS)
