"""Wireless network churn detection."""

from typing import FrozenSet
import structlog
from ridesense.providers.base import NetworkSnapshotProvider

class NetworkChurnDetector:
    """
    Compares the visible network set against the one seen at monitoring start.

    Losing every network, or finding a completely different set, suggests the
    device has moved underground or into a station.
    """

    def __init__(self, provider: NetworkSnapshotProvider):
        self.provider = provider
        self.initial_snapshot: FrozenSet[str] = frozenset()
        self.logger = structlog.get_logger(component="network_churn")

    def snapshot(self) -> FrozenSet[str]:
        """Read the current identifiers; any failure reads as an empty set."""
        try:
            identifiers = self.provider.current_identifiers()
        except Exception as e:
            self.logger.warning("Network snapshot failed", error=repr(e))
            return frozenset()
        return frozenset(identifiers or ())

    def capture_initial(self) -> FrozenSet[str]:
        self.initial_snapshot = self.snapshot()
        self.logger.debug("Captured initial networks", count=len(self.initial_snapshot))
        return self.initial_snapshot

    def score(self, current: FrozenSet[str]) -> float:
        """
        Score the drift of ``current`` from the initial snapshot.

        Rules are checked in order: all networks lost (0.6), many new networks
        appeared (0.5), none of the initial networks remain (0.7), otherwise 0.2.
        """
        initial = self.initial_snapshot
        if not current and initial:
            return 0.6
        if len(current) > len(initial) + 3:
            return 0.5
        if current and not (current & initial):
            return 0.7
        return 0.2

    def evaluate(self) -> float:
        return self.score(self.snapshot())
