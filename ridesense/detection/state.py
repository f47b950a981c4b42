"""Observable container for the published DetectionState."""

import itertools
import threading
from typing import Callable, Dict
import structlog
from .models import DetectionState

StateObserver = Callable[[DetectionState], None]

class DetectionStateStream:
    """
    Holds the current DetectionState and pushes every new one to observers.

    Replacing the state and notifying observers happen under one lock, so
    observers see states in publish order and never a half-applied update.
    Observers run synchronously on the publishing task and must not block.
    """

    def __init__(self, initial: DetectionState = None):
        self._state = initial or DetectionState()
        self._observers: Dict[int, StateObserver] = {}
        self._handles = itertools.count(1)
        # Reentrant so an observer may read ``value`` or publish in turn
        self._lock = threading.RLock()
        self.logger = structlog.get_logger(component="state_stream")

    @property
    def value(self) -> DetectionState:
        return self._state

    def subscribe(self, observer: StateObserver) -> int:
        """Register an observer and return a handle for ``unsubscribe``."""
        with self._lock:
            handle = next(self._handles)
            self._observers[handle] = observer
        return handle

    def unsubscribe(self, handle: int) -> None:
        with self._lock:
            self._observers.pop(handle, None)

    def publish(self, state: DetectionState) -> None:
        with self._lock:
            self._state = state
            for handle, observer in list(self._observers.items()):
                try:
                    observer(state)
                except Exception as e:
                    self.logger.error("State observer failed", handle=handle, error=repr(e), exc_info=True)

    def __len__(self) -> int:
        return len(self._observers)
