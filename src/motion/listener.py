"""
Shake detection on a motion sample stream.

The listener subscribes to a MotionSource and turns any sample with an axis
beyond the threshold into a NamedTag("shake") event for the engine.
"""

import threading
from typing import TYPE_CHECKING, Callable

from core.errors import ConfigurationError
from core.events import NamedTag

from .samples import MotionSample

if TYPE_CHECKING:
    from core.services import MotionSource, Subscription

SHAKE_THRESHOLD = 15.0

SHAKE_EVENT = NamedTag("shake")


def is_shake(sample: MotionSample, threshold: float = SHAKE_THRESHOLD) -> bool:
    """True if any axis exceeds the threshold in magnitude (strictly)."""
    return abs(sample.x) > threshold or abs(sample.y) > threshold or abs(sample.z) > threshold


class MotionListener:
    """
    Forwards shake events from a motion source.

    Delivery and cancellation share a lock, so once cancel() returns no
    further on_shake call can start, even if the source keeps producing
    samples or is slow to stop.
    """

    def __init__(
        self,
        source: "MotionSource",
        on_shake: Callable[[NamedTag], None],
        threshold: float = SHAKE_THRESHOLD,
    ):
        if threshold <= 0:
            raise ConfigurationError(f"Shake threshold must be positive, got {threshold}")
        self._source = source
        self._on_shake = on_shake
        self.threshold = threshold

        self._lock = threading.RLock()
        self._cancelled = False
        self._subscription: "Subscription | None" = None

    @property
    def is_active(self) -> bool:
        return self._subscription is not None and not self._cancelled

    def start(self) -> None:
        """Subscribe to the source. Calling it again is a no-op."""
        with self._lock:
            if self._cancelled:
                raise ConfigurationError("Motion listener was cancelled and cannot restart")
            if self._subscription is None:
                self._subscription = self._source.subscribe(self._on_sample)

    def _on_sample(self, sample: MotionSample) -> None:
        with self._lock:
            if self._cancelled or not is_shake(sample, self.threshold):
                return
            self._on_shake(SHAKE_EVENT)

    def cancel(self) -> None:
        """Stop forwarding shakes and cancel the subscription. Idempotent."""
        with self._lock:
            if self._cancelled:
                return
            self._cancelled = True
            subscription = self._subscription

        if subscription is not None:
            subscription.cancel()
