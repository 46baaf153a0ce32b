"""
Motion sources.

IterableMotionSource replays samples from any iterable on a background
thread: a generator wrapping a sensor bridge, a recorded file, or a list in
tests. The iterable is consumed lazily and only once.
"""

import csv
import threading
from collections.abc import Callable, Iterable, Iterator
from pathlib import Path

from core.errors import ConfigurationError
from core.services import MotionSource, Subscription

from .samples import MotionSample


class _ThreadSubscription(Subscription):
    def __init__(self, stop_event: threading.Event, thread: threading.Thread):
        self._stop_event = stop_event
        self._thread = thread

    def cancel(self) -> None:
        self._stop_event.set()
        # The callback may cancel from the pump thread itself
        if self._thread is not threading.current_thread():
            self._thread.join(timeout=1.0)


class IterableMotionSource(MotionSource):
    """Pulls samples from an iterable on a daemon thread and hands them to the subscriber."""

    def __init__(self, samples: Iterable[MotionSample], interval: float = 0.0):
        """
        Args:
            samples: Samples to deliver, possibly infinite
            interval: Seconds to wait between samples (0 delivers as fast as possible)
        """
        self._samples = samples
        self._interval = interval
        self._subscribed = False
        self._lock = threading.Lock()
        self._stop_event = threading.Event()
        self._finished = threading.Event()

    def subscribe(self, callback: Callable[[MotionSample], None]) -> Subscription:
        with self._lock:
            if self._subscribed:
                raise ConfigurationError("Motion source cannot be subscribed to twice")
            self._subscribed = True

        thread = threading.Thread(target=self._pump, args=(callback,), daemon=True)
        thread.start()
        return _ThreadSubscription(self._stop_event, thread)

    def wait_until_finished(self, timeout: float | None = None) -> bool:
        """Block until the iterable is exhausted or the subscription cancelled."""
        return self._finished.wait(timeout=timeout)

    def _pump(self, callback: Callable[[MotionSample], None]) -> None:
        try:
            for sample in self._samples:
                if self._stop_event.is_set():
                    break
                try:
                    callback(sample)
                except Exception as e:
                    print(f"⚠️ Motion callback error: {e}")
                if self._interval > 0 and self._stop_event.wait(self._interval):
                    break
        except Exception as e:
            print(f"⚠️ Motion source error: {e}")
        finally:
            self._finished.set()


def read_samples(path: str | Path) -> Iterator[MotionSample]:
    """
    Yield samples from a CSV file of x,y,z rows.

    A header row and blank lines are skipped.
    """
    with open(path, newline="") as f:
        for row in csv.reader(f):
            if not row or not "".join(row).strip():
                continue
            try:
                x, y, z = (float(value) for value in row[:3])
            except ValueError:
                continue
            yield MotionSample(x, y, z)
