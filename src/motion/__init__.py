"""
Device motion for Soundify: samples, sources and shake detection.
"""

from .listener import SHAKE_THRESHOLD, MotionListener, is_shake
from .samples import MotionSample
from .sources import IterableMotionSource, read_samples

__all__ = [
    "MotionListener",
    "MotionSample",
    "IterableMotionSource",
    "SHAKE_THRESHOLD",
    "is_shake",
    "read_samples",
]
