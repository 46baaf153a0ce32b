from dataclasses import dataclass


@dataclass(frozen=True)
class MotionSample:
    """One 3-axis acceleration reading (m/s², gravity included)."""

    x: float
    y: float
    z: float
