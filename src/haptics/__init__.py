from .driver import HAPTIC_CHANNEL, PULSE_SHAPES, AudioHapticDriver

__all__ = ["AudioHapticDriver", "HAPTIC_CHANNEL", "PULSE_SHAPES"]
