"""
Haptic pulses rendered as sound.

Desktops rarely have a vibration motor, so each pulse kind becomes a short
low-frequency thump on its own output channel. Stronger pulses are lower,
longer and louder.
"""

from collections import deque
from dataclasses import dataclass
from typing import TYPE_CHECKING

from audio.synth import generate_sine_wave
from core.rules import HapticPulse
from core.services import HapticService

if TYPE_CHECKING:
    from core.services import AudioOutput

# Pool channels are numbered from 0, so a negative id never collides
HAPTIC_CHANNEL = -1

# Pulses remembered by a driver
HISTORY_SIZE = 64


@dataclass(frozen=True)
class PulseShape:
    frequency_hz: float
    duration_ms: int
    volume: float


PULSE_SHAPES = {
    HapticPulse.SELECTION: PulseShape(frequency_hz=180.0, duration_ms=10, volume=0.3),
    HapticPulse.LIGHT: PulseShape(frequency_hz=140.0, duration_ms=20, volume=0.4),
    HapticPulse.MEDIUM: PulseShape(frequency_hz=100.0, duration_ms=35, volume=0.6),
    HapticPulse.HEAVY: PulseShape(frequency_hz=60.0, duration_ms=60, volume=0.9),
}


class AudioHapticDriver(HapticService):
    """HapticService that plays a thump per pulse and remembers what it played."""

    def __init__(self, output: "AudioOutput", channel_id: int = HAPTIC_CHANNEL, history_size: int = HISTORY_SIZE):
        self._output = output
        self._channel_id = channel_id
        self._buffers = {
            pulse: generate_sine_wave(shape.frequency_hz, shape.duration_ms)
            for pulse, shape in PULSE_SHAPES.items()
        }
        self.history: deque[HapticPulse] = deque(maxlen=history_size)

    def vibrate(self, pulse: HapticPulse) -> None:
        if pulse not in self._buffers:
            raise ValueError(f"Unknown haptic pulse: {pulse!r}")
        self.history.append(pulse)
        self._output.play(self._channel_id, self._buffers[pulse], PULSE_SHAPES[pulse].volume)

    def last_pulse(self) -> HapticPulse | None:
        return self.history[-1] if self.history else None

    def stop(self) -> None:
        """Cut off the thump currently playing."""
        self._output.stop(self._channel_id)
