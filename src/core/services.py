"""
Interfaces of the external services the dispatch engine drives.

The engine only ever talks to these abstract classes. Concrete desktop
implementations live in the audio, tts, haptics and motion packages;
tests substitute fakes.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from motion.samples import MotionSample

    from .rules import HapticPulse

# An asset path (resolved by the output) or a 16-bit mono PCM buffer at 44100 Hz
AudioSource = str | bytes


class AudioOutput(ABC):
    """Plays sounds on numbered channels. Each channel holds one sound at a time."""

    @abstractmethod
    def play(self, channel_id: int, source: AudioSource, volume: float = 1.0, pitch: float = 1.0) -> None:
        """Start playing source on a channel, replacing whatever it was playing. Non-blocking."""
        pass

    @abstractmethod
    def stop(self, channel_id: int) -> None:
        """Stop the channel's current sound, if any."""
        pass

    @abstractmethod
    def dispose(self, channel_id: int) -> None:
        """Release everything held for the channel."""
        pass


class SpeechService(ABC):
    """Speaks text. Requests are queued by the service; speak() returns immediately."""

    @property
    @abstractmethod
    def language(self) -> str:
        """Language fixed at construction, e.g. "en-US"."""
        pass

    @abstractmethod
    def speak(self, text: str) -> None:
        pass

    def stop(self) -> None:
        """Drop queued speech and silence the current utterance. Default does nothing."""
        pass


class HapticService(ABC):
    """Produces haptic pulses."""

    @abstractmethod
    def vibrate(self, pulse: "HapticPulse") -> None:
        pass

    def stop(self) -> None:
        """Cut off a pulse still in progress. Default does nothing."""
        pass


class Subscription(ABC):
    """Handle returned by MotionSource.subscribe()."""

    @abstractmethod
    def cancel(self) -> None:
        """Stop delivery. No callback may start after this returns."""
        pass


class MotionSource(ABC):
    """A lazy, non-restartable stream of 3-axis acceleration samples."""

    @abstractmethod
    def subscribe(self, callback: Callable[["MotionSample"], None]) -> Subscription:
        pass
