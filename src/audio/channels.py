"""
Playback channel pool.

A fixed set of reusable output channels. Rules pick a channel by priority
(priority mod pool size); starting a sound on a busy channel replaces it.
Channel 0 doubles as the tone channel.

Each channel serializes its own start/stop calls with a lock, so the motion
listener thread and UI-originated triggers can share the pool. Different
channels never wait on each other.
"""

import threading
from typing import TYPE_CHECKING

from core.errors import ConfigurationError, PlaybackError

if TYPE_CHECKING:
    from core.services import AudioOutput, AudioSource

MIN_CHANNELS = 2


class Channel:
    """A playback slot that holds at most one active sound."""

    def __init__(self, channel_id: int, output: "AudioOutput"):
        self.channel_id = channel_id
        self._output = output
        self._lock = threading.Lock()
        self._source: "AudioSource | None" = None
        self._released = False
        self.volume = 1.0
        self.pitch = 1.0

    @property
    def is_active(self) -> bool:
        """True if the channel was started and not stopped since."""
        return self._source is not None

    @property
    def source(self) -> "AudioSource | None":
        return self._source

    def start(self, source: "AudioSource", volume: float = 1.0, pitch: float = 1.0) -> None:
        """
        Play source on this channel, preempting the current sound.

        Raises:
            PlaybackError: If the channel was released or the output failed
        """
        with self._lock:
            if self._released:
                raise PlaybackError(f"Channel {self.channel_id} has been released")
            try:
                self._output.play(self.channel_id, source, volume, pitch)
            except Exception as e:
                # The output keeps whatever it was playing, so _source still names it
                raise PlaybackError(f"Playback failed on channel {self.channel_id}: {e}", e) from e
            self._source = source
            self.volume = volume
            self.pitch = pitch

    def stop(self) -> None:
        """Stop the current sound, if any."""
        with self._lock:
            if self._source is None:
                return
            self._source = None
            try:
                self._output.stop(self.channel_id)
            except Exception as e:
                raise PlaybackError(f"Could not stop channel {self.channel_id}: {e}", e) from e

    def release(self) -> None:
        """Stop and dispose the channel. Later starts fail with PlaybackError."""
        with self._lock:
            if self._released:
                return
            self._released = True
            self._source = None
            try:
                self._output.stop(self.channel_id)
                self._output.dispose(self.channel_id)
            except Exception as e:
                raise PlaybackError(f"Could not release channel {self.channel_id}: {e}", e) from e


class ChannelPool:
    """Fixed-size ordered pool of channels sharing one audio output."""

    def __init__(self, output: "AudioOutput", size: int = MIN_CHANNELS):
        if size < MIN_CHANNELS:
            raise ConfigurationError(f"Channel pool needs at least {MIN_CHANNELS} channels, got {size}")
        self._channels = tuple(Channel(i, output) for i in range(size))

    def __len__(self) -> int:
        return len(self._channels)

    def __getitem__(self, index: int) -> Channel:
        return self._channels[index]

    def __iter__(self):
        return iter(self._channels)

    def select(self, priority: int) -> Channel:
        """Channel for a rule priority. Negative priorities wrap like any other."""
        return self._channels[priority % len(self._channels)]

    @property
    def tone_channel(self) -> Channel:
        """The channel reserved for synthesized tones."""
        return self._channels[0]

    def release(self) -> list[PlaybackError]:
        """
        Release every channel.

        Returns:
            Errors raised while releasing; every channel is attempted
        """
        errors = []
        for channel in self._channels:
            try:
                channel.release()
            except PlaybackError as e:
                errors.append(e)
        return errors
