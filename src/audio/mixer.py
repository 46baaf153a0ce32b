"""
Software mixer behind the audio output stream.

Holds one voice per channel plus a sequential lane for speech. render() is
called from the sounddevice callback thread; everything else may be called
from any thread.
"""

import queue
import threading
from dataclasses import dataclass
from typing import Hashable

import numpy as np


@dataclass
class Voice:
    """A sound playing on a channel."""

    audio: np.ndarray
    volume: float = 1.0
    position: int = 0

    @property
    def finished(self) -> bool:
        return self.position >= len(self.audio)


class Mixer:
    """
    Sums channel voices and the queued lane into one mono block.

    Setting a voice on a channel replaces the previous one (no mixing within
    a channel). The lane plays queued buffers back to back, like a playlist.
    """

    def __init__(self):
        self._voices: dict[Hashable, Voice] = {}
        self._voices_lock = threading.Lock()

        self._lane: queue.Queue[np.ndarray] = queue.Queue()
        self._lane_current: np.ndarray | None = None
        self._lane_position = 0
        self._lane_lock = threading.Lock()

    def set_voice(self, key: Hashable, audio: np.ndarray, volume: float = 1.0) -> None:
        """Start audio on a channel, replacing whatever it was playing."""
        with self._voices_lock:
            self._voices[key] = Voice(audio=audio.astype(np.float32), volume=volume)

    def clear_voice(self, key: Hashable) -> None:
        with self._voices_lock:
            self._voices.pop(key, None)

    def is_playing(self, key: Hashable) -> bool:
        with self._voices_lock:
            return key in self._voices

    def enqueue(self, audio: np.ndarray) -> None:
        """Append audio to the lane."""
        self._lane.put(audio.astype(np.float32))

    def clear_queue(self) -> None:
        """Drop the lane's current and pending audio."""
        with self._lane_lock:
            self._lane_current = None
            self._lane_position = 0
            while True:
                try:
                    self._lane.get_nowait()
                except queue.Empty:
                    break

    @property
    def lane_busy(self) -> bool:
        return self._lane_current is not None or not self._lane.empty()

    def render(self, frames: int) -> np.ndarray:
        """Produce the next frames samples, clipped to [-1, 1]."""
        out = np.zeros(frames, dtype=np.float32)

        with self._voices_lock:
            for key in list(self._voices):
                voice = self._voices[key]
                chunk = voice.audio[voice.position : voice.position + frames]
                out[: len(chunk)] += chunk * voice.volume
                voice.position += len(chunk)
                if voice.finished:
                    del self._voices[key]

        self._render_lane(out)
        return np.clip(out, -1.0, 1.0)

    def _render_lane(self, out: np.ndarray) -> None:
        frames = len(out)
        output_pos = 0
        with self._lane_lock:
            while output_pos < frames:
                if self._lane_current is None:
                    try:
                        self._lane_current = self._lane.get_nowait()
                        self._lane_position = 0
                    except queue.Empty:
                        break

                remaining = len(self._lane_current) - self._lane_position
                to_copy = min(remaining, frames - output_pos)
                out[output_pos : output_pos + to_copy] += self._lane_current[
                    self._lane_position : self._lane_position + to_copy
                ]
                self._lane_position += to_copy
                output_pos += to_copy

                if self._lane_position >= len(self._lane_current):
                    self._lane_current = None
                    self._lane_position = 0
