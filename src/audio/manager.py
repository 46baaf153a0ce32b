"""
Audio output for Soundify.

All sound goes through one persistent sounddevice stream:
- Numbered channels for clips, tones and haptic thumps (one sound each)
- A sequential lane for synthesized speech
- Clip files loaded with soundfile, downmixed, resampled and cached
- Pitch applied as a playback-rate change
"""

import threading
from dataclasses import dataclass
from pathlib import Path

import numpy as np
import sounddevice as sd
import soundfile as sf

from core.services import AudioOutput, AudioSource

from .mixer import Mixer
from .synth import SAMPLE_RATE, pcm16_to_float


@dataclass
class AudioConfig:
    """Audio configuration constants."""

    OUTPUT_SAMPLE_RATE: int = SAMPLE_RATE  # Matches synthesized tones
    SPEECH_SAMPLE_RATE: int = 24000  # Kokoro TTS native rate
    BLOCK_SIZE: int = 1024


class AudioManager(AudioOutput):
    """
    Unified output for every feedback sound.

    A single stream avoids the clicks and races of opening one stream per
    sound. Channel operations only swap mixer state, so play() never blocks
    on the device.
    """

    def __init__(self, asset_dir: str | Path = "sounds"):
        """
        Initialize the audio manager and start the output stream.

        Args:
            asset_dir: Directory that relative clip paths are resolved against
        """
        self._config = AudioConfig()
        self._asset_dir = Path(asset_dir)
        self._mixer = Mixer()

        # Sound cache (stores audio already resampled to OUTPUT_SAMPLE_RATE)
        self._sound_cache: dict[str, np.ndarray] = {}
        self._cache_lock = threading.Lock()

        self._output_stream = sd.OutputStream(
            samplerate=self._config.OUTPUT_SAMPLE_RATE,
            channels=1,
            dtype=np.float32,
            callback=self._output_callback,
            blocksize=self._config.BLOCK_SIZE,
        )
        self._output_stream.start()

    @property
    def config(self) -> AudioConfig:
        return self._config

    @property
    def mixer(self) -> Mixer:
        return self._mixer

    def _resample(self, audio: np.ndarray, from_rate: int, to_rate: int) -> np.ndarray:
        """
        Resample audio from one sample rate to another using linear interpolation.

        Args:
            audio: Input audio array
            from_rate: Source sample rate
            to_rate: Target sample rate

        Returns:
            Resampled audio array
        """
        if from_rate == to_rate or len(audio) == 0:
            return audio

        ratio = to_rate / from_rate
        new_length = max(1, int(len(audio) * ratio))

        old_indices = np.arange(len(audio))
        new_indices = np.linspace(0, len(audio) - 1, new_length)
        return np.interp(new_indices, old_indices, audio).astype(np.float32)

    def _output_callback(self, outdata: np.ndarray, frames: int, time, status) -> None:
        """Fill the device buffer from the mixer. Called by sounddevice from its own thread."""
        outdata[:, 0] = self._mixer.render(frames)

    def _load_clip(self, path: str) -> np.ndarray:
        """Read a clip file as mono float32 at the output rate, caching by path."""
        resolved = Path(path)
        if not resolved.is_absolute():
            resolved = self._asset_dir / resolved
        cache_key = str(resolved)

        with self._cache_lock:
            if cache_key in self._sound_cache:
                return self._sound_cache[cache_key]

        if not resolved.exists():
            raise FileNotFoundError(f"Sound file not found: {resolved}")

        raw_audio, sample_rate = sf.read(resolved)
        # Convert to mono if stereo
        if len(raw_audio.shape) > 1:
            raw_audio = raw_audio.mean(axis=1)
        audio = self._resample(
            raw_audio.astype(np.float32),
            sample_rate,
            self._config.OUTPUT_SAMPLE_RATE,
        )

        with self._cache_lock:
            self._sound_cache[cache_key] = audio
        return audio

    def _prepare(self, source: AudioSource, pitch: float) -> np.ndarray:
        if isinstance(source, (bytes, bytearray)):
            audio = pcm16_to_float(bytes(source))
        else:
            audio = self._load_clip(source)

        if pitch != 1.0:
            # Playing faster raises the pitch: treat the clip as recorded at rate * pitch
            rate = self._config.OUTPUT_SAMPLE_RATE
            audio = self._resample(audio, int(round(rate * pitch)), rate)
        return audio

    def preload(self, paths: list[str]) -> None:
        """Load clips ahead of time so the first trigger doesn't touch the disk."""
        for path in paths:
            self._load_clip(path)

    def play(self, channel_id: int, source: AudioSource, volume: float = 1.0, pitch: float = 1.0) -> None:
        """Start source on a channel, replacing its current sound."""
        self._mixer.set_voice(channel_id, self._prepare(source, pitch), volume)

    def stop(self, channel_id: int) -> None:
        self._mixer.clear_voice(channel_id)

    def dispose(self, channel_id: int) -> None:
        """Channels own no device resources beyond their voice."""
        self._mixer.clear_voice(channel_id)

    def is_playing(self, channel_id: int) -> bool:
        return self._mixer.is_playing(channel_id)

    def queue_audio(self, audio: np.ndarray, sample_rate: int | None = None) -> None:
        """
        Queue audio on the speech lane.

        Args:
            audio: Audio data as numpy array
            sample_rate: Sample rate of the audio (defaults to OUTPUT_SAMPLE_RATE)
        """
        if sample_rate is None:
            sample_rate = self._config.OUTPUT_SAMPLE_RATE

        audio = np.asarray(audio, dtype=np.float32)
        if sample_rate != self._config.OUTPUT_SAMPLE_RATE:
            audio = self._resample(audio, sample_rate, self._config.OUTPUT_SAMPLE_RATE)

        if len(audio) and (audio.max() > 1.0 or audio.min() < -1.0):
            # Assume int16 range, normalize
            audio = audio / 32768.0

        self._mixer.enqueue(audio)

    def stop_current(self) -> None:
        """Stop the speech lane and drop anything queued on it."""
        self._mixer.clear_queue()

    def cleanup(self) -> None:
        """Clean up audio resources."""
        self.stop_current()

        if self._output_stream is not None:
            try:
                self._output_stream.stop()
                self._output_stream.close()
            except Exception as e:
                print(f"⚠️ Error closing audio stream: {e}")
            self._output_stream = None

        with self._cache_lock:
            self._sound_cache.clear()
