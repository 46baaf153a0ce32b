"""
Sine-wave synthesis as 16-bit PCM.

Buffers are mono, little-endian signed 16-bit at 44100 Hz. Rounding is
half away from zero for both the sample count and the sample values, so
a 5 ms tone has round(220.5) = 221 samples.
"""

import math

import numpy as np

from core.errors import ConfigurationError

SAMPLE_RATE = 44100
AMPLITUDE = 32767

INT16_MIN = -32768
INT16_MAX = 32767


def round_half_away(value):
    """Round to the nearest integer, ties away from zero. Works on scalars and arrays."""
    if isinstance(value, np.ndarray):
        return np.sign(value) * np.floor(np.abs(value) + 0.5)
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def sample_count(duration_ms: int, sample_rate: int = SAMPLE_RATE) -> int:
    """Number of samples in duration_ms of audio."""
    return round_half_away(sample_rate * duration_ms / 1000)


def generate_sine_wave(frequency_hz: float, duration_ms: int) -> bytes:
    """
    Generate a full-scale sine tone as PCM bytes.

    Args:
        frequency_hz: Tone frequency, must be positive
        duration_ms: Tone length in milliseconds, must not be negative

    Returns:
        2 bytes per sample; empty for a zero duration
    """
    if not math.isfinite(frequency_hz) or frequency_hz <= 0:
        raise ConfigurationError(f"Tone frequency must be positive, got {frequency_hz}")
    if duration_ms < 0:
        raise ConfigurationError(f"Tone duration must not be negative, got {duration_ms}")

    count = sample_count(duration_ms)
    if count == 0:
        return b""

    t = np.arange(count, dtype=np.float64)
    wave = np.sin(2 * np.pi * frequency_hz * t / SAMPLE_RATE) * AMPLITUDE
    samples = np.clip(round_half_away(wave), INT16_MIN, INT16_MAX)
    return samples.astype("<i2").tobytes()


def decode_pcm16(buffer: bytes) -> np.ndarray:
    """Decode little-endian 16-bit PCM into an int16 array."""
    if len(buffer) % 2:
        raise ValueError(f"PCM buffer has an odd length ({len(buffer)} bytes)")
    return np.frombuffer(buffer, dtype="<i2").astype(np.int16)


def pcm16_to_float(buffer: bytes) -> np.ndarray:
    """Decode 16-bit PCM into float32 samples in [-1, 1)."""
    return (decode_pcm16(buffer) / 32768.0).astype(np.float32)
