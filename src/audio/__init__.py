"""
Audio for Soundify.

Provides tone synthesis, the playback channel pool and the mixer.
The device-backed AudioManager lives in audio.manager and is imported
on demand, since opening PortAudio is not free.
"""

from .channels import Channel, ChannelPool
from .mixer import Mixer
from .synth import SAMPLE_RATE, decode_pcm16, generate_sine_wave, pcm16_to_float, round_half_away

__all__ = [
    "Channel",
    "ChannelPool",
    "Mixer",
    "SAMPLE_RATE",
    "decode_pcm16",
    "generate_sine_wave",
    "pcm16_to_float",
    "round_half_away",
]
