"""
Settings management for Soundify.

Loads configuration from settings.toml in the working directory.
"""

import tomllib
from dataclasses import dataclass, field
from pathlib import Path

from core.catalog import FRAME_SECONDS
from core.errors import ConfigurationError
from motion.listener import SHAKE_THRESHOLD


@dataclass
class AudioSettings:
    """Settings related to audio output."""

    asset_dir: str = "sounds"  # Clip paths in rules are relative to this directory
    channels: int = 2  # Size of the playback channel pool


@dataclass
class SpeechSettings:
    """Settings related to speech."""

    language: str = "en-US"
    voice: str = "af_heart"  # Kokoro voice name


@dataclass
class MotionSettings:
    """Settings related to shake detection."""

    shake_threshold: float = SHAKE_THRESHOLD  # Per-axis acceleration, m/s²


@dataclass
class GestureSettings:
    """Settings related to gesture velocity."""

    frame_seconds: float = FRAME_SECONDS  # Used when a sample doesn't carry its elapsed time


@dataclass
class Settings:
    """Application settings loaded from settings.toml."""

    audio: AudioSettings = field(default_factory=AudioSettings)
    speech: SpeechSettings = field(default_factory=SpeechSettings)
    motion: MotionSettings = field(default_factory=MotionSettings)
    gestures: GestureSettings = field(default_factory=GestureSettings)

    def validate(self) -> None:
        """Raise ConfigurationError for values the engine cannot run with."""
        if self.audio.channels < 2:
            raise ConfigurationError(f"audio.channels must be at least 2, got {self.audio.channels}")
        if self.motion.shake_threshold <= 0:
            raise ConfigurationError(f"motion.shake_threshold must be positive, got {self.motion.shake_threshold}")
        if self.gestures.frame_seconds <= 0:
            raise ConfigurationError(f"gestures.frame_seconds must be positive, got {self.gestures.frame_seconds}")


def load_settings(settings_path: str | Path = "settings.toml") -> Settings:
    """
    Load settings from settings.toml.

    Args:
        settings_path: Path to the settings file

    Returns:
        Settings object with all configuration values.
    """
    settings_path = Path(settings_path)

    if settings_path.exists():
        with open(settings_path, "rb") as f:
            try:
                data = tomllib.load(f)
            except tomllib.TOMLDecodeError as e:
                raise ConfigurationError(f"Invalid settings file {settings_path}: {e}") from e
    else:
        data = {}

    audio_data = data.get("audio", {})
    audio_settings = AudioSettings(
        asset_dir=audio_data.get("asset_dir", "sounds"),
        channels=int(audio_data.get("channels", 2)),
    )

    speech_data = data.get("speech", {})
    speech_settings = SpeechSettings(
        language=speech_data.get("language", "en-US"),
        voice=speech_data.get("voice", "af_heart"),
    )

    motion_data = data.get("motion", {})
    motion_settings = MotionSettings(
        shake_threshold=float(motion_data.get("shake_threshold", SHAKE_THRESHOLD)),
    )

    gesture_data = data.get("gestures", {})
    gesture_settings = GestureSettings(
        frame_seconds=float(gesture_data.get("frame_seconds", FRAME_SECONDS)),
    )

    settings = Settings(
        audio=audio_settings,
        speech=speech_settings,
        motion=motion_settings,
        gestures=gesture_settings,
    )
    settings.validate()
    return settings
