"""
Application context for dependency injection.

The AppContext holds the concrete services a FeedbackEngine is built from.
Components receive the context (or specific services from it) rather than
reaching for process-wide audio, speech or sensor APIs.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .events import EventBus

if TYPE_CHECKING:
    from soundify.settings import Settings

    from .engine import FeedbackEngine
    from .rules import Rule
    from .services import AudioOutput, HapticService, MotionSource, SpeechService


@dataclass
class AppContext:
    """
    Container for all application dependencies.

    Attributes:
        event_bus: Bus the engine reports fired rules and failures on
        settings: Application configuration
        audio_output: Channel-based audio output
        speech: Text-to-speech service
        haptics: Haptic pulse service
        motion_source: Optional accelerometer stream
    """

    event_bus: EventBus = field(default_factory=EventBus)
    settings: "Settings | None" = None
    audio_output: "AudioOutput | None" = None
    speech: "SpeechService | None" = None
    haptics: "HapticService | None" = None
    motion_source: "MotionSource | None" = None

    def create_engine(self, rules: "list[Rule]") -> "FeedbackEngine":
        """Build a FeedbackEngine from this context's services and settings."""
        from soundify.settings import Settings

        from .engine import FeedbackEngine

        if self.audio_output is None or self.speech is None or self.haptics is None:
            raise ValueError("AppContext is missing audio, speech or haptic service")

        settings = self.settings or Settings()
        return FeedbackEngine(
            rules,
            audio_output=self.audio_output,
            speech=self.speech,
            haptics=self.haptics,
            motion_source=self.motion_source,
            channel_count=settings.audio.channels,
            shake_threshold=settings.motion.shake_threshold,
            event_bus=self.event_bus,
        )

    def cleanup(self) -> None:
        """Release the device-backed services, if they have anything to release."""
        for service in (self.speech, self.audio_output):
            cleanup = getattr(service, "cleanup", None)
            if cleanup is not None:
                cleanup()


def create_app_context(
    settings: "Settings | None" = None,
    audio_output: "AudioOutput | None" = None,
    speech: "SpeechService | None" = None,
    haptics: "HapticService | None" = None,
    motion_source: "MotionSource | None" = None,
) -> AppContext:
    """
    Factory function to create a fully initialized AppContext.

    Services that are not provided are created from settings: an
    AudioManager on the default output device, Kokoro speech routed through
    it, and an audio-rendered haptic driver.

    Args:
        settings: Optional Settings instance (loaded if not provided)
        audio_output: Optional audio output (AudioManager if not provided)
        speech: Optional speech service (KokoroSpeech if not provided)
        haptics: Optional haptic service (AudioHapticDriver if not provided)
        motion_source: Optional motion source (none if not provided)

    Returns:
        Fully initialized AppContext
    """
    from soundify.settings import load_settings

    settings = settings or load_settings()

    if audio_output is None:
        from audio.manager import AudioManager

        audio_output = AudioManager(asset_dir=settings.audio.asset_dir)

    if speech is None:
        from tts import KokoroSpeech

        speech = KokoroSpeech(
            audio_manager=audio_output,
            language=settings.speech.language,
            voice=settings.speech.voice,
        )

    if haptics is None:
        from haptics import AudioHapticDriver

        haptics = AudioHapticDriver(audio_output)

    return AppContext(
        event_bus=EventBus(),
        settings=settings,
        audio_output=audio_output,
        speech=speech,
        haptics=haptics,
        motion_source=motion_source,
    )
