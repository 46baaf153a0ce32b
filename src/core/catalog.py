"""
Preconfigured rules for common interaction patterns.

Each constructor returns a fully configured Rule. Asset names are opaque
identifiers resolved by the audio output (relative to its asset directory).
"""

import math

from .events import GestureKind, GestureSample, InteractionEvent, NamedTag, NoData, StateTag
from .rules import HapticPulse, PlayClip, PlayTone, Rule, Speak

# Assumed time between drag samples when the sample does not say (one 60 Hz frame)
FRAME_SECONDS = 0.016

_UNSET = object()


def _haptic(override, default: HapticPulse | None) -> HapticPulse | None:
    return default if override is _UNSET else override


def gesture_frame_seconds(sample: GestureSample, frame_seconds: float = FRAME_SECONDS) -> float:
    """Time base for a gesture sample: its real elapsed time if known, else one frame."""
    if sample.elapsed is not None and sample.elapsed > 0:
        return sample.elapsed
    return frame_seconds


def gesture_velocity(sample: GestureSample, frame_seconds: float = FRAME_SECONDS) -> float:
    """Speed of a gesture sample in logical pixels per second."""
    return math.hypot(*sample.delta) / gesture_frame_seconds(sample, frame_seconds)


def swipe(
    min_velocity: float = 500.0,
    audio_path: str = "swipe.mp3",
    frame_seconds: float = FRAME_SECONDS,
    priority: int = 0,
    allow_layering: bool = False,
    haptic=_UNSET,
) -> Rule:
    """
    A rule triggered by a drag faster than min_velocity (pixels per second).

    Pitch rises with the threshold so faster swipe rules sound brighter.
    The threshold is inclusive.
    """

    def condition(event: InteractionEvent) -> bool:
        if not isinstance(event, GestureSample) or event.kind is not GestureKind.DRAG:
            return False
        # Compare distances rather than dividing so the exact threshold always fires
        distance = math.hypot(*event.delta)
        return distance >= min_velocity * gesture_frame_seconds(event, frame_seconds)

    return Rule(
        action=PlayClip(audio_path, volume=0.8, pitch=1.0 + min_velocity / 1000.0),
        predicate=condition,
        priority=priority,
        allow_layering=allow_layering,
        haptic=_haptic(haptic, HapticPulse.LIGHT),
        name="swipe",
    )


def shake(
    audio_path: str = "shake.mp3",
    priority: int = 0,
    allow_layering: bool = False,
    haptic=_UNSET,
) -> Rule:
    """A rule triggered by the "shake" tag the motion listener emits."""
    return Rule(
        action=PlayClip(audio_path, volume=1.0, pitch=1.2),
        predicate=lambda event: event == NamedTag("shake"),
        priority=priority,
        allow_layering=allow_layering,
        haptic=_haptic(haptic, HapticPulse.HEAVY),
        name="shake",
    )


def tap(
    audio_path: str = "click.mp3",
    priority: int = 0,
    allow_layering: bool = False,
    haptic=_UNSET,
) -> Rule:
    """A rule triggered by a payload-less interaction or a tap gesture."""

    def condition(event: InteractionEvent) -> bool:
        if isinstance(event, NoData):
            return True
        return isinstance(event, GestureSample) and event.kind is GestureKind.TAP

    return Rule(
        action=PlayClip(audio_path, volume=0.7, pitch=1.0),
        predicate=condition,
        priority=priority,
        allow_layering=allow_layering,
        haptic=_haptic(haptic, HapticPulse.SELECTION),
        name="tap",
    )


def state_success(
    audio_path: str = "success.mp3",
    priority: int = 0,
    allow_layering: bool = False,
    haptic=_UNSET,
) -> Rule:
    """A rule for success feedback, signalled as a tag or an application state."""
    return Rule(
        action=PlayClip(audio_path, volume=0.9, pitch=1.0),
        predicate=lambda event: event in (NamedTag("success"), StateTag("success")),
        priority=priority,
        allow_layering=allow_layering,
        haptic=_haptic(haptic, HapticPulse.MEDIUM),
        name="state_success",
    )


def announce(
    text: str,
    priority: int = 0,
    allow_layering: bool = False,
    haptic=_UNSET,
) -> Rule:
    """A rule that speaks text for any event."""
    return Rule(
        action=Speak(text),
        predicate=lambda event: True,
        priority=priority,
        allow_layering=allow_layering,
        haptic=_haptic(haptic, HapticPulse.LIGHT),
        name="announce",
    )


def beep(
    frequency_hz: float = 440.0,
    duration_ms: int = 200,
    priority: int = 0,
    allow_layering: bool = False,
    haptic=_UNSET,
) -> Rule:
    """A rule that plays a synthesized tone on the "beep" tag."""
    return Rule(
        action=PlayTone(frequency_hz, duration_ms),
        predicate=lambda event: event == NamedTag("beep"),
        priority=priority,
        allow_layering=allow_layering,
        haptic=_haptic(haptic, HapticPulse.LIGHT),
        name="beep",
    )


def default_catalog(frame_seconds: float = FRAME_SECONDS) -> list[Rule]:
    """The demo rule set. announce matches every event, so it goes last."""
    return [
        swipe(min_velocity=600.0, frame_seconds=frame_seconds),
        shake(),
        tap(),
        state_success(),
        beep(frequency_hz=440.0),
        announce("Action completed"),
    ]
