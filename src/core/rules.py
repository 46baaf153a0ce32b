"""
Feedback rules.

A Rule pairs a predicate over interaction events with the feedback to give
when it holds. The action is one of a closed set of variants:

- PlayClip: play an audio asset on a pooled channel
- PlayTone: synthesize and play a sine tone on the tone channel
- Speak: hand text to the speech service

Parameters are validated when the action is constructed, so a catalog that
builds is a catalog the engine can run.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from .errors import ConfigurationError
from .events import InteractionEvent


class HapticPulse(Enum):
    """Haptic pulse kinds, from subtlest to strongest."""

    SELECTION = "selection"
    LIGHT = "light"
    MEDIUM = "medium"
    HEAVY = "heavy"


@dataclass(frozen=True)
class PlayClip:
    """Play an audio asset. path is resolved by the audio output."""

    path: str
    volume: float = 1.0
    pitch: float = 1.0

    def __post_init__(self):
        if not isinstance(self.path, str) or not self.path:
            raise ConfigurationError("Clip path must be a non-empty string")
        if not 0.0 <= self.volume <= 1.0:
            raise ConfigurationError(f"Volume must be within [0, 1], got {self.volume}")
        if not math.isfinite(self.pitch) or self.pitch <= 0:
            raise ConfigurationError(f"Pitch must be positive, got {self.pitch}")


@dataclass(frozen=True)
class PlayTone:
    """Synthesize a sine tone of frequency_hz for duration_ms."""

    frequency_hz: float
    duration_ms: int = 200

    def __post_init__(self):
        if not math.isfinite(self.frequency_hz) or self.frequency_hz <= 0:
            raise ConfigurationError(f"Tone frequency must be positive, got {self.frequency_hz}")
        if self.duration_ms < 0:
            raise ConfigurationError(f"Tone duration must not be negative, got {self.duration_ms}")


@dataclass(frozen=True)
class Speak:
    """Speak text through the speech service."""

    text: str

    def __post_init__(self):
        if not isinstance(self.text, str):
            raise ConfigurationError("Speech text must be a string")


Action = PlayClip | PlayTone | Speak

Predicate = Callable[[InteractionEvent], bool]


@dataclass(frozen=True)
class Rule:
    """
    A (predicate, action, priority, layering flag, haptic pulse) tuple.

    Attributes:
        action: What to play or say when the rule fires
        predicate: Pure function deciding whether an event matches
        priority: Picks the playback channel (priority mod pool size)
        allow_layering: Keep evaluating later rules after this one fires
        haptic: Optional pulse requested alongside the action
        name: Label used in diagnostics
    """

    action: Action
    predicate: Predicate
    priority: int = 0
    allow_layering: bool = False
    haptic: HapticPulse | None = None
    name: str = ""

    def __post_init__(self):
        if not isinstance(self.action, (PlayClip, PlayTone, Speak)):
            raise ConfigurationError(f"Unsupported rule action: {self.action!r}")
        if not callable(self.predicate):
            raise ConfigurationError("Rule predicate must be callable")
        if isinstance(self.priority, bool) or not isinstance(self.priority, int):
            raise ConfigurationError(f"Rule priority must be an integer, got {self.priority!r}")

    def should_trigger(self, event: InteractionEvent) -> bool:
        """Evaluate whether this rule should fire for the event."""
        return bool(self.predicate(event))

    def describe(self) -> str:
        """Short label for diagnostics."""
        return self.name or type(self.action).__name__
