"""
Core of Soundify: events, rules and the dispatch engine.

Provides:
- Interaction events and the notification bus
- Rules, actions and the preconfigured rule catalog
- Interfaces of the external feedback services
- Application context for dependency injection

The engine itself is imported from core.engine.
"""

from . import catalog
from .context import AppContext, create_app_context
from .errors import ConfigurationError, PlaybackError, SoundifyError
from .events import (
    NO_DATA,
    Event,
    EventBus,
    FeedbackFailed,
    GestureKind,
    GestureSample,
    NamedTag,
    NoData,
    RuleFired,
    StateTag,
)
from .rules import HapticPulse, PlayClip, PlayTone, Rule, Speak

__all__ = [
    "NO_DATA",
    "AppContext",
    "ConfigurationError",
    "Event",
    "EventBus",
    "FeedbackFailed",
    "GestureKind",
    "GestureSample",
    "HapticPulse",
    "NamedTag",
    "NoData",
    "PlaybackError",
    "PlayClip",
    "PlayTone",
    "Rule",
    "RuleFired",
    "SoundifyError",
    "Speak",
    "StateTag",
    "catalog",
    "create_app_context",
]
