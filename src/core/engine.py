"""
Feedback dispatch engine.

Evaluates the rule catalog against each incoming event and carries out the
matching actions through the channel pool, the tone synthesizer and the
speech and haptic services.

Evaluation is strictly sequential per trigger() call. Triggers may arrive
from the UI thread and the motion listener thread at the same time; the only
shared mutable state is the channel pool, which locks per channel.
"""

import threading
from collections.abc import Iterable
from typing import TYPE_CHECKING, Callable

from audio.channels import ChannelPool
from audio.synth import generate_sine_wave
from motion.listener import SHAKE_THRESHOLD, MotionListener

from .errors import ConfigurationError, PlaybackError
from .events import NO_DATA, EventBus, FeedbackFailed, InteractionEvent, RuleFired
from .rules import PlayClip, PlayTone, Rule, Speak

if TYPE_CHECKING:
    from .services import AudioOutput, HapticService, MotionSource, SpeechService

ErrorReporter = Callable[[FeedbackFailed], None]


def print_error(failure: FeedbackFailed) -> None:
    """Default error reporter."""
    label = failure.rule.describe() if failure.rule is not None else "?"
    print(f"⚠️ Feedback {failure.stage} failed for rule '{label}': {failure.error}")


class FeedbackEngine:
    """
    Owns the rule catalog and the channel pool and dispatches events to them.

    Rules are evaluated in catalog order. A matching rule runs its action,
    requests its haptic pulse, and ends evaluation unless it allows layering.
    Failures of the external services are reported, never raised: one broken
    action does not stop later rules or later events.

    Can be used as a context manager:
        with FeedbackEngine(rules, audio, speech, haptics) as engine:
            engine.trigger(NamedTag("beep"))
    """

    def __init__(
        self,
        rules: Iterable[Rule],
        audio_output: "AudioOutput",
        speech: "SpeechService",
        haptics: "HapticService",
        motion_source: "MotionSource | None" = None,
        channel_count: int = 2,
        shake_threshold: float = SHAKE_THRESHOLD,
        event_bus: EventBus | None = None,
        on_error: ErrorReporter | None = print_error,
    ):
        """
        Initialize the engine and start listening for shakes.

        Args:
            rules: Rule catalog; its order is the evaluation order
            audio_output: Output the channel pool plays through
            speech: Service for Speak actions
            haptics: Service for haptic pulses
            motion_source: Optional accelerometer stream to detect shakes on
            channel_count: Size of the playback channel pool (at least 2)
            shake_threshold: Acceleration magnitude that counts as a shake
            event_bus: Optional bus for RuleFired / FeedbackFailed events
            on_error: Called with every swallowed failure (None to silence)
        """
        self._rules = tuple(rules)
        for rule in self._rules:
            if not isinstance(rule, Rule):
                raise ConfigurationError(f"Rule catalog contains a non-rule: {rule!r}")

        self._pool = ChannelPool(audio_output, channel_count)
        self._speech = speech
        self._haptics = haptics
        self._event_bus = event_bus
        self._on_error = on_error

        self._disposed = False
        self._dispose_lock = threading.Lock()

        self._motion_listener: MotionListener | None = None
        if motion_source is not None:
            self._motion_listener = MotionListener(motion_source, self.trigger, threshold=shake_threshold)
            self._motion_listener.start()

    @property
    def rules(self) -> tuple[Rule, ...]:
        return self._rules

    @property
    def pool(self) -> ChannelPool:
        return self._pool

    @property
    def motion_listener(self) -> MotionListener | None:
        return self._motion_listener

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.dispose()
        return False

    def trigger(self, event: InteractionEvent = NO_DATA) -> None:
        """
        Evaluate the catalog against one event and run the matching feedback.

        Never raises for a well-formed catalog. A no-op once disposed.
        """
        if self._disposed:
            return

        for rule in self._rules:
            try:
                matched = rule.should_trigger(event)
            except Exception as e:
                # A predicate that cannot handle the event does not match it
                self._report(rule, "predicate", e)
                continue

            if not matched:
                continue

            try:
                self._execute(rule)
            except PlaybackError as e:
                self._report(rule, "action", e)

            if rule.haptic is not None:
                try:
                    self._haptics.vibrate(rule.haptic)
                except Exception as e:
                    self._report(rule, "haptic", PlaybackError(f"Haptic pulse failed: {e}", e))

            self._emit(RuleFired(rule=rule, event=event))

            if not rule.allow_layering:
                break

    def _execute(self, rule: Rule) -> None:
        """Carry out a rule's action. External failures surface as PlaybackError."""
        action = rule.action
        if isinstance(action, PlayClip):
            channel = self._pool.select(rule.priority)
            channel.start(action.path, action.volume, action.pitch)
        elif isinstance(action, PlayTone):
            buffer = generate_sine_wave(action.frequency_hz, action.duration_ms)
            self._pool.tone_channel.start(buffer)
        elif isinstance(action, Speak):
            try:
                self._speech.speak(action.text)
            except Exception as e:
                raise PlaybackError(f"Speech failed: {e}", e) from e
        else:
            raise ConfigurationError(f"Unsupported rule action: {action!r}")

    def _report(self, rule: Rule, stage: str, error: BaseException) -> None:
        failure = FeedbackFailed(rule=rule, stage=stage, error=error)
        self._emit(failure)
        if self._on_error is not None:
            try:
                self._on_error(failure)
            except Exception as e:
                print(f"⚠️ Error reporter failed: {e}")

    def _emit(self, event) -> None:
        """Emit an event if event bus is configured."""
        if self._event_bus is not None:
            self._event_bus.emit(event)

    def dispose(self) -> None:
        """
        Cancel shake detection, stop speech and haptics, release every channel.

        Safe to call more than once.
        """
        with self._dispose_lock:
            if self._disposed:
                return
            self._disposed = True

        if self._motion_listener is not None:
            self._motion_listener.cancel()

        try:
            self._speech.stop()
        except Exception as e:
            print(f"⚠️ Error stopping speech: {e}")

        try:
            self._haptics.stop()
        except Exception as e:
            print(f"⚠️ Error stopping haptics: {e}")

        for error in self._pool.release():
            print(f"⚠️ {error}")
