"""Tests for FeedbackEngine dispatch, failure handling and disposal."""

import itertools
import time

import pytest

from audio.synth import generate_sine_wave
from core import catalog
from core.engine import FeedbackEngine
from core.errors import ConfigurationError, PlaybackError
from core.events import NO_DATA, EventBus, FeedbackFailed, GestureKind, GestureSample, NamedTag, RuleFired
from core.rules import HapticPulse, PlayClip, PlayTone, Rule, Speak
from haptics.driver import HAPTIC_CHANNEL, AudioHapticDriver
from motion.samples import MotionSample
from motion.sources import IterableMotionSource


def on_tag(name):
    return lambda event: event == NamedTag(name)


def speak_rule(text, tag="x", allow_layering=False, haptic=None):
    return Rule(action=Speak(text), predicate=on_tag(tag), allow_layering=allow_layering, haptic=haptic, name=text)


def wait_for(condition, timeout=2.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if condition():
            return True
        time.sleep(0.005)
    return False


@pytest.fixture
def make_engine(audio, speech, haptics):
    engines = []

    def factory(rules, **kwargs):
        kwargs.setdefault("on_error", None)
        engine = FeedbackEngine(rules, audio, speech, haptics, **kwargs)
        engines.append(engine)
        return engine

    yield factory

    for engine in engines:
        engine.dispose()


class TestRuleEvaluation:
    """Ordering and layering."""

    def test_first_match_wins_without_layering(self, make_engine, speech):
        engine = make_engine([speak_rule("a"), speak_rule("b")])

        engine.trigger(NamedTag("x"))

        assert speech.spoken == ["a"]

    def test_layering_runs_later_rules_in_order(self, make_engine, speech):
        engine = make_engine([speak_rule("a", allow_layering=True), speak_rule("b")])

        engine.trigger(NamedTag("x"))

        assert speech.spoken == ["a", "b"]

    def test_layering_stops_at_first_non_layering_match(self, make_engine, speech):
        engine = make_engine(
            [speak_rule("a", allow_layering=True), speak_rule("b"), speak_rule("c")]
        )

        engine.trigger(NamedTag("x"))

        assert speech.spoken == ["a", "b"]

    def test_non_matching_rules_are_skipped(self, make_engine, speech):
        engine = make_engine([speak_rule("a", tag="y"), speak_rule("b")])

        engine.trigger(NamedTag("x"))

        assert speech.spoken == ["b"]

    def test_no_match_is_a_no_op(self, make_engine, audio, speech, haptics):
        engine = make_engine([speak_rule("a", haptic=HapticPulse.LIGHT)])

        engine.trigger(NamedTag("nothing"))

        assert speech.spoken == []
        assert audio.calls == []
        assert haptics.pulses == []

    def test_default_event_is_no_data(self, make_engine, audio):
        engine = make_engine([catalog.tap()])

        engine.trigger()

        assert audio.plays == [("play", 0, "click.mp3", 0.7, 1.0)]

    def test_repeated_triggers_are_reproducible(self, make_engine, speech):
        engine = make_engine([speak_rule("a", allow_layering=True), speak_rule("b")])

        engine.trigger(NamedTag("x"))
        engine.trigger(NamedTag("x"))

        assert speech.spoken == ["a", "b", "a", "b"]

    def test_catalog_must_hold_rules(self, audio, speech, haptics):
        with pytest.raises(ConfigurationError):
            FeedbackEngine([catalog.tap(), "beep"], audio, speech, haptics)


class TestActions:
    """Each action kind reaches the right service."""

    def test_clip_plays_on_priority_channel(self, make_engine, audio):
        rule = Rule(action=PlayClip("ding.wav", volume=0.5, pitch=1.25), predicate=on_tag("x"), priority=3)
        engine = make_engine([rule])

        engine.trigger(NamedTag("x"))

        assert audio.plays == [("play", 1, "ding.wav", 0.5, 1.25)]
        assert engine.pool[1].is_active

    def test_channel_selection_wraps_with_pool_size(self, make_engine, audio):
        rule = Rule(action=PlayClip("ding.wav"), predicate=on_tag("x"), priority=7)
        engine = make_engine([rule], channel_count=4)

        engine.trigger(NamedTag("x"))

        assert audio.plays[0][1] == 3

    def test_same_channel_last_write_wins(self, make_engine, audio):
        first = Rule(action=PlayClip("a.wav"), predicate=on_tag("x"), priority=0, allow_layering=True)
        second = Rule(action=PlayClip("b.wav"), predicate=on_tag("x"), priority=2)
        engine = make_engine([first, second])

        engine.trigger(NamedTag("x"))

        assert [call[1] for call in audio.plays] == [0, 0]
        assert engine.pool[0].source == "b.wav"

    def test_tone_is_synthesized_on_channel_zero(self, make_engine, audio):
        rule = Rule(action=PlayTone(880.0, 50), predicate=on_tag("beep"), priority=1)
        engine = make_engine([rule])

        engine.trigger(NamedTag("beep"))

        (call,) = audio.plays
        assert call[1] == 0
        assert call[2] == generate_sine_wave(880.0, 50)
        assert len(call[2]) == 2 * 2205

    def test_speak_forwards_text(self, make_engine, speech):
        engine = make_engine([catalog.announce("Action completed")])

        engine.trigger(NO_DATA)

        assert speech.spoken == ["Action completed"]

    def test_haptic_pulse_requested(self, make_engine, haptics):
        engine = make_engine([catalog.shake()])

        engine.trigger(NamedTag("shake"))

        assert haptics.pulses == [HapticPulse.HEAVY]

    def test_rule_without_haptic_does_not_vibrate(self, make_engine, haptics):
        engine = make_engine([catalog.shake(haptic=None)])

        engine.trigger(NamedTag("shake"))

        assert haptics.pulses == []

    def test_default_catalog_beep(self, make_engine, audio, speech, haptics):
        engine = make_engine(catalog.default_catalog())

        engine.trigger(NamedTag("beep"))

        assert len(audio.plays) == 1
        assert isinstance(audio.plays[0][2], bytes)
        assert speech.spoken == []
        assert haptics.pulses == [HapticPulse.LIGHT]

    def test_default_catalog_falls_through_to_announce(self, make_engine, audio, speech):
        engine = make_engine(catalog.default_catalog())

        engine.trigger(NamedTag("hello"))

        assert audio.plays == []
        assert speech.spoken == ["Action completed"]

    def test_default_catalog_swipe(self, make_engine, audio):
        engine = make_engine(catalog.default_catalog())

        engine.trigger(GestureSample(kind=GestureKind.DRAG, delta=(12.0, 0.0)))

        assert audio.plays[0][2] == "swipe.mp3"


class TestFailures:
    """External failures are reported, never raised."""

    def test_playback_failure_does_not_stop_layered_rules(self, make_engine, audio, speech):
        audio.fail_on_play = True
        failures = []
        clip = Rule(action=PlayClip("a.wav"), predicate=on_tag("x"), allow_layering=True)
        engine = make_engine([clip, speak_rule("after")], on_error=failures.append)

        engine.trigger(NamedTag("x"))

        assert speech.spoken == ["after"]
        assert len(failures) == 1
        assert failures[0].stage == "action"
        assert isinstance(failures[0].error, PlaybackError)
        assert failures[0].rule is clip

    def test_failed_action_still_requests_haptic(self, make_engine, audio, haptics):
        audio.fail_on_play = True
        engine = make_engine([catalog.tap()])

        engine.trigger(NO_DATA)

        assert haptics.pulses == [HapticPulse.SELECTION]

    def test_haptic_failure_is_swallowed(self, make_engine, haptics, speech):
        haptics.fail = True
        failures = []
        engine = make_engine(
            [speak_rule("a", allow_layering=True, haptic=HapticPulse.LIGHT), speak_rule("b")],
            on_error=failures.append,
        )

        engine.trigger(NamedTag("x"))

        assert speech.spoken == ["a", "b"]
        assert [failure.stage for failure in failures] == ["haptic"]

    def test_speech_failure_is_reported(self, make_engine, speech):
        speech.fail = True
        failures = []
        engine = make_engine([speak_rule("a")], on_error=failures.append)

        engine.trigger(NamedTag("x"))

        assert failures[0].stage == "action"

    def test_failing_predicate_is_a_non_match(self, make_engine, speech):
        failures = []
        broken = Rule(action=Speak("broken"), predicate=lambda event: event.name.startswith("x"))
        engine = make_engine([broken, catalog.tap(), speak_rule("fallback", tag="x")], on_error=failures.append)

        # NO_DATA has no name: the broken predicate raises, tap matches
        engine.trigger(NO_DATA)

        assert speech.spoken == []
        assert [failure.stage for failure in failures] == ["predicate"]

    def test_failures_are_emitted_on_the_bus(self, audio, speech, haptics):
        audio.fail_on_play = True
        bus = EventBus()
        failed, fired = [], []
        bus.subscribe(FeedbackFailed, failed.append)
        bus.subscribe(RuleFired, fired.append)
        engine = FeedbackEngine([catalog.tap()], audio, speech, haptics, event_bus=bus, on_error=None)

        engine.trigger(NO_DATA)

        assert len(failed) == 1
        assert len(fired) == 1
        assert fired[0].event is NO_DATA
        engine.dispose()

    def test_default_reporter_prints_warning(self, audio, speech, haptics, capsys):
        audio.fail_on_play = True
        engine = FeedbackEngine([catalog.tap()], audio, speech, haptics)

        engine.trigger(NO_DATA)

        assert "tap" in capsys.readouterr().out
        engine.dispose()


class TestDisposal:
    def test_dispose_releases_channels_and_stops_speech(self, audio, speech, haptics):
        engine = FeedbackEngine([catalog.tap()], audio, speech, haptics, channel_count=3, on_error=None)

        engine.dispose()

        for channel_id in range(3):
            assert ("dispose", channel_id) in audio.calls
        assert speech.stopped == 1
        assert haptics.stopped == 1
        assert engine.is_disposed

    def test_dispose_is_idempotent(self, audio, speech, haptics):
        engine = FeedbackEngine([catalog.tap()], audio, speech, haptics, on_error=None)

        engine.dispose()
        engine.dispose()

        assert speech.stopped == 1
        assert haptics.stopped == 1

    def test_trigger_after_dispose_is_a_no_op(self, audio, speech, haptics):
        engine = FeedbackEngine([catalog.tap()], audio, speech, haptics, on_error=None)
        engine.dispose()
        audio.calls.clear()

        engine.trigger(NO_DATA)

        assert audio.calls == []
        assert haptics.pulses == []

    def test_context_manager_disposes(self, audio, speech, haptics):
        with FeedbackEngine([catalog.tap()], audio, speech, haptics, on_error=None) as engine:
            engine.trigger()
        assert engine.is_disposed

    def test_dispose_cuts_off_haptic_thump(self, audio, speech):
        driver = AudioHapticDriver(audio)
        engine = FeedbackEngine([catalog.tap()], audio, speech, driver, on_error=None)
        engine.trigger(NO_DATA)

        engine.dispose()

        assert ("stop", HAPTIC_CHANNEL) in audio.calls


class TestShakeDetection:
    """The engine wires a motion listener to its own trigger."""

    def test_shake_sample_triggers_shake_rule(self, make_engine, audio, haptics, motion_source):
        make_engine([catalog.shake()], motion_source=motion_source)

        motion_source.push(MotionSample(0.0, 20.0, 9.8))

        assert audio.plays == [("play", 0, "shake.mp3", 1.0, 1.2)]
        assert haptics.pulses == [HapticPulse.HEAVY]

    def test_threshold_is_strict(self, make_engine, audio, motion_source):
        make_engine([catalog.shake()], motion_source=motion_source)

        motion_source.push(MotionSample(15.0, -15.0, 15.0))

        assert audio.plays == []

    def test_custom_threshold(self, make_engine, audio, motion_source):
        make_engine([catalog.shake()], motion_source=motion_source, shake_threshold=5.0)

        motion_source.push(MotionSample(6.0, 0.0, 0.0))

        assert len(audio.plays) == 1

    def test_dispose_cancels_listener(self, audio, speech, haptics, motion_source):
        engine = FeedbackEngine([catalog.shake()], audio, speech, haptics, motion_source=motion_source)

        engine.dispose()
        # The source ignores cancellation and keeps producing
        motion_source.push(MotionSample(30.0, 30.0, 30.0))

        assert motion_source.subscription.cancelled is True
        assert audio.plays == []

    def test_threaded_source_stops_after_dispose(self, audio, speech, haptics):
        samples = itertools.repeat(MotionSample(25.0, 0.0, 0.0))
        source = IterableMotionSource(samples, interval=0.001)
        engine = FeedbackEngine([catalog.shake()], audio, speech, haptics, motion_source=source, on_error=None)

        assert wait_for(lambda: len(audio.plays) >= 3)
        engine.dispose()
        count = len(audio.plays)
        time.sleep(0.05)

        assert len(audio.plays) == count
        assert source.wait_until_finished(timeout=1.0)
