"""Pytest configuration and shared fixtures."""

import sys
from pathlib import Path

import pytest

# Add src directory to path so tests can import modules
src_path = Path(__file__).parent.parent
sys.path.insert(0, str(src_path))

from core.services import AudioOutput, HapticService, MotionSource, SpeechService, Subscription  # noqa: E402


class RecordingAudio(AudioOutput):
    """AudioOutput that records calls instead of making sound."""

    def __init__(self):
        self.calls = []
        self.fail_on_play = False

    def play(self, channel_id, source, volume=1.0, pitch=1.0):
        if self.fail_on_play:
            raise OSError("device unavailable")
        self.calls.append(("play", channel_id, source, volume, pitch))

    def stop(self, channel_id):
        self.calls.append(("stop", channel_id))

    def dispose(self, channel_id):
        self.calls.append(("dispose", channel_id))

    @property
    def plays(self):
        return [call for call in self.calls if call[0] == "play"]


class RecordingSpeech(SpeechService):
    def __init__(self):
        self.spoken = []
        self.stopped = 0
        self.fail = False

    @property
    def language(self):
        return "en-US"

    def speak(self, text):
        if self.fail:
            raise RuntimeError("speech engine crashed")
        self.spoken.append(text)

    def stop(self):
        self.stopped += 1


class RecordingHaptics(HapticService):
    def __init__(self):
        self.pulses = []
        self.fail = False
        self.stopped = 0

    def vibrate(self, pulse):
        if self.fail:
            raise RuntimeError("no motor")
        self.pulses.append(pulse)

    def stop(self):
        self.stopped += 1


class ManualSubscription(Subscription):
    def __init__(self):
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class ManualMotionSource(MotionSource):
    """Motion source driven by the test: push() delivers a sample synchronously.

    Like a sensor that ignores cancellation, it keeps delivering after cancel().
    """

    def __init__(self):
        self.callback = None
        self.subscription = None

    def subscribe(self, callback):
        self.callback = callback
        self.subscription = ManualSubscription()
        return self.subscription

    def push(self, sample):
        self.callback(sample)


@pytest.fixture
def audio():
    return RecordingAudio()


@pytest.fixture
def speech():
    return RecordingSpeech()


@pytest.fixture
def haptics():
    return RecordingHaptics()


@pytest.fixture
def motion_source():
    return ManualMotionSource()
