"""Tests for the audio-rendered haptic driver."""

import pytest

from audio.synth import decode_pcm16
from core.rules import HapticPulse
from haptics.driver import HAPTIC_CHANNEL, PULSE_SHAPES, AudioHapticDriver


class TestAudioHapticDriver:
    @pytest.fixture
    def driver(self, audio):
        return AudioHapticDriver(audio)

    def test_every_pulse_has_a_shape(self):
        assert set(PULSE_SHAPES) == set(HapticPulse)

    def test_vibrate_plays_thump_on_haptic_channel(self, driver, audio):
        driver.vibrate(HapticPulse.HEAVY)

        ((_, channel_id, buffer, volume, pitch),) = audio.plays
        assert channel_id == HAPTIC_CHANNEL
        assert volume == PULSE_SHAPES[HapticPulse.HEAVY].volume
        assert pitch == 1.0
        # 60 ms at 44100 Hz
        assert len(decode_pcm16(buffer)) == 2646

    def test_stronger_pulses_last_longer(self):
        durations = [PULSE_SHAPES[pulse].duration_ms for pulse in HapticPulse]
        assert durations == sorted(durations)

    def test_history(self, driver):
        assert driver.last_pulse() is None

        driver.vibrate(HapticPulse.SELECTION)
        driver.vibrate(HapticPulse.MEDIUM)

        assert list(driver.history) == [HapticPulse.SELECTION, HapticPulse.MEDIUM]
        assert driver.last_pulse() is HapticPulse.MEDIUM

    def test_history_keeps_only_recent_pulses(self, audio):
        driver = AudioHapticDriver(audio, history_size=3)

        for pulse in [HapticPulse.HEAVY, HapticPulse.SELECTION, HapticPulse.LIGHT, HapticPulse.MEDIUM]:
            driver.vibrate(pulse)

        assert list(driver.history) == [HapticPulse.SELECTION, HapticPulse.LIGHT, HapticPulse.MEDIUM]
        assert len(audio.plays) == 4

    def test_stop_silences_haptic_channel(self, driver, audio):
        driver.vibrate(HapticPulse.HEAVY)
        driver.stop()

        assert audio.calls[-1] == ("stop", HAPTIC_CHANNEL)

    def test_unknown_pulse_rejected(self, driver):
        with pytest.raises(ValueError):
            driver.vibrate("buzz")
