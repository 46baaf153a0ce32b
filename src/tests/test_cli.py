"""Tests for CLI command parsing and the demo loop."""

import io
from unittest.mock import patch

import pytest

from core.context import AppContext
from core.events import NO_DATA, GestureKind, GestureSample, NamedTag, StateTag
from soundify import cli
from soundify.cli import parse_command


class TestParseCommand:
    """Tests for parse_command function."""

    def test_press_is_no_data(self):
        assert parse_command("press") is NO_DATA

    def test_tap(self):
        assert parse_command("tap") == GestureSample(kind=GestureKind.TAP)

    def test_swipe_with_dx_only(self):
        assert parse_command("swipe 12") == GestureSample(kind=GestureKind.DRAG, delta=(12.0, 0.0))

    def test_swipe_with_elapsed(self):
        event = parse_command("swipe 3 4 0.05")
        assert event.delta == (3.0, 4.0)
        assert event.elapsed == 0.05

    def test_named_tags(self):
        assert parse_command("shake") == NamedTag("shake")
        assert parse_command("  Beep ") == NamedTag("beep")
        assert parse_command("success") == NamedTag("success")

    def test_state(self):
        assert parse_command("state loading") == StateTag("loading")

    @pytest.mark.parametrize("line", ["quit", "exit", "Q"])
    def test_quit(self, line):
        assert parse_command(line) is None

    @pytest.mark.parametrize("line", ["", "swipe", "swipe fast", "swipe 1 2 3 4", "state", "hello there"])
    def test_malformed(self, line):
        with pytest.raises(ValueError):
            parse_command(line)


class TestMain:
    """Runs the demo loop against recording services."""

    def test_commands_reach_the_engine(self, tmp_path, audio, speech, haptics, capsys):
        ctx = AppContext(audio_output=audio, speech=speech, haptics=haptics)
        stdin = io.StringIO("beep\nhello\nswipe nope\nquit\ntap\n")

        with (
            patch.object(cli, "create_app_context", return_value=ctx),
            patch("sys.stdin", stdin),
        ):
            result = cli.main(["--settings", str(tmp_path / "missing.toml")])

        assert result == 0
        # beep plays a tone, hello falls through to the announcement, tap comes after quit
        assert len(audio.plays) == 1
        assert speech.spoken == ["Action completed"]
        out = capsys.readouterr().out
        assert "🔊 beep" in out
        assert "Usage: swipe" in out

    def test_invalid_settings_exit_with_error(self, tmp_path, capsys):
        path = tmp_path / "settings.toml"
        path.write_text("[audio]\nchannels = 0\n")

        assert cli.main(["--settings", str(path)]) == 1
        assert "Error" in capsys.readouterr().out
