"""
Interactive demo for Soundify.

Builds the default rule catalog on the real audio, speech and haptic
services and triggers it from commands typed on stdin:

    press               plain interaction (no payload)
    tap                 tap gesture
    swipe DX [DY] [S]   drag sample with displacement and optional elapsed seconds
    shake | beep | success | <word>
                        named tag
    state NAME          application state
    quit | exit         leave
"""

import argparse
import sys

from core.catalog import default_catalog
from core.context import create_app_context
from core.errors import ConfigurationError
from core.events import NO_DATA, GestureKind, GestureSample, InteractionEvent, NamedTag, RuleFired, StateTag
from motion.sources import IterableMotionSource, read_samples
from soundify.settings import load_settings

QUIT_COMMANDS = {"quit", "exit", "q"}


def parse_command(line: str) -> InteractionEvent | None:
    """
    Turn a command line into an interaction event.

    Returns:
        The event, or None for a quit command

    Raises:
        ValueError: If the command has malformed arguments
    """
    parts = line.strip().split()
    if not parts:
        raise ValueError("Empty command")

    command, args = parts[0].lower(), parts[1:]

    if command in QUIT_COMMANDS:
        return None
    if command == "press":
        return NO_DATA
    if command == "tap":
        return GestureSample(kind=GestureKind.TAP)
    if command == "swipe":
        try:
            values = [float(arg) for arg in args]
        except ValueError:
            values = []
        if not 1 <= len(values) <= 3:
            raise ValueError("Usage: swipe DX [DY] [ELAPSED_SECONDS]")
        dx = values[0]
        dy = values[1] if len(values) > 1 else 0.0
        elapsed = values[2] if len(values) > 2 else None
        return GestureSample(kind=GestureKind.DRAG, delta=(dx, dy), elapsed=elapsed)
    if command == "state":
        if len(args) != 1:
            raise ValueError("Usage: state NAME")
        return StateTag(args[0])
    if args:
        raise ValueError(f"Unknown command: {line.strip()}")
    return NamedTag(command)


def _print_fired(event: RuleFired) -> None:
    print(f"🔊 {event.rule.describe()}")


def main(argv: list[str] | None = None) -> int:
    """Interactive demo entry point."""
    parser = argparse.ArgumentParser(description="Soundify - rule-driven audio and haptic feedback demo")
    parser.add_argument("--settings", default="settings.toml", help="Path to settings file (default: settings.toml)")
    parser.add_argument("--motion", help="CSV file of x,y,z acceleration samples to replay for shake detection")
    parser.add_argument(
        "--interval", type=float, default=0.02, help="Seconds between replayed motion samples (default: 0.02)"
    )
    args = parser.parse_args(argv)

    try:
        settings = load_settings(args.settings)
    except ConfigurationError as e:
        print(f"❌ Error: {e}")
        return 1

    motion_source = None
    if args.motion:
        motion_source = IterableMotionSource(read_samples(args.motion), interval=args.interval)

    print("🚀 Starting Soundify...")
    ctx = create_app_context(settings=settings, motion_source=motion_source)
    ctx.event_bus.subscribe(RuleFired, _print_fired)
    engine = ctx.create_engine(default_catalog(settings.gestures.frame_seconds))

    print("\n✅ Ready! Type press, tap, swipe DX, shake, beep, success or quit.\n")

    try:
        for line in sys.stdin:
            if not line.strip():
                continue
            try:
                event = parse_command(line)
            except ValueError as e:
                print(f"❓ {e}")
                continue
            if event is None:
                break
            engine.trigger(event)
    except KeyboardInterrupt:
        pass
    finally:
        print("\n🛑 Shutting down Soundify...")
        engine.dispose()
        ctx.cleanup()

    return 0


if __name__ == "__main__":
    sys.exit(main())
