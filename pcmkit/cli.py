"""Command-line interface for inspecting and editing WAVE files."""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Callable, Sequence

from pcmkit.buffer import WaveBuffer
from pcmkit.errors import PCMKitError
from pcmkit.files import load, load_raw, save

logger = logging.getLogger(__name__)


def _non_negative_int(value: str) -> int:
    number = int(value)
    if number < 0:
        raise argparse.ArgumentTypeError(f"{value} is negative")
    return number


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments for the pcmkit tool."""
    parser = argparse.ArgumentParser(description="Inspect and edit PCM WAVE files")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level to use",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Refuse to save files that are not in canonical form",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    info = commands.add_parser("info", help="Print the format of a WAVE file as JSON")
    info.add_argument("input", help="WAVE file to inspect")
    info.add_argument(
        "--canonical",
        action="store_true",
        help="Report the format after normalization instead of as stored",
    )

    normalize = commands.add_parser(
        "normalize", help="Convert to 16-bit stereo 44100 Hz PCM"
    )
    normalize.add_argument("input")
    normalize.add_argument("output")

    stretch = commands.add_parser("stretch", help="Change duration by linear interpolation")
    stretch.add_argument("input")
    stretch.add_argument("output")
    stretch_amount = stretch.add_mutually_exclusive_group(required=True)
    stretch_amount.add_argument("--frames", type=_non_negative_int, help="New frame count")
    stretch_amount.add_argument("--factor", type=float, help="Multiplier for the frame count")

    fade = commands.add_parser("fade", help="Fade the end of the file to silence")
    fade.add_argument("input")
    fade.add_argument("output")
    fade_amount = fade.add_mutually_exclusive_group(required=True)
    fade_amount.add_argument("--frames", type=int, help="Length of the fade in frames")
    fade_amount.add_argument("--fraction", type=float, help="Length as a fraction of the file")

    mix = commands.add_parser("mix", help="Add one file into another")
    mix.add_argument("target", help="File mixed into")
    mix.add_argument("source", help="File mixed from")
    mix.add_argument("output")
    mix.add_argument("--at", type=_non_negative_int, default=0, help="First target frame")
    mix.add_argument(
        "--from", dest="start", type=_non_negative_int, default=0, help="First source frame"
    )
    mix.add_argument(
        "--frames", type=_non_negative_int, default=None, help="Frames to mix (default: all)"
    )
    mix.add_argument("--volume", type=float, default=1.0, help="Gain applied to the source")
    mix.add_argument(
        "--fadeout", type=_non_negative_int, default=0, help="Fade-out length in frames"
    )

    silence = commands.add_parser("silence", help="Write a silent file")
    silence.add_argument("output")
    silence.add_argument("--frames", type=_non_negative_int, required=True)

    return parser.parse_args(argv)


def _cmd_info(args: argparse.Namespace) -> None:
    buffer = load(args.input) if args.canonical else load_raw(args.input)
    _print_event(buffer.info().to_json())


def _cmd_normalize(args: argparse.Namespace) -> None:
    save(load(args.input), args.output, strict=args.strict)


def _cmd_stretch(args: argparse.Namespace) -> None:
    buffer = load(args.input)
    if args.frames is not None:
        result = buffer.stretched(args.frames)
    else:
        result = buffer.stretched_relative(args.factor)
    logger.info("Stretched %d frames to %d", buffer.frame_count, result.frame_count)
    save(result, args.output, strict=args.strict)


def _cmd_fade(args: argparse.Namespace) -> None:
    buffer = load(args.input)
    if args.frames is not None:
        buffer.fade_samples(args.frames)
    else:
        buffer.fade_fraction(args.fraction)
    save(buffer, args.output, strict=args.strict)


def _cmd_mix(args: argparse.Namespace) -> None:
    target = load(args.target)
    source = load(args.source)
    frames = source.frame_count if args.frames is None else args.frames
    if target.add(args.at, source, args.start, frames, args.volume, args.fadeout):
        _print_event("Warning: mix clipped")
    save(target, args.output, strict=args.strict)


def _cmd_silence(args: argparse.Namespace) -> None:
    save(WaveBuffer.silence(args.frames), args.output, strict=args.strict)


_COMMANDS: dict[str, Callable[[argparse.Namespace], None]] = {
    "info": _cmd_info,
    "normalize": _cmd_normalize,
    "stretch": _cmd_stretch,
    "fade": _cmd_fade,
    "mix": _cmd_mix,
    "silence": _cmd_silence,
}


def _print_event(message: str) -> None:
    print(message, flush=True)  # noqa: T201


def run(argv: Sequence[str] | None = None) -> int:
    """Run the CLI with ``argv`` and return the exit status."""
    args = parse_args(list(argv) if argv is not None else None)
    logging.basicConfig(level=getattr(logging, args.log_level))
    try:
        _COMMANDS[args.command](args)
    except (PCMKitError, ValueError) as err:
        print(f"error: {err}", file=sys.stderr)  # noqa: T201
        return 1
    return 0


def main() -> int:
    """Run the CLI."""
    return run(sys.argv[1:])


if __name__ == "__main__":
    sys.exit(main())
