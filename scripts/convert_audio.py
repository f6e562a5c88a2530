"""CLI script: convert an audio file into a noise sequence.

Usage:
    # Default parameters, JSON written to ./audio_noise_data.json:
    python scripts/convert_audio.py take.wav

    # Finer windows, raised floor (given as the 0–1 log slider position):
    python scripts/convert_audio.py take.wav --interval-ms 20 --floor-slider 0.6

    # Linear output written to a chosen path, copy of the source alongside:
    python scripts/convert_audio.py take.webm --curve 1 --floor 0 \\
        --output out/take.json --save-audio out/

Output:
    Balance summary printed to stdout.
    JSON array of noise values written to --output.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

# Allow running from the repo root without installing the package.
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.config import (  # noqa: E402
    DEFAULT_CONFIG,
    MAX_CURVE_STRENGTH,
    MAX_INTERVAL_MS,
    MIN_CURVE_STRENGTH,
    MIN_INTERVAL_MS,
    NoiseConfig,
    slider_to_lower_threshold,
)
from core.noise.balance import summarize_balance  # noqa: E402
from ingestion.noise_engine import NoiseEngine  # noqa: E402
from ingestion.noise_export import save_json, save_source_audio  # noqa: E402

logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
logger = logging.getLogger(__name__)


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Convert an audio file into a normalized noise intensity sequence."
    )
    parser.add_argument("audio", type=str, help="Path to the audio file to convert.")
    parser.add_argument(
        "--interval-ms",
        type=int,
        default=DEFAULT_CONFIG.interval_ms,
        metavar="MS",
        help=f"Window width in ms ({MIN_INTERVAL_MS}–{MAX_INTERVAL_MS}, "
        f"default: {DEFAULT_CONFIG.interval_ms}).",
    )
    floor = parser.add_mutually_exclusive_group()
    floor.add_argument(
        "--floor",
        type=float,
        default=None,
        help=f"Lower threshold, 0–1 (default: {DEFAULT_CONFIG.lower_threshold:g}).",
    )
    floor.add_argument(
        "--floor-slider",
        type=float,
        default=None,
        metavar="POS",
        help="Lower threshold as a 0–1 position on the logarithmic slider.",
    )
    parser.add_argument(
        "--ceiling",
        type=float,
        default=DEFAULT_CONFIG.upper_threshold,
        help=f"Upper threshold, 0–1 (default: {DEFAULT_CONFIG.upper_threshold:g}).",
    )
    parser.add_argument(
        "--curve",
        type=float,
        default=DEFAULT_CONFIG.curve_strength,
        help=f"Curve strength, {MIN_CURVE_STRENGTH:g}–{MAX_CURVE_STRENGTH:g} "
        f"(default: {DEFAULT_CONFIG.curve_strength:g}).",
    )
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        metavar="PATH",
        help="JSON file or directory to write (default: ./audio_noise_data.json).",
    )
    parser.add_argument(
        "--save-audio",
        type=str,
        default=None,
        metavar="PATH",
        help="Also write an unmodified copy of the source audio here.",
    )
    return parser.parse_args(argv)


def _build_config(args: argparse.Namespace) -> NoiseConfig:
    lower = DEFAULT_CONFIG.lower_threshold
    if args.floor is not None:
        lower = args.floor
    elif args.floor_slider is not None:
        lower = slider_to_lower_threshold(args.floor_slider)
    return NoiseConfig(
        interval_ms=args.interval_ms,
        lower_threshold=lower,
        upper_threshold=args.ceiling,
        curve_strength=args.curve,
    )


def _print_progress(percent: int) -> None:
    if percent % 25 == 0:
        logger.info("%d%% processed", percent)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)

    try:
        config = _build_config(args)
    except ValueError as exc:
        logger.error("Invalid parameters: %s", exc)
        return 2

    audio_path = Path(args.audio)
    engine = NoiseEngine(config, on_progress=_print_progress)
    try:
        if args.save_audio is not None:
            data = audio_path.read_bytes()
            result = engine.load_bytes(data, filename=audio_path.name)
        else:
            result = engine.load_file(audio_path)
    except (FileNotFoundError, ValueError, RuntimeError) as exc:
        logger.error("%s", exc)
        return 1

    if result is None:
        logger.error("Conversion was superseded before it finished")
        return 1

    summary = summarize_balance(result.balance)
    print(f"Windows:  {result.window_count} x {result.interval_ms} ms")
    print(f"Balance:  {result.balance:+.1f} ({summary.band})")
    print(f"          {summary.label}")

    written = save_json(result.values, args.output)
    print(f"JSON:     {written}")

    if args.save_audio is not None and engine.source_audio is not None:
        audio_copy = save_source_audio(
            engine.source_audio, args.save_audio, filename=audio_path.name
        )
        print(f"Audio:    {audio_copy}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
