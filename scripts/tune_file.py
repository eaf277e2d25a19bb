"""
Offline tuner: run the pitch detector over a recorded audio file.

Prints one line per buffer with a detected pitch, then a summary of the
dominant note and its median deviation.

Usage:
    python scripts/tune_file.py recordings/low_e.wav
    python scripts/tune_file.py take.flac --reference-pitch 442 --buffer-size 2048
    python scripts/tune_file.py take.wav --preset fast --sensitivity very-high
    python scripts/tune_file.py take.wav --json > readings.json

Settings not given on the command line fall back to TUNER_* environment
variables (a local .env file is loaded first), then to the defaults.
"""

import argparse
import dataclasses
import json
import logging
import sys
from pathlib import Path

# Allow running from the repo root without installing the package.
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv  # noqa: E402

from core.tuner.config import sensitivity_label  # noqa: E402
from ingestion.audio_engine import FileAnalysis, analyze_file  # noqa: E402
from scripts._tuner_cli import add_config_arguments, build_config  # noqa: E402

logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
logger = logging.getLogger(__name__)


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Detect pitch buffer by buffer in an audio file.")
    parser.add_argument("path", help="Audio file (wav, flac, mp3, ...).")
    add_config_arguments(parser)
    parser.add_argument(
        "--duration",
        type=float,
        default=30.0,
        metavar="SEC",
        help="Maximum seconds of audio to analyse.",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Print readings as JSON instead of text.",
    )
    return parser.parse_args(argv)


def _to_json(analysis: FileAnalysis) -> str:
    readings = []
    for reading in analysis.readings:
        result = reading.detection.result
        readings.append(
            {
                "time_sec": round(reading.time_sec, 4),
                "amplitude": round(reading.detection.amplitude, 5),
                "reason": reading.detection.reason.value if reading.detection.reason else None,
                "result": dataclasses.asdict(result) if result is not None else None,
            }
        )
    payload = {
        "path": analysis.path,
        "sample_rate": analysis.sample_rate,
        "duration_sec": analysis.duration_sec,
        "dominant_note": analysis.dominant_note,
        "median_frequency": analysis.median_frequency,
        "median_cents": analysis.median_cents,
        "readings": readings,
    }
    return json.dumps(payload, indent=2)


def _print_text(analysis: FileAnalysis) -> None:
    for reading in analysis.readings:
        result = reading.detection.result
        if result is None:
            continue
        marker = "✓" if result.in_tune else " "
        print(
            f"{reading.time_sec:7.3f}s  {result.frequency:8.2f} Hz  "
            f"{result.label:<4} {result.cents:+3d} cents {marker}"
        )

    print()
    if analysis.dominant_note is None:
        print("No pitch detected.")
        return
    print(
        f"Dominant note: {analysis.dominant_note}  "
        f"median {analysis.median_frequency:.2f} Hz, {analysis.median_cents:+.1f} cents  "
        f"({len(analysis.results)}/{len(analysis.readings)} buffers)"
    )


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    args = _parse_args(argv)

    try:
        config = build_config(args)
        logger.info(
            "Tuning %s at %d Hz, %d-sample buffers, A4 = %.1f Hz, sensitivity %s",
            args.path,
            config.sample_rate,
            config.buffer_size,
            config.reference_pitch,
            sensitivity_label(config.noise_threshold),
        )
        analysis = analyze_file(args.path, config, duration=args.duration)
    except (FileNotFoundError, ValueError, RuntimeError) as exc:
        logger.error("%s", exc)
        return 1

    if args.json:
        print(_to_json(analysis))
    else:
        _print_text(analysis)
    return 0


if __name__ == "__main__":
    sys.exit(main())
