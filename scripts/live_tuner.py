"""
Live tuner: listen to the microphone and print the detected note.

Usage:
    python scripts/live_tuner.py
    python scripts/live_tuner.py --tuning guitar_drop_d --reference-pitch 442
    python scripts/live_tuner.py --simulate          # no microphone needed
    python scripts/live_tuner.py --preset fast --sensitivity low

Press Ctrl+C to stop. Settings not given on the command line fall back to
TUNER_* environment variables (a local .env file is loaded first).
"""

import argparse
import logging
import sys
import time
from pathlib import Path

# Allow running from the repo root without installing the package.
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv  # noqa: E402

from core.tuner.config import sensitivity_label  # noqa: E402
from core.tuner.tunings import TUNINGS, Tuning, get_tuning, nearest_string  # noqa: E402
from core.tuner.types import PitchResult  # noqa: E402
from ingestion.capture import SimulatedCapture, SoundDeviceCapture  # noqa: E402
from ingestion.tuner_session import TunerSession  # noqa: E402
from scripts._tuner_cli import add_config_arguments, build_config  # noqa: E402

logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
logger = logging.getLogger(__name__)


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Real-time chromatic tuner.")
    add_config_arguments(parser)
    parser.add_argument(
        "--tuning",
        default=None,
        choices=sorted(TUNINGS),
        help="Also show the nearest open string of this tuning.",
    )
    parser.add_argument(
        "--device",
        default=None,
        help="sounddevice input device index or name.",
    )
    parser.add_argument(
        "--simulate",
        action="store_true",
        default=False,
        help="Use a simulated E2 string instead of the microphone.",
    )
    return parser.parse_args(argv)


def _format(result: PitchResult | None, tuning: Tuning | None, reference_pitch: float) -> str:
    if result is None:
        return "  --"
    line = f"{result.label:<4} {result.cents:+3d} cents  {result.frequency:8.2f} Hz"
    if result.in_tune:
        line += "  in tune"
    if tuning is not None:
        match = nearest_string(result.frequency, tuning, reference_pitch)
        line += f"  [string {match.label} {match.cents:+.0f}]"
    return line


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    args = _parse_args(argv)

    try:
        config = build_config(args)
    except ValueError as exc:
        logger.error("%s", exc)
        return 1

    tuning = get_tuning(args.tuning) if args.tuning else None
    device = int(args.device) if args.device is not None and args.device.isdigit() else args.device

    if args.simulate:
        capture = SimulatedCapture(
            reference_pitch=config.reference_pitch,
            sample_rate=config.sample_rate,
            buffer_size=config.buffer_size,
        )
    else:
        capture = SoundDeviceCapture(
            sample_rate=config.sample_rate,
            buffer_size=config.buffer_size,
            device=device,
        )

    def show(result: PitchResult | None) -> None:
        print(f"\r{_format(result, tuning, config.reference_pitch):<60}", end="", flush=True)

    logger.info(
        "Sensitivity: %s (noise threshold %g)",
        sensitivity_label(config.noise_threshold),
        config.noise_threshold,
    )
    session = TunerSession(capture, config, listener=show)
    if not session.start():
        return 1

    interval = config.buffer_size / config.sample_rate
    try:
        while True:
            if isinstance(capture, SimulatedCapture):
                capture.pump()
            time.sleep(interval)
    except KeyboardInterrupt:
        print()
    finally:
        session.stop()
    return 0


if __name__ == "__main__":
    sys.exit(main())
