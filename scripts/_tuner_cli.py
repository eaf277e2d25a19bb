"""
Shared tuner settings for the command-line scripts.

Both scripts accept the same settings flags and resolve them in the same
order: TUNER_* environment variables, then --preset, then explicit flags.
"""

import argparse
import dataclasses

from core.tuner.config import (
    BUFFER_SIZE_PRESETS,
    CONFIG_PRESETS,
    MAX_NOISE_THRESHOLD,
    MAX_REFERENCE_PITCH,
    MIN_REFERENCE_PITCH,
    PITCH_PRESETS,
    SENSITIVITY_CHOICES,
    TunerConfig,
    sensitivity_threshold,
)


def add_config_arguments(parser: argparse.ArgumentParser) -> None:
    """Register the tuner settings flags on `parser`."""
    parser.add_argument(
        "--preset",
        default=None,
        choices=sorted(CONFIG_PRESETS),
        help="Sample rate and buffer size preset.",
    )
    parser.add_argument(
        "--reference-pitch",
        type=float,
        default=None,
        metavar="HZ",
        help=(
            f"Frequency of A4 ({MIN_REFERENCE_PITCH:g}–{MAX_REFERENCE_PITCH:g} Hz), "
            f"commonly {', '.join(label for label, _ in PITCH_PRESETS)}. Default 440."
        ),
    )
    parser.add_argument(
        "--buffer-size",
        type=int,
        default=None,
        choices=[size for _, size, _ in BUFFER_SIZE_PRESETS],
        help="Samples per buffer: "
        + "; ".join(f"{size} {label} ({note})" for label, size, note in BUFFER_SIZE_PRESETS),
    )
    gate = parser.add_mutually_exclusive_group()
    gate.add_argument(
        "--noise-threshold",
        type=float,
        default=None,
        metavar="RMS",
        help=f"RMS noise gate (0–{MAX_NOISE_THRESHOLD:g}).",
    )
    gate.add_argument(
        "--sensitivity",
        default=None,
        choices=SENSITIVITY_CHOICES,
        help="Named noise gate level, most to least sensitive.",
    )


def build_config(args: argparse.Namespace) -> TunerConfig:
    """Resolve a TunerConfig from the environment and parsed flags.

    Raises:
        ValueError: If an environment variable or flag is invalid.
    """
    config = TunerConfig.from_env()
    if args.preset is not None:
        preset = CONFIG_PRESETS[args.preset]
        config = dataclasses.replace(
            config, sample_rate=preset.sample_rate, buffer_size=preset.buffer_size
        )

    noise_threshold = args.noise_threshold
    if args.sensitivity is not None:
        noise_threshold = sensitivity_threshold(args.sensitivity)

    overrides = {
        "reference_pitch": args.reference_pitch,
        "buffer_size": args.buffer_size,
        "noise_threshold": noise_threshold,
    }
    return dataclasses.replace(config, **{k: v for k, v in overrides.items() if v is not None})
