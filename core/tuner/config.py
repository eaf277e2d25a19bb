"""
Configuration dataclasses for the pitch detection kernel.

These immutable config objects decouple parameter passing from function
signatures. The settings collaborator owns the values; the kernel only reads
them. A new config replaces the old one and is never mutated in place.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

VALID_BUFFER_SIZES: frozenset[int] = frozenset({1024, 2048, 4096})

MIN_REFERENCE_PITCH: float = 400.0
MAX_REFERENCE_PITCH: float = 480.0
MAX_NOISE_THRESHOLD: float = 0.1


@dataclass(frozen=True)
class TunerConfig:
    """
    Configuration for pitch detection.

    Attributes:
        sample_rate: Capture sample rate in Hz. Must be positive.
        reference_pitch: Frequency of A4 in Hz. Defaults to 440.
            Accepted range is 400–480 Hz.
        noise_threshold: RMS amplitude gate. Buffers quieter than this are
            rejected before pitch estimation. Range 0–0.1.
        buffer_size: Samples per capture buffer (1024, 2048 or 4096).
            Larger buffers resolve low notes better at the cost of latency.

    Example:
        >>> config = TunerConfig(reference_pitch=442.0)
        >>> result = detect_pitch(samples, config)
    """

    sample_rate: int = 44100
    reference_pitch: float = 440.0
    noise_threshold: float = 0.01
    buffer_size: int = 2048

    def __post_init__(self) -> None:
        """Validate configuration parameters."""
        if isinstance(self.sample_rate, bool) or not isinstance(self.sample_rate, int):
            raise ValueError(f"sample_rate must be an integer, got {self.sample_rate!r}")
        if self.sample_rate <= 0:
            raise ValueError(f"sample_rate must be positive, got {self.sample_rate}")
        if not MIN_REFERENCE_PITCH <= self.reference_pitch <= MAX_REFERENCE_PITCH:
            raise ValueError(
                f"reference_pitch must be between {MIN_REFERENCE_PITCH:g} and "
                f"{MAX_REFERENCE_PITCH:g} Hz, got {self.reference_pitch}"
            )
        if not 0.0 <= self.noise_threshold <= MAX_NOISE_THRESHOLD:
            raise ValueError(
                f"noise_threshold must be between 0 and {MAX_NOISE_THRESHOLD:g}, "
                f"got {self.noise_threshold}"
            )
        if self.buffer_size not in VALID_BUFFER_SIZES:
            raise ValueError(
                f"Unknown buffer_size {self.buffer_size!r}, "
                f"valid options: {sorted(VALID_BUFFER_SIZES)}"
            )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> TunerConfig:
        """Build a config from ``TUNER_*`` environment variables.

        Unset variables fall back to the dataclass defaults.

        Raises:
            ValueError: If a variable cannot be parsed or fails validation.
        """
        env = os.environ if environ is None else environ
        kwargs: dict[str, int | float] = {}
        try:
            if "TUNER_SAMPLE_RATE" in env:
                kwargs["sample_rate"] = int(env["TUNER_SAMPLE_RATE"])
            if "TUNER_REFERENCE_PITCH" in env:
                kwargs["reference_pitch"] = float(env["TUNER_REFERENCE_PITCH"])
            if "TUNER_NOISE_THRESHOLD" in env:
                kwargs["noise_threshold"] = float(env["TUNER_NOISE_THRESHOLD"])
            if "TUNER_BUFFER_SIZE" in env:
                kwargs["buffer_size"] = int(env["TUNER_BUFFER_SIZE"])
        except ValueError as exc:
            raise ValueError(f"Invalid TUNER_* environment variable: {exc}") from exc
        return cls(**kwargs)


# Pre-defined configurations for common use cases

DEFAULT_CONFIG = TunerConfig()
"""Balanced: 44.1 kHz, A4 = 440 Hz, 0.01 noise gate, 2048-sample buffers."""

FAST_CONFIG = TunerConfig(sample_rate=22050, buffer_size=1024)
"""Cheapest per buffer: 1024 samples at 22.05 kHz (~46 ms). Two 60 Hz periods
are 734 samples at this rate, so the whole detection range stays reachable."""

ACCURATE_CONFIG = TunerConfig(buffer_size=4096)
"""Best for low strings (~11 buffers/s)."""

CONFIG_PRESETS: dict[str, TunerConfig] = {
    "fast": FAST_CONFIG,
    "balanced": DEFAULT_CONFIG,
    "accurate": ACCURATE_CONFIG,
}
"""Named configurations selectable from the command line."""


PITCH_PRESETS: tuple[tuple[str, float], ...] = (
    ("432", 432.0),
    ("440", 440.0),
    ("442", 442.0),
)
"""Common reference pitches offered to the user. 440 is the default."""

BUFFER_SIZE_PRESETS: tuple[tuple[str, int, str], ...] = (
    ("Fast", 1024, "lowest latency, needs a sample rate below ~30 kHz"),
    ("Balanced", 2048, "~22 fps at 44.1 kHz, recommended"),
    ("Accurate", 4096, "~11 fps at 44.1 kHz, best for low notes"),
)

SENSITIVITY_LEVELS: tuple[tuple[str, float], ...] = (
    ("Full", 0.001),
    ("Very High", 0.005),
    ("High", 0.01),
    ("Normal", 0.02),
    ("Low", 0.04),
    ("Very Low", 0.08),
)
"""Named noise thresholds, most to least sensitive."""

SENSITIVITY_CHOICES: tuple[str, ...] = tuple(
    label.lower().replace(" ", "-") for label, _ in SENSITIVITY_LEVELS
)
"""Command-line spellings of the sensitivity levels ('full', 'very-high', ...)."""


def sensitivity_label(noise_threshold: float) -> str:
    """Return the name of the sensitivity level matching a threshold.

    Falls back to 'High' (the default threshold) when no level matches.
    """
    for label, value in SENSITIVITY_LEVELS:
        if value == noise_threshold:
            return label
    return "High"


def sensitivity_threshold(name: str) -> float:
    """Noise threshold for a sensitivity level.

    Accepts the display label ('Very High') or its command-line spelling
    ('very-high').

    Raises:
        ValueError: If the name matches no level.
    """
    wanted = name.strip().lower().replace("-", " ")
    for label, value in SENSITIVITY_LEVELS:
        if label.lower() == wanted:
            return value
    raise ValueError(
        f"Unknown sensitivity {name!r}, valid options: {list(SENSITIVITY_CHOICES)}"
    )
