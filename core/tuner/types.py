"""
core/tuner/types.py — Frozen data types for pitch detection results.

All types are frozen dataclasses: immutable value objects created fresh per
audio buffer and handed straight to the caller.

Design principles:
    - No I/O and no state.
    - Invariants are documented but NOT enforced at construction time;
      validation happens at creation sites (notes.py, detector.py).
    - `label` and `in_tune` are computed properties, not stored fields.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

IN_TUNE_TOLERANCE_CENTS: int = 5
"""A reading within ±5 cents of the nearest note counts as in tune."""


def is_in_tune(cents: float, tolerance: float = IN_TUNE_TOLERANCE_CENTS) -> bool:
    return abs(cents) <= tolerance


class RejectReason(str, Enum):
    """Why a buffer produced no pitch.

    Every member is a normal, expected outcome, never an error.
    """

    INSUFFICIENT_SIGNAL = "insufficient_signal"
    """RMS amplitude below the configured noise threshold."""

    INSUFFICIENT_BUFFER = "insufficient_buffer"
    """Buffer shorter than two maximum periods."""

    APERIODIC_SIGNAL = "aperiodic_signal"
    """No CMNDF dip below threshold and the global minimum exceeds 0.5."""


@dataclass(frozen=True)
class NoteReading:
    """Nearest equal-tempered note for a frequency.

    Invariants:
        note in NOTE_NAMES
        -50 <= cents <= 50
    """

    note: str
    """Chromatic note name, e.g. 'A', 'C#'."""

    octave: int
    """Octave number. A4 (the reference pitch) lies in octave 4."""

    cents: int
    """Deviation from the note in cents. Negative = flat, positive = sharp."""

    @property
    def label(self) -> str:
        """Scientific pitch notation, e.g. 'A4', 'C#3'."""
        return f"{self.note}{self.octave}"

    def in_tune(self, tolerance: int = IN_TUNE_TOLERANCE_CENTS) -> bool:
        """True when |cents| is within tolerance."""
        return is_in_tune(self.cents, tolerance)


@dataclass(frozen=True)
class PitchResult:
    """A confident pitch detection for one audio buffer.

    Invariants:
        frequency > 0
        note in NOTE_NAMES
        -50 <= cents <= 50
        amplitude >= 0
    """

    frequency: float
    """Estimated fundamental frequency in Hz."""

    note: str
    """Nearest chromatic note name."""

    octave: int
    """Octave of the nearest note (A4 in octave 4)."""

    cents: int
    """Tuning deviation from the nearest note, in cents."""

    amplitude: float
    """RMS amplitude of the buffer that produced this result."""

    @property
    def label(self) -> str:
        """Scientific pitch notation, e.g. 'E2'."""
        return f"{self.note}{self.octave}"

    @property
    def in_tune(self) -> bool:
        """True when within the default in-tune tolerance."""
        return is_in_tune(self.cents)


@dataclass(frozen=True)
class Detection:
    """Outcome of analysing one buffer, including why it was rejected.

    Exactly one of `result` and `reason` is set.
    """

    result: PitchResult | None
    """The detection, or None when the buffer was rejected."""

    reason: RejectReason | None
    """Rejection reason, or None when a pitch was detected."""

    amplitude: float
    """RMS amplitude of the buffer (computed even for rejected buffers)."""

    @property
    def detected(self) -> bool:
        return self.result is not None
