"""
core/tuner/notes.py — Equal-tempered frequency ↔ note conversions.

Pure math, no numpy. Both directions are anchored on A4 = reference pitch,
so every result scales with the reference (432, 440, 442 Hz, ...).

    frequency_to_note(466.16, 440.0)  → NoteReading('A#', 4, 0)
    note_to_frequency('E', 2, 440.0)  → 82.4069
    parse_note_label('C#3')           → ('C#', 3)

Rounding:
    Semitones and cents are rounded half away from zero, so a reading
    exactly halfway between two notes resolves to the one further from
    the reference, and the cents sign follows the deviation.
"""

from __future__ import annotations

import math
import re

from core.tuner.types import NoteReading

NOTE_NAMES: tuple[str, ...] = (
    "C",
    "C#",
    "D",
    "D#",
    "E",
    "F",
    "F#",
    "G",
    "G#",
    "A",
    "A#",
    "B",
)

A4_INDEX: int = 9
"""Position of A within the chromatic table."""

A4_OCTAVE: int = 4

_NOTE_LABEL_RE = re.compile(r"^([A-G]#?)(-?\d+)$")


def _round_half_away(value: float) -> int:
    """Round to the nearest integer, ties away from zero (2.5 → 3, -2.5 → -3)."""
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def frequency_to_note(frequency: float, reference_pitch: float = 440.0) -> NoteReading:
    """Map a frequency to its nearest chromatic note.

    Formula:
        semitones = 12 × log₂(frequency / reference_pitch)
        cents     = round((semitones − round(semitones)) × 100)

    Args:
        frequency: Frequency in Hz. Must be > 0.
        reference_pitch: Frequency of A4 in Hz. Must be > 0.

    Returns:
        NoteReading with note, octave and cents in [-50, 50].

    Raises:
        ValueError: If frequency or reference_pitch ≤ 0.
    """
    if frequency <= 0.0:
        raise ValueError(f"frequency must be > 0, got {frequency}")
    if reference_pitch <= 0.0:
        raise ValueError(f"reference_pitch must be > 0, got {reference_pitch}")

    semitones_from_a4 = 12.0 * math.log2(frequency / reference_pitch)
    rounded = _round_half_away(semitones_from_a4)
    cents = _round_half_away((semitones_from_a4 - rounded) * 100.0)

    index_from_c0 = rounded + A4_INDEX + A4_OCTAVE * 12
    # Floor division and modulo stay correct below C0 (negative indices).
    octave = index_from_c0 // 12
    note = NOTE_NAMES[index_from_c0 % 12]
    return NoteReading(note=note, octave=octave, cents=cents)


def note_to_frequency(note: str, octave: int, reference_pitch: float = 440.0) -> float:
    """Expected frequency of a note in equal temperament.

    Args:
        note: Chromatic note name from NOTE_NAMES, e.g. 'E', 'F#'.
        octave: Octave number (A4 lies in octave 4).
        reference_pitch: Frequency of A4 in Hz.

    Returns:
        Frequency in Hz, or 0.0 when `note` is not a chromatic note name.
        Callers must check for 0.0 before using the value. Octaves too
        far from A4 to represent saturate to math.inf (high) or 0.0 (low).
    """
    try:
        note_index = NOTE_NAMES.index(note)
    except ValueError:
        return 0.0

    semitones_from_a4 = (octave - A4_OCTAVE) * 12 + (note_index - A4_INDEX)
    try:
        return reference_pitch * 2.0 ** (semitones_from_a4 / 12.0)
    except OverflowError:
        return math.inf if semitones_from_a4 > 0 else 0.0


def parse_note_label(label: str) -> tuple[str, int]:
    """Split scientific pitch notation into (note, octave).

    Examples:
        'E2'  → ('E', 2)
        'C#5' → ('C#', 5)

    Raises:
        ValueError: If label is not a sharp-spelled chromatic note plus octave.
    """
    match = _NOTE_LABEL_RE.match(label.strip())
    if match is None:
        raise ValueError(f"Invalid note label {label!r}, expected e.g. 'E2' or 'C#4'")
    note, octave = match.group(1), int(match.group(2))
    if note not in NOTE_NAMES:
        raise ValueError(f"Invalid note name {note!r} in label {label!r}")
    return note, octave


def cents_between(frequency: float, target: float) -> float:
    """Signed distance from target to frequency in cents (1200 per octave).

    Raises:
        ValueError: If either frequency is ≤ 0.
    """
    if frequency <= 0.0 or target <= 0.0:
        raise ValueError(f"frequencies must be > 0, got {frequency} and {target}")
    return 1200.0 * math.log2(frequency / target)
