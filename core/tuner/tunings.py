"""
core/tuner/tunings.py — Instrument tuning tables.

A Tuning lists open-string notes in string order (the order a player tunes
them, usually lowest first) in scientific pitch notation. Re-entrant tunings
such as the ukulele's G4 C4 E4 A4 keep their physical order, so a tuning is
not necessarily sorted by pitch.

Target frequencies are never stored; they are derived through
note_to_frequency() so they follow the configured reference pitch.
"""

from __future__ import annotations

from dataclasses import dataclass

from core.tuner.notes import cents_between, note_to_frequency, parse_note_label


@dataclass(frozen=True)
class Tuning:
    """Open-string notes of an instrument tuning.

    Invariants:
        strings is non-empty
        every label parses with parse_note_label()
    """

    name: str
    """Lookup key, e.g. 'guitar_standard'."""

    strings: tuple[str, ...]
    """Note labels in string order, e.g. ('E2', 'A2', ...) or ('G4', 'C4', ...)."""


@dataclass(frozen=True)
class StringMatch:
    """The open string closest to a detected frequency."""

    label: str
    target_hz: float
    cents: float
    """Deviation of the detected frequency from target_hz."""


GUITAR_STANDARD = Tuning("guitar_standard", ("E2", "A2", "D3", "G3", "B3", "E4"))
GUITAR_DROP_D = Tuning("guitar_drop_d", ("D2", "A2", "D3", "G3", "B3", "E4"))
BASS_STANDARD = Tuning("bass_standard", ("E1", "A1", "D2", "G2"))
UKULELE_STANDARD = Tuning("ukulele_standard", ("G4", "C4", "E4", "A4"))
VIOLIN_STANDARD = Tuning("violin_standard", ("G3", "D4", "A4", "E5"))
MANDOLIN_STANDARD = Tuning("mandolin_standard", ("G3", "D4", "A4", "E5"))

TUNINGS: dict[str, Tuning] = {
    t.name: t
    for t in (
        GUITAR_STANDARD,
        GUITAR_DROP_D,
        BASS_STANDARD,
        UKULELE_STANDARD,
        VIOLIN_STANDARD,
        MANDOLIN_STANDARD,
    )
}


def get_tuning(name: str) -> Tuning:
    """Look up a tuning by name.

    Raises:
        KeyError: If the name is unknown.
    """
    try:
        return TUNINGS[name]
    except KeyError:
        raise KeyError(f"Unknown tuning {name!r}, valid options: {sorted(TUNINGS)}") from None


def string_frequencies(tuning: Tuning, reference_pitch: float = 440.0) -> tuple[tuple[str, float], ...]:
    """Target frequency of every string, in string order."""
    result = []
    for label in tuning.strings:
        note, octave = parse_note_label(label)
        result.append((label, note_to_frequency(note, octave, reference_pitch)))
    return tuple(result)


def nearest_string(frequency: float, tuning: Tuning, reference_pitch: float = 440.0) -> StringMatch:
    """Find the string whose target is closest to frequency (in cents).

    Distance is measured logarithmically so a low string is not favoured
    over a high one at equal musical distance.

    Raises:
        ValueError: If frequency ≤ 0.
    """
    best: StringMatch | None = None
    for label, target in string_frequencies(tuning, reference_pitch):
        cents = cents_between(frequency, target)
        if best is None or abs(cents) < abs(best.cents):
            best = StringMatch(label=label, target_hz=target, cents=cents)
    if best is None:
        raise ValueError(f"Tuning {tuning.name!r} has no strings")
    return best
