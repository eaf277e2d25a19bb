"""
Tests for core/tuner/notes.py — frequency ↔ note conversions.

Tests cover:
    - frequency_to_note(): reference notes, detuning, negative octaves
    - note_to_frequency(): reference notes, invalid names (0.0 sentinel)
    - Laws: cents range, scale invariance, round trip
    - Helpers: parse_note_label, cents_between, is_in_tune, rounding
"""

import math

import numpy as np
import pytest

from core.tuner.notes import (
    NOTE_NAMES,
    _round_half_away,
    cents_between,
    frequency_to_note,
    note_to_frequency,
    parse_note_label,
)
from core.tuner.types import NoteReading, PitchResult, is_in_tune

SEMITONE_RATIO = 2.0 ** (1.0 / 12.0)

# ---------------------------------------------------------------------------
# frequency_to_note
# ---------------------------------------------------------------------------


class TestFrequencyToNote:
    def test_a4_is_440(self):
        """440 Hz at A4 = 440 → A4, 0 cents."""
        assert frequency_to_note(440.0, 440.0) == NoteReading(note="A", octave=4, cents=0)

    def test_a_sharp_4(self):
        """Exact A#4 frequency → A#4, 0 cents."""
        reading = frequency_to_note(466.1638, 440.0)
        assert reading.note == "A#"
        assert reading.octave == 4
        assert reading.cents == 0

    def test_c4_middle_c(self):
        """C4 = 261.63 Hz lies in octave 4."""
        reading = frequency_to_note(261.6256, 440.0)
        assert (reading.note, reading.octave, reading.cents) == ("C", 4, 0)

    def test_b3_below_c4(self):
        """B3 = 246.94 Hz lies in octave 3 — octaves change at C."""
        reading = frequency_to_note(246.9417, 440.0)
        assert (reading.note, reading.octave) == ("B", 3)

    def test_low_e_string(self):
        """82.41 Hz → E2."""
        reading = frequency_to_note(82.41, 440.0)
        assert (reading.note, reading.octave, reading.cents) == ("E", 2, 0)

    def test_sharp_reading_positive_cents(self):
        """445 Hz is ~20 cents sharp of A4."""
        reading = frequency_to_note(445.0, 440.0)
        assert reading.note == "A"
        assert reading.cents == 20

    def test_flat_reading_negative_cents(self):
        """435 Hz is ~20 cents flat of A4."""
        reading = frequency_to_note(435.0, 440.0)
        assert reading.note == "A"
        assert reading.cents == -20

    def test_reference_pitch_shifts_note(self):
        """440 Hz with A4 = 432 reads ~31 cents sharp of A4."""
        reading = frequency_to_note(440.0, 432.0)
        assert reading.note == "A"
        assert reading.cents == 32

    def test_c0(self):
        """C0 = 16.35 Hz → octave 0."""
        reading = frequency_to_note(16.3516, 440.0)
        assert (reading.note, reading.octave) == ("C", 0)

    def test_b_minus_one(self):
        """B-1 = 15.43 Hz → note B, octave -1 (negative index from C0)."""
        reading = frequency_to_note(15.4339, 440.0)
        assert (reading.note, reading.octave) == ("B", -1)

    def test_one_hz_far_below_c0(self):
        """1 Hz → C-4, -38 cents; modulo stays non-negative."""
        reading = frequency_to_note(1.0, 440.0)
        assert (reading.note, reading.octave, reading.cents) == ("C", -4, -38)

    def test_raises_on_zero_frequency(self):
        with pytest.raises(ValueError, match="frequency must be > 0"):
            frequency_to_note(0.0, 440.0)

    def test_raises_on_negative_reference(self):
        with pytest.raises(ValueError, match="reference_pitch must be > 0"):
            frequency_to_note(440.0, -440.0)

    def test_label_property(self):
        assert frequency_to_note(466.1638).label == "A#4"


# ---------------------------------------------------------------------------
# note_to_frequency
# ---------------------------------------------------------------------------


class TestNoteToFrequency:
    def test_a4_exact(self):
        """A4 at reference 440 is exactly 440.0."""
        assert note_to_frequency("A", 4, 440.0) == 440.0

    def test_a5_exact_octave(self):
        assert note_to_frequency("A", 5, 440.0) == 880.0

    def test_e2(self):
        """E2 ≈ 82.41 Hz."""
        assert note_to_frequency("E", 2, 440.0) == pytest.approx(82.41, abs=0.01)

    def test_c4(self):
        assert note_to_frequency("C", 4, 440.0) == pytest.approx(261.63, abs=0.01)

    def test_reference_432(self):
        assert note_to_frequency("A", 4, 432.0) == 432.0

    def test_invalid_name_returns_zero(self):
        """'H' is not a chromatic name → 0.0 sentinel, no exception."""
        assert note_to_frequency("H", 4, 440.0) == 0.0

    def test_lowercase_name_is_invalid(self):
        assert note_to_frequency("a", 4, 440.0) == 0.0

    def test_flat_spelling_is_invalid(self):
        """Only sharp spellings are in the table."""
        assert note_to_frequency("Bb", 3, 440.0) == 0.0

    def test_huge_octave_saturates_to_inf(self):
        """Octave 2000 overflows a float; the result saturates instead of raising."""
        assert note_to_frequency("A", 2000, 440.0) == math.inf
        assert note_to_frequency("C", 10**400, 440.0) == math.inf

    def test_very_low_octave_underflows_to_zero(self):
        assert note_to_frequency("A", -2000, 440.0) == 0.0
        assert note_to_frequency("A", -(10**400), 440.0) == 0.0


# ---------------------------------------------------------------------------
# Laws
# ---------------------------------------------------------------------------

FREQUENCIES = np.geomspace(20.0, 5000.0, 240)


class TestMappingLaws:
    def test_cents_always_within_50(self):
        """Nearest-semitone rounding bounds |cents| by 50."""
        for f in FREQUENCIES:
            reading = frequency_to_note(float(f), 440.0)
            assert -50 <= reading.cents <= 50
            assert reading.note in NOTE_NAMES

    @pytest.mark.parametrize("k", [0.25, 0.5, 2.0, 4.0])
    def test_scale_invariance(self, k):
        """Scaling frequency and reference together leaves the reading unchanged."""
        for f in FREQUENCIES[::7]:
            assert frequency_to_note(float(f) * k, 440.0 * k) == frequency_to_note(float(f), 440.0)

    @pytest.mark.parametrize("reference", [432.0, 440.0, 442.0])
    def test_round_trip_within_one_semitone(self, reference):
        """note_to_frequency(frequency_to_note(f)) is within half a semitone of f."""
        for f in FREQUENCIES:
            reading = frequency_to_note(float(f), reference)
            target = note_to_frequency(reading.note, reading.octave, reference)
            ratio = float(f) / target
            assert 1.0 / SEMITONE_RATIO < ratio < SEMITONE_RATIO
            assert abs(1200.0 * math.log2(ratio)) <= 50.0 + 1e-9

    def test_every_note_round_trips_exactly(self):
        """Exact note frequencies map back to themselves with 0 cents."""
        for octave in range(0, 8):
            for note in NOTE_NAMES:
                reading = frequency_to_note(note_to_frequency(note, octave, 440.0), 440.0)
                assert (reading.note, reading.octave, reading.cents) == (note, octave, 0)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class TestRoundHalfAway:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [(0.0, 0), (0.4, 0), (0.5, 1), (2.5, 3), (-0.5, -1), (-2.5, -3), (1.6, 2), (-1.6, -2)],
    )
    def test_rounding(self, value, expected):
        assert _round_half_away(value) == expected

    def test_returns_int(self):
        assert isinstance(_round_half_away(-0.2), int)


class TestParseNoteLabel:
    def test_natural(self):
        assert parse_note_label("E2") == ("E", 2)

    def test_sharp(self):
        assert parse_note_label("C#5") == ("C#", 5)

    def test_negative_octave(self):
        assert parse_note_label("B-1") == ("B", -1)

    @pytest.mark.parametrize("label", ["H2", "E", "Eb2", "E#2", "", "2E"])
    def test_invalid_labels_raise(self, label):
        with pytest.raises(ValueError, match="Invalid note"):
            parse_note_label(label)


class TestCentsHelpers:
    def test_octave_is_1200_cents(self):
        assert cents_between(880.0, 440.0) == pytest.approx(1200.0)

    def test_flat_is_negative(self):
        assert cents_between(435.0, 440.0) < 0

    def test_raises_on_zero(self):
        with pytest.raises(ValueError):
            cents_between(0.0, 440.0)

    def test_in_tune_tolerance(self):
        assert is_in_tune(5)
        assert is_in_tune(-5)
        assert not is_in_tune(6)
        assert is_in_tune(9, tolerance=10)

    def test_note_reading_in_tune(self):
        assert NoteReading("E", 2, -4).in_tune()
        assert not NoteReading("E", 2, 12).in_tune()

    def test_pitch_result_shares_tolerance(self):
        """Both value types use the same ±5 cent boundary."""
        edge = PitchResult(frequency=82.65, note="E", octave=2, cents=5, amplitude=0.3)
        past = PitchResult(frequency=82.70, note="E", octave=2, cents=6, amplitude=0.3)
        assert edge.in_tune
        assert not past.in_tune
        assert NoteReading("E", 2, 6).in_tune() is past.in_tune
