"""
core/tuner — Pure pitch detection kernel.

Given one buffer of audio samples, decides whether a musical pitch is
present and reports frequency, nearest note, octave and cents deviation.
All functions are pure and stateless per call: no I/O, no logging, no
sample history. Capture, file loading and the HTTP surface live outside
core/ (ingestion/, api/).

Public API:
    Types:      PitchResult, NoteReading, Detection, RejectReason
    Config:     TunerConfig, DEFAULT_CONFIG
    Pipeline:   detect_pitch, analyze_buffer
    Stages:     compute_rms, apply_gate, estimate_frequency
    Notes:      frequency_to_note, note_to_frequency, NOTE_NAMES
    Capture:    AudioCapture
"""

from core.tuner.capture import AudioCapture
from core.tuner.config import DEFAULT_CONFIG, TunerConfig
from core.tuner.detector import analyze_buffer, detect_pitch
from core.tuner.estimator import estimate_frequency
from core.tuner.gate import apply_gate, compute_rms
from core.tuner.notes import NOTE_NAMES, frequency_to_note, note_to_frequency
from core.tuner.types import Detection, NoteReading, PitchResult, RejectReason

__all__ = [
    "AudioCapture",
    "DEFAULT_CONFIG",
    "Detection",
    "NOTE_NAMES",
    "NoteReading",
    "PitchResult",
    "RejectReason",
    "TunerConfig",
    "analyze_buffer",
    "apply_gate",
    "compute_rms",
    "detect_pitch",
    "estimate_frequency",
    "frequency_to_note",
    "note_to_frequency",
]
