"""
Pydantic schemas for the ``/tuner`` endpoints.

Defines request validation and response serialization models. Range checks
mirror TunerConfig so invalid settings fail with 422 before reaching the
kernel.
"""

from pydantic import BaseModel, Field, field_validator

from core.tuner.config import MAX_NOISE_THRESHOLD, MAX_REFERENCE_PITCH, MIN_REFERENCE_PITCH

MAX_SAMPLES: int = 16384
"""Largest buffer accepted over HTTP (4× the largest capture buffer)."""


class PitchOut(BaseModel):
    """A detected pitch."""

    frequency: float = Field(..., description="Estimated fundamental frequency (Hz).")
    note: str = Field(..., description="Nearest chromatic note name, e.g. 'A#'.")
    octave: int = Field(..., description="Octave of the nearest note (A4 in octave 4).")
    label: str = Field(..., description="Scientific pitch notation, e.g. 'A#4'.")
    cents: int = Field(..., description="Deviation from the nearest note (-50 to 50).")
    amplitude: float = Field(..., description="RMS amplitude of the buffer.")
    in_tune: bool = Field(..., description="True when within ±5 cents.")


class DetectRequest(BaseModel):
    """Request body for ``POST /tuner/detect``."""

    samples: list[float] = Field(
        ...,
        min_length=1,
        max_length=MAX_SAMPLES,
        description="Mono audio buffer, floats in [-1, 1].",
    )
    sample_rate: int = Field(default=44100, gt=0, description="Sample rate (Hz).")
    reference_pitch: float = Field(
        default=440.0,
        ge=MIN_REFERENCE_PITCH,
        le=MAX_REFERENCE_PITCH,
        description="Frequency of A4 (Hz).",
    )
    noise_threshold: float = Field(
        default=0.01,
        ge=0.0,
        le=MAX_NOISE_THRESHOLD,
        description="RMS amplitude gate (0–0.1).",
    )

    @field_validator("samples")
    @classmethod
    def samples_must_be_normalized(cls, v: list[float]) -> list[float]:
        """Validate that every sample is a finite float in [-1, 1]."""
        if any(not -1.0 <= s <= 1.0 for s in v):
            raise ValueError("samples must be finite floats in [-1, 1]")
        return v


class DetectResponse(BaseModel):
    """Response body for ``POST /tuner/detect``.

    ``detected=false`` is a normal outcome (silence, noise, short buffer),
    not an error.
    """

    detected: bool = Field(..., description="True if a pitch was found.")
    result: PitchOut | None = Field(default=None, description="The detected pitch.")
    reason: str | None = Field(
        default=None,
        description="Why no pitch was found: insufficient_signal, "
        "insufficient_buffer or aperiodic_signal.",
    )
    amplitude: float = Field(..., description="RMS amplitude of the buffer.")


class NoteFrequencyResponse(BaseModel):
    """Response body for ``GET /tuner/note-frequency``."""

    note: str
    octave: int
    reference_pitch: float
    frequency: float = Field(..., description="Expected equal-tempered frequency (Hz).")


class StringOut(BaseModel):
    """One open string of a tuning."""

    label: str = Field(..., description="Note label, e.g. 'E2'.")
    frequency: float = Field(..., description="Target frequency (Hz).")


class TuningResponse(BaseModel):
    """Response body for ``GET /tuner/tunings/{name}``."""

    name: str
    reference_pitch: float
    strings: list[StringOut] = Field(..., description="Open strings in string order.")


class FileAnalyzeRequest(BaseModel):
    """Request body for ``POST /tuner/analyze-file``."""

    file_path: str = Field(..., description="Server-side path to an audio file.")
    reference_pitch: float = Field(
        default=440.0, ge=MIN_REFERENCE_PITCH, le=MAX_REFERENCE_PITCH
    )
    noise_threshold: float = Field(default=0.01, ge=0.0, le=MAX_NOISE_THRESHOLD)
    buffer_size: int = Field(default=4096, description="1024, 2048 or 4096 samples.")
    duration: float = Field(default=30.0, gt=0.0, le=300.0, description="Seconds to analyse.")


class FileAnalyzeResponse(BaseModel):
    """Response body for ``POST /tuner/analyze-file``."""

    sample_rate: int
    duration_sec: float
    buffer_count: int = Field(..., description="Number of full buffers analysed.")
    detected_count: int = Field(..., description="Buffers with a detected pitch.")
    dominant_note: str | None = Field(default=None, description="Most frequent note label.")
    median_frequency: float | None = None
    median_cents: float | None = None
    results: list[PitchOut] = Field(..., description="Detected pitches in time order.")
