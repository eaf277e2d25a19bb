"""
api/routes/tuner.py — Pitch detection and note lookup endpoints.

Endpoints:
    POST /tuner/detect           — Detect the pitch of one audio buffer
    POST /tuner/analyze-file     — Run the tuner over a server-side audio file
    GET  /tuner/note-frequency   — Expected frequency of a note
    GET  /tuner/tunings/{name}   — Open-string frequencies of a tuning

All endpoints delegate to the pure kernel in core/tuner/.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Query

from api.schemas.tuner import (
    DetectRequest,
    DetectResponse,
    FileAnalyzeRequest,
    FileAnalyzeResponse,
    NoteFrequencyResponse,
    PitchOut,
    StringOut,
    TuningResponse,
)
from core.tuner.config import (
    MAX_REFERENCE_PITCH,
    MIN_REFERENCE_PITCH,
    TunerConfig,
)
from core.tuner.detector import analyze_buffer
from core.tuner.notes import NOTE_NAMES, note_to_frequency
from core.tuner.tunings import get_tuning, string_frequencies
from core.tuner.types import PitchResult
from infrastructure.metrics import LatencyTimer, record_detection, record_invalid_note
from ingestion.audio_engine import analyze_file

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tuner", tags=["tuner"])


def _pitch_out(result: PitchResult) -> PitchOut:
    return PitchOut(
        frequency=result.frequency,
        note=result.note,
        octave=result.octave,
        label=result.label,
        cents=result.cents,
        amplitude=result.amplitude,
        in_tune=result.in_tune,
    )


# ---------------------------------------------------------------------------
# POST /tuner/detect
# ---------------------------------------------------------------------------


@router.post("/detect", response_model=DetectResponse)
def detect(request: DetectRequest) -> DetectResponse:
    """Detect the pitch of a single audio buffer.

    Args:
        request: DetectRequest with samples and tuner settings.

    Returns:
        DetectResponse. ``detected=false`` with a ``reason`` when the buffer
        is silent, aperiodic, or shorter than two 60 Hz periods.

    Raises:
        422: Invalid samples or settings.
    """
    # Only the buffer length is meaningful here; buffer_size stays default.
    config = TunerConfig(
        sample_rate=request.sample_rate,
        reference_pitch=request.reference_pitch,
        noise_threshold=request.noise_threshold,
    )

    with LatencyTimer() as timer:
        detection = analyze_buffer(request.samples, config)
    record_detection(detection, latency_seconds=timer.elapsed)

    if detection.result is None:
        return DetectResponse(
            detected=False,
            result=None,
            reason=detection.reason.value,
            amplitude=detection.amplitude,
        )

    return DetectResponse(
        detected=True,
        result=_pitch_out(detection.result),
        reason=None,
        amplitude=detection.amplitude,
    )


# ---------------------------------------------------------------------------
# GET /tuner/note-frequency
# ---------------------------------------------------------------------------


@router.get("/note-frequency", response_model=NoteFrequencyResponse)
def note_frequency(
    note: str = Query(..., description="Chromatic note name, e.g. 'E' or 'F#'."),
    octave: int = Query(..., ge=-1, le=9, description="Octave number (A4 in octave 4)."),
    reference_pitch: float = Query(
        default=440.0, ge=MIN_REFERENCE_PITCH, le=MAX_REFERENCE_PITCH
    ),
) -> NoteFrequencyResponse:
    """Return the equal-tempered frequency of a note.

    Raises:
        422: Unknown note name.
    """
    frequency = note_to_frequency(note, octave, reference_pitch)
    if frequency == 0.0:
        record_invalid_note()
        raise HTTPException(
            status_code=422,
            detail=f"Unknown note name {note!r}, valid options: {list(NOTE_NAMES)}",
        )
    return NoteFrequencyResponse(
        note=note,
        octave=octave,
        reference_pitch=reference_pitch,
        frequency=frequency,
    )


# ---------------------------------------------------------------------------
# GET /tuner/tunings/{name}
# ---------------------------------------------------------------------------


@router.get("/tunings/{name}", response_model=TuningResponse)
def tuning(
    name: str,
    reference_pitch: float = Query(
        default=440.0, ge=MIN_REFERENCE_PITCH, le=MAX_REFERENCE_PITCH
    ),
) -> TuningResponse:
    """Return target frequencies for every string of a tuning.

    Raises:
        404: Unknown tuning name.
    """
    try:
        selected = get_tuning(name)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=str(exc.args[0])) from exc

    strings = [
        StringOut(label=label, frequency=frequency)
        for label, frequency in string_frequencies(selected, reference_pitch)
    ]
    return TuningResponse(name=selected.name, reference_pitch=reference_pitch, strings=strings)


# ---------------------------------------------------------------------------
# POST /tuner/analyze-file
# ---------------------------------------------------------------------------


@router.post("/analyze-file", response_model=FileAnalyzeResponse)
def analyze_audio_file(request: FileAnalyzeRequest) -> FileAnalyzeResponse:
    """Run the tuner buffer by buffer over a recorded file.

    Loads the audio file at `file_path` (server-side path), resamples it to
    44.1 kHz and reports every detected pitch plus the dominant note.

    Raises:
        422: Invalid settings, file not found or unsupported format.
        500: Audio decoding failure.
    """
    try:
        config = TunerConfig(
            reference_pitch=request.reference_pitch,
            noise_threshold=request.noise_threshold,
            buffer_size=request.buffer_size,
        )
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    try:
        analysis = analyze_file(request.file_path, config, duration=request.duration)
    except FileNotFoundError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except RuntimeError as exc:
        logger.error("Tuning analysis failed: %s", exc)
        raise HTTPException(status_code=500, detail=f"Tuning analysis failed: {exc}") from exc

    results = analysis.results
    return FileAnalyzeResponse(
        sample_rate=analysis.sample_rate,
        duration_sec=analysis.duration_sec,
        buffer_count=len(analysis.readings),
        detected_count=len(results),
        dominant_note=analysis.dominant_note,
        median_frequency=analysis.median_frequency,
        median_cents=analysis.median_cents,
        results=[_pitch_out(r) for r in results],
    )
