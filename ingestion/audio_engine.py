"""
ingestion/audio_engine.py — Offline tuning analysis of recorded audio.

Runs the live-tuner pipeline over a file, one capture-sized buffer at a
time:

    audio file
        │
        ├─ load_audio()       [ingestion/audio_loader.py — I/O boundary]
        │       ↓
        ├─ iter_buffers()     [fixed-size buffers, like a capture device]
        │       ↓
        └─ analyze_buffer()   [core/tuner/detector.py — pure kernel]
                ↓
            FileAnalysis (per-buffer detections + summary)

This module is in `ingestion/` because it reads files. The kernel itself
stays pure and lives in `core/tuner/`.
"""

from __future__ import annotations

import logging
import statistics
from collections import Counter
from dataclasses import dataclass
from pathlib import Path

from core.tuner.config import DEFAULT_CONFIG, TunerConfig
from core.tuner.detector import analyze_buffer
from core.tuner.types import Detection, PitchResult
from infrastructure.metrics import LatencyTimer, record_detection
from ingestion.audio_loader import DEFAULT_DURATION, iter_buffers, load_audio

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BufferReading:
    """Detection for one buffer of a file."""

    time_sec: float
    """Start time of the buffer in seconds."""

    detection: Detection


@dataclass(frozen=True)
class FileAnalysis:
    """Per-buffer detections for a recorded file plus a summary.

    Invariants:
        sample_rate > 0
        readings sorted by time_sec
    """

    path: str
    sample_rate: int
    duration_sec: float
    readings: tuple[BufferReading, ...]

    @property
    def results(self) -> tuple[PitchResult, ...]:
        """Detected pitches only, in time order."""
        return tuple(r.detection.result for r in self.readings if r.detection.result is not None)

    @property
    def dominant_note(self) -> str | None:
        """Most frequently detected note label (e.g. 'E2'), or None."""
        labels = Counter(result.label for result in self.results)
        if not labels:
            return None
        return labels.most_common(1)[0][0]

    @property
    def median_cents(self) -> float | None:
        """Median cents deviation across buffers on the dominant note."""
        dominant = self.dominant_note
        if dominant is None:
            return None
        return float(statistics.median(r.cents for r in self.results if r.label == dominant))

    @property
    def median_frequency(self) -> float | None:
        """Median frequency across buffers on the dominant note."""
        dominant = self.dominant_note
        if dominant is None:
            return None
        return float(statistics.median(r.frequency for r in self.results if r.label == dominant))


def analyze_file(
    path: str | Path,
    config: TunerConfig = DEFAULT_CONFIG,
    *,
    duration: float | None = DEFAULT_DURATION,
    hop: int | None = None,
) -> FileAnalysis:
    """Run the tuner over a recorded file.

    The file is resampled to `config.sample_rate` so the kernel sees the
    same rate it would during live capture.

    Args:
        path: Audio file path.
        config: Tuner configuration (buffer size, sample rate, gate, reference).
        duration: Maximum seconds to analyse.
        hop: Samples between buffers. Defaults to config.buffer_size.

    Returns:
        FileAnalysis with one BufferReading per full buffer.

    Raises:
        FileNotFoundError, ValueError, RuntimeError: see load_audio().
    """
    y, sr = load_audio(path, duration=duration, sr=config.sample_rate)
    readings: list[BufferReading] = []
    for start, buffer in iter_buffers(y, config.buffer_size, hop=hop):
        with LatencyTimer() as timer:
            detection = analyze_buffer(buffer, config)
        record_detection(detection, latency_seconds=timer.elapsed)
        readings.append(BufferReading(time_sec=start / sr, detection=detection))

    analysis = FileAnalysis(
        path=str(path),
        sample_rate=sr,
        duration_sec=len(y) / sr if sr > 0 else 0.0,
        readings=tuple(readings),
    )
    logger.info(
        "Analysed %s: %d buffers, %d with pitch, dominant note %s",
        Path(path).name,
        len(readings),
        len(analysis.results),
        analysis.dominant_note,
    )
    return analysis
