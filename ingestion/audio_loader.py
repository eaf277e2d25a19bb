"""
ingestion/audio_loader.py — File I/O boundary for offline tuning analysis.

This is the ONLY module in the tuner that reads audio files from disk.
Everything downstream (core/tuner/) takes pre-loaded sample buffers,
never file paths.

Usage:
    from ingestion.audio_loader import iter_buffers, load_audio
    y, sr = load_audio("/path/to/string.wav", sr=44100)
    for start, buffer in iter_buffers(y, 4096):
        result = detect_pitch(buffer, config)
"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import numpy as np

# Supported audio file extensions (must be loadable by librosa / soundfile)
AUDIO_EXTENSIONS: frozenset[str] = frozenset(
    {".mp3", ".wav", ".flac", ".aiff", ".aif", ".ogg", ".m4a", ".opus"}
)

# Default: load only the first N seconds of a tuning take
DEFAULT_DURATION: float = 30.0


def load_audio(
    path: str | Path,
    *,
    duration: float | None = DEFAULT_DURATION,
    sr: int | None = None,
) -> tuple[np.ndarray, int]:
    """Load an audio file as mono and return (y, sr).

    Args:
        path: Absolute or relative path to an audio file.
              Supported formats: mp3, wav, flac, aiff, ogg, m4a, opus.
        duration: Maximum seconds to load. None loads the whole file.
        sr: Target sample rate in Hz. None preserves the native rate.

    Returns:
        (y, sr) — mono float32 samples in [-1, 1] and the sample rate.

    Raises:
        FileNotFoundError: File does not exist at the given path.
        ValueError: File extension is not a supported audio format.
        RuntimeError: librosa/soundfile could not decode the file.
    """
    import librosa  # deferred to allow testing without audio backend

    file_path = Path(path)

    if not file_path.exists():
        raise FileNotFoundError(f"Audio file not found: {file_path}")

    if file_path.suffix.lower() not in AUDIO_EXTENSIONS:
        raise ValueError(
            f"Unsupported audio format {file_path.suffix!r}. "
            f"Supported: {sorted(AUDIO_EXTENSIONS)}"
        )

    try:
        y, loaded_sr = librosa.load(
            file_path,
            sr=sr,
            mono=True,
            duration=duration,
            offset=0.0,
        )
    except Exception as exc:
        raise RuntimeError(
            f"Failed to decode audio file {file_path.name!r}: {exc}"
        ) from exc

    return y, int(loaded_sr)


def iter_buffers(
    y: np.ndarray,
    buffer_size: int,
    *,
    hop: int | None = None,
) -> Iterator[tuple[int, np.ndarray]]:
    """Slice a signal into fixed-length buffers, as a capture device would.

    Args:
        y: Mono audio samples.
        buffer_size: Samples per buffer.
        hop: Samples between buffer starts. Defaults to buffer_size
             (non-overlapping, like live capture).

    Yields:
        (start_sample, buffer) pairs. A trailing partial buffer is dropped.

    Raises:
        ValueError: If buffer_size or hop is not positive.
    """
    if buffer_size <= 0:
        raise ValueError(f"buffer_size must be positive, got {buffer_size}")
    step = buffer_size if hop is None else hop
    if step <= 0:
        raise ValueError(f"hop must be positive, got {step}")

    for start in range(0, len(y) - buffer_size + 1, step):
        yield start, y[start : start + buffer_size]
