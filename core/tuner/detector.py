"""
core/tuner/detector.py — Per-buffer pitch detection pipeline.

Composes the kernel stages, leaves first:

    buffer
      │
      ├─ apply_gate()          [gate.py — RMS noise gate]
      │       ↓ (passed)
      ├─ estimate_period()     [estimator.py — CMNDF pitch tracker]
      │       ↓
      └─ frequency_to_note()   [notes.py — nearest note + cents]
              ↓
          PitchResult | None

Each call is independent: no sample history, no smoothing. "No result" is a
normal outcome (silence, noise, short buffer) and is returned as None, never
raised.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import ArrayLike

from core.tuner.config import DEFAULT_CONFIG, TunerConfig
from core.tuner.estimator import estimate_period
from core.tuner.gate import apply_gate, compute_rms
from core.tuner.notes import frequency_to_note
from core.tuner.types import Detection, PitchResult, RejectReason


def analyze_buffer(samples: ArrayLike, config: TunerConfig = DEFAULT_CONFIG) -> Detection:
    """Run one buffer through the pipeline and report the outcome.

    Args:
        samples: Audio buffer of finite floats in [-1, 1]. Any 1-D array-like.
        config: Sample rate, reference pitch and noise threshold.

    Returns:
        Detection carrying either a PitchResult or the RejectReason.
    """
    x = np.asarray(samples, dtype=np.float64).ravel()

    amplitude = apply_gate(x, config.noise_threshold)
    if amplitude is None:
        return Detection(
            result=None,
            reason=RejectReason.INSUFFICIENT_SIGNAL,
            amplitude=compute_rms(x),
        )

    period, reason = estimate_period(x, config.sample_rate)
    if period is None:
        return Detection(result=None, reason=reason, amplitude=amplitude)

    frequency = config.sample_rate / period
    reading = frequency_to_note(frequency, config.reference_pitch)
    result = PitchResult(
        frequency=frequency,
        note=reading.note,
        octave=reading.octave,
        cents=reading.cents,
        amplitude=amplitude,
    )
    return Detection(result=result, reason=None, amplitude=amplitude)


def detect_pitch(samples: ArrayLike, config: TunerConfig = DEFAULT_CONFIG) -> PitchResult | None:
    """Detect the pitch of one audio buffer.

    Returns:
        PitchResult, or None when no confident pitch is present.
    """
    return analyze_buffer(samples, config).result
