"""
core/tuner/gate.py — RMS amplitude gate.

Rejects buffers too quiet to analyse before the (expensive) pitch estimator
runs. Pure functions of their inputs.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import ArrayLike


def compute_rms(samples: ArrayLike) -> float:
    """Root-mean-square amplitude of a buffer.

    Returns:
        sqrt(mean(x²)), or 0.0 for an empty buffer.
    """
    x = np.asarray(samples, dtype=np.float64)
    if x.size == 0:
        return 0.0
    return float(np.sqrt(np.mean(x * x)))


def apply_gate(samples: ArrayLike, noise_threshold: float) -> float | None:
    """Pass a buffer through the noise gate.

    Args:
        samples: Audio buffer, floats in [-1, 1].
        noise_threshold: Minimum RMS amplitude to accept.

    Returns:
        The buffer's RMS when it is at or above the threshold, otherwise None.
    """
    rms = compute_rms(samples)
    if rms < noise_threshold:
        return None
    return rms
