"""
core/tuner/estimator.py — YIN-style fundamental frequency estimation.

Implements the autocorrelation-family pitch tracker used by the tuner:

    1. Difference function d(τ) over a fixed lag range
    2. Cumulative mean normalized difference function (CMNDF)
    3. Absolute-threshold period selection ("first dip wins")
    4. Global-minimum fallback with an aperiodicity limit
    5. Parabolic interpolation for sub-sample period accuracy

The lag range is derived from fixed frequency bounds (60–1500 Hz, guitar
range with margin). Bounding the search keeps worst-case cost at
O((maxPeriod − minPeriod) × N), well inside the real-time budget of one
buffer (≈ 93 ms at 4096 samples / 44.1 kHz).

The first-dip heuristic favours the fundamental but can lock onto a
harmonic for rich timbres. That behaviour is kept as-is.

Usage:
    from core.tuner.estimator import estimate_frequency
    hz = estimate_frequency(samples, 44100)   # float or None
"""

from __future__ import annotations

import numpy as np
from numpy.typing import ArrayLike

from core.tuner.types import RejectReason

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

MIN_FREQ_HZ: float = 60.0
"""Lowest detectable pitch. Low E on a guitar (E2) is ~82 Hz."""

MAX_FREQ_HZ: float = 1500.0
"""Highest detectable pitch. High E at the 24th fret is ~1318 Hz."""

CMNDF_THRESHOLD: float = 0.1
"""Absolute threshold: the first lag whose CMNDF dips below this wins."""

APERIODIC_LIMIT: float = 0.5
"""Fallback global minimum above this means the signal is noise."""


# ---------------------------------------------------------------------------
# Lag range
# ---------------------------------------------------------------------------


def period_bounds(sample_rate: int) -> tuple[int, int]:
    """Lag search range in samples for the fixed frequency bounds.

    Args:
        sample_rate: Sample rate in Hz. Must be > 0.

    Returns:
        (min_period, max_period) — floor(sr / MAX_FREQ_HZ) and
        floor(sr / MIN_FREQ_HZ). min_period is at least 1.

    Raises:
        ValueError: If sample_rate ≤ 0.
    """
    if sample_rate <= 0:
        raise ValueError(f"sample_rate must be > 0, got {sample_rate}")
    min_period = max(1, int(sample_rate // MAX_FREQ_HZ))
    max_period = int(sample_rate // MIN_FREQ_HZ)
    return min_period, max_period


def min_buffer_length(sample_rate: int) -> int:
    """Shortest buffer the estimator will analyse (two maximum periods)."""
    _, max_period = period_bounds(sample_rate)
    return 2 * max_period


# ---------------------------------------------------------------------------
# YIN steps
# ---------------------------------------------------------------------------


def difference_function(x: np.ndarray, min_period: int, max_period: int) -> np.ndarray:
    """Squared difference between the buffer and its lagged copy.

    d(τ) = Σ_{i=0}^{N−maxPeriod−1} (x[i] − x[i+τ])² for τ in [min_period, max_period).

    The summation window is the same for every lag so values are directly
    comparable.

    Returns:
        Array of length max_period. Entries below min_period are 0 (unused).
    """
    window = len(x) - max_period
    diff = np.zeros(max_period, dtype=np.float64)
    head = x[:window]
    for tau in range(min_period, max_period):
        delta = head - x[tau : tau + window]
        diff[tau] = np.dot(delta, delta)
    return diff


def cumulative_mean_normalized_difference(diff: np.ndarray, min_period: int) -> np.ndarray:
    """CMNDF: d(τ)·τ / Σ_{j=min_period}^{τ} d(j).

    cmndf[0] is the conventional sentinel 1. Where the running sum is zero
    (silent or constant input) the value is 1, i.e. "no periodic match".

    Returns:
        Array of the same length as diff.
    """
    values = np.zeros_like(diff)
    values[0] = 1.0
    segment = diff[min_period:]
    running = np.cumsum(segment)
    taus = np.arange(min_period, len(diff), dtype=np.float64)
    values[min_period:] = np.divide(
        segment * taus,
        running,
        out=np.ones_like(segment),
        where=running > 0.0,
    )
    return values


def select_period(values: np.ndarray, min_period: int, max_period: int) -> int | None:
    """Pick the candidate period from the CMNDF.

    Scans upward from min_period for the first lag below CMNDF_THRESHOLD and
    follows the descending run to its local minimum. Without such a dip the
    global minimum is used, unless it exceeds APERIODIC_LIMIT.

    Returns:
        Integer lag, or None for an aperiodic signal.
    """
    below = np.flatnonzero(values[min_period : max_period - 1] < CMNDF_THRESHOLD)
    if below.size > 0:
        tau = min_period + int(below[0])
        while tau + 1 < max_period and values[tau + 1] < values[tau]:
            tau += 1
        return tau

    scanned = values[min_period:max_period]
    offset = int(np.argmin(scanned))
    if scanned[offset] > APERIODIC_LIMIT:
        return None
    return min_period + offset


def refine_period(values: np.ndarray, tau: int, min_period: int, max_period: int) -> float:
    """Parabolic interpolation around an interior lag.

    Fits a parabola through (τ−1, τ, τ+1) and returns its vertex. Lags on
    the edge of the scanned range, or a flat neighbourhood, are returned
    unrefined.
    """
    if min_period < tau < max_period - 1:
        s0 = float(values[tau - 1])
        s1 = float(values[tau])
        s2 = float(values[tau + 1])
        denominator = 2.0 * (s0 - 2.0 * s1 + s2)
        if denominator != 0.0:
            return tau + (s0 - s2) / denominator
    return float(tau)


# ---------------------------------------------------------------------------
# Public entry points
# ---------------------------------------------------------------------------


def estimate_period(
    samples: ArrayLike, sample_rate: int
) -> tuple[float | None, RejectReason | None]:
    """Estimate the fundamental period of a buffer in (fractional) samples.

    Returns:
        (period, None) on success, or (None, reason) where reason is
        INSUFFICIENT_BUFFER or APERIODIC_SIGNAL.

    Raises:
        ValueError: If sample_rate ≤ 0.
    """
    min_period, max_period = period_bounds(sample_rate)
    x = np.asarray(samples, dtype=np.float64).ravel()

    # Sample rates below the frequency bounds leave no lag range to scan.
    if max_period <= min_period or len(x) < min_buffer_length(sample_rate):
        return None, RejectReason.INSUFFICIENT_BUFFER

    diff = difference_function(x, min_period, max_period)
    values = cumulative_mean_normalized_difference(diff, min_period)

    tau = select_period(values, min_period, max_period)
    if tau is None:
        return None, RejectReason.APERIODIC_SIGNAL

    period = refine_period(values, tau, min_period, max_period)
    if not np.isfinite(period) or period <= 0.0:
        return None, RejectReason.APERIODIC_SIGNAL
    return period, None


def estimate_frequency(samples: ArrayLike, sample_rate: int) -> float | None:
    """Estimate the fundamental frequency of a buffer.

    Args:
        samples: Audio buffer (floats in [-1, 1]) that already passed the gate.
        sample_rate: Sample rate in Hz.

    Returns:
        Frequency in Hz, or None when the buffer is too short or aperiodic.
    """
    period, _reason = estimate_period(samples, sample_rate)
    if period is None:
        return None
    return sample_rate / period
