"""
Shared fixtures for the test suite.

Centralizes synthetic signal generation so individual test files
don't need to repeat sine/noise boilerplate.
"""

import numpy as np
import pytest

from core.tuner.config import TunerConfig

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

SAMPLE_RATE: int = 44100
"""Capture rate used throughout the tests."""

BUFFER_SIZE: int = 4096
"""Largest capture buffer — resolves the lowest guitar notes."""


# ---------------------------------------------------------------------------
# Signal factories
# ---------------------------------------------------------------------------


def make_sine(
    frequency: float,
    *,
    amplitude: float = 0.5,
    n_samples: int = BUFFER_SIZE,
    sample_rate: int = SAMPLE_RATE,
    phase: float = 0.0,
) -> np.ndarray:
    """Pure sine buffer."""
    t = np.arange(n_samples) / sample_rate
    return amplitude * np.sin(2.0 * np.pi * frequency * t + phase)


def make_harmonic_tone(
    frequency: float,
    *,
    amplitudes: tuple[float, ...] = (0.5, 0.25, 0.12),
    n_samples: int = BUFFER_SIZE,
    sample_rate: int = SAMPLE_RATE,
) -> np.ndarray:
    """Fundamental plus decaying harmonics — a rough plucked-string timbre."""
    t = np.arange(n_samples) / sample_rate
    tone = np.zeros(n_samples)
    for k, amp in enumerate(amplitudes, start=1):
        tone += amp * np.sin(2.0 * np.pi * frequency * k * t)
    return tone


def make_noise(
    *,
    amplitude: float = 0.3,
    n_samples: int = BUFFER_SIZE,
    seed: int = 1234,
) -> np.ndarray:
    """Uniform white noise in [-amplitude, amplitude]."""
    rng = np.random.default_rng(seed)
    return rng.uniform(-amplitude, amplitude, n_samples)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def config() -> TunerConfig:
    """Default 44.1 kHz config with 4096-sample buffers."""
    return TunerConfig(sample_rate=SAMPLE_RATE, buffer_size=BUFFER_SIZE)


@pytest.fixture()
def sine_110() -> np.ndarray:
    """110 Hz (A2) sine, amplitude 0.5, 4096 samples at 44.1 kHz."""
    return make_sine(110.0)


@pytest.fixture()
def sine():
    """Factory fixture: ``sine(frequency, amplitude=..., n_samples=...)``."""
    return make_sine


@pytest.fixture()
def harmonic_tone():
    """Factory fixture: ``harmonic_tone(frequency, amplitudes=...)``."""
    return make_harmonic_tone


@pytest.fixture()
def noise():
    """Factory fixture: ``noise(amplitude=..., seed=...)``."""
    return make_noise
