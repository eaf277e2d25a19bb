"""
ingestion/tuner_session.py — Wires a capture backend to the detection kernel.

    AudioCapture ──buffer──► analyze_buffer() ──PitchResult | None──► listener
                              [core/tuner — pure]

The session owns the only mutable state in the tuner: whether it is
listening, whether permission was granted, and which (immutable) TunerConfig
is current. Each buffer is analysed synchronously inside the capture
callback, so the result for buffer i is published before buffer i+1 is
processed. Nothing is smoothed or retained between buffers; display
smoothing belongs to the presentation layer.

Usage:
    session = TunerSession(SoundDeviceCapture(), TunerConfig(), listener=show)
    if session.start():
        ...
    session.stop()
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Callable
from typing import Any

import numpy as np

from core.tuner.capture import AudioCapture
from core.tuner.config import DEFAULT_CONFIG, TunerConfig
from core.tuner.detector import analyze_buffer
from core.tuner.notes import note_to_frequency
from core.tuner.types import Detection, PitchResult
from infrastructure.metrics import LatencyTimer, record_detection, record_invalid_note

logger = logging.getLogger(__name__)

PitchListener = Callable[[PitchResult | None], None]
"""Receives each buffer's result; None means no pitch (or stopped)."""


class TunerSession:
    """Listening session: capture → detection → listener.

    Args:
        capture: Any AudioCapture implementation.
        config: Initial tuner configuration.
        listener: Called once per buffer with the PitchResult or None,
            and with None when listening stops.
    """

    def __init__(
        self,
        capture: AudioCapture,
        config: TunerConfig = DEFAULT_CONFIG,
        listener: PitchListener | None = None,
    ) -> None:
        self._capture = capture
        self._config = config
        self._listener = listener
        self._listening = False
        self._has_permission = False
        self.last_detection: Detection | None = None

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def config(self) -> TunerConfig:
        return self._config

    @property
    def is_listening(self) -> bool:
        return self._listening

    @property
    def has_permission(self) -> bool:
        return self._has_permission

    def update_config(self, **changes: Any) -> TunerConfig:
        """Replace the config with a copy carrying `changes`.

        Takes effect from the next buffer.

        Raises:
            ValueError: If the resulting config is invalid. The current
                config is kept.
            TypeError: If a field name is unknown.
        """
        self._config = dataclasses.replace(self._config, **changes)
        logger.info("Tuner config updated: %s", changes)
        return self._config

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def request_permission(self) -> bool:
        self._has_permission = bool(self._capture.request_permission())
        return self._has_permission

    def start(self) -> bool:
        """Start listening.

        Returns:
            True if listening (including when already listening), False when
            microphone permission was not granted.
        """
        if self._listening:
            return True
        if not self.request_permission():
            logger.error("Microphone permission not granted")
            return False

        self._capture.on_buffer(self.process_buffer)
        self._capture.start()
        self._listening = True
        logger.info(
            "Tuner listening (reference_pitch=%.1f Hz, noise_threshold=%.3f)",
            self._config.reference_pitch,
            self._config.noise_threshold,
        )
        return True

    def stop(self) -> None:
        """Stop listening and publish a final None."""
        if not self._listening:
            return
        self._capture.stop()
        self._capture.on_buffer(None)
        self._listening = False
        self._publish(None)
        logger.info("Tuner stopped")

    # ------------------------------------------------------------------
    # Processing
    # ------------------------------------------------------------------

    def process_buffer(self, samples: np.ndarray) -> PitchResult | None:
        """Analyse one buffer and publish its result.

        Registered as the capture callback; may also be called directly.
        """
        config = self._config
        with LatencyTimer() as timer:
            detection = analyze_buffer(samples, config)
        record_detection(detection, latency_seconds=timer.elapsed)

        budget = len(samples) / config.sample_rate
        if timer.elapsed > budget:
            logger.warning(
                "Pitch detection took %.1f ms, over the %.1f ms buffer budget",
                timer.elapsed * 1000.0,
                budget * 1000.0,
            )

        if detection.result is None:
            logger.debug("No pitch: %s (rms=%.4f)", detection.reason.value, detection.amplitude)
        else:
            logger.debug(
                "Pitch %.2f Hz → %s %+d cents",
                detection.result.frequency,
                detection.result.label,
                detection.result.cents,
            )

        self.last_detection = detection
        self._publish(detection.result)
        return detection.result

    def note_frequency(self, note: str, octave: int) -> float:
        """Expected frequency of a note at the session's reference pitch.

        Returns:
            Frequency in Hz, or 0.0 for an unknown note name.
        """
        frequency = note_to_frequency(note, octave, self._config.reference_pitch)
        if frequency == 0.0:
            record_invalid_note()
            logger.warning("Unknown note name %r", note)
        return frequency

    def _publish(self, result: PitchResult | None) -> None:
        if self._listener is not None:
            self._listener(result)
