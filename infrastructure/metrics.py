"""Prometheus metrics for the tuner.

Counts every analysed buffer by outcome so dashboards show how often the
tuner actually hears a pitch versus silence, noise or short buffers.

Metrics:
    tuner_buffers_total             Counter by outcome (detected / insufficient_signal /
                                    insufficient_buffer / aperiodic_signal)
    tuner_detect_latency_seconds    Histogram of per-buffer analysis time
    tuner_invalid_note_total        Note lookups rejected for an unknown note name

Usage::

    from infrastructure.metrics import LatencyTimer, record_detection

    with LatencyTimer() as t:
        detection = analyze_buffer(samples, config)
    record_detection(detection, latency_seconds=t.elapsed)
"""

from __future__ import annotations

import time

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

from core.tuner.types import Detection

OUTCOME_DETECTED = "detected"

_REGISTRY = CollectorRegistry()

buffers_total = Counter(
    "tuner_buffers_total",
    "Analysed audio buffers by outcome",
    ["outcome"],
    registry=_REGISTRY,
)

detect_latency_seconds = Histogram(
    "tuner_detect_latency_seconds",
    "Per-buffer pitch detection latency in seconds",
    buckets=[0.001, 0.0025, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25],
    registry=_REGISTRY,
)

invalid_note_total = Counter(
    "tuner_invalid_note_total",
    "Note-to-frequency lookups with an unknown note name",
    registry=_REGISTRY,
)


# ---------------------------------------------------------------------------
# Public helpers
# ---------------------------------------------------------------------------


def outcome_label(detection: Detection) -> str:
    """Metric label for a detection: 'detected' or the rejection reason."""
    if detection.reason is None:
        return OUTCOME_DETECTED
    return detection.reason.value


def record_detection(detection: Detection, *, latency_seconds: float) -> None:
    """Record one analysed buffer.

    Args:
        detection: Outcome returned by analyze_buffer().
        latency_seconds: Wall-clock analysis time in seconds.
    """
    buffers_total.labels(outcome=outcome_label(detection)).inc()
    detect_latency_seconds.observe(latency_seconds)


def record_invalid_note() -> None:
    """Increment the invalid note name counter."""
    invalid_note_total.inc()


def get_metrics_response() -> tuple[bytes, str]:
    """Generate Prometheus text exposition format.

    Returns:
        Tuple of (body_bytes, content_type_string).
    """
    return generate_latest(_REGISTRY), CONTENT_TYPE_LATEST


class LatencyTimer:
    """Context manager for measuring latency.

    Usage::

        with LatencyTimer() as t:
            detection = analyze_buffer(samples, config)
        record_detection(detection, latency_seconds=t.elapsed)
    """

    def __init__(self) -> None:
        """Initialize timer."""
        self._start: float = 0.0
        self.elapsed: float = 0.0

    def __enter__(self) -> LatencyTimer:
        """Start timing."""
        self._start = time.perf_counter()
        return self

    def __exit__(self, *_: object) -> None:
        """Stop timing and record elapsed."""
        self.elapsed = time.perf_counter() - self._start
