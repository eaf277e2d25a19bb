"""Tests for the /tuner endpoints, /health and /metrics."""

from __future__ import annotations

import importlib
from unittest.mock import patch

import numpy as np
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from api.main import app
from core.tuner.config import TunerConfig
from core.tuner.detector import analyze_buffer
from ingestion.audio_engine import BufferReading, FileAnalysis

client = TestClient(app)


def _sine(frequency: float, n_samples: int = 4096, amplitude: float = 0.5) -> list[float]:
    t = np.arange(n_samples) / 44100
    return (amplitude * np.sin(2.0 * np.pi * frequency * t)).tolist()


class TestHealthAndMetrics:
    def test_asgi_target_resolves(self) -> None:
        """`uvicorn api.main:app` loads this app with every route mounted."""
        module = importlib.import_module("api.main")
        assert isinstance(module.app, FastAPI)
        paths = {route.path for route in module.app.routes}
        assert {"/health", "/metrics", "/tuner/detect", "/tuner/analyze-file"} <= paths

    def test_health(self) -> None:
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}

    def test_metrics_exposes_tuner_counters(self) -> None:
        client.post("/tuner/detect", json={"samples": _sine(110.0)})
        resp = client.get("/metrics")
        assert resp.status_code == 200
        assert "tuner_buffers_total" in resp.text
        assert "tuner_detect_latency_seconds" in resp.text


class TestDetectEndpoint:
    def test_detects_a2(self) -> None:
        resp = client.post("/tuner/detect", json={"samples": _sine(110.0)})
        assert resp.status_code == 200
        data = resp.json()
        assert data["detected"] is True
        assert data["reason"] is None
        assert data["result"]["label"] == "A2"
        assert data["result"]["frequency"] == pytest.approx(110.0, abs=0.5)
        assert data["result"]["in_tune"] is True

    def test_reference_pitch_applied(self) -> None:
        resp = client.post(
            "/tuner/detect", json={"samples": _sine(440.0), "reference_pitch": 432.0}
        )
        assert resp.json()["result"]["cents"] == pytest.approx(32, abs=3)

    def test_silence_is_not_an_error(self) -> None:
        resp = client.post("/tuner/detect", json={"samples": [0.0] * 4096})
        assert resp.status_code == 200
        data = resp.json()
        assert data["detected"] is False
        assert data["result"] is None
        assert data["reason"] == "insufficient_signal"

    def test_short_buffer_reason(self) -> None:
        resp = client.post("/tuner/detect", json={"samples": _sine(440.0, n_samples=256)})
        assert resp.json()["reason"] == "insufficient_buffer"

    def test_out_of_range_sample_rejected(self) -> None:
        resp = client.post("/tuner/detect", json={"samples": [0.0, 1.5, 0.0]})
        assert resp.status_code == 422

    def test_empty_samples_rejected(self) -> None:
        resp = client.post("/tuner/detect", json={"samples": []})
        assert resp.status_code == 422

    @pytest.mark.parametrize(
        "overrides",
        [{"reference_pitch": 500.0}, {"noise_threshold": 0.2}, {"sample_rate": 0}],
    )
    def test_invalid_settings_rejected(self, overrides: dict) -> None:
        resp = client.post("/tuner/detect", json={"samples": [0.0] * 16, **overrides})
        assert resp.status_code == 422


class TestNoteFrequencyEndpoint:
    def test_a4(self) -> None:
        resp = client.get("/tuner/note-frequency", params={"note": "A", "octave": 4})
        assert resp.status_code == 200
        assert resp.json()["frequency"] == 440.0

    def test_reference_pitch(self) -> None:
        resp = client.get(
            "/tuner/note-frequency", params={"note": "A", "octave": 2, "reference_pitch": 432}
        )
        assert resp.json()["frequency"] == pytest.approx(108.0)

    def test_sharp_note(self) -> None:
        resp = client.get("/tuner/note-frequency", params={"note": "C#", "octave": 4})
        assert resp.json()["frequency"] == pytest.approx(277.18, abs=0.01)

    def test_unknown_note_422(self) -> None:
        resp = client.get("/tuner/note-frequency", params={"note": "H", "octave": 4})
        assert resp.status_code == 422
        assert "Unknown note name" in resp.json()["detail"]


class TestTuningEndpoint:
    def test_ukulele_keeps_string_order(self) -> None:
        resp = client.get("/tuner/tunings/ukulele_standard")
        assert resp.status_code == 200
        assert [s["label"] for s in resp.json()["strings"]] == ["G4", "C4", "E4", "A4"]

    def test_guitar_standard(self) -> None:
        resp = client.get("/tuner/tunings/guitar_standard")
        assert resp.status_code == 200
        strings = resp.json()["strings"]
        assert [s["label"] for s in strings] == ["E2", "A2", "D3", "G3", "B3", "E4"]
        assert strings[0]["frequency"] == pytest.approx(82.41, abs=0.01)

    def test_unknown_tuning_404(self) -> None:
        resp = client.get("/tuner/tunings/kazoo")
        assert resp.status_code == 404


class TestAnalyzeFileEndpoint:
    def _analysis(self) -> FileAnalysis:
        config = TunerConfig(buffer_size=4096)
        readings = (
            BufferReading(0.0, analyze_buffer(np.zeros(4096), config)),
            BufferReading(4096 / 44100, analyze_buffer(np.array(_sine(82.41)), config)),
        )
        return FileAnalysis(path="take.wav", sample_rate=44100, duration_sec=0.19, readings=readings)

    def test_returns_summary(self) -> None:
        with patch("api.routes.tuner.analyze_file", return_value=self._analysis()) as mock_analyze:
            resp = client.post("/tuner/analyze-file", json={"file_path": "take.wav"})

        assert resp.status_code == 200
        data = resp.json()
        assert data["buffer_count"] == 2
        assert data["detected_count"] == 1
        assert data["dominant_note"] == "E2"
        assert data["results"][0]["label"] == "E2"
        config = mock_analyze.call_args[0][1]
        assert config.buffer_size == 4096

    def test_file_not_found_422(self) -> None:
        with patch("api.routes.tuner.analyze_file", side_effect=FileNotFoundError("Audio file not found")):
            resp = client.post("/tuner/analyze-file", json={"file_path": "missing.wav"})
        assert resp.status_code == 422

    def test_invalid_buffer_size_422(self) -> None:
        resp = client.post("/tuner/analyze-file", json={"file_path": "take.wav", "buffer_size": 3000})
        assert resp.status_code == 422
        assert "buffer_size" in resp.json()["detail"]

    def test_decode_failure_500(self) -> None:
        with patch("api.routes.tuner.analyze_file", side_effect=RuntimeError("Failed to decode")):
            resp = client.post("/tuner/analyze-file", json={"file_path": "corrupt.wav"})
        assert resp.status_code == 500
