"""
ingestion/capture.py — Audio capture backends for the tuner.

Two implementations of core.tuner.capture.AudioCapture:

    SoundDeviceCapture   microphone input via sounddevice (PortAudio)
    SimulatedCapture     synthetic tone near a chosen note, pumped manually

This module is in `ingestion/` because it touches audio devices. The
detection kernel in core/tuner/ never imports it; a TunerSession receives
a capture backend by injection.

sounddevice is imported lazily (or injected) so the rest of the package
imports and tests without PortAudio installed.

Usage:
    capture = SoundDeviceCapture(sample_rate=44100, buffer_size=4096)
    session = TunerSession(capture, config, listener=print)
    session.start()
"""

from __future__ import annotations

import logging
import math
from typing import Any

import numpy as np

from core.tuner.capture import BufferCallback
from core.tuner.notes import note_to_frequency

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# SoundDeviceCapture
# ---------------------------------------------------------------------------


class SoundDeviceCapture:
    """Mono float32 microphone capture with one callback per buffer.

    sounddevice runs the stream on its own PortAudio thread; each block of
    `buffer_size` frames is handed to the registered callback from that
    thread, in capture order.

    Args:
        sample_rate: Capture rate in Hz.
        buffer_size: Frames per delivered buffer.
        device: sounddevice device index or name. None = system default.
        sounddevice: Injected sounddevice module (tests). Imported lazily
            when omitted.
    """

    def __init__(
        self,
        *,
        sample_rate: int = 44100,
        buffer_size: int = 4096,
        device: int | str | None = None,
        sounddevice: Any = None,
    ) -> None:
        self.sample_rate = sample_rate
        self.buffer_size = buffer_size
        self.device = device
        self._sd = sounddevice
        self._stream: Any = None
        self._callback: BufferCallback | None = None

    def _backend(self) -> Any:
        if self._sd is None:
            import sounddevice  # deferred: needs PortAudio

            self._sd = sounddevice
        return self._sd

    @property
    def is_recording(self) -> bool:
        return self._stream is not None

    def request_permission(self) -> bool:
        """Check that the input device accepts mono float32 at sample_rate.

        Desktop platforms have no runtime permission prompt; an unusable or
        missing device is the equivalent of a denied permission.
        """
        sd = self._backend()
        try:
            sd.check_input_settings(
                device=self.device,
                channels=1,
                dtype="float32",
                samplerate=self.sample_rate,
            )
        except (sd.PortAudioError, ValueError) as exc:
            logger.warning("Audio input unavailable: %s", exc)
            return False
        return True

    def on_buffer(self, callback: BufferCallback | None) -> None:
        self._callback = callback

    def start(self) -> None:
        if self._stream is not None:
            return
        sd = self._backend()
        stream = sd.InputStream(
            samplerate=self.sample_rate,
            blocksize=self.buffer_size,
            device=self.device,
            channels=1,
            dtype="float32",
            callback=self._on_audio,
        )
        try:
            stream.start()
        except Exception:
            stream.close()
            raise
        self._stream = stream
        logger.info(
            "Audio capture started (sample_rate=%d, buffer_size=%d)",
            self.sample_rate,
            self.buffer_size,
        )

    def stop(self) -> None:
        if self._stream is None:
            return
        stream, self._stream = self._stream, None
        stream.stop()
        stream.close()
        logger.info("Audio capture stopped")

    def _on_audio(self, indata: np.ndarray, frames: int, time_info: Any, status: Any) -> None:
        """sounddevice stream callback."""
        if status:
            logger.debug("Audio input status: %s", status)
        if self._callback is None:
            return
        # indata is reused by PortAudio after the callback returns.
        self._callback(np.array(indata[:, 0], dtype=np.float64))


# ---------------------------------------------------------------------------
# SimulatedCapture
# ---------------------------------------------------------------------------


class SimulatedCapture:
    """Synthetic capture source: a sine near one note with drifting tuning.

    The detune wanders towards a random target within ±20 cents, with a
    little jitter per buffer, and occasionally picks a new target, roughly
    what a string settling while being tuned looks like.

    No thread is started. Call pump() to deliver buffers synchronously,
    which keeps tests and demos deterministic (seeded RNG).

    Args:
        note: Chromatic note name of the simulated string.
        octave: Octave of the simulated string.
        reference_pitch: A4 frequency used to derive the base frequency.
        sample_rate: Simulated capture rate in Hz.
        buffer_size: Samples per buffer.
        permission_granted: Value returned by request_permission().
        seed: RNG seed.
    """

    def __init__(
        self,
        *,
        note: str = "E",
        octave: int = 2,
        reference_pitch: float = 440.0,
        sample_rate: int = 44100,
        buffer_size: int = 4096,
        permission_granted: bool = True,
        seed: int | None = 0,
    ) -> None:
        base = note_to_frequency(note, octave, reference_pitch)
        if base == 0.0:
            raise ValueError(f"Unknown note name {note!r}")
        self.base_frequency = base
        self.sample_rate = sample_rate
        self.buffer_size = buffer_size
        self.permission_granted = permission_granted
        self._rng = np.random.default_rng(seed)
        self._callback: BufferCallback | None = None
        self._recording = False
        self._phase = 0.0
        self.current_cents = 0.0
        self._target_cents = self._new_target()

    def _new_target(self) -> float:
        return float((self._rng.random() - 0.5) * 40.0)

    @property
    def is_recording(self) -> bool:
        return self._recording

    def request_permission(self) -> bool:
        return self.permission_granted

    def on_buffer(self, callback: BufferCallback | None) -> None:
        self._callback = callback

    def start(self) -> None:
        self._recording = True

    def stop(self) -> None:
        self._recording = False

    @property
    def current_frequency(self) -> float:
        return self.base_frequency * 2.0 ** (self.current_cents / 1200.0)

    def next_buffer(self) -> np.ndarray:
        """Advance the drift by one step and synthesise the next buffer."""
        self.current_cents += (self._target_cents - self.current_cents) * 0.1
        self.current_cents += float((self._rng.random() - 0.5) * 2.0)
        if self._rng.random() < 0.02:
            self._target_cents = self._new_target()

        amplitude = 0.3 + float(self._rng.random()) * 0.4
        step = 2.0 * math.pi * self.current_frequency / self.sample_rate
        phases = self._phase + step * np.arange(self.buffer_size)
        self._phase = float((self._phase + step * self.buffer_size) % (2.0 * math.pi))
        return amplitude * np.sin(phases)

    def pump(self, count: int = 1) -> int:
        """Deliver up to `count` buffers to the callback.

        Returns:
            Number of buffers delivered (0 when stopped or no callback).
        """
        delivered = 0
        for _ in range(count):
            if not self._recording or self._callback is None:
                break
            self._callback(self.next_buffer())
            delivered += 1
        return delivered
