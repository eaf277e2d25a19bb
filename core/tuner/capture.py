"""
Audio capture protocol for the tuner.

Defines the capability every platform capture backend must provide.
This module is pure: no I/O and no device access.
Concrete implementations (microphone, simulated source) live in ingestion/.
"""

from collections.abc import Callable
from typing import Protocol, runtime_checkable

import numpy as np

BufferCallback = Callable[[np.ndarray], None]
"""Receives one mono float buffer in [-1, 1] per capture period."""


@runtime_checkable
class AudioCapture(Protocol):
    """
    Protocol for audio capture backends.

    Any class that implements these methods can feed a TunerSession.
    Buffers must be delivered one at a time, in capture order.
    """

    @property
    def is_recording(self) -> bool:
        """True between start() and stop()."""
        ...

    def request_permission(self) -> bool:
        """
        Ask the platform for microphone access.

        Returns:
            True if capture may start.
        """
        ...

    def on_buffer(self, callback: BufferCallback | None) -> None:
        """Register (or clear, with None) the buffer callback."""
        ...

    def start(self) -> None:
        """Begin delivering buffers to the registered callback."""
        ...

    def stop(self) -> None:
        """Stop delivering buffers. Safe to call when not recording."""
        ...
