"""Sounddevice-based live analyzer input for the EQ editor."""
from __future__ import annotations

import logging
import threading
from collections import deque
from dataclasses import dataclass
from typing import Deque, List, Optional

import numpy as np

try:
    import sounddevice as sd
except ImportError as exc:  # pragma: no cover - makes diagnostics clearer
    raise RuntimeError("sounddevice is required for the live analyzer") from exc

from .analysis import log_bin_magnitudes

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InputDevice:
    index: int
    name: str
    max_input_channels: int
    default_samplerate: float

    @classmethod
    def from_query(cls, index: int, info) -> "InputDevice":
        return cls(
            index=index,
            name=str(info["name"]),
            max_input_channels=int(info["max_input_channels"]),
            default_samplerate=float(info["default_samplerate"]),
        )


@dataclass
class CaptureSettings:
    device: Optional[int] = None
    sample_rate: float = 48000.0
    block_size: int = 2048
    channels: int = 2


class SpectrumStream:
    """Owns an input stream and exposes the latest spectrum as a raw source.

    The PortAudio callback analyses each block and swaps in the newest frame
    under a lock; :meth:`read` hands that frame to the analyzer tick. Until a
    block has arrived ``read`` returns an empty array, which the smoother
    treats as no data.
    """

    def __init__(self, bins: int = 256) -> None:
        self.bins = bins
        self.settings = CaptureSettings()
        self._stream: Optional[sd.InputStream] = None
        self._frame_lock = threading.Lock()
        self._frame: Optional[np.ndarray] = None
        self._messages: Deque[str] = deque(maxlen=32)

    @staticmethod
    def list_devices() -> List[InputDevice]:
        """Devices with at least one input channel."""
        found = [InputDevice.from_query(i, info) for i, info in enumerate(sd.query_devices())]
        return [dev for dev in found if dev.max_input_channels > 0]

    def configure(self, sample_rate: float, block_size: int, input_device: int, channels: int = 2) -> None:
        if self.running:
            logger.warning("Input reconfigured while running; takes effect on next start")
        self.settings = CaptureSettings(input_device, sample_rate, block_size, channels)

    @property
    def running(self) -> bool:
        return self._stream is not None

    def read(self) -> np.ndarray:
        with self._frame_lock:
            frame = self._frame
        return np.zeros(0) if frame is None else frame

    __call__ = read

    def start(self) -> None:
        if self.running:
            return
        cfg = self.settings
        if cfg.device is None:
            raise RuntimeError("An input device must be configured before starting the analyzer")
        stream = sd.InputStream(
            device=cfg.device,
            samplerate=cfg.sample_rate,
            blocksize=cfg.block_size,
            channels=cfg.channels,
            dtype="float32",
            callback=self._on_block,
            finished_callback=lambda: self._messages.append("Analyzer input finished"),
        )
        stream.start()
        self._stream = stream
        logger.info("Analyzer input started on device %s @ %.0f Hz", cfg.device, cfg.sample_rate)

    def stop(self) -> None:
        stream, self._stream = self._stream, None
        if stream is None:
            return
        try:
            stream.stop()
        finally:
            stream.close()
        with self._frame_lock:
            self._frame = None
        logger.info("Analyzer input stopped")

    close = stop

    def _on_block(self, indata, frames, time, status) -> None:
        if status:
            logger.warning("Analyzer input status: %s", status)
            self._messages.append(f"Audio input status: {status}")
        try:
            frame = log_bin_magnitudes(np.array(indata, copy=True), self.settings.sample_rate, self.bins)
        except Exception as exc:  # pragma: no cover - never raise into PortAudio
            self._messages.append(f"Analysis error: {exc}")
            return
        with self._frame_lock:
            self._frame = frame

    def poll_status(self) -> List[str]:
        messages = []
        while self._messages:
            messages.append(self._messages.popleft())
        return messages
