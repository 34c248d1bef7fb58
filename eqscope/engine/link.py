"""Write-only bridge between the editor and an external EQ processor."""
from __future__ import annotations

import logging
from collections import deque
from typing import Deque, List, Optional, Protocol, runtime_checkable

from .meters import MeterChannel, MeterSnapshot, MeterSource
from .params import flat_index

logger = logging.getLogger(__name__)


@runtime_checkable
class ParameterSink(Protocol):
    def set_param(self, track_id: int, slot_id: int, index: int, value: float) -> None:
        ...


@runtime_checkable
class ParameterSource(Protocol):
    def get_param(self, track_id: int, slot_id: int, index: int) -> float:
        ...


class EngineLink:
    """Owns the sink connection and the readiness flag that gates every write.

    Writes are fire-and-forget: while the link is not ready they are dropped,
    and nothing is queued or retried.
    """

    def __init__(self, track_id: int = 0, slot_id: int = 0) -> None:
        self.track_id = track_id
        self.slot_id = slot_id
        self._sink: Optional[ParameterSink] = None
        self._ready = False
        self._status: Deque[str] = deque(maxlen=32)

    # Connection ---------------------------------------------------------
    def attach(self, sink: ParameterSink, slot_id: Optional[int] = None) -> None:
        self._sink = sink
        if slot_id is not None:
            self.slot_id = slot_id
        self._ready = True
        logger.info("Engine attached (track %d, slot %d)", self.track_id, self.slot_id)
        self._put_status(f"Engine connected on slot {self.slot_id}")

    def detach(self) -> None:
        if self._sink is None:
            return
        self._sink = None
        self._ready = False
        logger.info("Engine detached (track %d)", self.track_id)
        self._put_status("Engine disconnected")

    def set_ready(self, ready: bool) -> None:
        self._ready = bool(ready)

    @property
    def ready(self) -> bool:
        return self._ready and self._sink is not None

    # Parameter I/O -----------------------------------------------------
    def push(self, band_index: int, offset: int, value: float) -> None:
        self.push_global(flat_index(band_index, offset), value)

    def push_global(self, index: int, value: float) -> None:
        if not self.ready:
            logger.debug("Dropped write %d=%r: engine not ready", index, value)
            return
        try:
            self._sink.set_param(self.track_id, self.slot_id, index, float(value))
        except Exception:
            logger.exception("Parameter sink failed on write %d", index)
            self._put_status(f"Engine write failed at index {index}")

    def can_read(self) -> bool:
        return self.ready and isinstance(self._sink, ParameterSource)

    def read(self, band_index: int, offset: int) -> Optional[float]:
        return self.read_global(flat_index(band_index, offset))

    def read_global(self, index: int) -> Optional[float]:
        if not self.can_read():
            return None
        return float(self._sink.get_param(self.track_id, self.slot_id, index))

    def read_meter(self) -> Optional[MeterSnapshot]:
        """Current insert peaks, or None when the sink has no meters."""
        if not self.ready or not isinstance(self._sink, MeterSource):
            return None
        try:
            levels = [
                float(self._sink.get_meter(self.track_id, self.slot_id, int(channel)))
                for channel in MeterChannel
            ]
        except Exception:
            logger.debug("Meter read failed", exc_info=True)
            return None
        return MeterSnapshot(*levels)

    # Status -------------------------------------------------------------
    def _put_status(self, message: str) -> None:
        self._status.append(message)

    def poll_status(self) -> List[str]:
        """Drain queued status messages, oldest first. At most 32 are kept."""
        messages = list(self._status)
        self._status.clear()
        return messages
