"""Dictionary-backed processor used headless, by the demo window and in tests."""
from __future__ import annotations

from typing import Dict, List, Tuple


class InMemoryEngine:
    """Stores parameter writes per (track, slot) and keeps a write log.

    Meter levels are whatever the host last stored with :meth:`set_meter`.
    """

    def __init__(self) -> None:
        self._values: Dict[Tuple[int, int, int], float] = {}
        self._meters: Dict[Tuple[int, int, int], float] = {}
        self.writes: List[Tuple[int, int, int, float]] = []

    def set_param(self, track_id: int, slot_id: int, index: int, value: float) -> None:
        self._values[(track_id, slot_id, index)] = value
        self.writes.append((track_id, slot_id, index, value))

    def get_param(self, track_id: int, slot_id: int, index: int) -> float:
        return self._values.get((track_id, slot_id, index), 0.0)

    def set_meter(self, track_id: int, slot_id: int, channel: int, level: float) -> None:
        self._meters[(track_id, slot_id, channel)] = level

    def get_meter(self, track_id: int, slot_id: int, channel: int) -> float:
        return self._meters.get((track_id, slot_id, channel), 0.0)

    def written_indices(self) -> List[int]:
        return [index for _, _, index, _ in self.writes]

    def clear_log(self) -> None:
        self.writes.clear()
