"""Insert peak meters read back from the processor."""
from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Protocol, runtime_checkable

from eqscope.audio.analysis import linear_to_db


class MeterChannel(IntEnum):
    INPUT_LEFT = 0
    INPUT_RIGHT = 1
    OUTPUT_LEFT = 2
    OUTPUT_RIGHT = 3


@runtime_checkable
class MeterSource(Protocol):
    def get_meter(self, track_id: int, slot_id: int, channel: int) -> float:
        ...


@dataclass(frozen=True)
class MeterSnapshot:
    """Linear peak levels of the insert's input and output, per side."""

    input_left: float = 0.0
    input_right: float = 0.0
    output_left: float = 0.0
    output_right: float = 0.0

    @property
    def input_dbfs(self) -> float:
        return linear_to_db(max(self.input_left, self.input_right))

    @property
    def output_dbfs(self) -> float:
        return linear_to_db(max(self.output_left, self.output_right))
