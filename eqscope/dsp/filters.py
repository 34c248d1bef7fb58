"""Parametric band model and per-shape display approximations."""
from __future__ import annotations

import math
from dataclasses import asdict, dataclass, fields, replace
from enum import Enum, IntEnum
from typing import Any, Callable, Dict, Tuple

import numpy as np

from eqscope import config


class FilterShape(IntEnum):
    """Band shapes. The integer value is the code written to the engine."""

    BELL = 0
    LOW_SHELF = 1
    HIGH_SHELF = 2
    LOW_CUT = 3
    HIGH_CUT = 4
    NOTCH = 5
    BAND_PASS = 6
    TILT_SHELF = 7
    ALL_PASS = 8
    BRICKWALL = 9

    @property
    def label(self) -> str:
        return _SHAPE_LABELS[self]


_SHAPE_LABELS = {
    FilterShape.BELL: "Bell",
    FilterShape.LOW_SHELF: "L Shelf",
    FilterShape.HIGH_SHELF: "H Shelf",
    FilterShape.LOW_CUT: "L Cut",
    FilterShape.HIGH_CUT: "H Cut",
    FilterShape.NOTCH: "Notch",
    FilterShape.BAND_PASS: "BPass",
    FilterShape.TILT_SHELF: "Tilt",
    FilterShape.ALL_PASS: "AllP",
    FilterShape.BRICKWALL: "Brick",
}


class Placement(IntEnum):
    STEREO = 0
    LEFT = 1
    RIGHT = 2
    MID = 3
    SIDE = 4


class Slope(Enum):
    DB6 = 6
    DB12 = 12
    DB18 = 18
    DB24 = 24
    DB36 = 36
    DB48 = 48
    DB72 = 72
    DB96 = 96
    BRICKWALL = "brickwall"


_RANGES: Dict[str, Tuple[float, float]] = {
    "freq": (config.MIN_FREQ, config.MAX_FREQ),
    "gain": (config.MIN_GAIN, config.MAX_GAIN),
    "q": (config.MIN_Q, config.MAX_Q),
    "dynamic_threshold": config.DYN_THRESHOLD_RANGE,
    "dynamic_ratio": config.DYN_RATIO_RANGE,
    "dynamic_attack": config.DYN_ATTACK_RANGE,
    "dynamic_release": config.DYN_RELEASE_RANGE,
}
_ENUMS = {"shape": FilterShape, "placement": Placement, "slope": Slope}
_FLAGS = ("enabled", "dynamic_enabled")

BAND_FIELDS = frozenset(_RANGES) | frozenset(_ENUMS) | frozenset(_FLAGS)


def clamp_field(name: str, value: Any, fallback: Any = None) -> Any:
    """Coerce one editable band field into its domain.

    A NaN numeric value is replaced by ``fallback``, or by the field's
    default when no fallback is given.
    """
    if name in _RANGES:
        lo, hi = _RANGES[name]
        value = float(value)
        if math.isnan(value):
            value = _field_default(name) if fallback is None else float(fallback)
        return float(np.clip(value, lo, hi))
    if name in _ENUMS:
        return _ENUMS[name](value)
    if name in _FLAGS:
        return bool(value)
    raise ValueError(f"Unknown band field: {name!r}")


@dataclass
class Band:
    """Describes a single parametric band.

    ``index`` is the engine slot the band was created in. It is not the
    position of the band in the editor's list.
    """

    index: int
    freq: float = 1000.0  # Hz
    gain: float = 0.0  # dB
    q: float = 1.0
    shape: FilterShape = FilterShape.BELL
    placement: Placement = Placement.STEREO
    slope: Slope = Slope.DB12
    enabled: bool = True
    # Dynamic EQ, carried as data only
    dynamic_enabled: bool = False
    dynamic_threshold: float = -20.0  # dB
    dynamic_ratio: float = 2.0
    dynamic_attack: float = 10.0  # ms
    dynamic_release: float = 100.0  # ms
    # Set only through the registry, which keeps at most one band soloed
    solo: bool = False

    def clamped(self) -> "Band":
        """Return a copy with every field constrained to its domain."""
        values = {name: clamp_field(name, getattr(self, name)) for name in BAND_FIELDS}
        return replace(self, **values)

    def copy(self) -> "Band":
        return replace(self)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["shape"] = int(self.shape)
        data["placement"] = int(self.placement)
        data["slope"] = self.slope.value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Band":
        values = {name: data[name] for name in BAND_FIELDS if name in data}
        band = cls(index=int(data["index"]), solo=bool(data.get("solo", False)), **values)
        return band.clamped()


def _field_default(name: str) -> Any:
    return next(f.default for f in fields(Band) if f.name == name)


# Display approximations. ``log_ratio`` is log2(freq / band.freq).

def _bell(ratio, log_ratio, band):
    return band.gain * np.exp(-((log_ratio * band.q) ** 2))


def _low_shelf(ratio, log_ratio, band):
    return band.gain * (1.0 - 1.0 / (1.0 + np.exp(-log_ratio * 4.0)))


def _high_shelf(ratio, log_ratio, band):
    return band.gain * (1.0 / (1.0 + np.exp(-log_ratio * 4.0)))


def _low_cut(ratio, log_ratio, band):
    return np.where(ratio < 1.0, -30.0 * (1.0 - ratio), 0.0)


def _high_cut(ratio, log_ratio, band):
    return np.where(ratio > 1.0, -30.0 * (ratio - 1.0), 0.0)


def _notch(ratio, log_ratio, band):
    return -np.minimum(30.0, 30.0 * np.exp(-((log_ratio * band.q * 2.0) ** 2)))


def _band_pass(ratio, log_ratio, band):
    return np.exp(-((log_ratio * band.q) ** 2)) * 12.0 - 6.0


def _tilt(ratio, log_ratio, band):
    return band.gain * np.clip(log_ratio, -2.0, 2.0) / 2.0


def _flat(ratio, log_ratio, band):
    return np.zeros_like(ratio)


_RESPONSES: Dict[FilterShape, Callable[..., np.ndarray]] = {
    FilterShape.BELL: _bell,
    FilterShape.LOW_SHELF: _low_shelf,
    FilterShape.HIGH_SHELF: _high_shelf,
    FilterShape.LOW_CUT: _low_cut,
    FilterShape.HIGH_CUT: _high_cut,
    FilterShape.NOTCH: _notch,
    FilterShape.BAND_PASS: _band_pass,
    FilterShape.TILT_SHELF: _tilt,
    FilterShape.ALL_PASS: _flat,
    FilterShape.BRICKWALL: _flat,
}

_unhandled = set(FilterShape) - set(_RESPONSES)
if _unhandled:
    raise RuntimeError(f"No response approximation for shapes: {sorted(_unhandled)}")


def band_response(freq, band: Band):
    """Approximate dB contribution of ``band`` at ``freq`` (scalar or array)."""
    ratio = np.asarray(freq, dtype=np.float64) / band.freq
    log_ratio = np.log2(ratio)
    response = _RESPONSES[band.shape](ratio, log_ratio, band)
    return float(response) if np.ndim(response) == 0 else response
