"""Log-frequency / linear-gain mapping between parameter and pixel space."""
from __future__ import annotations

from typing import Tuple, Union

import numpy as np

from eqscope.config import MAX_FREQ, MAX_GAIN, MIN_FREQ, MIN_GAIN

ArrayLike = Union[float, np.ndarray]

MIN_LOG = 1.0  # log10(10)
MAX_LOG = 4.477  # log10(30000), rounded
GAIN_SPAN = 30.0


def _out(value: np.ndarray) -> ArrayLike:
    return float(value) if np.ndim(value) == 0 else value


def freq_to_x(freq: ArrayLike, width: float) -> ArrayLike:
    """Map Hz to an x position; frequencies outside the domain are clamped."""
    freq = np.clip(np.asarray(freq, dtype=np.float64), MIN_FREQ, MAX_FREQ)
    return _out((np.log10(freq) - MIN_LOG) / (MAX_LOG - MIN_LOG) * width)


def x_to_freq(x: ArrayLike, width: float) -> ArrayLike:
    """Inverse of :func:`freq_to_x`. The result is not clamped."""
    x = np.asarray(x, dtype=np.float64)
    return _out(10.0 ** (MIN_LOG + (x / width) * (MAX_LOG - MIN_LOG)))


def gain_to_y(gain: ArrayLike, height: float) -> ArrayLike:
    """0 dB sits at mid-height; +-30 dB spans each half."""
    gain = np.clip(np.asarray(gain, dtype=np.float64), MIN_GAIN, MAX_GAIN)
    half = height / 2.0
    return _out(half - (gain / GAIN_SPAN) * half)


def y_to_gain(y: ArrayLike, height: float) -> ArrayLike:
    """Inverse of :func:`gain_to_y`. The result is not clamped."""
    y = np.asarray(y, dtype=np.float64)
    half = height / 2.0
    return _out((half - y) / half * GAIN_SPAN)


def db_to_y(db: ArrayLike, height: float) -> ArrayLike:
    """Like :func:`gain_to_y` but unclamped, for summed curve values."""
    half = height / 2.0
    return _out(half - (np.asarray(db, dtype=np.float64) / GAIN_SPAN) * half)


def band_position(freq: float, gain: float, width: float, height: float) -> Tuple[float, float]:
    return freq_to_x(freq, width), gain_to_y(gain, height)
