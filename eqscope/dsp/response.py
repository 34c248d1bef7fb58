"""Composite EQ response curve for display.

Band contributions are summed in dB rather than cascaded as linear transfer
functions. That matches a real filter chain closely for moderate settings and
drifts apart at extreme boosts or cuts; the curve is only ever drawn, never
used for audio.
"""
from __future__ import annotations

from typing import Iterable, Tuple

import numpy as np

from eqscope.config import MAX_FREQ, MIN_FREQ

from .filters import Band, band_response
from .mapping import db_to_y, x_to_freq


def _check_size(width: float, height: float) -> None:
    if width <= 0 or height <= 0:
        raise ValueError("Curve size must be positive")


def composite_db(bands: Iterable[Band], freqs) -> np.ndarray:
    """Summed dB response of all enabled bands at ``freqs``."""
    freqs = np.asarray(freqs, dtype=np.float64)
    total = np.zeros_like(freqs)
    for band in bands:
        if band.enabled:
            total += band_response(freqs, band)
    return total


def composite_curve(bands: Iterable[Band], width: int, height: float) -> np.ndarray:
    """One y value per integer pixel column, clamped to the plot height."""
    _check_size(width, height)
    columns = np.arange(int(width), dtype=np.float64)
    db = composite_db(bands, x_to_freq(columns, width))
    return np.clip(db_to_y(db, height), 0.0, height)


def band_curve(band: Band, width: int, height: float, step: int = 2) -> Tuple[np.ndarray, np.ndarray]:
    """Single-band contribution sampled every ``step`` columns, as (x, y)."""
    _check_size(width, height)
    columns = np.arange(0, int(width) + 1, step, dtype=np.float64)
    db = band_response(x_to_freq(columns, width), band)
    return columns, np.clip(db_to_y(db, height), 0.0, height)


def frequency_response(bands: Iterable[Band], points: int = 512) -> Tuple[np.ndarray, np.ndarray]:
    """Log-spaced (freqs, dB) pairs over the editable range."""
    freqs = np.logspace(np.log10(MIN_FREQ), np.log10(MAX_FREQ), points)
    return freqs, composite_db(bands, freqs)
