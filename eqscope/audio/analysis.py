"""FFT magnitude to normalised log-frequency bins for the analyzer."""
from __future__ import annotations

import numpy as np

from eqscope.config import SPECTRUM_FLOOR_DB


def linear_to_db(value, floor: float = -120.0):
    value = np.asarray(value, dtype=np.float64)
    with np.errstate(divide="ignore"):
        db = np.where(value > 0, 20 * np.log10(np.maximum(value, 1e-300)), floor)
    db = np.maximum(floor, db)
    return float(db) if db.ndim == 0 else db


def log_bin_edges(bins: int, sample_rate: float, min_freq: float = 20.0) -> np.ndarray:
    return np.logspace(np.log10(min_freq), np.log10(sample_rate / 2.0), bins + 1)


def log_bin_magnitudes(block: np.ndarray, sample_rate: float, bins: int = 256) -> np.ndarray:
    """Normalised [0, 1] magnitudes of ``block`` in log-spaced frequency bins.

    Multichannel input is mixed to mono; 0 dBFS maps to 1 and -80 dBFS or
    below maps to 0. Bins with no FFT line take their nearest line.
    """
    mono = block.mean(axis=1) if block.ndim == 2 else block
    if mono.size == 0:
        return np.zeros(0)
    window = np.hanning(mono.size)
    spectrum = np.abs(np.fft.rfft(mono * window)) / max(window.sum() / 2.0, 1e-12)
    freqs = np.fft.rfftfreq(mono.size, 1.0 / sample_rate)
    edges = log_bin_edges(bins, sample_rate)
    lo = np.searchsorted(freqs, edges[:-1], side="left")
    hi = np.searchsorted(freqs, edges[1:], side="left")
    magnitudes = np.empty(bins)
    for i in range(bins):
        if hi[i] > lo[i]:
            magnitudes[i] = spectrum[lo[i]:hi[i]].max()
        else:
            magnitudes[i] = spectrum[min(lo[i], spectrum.size - 1)]
    db = linear_to_db(magnitudes)
    return np.clip((db - SPECTRUM_FLOOR_DB) / -SPECTRUM_FLOOR_DB, 0.0, 1.0)
