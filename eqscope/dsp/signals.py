"""Synthetic analyzer input used by the demo window, smoke tool and tests."""
from __future__ import annotations

from typing import Optional

import numpy as np


def pink_slope(bins: int, tilt_db: float = -24.0, level: float = 0.7) -> np.ndarray:
    """Normalised spectrum falling ``tilt_db`` across the bins (80 dB range)."""
    pos = np.linspace(0.0, 1.0, bins)
    return np.clip(level + pos * tilt_db / 80.0, 0.0, 1.0)


def tone_peaks(bins: int, centres, width: float = 2.0, height: float = 0.25) -> np.ndarray:
    idx = np.arange(bins)[:, None]
    centres = np.atleast_1d(np.asarray(centres, dtype=np.float64))[None, :]
    return (height * np.exp(-((idx - centres) / width) ** 2)).sum(axis=1)


def white_noise(bins: int, amplitude: float = 0.05, rng: Optional[np.random.Generator] = None) -> np.ndarray:
    rng = rng or np.random.default_rng()
    return amplitude * rng.uniform(-1.0, 1.0, bins)


class SyntheticSpectrum:
    """Raw spectrum source producing a drifting pink-ish trace with two peaks."""

    def __init__(self, bins: int = 256, seed: Optional[int] = None) -> None:
        self.bins = bins
        self._tick = 0
        self._rng = np.random.default_rng(seed)

    def read(self) -> np.ndarray:
        self._tick += 1
        drift = np.sin(self._tick * 0.05)
        centres = [self.bins * (0.2 + 0.05 * drift), self.bins * (0.6 - 0.08 * drift)]
        frame = (
            pink_slope(self.bins)
            + tone_peaks(self.bins, centres)
            + white_noise(self.bins, rng=self._rng)
        )
        return np.clip(frame, 0.0, 1.0)

    __call__ = read
