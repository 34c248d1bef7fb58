"""Analyzer trace smoothing: ballistics, spatial blur and spline paths."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

import numpy as np

from eqscope.config import (
    CHANGE_GATE_DB,
    DECAY_COEFF,
    RISE_COEFF,
    SPECTRUM_CEIL_DB,
    SPECTRUM_FLOOR_DB,
)

logger = logging.getLogger(__name__)

Point = Tuple[float, float]


@dataclass(frozen=True)
class BezierSegment:
    c1: Point
    c2: Point
    end: Point


@dataclass(frozen=True)
class SplinePath:
    """A cubic path: ``start`` followed by Bezier segments."""

    start: Optional[Point] = None
    segments: Tuple[BezierSegment, ...] = ()

    @property
    def end(self) -> Optional[Point]:
        if self.segments:
            return self.segments[-1].end
        return self.start

    def is_empty(self) -> bool:
        return self.start is None


@dataclass
class SpectrumFrame:
    """The last two smoothed magnitude arrays, in dB."""

    previous: np.ndarray = field(default_factory=lambda: np.zeros(0))
    current: np.ndarray = field(default_factory=lambda: np.zeros(0))


def to_db(raw: Sequence[float]) -> np.ndarray:
    """Normalised magnitudes [0, 1] -> dB [-80, 0]."""
    span = SPECTRUM_CEIL_DB - SPECTRUM_FLOOR_DB
    return np.clip(np.asarray(raw, dtype=np.float64), 0.0, 1.0) * span + SPECTRUM_FLOOR_DB


def apply_ballistics(target: np.ndarray, previous: np.ndarray) -> np.ndarray:
    """Fast rise, slow fall. Bins without a previous value start at the floor."""
    prev = np.full(target.shape, SPECTRUM_FLOOR_DB)
    overlap = min(len(previous), len(target))
    prev[:overlap] = previous[:overlap]
    coeff = np.where(target > prev, RISE_COEFF, DECAY_COEFF)
    return prev + (target - prev) * coeff


def frame_changed(new: np.ndarray, old: np.ndarray, threshold: float = CHANGE_GATE_DB) -> bool:
    if len(new) != len(old):
        return True
    return bool(np.any(np.abs(new - old) > threshold))


def _blur_radii(n: int) -> np.ndarray:
    ratio = np.arange(n) / n
    return np.where(ratio < 0.25, 6, np.where(ratio < 0.5, 3, 1))


def _box_mean(values: np.ndarray, radius: int) -> np.ndarray:
    """Centred moving average; samples past either end repeat the edge value."""
    padded = np.pad(values, radius, mode="edge")
    csum = np.concatenate(([0.0], np.cumsum(padded)))
    width = 2 * radius + 1
    return (csum[width:] - csum[:-width]) / width


def spatial_smooth(values: Sequence[float], passes: int = 3) -> np.ndarray:
    """Box blur whose radius shrinks towards the high-frequency end.

    Low bins are wider under log compression, so they get more smoothing.
    The first and last bins are never modified.
    """
    smoothed = np.array(values, dtype=np.float64)
    n = len(smoothed)
    if n < 3:
        return smoothed
    radii = _blur_radii(n)
    radii[[0, -1]] = 0
    for _ in range(passes):
        prev = smoothed
        smoothed = prev.copy()
        for radius in (6, 3, 1):
            mask = radii == radius
            if mask.any():
                smoothed[mask] = _box_mean(prev, radius)[mask]
    return smoothed
    radii = np.array([_blur_radius(i, n) for i in range(n)])
    for _ in range(passes):
        prev = smoothed.copy()
        for i in range(1, n - 1):
            rad = radii[i]
            idx = np.clip(np.arange(i - rad, i + rad + 1), 0, n - 1)
            smoothed[i] = prev[idx].mean()
    return smoothed


def catmull_rom_bezier(points: Sequence[Point]) -> SplinePath:
    """Fit a Catmull-Rom spline through ``points`` as cubic Bezier segments.

    The end samples are duplicated to form the boundary tangents, so the path
    starts and ends exactly on the first and last point.
    """
    pts = [(float(x), float(y)) for x, y in points]
    if not pts:
        return SplinePath()
    segments: List[BezierSegment] = []
    for i in range(len(pts) - 1):
        p0 = pts[i - 1] if i > 0 else pts[i]
        p1 = pts[i]
        p2 = pts[i + 1]
        p3 = pts[i + 2] if i + 2 < len(pts) else p2
        segments.append(
            BezierSegment(
                c1=(p1[0] + (p2[0] - p0[0]) / 6.0, p1[1] + (p2[1] - p0[1]) / 6.0),
                c2=(p2[0] - (p3[0] - p1[0]) / 6.0, p2[1] - (p3[1] - p1[1]) / 6.0),
                end=p2,
            )
        )
    return SplinePath(start=pts[0], segments=tuple(segments))


def db_to_points(db: np.ndarray, width: float, height: float) -> List[Point]:
    n = len(db)
    if n == 0:
        return []
    span = SPECTRUM_CEIL_DB - SPECTRUM_FLOOR_DB
    xs = np.linspace(0.0, width, n) if n > 1 else np.zeros(1)
    level = (np.clip(db, SPECTRUM_FLOOR_DB, SPECTRUM_CEIL_DB) - SPECTRUM_FLOOR_DB) / span
    ys = height - level * height
    return list(zip(xs.tolist(), ys.tolist()))


class SpectrumSmoother:
    """Turns raw analyzer frames into a stable, drawable trace."""

    def __init__(self, smoothing_passes: int = 3, peak_decay_db: float = 0.3) -> None:
        self.smoothing_passes = smoothing_passes
        self.peak_decay_db = peak_decay_db
        self.frame = SpectrumFrame()
        self.peak_hold = np.zeros(0)

    def process(self, raw: Sequence[float]) -> bool:
        """Feed one tick of raw data; returns True when the trace should redraw."""
        if raw is None or len(raw) == 0:
            return False
        target = to_db(raw)
        current = self.frame.current
        smoothed = apply_ballistics(target, current)
        self._update_peaks(smoothed)
        if not frame_changed(smoothed, current):
            logger.debug("Spectrum frame below change gate; not propagated")
            return False
        self.frame = SpectrumFrame(previous=current, current=smoothed)
        return True

    def _update_peaks(self, smoothed: np.ndarray) -> None:
        if len(self.peak_hold) != len(smoothed):
            self.peak_hold = smoothed.copy()
            return
        decayed = self.peak_hold - self.peak_decay_db
        self.peak_hold = np.maximum(smoothed, decayed)

    def reset(self) -> None:
        self.frame = SpectrumFrame()
        self.peak_hold = np.zeros(0)

    @property
    def current(self) -> np.ndarray:
        return self.frame.current

    def spectrum_points(self, width: float, height: float) -> List[Point]:
        display = spatial_smooth(self.frame.current, self.smoothing_passes)
        return db_to_points(display, width, height)

    def spectrum_path(self, width: float, height: float) -> SplinePath:
        return catmull_rom_bezier(self.spectrum_points(width, height))

    def peak_points(self, width: float, height: float) -> List[Point]:
        return db_to_points(self.peak_hold, width, height)
