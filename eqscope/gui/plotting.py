"""Helpers for turning editor outputs into matplotlib artists' geometry."""
from __future__ import annotations

from typing import Tuple

import numpy as np
from matplotlib.path import Path

from eqscope.dsp.spectrum import SplinePath


def spline_to_path(spline: SplinePath) -> Path:
    """Cubic Bezier segments as a matplotlib ``Path`` (MOVETO + CURVE4 runs)."""
    if spline.is_empty():
        return Path(np.zeros((0, 2)))
    vertices = [spline.start]
    codes = [Path.MOVETO]
    for seg in spline.segments:
        vertices.extend([seg.c1, seg.c2, seg.end])
        codes.extend([Path.CURVE4] * 3)
    return Path(np.asarray(vertices, dtype=np.float64), codes)


def spline_fill_path(spline: SplinePath, width: float, height: float) -> Path:
    """The spline closed down to the bottom edge, for the analyzer fill."""
    if spline.is_empty():
        return Path(np.zeros((0, 2)))
    outline = spline_to_path(spline)
    vertices = np.vstack([outline.vertices, [[width, height], [0.0, height], spline.start]])
    codes = list(outline.codes) + [Path.LINETO, Path.LINETO, Path.CLOSEPOLY]
    return Path(vertices, codes)


def curve_xy(curve: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Column-indexed y values as plottable (x, y)."""
    return np.arange(len(curve), dtype=np.float64), np.asarray(curve)
