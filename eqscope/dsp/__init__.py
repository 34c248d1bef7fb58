"""DSP-side helpers for the EQ editor: mapping, curves and analyzer smoothing."""
from .filters import BAND_FIELDS, Band, FilterShape, Placement, Slope, band_response, clamp_field
from .mapping import freq_to_x, gain_to_y, x_to_freq, y_to_gain
from .response import band_curve, composite_curve, composite_db, frequency_response
from .spectrum import BezierSegment, SpectrumFrame, SpectrumSmoother, SplinePath, catmull_rom_bezier
from . import signals

__all__ = [
    "BAND_FIELDS",
    "Band",
    "BezierSegment",
    "FilterShape",
    "Placement",
    "Slope",
    "SpectrumFrame",
    "SpectrumSmoother",
    "SplinePath",
    "band_curve",
    "band_response",
    "catmull_rom_bezier",
    "clamp_field",
    "composite_curve",
    "composite_db",
    "freq_to_x",
    "frequency_response",
    "gain_to_y",
    "signals",
    "x_to_freq",
    "y_to_gain",
]
