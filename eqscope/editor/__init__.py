"""Interactive EQ editor core: band registry, gestures and analyzer tick."""
from .interaction import InteractionController, InteractionMode, InteractionState
from .panel import BandMarker, EqPanel, SpectrumAnalyzer
from .registry import BandRegistry, EqSnapshot
from .ticker import ManualScheduler, Ticker

__all__ = [
    "BandMarker",
    "BandRegistry",
    "EqPanel",
    "EqSnapshot",
    "InteractionController",
    "InteractionMode",
    "InteractionState",
    "ManualScheduler",
    "SpectrumAnalyzer",
    "Ticker",
]
