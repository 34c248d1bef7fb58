"""The EQ editor component: bands, gestures and analyzer for one insert slot."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

import numpy as np

from eqscope.config import EditorConfig
from eqscope.dsp.filters import Band
from eqscope.dsp.mapping import band_position
from eqscope.dsp.response import band_curve, composite_curve
from eqscope.dsp.spectrum import Point, SpectrumSmoother, SplinePath
from eqscope.engine.link import EngineLink, ParameterSink
from eqscope.engine.meters import MeterSnapshot

from .interaction import InteractionController, InteractionState
from .registry import BandRegistry
from .ticker import Scheduler, Ticker

logger = logging.getLogger(__name__)

SpectrumSource = Callable[[], Optional[Sequence[float]]]
MeterReader = Callable[[], Optional[MeterSnapshot]]


@dataclass(frozen=True)
class BandMarker:
    """Where and how to draw one band handle."""

    position: int
    band: Band
    x: float
    y: float
    selected: bool
    hovered: bool


class SpectrumAnalyzer:
    """Pulls the raw spectrum (and meters, when available) on every tick."""

    def __init__(
        self,
        source: SpectrumSource,
        scheduler: Scheduler,
        settings: Optional[EditorConfig] = None,
        on_frame: Optional[Callable[[], None]] = None,
        meter_source: Optional[MeterReader] = None,
    ) -> None:
        settings = settings or EditorConfig()
        self.source = source
        self.meter_source = meter_source
        self.meter = MeterSnapshot()
        self.smoother = SpectrumSmoother(settings.smoothing_passes, settings.peak_decay_db)
        self.on_frame = on_frame
        self.enabled = True
        self._ticker = Ticker(scheduler, settings.tick_interval_ms, self.tick)

    @property
    def running(self) -> bool:
        return self._ticker.running

    def start(self) -> None:
        if not self.enabled or self.running:
            return
        self._ticker.start()
        logger.info("Analyzer started (%d ms tick)", self._ticker.interval_ms)

    def stop(self) -> None:
        self._ticker.stop()

    def set_enabled(self, enabled: bool) -> None:
        self.enabled = enabled
        if enabled:
            self.start()
        else:
            self.stop()
            self.smoother.reset()

    def tick(self) -> None:
        changed = self._read_meter()
        raw = self.source()
        if raw is not None and self.smoother.process(raw):
            changed = True
        if changed and self.on_frame is not None:
            self.on_frame()

    def _read_meter(self) -> bool:
        if self.meter_source is None:
            return False
        meter = self.meter_source()
        if meter is None or meter == self.meter:
            return False
        self.meter = meter
        return True


class EqPanel:
    """Composes the registry, gesture controller and analyzer.

    The host forwards pointer events to :attr:`controller`, draws the
    render outputs, and must call :meth:`dispose` when the view goes away.
    """

    def __init__(
        self,
        width: float,
        height: float,
        spectrum_source: SpectrumSource,
        scheduler: Scheduler,
        settings: Optional[EditorConfig] = None,
        on_settings_changed: Optional[Callable[[], None]] = None,
        on_spectrum: Optional[Callable[[], None]] = None,
    ) -> None:
        self.settings = settings or EditorConfig()
        self.link = EngineLink(self.settings.track_id, self.settings.slot_id)
        self.registry = BandRegistry(self.link, on_settings_changed)
        self.controller = InteractionController(self.registry, width, height, self.settings)
        self.analyzer = SpectrumAnalyzer(
            spectrum_source, scheduler, self.settings, on_spectrum, meter_source=self.link.read_meter
        )

    # Lifecycle -----------------------------------------------------------
    def attach_engine(self, sink: ParameterSink, slot_id: Optional[int] = None, sync: bool = True) -> None:
        self.link.attach(sink, slot_id)
        if sync:
            found = self.registry.load_from_engine()
            logger.info("Loaded %d band(s) from engine", found)

    def start(self) -> None:
        self.analyzer.start()

    def dispose(self) -> None:
        self.analyzer.stop()
        self.link.detach()

    # Geometry ------------------------------------------------------------
    @property
    def size(self) -> Tuple[float, float]:
        return self.controller.width, self.controller.height

    def resize(self, width: float, height: float) -> None:
        self.controller.resize(width, height)

    # Render outputs ------------------------------------------------------
    @property
    def state(self) -> InteractionState:
        return self.controller.state

    def curve(self) -> np.ndarray:
        width, height = self.size
        return composite_curve(self.registry.bands, int(width), height)

    def band_curves(self) -> List[Tuple[int, np.ndarray, np.ndarray]]:
        """Contribution curves of the selected and hovered bands."""
        width, height = self.size
        state = self.state
        wanted = {state.selected_band_index, state.hover_band_index} - {None}
        curves = []
        for position in sorted(wanted):
            band = self.registry.get(position)
            if band is not None and band.enabled:
                xs, ys = band_curve(band, int(width), height)
                curves.append((position, xs, ys))
        return curves

    def markers(self) -> List[BandMarker]:
        width, height = self.size
        state = self.state
        markers = []
        for position, band in enumerate(self.registry.bands):
            x, y = band_position(band.freq, band.gain, width, height)
            markers.append(
                BandMarker(
                    position=position,
                    band=band,
                    x=x,
                    y=y,
                    selected=position == state.selected_band_index,
                    hovered=position == state.hover_band_index,
                )
            )
        return markers

    def spectrum_path(self) -> SplinePath:
        return self.analyzer.smoother.spectrum_path(*self.size)

    def peak_points(self) -> List[Point]:
        return self.analyzer.smoother.peak_points(*self.size)

    def meter(self) -> MeterSnapshot:
        """Latest insert I/O peaks; all zero until the engine reports any."""
        return self.analyzer.meter
