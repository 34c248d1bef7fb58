"""Band list ownership, validation and engine synchronisation."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

import numpy as np

from eqscope.config import MAX_BANDS, OUTPUT_GAIN_RANGE
from eqscope.dsp.filters import BAND_FIELDS, Band, FilterShape, Placement, clamp_field
from eqscope.engine.link import EngineLink
from eqscope.engine.params import (
    AUTO_GAIN_INDEX,
    NO_SOLO,
    OUTPUT_GAIN_INDEX,
    SOLO_BAND_INDEX,
    ParamOffset,
    band_parameters,
)

logger = logging.getLogger(__name__)


@dataclass
class EqSnapshot:
    """Stored editor state for A/B comparison."""

    bands: List[Band] = field(default_factory=list)
    output_gain: float = 0.0
    auto_gain: bool = False
    global_placement: Placement = Placement.STEREO

    def copy(self) -> "EqSnapshot":
        return EqSnapshot(
            [b.copy() for b in self.bands], self.output_gain, self.auto_gain, self.global_placement
        )


class BandRegistry:
    """Owns the live bands and pushes every accepted edit to the engine.

    Positions passed to the public methods are list positions. Each band's
    ``index`` is its engine slot, which stays fixed for the band's lifetime;
    removing a band does not renumber the others.
    """

    def __init__(self, link: EngineLink, on_settings_changed: Optional[Callable[[], None]] = None) -> None:
        self.link = link
        self._bands: List[Band] = []
        self.selected_index: Optional[int] = None
        self.output_gain = 0.0
        self.auto_gain = False
        self.global_placement = Placement.STEREO
        self._listeners: List[Callable[[], None]] = []
        self._snapshots: Dict[str, EqSnapshot] = {}
        if on_settings_changed is not None:
            self._listeners.append(on_settings_changed)

    # Queries -------------------------------------------------------------
    @property
    def bands(self) -> List[Band]:
        return list(self._bands)

    def __len__(self) -> int:
        return len(self._bands)

    def get(self, position: int) -> Optional[Band]:
        if 0 <= position < len(self._bands):
            return self._bands[position]
        return None

    @property
    def selected(self) -> Optional[Band]:
        if self.selected_index is None:
            return None
        return self.get(self.selected_index)

    def add_listener(self, callback: Callable[[], None]) -> None:
        self._listeners.append(callback)

    def _notify(self) -> None:
        for callback in list(self._listeners):
            callback()

    def _next_slot(self) -> int:
        used = {band.index for band in self._bands}
        return next(slot for slot in range(MAX_BANDS) if slot not in used)

    # Mutations -----------------------------------------------------------
    def add_band(
        self,
        freq: float,
        shape: FilterShape = FilterShape.BELL,
        placement: Optional[Placement] = None,
    ) -> Optional[Band]:
        if not self.link.ready:
            return None
        if len(self._bands) >= MAX_BANDS:
            logger.debug("Band limit (%d) reached; add ignored", MAX_BANDS)
            return None
        band = Band(
            index=self._next_slot(),
            freq=clamp_field("freq", freq),
            shape=FilterShape(shape),
            placement=self.global_placement if placement is None else Placement(placement),
        )
        slot = band.index
        self.link.push(slot, ParamOffset.FREQ, band.freq)
        self.link.push(slot, ParamOffset.GAIN, 0.0)
        self.link.push(slot, ParamOffset.Q, 1.0)
        self.link.push(slot, ParamOffset.ENABLED, 1.0)
        self.link.push(slot, ParamOffset.SHAPE, float(int(band.shape)))
        self._bands.append(band)
        self.selected_index = len(self._bands) - 1
        self._notify()
        return band

    def update_band(self, position: int, **fields) -> Optional[Band]:
        unknown = set(fields) - BAND_FIELDS
        if unknown:
            raise ValueError(f"Unknown band field(s): {sorted(unknown)}")
        band = self.get(position)
        if band is None or not self.link.ready:
            return None
        clamped = {name: clamp_field(name, value, getattr(band, name)) for name, value in fields.items()}
        for name, value in clamped.items():
            setattr(band, name, value)
        self._sync_band(band)
        self._notify()
        return band

    def _sync_band(self, band: Band) -> None:
        for offset, value in band_parameters(band):
            self.link.push(band.index, offset, value)

    def toggle_enabled(self, position: int) -> Optional[Band]:
        band = self.get(position)
        if band is None:
            return None
        return self.update_band(position, enabled=not band.enabled)

    def remove_band(self, position: int) -> Optional[Band]:
        band = self.get(position)
        if band is None or not self.link.ready:
            return None
        # The engine has no structural delete; disable the slot instead.
        self.link.push(band.index, ParamOffset.ENABLED, 0.0)
        if band.solo:
            self.link.push_global(SOLO_BAND_INDEX, NO_SOLO)
        del self._bands[position]
        self.selected_index = max(0, position - 1) if self._bands else None
        self._notify()
        return band

    def reset_all(self) -> None:
        if not self.link.ready:
            return
        for slot in range(MAX_BANDS):
            self.link.push(slot, ParamOffset.ENABLED, 0.0)
            self.link.push(slot, ParamOffset.GAIN, 0.0)
        self.link.push_global(OUTPUT_GAIN_INDEX, 0.0)
        if self.soloed_index is not None:
            self.link.push_global(SOLO_BAND_INDEX, NO_SOLO)
        self._bands = []
        self.selected_index = None
        self.output_gain = 0.0
        logger.info("EQ reset (%d slots cleared)", MAX_BANDS)
        self._notify()

    def select(self, position: Optional[int]) -> None:
        if position is None or self.get(position) is not None:
            self.selected_index = position

    def set_output_gain(self, gain_db: float) -> None:
        if not self.link.ready:
            return
        self.output_gain = float(np.clip(gain_db, *OUTPUT_GAIN_RANGE))
        self.link.push_global(OUTPUT_GAIN_INDEX, self.output_gain)
        self._notify()

    def set_auto_gain(self, enabled: bool) -> None:
        if not self.link.ready:
            return
        self.auto_gain = bool(enabled)
        self.link.push_global(AUTO_GAIN_INDEX, 1.0 if self.auto_gain else 0.0)
        self._notify()

    @property
    def soloed_index(self) -> Optional[int]:
        return next((pos for pos, band in enumerate(self._bands) if band.solo), None)

    def set_solo(self, position: Optional[int], solo: bool = True) -> Optional[Band]:
        """Solo the band at ``position``, un-soloing any other.

        ``solo=False`` (or ``position=None``) clears the solo; the engine
        receives the soloed band's slot, or -1.
        """
        if not self.link.ready:
            return None
        band = self.get(position) if position is not None else None
        if position is not None and band is None:
            return None
        for other in self._bands:
            other.solo = False
        if band is not None and solo:
            band.solo = True
            self.link.push_global(SOLO_BAND_INDEX, float(band.index))
        else:
            self.link.push_global(SOLO_BAND_INDEX, NO_SOLO)
        self._notify()
        return band

    # A/B comparison ----------------------------------------------------
    def capture(self) -> EqSnapshot:
        return EqSnapshot(
            [b.copy() for b in self._bands], self.output_gain, self.auto_gain, self.global_placement
        )

    def store_state(self, name: str) -> None:
        self._snapshots[name] = self.capture()

    def has_state(self, name: str) -> bool:
        return name in self._snapshots

    def copy_state(self, source: str, target: str) -> None:
        if source in self._snapshots:
            self._snapshots[target] = self._snapshots[source].copy()

    def recall_state(self, name: str) -> bool:
        snapshot = self._snapshots.get(name)
        if snapshot is None or not self.link.ready:
            return False
        self.restore(snapshot)
        logger.info("Recalled EQ state %s (%d bands)", name, len(snapshot.bands))
        return True

    def restore(self, snapshot: EqSnapshot) -> None:
        """Replace the editor state and resend it: disable every slot, then sync."""
        if not self.link.ready:
            return
        for slot in range(MAX_BANDS):
            self.link.push(slot, ParamOffset.ENABLED, 0.0)
        self._bands = [b.copy() for b in snapshot.bands]
        for band in self._bands:
            self._sync_band(band)
        self.output_gain = snapshot.output_gain
        self.auto_gain = snapshot.auto_gain
        self.global_placement = snapshot.global_placement
        self.link.push_global(OUTPUT_GAIN_INDEX, self.output_gain)
        self.link.push_global(AUTO_GAIN_INDEX, 1.0 if self.auto_gain else 0.0)
        self.selected_index = 0 if self._bands else None
        soloed = self.soloed_index
        solo_slot = NO_SOLO if soloed is None else float(self._bands[soloed].index)
        self.link.push_global(SOLO_BAND_INDEX, solo_slot)
        self._notify()

    # Initial sync --------------------------------------------------------
    def load_from_engine(self) -> int:
        """Rebuild the band list from the engine's current parameters.

        Returns the number of bands found; the engine must support reads.
        """
        if not self.link.can_read():
            return 0
        restored: List[Band] = []
        for slot in range(MAX_BANDS):
            enabled = self.link.read(slot, ParamOffset.ENABLED)
            freq = self.link.read(slot, ParamOffset.FREQ)
            if enabled < 0.5 and freq <= 10.0:
                continue
            values = {
                "freq": freq,
                "gain": self.link.read(slot, ParamOffset.GAIN),
                "q": self.link.read(slot, ParamOffset.Q),
                "enabled": enabled >= 0.5,
                "shape": _nearest_shape(self.link.read(slot, ParamOffset.SHAPE)),
                "dynamic_enabled": self.link.read(slot, ParamOffset.DYN_ENABLED) >= 0.5,
                "dynamic_threshold": self.link.read(slot, ParamOffset.DYN_THRESHOLD),
                "dynamic_ratio": self.link.read(slot, ParamOffset.DYN_RATIO),
                "dynamic_attack": self.link.read(slot, ParamOffset.DYN_ATTACK),
                "dynamic_release": self.link.read(slot, ParamOffset.DYN_RELEASE),
            }
            restored.append(Band(index=slot, **{k: clamp_field(k, v) for k, v in values.items()}))
        self._bands = restored
        self.output_gain = float(np.clip(self.link.read_global(OUTPUT_GAIN_INDEX), *OUTPUT_GAIN_RANGE))
        self.auto_gain = self.link.read_global(AUTO_GAIN_INDEX) > 0.5
        self.selected_index = 0 if restored else None
        return len(restored)


def _nearest_shape(code: float) -> FilterShape:
    return FilterShape(int(np.clip(round(code), 0, len(FilterShape) - 1)))
