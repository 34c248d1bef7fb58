"""Pointer gestures on the EQ graph: hover, tap, drag and wheel-for-Q."""
from __future__ import annotations

import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Tuple

import numpy as np

from eqscope import config
from eqscope.config import EditorConfig
from eqscope.dsp.filters import Band, FilterShape
from eqscope.dsp.mapping import band_position, x_to_freq, y_to_gain

from .registry import BandRegistry


class InteractionMode(Enum):
    IDLE = "idle"
    HOVERING = "hovering"
    DRAGGING = "dragging"


@dataclass(frozen=True)
class InteractionState:
    """Ephemeral editor state exposed to the renderer. Indices are list positions."""

    selected_band_index: Optional[int] = None
    hover_band_index: Optional[int] = None
    dragging: bool = False
    preview_position: Optional[Tuple[float, float]] = None
    preview_shape: FilterShape = FilterShape.BELL

    @property
    def mode(self) -> InteractionMode:
        if self.dragging:
            return InteractionMode.DRAGGING
        if self.hover_band_index is not None:
            return InteractionMode.HOVERING
        return InteractionMode.IDLE

    @property
    def scroll_target(self) -> Optional[int]:
        if self.selected_band_index is not None:
            return self.selected_band_index
        return self.hover_band_index


class InteractionController:
    """Translates pointer events in pixel space into registry edits.

    State changes are applied by swapping a whole frozen
    :class:`InteractionState`, never field by field. The hovered and dragged
    bands are held by identity and resolved to list positions on read, so
    removals elsewhere in the list never retarget them.
    """

    def __init__(
        self,
        registry: BandRegistry,
        width: float,
        height: float,
        settings: Optional[EditorConfig] = None,
    ) -> None:
        self.registry = registry
        self.width = width
        self.height = height
        self.settings = settings or EditorConfig()
        self._state = InteractionState()
        self._hover_band: Optional[Band] = None
        self._drag_band: Optional[Band] = None

    # State ---------------------------------------------------------------
    @property
    def state(self) -> InteractionState:
        return replace(
            self._state,
            selected_band_index=self.registry.selected_index,
            hover_band_index=self._position_of(self._hover_band),
            dragging=self._position_of(self._drag_band) is not None,
        )

    def _position_of(self, band: Optional[Band]) -> Optional[int]:
        if band is None:
            return None
        for position, candidate in enumerate(self.registry.bands):
            if candidate is band:
                return position
        return None

    def resize(self, width: float, height: float) -> None:
        self.width = width
        self.height = height

    def set_preview_shape(self, shape: FilterShape) -> None:
        self._state = replace(self._state, preview_shape=FilterShape(shape))

    # Hit testing ---------------------------------------------------------
    def hit_test(self, x: float, y: float, include_disabled: bool = False) -> Optional[int]:
        """List position of the first band within the hit radius, if any."""
        for position, band in enumerate(self.registry.bands):
            if not band.enabled and not include_disabled:
                continue
            bx, by = band_position(band.freq, band.gain, self.width, self.height)
            if math.hypot(bx - x, by - y) < self.settings.hit_radius_px:
                return position
        return None

    # Gestures ------------------------------------------------------------
    def hover(self, x: float, y: float) -> None:
        hit = self.hit_test(x, y)
        if hit is not None:
            self._hover_band = self.registry.get(hit)
            self._state = replace(self._state, preview_position=None)
        else:
            self._hover_band = None
            self._state = replace(self._state, preview_position=(x, y))

    def leave(self) -> None:
        self._hover_band = None
        self._state = replace(self._state, preview_position=None)

    def tap(self, x: float, y: float) -> None:
        hit = self.hit_test(x, y)
        if hit is not None:
            self.registry.select(hit)
            return
        self.registry.add_band(x_to_freq(x, self.width), self._state.preview_shape)

    def double_tap(self, x: float, y: float) -> None:
        """Toggle a band on or off; on empty space, add a bell there."""
        hit = self.hit_test(x, y, include_disabled=True)
        if hit is not None:
            self.registry.toggle_enabled(hit)
        else:
            self.registry.add_band(x_to_freq(x, self.width), FilterShape.BELL)

    def drag_start(self, x: float, y: float) -> bool:
        hit = self.hit_test(x, y)
        if hit is None:
            return False
        self.registry.select(hit)
        self._drag_band = self.registry.get(hit)
        self._state = replace(self._state, preview_position=None)
        return True

    def drag_update(self, x: float, y: float) -> None:
        position = self._position_of(self._drag_band)
        if position is None:
            self._drag_band = None
            return
        freq = float(np.clip(x_to_freq(x, self.width), config.MIN_FREQ, config.MAX_FREQ))
        gain = float(np.clip(y_to_gain(y, self.height), config.MIN_GAIN, config.MAX_GAIN))
        self.registry.update_band(position, freq=freq, gain=gain)

    def drag_end(self) -> None:
        self._drag_band = None

    def scroll(self, delta_y: float, fine: bool = False) -> None:
        """Adjust Q of the selected (else hovered) band.

        Positive ``delta_y`` is the wheel rolled towards the user and lowers
        Q; anything else raises it.
        """
        target = self.state.scroll_target
        band = self.registry.get(target) if target is not None else None
        if band is None:
            return
        step = self.settings.q_fine_step if fine else self.settings.q_step
        delta = -step if delta_y > 0 else step
        q = float(np.clip(band.q + delta, config.MIN_Q, config.MAX_Q))
        self.registry.update_band(target, q=q)
