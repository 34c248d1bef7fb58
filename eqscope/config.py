"""Domain limits and host-tunable settings for the EQ editor."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields

logger = logging.getLogger(__name__)

# Band parameter domains
MIN_FREQ = 10.0
MAX_FREQ = 30000.0
MIN_GAIN = -30.0
MAX_GAIN = 30.0
MIN_Q = 0.1
MAX_Q = 30.0
MAX_BANDS = 64

DYN_THRESHOLD_RANGE = (-60.0, 0.0)
DYN_RATIO_RANGE = (1.0, 20.0)
DYN_ATTACK_RANGE = (0.1, 500.0)
DYN_RELEASE_RANGE = (1.0, 5000.0)

OUTPUT_GAIN_RANGE = (-24.0, 24.0)

# Spectrum display
SPECTRUM_FLOOR_DB = -80.0
SPECTRUM_CEIL_DB = 0.0
RISE_COEFF = 0.6
DECAY_COEFF = 0.15
CHANGE_GATE_DB = 0.1


@dataclass
class EditorConfig:
    """Settings a host may tune without touching the editor code."""

    tick_interval_ms: int = 33  # ~30 Hz analyzer refresh
    hit_radius_px: float = 15.0
    smoothing_passes: int = 3
    q_step: float = 0.2
    q_fine_step: float = 0.02
    peak_decay_db: float = 0.3
    track_id: int = 0
    slot_id: int = 0

    @classmethod
    def from_env(cls, prefix: str = "EQSCOPE_") -> "EditorConfig":
        """Build a config, overriding defaults from ``EQSCOPE_*`` variables.

        ``tick_interval_ms`` reads ``EQSCOPE_TICK_MS`` and ``hit_radius_px``
        reads ``EQSCOPE_HIT_RADIUS``; every other field uses its upper-cased
        name. Values that fail to parse are ignored.
        """

        aliases = {"tick_interval_ms": "TICK_MS", "hit_radius_px": "HIT_RADIUS"}
        config = cls()
        for item in fields(cls):
            key = prefix + aliases.get(item.name, item.name.upper())
            raw = os.environ.get(key)
            if raw is None:
                continue
            caster = int if isinstance(getattr(config, item.name), int) else float
            try:
                setattr(config, item.name, caster(raw))
            except ValueError:
                logger.warning("Ignoring %s=%r: expected %s", key, raw, caster.__name__)
        return config
