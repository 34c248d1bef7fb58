"""Flat parameter layout of the EQ processor: ``band * 11 + offset``."""
from __future__ import annotations

from enum import IntEnum
from typing import Iterator, Tuple

from eqscope.config import MAX_BANDS
from eqscope.dsp.filters import Band

PARAMS_PER_BAND = 11


class ParamOffset(IntEnum):
    FREQ = 0
    GAIN = 1
    Q = 2
    ENABLED = 3
    SHAPE = 4
    DYN_ENABLED = 5
    DYN_THRESHOLD = 6
    DYN_RATIO = 7
    DYN_ATTACK = 8
    DYN_RELEASE = 9
    RESERVED = 10


# Processor-wide parameters live after the last band block.
OUTPUT_GAIN_INDEX = MAX_BANDS * PARAMS_PER_BAND
AUTO_GAIN_INDEX = OUTPUT_GAIN_INDEX + 1
# Engine slot of the soloed band, or -1 when nothing is soloed.
SOLO_BAND_INDEX = AUTO_GAIN_INDEX + 1
NO_SOLO = -1.0


def flat_index(band_index: int, offset: int) -> int:
    return band_index * PARAMS_PER_BAND + int(offset)


def band_parameters(band: Band) -> Iterator[Tuple[ParamOffset, float]]:
    """Every engine-facing value of ``band`` as (offset, value) pairs."""
    yield ParamOffset.FREQ, float(band.freq)
    yield ParamOffset.GAIN, float(band.gain)
    yield ParamOffset.Q, float(band.q)
    yield ParamOffset.ENABLED, 1.0 if band.enabled else 0.0
    yield ParamOffset.SHAPE, float(int(band.shape))
    yield ParamOffset.DYN_ENABLED, 1.0 if band.dynamic_enabled else 0.0
    yield ParamOffset.DYN_THRESHOLD, float(band.dynamic_threshold)
    yield ParamOffset.DYN_RATIO, float(band.dynamic_ratio)
    yield ParamOffset.DYN_ATTACK, float(band.dynamic_attack)
    yield ParamOffset.DYN_RELEASE, float(band.dynamic_release)
