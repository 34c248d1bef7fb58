"""Parameter protocol shared with the external EQ processor."""
from .link import EngineLink, ParameterSink, ParameterSource
from .memory import InMemoryEngine
from .meters import MeterChannel, MeterSnapshot, MeterSource
from .params import (
    AUTO_GAIN_INDEX,
    NO_SOLO,
    OUTPUT_GAIN_INDEX,
    PARAMS_PER_BAND,
    SOLO_BAND_INDEX,
    ParamOffset,
    band_parameters,
    flat_index,
)

__all__ = [
    "AUTO_GAIN_INDEX",
    "EngineLink",
    "InMemoryEngine",
    "MeterChannel",
    "MeterSnapshot",
    "MeterSource",
    "NO_SOLO",
    "OUTPUT_GAIN_INDEX",
    "PARAMS_PER_BAND",
    "ParamOffset",
    "ParameterSink",
    "ParameterSource",
    "SOLO_BAND_INDEX",
    "band_parameters",
    "flat_index",
]
