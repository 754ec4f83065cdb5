"""
capattern: pattern-matched filtering of calcium imaging traces.

Segments of each trace that resemble the averaged event waveform of a
reference cell are retained; everything else is attenuated toward zero.
"""

from .core import DetectorConfig, EventDetector, PanTompkinsDetector, PatternTemplate, PeakSet
from .errors import (
    ConfigurationError,
    DetectorContractError,
    InsufficientReferenceEvents,
    PatternFilterError,
    PeakOutOfRange,
)
from .filtering import filter_calcium_signal
from .pipeline import FilterPipelineConfig, filter_calcium_signals

__version__ = "0.1.0"

__all__ = [
    "filter_calcium_signal",
    "filter_calcium_signals",
    "FilterPipelineConfig",
    "DetectorConfig",
    "EventDetector",
    "PanTompkinsDetector",
    "PatternTemplate",
    "PeakSet",
    "PatternFilterError",
    "ConfigurationError",
    "InsufficientReferenceEvents",
    "PeakOutOfRange",
    "DetectorContractError",
]
