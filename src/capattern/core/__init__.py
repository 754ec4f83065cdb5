from .config import DetectorConfig
from .correlation import correlation_peaks, correlation_trace, find_local_maxima, sliding_pearson
from .detect import EventDetector, PanTompkinsDetector, as_peakset, detect_events
from .mask import apply_mask, build_retention_mask, peak_threshold
from .template import build_pattern_template
from .types import FilterResult, PatternTemplate, PeakSet

__all__ = [
    "DetectorConfig",
    "EventDetector",
    "PanTompkinsDetector",
    "as_peakset",
    "detect_events",
    "build_pattern_template",
    "sliding_pearson",
    "correlation_trace",
    "correlation_peaks",
    "find_local_maxima",
    "peak_threshold",
    "build_retention_mask",
    "apply_mask",
    "FilterResult",
    "PatternTemplate",
    "PeakSet",
]
