"""Filter a single calcium trace by similarity to a reference event pattern.

This is the per-signal entry point: it builds (or reuses) the pattern
template, scores the target signal against it, and masks the target.
"""

from typing import Literal, Optional, Union

import numpy as np

from .core.correlation import correlation_peaks, correlation_trace
from .core.detect import EventDetector, PanTompkinsDetector, detect_events
from .core.mask import apply_mask, build_retention_mask, peak_threshold
from .core.template import build_pattern_template
from .core.types import FilterResult, PatternTemplate
from .errors import ConfigurationError
from .utils.logging_config import get_module_logger

logger = get_module_logger("filtering")


def validate_params(
    *,
    corr_window_size: int,
    peak_window_size: int,
    corr_threshold: float,
    fs: float,
    pattern_len: int,
) -> None:
    """Raise ConfigurationError on parameters outside their valid range."""
    for name, val in [
        ("corr_window_size", corr_window_size),
        ("peak_window_size", peak_window_size),
        ("pattern_len", pattern_len),
    ]:
        if not np.isfinite(val) or int(val) != val or val < 1:
            raise ConfigurationError(f"{name} must be a positive integer, got {val}")
    if not -1 <= corr_threshold <= 1:
        raise ConfigurationError(f"corr_threshold must lie in [-1, 1], got {corr_threshold}")
    if not fs > 0:
        raise ConfigurationError(f"fs must be positive, got {fs}")


def as_signal(a, name: str = "signal") -> np.ndarray:
    """Convert input to a 1-D float array."""
    a = np.asarray(a, dtype=float)
    if a.ndim != 1:
        raise ConfigurationError(f"{name} must be 1-D, got shape {a.shape}")
    return a


def filter_with_template(
    signal: np.ndarray,
    template: PatternTemplate,
    detector: EventDetector,
    *,
    consider_peak: bool,
    corr_window_size: int,
    peak_window_size: int,
    corr_threshold: float,
    fs: float,
) -> FilterResult:
    """Filter one target signal against an already built template.

    Parameters
    ----------
    signal : np.ndarray
        Target trace, shape (T,)
    template : PatternTemplate
        Shared read-only template
    detector : EventDetector
        Detector run on the target to obtain its peak threshold
    consider_peak : bool
        Masking policy (see :func:`build_retention_mask`)
    corr_window_size, peak_window_size : int
        Keep radii around correlation maxima and supra-threshold samples
    corr_threshold : float
        Minimum correlation kept
    fs : float
        Sampling rate forwarded to the detector

    Returns
    -------
    FilterResult
        Filtered signal and intermediate products.
    """
    peaks = detect_events(detector, signal, fs)
    thres = peak_threshold(peaks)
    if len(peaks) == 0:
        logger.warning("No events detected in target signal, peak gating disabled")

    corr = correlation_trace(signal, template.waveform, corr_threshold=corr_threshold)
    corr_locs, corr_vals = correlation_peaks(corr, template.pattern_len)

    mask = build_retention_mask(
        signal,
        corr_locs,
        corr_vals,
        threshold=thres,
        consider_peak=consider_peak,
        corr_window_size=corr_window_size,
        peak_window_size=peak_window_size,
    )
    logger.debug(
        f"events={len(peaks)}, peak_threshold={thres:.4f}, "
        f"corr_peaks={len(corr_locs)}, kept={int((mask == 1).sum())}/{len(mask)}"
    )
    return FilterResult(
        filtered=apply_mask(mask, signal),
        mask=mask,
        corr=corr,
        peaks=peaks,
        corr_locs=corr_locs,
        corr_vals=corr_vals,
        peak_threshold=thres,
        consider_peak=consider_peak,
    )


def filter_calcium_signal(
    signal: np.ndarray,
    ref_signal: Optional[np.ndarray],
    consider_peak: bool = True,
    corr_window_size: int = 40,
    peak_window_size: int = 10,
    corr_threshold: float = 0.8,
    fs: float = 1000,
    pattern_len: int = 50,
    *,
    detector: Optional[EventDetector] = None,
    template: Optional[PatternTemplate] = None,
    out_of_range: Literal["raise", "skip"] = "raise",
    return_details: bool = False,
) -> Union[np.ndarray, FilterResult]:
    """Filter a calcium trace, keeping only segments that match a reference pattern.

    Parameters
    ----------
    signal : np.ndarray
        Target trace, shape (T,)
    ref_signal : np.ndarray or None
        Reference trace used to build the template. May be None when
        ``template`` is given.
    consider_peak : bool
        Use the peak-aware policy (True) or the strict correlation-only policy
        for very noisy signals (False).
    corr_window_size : int
        Keep radius around correlation maxima.
    peak_window_size : int
        Keep radius around samples above the peak threshold.
    corr_threshold : float
        Minimum correlation with the template, in [-1, 1].
    fs : float
        Sampling rate, forwarded to the detector.
    pattern_len : int
        Half width of the template. Ignored when ``template`` is given.
    detector : EventDetector, optional
        Event detector. Defaults to :class:`PanTompkinsDetector`.
    template : PatternTemplate, optional
        Prebuilt template to reuse across calls.
    out_of_range : {"raise", "skip"}
        Policy for reference peaks too close to the signal edges.
    return_details : bool
        Return a :class:`FilterResult` instead of the filtered array.

    Returns
    -------
    np.ndarray or FilterResult
        Filtered trace of shape (T,), or the full result.
    """
    if template is not None:
        pattern_len = template.pattern_len
    validate_params(
        corr_window_size=corr_window_size,
        peak_window_size=peak_window_size,
        corr_threshold=corr_threshold,
        fs=fs,
        pattern_len=pattern_len,
    )
    pattern_len = int(pattern_len)
    signal = as_signal(signal)
    if detector is None:
        detector = PanTompkinsDetector()
    if template is None:
        if ref_signal is None:
            raise ConfigurationError("Either ref_signal or template must be given")
        template = build_pattern_template(
            as_signal(ref_signal, "ref_signal"),
            detector,
            fs=fs,
            pattern_len=pattern_len,
            out_of_range=out_of_range,
        )

    res = filter_with_template(
        signal,
        template,
        detector,
        consider_peak=bool(consider_peak),
        corr_window_size=int(corr_window_size),
        peak_window_size=int(peak_window_size),
        corr_threshold=corr_threshold,
        fs=fs,
    )
    return res if return_details else res.filtered
