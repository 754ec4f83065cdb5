"""Pattern template construction from a reference signal."""

from typing import Literal

import numpy as np

from capattern.errors import ConfigurationError, InsufficientReferenceEvents, PeakOutOfRange
from capattern.utils.logging_config import get_module_logger

from .constants import DROP_FIRST_REFERENCE_PEAK
from .detect import EventDetector, detect_events
from .types import PatternTemplate

logger = get_module_logger("template")


def build_pattern_template(
    ref_signal: np.ndarray,
    detector: EventDetector,
    *,
    fs: float,
    pattern_len: int,
    out_of_range: Literal["raise", "skip"] = "raise",
) -> PatternTemplate:
    """Average the reference signal around its detected events.

    The detector's first reported peak is discarded. Every remaining peak
    contributes the window ``ref_signal[p - pattern_len : p + pattern_len + 1]``
    and the template is the elementwise mean of those windows.

    Parameters
    ----------
    ref_signal : np.ndarray
        Reference trace, shape (T,)
    detector : EventDetector
        Event detector run on the reference
    fs : float
        Sampling rate forwarded to the detector
    pattern_len : int
        Half width of the template
    out_of_range : {"raise", "skip"}
        What to do with peaks whose window leaves the signal.

    Returns
    -------
    PatternTemplate
        Template of length ``2 * pattern_len + 1``.

    Raises
    ------
    InsufficientReferenceEvents
        If no peaks are left after dropping the first one (and skipping).
    PeakOutOfRange
        If a peak window leaves the signal and ``out_of_range="raise"``, or
        the signal is shorter than one window.
    """
    if pattern_len < 1:
        raise ConfigurationError(f"pattern_len must be >= 1, got {pattern_len}")
    if out_of_range not in ("raise", "skip"):
        raise ConfigurationError(f"Unsupported out_of_range policy: {out_of_range}")
    ref_signal = np.asarray(ref_signal, dtype=float)
    T = len(ref_signal)
    if T < 2 * pattern_len + 1:
        raise PeakOutOfRange(index=T // 2, pattern_len=pattern_len, signal_len=T)

    peaks = detect_events(detector, ref_signal, fs)
    pk_idx = peaks.indices[DROP_FIRST_REFERENCE_PEAK:]
    if len(pk_idx) == 0:
        raise InsufficientReferenceEvents(n_detected=len(peaks))

    in_range = (pk_idx - pattern_len >= 0) & (pk_idx + pattern_len < T)
    if not in_range.all():
        bad = pk_idx[~in_range]
        if out_of_range == "raise":
            raise PeakOutOfRange(index=int(bad[0]), pattern_len=pattern_len, signal_len=T)
        logger.warning(
            f"Skipping {len(bad)} reference peaks too close to the signal edges: {bad.tolist()}"
        )
        pk_idx = pk_idx[in_range]
        if len(pk_idx) == 0:
            raise InsufficientReferenceEvents(n_detected=len(peaks))

    offsets = np.arange(-pattern_len, pattern_len + 1)
    pattern_matrix = ref_signal[pk_idx[:, None] + offsets[None, :]]
    waveform = pattern_matrix.mean(axis=0)
    logger.info(
        f"Built pattern template from {len(pk_idx)} of {len(peaks)} reference events"
    )
    return PatternTemplate(
        waveform=waveform,
        pattern_len=pattern_len,
        peak_indices=pk_idx,
        n_skipped=int((~in_range).sum()),
    )
