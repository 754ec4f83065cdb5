"""Sliding Pearson correlation against a pattern template."""

from typing import Tuple

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view
from scipy.signal import argrelmax

from .constants import CORR_CHUNK_SIZE, DEGENERATE_CORR, NOISE_FLOOR


def sliding_pearson(
    signal: np.ndarray, template: np.ndarray, chunk_size: int = CORR_CHUNK_SIZE
) -> np.ndarray:
    """Pearson correlation of every full-length window with ``template``.

    Windows are scored in blocks of ``chunk_size`` so the working memory does
    not grow with the signal length.

    Parameters
    ----------
    signal : np.ndarray
        Target trace, shape (T,)
    template : np.ndarray
        Template waveform, shape (W,) with W odd
    chunk_size : int
        Number of windows scored per block

    Returns
    -------
    np.ndarray
        Correlation per window, shape (T - W + 1,). Windows (or a template)
        with zero range or non-finite samples get ``DEGENERATE_CORR``.
    """
    signal = np.asarray(signal, dtype=float)
    template = np.asarray(template, dtype=float)
    W = len(template)
    if len(signal) < W:
        return np.empty(0)
    wnds = sliding_window_view(signal, W)
    nwnd = wnds.shape[0]
    if not np.isfinite(template).all() or np.ptp(template) == 0:
        return np.full(nwnd, DEGENERATE_CORR)

    tc = template - template.mean()
    tss = (tc**2).sum()
    chunk_size = max(int(chunk_size), 1)
    r = np.empty(nwnd)
    for start in range(0, nwnd, chunk_size):
        blk = wnds[start : start + chunk_size]
        with np.errstate(invalid="ignore", divide="ignore"):
            degenerate = ~np.isfinite(blk).all(axis=1) | (np.ptp(blk, axis=1) == 0)
            wc = blk - blk.mean(axis=1, keepdims=True)
            rb = (wc @ tc) / np.sqrt((wc**2).sum(axis=1) * tss)
        rb = np.clip(rb, -1, 1)
        rb[degenerate | ~np.isfinite(rb)] = DEGENERATE_CORR
        r[start : start + len(rb)] = rb
    return r


def correlation_trace(
    signal: np.ndarray,
    template: np.ndarray,
    *,
    corr_threshold: float,
    amplitude_floor: float = NOISE_FLOOR,
) -> np.ndarray:
    """Thresholded correlation trace aligned with ``signal``.

    Position ``i`` holds the correlation of ``signal[i - L : i + L + 1]`` with
    the template, where ``L = len(template) // 2``. The first and last ``L``
    samples are held at zero. Values below ``corr_threshold`` are zeroed, as
    are values where the signal itself is below ``amplitude_floor``.

    Parameters
    ----------
    signal : np.ndarray
        Target trace, shape (T,)
    template : np.ndarray
        Template waveform, shape (2 * L + 1,)
    corr_threshold : float
        Minimum correlation kept
    amplitude_floor : float
        Absolute signal level below which correlation is discarded

    Returns
    -------
    np.ndarray
        Correlation trace, shape (T,), finite everywhere.
    """
    signal = np.asarray(signal, dtype=float)
    L = len(template) // 2
    corr = np.zeros(len(signal))
    r = sliding_pearson(signal, template)
    corr[L : L + len(r)] = r
    corr[corr < corr_threshold] = 0
    corr[signal < amplitude_floor] = 0
    return corr


def find_local_maxima(trace: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Locations and values of strict interior local maxima of ``trace``."""
    trace = np.asarray(trace, dtype=float)
    (locs,) = argrelmax(trace, order=1)
    return locs, trace[locs]


def correlation_peaks(trace: np.ndarray, pattern_len: int) -> Tuple[np.ndarray, np.ndarray]:
    """Local maxima of a correlation trace restricted to its valid range.

    Samples within ``pattern_len`` of either end carry no correlation score
    and never yield a maximum.
    """
    locs, vals = find_local_maxima(trace)
    valid = (locs >= pattern_len) & (locs <= len(trace) - 1 - pattern_len)
    return locs[valid], vals[valid]
