"""Retention mask construction and application."""

import numpy as np
from scipy.ndimage import maximum_filter1d

from .constants import BASELINE_RETENTION
from .types import PeakSet


def peak_threshold(peaks: PeakSet) -> float:
    """Mean event amplitude, or ``inf`` when no events were detected."""
    if len(peaks) == 0:
        return np.inf
    return float(np.mean(peaks.amplitudes))


def dilate(seeds: np.ndarray, radius: int) -> np.ndarray:
    """Mark every sample within ``radius`` of a True seed, clamped to the array."""
    seeds = np.asarray(seeds, dtype=bool)
    if not seeds.any():
        return seeds.copy()
    return maximum_filter1d(
        seeds.astype(np.uint8), size=2 * radius + 1, mode="constant", cval=0
    ).astype(bool)


def build_retention_mask(
    signal: np.ndarray,
    corr_locs: np.ndarray,
    corr_vals: np.ndarray,
    *,
    threshold: float,
    consider_peak: bool,
    corr_window_size: int,
    peak_window_size: int,
    baseline: float = BASELINE_RETENTION,
) -> np.ndarray:
    """Combine amplitude events and correlation maxima into a retention mask.

    Parameters
    ----------
    signal : np.ndarray
        Target trace, shape (T,)
    corr_locs : np.ndarray
        Locations of correlation maxima
    corr_vals : np.ndarray
        Correlation values at ``corr_locs``
    threshold : float
        Peak threshold of the target signal (mean event amplitude)
    consider_peak : bool
        If True, keep windows around supra-threshold samples and around every
        correlation maximum, and floor the rest at ``baseline``. If False,
        keep only windows around correlation maxima whose value exceeds
        ``threshold`` and zero the rest.
    corr_window_size : int
        Keep radius around correlation maxima
    peak_window_size : int
        Keep radius around supra-threshold samples
    baseline : float
        Mask value outside keep windows when ``consider_peak`` is True

    Returns
    -------
    np.ndarray
        Mask of shape (T,) with values in {0, baseline, 1}.
    """
    signal = np.asarray(signal, dtype=float)
    corr_locs = np.asarray(corr_locs, dtype=int)
    corr_vals = np.asarray(corr_vals, dtype=float)
    T = len(signal)

    corr_seeds = np.zeros(T, dtype=bool)
    if consider_peak:
        corr_seeds[corr_locs] = True
        keep = dilate(signal > threshold, peak_window_size)
        keep |= dilate(corr_seeds, corr_window_size)
        return np.where(keep, 1.0, baseline)
    corr_seeds[corr_locs[corr_vals > threshold]] = True
    return dilate(corr_seeds, corr_window_size).astype(float)


def apply_mask(mask: np.ndarray, signal: np.ndarray) -> np.ndarray:
    """Elementwise product of a retention mask and its signal."""
    return np.asarray(mask, dtype=float) * np.asarray(signal, dtype=float)
