"""Metrics construction for the pattern filtering pipeline.

Handles building the per-cell metrics DataFrame.
"""

from typing import List

import numpy as np
import pandas as pd

from capattern.core.types import FilterResult


def make_metric_df(results: List[FilterResult]) -> pd.DataFrame:
    """Summarize per-cell filtering results.

    Parameters
    ----------
    results : list of FilterResult
        One result per cell, in row order

    Returns
    -------
    pd.DataFrame
        One row per cell with columns ``cell``, ``consider_peak``,
        ``n_events``, ``peak_threshold``, ``n_corr_peaks``, ``n_kept`` and
        ``kept_frac``.
    """
    n_kept = np.array([r.n_kept for r in results], dtype=int)
    T = np.array([len(r.mask) for r in results], dtype=float)
    return pd.DataFrame(
        {
            "cell": np.arange(len(results)),
            "consider_peak": [r.consider_peak for r in results],
            "n_events": [len(r.peaks) for r in results],
            "peak_threshold": [r.peak_threshold for r in results],
            "n_corr_peaks": [len(r.corr_locs) for r in results],
            "n_kept": n_kept,
            "kept_frac": n_kept / np.where(T > 0, T, 1),
        },
        columns=[
            "cell",
            "consider_peak",
            "n_events",
            "peak_threshold",
            "n_corr_peaks",
            "n_kept",
            "kept_frac",
        ],
    )
