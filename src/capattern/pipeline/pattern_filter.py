"""Pattern filtering pipeline over a matrix of calcium traces.

This module contains the batch entry point: it builds the shared pattern
template once, then filters every cell independently, locally or through a
Dask client.
"""

from typing import Any, Iterable, List, Optional, Tuple, Union

import numpy as np
import pandas as pd
from line_profiler import profile
from tqdm.auto import tqdm

from capattern.core.detect import EventDetector, PanTompkinsDetector
from capattern.core.template import build_pattern_template
from capattern.core.types import FilterResult, PatternTemplate
from capattern.errors import ConfigurationError
from capattern.filtering import as_signal, filter_with_template
from capattern.utils.logging_config import get_module_logger

from .config import FilterPipelineConfig
from .metrics import make_metric_df

logger = get_module_logger("pipeline")


def resolve_consider_peak(
    very_noisy: Optional[Iterable], ncell: int
) -> np.ndarray:
    """Turn a very-noisy indicator into per-cell ``consider_peak`` flags.

    Parameters
    ----------
    very_noisy : boolean mask, iterable of row indices, or None
        Cells whose raw amplitude is too unreliable for peak gating.
    ncell : int
        Number of cells

    Returns
    -------
    np.ndarray
        Boolean array of shape (ncell,), False for very noisy cells.
    """
    noisy = np.zeros(ncell, dtype=bool)
    if very_noisy is None:
        return ~noisy
    flags = np.asarray(list(very_noisy))
    if flags.size == 0:
        return ~noisy
    if flags.dtype == bool:
        if flags.shape != (ncell,):
            raise ConfigurationError(
                f"very_noisy mask has shape {flags.shape}, expected ({ncell},)"
            )
        return ~flags
    if not np.issubdtype(flags.dtype, np.integer):
        raise ConfigurationError("very_noisy must be a boolean mask or row indices")
    if flags.min() < 0 or flags.max() >= ncell:
        raise ConfigurationError(f"very_noisy indices out of range for {ncell} cells")
    noisy[flags] = True
    return ~noisy


@profile
def filter_calcium_signals(
    Y: np.ndarray,
    ref_signal: Optional[np.ndarray] = None,
    *,
    config: Optional[FilterPipelineConfig] = None,
    very_noisy: Optional[Iterable] = None,
    detector: Optional[EventDetector] = None,
    da_client: Any = None,
    return_details: bool = False,
) -> Union[
    Tuple[np.ndarray, pd.DataFrame],
    Tuple[np.ndarray, pd.DataFrame, List[FilterResult], PatternTemplate],
]:
    """Filter every cell of a recording against a shared reference pattern.

    Parameters
    ----------
    Y : np.ndarray
        Calcium traces, shape (ncell, T)
    ref_signal : np.ndarray, optional
        Reference trace. Defaults to ``Y[config.template.ref_index]``.
    config : FilterPipelineConfig, optional
        Pipeline configuration. Defaults to ``FilterPipelineConfig()``.
    very_noisy : boolean mask or iterable of row indices, optional
        Cells filtered with the strict correlation-only policy.
    detector : EventDetector, optional
        Event detector. Defaults to a PanTompkinsDetector built from
        ``config.detector``.
    da_client : Client or None
        Dask client for distributed execution. None for local execution.
    return_details : bool
        Whether to also return per-cell results and the template

    Returns
    -------
    filtered : np.ndarray
        Filtered traces, shape (ncell, T)
    metric_df : pd.DataFrame
        Per-cell metrics
    results : list of FilterResult (only if return_details=True)
        Per-cell intermediate products
    template : PatternTemplate (only if return_details=True)
        Template shared by all cells
    """
    if config is None:
        config = FilterPipelineConfig()
    Y = np.asarray(Y, dtype=float)
    if Y.ndim != 2:
        raise ConfigurationError(f"Y must be 2-D (ncell, T), got shape {Y.shape}")
    ncell, T = Y.shape
    if ref_signal is None:
        if config.template.ref_index >= ncell:
            raise ConfigurationError(
                f"ref_index {config.template.ref_index} out of range for {ncell} cells"
            )
        ref_signal = Y[config.template.ref_index]
    ref_signal = as_signal(ref_signal, "ref_signal")
    consider_peak = resolve_consider_peak(very_noisy, ncell)
    if detector is None:
        detector = PanTompkinsDetector(config.detector)

    logger.info("Starting pattern filtering pipeline")
    logger.debug(
        f"Pipeline parameters: fs={config.fs}, "
        f"pattern_len={config.template.pattern_len}, "
        f"corr_threshold={config.mask.corr_threshold}, "
        f"corr_window_size={config.mask.corr_window_size}, "
        f"peak_window_size={config.mask.peak_window_size}, "
        f"{ncell} cells with {T} timepoints, "
        f"{int((~consider_peak).sum())} very noisy"
    )

    # 1. Template, complete before any cell is filtered
    template = build_pattern_template(
        ref_signal,
        detector,
        fs=config.fs,
        pattern_len=config.template.pattern_len,
        out_of_range=config.template.out_of_range,
    )

    # 2. Per-cell filtering
    mask_cfg = config.mask
    kwargs = dict(
        corr_window_size=mask_cfg.corr_window_size,
        peak_window_size=mask_cfg.peak_window_size,
        corr_threshold=mask_cfg.corr_threshold,
        fs=config.fs,
    )
    res = []
    for icell, y in tqdm(enumerate(Y), total=ncell, desc="filter", leave=False):
        if da_client is not None:
            r = da_client.submit(
                filter_with_template,
                y,
                template,
                detector,
                consider_peak=bool(consider_peak[icell]),
                **kwargs,
            )
        else:
            r = filter_with_template(
                y, template, detector, consider_peak=bool(consider_peak[icell]), **kwargs
            )
        res.append(r)
    if da_client is not None:
        logger.debug("Gathering results from Dask client")
        res = da_client.gather(res)

    # 3. Collect
    filtered = np.empty((ncell, T))
    for icell, r in enumerate(res):
        filtered[icell, :] = r.filtered
    metric_df = make_metric_df(res)
    logger.info(
        f"Pipeline completed: kept {metric_df['kept_frac'].mean():.1%} of samples on average"
    )

    if return_details:
        return filtered, metric_df, list(res), template
    return filtered, metric_df
