"""Pattern filtering pipeline.

This package filters every cell of a calcium imaging recording against a
pattern template learned from a reference cell.

Usage::

    from capattern.pipeline import filter_calcium_signals, FilterPipelineConfig, MaskConfig

    config = FilterPipelineConfig(fs=30, mask=MaskConfig(corr_threshold=0.7))
    filtered, metrics = filter_calcium_signals(Y, config=config, very_noisy=[3, 7])

"""

from .config import FilterPipelineConfig, MaskConfig, TemplateConfig
from .metrics import make_metric_df
from .pattern_filter import filter_calcium_signals, resolve_consider_peak

__all__ = [
    # Main entry point
    "filter_calcium_signals",
    "resolve_consider_peak",
    "make_metric_df",
    # Configuration classes
    "FilterPipelineConfig",
    "TemplateConfig",
    "MaskConfig",
]
