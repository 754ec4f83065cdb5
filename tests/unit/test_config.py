import logging

import pytest
from pydantic import ValidationError

from capattern.core.config import DetectorConfig
from capattern.pipeline.config import FilterPipelineConfig, MaskConfig, TemplateConfig
from capattern.utils.logging_config import get_module_logger, set_log_level

pytestmark = pytest.mark.unit


def test_defaults_match_entry_point():
    cfg = FilterPipelineConfig()
    assert cfg.fs == 1000
    assert cfg.template.pattern_len == 50
    assert cfg.template.out_of_range == "raise"
    assert cfg.mask.corr_window_size == 40
    assert cfg.mask.peak_window_size == 10
    assert cfg.mask.corr_threshold == 0.8


def test_from_legacy_kwargs():
    cfg = FilterPipelineConfig.from_legacy_kwargs(
        corr_window_size=20, corr_threshold=0.5, fs=30, pattern_len=8, out_of_range="skip"
    )
    assert cfg.fs == 30
    assert cfg.mask == MaskConfig(corr_window_size=20, peak_window_size=10, corr_threshold=0.5)
    assert cfg.template == TemplateConfig(pattern_len=8, out_of_range="skip")


@pytest.mark.parametrize(
    "factory",
    [
        lambda: MaskConfig(corr_threshold=1.5),
        lambda: MaskConfig(corr_threshold=-1.01),
        lambda: MaskConfig(corr_window_size=0),
        lambda: MaskConfig(peak_window_size=-3),
        lambda: TemplateConfig(pattern_len=0),
        lambda: TemplateConfig(out_of_range="clip"),
        lambda: FilterPipelineConfig(fs=0),
        lambda: DetectorConfig(band=(15.0, 5.0)),
        lambda: DetectorConfig(integration_window=0),
    ],
)
def test_invalid_configs(factory):
    with pytest.raises(ValidationError):
        factory()


def test_configs_are_frozen():
    cfg = FilterPipelineConfig()
    with pytest.raises(ValidationError):
        cfg.fs = 30


def test_module_logger_namespace():
    logger = get_module_logger("template")
    assert logger.name == "capattern.template"
    set_log_level("debug")
    assert logger.getEffectiveLevel() == logging.DEBUG
    set_log_level(logging.WARNING)
    assert logger.getEffectiveLevel() == logging.WARNING
