"""Pydantic v2 configuration models for the pattern filtering pipeline.

These configs make the pipeline self-documenting and validated, and allow
config-file usage.
"""

from typing import Literal

from pydantic import BaseModel, Field

from capattern.core.config import DetectorConfig


class TemplateConfig(BaseModel):
    """Configuration for pattern template construction."""

    model_config = {"frozen": True}

    pattern_len: int = Field(
        50,
        ge=1,
        description="Half width of the template; the template has 2 * pattern_len + 1 samples.",
    )
    ref_index: int = Field(
        0,
        ge=0,
        description="Row of Y used as reference when no reference signal is passed.",
    )
    out_of_range: Literal["raise", "skip"] = Field(
        "raise",
        description="Whether reference peaks too close to the edges abort the run or are skipped.",
    )


class MaskConfig(BaseModel):
    """Configuration for correlation scoring and mask construction."""

    model_config = {"frozen": True}

    corr_window_size: int = Field(
        40,
        ge=1,
        description="Keep radius around correlation maxima.",
    )
    peak_window_size: int = Field(
        10,
        ge=1,
        description="Keep radius around samples above the peak threshold.",
    )
    corr_threshold: float = Field(
        0.8,
        ge=-1,
        le=1,
        description="Minimum correlation with the template.",
    )


class FilterPipelineConfig(BaseModel):
    """Main configuration for the pattern filtering pipeline.

    This is the top-level config that composes all sub-configs.
    """

    model_config = {"frozen": True}

    fs: float = Field(
        1000,
        gt=0,
        description="Sampling rate, forwarded to the event detector.",
    )

    # Sub-configs
    detector: DetectorConfig = Field(
        default_factory=DetectorConfig,
        description="Default event detector configuration.",
    )
    template: TemplateConfig = Field(
        default_factory=TemplateConfig,
        description="Template construction configuration.",
    )
    mask: MaskConfig = Field(
        default_factory=MaskConfig,
        description="Scoring and masking configuration.",
    )

    @classmethod
    def from_legacy_kwargs(
        cls,
        *,
        corr_window_size: int = 40,
        peak_window_size: int = 10,
        corr_threshold: float = 0.8,
        fs: float = 1000,
        pattern_len: int = 50,
        ref_index: int = 0,
        out_of_range: Literal["raise", "skip"] = "raise",
    ) -> "FilterPipelineConfig":
        """Create a config from the flat keyword arguments of filter_calcium_signal."""
        return cls(
            fs=fs,
            template=TemplateConfig(
                pattern_len=pattern_len,
                ref_index=ref_index,
                out_of_range=out_of_range,
            ),
            mask=MaskConfig(
                corr_window_size=corr_window_size,
                peak_window_size=peak_window_size,
                corr_threshold=corr_threshold,
            ),
        )
