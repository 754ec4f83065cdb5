"""Configuration for the default event detector."""

from typing import Tuple

from pydantic import BaseModel, Field, model_validator


class DetectorConfig(BaseModel):
    """Configuration for PanTompkinsDetector.

    Durations are in seconds and converted to samples with the sampling rate
    passed at detection time.
    """

    model_config = {"frozen": True, "extra": "ignore"}

    band: Tuple[float, float] = Field(
        (5.0, 15.0), description="Band-pass edges in Hz (low, high)."
    )
    filter_order: int = Field(3, ge=1, description="Butterworth filter order.")
    integration_window: float = Field(
        0.150, gt=0, description="Moving-window integration length."
    )
    refractory: float = Field(
        0.200, gt=0, description="Minimum distance between candidate events."
    )
    search_window: float = Field(
        0.150,
        gt=0,
        description="Half width of the raw-signal search around each candidate.",
    )
    learning_period: float = Field(
        2.0, gt=0, description="Initial period used to seed signal/noise levels."
    )

    @model_validator(mode="after")
    def validate_band(self):
        low, high = self.band
        if not 0 < low < high:
            raise ValueError(f"Invalid band edges: {self.band}")
        return self
