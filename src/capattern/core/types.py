"""Shared type definitions for the pattern filtering core.

These types define the data passed between the filtering steps, making the
data flow explicit and typed.
"""

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class PeakSet:
    """Detected events of one signal.

    Attributes:
        indices: Sample index of each peak, strictly increasing, shape (npeak,)
        amplitudes: Peak amplitudes, index-aligned with ``indices``
        delay: Processing delay reported by the detector (samples). Unused
            by the filtering core.
    """

    indices: np.ndarray
    amplitudes: np.ndarray
    delay: int = 0

    def __len__(self) -> int:
        return len(self.indices)

    @classmethod
    def empty(cls, delay: int = 0) -> "PeakSet":
        """Create a PeakSet with no peaks."""
        return cls(
            indices=np.empty(0, dtype=int),
            amplitudes=np.empty(0, dtype=float),
            delay=delay,
        )


@dataclass(frozen=True)
class PatternTemplate:
    """Averaged event waveform extracted from a reference signal.

    Attributes:
        waveform: Mean event shape, shape (2 * pattern_len + 1,). Read-only.
        pattern_len: Half width of the waveform
        peak_indices: Reference peaks that were averaged
        n_skipped: Reference peaks dropped for reading outside the signal
    """

    waveform: np.ndarray
    pattern_len: int
    peak_indices: np.ndarray
    n_skipped: int = 0

    def __post_init__(self):
        waveform = np.array(self.waveform, dtype=float)
        waveform.setflags(write=False)
        object.__setattr__(self, "waveform", waveform)

    def __len__(self) -> int:
        return len(self.waveform)

    @property
    def n_events(self) -> int:
        return len(self.peak_indices)


@dataclass
class FilterResult:
    """Result of filtering one target signal.

    Attributes:
        filtered: Filtered signal, shape (T,)
        mask: Retention mask, shape (T,)
        corr: Thresholded correlation trace, shape (T,)
        peaks: Events detected on the target signal
        corr_locs: Locations of correlation maxima used for masking
        corr_vals: Correlation values at ``corr_locs``
        peak_threshold: Mean event amplitude (inf when no events)
        consider_peak: Which masking policy was applied
    """

    filtered: np.ndarray
    mask: np.ndarray
    corr: np.ndarray
    peaks: PeakSet
    corr_locs: np.ndarray
    corr_vals: np.ndarray
    peak_threshold: float
    consider_peak: bool = True

    @property
    def n_kept(self) -> int:
        return int((self.mask == 1).sum())
