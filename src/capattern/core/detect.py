"""Transient event detection.

The filtering core only needs a detector that returns peak indices and
amplitudes. :class:`EventDetector` is that contract; :class:`PanTompkinsDetector`
is the default implementation, a QRS-style detector adapted from ECG analysis.
"""

from typing import Optional, Protocol, Tuple, Union, runtime_checkable

import numpy as np
from scipy.signal import butter, filtfilt, find_peaks

from capattern.errors import DetectorContractError
from capattern.utils.logging_config import get_module_logger

from .config import DetectorConfig
from .types import PeakSet

logger = get_module_logger("detect")


@runtime_checkable
class EventDetector(Protocol):
    """Anything that can locate transient events in a signal."""

    def detect(self, signal: np.ndarray, fs: float) -> Union[PeakSet, Tuple]:
        ...


def as_peakset(result: Union[PeakSet, Tuple], signal_len: int) -> PeakSet:
    """Normalize and validate raw detector output.

    Parameters
    ----------
    result : PeakSet or tuple
        Either a PeakSet or ``(amplitudes, indices[, delay])``.
    signal_len : int
        Length of the signal the detector ran on.

    Returns
    -------
    PeakSet
        Validated peak set with integer indices.

    Raises
    ------
    DetectorContractError
        If amplitudes and indices are misaligned, indices are out of bounds,
        or indices are not strictly increasing.
    """
    if isinstance(result, PeakSet):
        amps, idx, delay = result.amplitudes, result.indices, result.delay
    elif isinstance(result, (tuple, list)) and len(result) in (2, 3):
        amps, idx, *rest = result
        delay = rest[0] if rest else 0
    else:
        raise DetectorContractError(
            "Detector must return a PeakSet or (amplitudes, indices[, delay]), "
            f"got {type(result).__name__}"
        )
    amps = np.atleast_1d(np.asarray(amps, dtype=float)).ravel()
    idx = np.atleast_1d(np.asarray(idx)).ravel()
    if amps.shape != idx.shape:
        raise DetectorContractError(
            f"Detector returned {len(amps)} amplitudes for {len(idx)} indices"
        )
    if len(idx) == 0:
        return PeakSet.empty(delay=int(delay))
    if not np.all(np.equal(np.mod(idx, 1), 0)):
        raise DetectorContractError("Detector returned non-integer peak indices")
    idx = idx.astype(int)
    if idx.min() < 0 or idx.max() >= signal_len:
        raise DetectorContractError(
            f"Detector returned peak indices outside [0, {signal_len})"
        )
    if np.any(np.diff(idx) <= 0):
        raise DetectorContractError("Detector peak indices must be strictly increasing")
    return PeakSet(indices=idx, amplitudes=amps, delay=int(delay))


def detect_events(detector: EventDetector, signal: np.ndarray, fs: float) -> PeakSet:
    """Run a detector on a signal and return a validated PeakSet."""
    peaks = as_peakset(detector.detect(signal, fs), len(signal))
    logger.debug(f"Detected {len(peaks)} events in signal of length {len(signal)}")
    return peaks


class PanTompkinsDetector:
    """Pan-Tompkins style transient detector.

    The signal is band-passed, differentiated, squared and integrated over a
    moving window. Candidate events are local maxima of the integrated energy
    separated by a refractory distance; they are accepted against adaptive
    signal/noise levels seeded from a learning period. Each accepted event is
    placed at the raw-signal maximum around the candidate.

    Parameters
    ----------
    config : DetectorConfig, optional
        Detector parameters. Defaults to ``DetectorConfig()``.
    """

    def __init__(self, config: Optional[DetectorConfig] = None, **kwargs):
        if config is None:
            config = DetectorConfig(**kwargs)
        self.config = config

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.config!r})"

    def _bandpass(self, x: np.ndarray, fs: float) -> np.ndarray:
        nyq = fs / 2
        low, high = self.config.band
        if low >= nyq:
            logger.debug("Band entirely above Nyquist, skipping band-pass")
            return x - x.mean()
        if high >= nyq:
            b, a = butter(self.config.filter_order, low / nyq, btype="highpass")
        else:
            b, a = butter(self.config.filter_order, [low / nyq, high / nyq], btype="bandpass")
        padlen = min(3 * max(len(a), len(b)), len(x) - 1)
        return filtfilt(b, a, x, padlen=padlen)

    def integrate(self, x: np.ndarray, fs: float) -> np.ndarray:
        """Return the moving-window integrated energy of ``x``."""
        x_bp = self._bandpass(x, fs)
        energy = np.gradient(x_bp) ** 2
        wnd = max(int(round(self.config.integration_window * fs)), 1)
        return np.convolve(energy, np.ones(wnd) / wnd, mode="same")

    def detect(self, signal: np.ndarray, fs: float) -> PeakSet:
        cfg = self.config
        x = np.nan_to_num(np.asarray(signal, dtype=float), nan=0.0, posinf=0.0, neginf=0.0)
        n = len(x)
        delay = int(round(cfg.integration_window * fs)) // 2
        if n < 3 or np.ptp(x) == 0:
            return PeakSet.empty(delay=delay)

        integ = self.integrate(x, fs)
        dist = max(int(round(cfg.refractory * fs)), 1)
        locs, _ = find_peaks(integ, distance=dist)
        if len(locs) == 0:
            return PeakSet.empty(delay=delay)

        # seed adaptive levels from the learning period
        learn = integ[: max(int(round(cfg.learning_period * fs)), 1)]
        spk = learn.max() / 3
        npk = learn.mean() / 2
        thr = npk + 0.25 * (spk - npk)

        swnd = max(int(round(cfg.search_window * fs)), 1)
        accepted = []
        for loc in locs:
            pk = integ[loc]
            if pk >= thr:
                lo, hi = max(loc - swnd, 0), min(loc + swnd + 1, n)
                accepted.append(lo + int(np.argmax(x[lo:hi])))
                spk = 0.125 * pk + 0.875 * spk
            else:
                npk = 0.125 * pk + 0.875 * npk
            thr = npk + 0.25 * (spk - npk)

        idx = np.unique(np.array(accepted, dtype=int))
        return PeakSet(indices=idx, amplitudes=x[idx], delay=delay)
