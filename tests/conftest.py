import numpy as np
import pytest
from scipy.signal import argrelmax

from capattern.core.types import PeakSet


class ThresholdDetector:
    """Deterministic detector: strict local maxima above a fixed level."""

    def __init__(self, level=0.5):
        self.level = level
        self.calls = 0

    def detect(self, signal, fs):
        self.calls += 1
        signal = np.asarray(signal, dtype=float)
        (idx,) = argrelmax(signal, order=1)
        idx = idx[signal[idx] > self.level]
        return PeakSet(indices=idx, amplitudes=signal[idx], delay=0)


class FixedDetector:
    """Detector reporting the same indices for every signal."""

    def __init__(self, indices):
        self.indices = np.asarray(indices, dtype=int)

    def detect(self, signal, fs):
        signal = np.asarray(signal, dtype=float)
        return signal[self.indices], self.indices, 0


class FakeFuture:
    def __init__(self, value):
        self.value = value

    def result(self):
        return self.value


class FakeClient:
    """Minimal stand-in for a dask.distributed Client."""

    def __init__(self):
        self.n_submitted = 0

    def submit(self, fn, *args, **kwargs):
        self.n_submitted += 1
        return FakeFuture(fn(*args, **kwargs))

    def gather(self, futures):
        return [f.result() for f in futures]


def fixt_bumps(T, centers, pattern_len, amps=1.0):
    """Trace of non-overlapping Hann bumps of width 2 * pattern_len + 1."""
    y = np.zeros(T)
    bump = np.hanning(2 * pattern_len + 1)
    amps = np.broadcast_to(np.asarray(amps, dtype=float), (len(centers),))
    for c, a in zip(centers, amps):
        y[c - pattern_len : c + pattern_len + 1] += a * bump
    return y


@pytest.fixture()
def pattern_len():
    return 10


@pytest.fixture()
def detector():
    return ThresholdDetector(level=0.5)


@pytest.fixture()
def ref_signal(pattern_len):
    # the bump at 30 stands in for the spurious first detection
    return fixt_bumps(400, [30, 100, 200, 300], pattern_len)


@pytest.fixture()
def rng():
    return np.random.default_rng(0)


@pytest.fixture()
def eq_atol():
    return 1e-9
