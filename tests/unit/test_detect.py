import numpy as np
import pytest

from capattern.core.config import DetectorConfig
from capattern.core.detect import EventDetector, PanTompkinsDetector, as_peakset, detect_events
from capattern.core.types import PeakSet
from capattern.errors import DetectorContractError

from tests.conftest import FixedDetector, ThresholdDetector

pytestmark = pytest.mark.unit


def test_as_peakset_from_tuple():
    pks = as_peakset(([0.5, 0.7], [3.0, 8.0], 12), signal_len=10)
    assert pks.indices.dtype.kind == "i"
    assert pks.indices.tolist() == [3, 8]
    assert pks.amplitudes.tolist() == [0.5, 0.7]
    assert pks.delay == 12
    assert len(pks) == 2


def test_as_peakset_without_delay():
    pks = as_peakset(([0.5], [3]), signal_len=10)
    assert pks.delay == 0


def test_as_peakset_empty():
    pks = as_peakset(([], []), signal_len=10)
    assert len(pks) == 0


def test_as_peakset_passthrough():
    src = PeakSet(indices=np.array([1, 2]), amplitudes=np.array([1.0, 1.0]), delay=3)
    pks = as_peakset(src, signal_len=5)
    assert pks.indices.tolist() == [1, 2]
    assert pks.delay == 3


@pytest.mark.parametrize(
    "result",
    [
        ([1.0, 2.0], [3]),
        ([1.0, 2.0], [5, 3]),
        ([1.0, 2.0], [3, 3]),
        ([1.0], [10]),
        ([1.0], [-1]),
        ([1.0], [2.5]),
        "not a peak set",
    ],
)
def test_as_peakset_contract_violations(result):
    with pytest.raises(DetectorContractError):
        as_peakset(result, signal_len=10)


def test_detect_events_uses_protocol():
    det = ThresholdDetector(level=0.5)
    assert isinstance(det, EventDetector)
    assert isinstance(PanTompkinsDetector(), EventDetector)
    y = np.array([0, 1.0, 0, 0.2, 0, 0.8, 0])
    pks = detect_events(det, y, fs=1000)
    assert pks.indices.tolist() == [1, 5]
    assert det.calls == 1


def test_detect_events_tuple_detector():
    pks = detect_events(FixedDetector([2, 4]), np.arange(6.0), fs=1)
    assert pks.amplitudes.tolist() == [2.0, 4.0]


def gauss_train(T, centers, sigma):
    t = np.arange(T)
    return sum(np.exp(-((t - c) ** 2) / (2 * sigma**2)) for c in centers)


class TestPanTompkinsDetector:
    def test_finds_isolated_transients(self):
        centers = np.arange(1000, 10000, 1000)
        y = gauss_train(10000, centers, sigma=20)
        pks = PanTompkinsDetector().detect(y, fs=1000)
        assert len(pks) >= len(centers)
        for c in centers:
            assert np.abs(pks.indices - c).min() <= 3
        assert (np.diff(pks.indices) > 0).all()
        assert np.array_equal(pks.amplitudes, y[pks.indices])
        assert pks.delay == 75

    def test_flat_signal_has_no_events(self):
        pks = PanTompkinsDetector().detect(np.zeros(5000), fs=1000)
        assert len(pks) == 0

    def test_short_signal_has_no_events(self):
        pks = PanTompkinsDetector().detect(np.array([0.0, 1.0]), fs=1000)
        assert len(pks) == 0

    def test_band_above_nyquist(self):
        # at 20 Hz the 5-15 Hz band degenerates to a high-pass
        centers = np.arange(40, 400, 40)
        y = gauss_train(400, centers, sigma=2)
        det = PanTompkinsDetector(DetectorConfig(refractory=1.0, search_window=0.5))
        pks = det.detect(y, fs=20)
        assert len(pks) > 0
        assert np.array_equal(pks.amplitudes, y[pks.indices])

    def test_nan_samples_tolerated(self):
        y = gauss_train(5000, [1000, 2500, 4000], sigma=20)
        y[10] = np.nan
        pks = PanTompkinsDetector().detect(y, fs=1000)
        assert np.isfinite(pks.amplitudes).all()

    def test_kwargs_build_config(self):
        det = PanTompkinsDetector(refractory=0.5)
        assert det.config.refractory == 0.5
