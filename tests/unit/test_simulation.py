import numpy as np
import pytest

from capattern.simulation import exp_kernel, exp_trace, markov_fire, simulate_traces

pytestmark = pytest.mark.unit


def test_markov_fire_isolated_spikes(rng):
    P = np.array([[0.9, 0.1], [1.0, 0.0]])
    S = markov_fire(2000, P, rng=rng)
    assert set(np.unique(S)) <= {0, 1}
    assert S[0] == 0
    # a spike always returns to quiescence
    assert not (S[1:] & S[:-1]).any()


@pytest.mark.parametrize("taus", [(6, 1), (60, 10)])
def test_exp_kernel_unit_peak(taus):
    v = exp_kernel(*taus)
    assert v[0] == 0
    assert np.isclose(v.max(), 1)
    assert v[-1] > 1e-6


def test_exp_trace_shapes(rng):
    C, S = exp_trace(500, np.array([[0.98, 0.02], [1.0, 0.0]]), 20, 4, rng=rng)
    assert C.shape == S.shape == (500,)
    assert (C >= 0).all()


def test_simulate_traces_flags(rng):
    Y, C, S, very_noisy = simulate_traces(5, 300, ns_lev=[0.0, 0.5], rng=rng)
    assert Y.shape == C.shape == S.shape == (5, 300)
    assert very_noisy.tolist() == [False, True, False, True, False]
    assert np.array_equal(Y[0], C[0])
