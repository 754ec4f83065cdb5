"""
Synthetic calcium imaging traces.

Generates Markovian spike trains, convolves them with a bi-exponential
calcium kernel and adds Gaussian noise, producing recordings with a known
event shape for exercising the pattern filter.
"""

from typing import Optional, Sequence, Tuple

import numpy as np
from numpy.random import Generator
from numpy.typing import NDArray


def markov_fire(frame: int, P: NDArray, rng: Optional[Generator] = None) -> NDArray:
    """
    Generate a binary spike train using a 2-state Markov chain.

    Parameters
    ----------
    frame : int
        Number of time frames to simulate.
    P : NDArray
        Markov transition matrix of shape (2, 2). P[0, 1] controls the
        probability of starting a spike from quiescence, and P[1, 1]
        controls burst continuation probability.
    rng : Generator, optional
        NumPy random generator for reproducibility.

    Returns
    -------
    NDArray
        Binary spike train of shape (frame,) with dtype int.
    """
    if rng is None:
        rng = np.random.default_rng()
    P = np.asarray(P, dtype=float)
    assert P.shape == (2, 2)
    assert np.allclose(P.sum(axis=1), 1)
    S = np.zeros(frame, dtype=int)
    u = rng.random(frame)
    for i in range(1, frame):
        S[i] = int(u[i] < P[S[i - 1], 1])
    return S


def exp_kernel(tau_d: float, tau_r: float, trunc_thres: float = 1e-6) -> NDArray:
    """
    Bi-exponential calcium kernel normalized to unit peak.

    Parameters
    ----------
    tau_d : float
        Decay time constant in frames.
    tau_r : float
        Rise time constant in frames.
    trunc_thres : float, default=1e-6
        Truncate the kernel once it falls below this fraction of its peak.

    Returns
    -------
    NDArray
        Kernel starting at zero lag.
    """
    assert tau_d > tau_r > 0, "decay must be slower than rise"
    t = np.arange(int(np.ceil(tau_d * 20)) + 1)
    v = np.exp(-t / tau_d) - np.exp(-t / tau_r)
    v = v / v.max()
    return v[: np.where(v > trunc_thres)[0].max() + 1]


def exp_trace(
    frame: int,
    P: NDArray,
    tau_d: float,
    tau_r: float,
    rng: Optional[Generator] = None,
) -> Tuple[NDArray, NDArray]:
    """
    Generate a calcium trace with Markovian spike train using bi-exponential kernel.

    Parameters
    ----------
    frame : int
        Number of time frames to simulate.
    P : NDArray
        Markov transition matrix of shape (2, 2).
    tau_d : float
        Decay time constant in frames.
    tau_r : float
        Rise time constant in frames.
    rng : Generator, optional
        NumPy random generator for reproducibility.

    Returns
    -------
    C : NDArray
        Calcium trace of shape (frame,).
    S : NDArray
        Binary spike train of shape (frame,).
    """
    S = markov_fire(frame, P, rng=rng).astype(float)
    C = np.convolve(exp_kernel(tau_d, tau_r), S, mode="full")[:frame]
    return C, S


def simulate_traces(
    ncell: int,
    frame: int,
    P: Optional[NDArray] = None,
    tau_d: float = 60,
    tau_r: float = 10,
    ns_lev: Sequence[float] = (0.02,),
    noisy_thres: float = 0.2,
    rng: Optional[Generator] = None,
) -> Tuple[NDArray, NDArray, NDArray, NDArray]:
    """
    Simulate a recording of several cells sharing one transient shape.

    Parameters
    ----------
    ncell : int
        Number of cells.
    frame : int
        Number of time frames per cell.
    P : NDArray, optional
        Markov transition matrix. Defaults to sparse, isolated firing.
    tau_d, tau_r : float
        Kernel time constants in frames.
    ns_lev : sequence of float
        Noise standard deviation per cell, cycled if shorter than ``ncell``.
    noisy_thres : float
        Cells with noise level at or above this are flagged very noisy.
    rng : Generator, optional
        NumPy random generator for reproducibility.

    Returns
    -------
    Y : NDArray
        Noisy traces, shape (ncell, frame).
    C : NDArray
        Noise-free calcium traces, shape (ncell, frame).
    S : NDArray
        Spike trains, shape (ncell, frame).
    very_noisy : NDArray
        Boolean flags, shape (ncell,).
    """
    if rng is None:
        rng = np.random.default_rng()
    if P is None:
        P = np.array([[0.998, 0.002], [1.0, 0.0]])
    lev = np.resize(np.asarray(ns_lev, dtype=float), ncell)
    C, S = zip(*[exp_trace(frame, P, tau_d, tau_r, rng=rng) for _ in range(ncell)])
    C, S = np.stack(C, axis=0), np.stack(S, axis=0)
    Y = C + rng.normal(0, 1, C.shape) * lev[:, None]
    return Y, C, S, lev >= noisy_thres
