"""
denoise.py
==========

High‑level orchestration of wavelet‑domain denoising.

1. Estimate the noise level σ̂ (unless `sigma` is given).
2. Resolve the strategy to a kernel and the threshold ``σ̂ · t``.
3. Direct mode: forward transform → threshold → inverse transform.
   Translation‑invariant (TI) mode ("cycle spinning"): repeat step 3 for
   every circular shift of the shift lattice, shift each reconstruction
   back, and average.

Public API
----------
denoise(signal, cfg=None, *, cancel=None, **overrides) -> np.ndarray

`DenoiseConfig` holds every tunable parameter.  The defaults reproduce the
classic VisuShrink recipe (hard threshold, ``t = sqrt(2 ln n)``, sym5), so
``denoise(x)`` works without a config.

Concurrency
-----------
With ``n_jobs > 1`` the TI shifts are split into contiguous chunks, each
chunk summed into its own buffer on a worker thread, and the partial sums
added in chunk order.  For a fixed ``n_jobs`` the summation order, and so
the result, is reproducible.
"""

from __future__ import annotations

import logging
import os
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field, replace
from typing import Optional, Sequence, Tuple, Union

import numpy as np

from errors import DenoiseCancelled, UnsupportedConfigurationError
from io_utils import timer
from noise import estimate_noise
from shifts import DEFAULT_NSPIN, lattice_size, normalize_nspin, shift_vector
from strategy import DenoisingStrategy, visu_shrink
from thresholding import Kernel
from wavelet import DEFAULT_WAVELET, PeriodicWavelet, Transform

__all__ = ["DenoiseConfig", "denoise", "default_level"]

logger = logging.getLogger("denoise")
logger.setLevel(logging.INFO)


# --------------------------------------------------------------------------- #
# Config
# --------------------------------------------------------------------------- #
@dataclass(slots=True)
class DenoiseConfig:
    # None → threshold the raw signal directly (no TI possible)
    transform: Optional[Transform] = field(
        default_factory=lambda: PeriodicWavelet(DEFAULT_WAVELET)
    )
    # coarsest scale kept untouched, counted on the shortest axis m;
    # None → max(max_scales(m) - 6, 1)
    level: Optional[int] = None
    # None → VisuShrink for n = signal.shape[0]
    strategy: Optional[DenoisingStrategy] = None
    # None → estimate_noise(signal, transform)
    sigma: Optional[float] = None

    translation_invariant: bool = False
    # None → DEFAULT_NSPIN shifts along every axis
    nspin: Optional[Union[int, Sequence[int]]] = None
    # worker threads for the TI loop; None or -1 → os.cpu_count()
    n_jobs: Optional[int] = 1

    dtype: type = np.float64


def default_level(transform: Transform, n: int) -> int:
    return max(transform.max_scales(n) - 6, 1)


# --------------------------------------------------------------------------- #
# Helpers
# --------------------------------------------------------------------------- #
def _resolve_jobs(n_jobs: Optional[int]) -> int:
    if n_jobs is None or n_jobs == -1:
        return os.cpu_count() or 1
    if n_jobs < 1:
        raise ValueError(f"n_jobs must be >= 1 or -1, got {n_jobs}")
    return n_jobs


def _spin_sum(
    x: np.ndarray,
    indices: Sequence[int],
    nspin: Tuple[int, ...],
    transform: Transform,
    levels: int,
    kernel: Kernel,
    thr: float,
    cancel: Optional[threading.Event],
) -> np.ndarray:
    """Sum of the shift‑denoise‑unshift reconstructions for *indices*."""
    acc = np.zeros_like(x)
    axes = tuple(range(len(nspin)))
    for i in indices:
        if cancel is not None and cancel.is_set():
            raise DenoiseCancelled(f"cancelled before shift {i}")
        shift = shift_vector(nspin, int(i))
        z = transform.forward(np.roll(x, shift, axis=axes), levels)
        kernel.apply_inplace(z, thr)
        z = transform.inverse(z, levels)
        acc += np.roll(z, tuple(-s for s in shift), axis=axes)
    return acc


def _denoise_ti(
    x: np.ndarray,
    nspin: Tuple[int, ...],
    transform: Transform,
    levels: int,
    kernel: Kernel,
    thr: float,
    n_jobs: int,
    cancel: Optional[threading.Event],
) -> np.ndarray:
    n_shifts = lattice_size(nspin)
    workers = min(n_jobs, n_shifts)
    logger.info(f"TI denoise: {n_shifts} shifts {nspin}, {workers} worker(s)")

    if workers == 1:
        acc = _spin_sum(x, range(n_shifts), nspin, transform, levels, kernel, thr, cancel)
    else:
        chunks = np.array_split(np.arange(n_shifts), workers)
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = [
                pool.submit(_spin_sum, x, chunk, nspin, transform, levels, kernel, thr, cancel)
                for chunk in chunks
            ]
            partials = [f.result() for f in futures]
        acc = np.zeros_like(x)
        for part in partials:
            acc += part

    acc /= n_shifts
    return acc


# --------------------------------------------------------------------------- #
# Main entry point
# --------------------------------------------------------------------------- #
@timer
def denoise(
    signal: np.ndarray,
    cfg: Optional[DenoiseConfig] = None,
    *,
    cancel: Optional[threading.Event] = None,
    **overrides,
) -> np.ndarray:
    """
    Denoise *signal* by thresholding in the transform domain.

    Parameters
    ----------
    signal : array_like
        1‑D or N‑D real signal.  Never modified.
    cfg : DenoiseConfig or None
        Parameters; defaults to ``DenoiseConfig()``.
    cancel : threading.Event or None
        Checked before every TI shift; when set, `DenoiseCancelled` is
        raised.
    **overrides
        Field overrides applied on top of *cfg*, e.g. ``sigma=0.1``.

    Returns
    -------
    np.ndarray
        Denoised signal, same shape as *signal*, dtype ``cfg.dtype``.

    Raises
    ------
    UnsupportedConfigurationError
        TI mode requested without a transform.
    InvalidThresholdError
        Negative ``sigma`` or strategy threshold.
    """
    cfg = cfg or DenoiseConfig()
    if overrides:
        cfg = replace(cfg, **overrides)

    x = np.array(signal, dtype=cfg.dtype, copy=True)
    if x.ndim == 0 or x.size == 0:
        raise ValueError("signal must be a non-empty array")
    transform = cfg.transform
    n = x.shape[0]

    # --- validate everything before the expensive part -----------------------
    if cfg.translation_invariant and transform is None:
        raise UnsupportedConfigurationError(
            "translation-invariant denoising needs a transform (got transform=None)"
        )

    levels = 0
    if transform is not None:
        # every axis is decomposed, so the shortest one bounds the depth
        m = min(x.shape)
        level = default_level(transform, m) if cfg.level is None else cfg.level
        levels = transform.max_scales(m) - level
        if levels < 0:
            raise ValueError(
                f"level {level} exceeds the {transform.max_scales(m)} scales of the shortest axis ({m})"
            )

    nspin: Tuple[int, ...] = ()
    n_jobs = 1
    if cfg.translation_invariant:
        nspin = normalize_nspin(
            cfg.nspin if cfg.nspin is not None else (DEFAULT_NSPIN,) * x.ndim, x.ndim
        )
        n_jobs = _resolve_jobs(cfg.n_jobs)

    strategy = cfg.strategy or visu_shrink(n)
    sigma = estimate_noise(x, transform) if cfg.sigma is None else cfg.sigma
    thr = strategy.threshold(sigma)
    logger.info(
        f"denoise: kernel={strategy.kernel.value} t={strategy.t:.4g} "
        f"sigma={sigma:.4g} threshold={thr:.4g} levels={levels}"
    )

    # --- direct mode -----------------------------------------------------------
    if not cfg.translation_invariant:
        if transform is None:
            return strategy.kernel.apply_inplace(x, thr)
        y = transform.forward(x, levels)
        strategy.kernel.apply_inplace(y, thr)
        return transform.inverse(y, levels).astype(cfg.dtype, copy=False)

    # --- translation‑invariant mode -------------------------------------------
    y = _denoise_ti(x, nspin, transform, levels, strategy.kernel, thr, n_jobs, cancel)
    return y.astype(cfg.dtype, copy=False)
