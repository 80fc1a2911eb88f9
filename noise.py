"""
noise.py – Robust σ estimation for additive Gaussian noise.

Donoho & Johnstone rule: the finest‑scale detail coefficients of a smooth
signal are dominated by noise, so

    σ̂ = MAD(finest details) / 0.6745

Public API
----------
mad(values)
    Median absolute deviation (unscaled).
estimate_noise(signal, transform=None)
    σ̂ from one forward level of *transform* (or the raw signal).
"""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np
from scipy.stats import median_abs_deviation

from io_utils import timer
from wavelet import Transform

__all__ = ["MAD_SCALE", "mad", "estimate_noise"]

logger = logging.getLogger("noise")
logger.setLevel(logging.INFO)

# MAD of a standard normal variable
MAD_SCALE = 0.6745


def mad(values: np.ndarray) -> float:
    """Median of ``|v - median(v)|`` over all entries of *values*."""
    return float(median_abs_deviation(values, axis=None, scale=1.0))


@timer
def estimate_noise(
    signal: np.ndarray,
    transform: Optional[Transform] = None,
) -> float:
    """
    Estimate the noise standard deviation of *signal*.

    Parameters
    ----------
    signal : array_like
        1‑D or N‑D real signal; never modified.
    transform : Transform or None
        If given, one forward level is applied and the finest detail band
        reported by ``transform.detail_range`` is used.  If None, the upper
        half of axis 0 of the raw signal is used instead.

    Returns
    -------
    float
        Non‑negative σ̂.
    """
    x = np.array(signal, dtype=np.float64, copy=True)
    if x.size == 0:
        raise ValueError("cannot estimate noise of an empty signal")

    n = x.shape[0]
    if transform is not None:
        coeffs = transform.forward(x, 1)
        finest = coeffs[transform.detail_range(transform.max_scales(n) - 1)]
    else:
        finest = x[n // 2 : n]

    sigma = mad(finest) / MAD_SCALE
    logger.debug(f"estimated sigma={sigma:.6g} from {finest.size} coefficients")
    return sigma
