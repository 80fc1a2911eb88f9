"""
thresholding.py – Coefficient shrinkage kernels for wavelet‑domain denoising.

This module is totally *stateless*; every kernel works on a plain numpy array
and a scalar parameter.

Each kernel comes in two flavours:

* ``<name>_inplace(x, ...)`` mutates *x* and returns it (for chaining).
* ``<name>(x, ...)`` leaves *x* untouched and returns a new float array.

The copy flavour is always ``apply_copy(<name>_inplace, x, ...)``.

Public API
----------
threshold_hard / threshold_soft / threshold_semisoft / threshold_stein
    Kernels with a threshold parameter ``t >= 0``.
biggest_terms
    Best m‑term approximation (keep the ``m`` largest magnitudes).
clip_negative / clip_positive
    Parameter‑free one‑sided clipping.
Kernel
    Enum selector over all of the above (replaces string look‑ups).
"""

from __future__ import annotations

import logging
import operator
from enum import Enum
from typing import Callable, Optional

import numpy as np

from errors import InvalidSparsityError, InvalidThresholdError, UnknownKernelError

__all__ = [
    "OUT_DTYPE",
    "apply_copy",
    "threshold_hard_inplace",
    "threshold_hard",
    "threshold_soft_inplace",
    "threshold_soft",
    "threshold_semisoft_inplace",
    "threshold_semisoft",
    "threshold_stein_inplace",
    "threshold_stein",
    "biggest_terms_inplace",
    "biggest_terms",
    "clip_negative_inplace",
    "clip_negative",
    "clip_positive_inplace",
    "clip_positive",
    "Kernel",
]

logger = logging.getLogger("thresholding")
logger.setLevel(logging.INFO)

# dtype of arrays returned by the copy flavour
OUT_DTYPE = np.float64


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _check_threshold(t: float) -> None:
    # `not t >= 0` also rejects NaN
    if not t >= 0:
        raise InvalidThresholdError(f"threshold must be non-negative, got {t!r}")


def apply_copy(
    kernel_inplace: Callable[..., np.ndarray],
    x: np.ndarray,
    *args,
    dtype=OUT_DTYPE,
) -> np.ndarray:
    """
    Run an in‑place kernel on a fresh copy of *x*.

    Parameters
    ----------
    kernel_inplace : callable
        One of the ``*_inplace`` kernels of this module.
    x : array_like
        Input array; never modified.
    *args
        Kernel parameter(s), e.g. the threshold ``t`` or the term count ``m``.
    dtype : numpy dtype, default float64
        dtype of the returned array.

    Returns
    -------
    np.ndarray
        New array of the same shape as *x*.
    """
    y = np.array(x, dtype=dtype, copy=True)
    return kernel_inplace(y, *args)


# ---------------------------------------------------------------------------
# Kernels with a threshold t
# ---------------------------------------------------------------------------


def threshold_hard_inplace(x: np.ndarray, t: float) -> np.ndarray:
    """Zero every entry with ``|x| <= t``; keep the rest unchanged."""
    _check_threshold(t)
    x[np.abs(x) <= t] = 0
    return x


def threshold_soft_inplace(x: np.ndarray, t: float) -> np.ndarray:
    """Shrink magnitudes by *t*: ``sign(x) * max(|x| - t, 0)``."""
    _check_threshold(t)
    x[...] = np.sign(x) * np.maximum(np.abs(x) - t, 0)
    return x


def threshold_semisoft_inplace(x: np.ndarray, t: float) -> np.ndarray:
    """
    Semisoft (firm) shrinkage, between hard and soft.

    ``0`` for ``|x| < t``, ``2 * sign(x) * (|x| - t)`` for ``t <= |x| < 2t``,
    and ``x`` above.

    Notes
    -----
    The outer branch tests the *signed* value ``x <= 2t`` rather than
    ``|x| <= 2t``.  Negative entries with ``|x| >= 2t`` pass the outer test but
    fall through the inner one, so they stay unchanged exactly like their
    positive mirror images; the comparison is kept as is.
    """
    _check_threshold(t)
    sh = np.abs(x) - t
    inner = x <= 2 * t
    zero = inner & (sh < 0)
    ramp = inner & ~zero & (sh - t < 0)
    x[ramp] = np.sign(x[ramp]) * sh[ramp] * 2
    x[zero] = 0
    return x


def threshold_stein_inplace(x: np.ndarray, t: float) -> np.ndarray:
    """
    Stein (non‑negative garrote) shrinkage: ``x * max(1 - t²/x², 0)``.

    Entries equal to zero are mapped to zero for every ``t >= 0``, including
    ``t = 0`` where the formula itself is 0/0.
    """
    _check_threshold(t)
    nonzero = x != 0
    n_singular = x.size - int(np.count_nonzero(nonzero))
    if n_singular:
        logger.debug(f"stein: {n_singular} zero coefficient(s) mapped to 0")
    v = x[nonzero]
    # t/v overflows to inf for subnormal v; that still shrinks to 0
    with np.errstate(over="ignore"):
        x[nonzero] = v * np.maximum(1 - (t / v) ** 2, 0)
    x[~nonzero] = 0
    return x


# ---------------------------------------------------------------------------
# Kernel with a term count m
# ---------------------------------------------------------------------------


def biggest_terms_inplace(x: np.ndarray, m: int) -> np.ndarray:
    """
    Keep the *m* largest‑magnitude entries of *x* and zero the rest.

    Ranking uses a stable ascending sort of ``|x|`` over the flattened
    (C‑order) array, so among equal magnitudes the earlier position is
    dropped first.  ``m`` larger than ``x.size`` keeps everything.
    """
    m = operator.index(m)
    if m < 0:
        raise InvalidSparsityError(f"term count must be non-negative, got {m}")
    n = x.size
    m = min(m, n)
    order = np.argsort(np.abs(x), axis=None, kind="stable")
    x[np.unravel_index(order[: n - m], x.shape)] = 0
    return x


# ---------------------------------------------------------------------------
# Parameter‑free kernels
# ---------------------------------------------------------------------------


def clip_negative_inplace(x: np.ndarray) -> np.ndarray:
    """Set negative entries to zero."""
    x[x < 0] = 0
    return x


def clip_positive_inplace(x: np.ndarray) -> np.ndarray:
    """Set positive entries to zero."""
    x[x > 0] = 0
    return x


# ---------------------------------------------------------------------------
# Copy flavours
# ---------------------------------------------------------------------------


def threshold_hard(x: np.ndarray, t: float) -> np.ndarray:
    return apply_copy(threshold_hard_inplace, x, t)


def threshold_soft(x: np.ndarray, t: float) -> np.ndarray:
    return apply_copy(threshold_soft_inplace, x, t)


def threshold_semisoft(x: np.ndarray, t: float) -> np.ndarray:
    return apply_copy(threshold_semisoft_inplace, x, t)


def threshold_stein(x: np.ndarray, t: float) -> np.ndarray:
    return apply_copy(threshold_stein_inplace, x, t)


def biggest_terms(x: np.ndarray, m: int) -> np.ndarray:
    return apply_copy(biggest_terms_inplace, x, m)


def clip_negative(x: np.ndarray) -> np.ndarray:
    return apply_copy(clip_negative_inplace, x)


def clip_positive(x: np.ndarray) -> np.ndarray:
    return apply_copy(clip_positive_inplace, x)


# ---------------------------------------------------------------------------
# Kernel selector
# ---------------------------------------------------------------------------


class Kernel(Enum):
    """Closed set of shrinkage kernels, selectable by name."""

    HARD = "hard"
    SOFT = "soft"
    SEMISOFT = "semisoft"
    STEIN = "stein"
    BIGGEST_M = "biggest"
    NEG_CLIP = "negative"
    POS_CLIP = "positive"

    @classmethod
    def from_name(cls, name: "str | Kernel") -> "Kernel":
        """Return the kernel called *name*; raise `UnknownKernelError` otherwise."""
        if isinstance(name, cls):
            return name
        try:
            return cls(str(name).strip().lower())
        except ValueError:
            known = ", ".join(k.value for k in cls)
            raise UnknownKernelError(
                f"unknown threshold kernel {name!r} (expected one of: {known})"
            ) from None

    @property
    def takes_parameter(self) -> bool:
        return self not in (Kernel.NEG_CLIP, Kernel.POS_CLIP)

    def apply_inplace(self, x: np.ndarray, param: Optional[float] = None) -> np.ndarray:
        """
        Apply this kernel to *x* in place.

        *param* is the threshold ``t`` for the threshold kernels and the term
        count ``m`` for `BIGGEST_M` (floored to an integer); it is ignored by
        the clipping kernels.
        """
        fn = _INPLACE[self]
        if not self.takes_parameter:
            return fn(x)
        if param is None:
            raise TypeError(f"kernel {self.value!r} needs a parameter")
        if self is Kernel.BIGGEST_M:
            if not param >= 0:
                raise InvalidSparsityError(f"term count must be non-negative, got {param!r}")
            param = int(param)
        return fn(x, param)

    def apply(
        self,
        x: np.ndarray,
        param: Optional[float] = None,
        *,
        dtype=OUT_DTYPE,
    ) -> np.ndarray:
        """Copy flavour of `apply_inplace`."""
        return apply_copy(self.apply_inplace, x, param, dtype=dtype)


_INPLACE: dict = {
    Kernel.HARD: threshold_hard_inplace,
    Kernel.SOFT: threshold_soft_inplace,
    Kernel.SEMISOFT: threshold_semisoft_inplace,
    Kernel.STEIN: threshold_stein_inplace,
    Kernel.BIGGEST_M: biggest_terms_inplace,
    Kernel.NEG_CLIP: clip_negative_inplace,
    Kernel.POS_CLIP: clip_positive_inplace,
}
