"""
strategy.py – Denoising strategies: a shrinkage kernel plus its threshold.

A strategy stores the threshold ``t`` for unit noise level; the threshold
actually applied to the coefficients is ``sigma * t``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Union

import numpy as np

from errors import InvalidThresholdError
from thresholding import OUT_DTYPE, Kernel

__all__ = ["DenoisingStrategy", "visu_shrink"]


@dataclass(frozen=True)
class DenoisingStrategy:
    """Immutable ``(kernel, t)`` pair."""

    kernel: Kernel
    t: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "kernel", Kernel.from_name(self.kernel))
        if not self.t >= 0:
            raise InvalidThresholdError(f"strategy threshold must be non-negative, got {self.t!r}")
        object.__setattr__(self, "t", float(self.t))

    @classmethod
    def visu_shrink(cls, n: int, kernel: Union[Kernel, str] = Kernel.HARD) -> "DenoisingStrategy":
        """Universal threshold ``t = sqrt(2 ln n)`` for a signal of length *n*."""
        if n < 1:
            raise ValueError(f"signal length must be >= 1, got {n}")
        return cls(Kernel.from_name(kernel), math.sqrt(2 * math.log(n)))

    def threshold(self, sigma: float) -> float:
        thr = sigma * self.t
        if not thr >= 0:
            raise InvalidThresholdError(
                f"applied threshold sigma*t must be non-negative, got {sigma!r}*{self.t!r}"
            )
        return thr

    def apply_inplace(self, coeffs: np.ndarray, sigma: float) -> np.ndarray:
        return self.kernel.apply_inplace(coeffs, self.threshold(sigma))

    def apply(self, coeffs: np.ndarray, sigma: float, *, dtype=OUT_DTYPE) -> np.ndarray:
        return self.kernel.apply(coeffs, self.threshold(sigma), dtype=dtype)


def visu_shrink(n: int, kernel: Union[Kernel, str] = Kernel.HARD) -> DenoisingStrategy:
    """Shortcut for `DenoisingStrategy.visu_shrink`."""
    return DenoisingStrategy.visu_shrink(n, kernel)
