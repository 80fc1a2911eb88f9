"""
wavelet.py
==========

Transform capability consumed by the denoising engine, plus the default
PyWavelets backend.

Public API
----------
Transform                       (protocol)
    forward(signal, levels)   -> packed coefficient array, same shape
    inverse(coeffs, levels)   -> reconstructed signal
    max_scales(length)        -> deepest decomposition for that axis length
    detail_range(level)       -> index range of the detail band at *level*

PeriodicWavelet(wavelet="sym5")
    Orthogonal DWT with periodic extension over all axes.

Design Notes
------------
* PyWavelets (`pywt`) is used as the backend, in ``periodization`` mode so
  the packed coefficients have exactly the shape of the input.
* Coefficients are packed in Mallat order by `pywt.coeffs_to_array`:
  coarsest approximation first, the detail band of level *j* (0 = coarsest)
  occupies ``[2**j : 2**(j+1)]`` along each axis, and the finest details
  fill the upper half.
* Axis lengths must be powers of two.
"""

from __future__ import annotations

from functools import lru_cache
from typing import List, Protocol, Tuple

import numpy as np
import pywt

__all__ = ["DEFAULT_WAVELET", "Transform", "PeriodicWavelet", "detail_range"]

DEFAULT_WAVELET = "sym5"


class Transform(Protocol):
    def forward(self, signal: np.ndarray, levels: int) -> np.ndarray: ...

    def inverse(self, coeffs: np.ndarray, levels: int) -> np.ndarray: ...

    def max_scales(self, length: int) -> int: ...

    def detail_range(self, level: int) -> slice: ...


# --------------------------------------------------------------------------- #
# Helpers
# --------------------------------------------------------------------------- #
def _is_pow2(n: int) -> bool:
    return n >= 1 and (n & (n - 1)) == 0


def _validate_shape(shape: Tuple[int, ...], levels: int) -> None:
    if levels < 0:
        raise ValueError("levels must be >= 0")
    for n in shape:
        if not _is_pow2(n):
            raise ValueError(f"axis length {n} is not a power of two")
        if n < 2 ** levels:
            raise ValueError(f"axis length {n} too short for {levels} decomposition level(s)")


@lru_cache(maxsize=64)
def _coeff_slices(wavelet: str, shape: Tuple[int, ...], levels: int) -> List:
    """Packing layout of `pywt.coeffs_to_array` for a given shape."""
    coeffs = pywt.wavedecn(np.zeros(shape), wavelet, mode="periodization", level=levels)
    _, slices = pywt.coeffs_to_array(coeffs)
    return slices


def detail_range(level: int) -> slice:
    """Index range of the detail band at *level* (0 = coarsest)."""
    if level < 0:
        raise ValueError("level must be >= 0")
    return slice(2 ** level, 2 ** (level + 1))


# --------------------------------------------------------------------------- #
# PyWavelets backend
# --------------------------------------------------------------------------- #
class PeriodicWavelet:
    """
    N‑D discrete wavelet transform with periodic boundary handling.

    Parameters
    ----------
    wavelet : str, default 'sym5'
        Wavelet family / filter name recognised by PyWavelets.
    """

    def __init__(self, wavelet: str = DEFAULT_WAVELET) -> None:
        self.wavelet = pywt.Wavelet(wavelet).name

    def __repr__(self) -> str:
        return f"PeriodicWavelet({self.wavelet!r})"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, PeriodicWavelet) and other.wavelet == self.wavelet

    def __hash__(self) -> int:
        return hash((PeriodicWavelet, self.wavelet))

    def max_scales(self, length: int) -> int:
        if not _is_pow2(length):
            raise ValueError(f"axis length {length} is not a power of two")
        return length.bit_length() - 1

    def detail_range(self, level: int) -> slice:
        return detail_range(level)

    def forward(self, signal: np.ndarray, levels: int) -> np.ndarray:
        """
        Decompose *signal* by *levels* scales along every axis.

        Returns
        -------
        np.ndarray
            Packed coefficients, same shape as *signal*.  *signal* is not
            modified.
        """
        x = np.asarray(signal)
        _validate_shape(x.shape, levels)
        if levels == 0:
            return x.copy()
        coeffs = pywt.wavedecn(x, self.wavelet, mode="periodization", level=levels)
        arr, _ = pywt.coeffs_to_array(coeffs)
        return arr

    def inverse(self, coeffs: np.ndarray, levels: int) -> np.ndarray:
        """Rebuild the signal from packed coefficients of `forward`."""
        arr = np.asarray(coeffs)
        _validate_shape(arr.shape, levels)
        if levels == 0:
            return arr.copy()
        slices = _coeff_slices(self.wavelet, arr.shape, levels)
        tree = pywt.array_to_coeffs(arr, slices, output_format="wavedecn")
        return pywt.waverecn(tree, self.wavelet, mode="periodization")
