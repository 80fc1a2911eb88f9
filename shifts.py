"""
shifts.py – Circular‑shift lattice for translation‑invariant denoising.

``nspin = (n_0, n_1, ...)`` asks for shifts ``0 .. n_k - 1`` along axis *k*;
the lattice is the Cartesian product of those ranges and has
``prod(nspin)`` members.  Linear index 0 is always the zero shift.

Public API
----------
normalize_nspin(nspin, ndim) -> tuple[int, ...]
lattice_size(nspin) -> int
shift_vector(nspin, i) -> tuple[int, ...]
iter_shifts(nspin) -> Iterator[tuple[int, ...]]
"""

from __future__ import annotations

import math
from typing import Iterator, Sequence, Tuple, Union

import numpy as np

__all__ = ["DEFAULT_NSPIN", "normalize_nspin", "lattice_size", "shift_vector", "iter_shifts"]

# shifts per axis when none are requested
DEFAULT_NSPIN = 8

NSpin = Union[int, Sequence[int]]


def normalize_nspin(nspin: NSpin, ndim: int) -> Tuple[int, ...]:
    """
    Validate *nspin* against a signal with *ndim* axes.

    A plain int shifts the first axis only.  A tuple shorter than *ndim*
    shifts the leading axes and leaves the others alone.
    """
    counts = (nspin,) if isinstance(nspin, (int, np.integer)) else tuple(nspin)
    if not counts:
        raise ValueError("nspin must name at least one axis")
    if len(counts) > ndim:
        raise ValueError(f"nspin has {len(counts)} entries but the signal has {ndim} axes")
    for c in counts:
        if int(c) != c or c < 1:
            raise ValueError(f"shift counts must be positive integers, got {counts}")
    return tuple(int(c) for c in counts)


def lattice_size(nspin: Sequence[int]) -> int:
    return math.prod(nspin)


def shift_vector(nspin: Sequence[int], i: int) -> Tuple[int, ...]:
    """
    Map linear index ``i ∈ [0, prod(nspin))`` to a zero‑based shift vector.

    Mixed‑radix decomposition with the first axis varying fastest.
    """
    size = lattice_size(nspin)
    if not 0 <= i < size:
        raise ValueError(f"shift index {i} out of range [0, {size})")
    return tuple(int(c) for c in np.unravel_index(i, tuple(nspin), order="F"))


def iter_shifts(nspin: Sequence[int]) -> Iterator[Tuple[int, ...]]:
    """Yield every shift vector of the lattice exactly once."""
    for i in range(lattice_size(nspin)):
        yield shift_vector(nspin, i)
