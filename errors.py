"""
errors.py – Exception types raised by the denoising modules.

All usage errors also derive from `ValueError`, so callers that only care
about "bad argument" can keep catching that.
"""

from __future__ import annotations

__all__ = [
    "DenoiseError",
    "InvalidThresholdError",
    "InvalidSparsityError",
    "UnsupportedConfigurationError",
    "UnknownKernelError",
    "DenoiseCancelled",
]


class DenoiseError(Exception):
    """Base class for every error raised by this project."""


class InvalidThresholdError(DenoiseError, ValueError):
    """Threshold `t` is negative (or NaN)."""


class InvalidSparsityError(DenoiseError, ValueError):
    """Term count `m` of the biggest‑m‑term kernel is negative."""


class UnsupportedConfigurationError(DenoiseError, ValueError):
    """Option combination that cannot run, e.g. TI mode without a transform."""


class UnknownKernelError(DenoiseError, ValueError):
    """Kernel selector does not name any known shrinkage kernel."""


class DenoiseCancelled(DenoiseError, RuntimeError):
    """Translation‑invariant loop stopped because the cancel event was set."""
