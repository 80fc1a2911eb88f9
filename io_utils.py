"""
io_utils.py
===========

I/O utilities + lightweight timing helpers for the **wavelet_denoise** project.

The module centralises:

1. **Path management**
   * PROJECT_ROOT  – repository root (directory of this file).
   * RESULTS_DIR   – `<root>/results`
   * run_dir()     – `<results>/<timestamp>`, created on first use.

2. **Signal helpers**
   * read_signal  – `.npy`, `.txt`/`.csv` or gray‑scale image → float64 array.
   * save_signal  – inverse of `read_signal`, auto‑creates parent dirs.

3. **Timing**
   * @timer        – logs wall‑clock time of a function call.
   * step_timer    – same for a `with` block.
   * timing_table / summary / reset_timings / write_log.

Nothing is written to disk at import time.
"""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from datetime import datetime
from functools import wraps
from pathlib import Path
from typing import Callable, Dict, List, Optional, TypeVar

import cv2
import numpy as np

__all__ = [
    "PROJECT_ROOT",
    "RESULTS_DIR",
    "IMAGE_SUFFIXES",
    "TIMINGS",
    "ensure_dir",
    "run_dir",
    "read_signal",
    "save_signal",
    "timer",
    "step_timer",
    "timing_table",
    "summary",
    "reset_timings",
    "write_log",
]

# --------------------------------------------------------------------------- #
# Path management
# --------------------------------------------------------------------------- #

PROJECT_ROOT: Path = Path(__file__).resolve().parent
RESULTS_DIR: Path = PROJECT_ROOT / "results"

IMAGE_SUFFIXES = (".png", ".bmp", ".tif", ".tiff", ".jpg", ".jpeg")

_RUN_DIR: Optional[Path] = None


def ensure_dir(p: Path) -> Path:
    """Create directory *p* (and parents) if it does not exist. Return *p*."""
    p.mkdir(parents=True, exist_ok=True)
    return p


def run_dir() -> Path:
    """Timestamped results directory of this process (e.g. results/20250729_143015)."""
    global _RUN_DIR
    if _RUN_DIR is None:
        _RUN_DIR = RESULTS_DIR / datetime.now().strftime("%Y%m%d_%H%M%S")
    return ensure_dir(_RUN_DIR)


# --------------------------------------------------------------------------- #
# Signal helpers
# --------------------------------------------------------------------------- #


def read_signal(path: str | Path) -> np.ndarray:
    """
    Load a signal from *path* as a float64 array.

    * `.npy`           – numpy binary, any dimensionality.
    * `.csv`           – comma separated text (1‑D or 2‑D).
    * `.txt`/`.dat`    – whitespace separated text.
    * image suffixes   – gray‑scale image read with OpenCV (H×W).
    """
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(p)

    suffix = p.suffix.lower()
    if suffix == ".npy":
        arr = np.load(p)
    elif suffix == ".csv":
        arr = np.loadtxt(p, delimiter=",")
    elif suffix in (".txt", ".dat"):
        arr = np.loadtxt(p)
    elif suffix in IMAGE_SUFFIXES:
        arr = cv2.imread(str(p), cv2.IMREAD_GRAYSCALE)
        if arr is None:
            raise IOError(f"cv2 failed to read image: {p}")
    else:
        raise ValueError(f"unsupported signal file type: {p.suffix!r}")

    return np.asarray(arr, dtype=np.float64)


def save_signal(arr: np.ndarray, path: str | Path) -> Path:
    """
    Save *arr* to *path*; the format follows the file suffix.

    Images are clipped to [0, 255] and written as uint8.
    Creates target directory hierarchy if necessary.
    """
    p = Path(path)
    ensure_dir(p.parent)

    suffix = p.suffix.lower()
    if suffix == ".npy":
        np.save(p, arr)
    elif suffix == ".csv":
        np.savetxt(p, arr, delimiter=",")
    elif suffix in (".txt", ".dat"):
        np.savetxt(p, arr)
    elif suffix in IMAGE_SUFFIXES:
        img = np.clip(np.rint(arr), 0, 255).astype(np.uint8)
        if not cv2.imwrite(str(p), img):
            raise IOError(f"cv2 failed to write image: {p}")
    else:
        raise ValueError(f"unsupported signal file type: {p.suffix!r}")
    return p


# --------------------------------------------------------------------------- #
# Timing
# --------------------------------------------------------------------------- #

_F = TypeVar("_F", bound=Callable)

# accumulated wall‑clock per label (ms)
TIMINGS: Dict[str, float] = {}

logger = logging.getLogger("io_utils")
logger.setLevel(logging.INFO)


def _record(label: str, elapsed_ms: float) -> None:
    TIMINGS[label] = TIMINGS.get(label, 0.0) + elapsed_ms
    logger.info(f"{label} finished in {elapsed_ms:.2f} ms")


@contextmanager
def step_timer(label: str):
    """
    Context‑manager to measure the wall‑time of a processing step.

    The time is recorded under *label* even when the block raises.

    Examples
    --------
    >>> with step_timer("load_signal"):
    ...     x = read_signal("noisy.npy")
    """
    t0 = time.perf_counter()
    try:
        yield
    finally:
        _record(label, (time.perf_counter() - t0) * 1e3)


def timer(fn: _F) -> _F:
    """Decorator form of `step_timer`, labelled with the function name."""
    @wraps(fn)
    def wrapper(*args, **kwargs):
        with step_timer(fn.__name__):
            return fn(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def timing_table() -> List[str]:
    """
    Rows ``label  ms  share`` for every recorded label, slowest first, followed
    by a total row.  Empty when nothing was recorded.
    """
    if not TIMINGS:
        return []
    total = sum(TIMINGS.values())
    rows = []
    for label, ms in sorted(TIMINGS.items(), key=lambda kv: kv[1], reverse=True):
        share = 100.0 * ms / total if total > 0 else 0.0
        rows.append(f"{label:<25}{ms:>12.2f} ms {share:6.1f} %")
    rows.append(f"{'total':<25}{total:>12.2f} ms")
    return rows


def summary() -> None:
    """Print `timing_table` to stdout."""
    rows = timing_table()
    print("\n".join(["", "=== Timing summary ===", *rows]) if rows else "No timing data recorded.")


def reset_timings(*labels: str) -> None:
    """Drop the given labels, or every recorded timing when called bare."""
    if not labels:
        TIMINGS.clear()
    for label in labels:
        TIMINGS.pop(label, None)


# --------------------------------------------------------------------------- #
# Run log
# --------------------------------------------------------------------------- #

def write_log(param_lines: List[str] | None = None, directory: Path | None = None) -> Path:
    """
    Write a text log summarising run parameters + timing to `run_log.txt`.

    Parameters
    ----------
    param_lines : list[str] or None
        Pre‑formatted strings (e.g. ["wavelet: sym5", "level: 2"]).  Each will be
        written on its own line before the timing summary.
    directory : Path or None
        Target directory; defaults to `run_dir()`.

    Returns
    -------
    Path
        Absolute path to the written log file.
    """
    out_dir = ensure_dir(directory) if directory is not None else run_dir()
    sections = [f"Run timestamp : {datetime.now():%Y-%m-%d %H:%M:%S}"]
    if param_lines:
        sections += ["", "# Parameters", *param_lines]
    rows = timing_table()
    if rows:
        sections += ["", "# Timings", *rows]
    log_path = out_dir / "run_log.txt"
    log_path.write_text("\n".join(sections) + "\n", encoding="utf-8")
    return log_path
