#!/usr/bin/env python3
"""
main.py – Command‑line driver for wavelet‑domain denoising.

Usage
-----
$ python main.py noisy.npy --wavelet sym5 --level 4 --kernel soft -o clean.npy
$ python main.py noisy.png --ti --nspin 8 8 --jobs 4
$ python main.py noisy.csv --wavelet none --sigma 0.2 --threshold 3

Signals are read with `io_utils.read_signal` (.npy, .csv, .txt or a
gray‑scale image).  Without ``-o`` the result goes to
`results/<timestamp>/denoised<suffix>`.
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List, Optional

import io_utils as io
from denoise import DenoiseConfig, denoise
from errors import UnsupportedConfigurationError
from strategy import DenoisingStrategy, visu_shrink
from thresholding import Kernel
from wavelet import DEFAULT_WAVELET, PeriodicWavelet


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Wavelet threshold denoiser")
    p.add_argument("signal", help="Input signal file (.npy, .csv, .txt or image).")
    p.add_argument("-o", "--output", default=None, help="Output file; format follows the suffix.")
    p.add_argument(
        "--wavelet",
        default=DEFAULT_WAVELET,
        help="Wavelet name (PyWavelets) or 'none' to threshold the raw signal.",
    )
    p.add_argument(
        "--level",
        type=int,
        default=None,
        help="Coarsest scale left untransformed (default: max(scales-6, 1)).",
    )
    p.add_argument(
        "--kernel",
        choices=[k.value for k in Kernel],
        default=Kernel.HARD.value,
        help="Shrinkage kernel.",
    )
    p.add_argument(
        "--threshold",
        type=float,
        default=None,
        help="Threshold t at unit noise (default: VisuShrink sqrt(2 ln n)); "
        "for --kernel biggest, the number of terms kept (required).",
    )
    p.add_argument("--sigma", type=float, default=None, help="Noise σ (default: MAD estimate).")
    p.add_argument("--ti", action="store_true", help="Translation‑invariant (cycle spinning) mode.")
    p.add_argument(
        "--nspin",
        type=int,
        nargs="+",
        default=None,
        help="Circular shifts per axis for --ti (default: 8 per axis).",
    )
    p.add_argument("-j", "--jobs", type=int, default=1, help="Worker threads for --ti (-1 = all cores).")
    p.add_argument("-v", "--verbose", action="store_true", help="Log every stage.")
    return p.parse_args(argv)


def build_config(args: argparse.Namespace, n: int) -> DenoiseConfig:
    """Map parsed CLI flags onto a `DenoiseConfig` for a signal of length *n*."""
    transform = None if args.wavelet.lower() == "none" else PeriodicWavelet(args.wavelet)
    kernel = Kernel.from_name(args.kernel)
    if args.threshold is None:
        if kernel is Kernel.BIGGEST_M:
            raise UnsupportedConfigurationError(
                "--kernel biggest keeps a number of terms; pass it via --threshold"
            )
        strategy = visu_shrink(n, kernel)
    else:
        strategy = DenoisingStrategy(kernel, args.threshold)
    return DenoiseConfig(
        transform=transform,
        level=args.level,
        strategy=strategy,
        sigma=args.sigma,
        translation_invariant=args.ti,
        nspin=tuple(args.nspin) if args.nspin else None,
        n_jobs=args.jobs,
    )


def main(argv: Optional[List[str]] = None) -> Path:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )

    # 1. Load signal
    with io.step_timer("load_signal"):
        x = io.read_signal(args.signal)

    # 2. Denoise
    cfg = build_config(args, x.shape[0])
    y = denoise(x, cfg)

    # 3. Save result
    with io.step_timer("save_signal"):
        if args.output is not None:
            out_path = Path(args.output)
        else:
            out_path = io.run_dir() / f"denoised{Path(args.signal).suffix}"
        io.save_signal(y, out_path)
    print(f"Saved denoised signal: {out_path}")

    # 4. Timing summary + run log
    io.summary()
    param_lines = [f"{k}: {v}" for k, v in vars(args).items()]
    log_path = io.write_log(param_lines, directory=out_path.parent)
    print(f"Run log saved to: {log_path}")
    return out_path


if __name__ == "__main__":
    main()
