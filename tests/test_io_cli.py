"""
test_io_cli.py
==============

Signal I/O helpers, timing utilities and the `main.py` command line.
"""

from __future__ import annotations

import logging

import numpy as np
import pytest

import io_utils as io
import main as cli
from denoise import denoise
from errors import UnsupportedConfigurationError
from strategy import DenoisingStrategy
from thresholding import Kernel
from wavelet import PeriodicWavelet


@pytest.fixture(autouse=True)
def _clean_timings():
    io.reset_timings()
    yield
    io.reset_timings()


# --------------------------------------------------------------------------- #
# read_signal / save_signal
# --------------------------------------------------------------------------- #

class TestSignalIO:

    @pytest.mark.parametrize("suffix", [".npy", ".csv", ".txt"])
    def test_round_trip(self, tmp_path, suffix):
        x = np.random.default_rng(0).normal(size=(8, 4))
        path = io.save_signal(x, tmp_path / "sub" / f"sig{suffix}")
        assert path.exists()
        np.testing.assert_allclose(io.read_signal(path), x, rtol=1e-12)

    def test_image_round_trip(self, tmp_path):
        img = np.arange(64, dtype=np.float64).reshape(8, 8) * 3.5
        path = io.save_signal(img, tmp_path / "img.png")
        back = io.read_signal(path)
        assert back.dtype == np.float64
        np.testing.assert_array_equal(back, np.rint(img))

    def test_image_is_clipped(self, tmp_path):
        path = io.save_signal(np.array([[-20.0, 300.0]]), tmp_path / "clip.png")
        np.testing.assert_array_equal(io.read_signal(path), [[0, 255]])

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            io.read_signal(tmp_path / "nope.npy")

    def test_unsupported_suffix(self, tmp_path):
        p = tmp_path / "x.wav"
        p.write_bytes(b"")
        with pytest.raises(ValueError):
            io.read_signal(p)
        with pytest.raises(ValueError):
            io.save_signal(np.zeros(4), tmp_path / "x.wav")


# --------------------------------------------------------------------------- #
# Timing helpers
# --------------------------------------------------------------------------- #

class TestTiming:

    def test_timer_records_decorated_calls(self, caplog):
        with caplog.at_level(logging.INFO, logger="io_utils"):
            denoise(np.zeros(16), transform=PeriodicWavelet("haar"), sigma=1.0)
        assert "denoise" in io.TIMINGS
        assert any("denoise finished" in r.message for r in caplog.records)

    def test_step_timer_and_log(self, tmp_path):
        with io.step_timer("load"):
            pass
        assert "load" in io.TIMINGS
        log = io.write_log(["wavelet: haar"], directory=tmp_path)
        text = log.read_text(encoding="utf-8")
        assert "wavelet: haar" in text
        assert "load" in text

    def test_summary_without_data(self, capsys):
        io.summary()
        assert "No timing data" in capsys.readouterr().out

    def test_table_sorted_slowest_first(self, capsys):
        io.TIMINGS.update(load=10.0, denoise=30.0, save=0.0)
        rows = io.timing_table()
        assert [r.split()[0] for r in rows] == ["denoise", "load", "save", "total"]
        assert "75.0 %" in rows[0]
        assert "40.00 ms" in rows[-1]
        io.summary()
        assert "denoise" in capsys.readouterr().out

    def test_timer_records_on_error(self):
        @io.timer
        def boom():
            raise RuntimeError("x")

        with pytest.raises(RuntimeError):
            boom()
        assert "boom" in io.TIMINGS

    def test_reset_selected_labels(self):
        io.TIMINGS.update(a=1.0, b=2.0)
        io.reset_timings("a", "missing")
        assert io.TIMINGS == {"b": 2.0}
        io.reset_timings()
        assert io.TIMINGS == {}


# --------------------------------------------------------------------------- #
# Command line
# --------------------------------------------------------------------------- #

class TestCLI:

    def test_build_config(self):
        args = cli.parse_args(["in.npy", "--wavelet", "db2", "--kernel", "soft",
                               "--threshold", "2.5", "--ti", "--nspin", "4", "2", "-j", "3"])
        cfg = cli.build_config(args, 256)
        assert cfg.transform == PeriodicWavelet("db2")
        assert cfg.strategy == DenoisingStrategy(Kernel.SOFT, 2.5)
        assert cfg.translation_invariant
        assert cfg.nspin == (4, 2)
        assert cfg.n_jobs == 3

    def test_build_config_defaults(self):
        cfg = cli.build_config(cli.parse_args(["in.npy", "--wavelet", "none"]), 64)
        assert cfg.transform is None
        assert cfg.strategy.kernel is Kernel.HARD
        assert cfg.nspin is None

    def test_biggest_needs_explicit_term_count(self):
        with pytest.raises(UnsupportedConfigurationError):
            cli.build_config(cli.parse_args(["in.npy", "--kernel", "biggest"]), 1024)
        cfg = cli.build_config(cli.parse_args(["in.npy", "--kernel", "biggest", "--threshold", "10"]), 1024)
        assert cfg.strategy == DenoisingStrategy(Kernel.BIGGEST_M, 10.0)

    def test_main_writes_output(self, tmp_path, capsys):
        rng = np.random.default_rng(42)
        x = np.sin(np.linspace(0, 4 * np.pi, 256)) + rng.normal(scale=0.1, size=256)
        src = io.save_signal(x, tmp_path / "noisy.npy")
        dst = tmp_path / "out" / "clean.npy"

        out = cli.main([str(src), "-o", str(dst), "--wavelet", "db2", "--level", "3", "--ti", "--nspin", "4"])

        assert out == dst
        y = np.load(dst)
        assert y.shape == x.shape
        assert (dst.parent / "run_log.txt").exists()
        assert "Saved denoised signal" in capsys.readouterr().out

    def test_main_rejects_ti_without_wavelet(self, tmp_path):
        src = io.save_signal(np.zeros(16), tmp_path / "z.npy")
        with pytest.raises(UnsupportedConfigurationError):
            cli.main([str(src), "--wavelet", "none", "--ti", "-o", str(tmp_path / "o.npy")])
