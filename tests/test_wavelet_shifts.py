"""
test_wavelet_shifts.py
======================

PyWavelets transform adapter and the circular‑shift lattice.
"""

from __future__ import annotations

import itertools

import numpy as np
import pytest

from shifts import iter_shifts, lattice_size, normalize_nspin, shift_vector
from wavelet import PeriodicWavelet, detail_range


# --------------------------------------------------------------------------- #
# Transform
# --------------------------------------------------------------------------- #

class TestPeriodicWavelet:

    @pytest.mark.parametrize("wavelet,levels", [("haar", 8), ("db2", 4), ("sym5", 3)])
    def test_round_trip_1d(self, wavelet, levels):
        x = np.random.default_rng(0).normal(size=256)
        wt = PeriodicWavelet(wavelet)
        c = wt.forward(x, levels)
        assert c.shape == x.shape
        np.testing.assert_allclose(wt.inverse(c, levels), x, atol=1e-10)

    def test_round_trip_2d(self):
        x = np.random.default_rng(1).normal(size=(32, 64))
        wt = PeriodicWavelet("db2")
        c = wt.forward(x, 3)
        assert c.shape == x.shape
        np.testing.assert_allclose(wt.inverse(c, 3), x, atol=1e-10)

    def test_orthogonal_energy_preserved(self):
        x = np.random.default_rng(2).normal(size=128)
        c = PeriodicWavelet("sym5").forward(x, 3)
        assert np.sum(c ** 2) == pytest.approx(np.sum(x ** 2))

    def test_constant_has_no_finest_detail(self):
        wt = PeriodicWavelet("haar")
        c = wt.forward(np.ones(64), 1)
        np.testing.assert_allclose(c[wt.detail_range(wt.max_scales(64) - 1)], 0, atol=1e-12)
        np.testing.assert_allclose(c[:32], np.sqrt(2))

    def test_zero_levels_is_identity_copy(self):
        x = np.arange(8.0)
        wt = PeriodicWavelet("haar")
        c = wt.forward(x, 0)
        np.testing.assert_array_equal(c, x)
        assert c is not x

    def test_forward_does_not_mutate(self):
        x = np.arange(16.0)
        PeriodicWavelet("db2").forward(x, 2)
        np.testing.assert_array_equal(x, np.arange(16.0))

    def test_max_scales_and_detail_range(self):
        wt = PeriodicWavelet()
        assert wt.wavelet == "sym5"
        assert wt.max_scales(1024) == 10
        assert wt.max_scales(1) == 0
        assert wt.detail_range(3) == slice(8, 16)
        assert detail_range(0) == slice(1, 2)

    def test_invalid_lengths(self):
        wt = PeriodicWavelet("haar")
        with pytest.raises(ValueError):
            wt.max_scales(100)
        with pytest.raises(ValueError):
            wt.forward(np.zeros(12), 1)
        with pytest.raises(ValueError):
            wt.forward(np.zeros(8), 4)

    def test_unknown_wavelet(self):
        with pytest.raises(ValueError):
            PeriodicWavelet("not-a-wavelet")

    def test_equality(self):
        assert PeriodicWavelet("db2") == PeriodicWavelet("db2")
        assert PeriodicWavelet("db2") != PeriodicWavelet("haar")


# --------------------------------------------------------------------------- #
# Shift lattice
# --------------------------------------------------------------------------- #

class TestShifts:

    def test_normalize(self):
        assert normalize_nspin(4, 2) == (4,)
        assert normalize_nspin([2, 3], 2) == (2, 3)
        assert normalize_nspin(np.int64(5), 1) == (5,)

    @pytest.mark.parametrize("bad", [0, (2, 0), (2, 2, 2), (), (1.5,)])
    def test_normalize_rejects(self, bad):
        with pytest.raises(ValueError):
            normalize_nspin(bad, 2)

    def test_first_axis_fastest(self):
        assert [shift_vector((2, 3), i) for i in range(4)] == [(0, 0), (1, 0), (0, 1), (1, 1)]
        assert shift_vector((2, 3), 5) == (1, 2)

    def test_covers_lattice_exactly_once(self):
        nspin = (3, 4, 2)
        shifts = list(iter_shifts(nspin))
        assert len(shifts) == lattice_size(nspin) == 24
        assert shifts[0] == (0, 0, 0)
        assert set(shifts) == set(itertools.product(range(3), range(4), range(2)))

    def test_single_axis(self):
        assert list(iter_shifts((5,))) == [(0,), (1,), (2,), (3,), (4,)]
        assert list(iter_shifts((1, 1))) == [(0, 0)]

    def test_out_of_range(self):
        with pytest.raises(ValueError):
            shift_vector((2, 2), 4)
        with pytest.raises(ValueError):
            shift_vector((2, 2), -1)
