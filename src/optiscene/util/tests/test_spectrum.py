#!/usr/bin/env python3
# -*- coding: utf-8 -*-
""" tests for sampled spectra

.. Created on Thu Mar 14 16:20:37 2024

.. codeauthor: The optiscene developers
"""
import unittest

import numpy as np
import numpy.testing as npt
import pytest

from optiscene.opmerror import SpectrumError
from optiscene.util.spectrum import Spectrum, merge_spectra


class SpectrumTestCase(unittest.TestCase):

    def test_grid(self):
        spec = Spectrum(500.0, 510.0, 1.0)
        self.assertEqual(len(spec.lambdas), 10)
        npt.assert_allclose(spec.range(), (500.0, 509.0))
        self.assertEqual(spec.total_energy(), 0.0)

    def test_invalid_grid(self):
        with self.assertRaises(SpectrumError):
            Spectrum(500.0, 510.0, 0.0)
        with self.assertRaises(SpectrumError):
            Spectrum(510.0, 500.0, 1.0)
        with self.assertRaises(SpectrumError):
            Spectrum(-10.0, 500.0, 1.0)

    def test_single_peak_conserves_energy(self):
        spec = Spectrum(500.0, 510.0, 1.0)
        spec.add_single_peak(503.3, 2.0)
        assert spec.total_energy() == pytest.approx(2.0)
        assert spec.center_wavelength() == pytest.approx(503.3)

    def test_peak_outside_range(self):
        spec = Spectrum(500.0, 510.0, 1.0)
        spec.add_single_peak(600.0, 2.0)
        self.assertEqual(spec.total_energy(), 0.0)

    def test_laser_lines(self):
        spec = Spectrum.from_laser_lines([(632.8, 1.0), (1054.0, 0.5)], 0.1)
        assert spec.total_energy() == pytest.approx(1.5)

    def test_split_by_ratio(self):
        spec = Spectrum.from_laser_lines([(632.8, 1.0)], 0.1)
        split = spec.split_by_ratio(0.6)
        assert spec.total_energy() == pytest.approx(0.6)
        assert split.total_energy() == pytest.approx(0.4)
        with self.assertRaises(SpectrumError):
            spec.split_by_ratio(1.5)

    def test_filter_by_spectrum(self):
        spec = Spectrum(500.0, 510.0, 1.0)
        spec.data = np.ones(10)
        filt = Spectrum.from_data([400.0, 600.0], [0.5, 0.5])
        self.assertTrue(filt.is_transmission_spectrum())
        spec.filter(filt)
        npt.assert_allclose(spec.data, 0.5)

    def test_sub_clamps_at_zero(self):
        s1 = Spectrum(500.0, 510.0, 1.0)
        s1.data = np.ones(10)
        s2 = s1.copy()
        s2.scale_vertical(2.0)
        s1.sub(s2)
        self.assertTrue(np.all(s1.data >= 0.0))

    def test_merge(self):
        s1 = Spectrum.from_laser_lines([(632.8, 1.0)], 0.1)
        s2 = s1.copy()
        s2.scale_vertical(0.5)
        merged = merge_spectra(s1, s2)
        assert merged.total_energy() == pytest.approx(1.5)
        self.assertIsNone(merge_spectra(None, None))
        assert merge_spectra(None, s2).total_energy() == pytest.approx(0.5)

    def test_merge_disjoint_ranges(self):
        s1 = Spectrum.from_laser_lines([(632.8, 1.0)], 0.1)
        s2 = Spectrum.from_laser_lines([(1064.0, 1.0)], 0.5)
        merged = merge_spectra(s1, s2)
        assert merged.total_energy() == pytest.approx(2.0)
        assert merged.average_resolution() == pytest.approx(0.1)
        start, end = merged.range()
        self.assertLessEqual(start, 632.8)
        self.assertGreater(end, 1064.0)
        # order of the arguments does not matter
        assert merge_spectra(s2, s1).total_energy() == pytest.approx(2.0)

    def test_lorentzian_peak(self):
        spec = Spectrum(500.0, 700.0, 0.05)
        spec.add_lorentzian_peak(600.0, 1.0, 2.0)
        # tails beyond +-100 linewidths hold about 0.3 % of the energy
        assert spec.total_energy() == pytest.approx(2.0, rel=0.01)
        assert spec.center_wavelength() == pytest.approx(600.0, abs=0.1)
        self.assertEqual(np.argmax(spec.data), 2000)
        with self.assertRaises(SpectrumError):
            spec.add_lorentzian_peak(600.0, -1.0, 2.0)


if __name__ == '__main__':
    unittest.main(verbosity=2)
