#!/usr/bin/env python3
# -*- coding: utf-8 -*-
""" tests for poses and misc math

.. Created on Fri Mar 15 10:02:18 2024

.. codeauthor: The optiscene developers
"""
import math
import unittest

import numpy as np
import numpy.testing as npt
import pytest

from optiscene.opmerror import OtherError
from optiscene.util.transform import Isometry
from optiscene.util import misc_math
from optiscene.util import quantity


class IsometryTestCase(unittest.TestCase):

    def test_identity(self):
        iso = Isometry.identity()
        pt = np.array([1., 2., 3.])
        npt.assert_allclose(iso.transform_point(pt), pt)
        npt.assert_allclose(iso.z_axis(), [0., 0., 1.])

    def test_inverse_round_trip(self):
        iso = Isometry.from_euler([1., -2., 5.], [10., 20., 30.])
        pt = np.array([0.3, 0.2, -4.])
        npt.assert_allclose(iso.inverse_transform_point(
            iso.transform_point(pt)), pt, atol=1e-12)
        self.assertEqual(iso.append(iso.inverse()), Isometry())

    def test_append(self):
        iso = Isometry.along_z(10.).append(Isometry.along_z(5.))
        npt.assert_allclose(iso.translation, [0., 0., 15.])

    def test_from_axis(self):
        iso = Isometry.from_axis([0., 0., 0.], [1., 0., 0.])
        npt.assert_allclose(iso.z_axis(), [1., 0., 0.], atol=1e-12)
        npt.assert_allclose(iso.rotation.T @ iso.rotation, np.identity(3),
                            atol=1e-12)


class MiscMathTestCase(unittest.TestCase):

    def test_normalize(self):
        npt.assert_allclose(misc_math.normalize(np.array([3., 4., 0.])),
                            [0.6, 0.8, 0.])
        npt.assert_allclose(misc_math.normalize(np.zeros(3)), np.zeros(3))

    def test_polygon_area(self):
        square = [(0., 0.), (1., 0.), (1., 1.), (0., 1.)]
        assert misc_math.calc_closed_poly_area(square) == pytest.approx(1.0)
        triangle = [(0., 0.), (2., 0.), (0., 2.)]
        assert misc_math.calc_closed_poly_area(triangle) == \
            pytest.approx(2.0)

    def test_triangle_area(self):
        assert misc_math.triangle_area((0., 0.), (2., 0.), (0., 2.)) == \
            pytest.approx(2.0)

    def test_isanumber(self):
        self.assertTrue(misc_math.isanumber('1.5'))
        self.assertFalse(misc_math.isanumber('air'))
        self.assertFalse(misc_math.isanumber(None))


class QuantityTestCase(unittest.TestCase):

    def test_conversions(self):
        assert quantity.to_mm(1.0, 'cm') == pytest.approx(10.0)
        assert quantity.to_nm(1.054, 'um') == pytest.approx(1054.0)
        assert quantity.to_joule(5.0, 'mJ') == pytest.approx(0.005)
        assert quantity.fluence_from(1.0, 100.0) == pytest.approx(1.0)

    def test_checks(self):
        with self.assertRaises(OtherError):
            quantity.check_finite(math.inf, 'length')
        with self.assertRaises(OtherError):
            quantity.check_non_negative(-1.0, 'length')
        with self.assertRaises(OtherError):
            quantity.check_positive(0.0, 'length')


if __name__ == '__main__':
    unittest.main(verbosity=2)
