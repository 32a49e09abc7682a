#!/usr/bin/env python3
# -*- coding: utf-8 -*-
""" tests for single ray tracing

.. Created on Thu Mar 28 10:02:31 2024

.. codeauthor: The optiscene developers
"""
import math
import unittest

import numpy as np
import numpy.testing as npt
import pytest

from optiscene.opmerror import OtherError
from optiscene.util.transform import Isometry
from optiscene.elem.coatings import ConstantR, Fresnel
from optiscene.elem.opticsurface import OpticSurface
from optiscene.raytr.ray import Ray
from optiscene.raytr.raytrace import (MissedSurfaceStrategy, bend, reflect,
                                      diffract_reflective, grating_vector)
from optiscene.raytr.traceerror import (TraceTIRError,
                                        TraceEvanescentRayError)


def tilted_ray(angle, z=-5.0, wvl=1000.0, energy=1.0):
    """ ray in the xz plane hitting the origin at `angle` deg """
    ang = math.radians(angle)
    d = [math.sin(ang), 0., math.cos(ang)]
    pos = [z*d[0]/d[2], 0., z]
    return Ray(pos, d, wvl, energy)


class RayTestCase(unittest.TestCase):

    def test_invalid_creation(self):
        with self.assertRaises(OtherError):
            Ray([0., 0., 0.], [0., 0., 1.], 0.0, 1.0)
        with self.assertRaises(OtherError):
            Ray([0., 0., 0.], [0., 0., 1.], 1000.0, -1.0)
        with self.assertRaises(OtherError):
            Ray([0., 0., 0.], [0., 0., 0.], 1000.0, 1.0)

    def test_direction_is_normalized(self):
        ray = Ray([0., 0., 0.], [0., 3., 4.], 1000.0, 1.0)
        npt.assert_allclose(ray.dir, [0., 0.6, 0.8])

    def test_propagate(self):
        ray = Ray.origin_along_z(1000.0, 1.0)
        ray.set_refractive_index(1.5)
        ray.propagate(10.0)
        npt.assert_allclose(ray.pos, [0., 0., 10.])
        assert ray.path_length == pytest.approx(15.0)
        self.assertEqual(ray.history_len(), 1)
        with self.assertRaises(OtherError):
            ray.propagate(math.inf)

    def test_normal_incidence(self):
        ray = Ray([0., 1., -5.], [0., 0., 1.], 1000.0, 1.0)
        reflected = ray.refract_on_surface(OpticSurface(), 1.5)
        npt.assert_allclose(ray.pos, [0., 1., 0.])
        npt.assert_allclose(ray.dir, [0., 0., 1.])
        self.assertEqual(ray.refractive_index, 1.5)
        self.assertEqual(ray.number_of_refractions, 1)
        self.assertEqual(reflected.energy, 0.0)
        self.assertEqual(reflected.number_of_bounces, 1)

    def test_snell(self):
        ray = tilted_ray(30.0)
        ray.refract_on_surface(OpticSurface(), 1.5)
        assert 1.5*ray.dir[0] == pytest.approx(0.5)
        assert np.linalg.norm(ray.dir) == pytest.approx(1.0)
        self.assertGreater(ray.dir[2], 0.0)

    def test_fresnel_energy_split(self):
        ray = Ray([0., 0., -5.], [0., 0., 1.], 1000.0, 1.0)
        surface = OpticSurface(coating=Fresnel())
        reflected = ray.refract_on_surface(surface, 1.5)
        assert reflected.energy == pytest.approx(0.04)
        assert ray.energy + reflected.energy == pytest.approx(1.0)
        npt.assert_allclose(reflected.dir, [0., 0., -1.])

    def test_total_internal_reflection(self):
        ray = tilted_ray(60.0)
        ray.set_refractive_index(1.5)
        reflected = ray.refract_on_surface(OpticSurface(), 1.0)
        self.assertIsNone(reflected)
        self.assertTrue(ray.valid)
        self.assertEqual(ray.number_of_bounces, 1)
        self.assertLess(ray.dir[2], 0.0)
        self.assertEqual(ray.refractive_index, 1.5)

    def test_passive_surface(self):
        ray = tilted_ray(20.0)
        d_in = ray.dir.copy()
        ray.refract_on_surface(OpticSurface())
        npt.assert_allclose(ray.dir, d_in)
        self.assertEqual(ray.number_of_refractions, 0)

    def test_hit_recorded_in_local_frame(self):
        surface = OpticSurface()
        surface.set_isometry(Isometry.along_z(20.0))
        ray = Ray([1., 2., 0.], [0., 0., 1.], 1000.0, 0.5)
        ray.refract_on_surface(surface, 1.5, bundle_uuid='bundle')
        rhm = surface.hit_map.get_rays_hit_map(0, 'bundle')
        npt.assert_allclose(rhm.positions(), [[1., 2.]])
        npt.assert_allclose(rhm.values(), [0.5])

    def test_missed_surface(self):
        surface = OpticSurface()
        ray = Ray([0., 0., -5.], [1., 0., 0.], 1000.0, 1.0)
        self.assertIsNone(ray.refract_on_surface(
            surface, 1.5, strategy=MissedSurfaceStrategy.IGNORE))
        self.assertTrue(ray.valid)
        npt.assert_allclose(ray.pos, [0., 0., -5.])
        self.assertIsNone(ray.refract_on_surface(surface, 1.5))
        self.assertFalse(ray.valid)

    def test_mirror_reflection(self):
        surface = OpticSurface(coating=ConstantR(0.9))
        ray = tilted_ray(45.0)
        self.assertTrue(ray.reflect_on_surface(surface))
        assert ray.energy == pytest.approx(0.9)
        npt.assert_allclose(ray.dir, [math.sqrt(0.5), 0., -math.sqrt(0.5)])
        self.assertEqual(ray.number_of_bounces, 0)

    def test_paraxial_lens(self):
        ray = Ray([0., 1., 0.], [0., 0., 1.], 1000.0, 1.0)
        ray.refract_paraxial(100.0, Isometry())
        assert ray.dir[1]/ray.dir[2] == pytest.approx(-0.01)
        ray.propagate(100.0/ray.dir[2])
        assert ray.pos[1] == pytest.approx(0.0, abs=1e-12)
        with self.assertRaises(OtherError):
            ray.refract_paraxial(0.0, Isometry())

    def test_split(self):
        ray = Ray.origin_along_z(1000.0, 1.0)
        split_ray = ray.split(0.6)
        assert ray.energy == pytest.approx(0.6)
        assert split_ray.energy == pytest.approx(0.4)
        with self.assertRaises(OtherError):
            ray.split(1.5)

    def test_filter_energy(self):
        ray = Ray.origin_along_z(1000.0, 2.0)
        ray.filter_energy(0.25)
        assert ray.energy == pytest.approx(0.5)
        with self.assertRaises(OtherError):
            ray.filter_energy(-0.1)

    def test_copy_is_independent(self):
        ray = Ray.origin_along_z(1000.0, 1.0)
        ray.propagate(1.0)
        ray_copy = ray.copy()
        ray_copy.propagate(1.0)
        self.assertEqual(ray.history_len(), 1)
        self.assertEqual(ray_copy.history_len(), 2)

    def test_transformed_ray(self):
        # quarter turn about z, then shifted
        iso = Isometry([[0., -1., 0.], [1., 0., 0.], [0., 0., 1.]],
                       [1., 2., 3.])
        ray = Ray([1., 0., 0.], [1., 0., 0.], 1000.0, 1.0)
        moved = ray.transformed_ray(iso)
        npt.assert_allclose(moved.pos, [1., 3., 3.])
        npt.assert_allclose(moved.dir, [0., 1., 0.])
        back = moved.inverse_transformed_ray(iso)
        npt.assert_allclose(back.pos, ray.pos, atol=1e-12)
        npt.assert_allclose(back.dir, ray.dir, atol=1e-12)
        npt.assert_allclose(ray.inverse_transformed_ray(iso).pos,
                            [-2., 0., -3.], atol=1e-12)


class RayTraceFunctionsTestCase(unittest.TestCase):

    def test_bend_tir(self):
        d = np.array([math.sin(math.radians(60.)), 0.,
                      math.cos(math.radians(60.))])
        with self.assertRaises(TraceTIRError):
            bend(d, np.array([0., 0., -1.]), 1.5, 1.0)

    def test_reflect(self):
        d_out = reflect(np.array([0., 0.6, 0.8]), np.array([0., 0., -1.]))
        npt.assert_allclose(d_out, [0., 0.6, -0.8])

    def test_grating_equation(self):
        g = grating_vector(1200.0, [1., 0., 0.])
        d_out = diffract_reflective(np.array([0., 0., 1.]),
                                    np.array([0., 0., -1.]), 1.0, 500.0,
                                    g, 1)
        # sin(theta) = lambda/period = 500 nm/833.3 nm
        npt.assert_allclose(d_out, [0.6, 0., -0.8], atol=1e-12)

    def test_zeroth_order_is_mirror(self):
        d_in = np.array([0., 0.6, 0.8])
        g = grating_vector(1200.0, [1., 0., 0.])
        d_out = diffract_reflective(d_in, np.array([0., 0., -1.]), 1.0,
                                    500.0, g, 0)
        npt.assert_allclose(d_out, [0., 0.6, -0.8], atol=1e-12)

    def test_evanescent_order(self):
        g = grating_vector(1200.0, [1., 0., 0.])
        with self.assertRaises(TraceEvanescentRayError):
            diffract_reflective(np.array([0., 0., 1.]),
                                np.array([0., 0., -1.]), 1.0, 500.0, g, 2)


if __name__ == '__main__':
    unittest.main(verbosity=2)
