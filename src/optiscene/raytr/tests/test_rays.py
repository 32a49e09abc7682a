#!/usr/bin/env python3
# -*- coding: utf-8 -*-
""" tests for ray bundles and ray distributions

.. Created on Thu Mar 28 15:47:10 2024

.. codeauthor: The optiscene developers
"""
import unittest

import numpy as np
import numpy.testing as npt
import pytest

from optiscene.opmerror import OtherError
from optiscene.elem.aperture import Circular
from optiscene.elem.coatings import Fresnel
from optiscene.elem.fluence import FluenceEstimator
from optiscene.elem.hitmap import FluenceHitPoint
from optiscene.elem.medium import RefrIndexConst
from optiscene.elem.opticsurface import OpticSurface
from optiscene.util.transform import Isometry
from optiscene.raytr import distributions as dist
from optiscene.raytr.ray import Ray
from optiscene.raytr.rays import Rays


class DistributionTestCase(unittest.TestCase):

    def test_hexapolar_count(self):
        for n in range(5):
            pts = dist.Hexapolar(1.0, n).generate()
            self.assertEqual(len(pts), 1 + 3*n*(n + 1))

    def test_hexapolar_outer_ring(self):
        pts = dist.Hexapolar(2.0, 3).generate()
        radii = np.linalg.norm(pts[:, :2], axis=1)
        assert radii.max() == pytest.approx(2.0)

    def test_hexapolar_zero_radius(self):
        self.assertEqual(len(dist.Hexapolar(0.0, 4).generate()), 1)

    def test_grid(self):
        pts = dist.Grid(2.0, 1.0, 3, 2).generate()
        self.assertEqual(pts.shape, (6, 3))
        npt.assert_allclose(pts[:, 0].min(), -1.0)
        npt.assert_allclose(pts[:, 1].max(), 0.5)

    def test_random_is_reproducible(self):
        pts1 = dist.Random(1.0, 1.0, 50, seed=7).generate()
        pts2 = dist.Random(1.0, 1.0, 50, seed=7).generate()
        npt.assert_array_equal(pts1, pts2)
        self.assertTrue(np.all(np.abs(pts1[:, :2]) <= 0.5))

    def test_gaussian_weights(self):
        pts = dist.Hexapolar(3.0, 6).generate()
        energies = dist.General2DGaussian(2.0).apply(pts)
        assert energies.sum() == pytest.approx(2.0)
        self.assertEqual(np.argmax(energies), 0)
        with self.assertRaises(OtherError):
            dist.General2DGaussian(1.0, sigma=(0.0, 1.0))


class RaysTestCase(unittest.TestCase):

    def setUp(self):
        self.rays = Rays.new_uniform_collimated(1054.0, 1.0,
                                                dist.Hexapolar(1.0, 2))

    def test_uniform_collimated(self):
        self.assertEqual(self.rays.nr_of_rays(), 19)
        assert self.rays.total_energy() == pytest.approx(1.0)
        self.assertEqual(self.rays.central_wavelength(), 1054.0)
        npt.assert_allclose(self.rays.centroid(), [0., 0., 0.], atol=1e-12)

    def test_copy_keeps_uuid(self):
        rays_copy = self.rays.copy()
        self.assertEqual(rays_copy.uuid, self.rays.uuid)
        rays_copy.propagate(5.0)
        npt.assert_allclose(self.rays.centroid()[2], 0.0)

    def test_threshold(self):
        self.rays.rays[0].energy = 1.0e-6
        self.rays.invalidate_by_threshold_energy(1.0e-3)
        self.assertEqual(self.rays.nr_of_rays(), 18)
        self.assertEqual(self.rays.nr_of_rays(valid_only=False), 19)

    def test_negative_threshold(self):
        self.rays.invalidate_by_threshold_energy(-1.0)
        self.assertEqual(self.rays.nr_of_rays(), 19)

    def test_split(self):
        split_rays = self.rays.split(0.6)
        assert self.rays.total_energy() == pytest.approx(0.6)
        assert split_rays.total_energy() == pytest.approx(0.4)
        self.assertNotEqual(split_rays.uuid, self.rays.uuid)

    def test_bounce_filter(self):
        self.rays.rays[0].number_of_bounces = 2
        self.rays.rays[1].number_of_bounces = 1
        self.rays.filter_by_nr_of_bounces(1)
        self.assertEqual(self.rays.nr_of_rays(), 18)
        self.assertFalse(self.rays.rays[0].valid)

    def test_refraction_conserves_energy(self):
        surface = OpticSurface(coating=Fresnel())
        surface.set_isometry(Isometry.along_z(10.0))
        reflected = self.rays.refract_on_surface(surface,
                                                 RefrIndexConst(1.5))
        assert self.rays.total_energy() + reflected.total_energy() == \
            pytest.approx(1.0)
        self.assertEqual(reflected.parent_id, self.rays.uuid)
        self.assertNotEqual(reflected.uuid, self.rays.uuid)
        self.assertEqual(reflected.bounce_lvl(), 1)
        self.assertEqual(self.rays.rays[0].refractive_index, 1.5)
        self.assertEqual(len(surface.hit_map.get_rays_hit_map(
            0, self.rays.uuid)), 19)

    def test_apodize(self):
        self.assertFalse(self.rays.apodize(None, Isometry()))
        self.assertTrue(self.rays.apodize(Circular(radius=0.75),
                                          Isometry()))
        # center and inner ring pass
        self.assertEqual(self.rays.nr_of_rays(), 7)

    def test_point_source(self):
        rays = Rays.new_hexapolar_point_source([0., 0., 0.], 20.0, 3,
                                               632.8, 1.0)
        self.assertEqual(len(rays), 37)
        assert rays.total_energy() == pytest.approx(1.0)
        angles = [np.degrees(np.arccos(r.dir[2])) for r in rays]
        assert max(angles) == pytest.approx(10.0)
        single = Rays.new_hexapolar_point_source([0., 0., 0.], 0.0, 3,
                                                 632.8, 1.0)
        self.assertEqual(len(single), 1)
        with self.assertRaises(OtherError):
            Rays.new_hexapolar_point_source([0., 0., 0.], 180.0, 3,
                                            632.8, 1.0)

    def test_spectrum(self):
        rays = Rays([Ray.origin_along_z(500.0, 1.0),
                     Ray.origin_along_z(1000.0, 3.0)])
        assert rays.central_wavelength() == pytest.approx(875.0)
        self.assertEqual(rays.wavelength_range(), (500.0, 1000.0))
        assert rays.to_spectrum().total_energy() == pytest.approx(4.0)

    def test_position_history(self):
        self.rays.propagate(10.0)
        df = self.rays.position_history_df()
        self.assertEqual(len(df), 2*19)
        npt.assert_allclose(df.loc[(0, 1), 'z'], 10.0)

    def test_optical_axis_ray(self):
        axis_ray = self.rays.get_optical_axis_ray()
        assert axis_ray.wvl == pytest.approx(1054.0)
        self.assertEqual(axis_ray.energy, 1.0)
        npt.assert_allclose(axis_ray.pos, [0., 0., 0.])
        npt.assert_allclose(axis_ray.dir, [0., 0., 1.])
        with self.assertRaises(OtherError):
            Rays().get_optical_axis_ray()


class FluenceHelperTestCase(unittest.TestCase):

    def setUp(self):
        self.rays = Rays.new_collimated_w_fluence_helper(
            1000.0, dist.UniformFluence(1.0), dist.Grid(4.0, 4.0, 5, 5))

    def fluence_at(self, z):
        surface = OpticSurface()
        surface.set_isometry(Isometry.along_z(z))
        self.rays.refract_on_surface(surface)
        rhm = surface.hit_map.get_rays_hit_map(0, self.rays.uuid)
        self.assertIs(rhm.kind, FluenceHitPoint)
        self.assertEqual(len(rhm), 25)
        return rhm.calc_fluence(FluenceEstimator.HELPER_RAYS)

    def test_helper_rays(self):
        for r in self.rays:
            self.assertEqual(len(r.helper_rays.rays), 3)
            assert r.helper_rays.init_area == pytest.approx(1.0e-6)
        # 1 J/cm² on the 1 mm² cell of an inner ray
        assert self.rays.rays[12].energy == pytest.approx(0.01)

    def test_collimated_fluence(self):
        self.rays.propagate(10.0)
        data = self.fluence_at(20.0)
        assert data.peak == pytest.approx(1.0)
        assert data.average == pytest.approx(1.0)

    def test_focused_fluence(self):
        self.rays.refract_paraxial(100.0, Isometry())
        self.rays.propagate(40.0)
        # half way to the focus the beam area is a quarter
        data = self.fluence_at(50.0)
        assert data.peak == pytest.approx(4.0)
        assert data.average == pytest.approx(4.0)


if __name__ == '__main__':
    unittest.main(verbosity=2)
