#!/usr/bin/env python3
# -*- coding: utf-8 -*-
""" tests for the node catalogue

.. Created on Fri Apr  5 14:20:33 2024

.. codeauthor: The optiscene developers
"""
import math
import unittest

import numpy as np
import numpy.testing as npt
import pytest

from optiscene.opmerror import AnalysisError, OtherError, PropertiesError
from optiscene.util.spectrum import Spectrum
from optiscene.util.transform import Isometry
from optiscene.elem.coatings import ConstantR
from optiscene.elem.medium import RefrIndexConst
from optiscene.analysis.config import (EnergyConfig, RayTraceConfig,
                                       GhostFocusConfig, SceneContext)
from optiscene.raytr.ray import Ray
from optiscene.raytr.rays import Rays
from optiscene.raytr.lightdata import (DataEnergy, DataGeometric,
                                       DataGhostFocus)
from optiscene.nodes.catalog import (create_node, node_types, Source, Dummy,
                                     BeamSplitter, IdealFilter, EnergyMeter,
                                     Spectrometer, SpotDiagram,
                                     FluenceDetector, WaveFront, Lens,
                                     Wedge, ParaxialSurface, ThinMirror,
                                     ParabolicMirror, ReflectiveGrating,
                                     NodeReference)


def laser_line(wvl=632.8, energy=1.0):
    return DataEnergy(Spectrum.from_laser_lines([(wvl, energy)], 0.1))


def ray_fan(heights, z=-10.0, wvl=1000.0, energy=0.1):
    """ collimated rays along +z in the yz plane """
    return Rays([Ray([0., h, z], [0., 0., 1.], wvl, energy)
                 for h in heights])


def axis_crossing(ray):
    """ z where a ray in the yz plane crosses the optical axis """
    return ray.pos[2] - ray.pos[1]*ray.dir[2]/ray.dir[1]


class CatalogTestCase(unittest.TestCase):

    def test_create_node(self):
        lens = create_node('lens', name='L1')
        self.assertIsInstance(lens, Lens)
        self.assertEqual(lens.name, 'L1')
        self.assertEqual(lens.props.get('node_type'), 'lens')
        with self.assertRaises(OtherError):
            create_node('flux capacitor')

    def test_node_types(self):
        types = node_types()
        for node_type in ('source', 'beam splitter', 'ideal filter',
                          'energy meter', 'group', 'reference', 'mirror'):
            self.assertIn(node_type, types)
        self.assertEqual(types, sorted(types))

    def test_unique_ids(self):
        self.assertNotEqual(Dummy().uuid, Dummy().uuid)


class EnergyNodesTestCase(unittest.TestCase):

    def setUp(self):
        self.config = EnergyConfig()
        self.context = SceneContext()

    def test_source(self):
        source = Source(laser_line())
        result = source.analyze({}, self.config, self.context)
        assert result['output_1'].total_energy() == pytest.approx(1.0)
        with self.assertRaises(AnalysisError):
            Source().analyze({}, self.config, self.context)

    def test_source_cannot_be_inverted(self):
        source = Source(laser_line())
        with self.assertRaises(PropertiesError):
            source.set_property('inverted', True)
        self.assertFalse(source.inverted)

    def test_ray_source_gives_spectrum(self):
        source = Source(DataGeometric(ray_fan([0., 1.], energy=0.5)))
        result = source.analyze({}, self.config, self.context)
        self.assertIsInstance(result['output_1'], DataEnergy)
        assert result['output_1'].total_energy() == pytest.approx(1.0)

    def test_beam_splitter(self):
        splitter = BeamSplitter(0.6)
        result = splitter.analyze({'input_1': laser_line()}, self.config,
                                  self.context)
        assert result['out1_trans1_refl2'].total_energy() == \
            pytest.approx(0.6)
        assert result['out2_trans2_refl1'].total_energy() == \
            pytest.approx(0.4)

    def test_beam_splitter_both_inputs(self):
        splitter = BeamSplitter(0.6)
        result = splitter.analyze({'input_1': laser_line(energy=1.0),
                                   'input_2': laser_line(energy=2.0)},
                                  self.config, self.context)
        total = sum(data.total_energy() for data in result.values())
        assert total == pytest.approx(3.0)
        assert result['out1_trans1_refl2'].total_energy() == \
            pytest.approx(0.6 + 0.8)

    def test_beam_combine_two_wavelengths(self):
        splitter = BeamSplitter(0.6)
        result = splitter.analyze({'input_1': laser_line(632.8, 1.0),
                                   'input_2': laser_line(1064.0, 1.0)},
                                  self.config, self.context)
        out1 = result['out1_trans1_refl2'].spectrum
        out2 = result['out2_trans2_refl1'].spectrum
        assert out1.total_energy() == pytest.approx(1.0)
        assert out2.total_energy() == pytest.approx(1.0)
        # both lines are kept on each output
        assert out1.center_wavelength() == \
            pytest.approx(0.6*632.8 + 0.4*1064.0, abs=0.1)

    def test_beam_splitter_config(self):
        with self.assertRaises(OtherError):
            BeamSplitter(1.5)
        splitter = BeamSplitter()
        with self.assertRaises(PropertiesError):
            splitter.set_splitting_config(-0.1)
        self.assertEqual(splitter.splitting_config, 0.5)

    def test_inverted_beam_splitter(self):
        splitter = BeamSplitter(0.6)
        splitter.set_property('inverted', True)
        self.assertEqual(splitter.input_port_names(),
                         ['out1_trans1_refl2', 'out2_trans2_refl1'])
        result = splitter.analyze({'out1_trans1_refl2': laser_line()},
                                  self.config, self.context)
        assert result['input_1'].total_energy() == pytest.approx(0.6)
        assert result['input_2'].total_energy() == pytest.approx(0.4)

    def test_ideal_filter(self):
        flt = IdealFilter(0.3)
        result = flt.analyze({'input_1': laser_line()}, self.config,
                             self.context)
        assert result['output_1'].total_energy() == pytest.approx(0.3)
        flt.set_optical_density(2.0)
        assert flt.filter_type == pytest.approx(0.01)
        assert flt.optical_density() == pytest.approx(2.0)
        with self.assertRaises(OtherError):
            IdealFilter(1.2)

    def test_energy_meter(self):
        meter = EnergyMeter()
        self.assertIsNone(meter.total_energy())
        result = meter.analyze({'input_1': laser_line(energy=2.0)},
                               self.config, self.context)
        assert result['output_1'].total_energy() == pytest.approx(2.0)
        assert meter.total_energy() == pytest.approx(2.0)
        self.assertIn('energy', meter.report().data)
        meter.reset_data()
        self.assertIsNone(meter.total_energy())

    def test_spectrometer(self):
        spectrometer = Spectrometer()
        spectrometer.analyze({'input_1': laser_line()}, self.config,
                             self.context)
        assert spectrometer.spectrum().center_wavelength() == \
            pytest.approx(632.8, abs=0.1)

    def test_unsupported_mode(self):
        result = SpotDiagram().analyze({'input_1': laser_line()},
                                       self.config, self.context)
        self.assertEqual(result, {})

    def test_wrong_light_data(self):
        with self.assertRaises(AnalysisError):
            Dummy().analyze({'input_1': DataGeometric(ray_fan([0.]))},
                            self.config, self.context)

    def test_mirror_energy(self):
        mirror = ThinMirror()
        mirror.set_coating('input_1', ConstantR(0.9))
        result = mirror.analyze({'input_1': laser_line()}, self.config,
                                self.context)
        assert result['output_1'].total_energy() == pytest.approx(0.9)


class RayTraceNodesTestCase(unittest.TestCase):

    def setUp(self):
        self.config = RayTraceConfig()
        self.context = SceneContext()

    def trace(self, node, rays, port='input_1'):
        if node.isometry is None:
            node.set_isometry(Isometry())
        result = node.analyze({port: DataGeometric(rays)}, self.config,
                              self.context)
        return next(iter(result.values())).rays

    def test_source_pose(self):
        source = Source(DataGeometric(ray_fan([0.], z=0.0)))
        source.set_isometry(Isometry.along_z(5.0))
        result = source.analyze({}, self.config, self.context)
        rays = result['output_1'].rays
        npt.assert_allclose(rays.rays[0].pos, [0., 0., 5.])
        self.assertEqual(rays.node_origin, source.uuid)
        # the source data itself is untouched
        npt.assert_allclose(source.light_data.rays.rays[0].pos,
                            [0., 0., 0.])

    def test_plane_parallel_plate(self):
        plate = Lens(math.inf, math.inf, 10.0, 1.5)
        rays = self.trace(plate, ray_fan([0., 1.]))
        for ray in rays:
            npt.assert_allclose(ray.dir, [0., 0., 1.])
            assert ray.pos[2] == pytest.approx(10.0)
            self.assertEqual(ray.refractive_index, 1.0)
            self.assertEqual(ray.number_of_refractions, 2)

    def test_plano_convex_focus(self):
        lens = Lens(50.0, math.inf, 5.0, 1.5)
        rays = self.trace(lens, ray_fan([0.1]))
        # back focal distance f - t/n behind the rear surface
        assert axis_crossing(rays.rays[0]) == \
            pytest.approx(5.0 + 100.0 - 5.0/1.5, rel=1e-3)

    def test_lens_properties(self):
        lens = Lens()
        lens.set_isometry(Isometry())
        lens.set_property('center thickness', 4.0)
        self.assertEqual(lens.node_length(), 4.0)
        npt.assert_allclose(lens.surface('output_1').isometry.translation,
                            [0., 0., 4.])
        with self.assertRaises(PropertiesError):
            lens.set_property('front curvature', 0.0)
        with self.assertRaises(PropertiesError):
            lens.set_property('center thickness', -1.0)

    def test_wedge_deviation(self):
        wedge = Wedge(10.0, 5.0, 1.5)
        rays = self.trace(wedge, ray_fan([0.]))
        deviation = math.degrees(math.acos(rays.rays[0].dir[2]))
        expected = math.degrees(math.asin(1.5*math.sin(math.radians(5.0))))
        assert deviation == pytest.approx(expected - 5.0, rel=1e-6)

    def test_paraxial_surface(self):
        lens = ParaxialSurface(50.0)
        rays = self.trace(lens, ray_fan([1.0, -2.0]))
        for ray in rays:
            assert axis_crossing(ray) == pytest.approx(50.0)
        with self.assertRaises(OtherError):
            ParaxialSurface(0.0)

    def test_flat_mirror(self):
        mirror = ThinMirror()
        rays = self.trace(mirror, ray_fan([0., 1.]))
        for ray in rays:
            npt.assert_allclose(ray.dir, [0., 0., -1.])
            assert ray.energy == pytest.approx(0.1)
            self.assertEqual(ray.number_of_bounces, 0)

    def test_parabolic_mirror_focus(self):
        mirror = ParabolicMirror(100.0)
        rays = self.trace(mirror, ray_fan([2.0, 5.0]))
        for ray in rays:
            assert axis_crossing(ray) == pytest.approx(-100.0)

    def test_grating(self):
        grating = ReflectiveGrating(1200.0, 1)
        rays = Rays([Ray([0., 0., -10.], [0., 0., 1.], 500.0, 1.0)])
        rays = self.trace(grating, rays)
        npt.assert_allclose(rays.rays[0].dir, [0.6, 0., -0.8], atol=1e-12)
        with self.assertRaises(OtherError):
            ReflectiveGrating(-1.0)

    def test_evanescent_grating_order(self):
        grating = ReflectiveGrating(1200.0, 2)
        rays = Rays([Ray([0., 0., -10.], [0., 0., 1.], 500.0, 1.0)])
        rays = self.trace(grating, rays)
        self.assertEqual(rays.nr_of_rays(), 0)

    def test_ideal_filter(self):
        flt = IdealFilter(0.5)
        rays = self.trace(flt, ray_fan([0., 1.]))
        assert rays.total_energy() == pytest.approx(0.1)

    def test_spot_diagram(self):
        spot = SpotDiagram()
        spot.set_isometry(Isometry.along_z(20.0))
        self.trace(spot, ray_fan([1.0, 3.0]))
        data = spot.report().data
        assert data['centroid y (mm)'] == pytest.approx(2.0)
        assert data['geo beam radius (mm)'] == pytest.approx(1.0)

    def test_fluence_detector(self):
        detector = FluenceDetector()
        rays = Rays([Ray([x, y, -5.], [0., 0., 1.], 1000.0, 0.01)
                     for x in np.linspace(0., 9., 10)
                     for y in np.linspace(0., 9., 10)])
        self.trace(detector, rays)
        data = detector.fluence_data()
        assert data.peak > 0.0
        assert detector.report().data['Total energy'] == pytest.approx(1.0)

    def test_wavefront_of_collimated_beam(self):
        monitor = WaveFront()
        self.trace(monitor, ray_fan([0., 1., 2.], wvl=1000.0))
        wf_map = monitor.wavefront_maps()[1000.0]
        npt.assert_allclose(wf_map[:, 2], 0.0, atol=1e-9)

    def test_beam_splitter_rays(self):
        splitter = BeamSplitter(0.7)
        splitter.set_isometry(Isometry())
        result = splitter.analyze({'input_1': DataGeometric(
            ray_fan([0., 1.]))}, self.config, self.context)
        assert result['out1_trans1_refl2'].total_energy() == \
            pytest.approx(0.14)
        assert result['out2_trans2_refl1'].total_energy() == \
            pytest.approx(0.06)


class GhostFocusSurfaceTestCase(unittest.TestCase):

    def setUp(self):
        self.dummy = Dummy()
        self.dummy.set_isometry(Isometry())

    def inclined_bundle(self, angle, refractive_index):
        """ 3x3 grid of rays inside a medium, tilted in the xz plane """
        direction = [math.sin(math.radians(angle)), 0.,
                     math.cos(math.radians(angle))]
        rays = Rays()
        for x in (0., 1., 2.):
            for y in (0., 1., 2.):
                ray = Ray([x, y, -1.], direction, 1000.0, 0.1)
                ray.set_refractive_index(refractive_index)
                rays.add_ray(ray)
        return rays

    def test_critical_fluence_after_total_reflection(self):
        rays = self.inclined_bundle(60.0, 1.5)
        with self.assertLogs('optiscene.elem.opticsurface',
                             level='WARNING') as cm:
            self.dummy.pass_through_surface('input_1', RefrIndexConst(1.0),
                                            [rays], GhostFocusConfig())
        self.assertTrue(any('critical fluence' in msg for msg in cm.output))
        self.assertTrue(all(r.number_of_bounces == 1 for r in rays.rays))
        hit_map = self.dummy.surface('input_1').hit_map
        self.assertEqual(hit_map.critical_fluence[rays.uuid].bounce, 0)
        # 0.1 J on the corner cells, clipped to (0.5 + 1/3) mm squares
        assert hit_map.critical_fluence[rays.uuid].peak == \
            pytest.approx(14.4)

    def test_critical_fluence_at_mirror(self):
        mirror = ThinMirror()
        mirror.set_isometry(Isometry())
        rays = self.inclined_bundle(0.0, 1.0)
        with self.assertLogs('optiscene.elem.opticsurface', level='WARNING'):
            mirror.analyze({'input_1': DataGhostFocus([rays])},
                           GhostFocusConfig(), SceneContext(), bounce_lvl=0)
        hit_map = mirror.surface('input_1').hit_map
        self.assertEqual(hit_map.critical_fluence[rays.uuid].bounce, 0)


class ReferenceTestCase(unittest.TestCase):

    def setUp(self):
        self.lens = Lens(math.inf, math.inf, 10.0, 1.5, name='plate')
        self.lens.set_isometry(Isometry())
        self.ref = NodeReference(self.lens)
        self.ref.set_property('inverted', True)

    def test_ports(self):
        self.assertTrue(self.ref.refers_to(self.lens.uuid))
        self.assertEqual(self.ref.input_port_names(), ['output_1'])
        self.assertEqual(self.ref.output_port_names(), ['input_1'])
        self.assertIs(self.ref.surface('input_1'),
                      self.lens.surface('input_1'))
        self.assertEqual(self.ref.props.get('reference id'), self.lens.uuid)

    def test_backward_pass(self):
        rays = Rays([Ray([0., 1., 20.], [0., 0., -1.], 1000.0, 1.0)])
        result = self.ref.analyze({'output_1': DataGeometric(rays)},
                                  RayTraceConfig(), SceneContext())
        ray = result['input_1'].rays.rays[0]
        npt.assert_allclose(ray.pos, [0., 1., 0.])
        npt.assert_allclose(ray.dir, [0., 0., -1.])
        self.assertFalse(self.lens.inverted)
        # hits are recorded on the surfaces of the referenced lens
        self.assertFalse(self.lens.surface('output_1').hit_map.is_empty())
        self.assertEqual(self.ref.report().data, {'reference': 'plate'})

    def test_missing_reference(self):
        with self.assertRaises(AnalysisError):
            NodeReference().analyze({}, EnergyConfig(), SceneContext())


if __name__ == '__main__':
    unittest.main(verbosity=2)
