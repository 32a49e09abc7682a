#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Copyright © 2024 The optiscene developers
""" Reflective elements: thin mirrors, parabolic mirrors and gratings

    Light entering at `input_1` is reflected back into the half space it came
    from and leaves through `output_1`. Both ports refer to the same physical
    surface at the node origin. The reflected energy is determined by the
    coating of the input surface, the transmitted part is discarded.

.. Created on Tue Apr  2 14:02:55 2024

.. codeauthor: The optiscene developers
"""
import math

from optiscene.opmerror import OtherError, PropertiesError
from optiscene.util.misc_math import isanumber
from optiscene.elem.coatings import ConstantR
from optiscene.elem.geosurface import Plane, Parabola
from optiscene.elem.opticsurface import OpticSurface
from optiscene.raytr.raytrace import grating_vector
from optiscene.raytr.lightdata import (DataEnergy, DataGeometric,
                                       DataGhostFocus)
from optiscene.nodes.opticnode import OpticNode
from optiscene.nodes.lenses import check_curvature, sphere_or_plane


class MirrorBase(OpticNode):
    """ Common analysis of single surface reflective elements """

    def __init__(self, geo_surface, name=None):
        super().__init__(name=name)
        surface = OpticSurface(geo_surface, coating=ConstantR(1.0))
        self.ports.create_input('input_1', surface)
        self.ports.create_output('output_1', surface)

    def set_surface_shape(self, geo_surface):
        """ replace the mirror shape, keeping coating and aperture """
        self.ports.surface('input_1').geo_surface = geo_surface
        if self.isometry is not None:
            self.set_isometry(self.isometry)

    def reflect_rays(self, port_name, rays, config, context):
        surface = self.surface(port_name)
        rays.reflect_on_surface(surface, config.missed_surface_strategy)

    def analyze_energy(self, incoming, config, context):
        in_port, out_port, data = self.single_path_energy(incoming)
        if data is None:
            return {}
        spectrum = data.spectrum.copy()
        coating = self.surface(in_port).coating
        if isinstance(coating, ConstantR):
            spectrum.filter_constant(coating.reflectivity)
        return {out_port: DataEnergy(spectrum)}

    def analyze_raytrace(self, incoming, config, context):
        in_port, out_port, data = self.single_path_rays(incoming)
        if data is None:
            return {}
        rays = data.rays
        self.reflect_rays(in_port, rays, config, context)
        self.apply_ray_limits(in_port, rays, config)
        return {out_port: DataGeometric(rays)}

    def analyze_ghostfocus(self, incoming, config, context, **kwargs):
        in_port = self.input_port_names()[0]
        out_port = self.output_port_names()[0]
        bundles = self.get_input_bundles(incoming, in_port)
        surface = self.surface(in_port)
        for rays in bundles:
            bounce_lvl = rays.bounce_lvl()
            self.reflect_rays(in_port, rays, config, context)
            rays.apodize(surface.aperture, surface.isometry)
            surface.evaluate_fluence_of_ray_bundle(rays,
                                                   config.fluence_estimator,
                                                   bounce_lvl)
        if not bundles:
            return {}
        return {out_port: DataGhostFocus(bundles)}


class ThinMirror(MirrorBase):
    """ Flat or spherical mirror of given radius of curvature (mm)

    A positive curvature gives a concave mirror for light travelling along
    the local +z axis.
    """
    node_type = 'mirror'

    def __init__(self, curvature=math.inf, name=None):
        check_curvature(curvature)
        super().__init__(sphere_or_plane(curvature), name=name)
        self.props.create('curvature', 'radius of curvature (mm)', curvature,
                          float, validator=check_curvature)

    def update_from_props(self, name):
        if name == 'curvature':
            self.set_surface_shape(sphere_or_plane(self.props.get(name)))


def check_oa_angle(angle):
    if not isanumber(angle) or not -90.0 < angle < 90.0:
        raise PropertiesError("off axis angle must be within (-90.0, 90.0) "
                              "degrees")


class ParabolicMirror(MirrorBase):
    """ On- or off-axis section of a paraboloid.

    Light travelling along the local +z axis is focused at the parent focal
    length `focal_length` (mm). A non-zero off-axis angle (degrees) selects
    the section of the paraboloid that folds the optical axis by that angle
    in the local yz plane.
    """
    node_type = 'parabolic mirror'

    def __init__(self, focal_length=100.0, oa_angle=0.0, name=None):
        if not isanumber(focal_length) or focal_length == 0.0 or \
           not math.isfinite(focal_length):
            raise OtherError("focal length must be != 0.0 and finite")
        check_oa_angle(oa_angle)
        super().__init__(Plane(), name=name)
        self.props.create('focal length', 'parent focal length (mm)',
                          focal_length, float)
        self.props.create('oa angle', 'off axis angle (deg)', oa_angle,
                          float, validator=check_oa_angle)
        self.set_surface_shape(self.build_parabola())

    def build_parabola(self):
        f = self.props.get('focal length')
        angle = math.radians(self.props.get('oa angle'))
        decenter = (0., 2.0*f*math.tan(angle/2.0))
        return Parabola(f, decenter)

    def update_from_props(self, name):
        if name in ('focal length', 'oa angle'):
            self.set_surface_shape(self.build_parabola())


def check_line_density(density):
    if not isanumber(density) or density <= 0.0 or \
       not math.isfinite(density):
        raise PropertiesError("line density must be > 0.0 and finite")


class ReflectiveGrating(MirrorBase):
    """ Flat reflective grating with grooves along the local y axis.

    Args:
        line_density: lines per mm
        diffraction_order: the diffraction order sent to `output_1`
    """
    node_type = 'reflective grating'

    def __init__(self, line_density=1200.0, diffraction_order=1, name=None):
        try:
            check_line_density(line_density)
        except PropertiesError as err:
            raise OtherError(str(err)) from err
        super().__init__(Plane(), name=name)
        self.props.create('line density', 'lines per mm', line_density,
                          float, validator=check_line_density)
        self.props.create('diffraction order', 'used diffraction order',
                          diffraction_order, int)

    def grating_vector(self, port_name):
        """ grating vector of the placed grating in world coordinates """
        surface = self.surface(port_name)
        local_gv = grating_vector(self.props.get('line density'),
                                  [1., 0., 0.])
        return surface.isometry.transform_vector(local_gv)

    def reflect_rays(self, port_name, rays, config, context):
        rays.diffract_on_periodic_surface(
            self.surface(port_name), context.ambient_refractive_index,
            self.grating_vector(port_name),
            self.props.get('diffraction order'),
            config.missed_surface_strategy)
