#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Copyright © 2024 The optiscene developers
""" Refractive elements: lenses, wedges and paraxial surfaces

    A refractive element has a front surface at port `input_1`, located at
    the node origin, and a rear surface at port `output_1`, located one
    center thickness downstream along the local z axis. Rays enter the
    element medium at the front surface and return to the ambient medium of
    the scene at the rear surface.

    Curvatures are radii of curvature in mm; an infinite radius gives a flat
    surface. A positive radius places the center of curvature downstream of
    the surface vertex, i.e. a biconvex lens has a positive front and a
    negative rear radius.

.. Created on Tue Apr  2 09:31:26 2024

.. codeauthor: The optiscene developers
"""
import math

from optiscene.opmerror import OtherError, PropertiesError
from optiscene.util.misc_math import isanumber
from optiscene.util.transform import Isometry
from optiscene.elem.geosurface import Plane, Sphere, Cylinder
from optiscene.elem.medium import decode_medium
from optiscene.raytr.lightdata import DataGeometric, DataGhostFocus
from optiscene.nodes.opticnode import OpticNode


def check_thickness(thickness):
    if not isanumber(thickness) or thickness < 0.0 or \
       not math.isfinite(thickness):
        raise PropertiesError("center thickness must be >= 0.0 and finite")


def check_curvature(curvature):
    if not isanumber(curvature) or curvature == 0.0 or \
       math.isnan(curvature):
        raise PropertiesError("curvature must be != 0.0 and not NaN")


def sphere_or_plane(curvature):
    if math.isinf(curvature):
        return Plane()
    return Sphere(curvature)


def cylinder_or_plane(curvature):
    if math.isinf(curvature):
        return Plane()
    return Cylinder(curvature)


class RefractiveElement(OpticNode):
    """ Base class of elements made of one block of refractive material.

    Subclasses define the surface shapes in :meth:`build_surfaces`.
    """

    def __init__(self, center_thickness, refractive_index, name=None):
        super().__init__(name=name)
        check_thickness(center_thickness)
        self.props.create('center thickness',
                          'center thickness of the element (mm)',
                          center_thickness, float, validator=check_thickness)
        self.props.create('refractive index',
                          'refractive index model of the element',
                          decode_medium(refractive_index), object)
        self.ports.create_input('input_1')
        self.ports.create_output('output_1')

    @property
    def center_thickness(self):
        return self.props.get('center thickness')

    @property
    def refractive_index(self):
        return self.props.get('refractive index')

    def set_refractive_index(self, *inputs):
        """ set the material, see :func:`~.medium.decode_medium` """
        self.set_property('refractive index', decode_medium(*inputs))

    def node_length(self):
        return self.center_thickness

    def build_surfaces(self):
        """ return (front, rear) geometric surfaces """
        return Plane(), Plane()

    def rear_anchor(self):
        return Isometry.along_z(self.center_thickness)

    def update_surfaces(self):
        front, rear = self.build_surfaces()
        front_surface = self.ports.surface('input_1')
        rear_surface = self.ports.surface('output_1')
        front_surface.geo_surface = front
        rear_surface.geo_surface = rear
        rear_surface.anchor = self.rear_anchor()
        if self.isometry is not None:
            self.set_isometry(self.isometry)

    def update_from_props(self, name):
        if name != 'name':
            self.update_surfaces()

    def analyze_energy(self, incoming, config, context):
        in_port, out_port, data = self.single_path_energy(incoming)
        if data is None:
            return {}
        return {out_port: data}

    def analyze_raytrace(self, incoming, config, context):
        in_port, out_port, data = self.single_path_rays(incoming)
        if data is None:
            return {}
        rays = data.rays
        self.trace_through_surface(in_port, self.refractive_index, rays,
                                   config)
        self.trace_through_surface(out_port, context.ambient_refractive_index,
                                   rays, config)
        return {out_port: DataGeometric(rays)}

    def analyze_ghostfocus(self, incoming, config, context, **kwargs):
        in_port = self.input_port_names()[0]
        out_port = self.output_port_names()[0]
        bundles = self.get_input_bundles(incoming, in_port)
        self.pass_through_surface(in_port, self.refractive_index, bundles,
                                  config)
        self.pass_through_surface(out_port, context.ambient_refractive_index,
                                  bundles, config)
        if not bundles:
            return {}
        return {out_port: DataGhostFocus(bundles)}


class Lens(RefractiveElement):
    """ Spherical lens with front and rear radius of curvature (mm) """
    node_type = 'lens'

    def __init__(self, front_curvature=500.0, rear_curvature=-500.0,
                 center_thickness=10.0, refractive_index=1.5, name=None):
        super().__init__(center_thickness, refractive_index, name=name)
        check_curvature(front_curvature)
        check_curvature(rear_curvature)
        self.props.create('front curvature',
                          'radius of curvature of the front surface (mm)',
                          front_curvature, float, validator=check_curvature)
        self.props.create('rear curvature',
                          'radius of curvature of the rear surface (mm)',
                          rear_curvature, float, validator=check_curvature)
        self.update_surfaces()

    def build_surfaces(self):
        return (sphere_or_plane(self.props.get('front curvature')),
                sphere_or_plane(self.props.get('rear curvature')))


class CylindricLens(Lens):
    """ Lens with cylindrical surfaces, curved in the local xz plane """
    node_type = 'cylindric lens'

    def build_surfaces(self):
        return (cylinder_or_plane(self.props.get('front curvature')),
                cylinder_or_plane(self.props.get('rear curvature')))


def check_wedge_angle(angle):
    if not isanumber(angle) or not -90.0 < angle < 90.0:
        raise PropertiesError("wedge angle must be within (-90.0, 90.0) "
                              "degrees")


class Wedge(RefractiveElement):
    """ Flat plate whose rear surface is tilted about the local x axis.

    Args:
        center_thickness: thickness on the optical axis (mm)
        wedge_angle: tilt of the rear surface (degrees)
        refractive_index: the material
    """
    node_type = 'wedge'

    def __init__(self, center_thickness=10.0, wedge_angle=0.0,
                 refractive_index=1.5, name=None):
        super().__init__(center_thickness, refractive_index, name=name)
        check_wedge_angle(wedge_angle)
        self.props.create('wedge angle', 'tilt of the rear surface (deg)',
                          wedge_angle, float, validator=check_wedge_angle)
        self.update_surfaces()

    @property
    def wedge_angle(self):
        return self.props.get('wedge angle')

    def rear_anchor(self):
        return Isometry.from_euler([0., 0., self.center_thickness],
                                   [self.wedge_angle, 0., 0.])


def check_focal_length(focal_length):
    if not isanumber(focal_length) or focal_length == 0.0 or \
       not math.isfinite(focal_length):
        raise PropertiesError("focal length must be != 0.0 and finite")


class ParaxialSurface(OpticNode):
    """ Ideal thin lens of given focal length (mm).

    Rays are deflected so that parallel rays meet in the focal plane; the
    ray height is not changed.
    """
    node_type = 'paraxial surface'

    def __init__(self, focal_length=100.0, name=None):
        super().__init__(name=name)
        try:
            check_focal_length(focal_length)
        except PropertiesError as err:
            raise OtherError(str(err)) from err
        self.props.create('focal length', 'focal length (mm)', focal_length,
                          float, validator=check_focal_length)
        self.ports.create_input('input_1')
        self.ports.create_output('output_1')

    @property
    def focal_length(self):
        return self.props.get('focal length')

    def analyze_energy(self, incoming, config, context):
        in_port, out_port, data = self.single_path_energy(incoming)
        if data is None:
            return {}
        return {out_port: data}

    def analyze_raytrace(self, incoming, config, context):
        in_port, out_port, data = self.single_path_rays(incoming)
        if data is None:
            return {}
        rays = data.rays
        surface = self.surface(in_port)
        self.trace_through_surface(in_port, None, rays, config)
        rays.refract_paraxial(self.focal_length, surface.isometry)
        return {out_port: DataGeometric(rays)}

    def analyze_ghostfocus(self, incoming, config, context, **kwargs):
        in_port = self.input_port_names()[0]
        out_port = self.output_port_names()[0]
        bundles = self.get_input_bundles(incoming, in_port)
        surface = self.surface(in_port)
        self.pass_through_surface(in_port, None, bundles, config)
        for rays in bundles:
            rays.refract_paraxial(self.focal_length, surface.isometry)
        if not bundles:
            return {}
        return {out_port: DataGhostFocus(bundles)}
