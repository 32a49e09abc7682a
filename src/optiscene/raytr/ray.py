#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Copyright © 2024 The optiscene developers
""" A single geometric ray

    A :class:`Ray` carries its position and direction in world coordinates,
    its energy and vacuum wavelength, the refractive index of the medium it
    currently travels in and the optical path length accumulated so far.
    The number of reflections (bounces) and refractions are counted; the
    bounce counter never decreases and is used to bound ghost focus
    analysis.

    Position and direction arrays are never modified in place, they are
    always replaced. This allows cheap copies of rays.

.. Created on Fri Mar 22 11:36:08 2024

.. codeauthor: The optiscene developers
"""
import copy
import math

import numpy as np
from numpy.linalg import norm

from optiscene.opmerror import OtherError
from optiscene.util.misc_math import normalize
from optiscene.util.transform import Isometry
from optiscene.util.spectrum import Spectrum
from optiscene.raytr.raytrace import (bend, reflect, diffract_reflective,
                                      MissedSurfaceStrategy)
from optiscene.raytr.traceerror import (TraceMissedSurfaceError,
                                        TraceTIRError,
                                        TraceEvanescentRayError)


def check_refractive_index(n):
    if not (math.isfinite(n) and n >= 1.0):
        raise OtherError("the refractive index must be >=1.0 and finite")
    return n


class Ray():
    """ Geometric ray.

    Attributes:
        pos: current position (mm)
        dir: current unit direction
        prev_dir: direction before the last change of direction, or None
        pos_hist: list of previous positions
        energy: energy (J)
        wvl: vacuum wavelength (nm)
        number_of_bounces: number of reflections
        number_of_refractions: number of refractions
        valid: False if the ray should not be propagated any further
        path_length: optical path length (mm)
        refractive_index: index of the medium the ray travels in
        helper_rays: optional :class:`~.rays.FluenceRays`
    """

    def __init__(self, position, direction, wvl, energy):
        if not (math.isfinite(wvl) and wvl > 0.0):
            raise OtherError("wavelength must be >0")
        if not (math.isfinite(energy) and energy >= 0.0):
            raise OtherError("energy must be >=0 and finite")
        direction = np.array(direction, dtype=float)
        if norm(direction) == 0.0:
            raise OtherError("length of direction must be >0")
        self.pos = np.array(position, dtype=float)
        self.dir = normalize(direction)
        self.prev_dir = None
        self.pos_hist = []
        self.energy = energy
        self.wvl = wvl
        self.number_of_bounces = 0
        self.number_of_refractions = 0
        self.valid = True
        self.path_length = 0.0
        self.refractive_index = 1.0
        self.helper_rays = None

    @classmethod
    def new_collimated(cls, position, wvl, energy):
        """ ray parallel to the z axis """
        return cls(position, [0., 0., 1.], wvl, energy)

    @classmethod
    def origin_along_z(cls, wvl, energy):
        return cls([0., 0., 0.], [0., 0., 1.], wvl, energy)

    def __repr__(self):
        return ("{!s}(pos={!r}, dir={!r}, wvl={!r}, energy={!r}, "
                "bounces={}, valid={})").format(
                    type(self).__name__, self.pos.tolist(), self.dir.tolist(),
                    self.wvl, self.energy, self.number_of_bounces, self.valid)

    def copy(self):
        new_ray = copy.copy(self)
        new_ray.pos_hist = list(self.pos_hist)
        if self.helper_rays is not None:
            new_ray.helper_rays = self.helper_rays.copy()
        return new_ray

    def set_invalid(self):
        self.valid = False

    def set_direction(self, direction):
        direction = np.array(direction, dtype=float)
        if norm(direction) == 0.0:
            raise OtherError("length of direction must be >0")
        self.dir = normalize(direction)

    def set_refractive_index(self, refractive_index):
        self.refractive_index = check_refractive_index(refractive_index)

    def add_to_pos_hist(self, pos):
        self.pos_hist.append(pos)

    def clear_pos_hist(self):
        self.pos_hist = []

    def history_len(self):
        return len(self.pos_hist)

    def position_history(self, with_current=True):
        """ array of shape (n, 3) of the positions the ray passed """
        pts = list(self.pos_hist)
        if with_current:
            pts.append(self.pos)
        if not pts:
            return np.zeros((0, 3))
        return np.array(pts)

    def to_isometry(self, up=None):
        """ frame at the ray position with z along the ray direction """
        return Isometry.from_axis(self.pos, self.dir, up)

    def propagate(self, length: float):
        """ Free propagation by `length` (mm) along the ray direction. """
        if not math.isfinite(length):
            raise OtherError("propagation length must be finite")
        self.pos_hist.append(self.pos)
        self.pos = self.pos + length*self.dir
        self.path_length += length*self.refractive_index
        if self.helper_rays is not None:
            self.helper_rays.propagate(length)

    def refract_paraxial(self, focal_length: float, iso):
        """ Refract at an ideal thin lens located at the frame `iso`.

        The path length is corrected such that a perfect lens produces a
        spherical wavefront.
        """
        if focal_length == 0.0 or not math.isfinite(focal_length):
            raise OtherError("focal length must be != 0.0 & finite")
        self.prev_dir = self.dir
        pos = iso.inverse_transform_point(self.pos)
        d = iso.inverse_transform_vector(self.dir)
        d = d/abs(d[2])
        d = np.array([d[0] - pos[0]/focal_length,
                      d[1] - pos[1]/focal_length,
                      d[2]])
        r_sqr = pos[0]*pos[0] + pos[1]*pos[1]
        f_sqr = focal_length*focal_length
        self.path_length -= math.sqrt(r_sqr + f_sqr) - abs(focal_length)
        self.number_of_refractions += 1
        self.dir = normalize(iso.transform_vector(d))
        if self.helper_rays is not None:
            self.helper_rays.refract_paraxial(focal_length, iso)

    def intersect_surface(self, surface, strategy=MissedSurfaceStrategy.STOP):
        """ Move the ray onto `surface`.

        Returns:
            the unit surface normal at the hit point, facing the ray, or
            None if the surface was missed. A missed ray is invalidated under
            the STOP strategy and left untouched under IGNORE.
        """
        try:
            pt, normal = surface.geo_surface.calc_intersect_and_normal(
                self.pos, self.dir)
        except TraceMissedSurfaceError:
            if strategy == MissedSurfaceStrategy.STOP:
                self.set_invalid()
            return None
        self.path_length += self.refractive_index*norm(pt - self.pos)
        self.pos_hist.append(self.pos)
        self.pos = pt
        return normalize(normal)

    def refract_at(self, surface, normal, n2=None):
        """ Refract a ray already located on `surface`.

        Returns:
            the reflected part as a new ray, or None in case of total
            internal reflection. In that case the ray itself is reflected.
        """
        n1 = self.refractive_index
        n2_val = n1 if n2 is None else n2
        try:
            d_out = bend(self.dir, normal, n1, n2_val)
        except TraceTIRError:
            self.prev_dir = self.dir
            self.dir = normalize(reflect(self.dir, normal))
            self.number_of_bounces += 1
            return None

        reflectivity = surface.coating.calc_reflectivity(self.dir, normal,
                                                          n1, n2_val)
        input_energy = self.energy
        reflected = self.copy()
        reflected.prev_dir = self.dir
        reflected.dir = normalize(reflect(self.dir, normal))
        reflected.energy = input_energy*reflectivity
        reflected.number_of_bounces += 1

        self.prev_dir = self.dir
        self.dir = normalize(d_out)
        self.energy = input_energy*(1.0 - reflectivity)
        self.refractive_index = n2_val
        if n2 is not None:
            self.number_of_refractions += 1
        return reflected

    def surface_position(self, surface):
        """ current position in the local 2d frame of `surface` """
        return surface.isometry.inverse_transform_point(self.pos)[:2]

    def record_hit(self, surface, bundle_uuid):
        """ Add the current position to the hit map of `surface`.

        Rays with helper rays record the fluence of their helper ray
        triangle, all others their energy.
        """
        local_pt = self.surface_position(surface)
        if self.helper_rays is None:
            surface.add_to_hit_map(local_pt, self.energy,
                                   self.number_of_bounces, bundle_uuid)
        else:
            fluence = self.helper_rays.fluence_on_surface(surface,
                                                          self.energy)
            if fluence is not None:
                surface.add_fluence_to_hit_map(local_pt, fluence,
                                               self.number_of_bounces,
                                               bundle_uuid)

    def refract_on_surface(self, surface, n2=None, bundle_uuid=None,
                           strategy=MissedSurfaceStrategy.STOP):
        """ Refract the ray at an :class:`~.OpticSurface`.

        The ray moves to the intersection point and changes its direction by
        Snell's law with the refractive index `n2` behind the surface. If
        `n2` is None, the index of the ray is kept, i.e. the surface is
        passive. The coating of the surface determines the reflected part of
        the energy. The strike is recorded in the hit map of the surface
        under `bundle_uuid`.

        Returns:
            the reflected ray with energy·R and one more bounce, or None if
            the surface was missed or the ray was totally reflected. In the
            latter case the ray itself becomes the reflected ray.

        Raises:
            OtherError: if `n2` is < 1.0 or not finite
        """
        if n2 is not None:
            check_refractive_index(n2)
        normal = self.intersect_surface(surface, strategy)
        if normal is None:
            return None
        helpers_reflected = None
        if self.helper_rays is not None:
            helpers_reflected = self.helper_rays.refract_on_surface(surface, n2)
        self.record_hit(surface, bundle_uuid)
        reflected = self.refract_at(surface, normal, n2)
        if reflected is not None:
            reflected.helper_rays = helpers_reflected
        return reflected

    def reflect_on_surface(self, surface, bundle_uuid=None,
                           strategy=MissedSurfaceStrategy.STOP) -> bool:
        """ Intended reflection at a mirror surface.

        The reflected energy is scaled by the reflectivity of the coating,
        the transmitted part is discarded. An intended reflection does not
        count as a bounce.

        Returns:
            False if the surface was missed
        """
        normal = self.intersect_surface(surface, strategy)
        if normal is None:
            return False
        if self.helper_rays is not None:
            self.helper_rays.reflect_on_surface(surface)
        self.record_hit(surface, bundle_uuid)
        n = self.refractive_index
        reflectivity = surface.coating.calc_reflectivity(self.dir, normal,
                                                          n, n)
        self.prev_dir = self.dir
        self.dir = normalize(reflect(self.dir, normal))
        self.energy *= reflectivity
        return True

    def diffract_on_periodic_surface(self, surface, n2, grating_vector,
                                     order, bundle_uuid=None,
                                     strategy=MissedSurfaceStrategy.STOP):
        """ Reflective diffraction at a periodic surface, e.g. a grating.

        Args:
            surface: the :class:`~.OpticSurface` of the grating
            n2: refractive index in front of the grating
            grating_vector: grating vector in world coordinates (rad/nm)
            order: diffraction order

        Returns:
            False if the surface was missed or the order is evanescent. An
            evanescent order invalidates the ray.
        """
        check_refractive_index(n2)
        normal = self.intersect_surface(surface, strategy)
        if normal is None:
            return False
        self.record_hit(surface, bundle_uuid)
        # phase shift due to the lateral position on the grating
        local_x = surface.isometry.inverse_transform_point(self.pos)[0]
        self.path_length += (order*norm(grating_vector)/(2.0*math.pi)
                             * local_x*self.wvl*1.0e-6)
        try:
            d_out = diffract_reflective(self.dir, normal, n2, self.wvl,
                                        grating_vector, order)
        except TraceEvanescentRayError:
            self.set_invalid()
            return False
        self.prev_dir = self.dir
        self.dir = d_out
        self.refractive_index = n2
        return True

    def filter_energy(self, transmission):
        """ attenuate by a constant factor or a transmission |Spectrum| """
        if isinstance(transmission, Spectrum):
            t = transmission.get_value(self.wvl)
            if t is None:
                raise OtherError("wavelength of ray outside filter spectrum")
        else:
            t = transmission
            if not 0.0 <= t <= 1.0:
                raise OtherError("transmission factor must be within "
                                 "[0.0, 1.0]")
        self.energy *= t

    def split(self, splitting):
        """ Split off a copy of the ray.

        Args:
            splitting: ratio in [0, 1] or a |Spectrum| giving the ratio per
                wavelength. The ratio is the part kept in this ray.

        Returns:
            the split ray, carrying the remaining energy
        """
        if isinstance(splitting, Spectrum):
            ratio = splitting.get_value(self.wvl)
            if ratio is None:
                raise OtherError("ray splitting failed. wavelength outside "
                                 "given spectrum")
        else:
            ratio = splitting
        if not 0.0 <= ratio <= 1.0:
            raise OtherError("splitting ratio must be within [0.0, 1.0]")
        split_ray = self.copy()
        split_ray.energy = self.energy*(1.0 - ratio)
        self.energy *= ratio
        return split_ray

    def transformed_ray(self, iso):
        """ copy of the ray with position and direction mapped by `iso` """
        new_ray = self.copy()
        new_ray.pos = iso.transform_point(self.pos)
        new_ray.dir = iso.transform_vector(self.dir)
        if new_ray.helper_rays is not None:
            new_ray.helper_rays = new_ray.helper_rays.transformed(iso)
        return new_ray

    def inverse_transformed_ray(self, iso):
        new_ray = self.copy()
        new_ray.pos = iso.inverse_transform_point(self.pos)
        new_ray.dir = iso.inverse_transform_vector(self.dir)
        if new_ray.helper_rays is not None:
            new_ray.helper_rays = new_ray.helper_rays.transformed(
                iso.inverse())
        return new_ray
