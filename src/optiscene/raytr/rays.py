#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Copyright © 2024 The optiscene developers
""" Ray bundles and helper rays for fluence tracking

    A :class:`Rays` bundle is a list of :class:`~.ray.Ray` plus the identity
    information needed to reconstruct ghost paths: a unique id, the id of the
    bundle it was reflected from and the node that emitted it.

    :class:`FluenceRays` are three helper rays forming a tiny equilateral
    triangle around a main ray. The change of the triangle area on a surface
    gives the local fluence without any tessellation of the bundle.

.. Created on Mon Mar 25 13:52:40 2024

.. codeauthor: The optiscene developers
"""
import logging
import math
import uuid

import numpy as np
import pandas as pd

from optiscene.opmerror import OtherError
from optiscene.util.misc_math import triangle_area
from optiscene.util.quantity import (nm_to_mm, check_non_negative,
                                     check_finite, MM2_PER_CM2)
from optiscene.util.spectrum import Spectrum
from optiscene.elem.fluence import voronoi_cell_areas
from optiscene.raytr.ray import Ray
from optiscene.raytr.raytrace import MissedSurfaceStrategy
from optiscene.raytr import distributions as dist

logger = logging.getLogger(__name__)


class FluenceRays():
    """ Three helper rays surrounding a main ray.

    The helper rays start on a circle around the main ray, 120° apart, so
    that they span a triangle of area λ². The fluence on a surface is the
    initial fluence scaled by the ratio of the initial to the current
    triangle area and by the energy ratio of the main ray.

    Attributes:
        rays: the 3 helper :class:`~.ray.Ray`
        init_fluence: fluence at the start (J/cm²)
        init_area: initial triangle area (mm²)
        init_energy: initial energy of the main ray (J)
    """

    def __init__(self, ray, init_fluence: float):
        check_non_negative(init_fluence, "initial fluence")
        wvl_mm = nm_to_mm(ray.wvl)
        self.init_area = wvl_mm*wvl_mm
        self.init_fluence = init_fluence
        self.init_energy = ray.energy
        radius = math.sqrt(4.0*self.init_area/math.sqrt(27.0))
        self.rays = []
        for i in range(3):
            phi = 2.0*math.pi*i/3.0
            offset = radius*np.array([math.cos(phi), math.sin(phi), 0.0])
            helper = Ray(ray.pos + offset, ray.dir, ray.wvl, ray.energy)
            helper.refractive_index = ray.refractive_index
            self.rays.append(helper)

    def __repr__(self):
        return "{!s}(init_fluence={!r})".format(type(self).__name__,
                                                 self.init_fluence)

    def copy(self):
        new_fr = FluenceRays.__new__(FluenceRays)
        new_fr.init_area = self.init_area
        new_fr.init_fluence = self.init_fluence
        new_fr.init_energy = self.init_energy
        new_fr.rays = [r.copy() for r in self.rays]
        return new_fr

    def is_valid(self):
        return all(r.valid for r in self.rays)

    def propagate(self, length):
        for r in self.rays:
            r.propagate(length)

    def refract_paraxial(self, focal_length, iso):
        for r in self.rays:
            r.refract_paraxial(focal_length, iso)

    def transformed(self, iso):
        new_fr = self.copy()
        new_fr.rays = [r.transformed_ray(iso) for r in self.rays]
        return new_fr

    def refract_on_surface(self, surface, n2=None):
        """ Refract the helper rays at `surface`.

        Returns:
            the helper rays of the reflected main ray, or None if any helper
            ray missed the surface or was totally reflected
        """
        reflected = []
        for r in self.rays:
            normal = r.intersect_surface(surface,
                                         MissedSurfaceStrategy.STOP)
            if normal is None:
                reflected.append(None)
                continue
            reflected.append(r.refract_at(surface, normal, n2))
        if any(r is None for r in reflected):
            return None
        new_fr = self.copy()
        new_fr.rays = reflected
        return new_fr

    def reflect_on_surface(self, surface):
        for r in self.rays:
            r.reflect_on_surface(surface)

    def fluence_on_surface(self, surface, energy):
        """ Fluence (J/cm²) at the current position of the helper rays.

        Returns:
            None if a helper ray is invalid or the triangle collapsed
        """
        if not self.is_valid() or self.init_energy == 0.0:
            return None
        pts = [r.surface_position(surface) for r in self.rays]
        area = triangle_area(*pts)
        if area <= 0.0:
            return None
        return (self.init_fluence*(self.init_area/area)
                * (energy/self.init_energy))


class Rays():
    """ A bundle of rays.

    Attributes:
        rays: list of :class:`~.ray.Ray`
        uuid: unique id of the bundle
        parent_id: uuid of the bundle this one was reflected from, or None
        parent_pos_split_idx: position history length of the parent at
            the reflection
        node_origin: uuid of the node that emitted the bundle, or None
    """

    def __init__(self, rays=None):
        self.rays = list(rays) if rays is not None else []
        self.uuid = uuid.uuid4()
        self.parent_id = None
        self.parent_pos_split_idx = 0
        self.node_origin = None

    @classmethod
    def new_uniform_collimated(cls, wvl: float, energy: float, strategy):
        """ Collimated bundle along z, `energy` shared equally by the rays.

        Args:
            wvl: wavelength (nm)
            energy: total energy (J)
            strategy: position distribution, see :mod:`~.distributions`
        """
        check_non_negative(energy, "energy")
        points = strategy.generate()
        ray_energy = energy/len(points)
        return cls([Ray.new_collimated(p, wvl, ray_energy) for p in points])

    @classmethod
    def new_collimated(cls, wvl: float, energy_distribution, strategy):
        """ Collimated bundle along z with an energy distribution """
        points = strategy.generate()
        energies = energy_distribution.apply(points)
        return cls([Ray.new_collimated(p, wvl, e)
                    for p, e in zip(points, energies)])

    @classmethod
    def new_collimated_w_fluence_helper(cls, wvl: float,
                                        fluence_distribution, strategy):
        """ Collimated bundle whose rays carry :class:`FluenceRays`.

        The energy of each ray is its fluence times the area of its Voronoi
        cell.
        """
        points = strategy.generate()
        fluences = fluence_distribution.apply(points)
        areas = voronoi_cell_areas(points[:, :2])
        areas = np.where(np.isfinite(areas), areas, 0.0)
        rays = []
        for p, f, a in zip(points, fluences, areas):
            ray = Ray.new_collimated(p, wvl, f*a/MM2_PER_CM2)
            ray.helper_rays = FluenceRays(ray, f)
            rays.append(ray)
        return cls(rays)

    @classmethod
    def new_hexapolar_point_source(cls, position, cone_angle: float,
                                   nr_of_rings: int, wvl: float,
                                   energy: float):
        """ Point source emitting into a cone around the z axis.

        Args:
            position: source point (mm)
            cone_angle: full opening angle (deg), within [0, 180)
            nr_of_rings: number of rings of the hexapolar direction pattern
            wvl: wavelength (nm)
            energy: total energy (J)
        """
        if not (math.isfinite(cone_angle) and 0.0 <= cone_angle < 180.0):
            raise OtherError("cone angle must be within [0.0, 180.0) deg")
        check_non_negative(energy, "energy")
        if cone_angle == 0.0:
            return cls([Ray(position, [0., 0., 1.], wvl, energy)])
        radius = math.tan(math.radians(0.5*cone_angle))
        pts = dist.Hexapolar(radius, nr_of_rings).generate()
        ray_energy = energy/len(pts)
        return cls([Ray(position, [p[0], p[1], 1.0], wvl, ray_energy)
                    for p in pts])

    def __repr__(self):
        return "{!s}({} rays, {} valid, energy={!r})".format(
            type(self).__name__, len(self.rays), self.nr_of_rays(True),
            self.total_energy())

    def __len__(self):
        return len(self.rays)

    def __iter__(self):
        return iter(self.rays)

    def listobj_str(self):
        o_str = (f"ray bundle {self.uuid}: {len(self.rays)} rays, "
                 f"{self.nr_of_rays(True)} valid\n")
        o_str += f"energy: {self.total_energy():.6g} J\n"
        wvl = self.central_wavelength()
        if wvl is not None:
            o_str += f"central wavelength: {wvl:.3f} nm\n"
        return o_str

    def copy(self):
        """ copy of the bundle with the same uuid and origin """
        new_rays = Rays([r.copy() for r in self.rays])
        new_rays.uuid = self.uuid
        new_rays.parent_id = self.parent_id
        new_rays.parent_pos_split_idx = self.parent_pos_split_idx
        new_rays.node_origin = self.node_origin
        return new_rays

    def valid_rays(self):
        return [r for r in self.rays if r.valid]

    def add_ray(self, ray):
        self.rays.append(ray)

    def merge(self, rays):
        """ append the rays of the bundle `rays` """
        self.rays.extend(rays.rays)

    def set_node_origin(self, node_id):
        self.node_origin = node_id

    def total_energy(self) -> float:
        """ energy of all valid rays (J) """
        return math.fsum(r.energy for r in self.rays if r.valid)

    def nr_of_rays(self, valid_only=True) -> int:
        if valid_only:
            return sum(1 for r in self.rays if r.valid)
        return len(self.rays)

    def bounce_lvl(self) -> int:
        """ bounce count of the first valid ray, 0 if there is none """
        for r in self.rays:
            if r.valid:
                return r.number_of_bounces
        return 0

    def history_len(self) -> int:
        for r in self.rays:
            if r.valid:
                return r.history_len()
        return 0

    def get_unique_wavelengths(self, valid_only=True):
        wvls = sorted({r.wvl for r in self.rays if r.valid or not valid_only})
        return wvls

    def central_wavelength(self):
        """ energy weighted mean wavelength (nm), None without energy """
        valid = self.valid_rays()
        energy = math.fsum(r.energy for r in valid)
        if energy == 0.0:
            return None
        return math.fsum(r.wvl*r.energy for r in valid)/energy

    def wavelength_range(self):
        wvls = self.get_unique_wavelengths()
        if not wvls:
            return None
        return wvls[0], wvls[-1]

    def to_spectrum(self, resolution: float = 0.1):
        """ |Spectrum| of the laser lines of the valid rays """
        lines = [(r.wvl, r.energy) for r in self.rays if r.valid]
        return Spectrum.from_laser_lines(lines, resolution)

    def centroid(self):
        """ mean position of the valid rays, None if there are none """
        valid = self.valid_rays()
        if not valid:
            return None
        return np.mean([r.pos for r in valid], axis=0)

    def energy_weighted_centroid(self):
        valid = self.valid_rays()
        energy = math.fsum(r.energy for r in valid)
        if energy == 0.0:
            return None
        return np.sum([r.energy*r.pos for r in valid], axis=0)/energy

    def beam_radius_geo(self):
        """ largest distance of a valid ray from the centroid (mm) """
        center = self.centroid()
        if center is None:
            return 0.0
        return max(np.linalg.norm(r.pos - center) for r in self.valid_rays())

    def beam_radius_rms(self):
        center = self.centroid()
        if center is None:
            return 0.0
        sqr = [np.dot(r.pos - center, r.pos - center)
               for r in self.valid_rays()]
        return math.sqrt(sum(sqr)/len(sqr))

    def get_xy_rays_pos(self, iso=None, valid_only=True):
        """ array of the x, y ray positions, optionally in the frame `iso` """
        pts = []
        for r in self.rays:
            if r.valid or not valid_only:
                pos = iso.inverse_transform_point(r.pos) if iso else r.pos
                pts.append(pos[:2])
        if not pts:
            return np.zeros((0, 2))
        return np.array(pts)

    def get_optical_axis_ray(self):
        """ ray at the origin along z with the central wavelength and 1 J """
        wvl = self.central_wavelength()
        if wvl is None:
            raise OtherError("no valid rays to define the optical axis")
        return Ray.origin_along_z(wvl, 1.0)

    def propagate(self, length: float):
        check_finite(length, "propagation length")
        for r in self.rays:
            if r.valid:
                r.propagate(length)

    def refract_paraxial(self, focal_length: float, iso):
        for r in self.rays:
            if r.valid:
                r.refract_paraxial(focal_length, iso)

    def set_refractive_index(self, refractive_index):
        """ set the medium index of all rays from a refractive index model """
        for r in self.rays:
            r.set_refractive_index(
                refractive_index.get_refractive_index(r.wvl))

    def apodize(self, aperture, iso) -> bool:
        """ Invalidate the rays blocked by `aperture` located at `iso`.

        Returns:
            True if any ray was blocked
        """
        if aperture is None:
            return False
        blocked = False
        for r in self.rays:
            if not r.valid:
                continue
            local_pt = iso.inverse_transform_point(r.pos)
            if aperture.apodization_factor(local_pt[:2]) == 0.0:
                r.add_to_pos_hist(r.pos)
                r.set_invalid()
                blocked = True
        if blocked:
            logger.warning("Rays have been apodized at input aperture. "
                           "Results might not be accurate.")
        return blocked

    def refract_on_surface(self, surface, refractive_index=None,
                           strategy=MissedSurfaceStrategy.STOP):
        """ Refract all valid rays at `surface`.

        Args:
            surface: the :class:`~.OpticSurface`
            refractive_index: model of the medium behind the surface, None
                to keep the index of each ray
            strategy: handling of rays missing the surface

        Returns:
            the bundle of reflected rays with positive energy. It gets a new
            uuid and refers to self as its parent.
        """
        reflected = Rays()
        reflected.parent_id = self.uuid
        reflected.parent_pos_split_idx = self.history_len() + 1
        reflected.node_origin = self.node_origin
        lost = False
        for r in self.rays:
            if not r.valid:
                continue
            n2 = (refractive_index.get_refractive_index(r.wvl)
                  if refractive_index is not None else None)
            bounces = r.number_of_bounces
            refl = r.refract_on_surface(surface, n2, self.uuid, strategy)
            if refl is None:
                if not r.valid or r.number_of_bounces != bounces:
                    lost = True
                continue
            if refl.energy > 0.0:
                refl.clear_pos_hist()
                reflected.add_ray(refl)
        if lost:
            logger.warning("rays totally reflected or missed a surface")
        if self.nr_of_rays(True) == 0:
            logger.warning("ray bundle contains no valid rays - not "
                           "propagating")
        return reflected

    def reflect_on_surface(self, surface,
                           strategy=MissedSurfaceStrategy.STOP):
        """ intended reflection of all valid rays, e.g. at a mirror """
        missed = False
        for r in self.rays:
            if r.valid and not r.reflect_on_surface(surface, self.uuid,
                                                    strategy):
                missed = True
        if missed:
            logger.warning("rays missed a surface")

    def diffract_on_periodic_surface(self, surface, refractive_index,
                                     grating_vector, order: int,
                                     strategy=MissedSurfaceStrategy.STOP):
        lost = False
        for r in self.rays:
            if not r.valid:
                continue
            n2 = refractive_index.get_refractive_index(r.wvl)
            if not r.diffract_on_periodic_surface(surface, n2,
                                                  grating_vector, order,
                                                  self.uuid, strategy):
                lost = True
        if lost:
            logger.warning("rays missed the grating or diffraction order is "
                           "evanescent")

    def filter_energy(self, transmission):
        for r in self.rays:
            if r.valid:
                r.filter_energy(transmission)

    def invalidate_by_threshold_energy(self, min_energy: float):
        """ Invalidate rays with energy below `min_energy` (J).

        A negative threshold leaves the bundle unchanged.
        """
        check_finite(min_energy, "energy threshold")
        if min_energy < 0.0:
            logger.warning("negative energy threshold given. Rays remain "
                           "unmodified.")
            return
        for r in self.rays:
            if r.valid and r.energy < min_energy:
                r.set_invalid()

    def filter_by_nr_of_bounces(self, max_bounces: int):
        """ invalidate rays with more than `max_bounces` reflections """
        for r in self.rays:
            if r.number_of_bounces > max_bounces:
                r.set_invalid()

    def filter_by_nr_of_refractions(self, max_refractions: int):
        """ invalidate rays with at least `max_refractions` refractions """
        for r in self.rays:
            if r.number_of_refractions >= max_refractions:
                r.set_invalid()

    def split(self, splitting):
        """ Split the bundle by a ratio or a |Spectrum|.

        Self keeps the given ratio, the returned bundle the rest. Invalid
        rays are copied unchanged.
        """
        split_rays = Rays()
        split_rays.node_origin = self.node_origin
        for r in self.rays:
            if r.valid:
                split_rays.add_ray(r.split(splitting))
            else:
                split_rays.add_ray(r.copy())
        return split_rays

    def transformed_rays(self, iso):
        new_rays = self.copy()
        new_rays.rays = [r.transformed_ray(iso) for r in self.rays]
        return new_rays

    def wavefront_error_at(self, iso):
        """ Wavefront error of the valid rays in the frame `iso`.

        Returns:
            array of shape (n, 3) holding the local x, y position and the
            optical path difference to the ray closest to the optical axis in
            units of the wavelength
        """
        valid = self.valid_rays()
        if not valid:
            return np.zeros((0, 3))
        local = np.array([iso.inverse_transform_point(r.pos) for r in valid])
        r_sqr = local[:, 0]**2 + local[:, 1]**2
        ref_path = valid[int(np.argmin(r_sqr))].path_length
        wf = np.array([(ref_path - r.path_length)/nm_to_mm(r.wvl)
                       for r in valid])
        return np.column_stack((local[:, :2], wf))

    def position_history_df(self):
        """ |DataFrame| of all ray positions, indexed by ray and step """
        frames = []
        for i, r in enumerate(self.rays):
            pts = r.position_history()
            frames.append(pd.DataFrame({'ray': i,
                                        'step': np.arange(len(pts)),
                                        'x': pts[:, 0], 'y': pts[:, 1],
                                        'z': pts[:, 2], 'valid': r.valid}))
        if not frames:
            return pd.DataFrame(columns=['ray', 'step', 'x', 'y', 'z',
                                         'valid'])
        return pd.concat(frames, ignore_index=True).set_index(['ray',
                                                               'step'])
