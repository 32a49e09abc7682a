#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Copyright © 2024 The optiscene developers
""" Optical surface of a node port

    An :class:`OpticSurface` combines the geometric shape of a surface with
    its optical properties: clear aperture, coating and laser induced damage
    threshold (lidt). It records the strikes of rays in a
    :class:`~.hitmap.HitMap` and, for ghost focus analysis, parks reflected
    ray bundles until the next pass that crosses the surface in their travel
    direction.

.. Created on Thu Mar 21 10:05:19 2024

.. codeauthor: The optiscene developers
"""
import logging
import math

from optiscene.opmerror import OtherError
from optiscene.elem.geosurface import Plane
from optiscene.elem.coatings import IdealAR
from optiscene.elem.hitmap import HitMap, EnergyHitPoint, FluenceHitPoint
from optiscene.elem.fluence import FluenceEstimator
from optiscene.util.transform import Isometry

logger = logging.getLogger(__name__)


def check_lidt(lidt):
    if math.isnan(lidt) or lidt < 0.0:
        raise OtherError("LIDT must be positive and not NaN")
    return lidt


class OpticSurface():
    """ Geometric surface plus aperture, coating, lidt and recorded hits.

    Attributes:
        geo_surface: the :class:`~.geosurface.GeoSurface` shape
        anchor: :class:`~.Isometry` of the surface wrt the node frame
        aperture: an :class:`~.aperture.Aperture` or None
        coating: a :class:`~.coatings.Coating`
        lidt: laser induced damage threshold (J/cm²), infinite for an
            unbreakable surface
        hit_map: the recorded :class:`~.hitmap.HitMap`
    """

    def __init__(self, geo_surface=None, coating=None, aperture=None,
                 lidt=1.0, anchor=None):
        self.geo_surface = geo_surface if geo_surface is not None else Plane()
        self.coating = coating if coating is not None else IdealAR()
        self.aperture = aperture
        self.lidt = check_lidt(lidt)
        self.anchor = anchor if anchor is not None else Isometry()
        self.hit_map = HitMap()
        self.forward_rays_cache = []
        self.backward_rays_cache = []

    def __repr__(self):
        return "{!s}({!r}, {!r})".format(type(self).__name__,
                                         self.geo_surface, self.coating)

    def listobj_str(self):
        o_str = self.geo_surface.listobj_str()
        o_str += self.coating.listobj_str()
        if self.aperture is not None:
            o_str += self.aperture.listobj_str()
        o_str += f"lidt: {self.lidt} J/cm²\n"
        return o_str

    def set_lidt(self, lidt: float):
        self.lidt = check_lidt(lidt)

    @property
    def isometry(self):
        return self.geo_surface.isometry

    def set_isometry(self, node_iso):
        """ place the surface at the node pose `node_iso` plus its anchor """
        self.geo_surface.set_isometry(node_iso.append(self.anchor))

    def add_to_hit_map(self, position, energy, bounce, uuid):
        """ record a strike at the surface local 2d `position` """
        self.hit_map.add_to_hitmap(EnergyHitPoint(position, energy),
                                   bounce, uuid)

    def add_fluence_to_hit_map(self, position, fluence, bounce, uuid):
        self.hit_map.add_to_hitmap(FluenceHitPoint(position, fluence),
                                   bounce, uuid)

    def add_to_rays_cache(self, rays, backward=False):
        if backward:
            self.backward_rays_cache.append(rays)
        else:
            self.forward_rays_cache.append(rays)

    def take_rays_cache(self, backward=False):
        """ remove and return the bundles parked for direction `backward` """
        if backward:
            cache, self.backward_rays_cache = self.backward_rays_cache, []
        else:
            cache, self.forward_rays_cache = self.forward_rays_cache, []
        return cache

    def evaluate_fluence_of_ray_bundle(self, rays,
                                       estimator=FluenceEstimator.VORONOI,
                                       bounce_lvl=None):
        """ Check the peak fluence of `rays` on this surface against the lidt.

        A bundle exceeding the lidt is recorded as critical fluence in the
        hit map. Estimation failures are logged and otherwise ignored.

        Args:
            rays: the bundle, after it interacted with this surface
            estimator: the :class:`~.fluence.FluenceEstimator` to use
            bounce_lvl: bounce level the hits were recorded with. Defaults
                to the current bounce level of `rays`.
        """
        if bounce_lvl is None:
            bounce_lvl = rays.bounce_lvl()
        rays_hit_map = self.hit_map.get_rays_hit_map(bounce_lvl, rays.uuid)
        if rays_hit_map is None:
            return
        try:
            fluence_data = rays_hit_map.calc_fluence(estimator)
        except OtherError as err:
            logger.warning("Could not estimate maximum fluence of ray "
                           f"bundle: {err}. Ray bundle will be ignored "
                           "during calculation")
            return
        if fluence_data.peak > self.lidt:
            logger.warning(f"critical fluence of {fluence_data.peak:.4g} "
                           f"J/cm² on surface (lidt {self.lidt} J/cm²), "
                           f"bounce level {bounce_lvl}")
            self.hit_map.add_critical_fluence(rays.uuid, fluence_data.peak,
                                              bounce_lvl,
                                              rays.history_len() + 1)

    def reset_data(self):
        self.hit_map.reset()
        self.forward_rays_cache.clear()
        self.backward_rays_cache.clear()
