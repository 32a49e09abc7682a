#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Copyright © 2024 The optiscene developers
""" Recording of ray strikes on a surface

    A :class:`HitMap` stores the points where rays hit a surface, sorted by
    the bounce level of the rays and by the ray bundle they belong to. The
    points of one bundle at one bounce level form a :class:`RaysHitMap`.
    Hit points carry either the energy of a ray or, when the bundle was
    traced with helper rays, the fluence at the hit.

.. Created on Wed Mar 20 15:47:02 2024

.. codeauthor: The optiscene developers
"""
import logging

import attr
import numpy as np
import pandas as pd

from optiscene.opmerror import AnalysisError
from optiscene.elem import fluence as flu
from optiscene.elem.fluence import FluenceEstimator

logger = logging.getLogger(__name__)


@attr.s
class EnergyHitPoint():
    """ 2d surface position (mm) and energy (J) of a ray strike """
    position = attr.ib(converter=lambda p: np.array(p[:2], dtype=float))
    energy = attr.ib()

    @energy.validator
    def _check_energy(self, attribute, value):
        if not (np.isfinite(value) and value >= 0.0):
            raise AnalysisError("energy of a hit point must be >= 0.0 and "
                                "finite")


@attr.s
class FluenceHitPoint():
    """ 2d surface position (mm) and fluence (J/cm²) of a ray strike """
    position = attr.ib(converter=lambda p: np.array(p[:2], dtype=float))
    fluence = attr.ib()

    @fluence.validator
    def _check_fluence(self, attribute, value):
        if not (np.isfinite(value) and value >= 0.0):
            raise AnalysisError("fluence of a hit point must be >= 0.0 and "
                                "finite")


@attr.s
class CriticalFluence():
    """ A ray bundle that exceeded the damage threshold of a surface """
    peak = attr.ib()
    bounce = attr.ib()
    hist_pos = attr.ib(default=0)


class RaysHitMap():
    """ Hit points of a single ray bundle at a single bounce level. """

    def __init__(self):
        self.points = []
        self.kind = None

    def __repr__(self):
        kind = self.kind.__name__ if self.kind else None
        return "{!s}({}, {} points)".format(type(self).__name__, kind,
                                           len(self.points))

    def __len__(self):
        return len(self.points)

    def add_hit_point(self, hit_point):
        """ add a hit point, all points must be of the same kind """
        if self.kind is None:
            self.kind = type(hit_point)
        elif type(hit_point) is not self.kind:
            raise AnalysisError("wrong hit point type for this hitmap! Must "
                                f"be {self.kind.__name__}")
        self.points.append(hit_point)

    def merge(self, other):
        for hit_point in other.points:
            self.add_hit_point(hit_point)

    def positions(self):
        if not self.points:
            return np.zeros((0, 2))
        return np.array([hp.position for hp in self.points])

    def values(self):
        if self.kind is FluenceHitPoint:
            return np.array([hp.fluence for hp in self.points])
        return np.array([hp.energy for hp in self.points])

    def bounding_box(self):
        """ ((xmin, xmax), (ymin, ymax)) of the hit points """
        return flu.bounding_box(self.positions())

    def calc_fluence(self, estimator=FluenceEstimator.VORONOI,
                     nr_of_points=(100, 100)):
        """ Estimate the fluence distribution of the hit points.

        Energy hit points cannot be evaluated by the helper ray estimator
        and fluence hit points only by it; a mismatch is logged and the
        closest applicable estimator is used instead.

        Raises:
            OtherError: if there are too few points or the estimation fails
        """
        pts = self.positions()
        values = self.values()
        if self.kind is FluenceHitPoint:
            if estimator != FluenceEstimator.HELPER_RAYS:
                logger.warning(f"Unexpected type of hit points for {estimator} "
                               "estimator! Changing to helper-ray estimator!")
            return flu.fluence_by_helper_rays(pts, values, nr_of_points)

        if estimator == FluenceEstimator.HELPER_RAYS:
            logger.warning("Unexpected type of hit points for helper-ray "
                           "estimator! Changing to voronoi estimator!")
            estimator = FluenceEstimator.VORONOI
        if estimator == FluenceEstimator.KDE:
            return flu.fluence_by_kde(pts, values, nr_of_points)
        elif estimator == FluenceEstimator.BINNING:
            return flu.fluence_by_binning(pts, values)
        else:
            return flu.fluence_by_voronoi(pts, values, nr_of_points)

    def to_dataframe(self):
        """ return a |DataFrame| with the x, y and value of each hit """
        value_label = 'fluence' if self.kind is FluenceHitPoint else 'energy'
        pts = self.positions()
        return pd.DataFrame({'x': pts[:, 0], 'y': pts[:, 1],
                             value_label: self.values()})


class BouncedHitMap():
    """ :class:`RaysHitMap` per bundle uuid for one bounce level """

    def __init__(self):
        self.hit_map = {}

    def __len__(self):
        return len(self.hit_map)

    def add_to_hitmap(self, hit_point, uuid):
        if uuid not in self.hit_map:
            self.hit_map[uuid] = RaysHitMap()
        self.hit_map[uuid].add_hit_point(hit_point)

    def get_rays_hit_map(self, uuid):
        return self.hit_map.get(uuid)

    def items(self):
        return self.hit_map.items()


class HitMap():
    """ Ray strikes on a surface indexed by bounce level and bundle uuid.

    Attributes:
        hit_map: list of :class:`BouncedHitMap`, index is the bounce level
        critical_fluence: dict of bundle uuid to :class:`CriticalFluence`
    """

    def __init__(self):
        self.hit_map = []
        self.critical_fluence = {}

    def __repr__(self):
        nr_of_points = sum(len(rhm) for _, _, rhm in self.rays_hit_maps())
        return "{!s}({} bounce levels, {} points)".format(
            type(self).__name__, len(self.hit_map), nr_of_points)

    def add_to_hitmap(self, hit_point, bounce: int, uuid):
        while len(self.hit_map) <= bounce:
            self.hit_map.append(BouncedHitMap())
        self.hit_map[bounce].add_to_hitmap(hit_point, uuid)

    def add_critical_fluence(self, uuid, peak: float, bounce: int,
                             hist_pos: int = 0):
        self.critical_fluence[uuid] = CriticalFluence(peak, bounce, hist_pos)

    def reset(self):
        self.hit_map.clear()
        self.critical_fluence.clear()

    def is_empty(self) -> bool:
        return all(len(bhm) == 0 for bhm in self.hit_map)

    def get_rays_hit_map(self, bounce: int, uuid):
        if bounce >= len(self.hit_map):
            return None
        return self.hit_map[bounce].get_rays_hit_map(uuid)

    def rays_hit_maps(self):
        """ generator of (bounce, uuid, :class:`RaysHitMap`) """
        for bounce, bhm in enumerate(self.hit_map):
            for uuid, rhm in bhm.items():
                yield bounce, uuid, rhm

    def get_merged_rays_hit_map(self):
        """ a single :class:`RaysHitMap` with the points of all bundles """
        merged = RaysHitMap()
        for _, _, rhm in self.rays_hit_maps():
            merged.merge(rhm)
        return merged

    def calc_fluence_map(self, estimator=FluenceEstimator.VORONOI,
                         nr_of_points=(100, 100)):
        """ fluence estimate of the combined points of all bundles """
        return self.get_merged_rays_hit_map().calc_fluence(estimator,
                                                           nr_of_points)

    def to_dataframe(self):
        """ return a |DataFrame| of all hits, with bounce and bundle columns """
        frames = []
        keys = []
        for bounce, uuid, rhm in self.rays_hit_maps():
            frames.append(rhm.to_dataframe())
            keys.append((bounce, str(uuid)))
        if not frames:
            return pd.DataFrame(columns=['x', 'y', 'energy'])
        df = pd.concat(frames, keys=keys, names=['bounce', 'bundle', 'hit'])
        return df
