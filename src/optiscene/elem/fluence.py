#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Copyright © 2024 The optiscene developers
""" Estimation of fluence distributions from discrete hit points

    The estimators work on 2d surface local hit positions (mm) and either
    the energy (J) carried by each hit or, for the helper ray estimator, the
    fluence (J/cm²) already known at each hit. All of them return a
    :class:`FluenceData` record.

        - :func:`fluence_by_voronoi`: every hit owns its Voronoi cell, its
          fluence is the energy divided by the cell area
        - :func:`fluence_by_kde`: energy weighted gaussian kernel density
        - :func:`fluence_by_binning`: 2d histogram on a regular grid
        - :func:`fluence_by_helper_rays`: fluence values from helper rays

.. Created on Wed Mar 20 10:12:37 2024

.. codeauthor: The optiscene developers
"""
import logging
from enum import Enum
from math import sqrt

import attr
import numpy as np
from scipy.spatial import Voronoi, ConvexHull, QhullError
from scipy.stats import gaussian_kde
from scipy.interpolate import griddata

from optiscene.opmerror import OtherError
from optiscene.util.quantity import MM2_PER_CM2

logger = logging.getLogger(__name__)


class FluenceEstimator(Enum):
    """ Algorithm used to turn hit points into a fluence distribution """
    VORONOI = 'Voronoi'
    KDE = 'KDE'
    BINNING = 'Binning'
    HELPER_RAYS = 'Helper Rays'

    def __str__(self):
        return self.value


@attr.s
class FluenceData():
    """ Result of a fluence estimation.

    The `fluence` map has shape (ny, nx) and covers `x_range` and `y_range`
    (mm, surface local coordinates). Fluence values are in J/cm².
    """
    peak = attr.ib()
    average = attr.ib()
    fluence = attr.ib(repr=False)
    x_range = attr.ib()
    y_range = attr.ib()
    estimator = attr.ib()

    def listobj_str(self):
        o_str = f"{self.estimator} fluence estimate\n"
        o_str += f"peak={self.peak:.6g} J/cm²   average={self.average:.6g} J/cm²\n"
        o_str += (f"x: {self.x_range[0]:.4g}..{self.x_range[1]:.4g} mm   "
                  f"y: {self.y_range[0]:.4g}..{self.y_range[1]:.4g} mm\n")
        return o_str


def check_hit_points(pts, values):
    pts = np.asarray(pts, dtype=float).reshape(-1, 2)
    values = np.asarray(values, dtype=float)
    if len(pts) < 3:
        raise OtherError("too few points (<3) on hitmap to calculate fluence")
    if len(values) != len(pts):
        raise OtherError("one value per hit point is required")
    return pts, values


def bounding_box(pts, margin=0.0):
    """ ((xmin, xmax), (ymin, ymax)) of `pts` enlarged by `margin` """
    lower = pts.min(axis=0) - margin
    upper = pts.max(axis=0) + margin
    return (lower[0], upper[0]), (lower[1], upper[1])


def mean_point_spacing(pts):
    """ square root of the bounding box area per point """
    (x0, x1), (y0, y1) = bounding_box(pts)
    area = (x1 - x0)*(y1 - y0)
    if area == 0.0:
        # collinear points, fall back to the extent along the line
        area = max(x1 - x0, y1 - y0)**2
    return sqrt(area/len(pts))


def grid_axes(x_range, y_range, nr_of_points):
    nx, ny = nr_of_points
    return (np.linspace(x_range[0], x_range[1], nx),
            np.linspace(y_range[0], y_range[1], ny))


def interpolate_map(pts, values, x_range, y_range, nr_of_points):
    """ linear interpolation of scattered `values` onto a regular grid """
    xs, ys = grid_axes(x_range, y_range, nr_of_points)
    grid_x, grid_y = np.meshgrid(xs, ys)
    try:
        return griddata(pts, values, (grid_x, grid_y), method='linear',
                        fill_value=0.0)
    except QhullError as err:
        raise OtherError("hit points cannot be triangulated for "
                         "interpolation") from err


def voronoi_cell_areas(pts):
    """ Areas (mm²) of the Voronoi cells of `pts`.

    The tessellation is bounded by a box around the points, enlarged by half
    the mean point spacing. The points are mirrored across the 4 sides of the
    box so that every original cell is finite and clipped by the box.

    Raises:
        OtherError: if no tessellation can be built, e.g. for collinear
            points
    """
    margin = 0.5*mean_point_spacing(pts)
    (x0, x1), (y0, y1) = bounding_box(pts, margin)
    mirrored = [pts,
                np.column_stack((2*x0 - pts[:, 0], pts[:, 1])),
                np.column_stack((2*x1 - pts[:, 0], pts[:, 1])),
                np.column_stack((pts[:, 0], 2*y0 - pts[:, 1])),
                np.column_stack((pts[:, 0], 2*y1 - pts[:, 1]))]
    try:
        vor = Voronoi(np.concatenate(mirrored))
    except QhullError as err:
        raise OtherError("voronoi diagram for fluence estimation could not "
                         "be created") from err

    areas = np.full(len(pts), np.nan)
    for i in range(len(pts)):
        region = vor.regions[vor.point_region[i]]
        if len(region) < 3 or -1 in region:
            logger.warning("voronoi cell could not be created. number of "
                           "vertices %d", len(region))
            continue
        # the volume of a 2d hull is its area
        areas[i] = ConvexHull(vor.vertices[region]).volume
    return areas


def fluence_by_voronoi(pts, energies, nr_of_points=(100, 100)):
    pts, energies = check_hit_points(pts, energies)
    areas = voronoi_cell_areas(pts)
    valid = np.isfinite(areas) & (areas > 0.0)
    fluences = np.zeros(len(pts))
    fluences[valid] = MM2_PER_CM2*energies[valid]/areas[valid]

    total_energy = energies[valid].sum()
    if total_energy > 0.0:
        average = np.dot(energies[valid], fluences[valid])/total_energy
    else:
        average = 0.0
    x_range, y_range = bounding_box(pts)
    fluence_map = interpolate_map(pts, fluences, x_range, y_range,
                                  nr_of_points)
    return FluenceData(peak=float(fluences.max()), average=float(average),
                       fluence=fluence_map, x_range=x_range, y_range=y_range,
                       estimator=FluenceEstimator.VORONOI)


def fluence_by_kde(pts, energies, nr_of_points=(100, 100)):
    """ Energy weighted gaussian kernel density estimate.

    The bandwidth is chosen by Scott's rule; the map covers the bounding box
    of the hits enlarged by 3 bandwidths.
    """
    pts, energies = check_hit_points(pts, energies)
    total_energy = energies.sum()
    if not total_energy > 0.0:
        raise OtherError("kernel density estimate needs a positive energy")
    try:
        kde = gaussian_kde(pts.T, weights=energies)
    except (np.linalg.LinAlgError, ValueError) as err:
        raise OtherError("kernel bandwidth could not be estimated") from err
    bandwidth = sqrt(np.max(np.diag(kde.covariance)))
    x_range, y_range = bounding_box(pts, 3.0*bandwidth)

    xs, ys = grid_axes(x_range, y_range, nr_of_points)
    grid_x, grid_y = np.meshgrid(xs, ys)
    density = kde(np.vstack((grid_x.ravel(), grid_y.ravel())))
    fluence_map = MM2_PER_CM2*total_energy*density.reshape(grid_x.shape)

    at_hits = MM2_PER_CM2*total_energy*kde(pts.T)
    average = np.dot(energies, at_hits)/total_energy
    peak = max(fluence_map.max(), at_hits.max())
    return FluenceData(peak=float(peak), average=float(average),
                       fluence=fluence_map, x_range=x_range, y_range=y_range,
                       estimator=FluenceEstimator.KDE)


def fluence_by_binning(pts, energies, nr_of_bins=None):
    """ 2d histogram of the hit energies.

    The bin grid covers the bounding box of the hits enlarged by half the
    mean point spacing. By default the number of bins per axis is chosen
    such that a bin holds 25 hits on average.
    """
    pts, energies = check_hit_points(pts, energies)
    if nr_of_bins is None:
        n = max(int(sqrt(len(pts)/25.0)), 1)
        nr_of_bins = (n, n)
    margin = 0.5*mean_point_spacing(pts)
    x_range, y_range = bounding_box(pts, margin)
    hist, x_edges, y_edges = np.histogram2d(pts[:, 0], pts[:, 1],
                                            bins=nr_of_bins,
                                            range=(x_range, y_range),
                                            weights=energies)
    bin_area = (x_edges[1] - x_edges[0])*(y_edges[1] - y_edges[0])
    fluence_map = MM2_PER_CM2*hist.T/bin_area

    total_energy = hist.sum()
    if total_energy > 0.0:
        average = np.sum(hist.T*fluence_map)/total_energy
    else:
        average = 0.0
    return FluenceData(peak=float(fluence_map.max()), average=float(average),
                       fluence=fluence_map, x_range=x_range, y_range=y_range,
                       estimator=FluenceEstimator.BINNING)


def fluence_by_helper_rays(pts, fluences, nr_of_points=(100, 100)):
    pts, fluences = check_hit_points(pts, fluences)
    x_range, y_range = bounding_box(pts)
    fluence_map = interpolate_map(pts, fluences, x_range, y_range,
                                  nr_of_points)
    return FluenceData(peak=float(fluences.max()),
                       average=float(fluences.mean()),
                       fluence=fluence_map, x_range=x_range, y_range=y_range,
                       estimator=FluenceEstimator.HELPER_RAYS)
