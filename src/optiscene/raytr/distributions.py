#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Copyright © 2024 The optiscene developers
""" Position, energy and fluence distributions for ray bundles

    Position strategies generate an array of shape (n, 3) of start points in
    the z=0 plane. Energy distributions assign an energy (J) and fluence
    distributions a fluence (J/cm²) to each of those points.

.. Created on Mon Mar 25 10:21:37 2024

.. codeauthor: The optiscene developers
"""
import math

import numpy as np

from optiscene.opmerror import OtherError
from optiscene.util.quantity import check_non_negative, check_positive


class Hexapolar():
    """ Center point plus rings of 6, 12, 18... points.

    Args:
        radius: radius of the outermost ring (mm)
        nr_of_rings: number of rings around the center point
    """

    def __init__(self, radius: float, nr_of_rings: int):
        self.radius = check_non_negative(radius, "radius")
        if nr_of_rings < 0:
            raise OtherError("number of rings must be >= 0")
        self.nr_of_rings = nr_of_rings

    def __repr__(self):
        return "{!s}({!r}, {!r})".format(type(self).__name__, self.radius,
                                         self.nr_of_rings)

    def generate(self):
        pts = [[0., 0., 0.]]
        if self.radius == 0.0:
            return np.array(pts)
        for ring in range(1, self.nr_of_rings + 1):
            r = self.radius*ring/self.nr_of_rings
            nr_pts = 6*ring
            for i in range(nr_pts):
                phi = 2.0*math.pi*i/nr_pts
                pts.append([r*math.cos(phi), r*math.sin(phi), 0.])
        return np.array(pts)


class Grid():
    """ Rectangular grid of points centered on the origin. """

    def __init__(self, x_size: float, y_size: float, nr_x: int, nr_y: int):
        self.x_size = check_non_negative(x_size, "x size")
        self.y_size = check_non_negative(y_size, "y size")
        if nr_x < 1 or nr_y < 1:
            raise OtherError("grid needs at least one point per axis")
        self.nr_x = nr_x
        self.nr_y = nr_y

    def __repr__(self):
        return "{!s}({!r}, {!r}, {!r}, {!r})".format(
            type(self).__name__, self.x_size, self.y_size, self.nr_x,
            self.nr_y)

    def generate(self):
        xs = (np.linspace(-0.5*self.x_size, 0.5*self.x_size, self.nr_x)
              if self.nr_x > 1 else np.zeros(1))
        ys = (np.linspace(-0.5*self.y_size, 0.5*self.y_size, self.nr_y)
              if self.nr_y > 1 else np.zeros(1))
        x, y = np.meshgrid(xs, ys)
        return np.column_stack((x.ravel(), y.ravel(), np.zeros(x.size)))


class Random():
    """ Uniformly distributed random points within a rectangle. """

    def __init__(self, x_size: float, y_size: float, nr_of_points: int,
                 seed=None):
        self.x_size = check_non_negative(x_size, "x size")
        self.y_size = check_non_negative(y_size, "y size")
        if nr_of_points < 1:
            raise OtherError("number of points must be >= 1")
        self.nr_of_points = nr_of_points
        self.seed = seed

    def __repr__(self):
        return "{!s}({!r}, {!r}, {!r})".format(
            type(self).__name__, self.x_size, self.y_size, self.nr_of_points)

    def generate(self):
        rng = np.random.default_rng(self.seed)
        x = rng.uniform(-0.5*self.x_size, 0.5*self.x_size, self.nr_of_points)
        y = rng.uniform(-0.5*self.y_size, 0.5*self.y_size, self.nr_of_points)
        return np.column_stack((x, y, np.zeros(self.nr_of_points)))


class UniformDist():
    """ total energy shared equally by all points """

    def __init__(self, total_energy: float):
        self.total_energy = check_non_negative(total_energy, "total energy")

    def apply(self, points):
        return np.full(len(points), self.total_energy/len(points))


class General2DGaussian():
    """ Energy weights of a rotated 2d gaussian, normalized to total energy.

    Args:
        total_energy: energy of all points (J)
        mu: center (x, y) in mm
        sigma: standard deviations (x, y) in mm
        theta: rotation of the gaussian axes (deg)
    """

    def __init__(self, total_energy: float, mu=(0., 0.), sigma=(1., 1.),
                 theta: float = 0.0):
        self.total_energy = check_non_negative(total_energy, "total energy")
        self.mu = np.array(mu, dtype=float)
        self.sigma = np.array([check_positive(s, "sigma") for s in sigma])
        self.theta = theta

    def __repr__(self):
        return "{!s}({!r}, mu={!r}, sigma={!r})".format(
            type(self).__name__, self.total_energy, self.mu.tolist(),
            self.sigma.tolist())

    def weights(self, points):
        pts = np.asarray(points, dtype=float)
        dx = pts[:, 0] - self.mu[0]
        dy = pts[:, 1] - self.mu[1]
        ang = math.radians(self.theta)
        u = math.cos(ang)*dx + math.sin(ang)*dy
        v = -math.sin(ang)*dx + math.cos(ang)*dy
        return np.exp(-0.5*((u/self.sigma[0])**2 + (v/self.sigma[1])**2))

    def apply(self, points):
        w = self.weights(points)
        total = w.sum()
        if total == 0.0:
            raise OtherError("gaussian distribution has no weight at the "
                             "given points")
        return self.total_energy*w/total


class UniformFluence():
    """ constant fluence (J/cm²) at all points """

    def __init__(self, fluence: float):
        self.fluence = check_non_negative(fluence, "fluence")

    def apply(self, points):
        return np.full(len(points), self.fluence)
