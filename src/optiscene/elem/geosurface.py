#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Copyright © 2024 The optiscene developers
""" Module for geometric surface shapes

    The geosurface module captures the geometric shape aspect of an optical
    surface. The :class:`~.GeoSurface` base class specifies an api that
    subclasses implement in their own local coordinate frame: the intersection
    of a ray with the shape and the surface normal at a point. The base class
    places the shape in space with an :class:`~.Isometry`; incoming rays are
    transformed into the local frame, intersected, and the results are
    transformed back. All shapes have their vertex at the local origin and
    the local z axis as the optical axis.

.. Created on Fri Mar 15 13:18:57 2024

.. codeauthor: The optiscene developers
"""
import numpy as np
from math import sqrt, isfinite

from optiscene.util.misc_math import normalize
from optiscene.util.transform import Isometry
from optiscene.raytr.traceerror import TraceMissedSurfaceError
from optiscene.opmerror import OtherError


def vertex_side_root(roots, p, d, center_z, radius, eps):
    """ Select the root on the vertex side hemisphere of a sphere/cylinder.

    Args:
        roots: candidate distances along the ray, ascending
        p: ray start point in the local frame
        d: unit direction of the ray in the local frame
        center_z: z coordinate of the center of curvature
        radius: signed radius of curvature
        eps: tolerance for the travel distance

    Returns:
        the smallest non-negative root on the vertex side, or None
    """
    for s in roots:
        z = p[2] + s*d[2]
        if (z - center_z)*radius <= 0.0 and s >= -eps:
            return max(s, 0.0)
    return None


class GeoSurface:
    """ Base class for geometric surfaces.

    Attributes:
        isometry: pose of the local surface frame in world coordinates
    """

    def __init__(self, isometry=None):
        self.isometry = isometry if isometry is not None else Isometry()

    def __repr__(self):
        return "{!s}()".format(type(self).__name__)

    def listobj_str(self):
        return f"{type(self).__name__}\n"

    def set_isometry(self, isometry):
        self.isometry = isometry

    def intersect(self, p, d, eps=1.0e-9):
        ''' Intersect the shape, starting from an arbitrary point.

        Args:
            p:  start point of the ray in the surface's coordinate system
            d:  unit direction of the ray in the surface's coordinate system
            eps: numeric tolerance

        Returns:
            tuple: distance to intersection point *s*, intersection point *p*

        Raises:
            :exc:`~optiscene.raytr.traceerror.TraceMissedSurfaceError`
        '''
        pass

    def normal(self, p):
        """Returns the unit normal of the shape at local point p. """
        pass

    def calc_intersect_and_normal(self, pos, direction):
        """ Intersect a ray given in world coordinates.

        Returns:
            tuple: intersection point and unit normal, both in world
            coordinates. The normal faces the incoming ray.

        Raises:
            :exc:`~optiscene.raytr.traceerror.TraceMissedSurfaceError`
        """
        p = self.isometry.inverse_transform_point(pos)
        d = normalize(self.isometry.inverse_transform_vector(direction))
        s, pt = self.intersect(p, d)
        n = self.normal(pt)
        if np.dot(n, d) > 0.0:
            n = -n
        return (self.isometry.transform_point(pt),
                self.isometry.transform_vector(n))


class Plane(GeoSurface):
    """ The x-y plane of the local frame. """

    def intersect(self, p, d, eps=1.0e-9):
        if abs(d[2]) < eps:
            raise TraceMissedSurfaceError(self, p, d)
        s = -p[2]/d[2]
        if s < -eps:
            raise TraceMissedSurfaceError(self, p, d)
        s = max(s, 0.0)
        return s, p + s*d

    def normal(self, p):
        return np.array([0., 0., -1.])


class Sphere(GeoSurface):
    """ Sphere with its vertex at the local origin.

    A positive radius places the center of curvature on the positive z
    axis. Only the hemisphere containing the vertex is part of the surface.
    """

    def __init__(self, radius, isometry=None):
        super().__init__(isometry)
        if radius == 0.0 or not isfinite(radius):
            raise OtherError("radius of curvature must be != 0.0 and finite")
        self.radius = radius

    def __repr__(self):
        return "{!s}(radius={!r})".format(type(self).__name__, self.radius)

    def listobj_str(self):
        return f"{type(self).__name__}: radius={self.radius}\n"

    def intersect(self, p, d, eps=1.0e-9):
        r = self.radius
        oc = p - np.array([0., 0., r])
        b = np.dot(d, oc)
        c = np.dot(oc, oc) - r*r
        disc = b*b - c
        if disc < 0.0:
            raise TraceMissedSurfaceError(self, p, d)
        sq = sqrt(disc)
        s = vertex_side_root((-b - sq, -b + sq), p, d, r, r, eps)
        if s is None:
            raise TraceMissedSurfaceError(self, p, d)
        return s, p + s*d

    def normal(self, p):
        return normalize(p - np.array([0., 0., self.radius]))


class Cylinder(GeoSurface):
    """ Cylinder with its axis parallel to the local y axis.

    The vertex line is the local y axis; a positive radius places the
    axis of the cylinder at z = radius.
    """

    def __init__(self, radius, isometry=None):
        super().__init__(isometry)
        if radius == 0.0 or not isfinite(radius):
            raise OtherError("radius of curvature must be != 0.0 and finite")
        self.radius = radius

    def __repr__(self):
        return "{!s}(radius={!r})".format(type(self).__name__, self.radius)

    def listobj_str(self):
        return f"{type(self).__name__}: radius={self.radius}\n"

    def intersect(self, p, d, eps=1.0e-9):
        r = self.radius
        a = d[0]*d[0] + d[2]*d[2]
        if a < eps*eps:
            raise TraceMissedSurfaceError(self, p, d)
        pz = p[2] - r
        b = p[0]*d[0] + pz*d[2]
        c = p[0]*p[0] + pz*pz - r*r
        disc = b*b - a*c
        if disc < 0.0:
            raise TraceMissedSurfaceError(self, p, d)
        sq = sqrt(disc)
        s = vertex_side_root(((-b - sq)/a, (-b + sq)/a), p, d, r, r, eps)
        if s is None:
            raise TraceMissedSurfaceError(self, p, d)
        return s, p + s*d

    def normal(self, p):
        return normalize(np.array([p[0], 0., p[2] - self.radius]))


class Parabola(GeoSurface):
    """ Paraboloid of revolution, optionally used off-axis.

    In the parent frame of the paraboloid the surface is
    :math:`x^2 + y^2 + 4 f z = 0`, i.e. for a positive focal length the
    surface is concave towards -z and focuses rays travelling along +z to
    the point (0, 0, -f). The local origin is moved to the surface point
    above `decenter`, which turns the surface into an off-axis section.
    """

    def __init__(self, focal_length, decenter=(0., 0.), isometry=None):
        super().__init__(isometry)
        if focal_length == 0.0 or not isfinite(focal_length):
            raise OtherError("focal length must be != 0.0 and finite")
        self.focal_length = focal_length
        self.decenter = np.array(decenter, dtype=float)
        dx, dy = self.decenter
        self.vertex_offset = np.array([dx, dy, self.sag(dx, dy)])

    def __repr__(self):
        return "{!s}(focal_length={!r}, decenter={!r})".format(
            type(self).__name__, self.focal_length, self.decenter.tolist())

    def listobj_str(self):
        return (f"{type(self).__name__}: focal_length={self.focal_length}"
                f"   decenter={self.decenter.tolist()}\n")

    def sag(self, x, y):
        return -(x*x + y*y)/(4.0*self.focal_length)

    def intersect(self, p, d, eps=1.0e-9):
        f = self.focal_length
        pp = p + self.vertex_offset
        a = d[0]*d[0] + d[1]*d[1]
        b = 2.0*(pp[0]*d[0] + pp[1]*d[1]) + 4.0*f*d[2]
        c = pp[0]*pp[0] + pp[1]*pp[1] + 4.0*f*pp[2]
        if a < eps*eps:
            if abs(b) < eps:
                raise TraceMissedSurfaceError(self, p, d)
            roots = (-c/b,)
        else:
            disc = b*b - 4.0*a*c
            if disc < 0.0:
                raise TraceMissedSurfaceError(self, p, d)
            sq = sqrt(disc)
            roots = sorted(((-b - sq)/(2.0*a), (-b + sq)/(2.0*a)))
        for s in roots:
            if s >= -eps:
                s = max(s, 0.0)
                return s, p + s*d
        raise TraceMissedSurfaceError(self, p, d)

    def normal(self, p):
        pp = p + self.vertex_offset
        return normalize(np.array([pp[0], pp[1], 2.0*self.focal_length]))
