#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Copyright © 2024 The optiscene developers
""" Module for clear aperture shapes of optic surfaces

    Apertures are binary: a point in the local x-y plane of a surface is
    either transmitted or blocked.

    Aperture
        - Circular
        - Rectangular
        - Elliptical
        - Polygon

.. Created on Fri Mar 15 16:40:21 2024

.. codeauthor: The optiscene developers
"""

from math import sqrt, cos, sin, radians
import numpy as np
from shapely import geometry

from optiscene.opmerror import OtherError


class Aperture():
    """ Base class of binary apertures.

    Attributes:
        x_offset: decenter of the aperture center along x (mm)
        y_offset: decenter of the aperture center along y (mm)
        rotation: rotation of the aperture about its center (degrees)
    """
    def __init__(self, x_offset=0.0, y_offset=0.0, rotation=0.0):
        self.x_offset = x_offset
        self.y_offset = y_offset
        self.rotation = rotation

    def listobj_str(self):
        o_str = ""
        if self.x_offset != 0. or self.y_offset != 0. or self.rotation != 0.:
            o_str = (f"x_offset={self.x_offset}   y_offset={self.y_offset}"
                     f"   rotation={self.rotation}\n")
        return o_str

    def dimension(self):
        pass

    def max_dimension(self):
        x, y = self.dimension()
        return sqrt(x*x + y*y)

    def point_inside(self, x: float, y: float, fuzz: float = 1e-5) -> bool:
        pass

    def apodization_factor(self, pt) -> float:
        """ 1.0 if the 2d point `pt` is transmitted, 0.0 if blocked """
        return 1.0 if self.point_inside(pt[0], pt[1]) else 0.0

    def bounding_box(self):
        center = np.array([self.x_offset, self.y_offset])
        extent = np.array(self.dimension())
        return center-extent, center+extent

    def tform(self, x, y):
        x -= self.x_offset
        y -= self.y_offset
        if self.rotation != 0.:
            ang = radians(self.rotation)
            x, y = cos(ang)*x + sin(ang)*y, -sin(ang)*x + cos(ang)*y
        return x, y


class Circular(Aperture):
    def __init__(self, radius=1.0, **kwargs):
        super().__init__(**kwargs)
        if not radius > 0.0:
            raise OtherError("aperture radius must be > 0.0")
        self.radius = radius

    def __repr__(self):
        return "{!s}(radius={!r})".format(type(self).__name__, self.radius)

    def listobj_str(self):
        o_str = f"ca: radius={self.radius}\n"
        o_str += super().listobj_str()
        return o_str

    def dimension(self):
        return (self.radius, self.radius)

    def max_dimension(self):
        return self.radius

    def point_inside(self, x: float, y: float, fuzz: float = 1e-5) -> bool:
        x, y = self.tform(x, y)
        return sqrt(x*x + y*y) <= self.radius + fuzz


class Rectangular(Aperture):
    def __init__(self, x_half_width=1.0, y_half_width=1.0, **kwargs):
        super().__init__(**kwargs)
        self.x_half_width = abs(x_half_width)
        self.y_half_width = abs(y_half_width)

    def __repr__(self):
        return "{!s}(x_half_width={!r}, y_half_width={!r})".format(
            type(self).__name__, self.x_half_width, self.y_half_width)

    def listobj_str(self):
        o_str = (f"ca: {type(self).__name__}: x_half_width={self.x_half_width}"
                 f"   y_half_width={self.y_half_width}\n")
        o_str += super().listobj_str()
        return o_str

    def dimension(self):
        return (self.x_half_width, self.y_half_width)

    def point_inside(self, x: float, y: float, fuzz: float = 1e-5) -> bool:
        x, y = self.tform(x, y)
        return (abs(x) <= self.x_half_width + fuzz
                and abs(y) <= self.y_half_width + fuzz)


class Elliptical(Aperture):
    def __init__(self, x_half_width=1.0, y_half_width=1.0, **kwargs):
        super().__init__(**kwargs)
        if not (x_half_width > 0.0 and y_half_width > 0.0):
            raise OtherError("ellipse half widths must be > 0.0")
        self.x_half_width = x_half_width
        self.y_half_width = y_half_width

    def __repr__(self):
        return "{!s}(x_half_width={!r}, y_half_width={!r})".format(
            type(self).__name__, self.x_half_width, self.y_half_width)

    def listobj_str(self):
        o_str = (f"ca: {type(self).__name__}: x_half_width={self.x_half_width}"
                 f"   y_half_width={self.y_half_width}\n")
        o_str += super().listobj_str()
        return o_str

    def dimension(self):
        return (self.x_half_width, self.y_half_width)

    def point_inside(self, x: float, y: float, fuzz: float = 1e-5) -> bool:
        x, y = self.tform(x, y)
        a = self.x_half_width + fuzz
        b = self.y_half_width + fuzz
        return (x/a)**2 + (y/b)**2 <= 1.0


class Polygon(Aperture):
    """ Aperture bounded by a closed polygon given by its vertices. """
    def __init__(self, points, **kwargs):
        super().__init__(**kwargs)
        self.points = np.array(points, dtype=float)
        if self.points.ndim != 2 or len(self.points) < 3:
            raise OtherError("polygon aperture needs at least 3 vertices")
        self.polygon = geometry.Polygon(self.points)
        if not self.polygon.is_valid or self.polygon.area == 0.0:
            raise OtherError("polygon aperture must enclose an area and "
                             "must not intersect itself")

    def __repr__(self):
        return "{!s}(points={!r})".format(type(self).__name__,
                                          self.points.tolist())

    def listobj_str(self):
        o_str = f"ca: {type(self).__name__}: {len(self.points)} vertices\n"
        o_str += super().listobj_str()
        return o_str

    def dimension(self):
        return tuple(np.max(np.abs(self.points), axis=0))

    def point_inside(self, x: float, y: float, fuzz: float = 1e-5) -> bool:
        x, y = self.tform(x, y)
        return self.polygon.distance(geometry.Point(x, y)) <= fuzz
