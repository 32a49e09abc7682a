#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Copyright © 2024 The optiscene developers
""" miscellaneous functions for working with numpy vectors and floats

.. Created on Wed Mar 13 09:27:06 2024

.. codeauthor: The optiscene developers
"""
import numpy as np
from numpy.linalg import norm
import transforms3d as t3d


def normalize(v):
    """ return normalized version of input vector v """
    length = norm(v)
    if length == 0.0:
        return v
    else:
        return v/length


def euler2opt(e):
    """ convert right-handed euler angles to optical design convention,
        i.e. alpha and beta are left-handed
    """
    return np.array([-e[0], -e[1], e[2]])


def euler2rot3d(euler):
    """ convert euler angle vector (in degrees) to a rotation matrix. """
    rot_mat = t3d.euler.euler2mat(*np.deg2rad(euler2opt(euler)))
    return rot_mat


def rot2euler(rot_mat):
    """ convert a rotation matrix to an euler angle vector (in degrees). """
    return euler2opt(np.rad2deg(t3d.euler.mat2euler(rot_mat)))


def rot_from_axis(direction, up=None):
    """ rotation matrix taking the local z axis onto `direction`.

    The local y axis is kept as close as possible to the `up` vector, which
    defaults to the global y axis. If `direction` is parallel to `up`, the
    global x axis is used as the up vector instead.
    """
    z_axis = normalize(np.asarray(direction, dtype=float))
    if up is None:
        up = np.array([0., 1., 0.])
    x_axis = np.cross(up, z_axis)
    if norm(x_axis) < 1e-12:
        x_axis = np.cross(np.array([1., 0., 0.]), z_axis)
        x_axis = np.cross(z_axis, x_axis)
    x_axis = normalize(x_axis)
    y_axis = np.cross(z_axis, x_axis)
    return np.column_stack((x_axis, y_axis, z_axis))


def isanumber(a):
    """ returns true if input a can be converted to floating point number """
    try:
        float(a)
        bool_a = True
    except ValueError:
        bool_a = False
    except TypeError:
        bool_a = False

    return bool_a


def calc_closed_poly_area(pts) -> float:
    """ area of a closed, non self-intersecting 2d polygon (shoelace formula)

    Args:
        pts: sequence of (x, y) vertices in boundary order

    Returns:
        the (positive) enclosed area
    """
    pts = np.asarray(pts, dtype=float)
    if len(pts) < 3:
        return 0.0
    x, y = pts[:, 0], pts[:, 1]
    return 0.5*abs(np.dot(x, np.roll(y, -1)) - np.dot(y, np.roll(x, -1)))


def triangle_area(p0, p1, p2) -> float:
    """ area of the triangle spanned by three 2d points """
    return calc_closed_poly_area((p0, p1, p2))
