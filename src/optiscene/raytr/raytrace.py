#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Copyright © 2024 The optiscene developers
""" Functions to refract, reflect and diffract a ray direction at a surface

    The functions here only change the direction of a ray; intersection is
    handled by :mod:`~.elem.geosurface`, energy and bookkeeping by
    :class:`~.raytr.ray.Ray`.

.. Created on Fri Mar 22 09:14:51 2024

.. codeauthor: The optiscene developers
"""

from enum import Enum
from math import sqrt, copysign, pi

import numpy as np
from numpy.linalg import norm

from optiscene.util.misc_math import normalize
from optiscene.raytr.traceerror import TraceTIRError, TraceEvanescentRayError


class MissedSurfaceStrategy(Enum):
    """ Handling of a ray that misses a surface """
    #: the ray is invalidated
    STOP = 'stop'
    #: the ray skips the surface untouched
    IGNORE = 'ignore'


def bend(d_in, normal, n_in, n_out):
    """ refract incoming direction, d_in, about normal """
    try:
        normal_len = norm(normal)
        cosI = np.dot(d_in, normal)/normal_len
        sinI_sqr = 1.0 - cosI*cosI
        n_cosIp = copysign(sqrt(n_out*n_out - n_in*n_in*sinI_sqr), cosI)
        alpha = n_cosIp - n_in*cosI
        d_out = (n_in*d_in + alpha*normal)/n_out
        return d_out
    except ValueError:
        raise TraceTIRError(d_in, normal, n_in, n_out)


def reflect(d_in, normal):
    """ reflect incoming direction, d_in, about normal """
    normal_len = norm(normal)
    cosI = np.dot(d_in, normal)/normal_len
    d_out = d_in - 2.0*cosI*normal
    return d_out


def diffract_reflective(d_in, normal, n, wvl, grating_vector, order):
    """ Reflective diffraction of d_in by the k-vector method.

    The in-plane component of the wave vector is shifted by `order` times
    the grating vector; the normal component follows from the length of the
    wave vector and is reversed.

    Args:
        d_in: unit direction of the incoming ray
        normal: unit surface normal
        n: refractive index of the medium of the ray
        wvl: vacuum wavelength (nm)
        grating_vector: grating vector (rad/nm) lying in the surface
        order: diffraction order

    Returns:
        the unit direction of the diffracted ray

    Raises:
        TraceEvanescentRayError: if the diffraction order is evanescent
    """
    normal = normalize(normal)
    k0_n = 2.0*pi*n/wvl
    k_vec = k0_n*normalize(d_in)
    k_para = np.cross(normal, np.cross(k_vec, normal))
    k_perp = normal*np.dot(k_vec, normal)
    k_para_out = k_para + order*np.asarray(grating_vector, dtype=float)
    k_perp_sqr = k0_n*k0_n - np.dot(k_para_out, k_para_out)
    if k_perp_sqr < 0.0:
        raise TraceEvanescentRayError(d_in, normal, order, wvl)
    k_perp_out = -normalize(k_perp)*sqrt(k_perp_sqr)
    return normalize(k_perp_out + k_para_out)


def grating_vector(line_density, direction):
    """ Grating vector in rad/nm.

    Args:
        line_density: lines per mm
        direction: unit vector in the surface, perpendicular to the grooves
    """
    period_nm = 1.0e6/line_density
    return 2.0*pi/period_nm*normalize(np.asarray(direction, dtype=float))
