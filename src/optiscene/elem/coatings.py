#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Copyright © 2024 The optiscene developers
""" Reflectivity models of surface coatings

    A coating decides which fraction of the energy of a ray is reflected at
    a surface; the remainder is transmitted. Subclasses of :class:`Coating`
    register themselves by class name so that they can be created from a
    name, e.g. by a scene reader.

.. Created on Mon Mar 18 09:51:33 2024

.. codeauthor: The optiscene developers
"""
from math import sqrt

import numpy as np

from optiscene.opmerror import OtherError


class Coating():
    """ Base class of coatings. """

    _registry = {}

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        Coating._registry[cls.__name__] = cls

    def __repr__(self):
        return "{!s}()".format(type(self).__name__)

    def __eq__(self, other):
        return type(self) is type(other) and vars(self) == vars(other)

    def listobj_str(self):
        return f"coating: {type(self).__name__}\n"

    def calc_reflectivity(self, direction, normal, n1: float,
                          n2: float) -> float:
        """ Fraction of the energy reflected at the surface.

        Args:
            direction: unit direction of the incoming ray
            normal: unit surface normal at the hit point
            n1: refractive index before the surface
            n2: refractive index after the surface
        """
        pass


def create_coating(name, **kwargs):
    """ instantiate the coating class registered under `name` """
    try:
        return Coating._registry[name](**kwargs)
    except KeyError:
        raise OtherError(f"unknown coating type <{name}>") from None


class IdealAR(Coating):
    """ Ideal anti-reflective coating, nothing is reflected. """

    def calc_reflectivity(self, direction, normal, n1, n2):
        return 0.0


class ConstantR(Coating):
    """ Wavelength and angle independent reflectivity. """

    def __init__(self, reflectivity=0.0):
        if not 0.0 <= reflectivity <= 1.0:
            raise OtherError("reflectivity must be within [0.0, 1.0]")
        self.reflectivity = reflectivity

    def __repr__(self):
        return "{!s}(reflectivity={!r})".format(type(self).__name__,
                                                self.reflectivity)

    def listobj_str(self):
        return f"coating: {type(self).__name__}: R={self.reflectivity}\n"

    def calc_reflectivity(self, direction, normal, n1, n2):
        return self.reflectivity


class Fresnel(Coating):
    """ Uncoated surface, reflectivity from the Fresnel equations.

    The light is taken as unpolarized, so the reflectivity is the mean of
    the s and p power reflectivities. Beyond the critical angle the whole
    energy is reflected.
    """

    def calc_reflectivity(self, direction, normal, n1, n2):
        cos_i = min(abs(np.dot(direction, normal)), 1.0)
        sin_i = sqrt(1.0 - cos_i*cos_i)
        sin_t = n1/n2*sin_i
        if sin_t >= 1.0:
            return 1.0
        cos_t = sqrt(1.0 - sin_t*sin_t)
        rs = (n1*cos_i - n2*cos_t)/(n1*cos_i + n2*cos_t)
        rp = (n2*cos_i - n1*cos_t)/(n2*cos_i + n1*cos_t)
        return 0.5*(rs*rs + rp*rp)
