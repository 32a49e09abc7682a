#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Copyright © 2024 The optiscene developers
""" Refractive index models, building on :mod:`opticalglass` for catalog
    glasses

    The dispersion formulas of :class:`RefrIndexConrady`,
    :class:`RefrIndexSchott` and :class:`RefrIndexSellmeier1` take the
    wavelength in µm; all public methods take wavelengths in nm.

.. Created on Mon Mar 18 14:33:02 2024

.. codeauthor: The optiscene developers
"""
import logging
from math import sqrt, isfinite

from opticalglass import glassfactory as gfact
from opticalglass import opticalmedium as om
from opticalglass import glasserror

from optiscene.opmerror import OtherError
from optiscene.util.misc_math import isanumber

logger = logging.getLogger(__name__)


def check_wvl_range(wvl_range):
    lower, upper = wvl_range
    if not (isfinite(lower) and lower >= 0.0):
        raise OtherError("lower wavelength limit is invalid.")
    if not (isfinite(upper) and upper >= 0.0):
        raise OtherError("upper wavelength limit is invalid.")
    return float(lower), float(upper)


class RefractiveIndex():
    """ Base class of refractive index models. """

    def __repr__(self):
        return "{!s}()".format(type(self).__name__)

    def __eq__(self, other):
        return type(self) is type(other) and vars(self) == vars(other)

    def get_refractive_index(self, wvl: float) -> float:
        """ Refractive index at wavelength `wvl` (nm).

        Raises:
            OtherError: if the wavelength is outside the valid range of the
                model or the index computed is < 1.0 or not finite
        """
        n = self.calc_rindex(wvl)
        if not (isfinite(n) and n >= 1.0):
            raise OtherError("refractive index calculated by model is <1.0 "
                             "or not finite")
        return n

    def calc_rindex(self, wvl: float) -> float:
        pass

    def _lambda_um(self, wvl):
        lower, upper = self.wvl_range
        if not lower <= wvl < upper:
            raise OtherError("wavelength outside valid range")
        return 1.0e-3*wvl


class RefrIndexConst(RefractiveIndex):
    """ Wavelength independent refractive index. """

    def __init__(self, refractive_index: float):
        if not (isfinite(refractive_index) and refractive_index >= 1.0):
            raise OtherError("refractive index must be >=1.0 and finite.")
        self.refractive_index = refractive_index

    def __repr__(self):
        return "{!s}({!r})".format(type(self).__name__,
                                   self.refractive_index)

    def calc_rindex(self, wvl):
        return self.refractive_index


def refr_index_vacuum():
    return RefrIndexConst(1.0)


class RefrIndexConrady(RefractiveIndex):
    """ Conrady model :math:`n = n_0 + A/\\lambda + B/\\lambda^{3.5}` """

    def __init__(self, n0, a, b, wvl_range):
        if not (isfinite(n0) and isfinite(a) and isfinite(b)):
            raise OtherError("all coefficients must be finite.")
        self.n0 = n0
        self.a = a
        self.b = b
        self.wvl_range = check_wvl_range(wvl_range)

    def calc_rindex(self, wvl):
        lmbda = self._lambda_um(wvl)
        return self.n0 + self.a/lmbda + self.b/lmbda**3.5


class RefrIndexSchott(RefractiveIndex):
    """ Schott (Laurent series) dispersion formula """

    def __init__(self, a0, a1, a2, a3, a4, a5, wvl_range):
        coefs = (a0, a1, a2, a3, a4, a5)
        if not all(isfinite(c) for c in coefs):
            raise OtherError("all coefficients must be finite.")
        self.coefs = coefs
        self.wvl_range = check_wvl_range(wvl_range)

    def calc_rindex(self, wvl):
        lmbda = self._lambda_um(wvl)
        a0, a1, a2, a3, a4, a5 = self.coefs
        n2 = (a0 + a1*lmbda**2 + a2*lmbda**-2 + a3*lmbda**-4
              + a4*lmbda**-6 + a5*lmbda**-8)
        return sqrt(n2) if n2 > 0.0 else float('nan')


class RefrIndexSellmeier1(RefractiveIndex):
    """ Three term Sellmeier dispersion formula """

    def __init__(self, k1, k2, k3, l1, l2, l3, wvl_range):
        coefs = (k1, k2, k3, l1, l2, l3)
        if not all(isfinite(c) for c in coefs):
            raise OtherError("all coefficients must be finite.")
        self.k = (k1, k2, k3)
        self.l = (l1, l2, l3)
        self.wvl_range = check_wvl_range(wvl_range)

    def calc_rindex(self, wvl):
        lmbda = self._lambda_um(wvl)
        l_sq = lmbda*lmbda
        n2 = 1.0 + sum(k*l_sq/(l_sq - l) for k, l in zip(self.k, self.l))
        return sqrt(n2) if n2 > 0.0 else float('nan')


class RefrIndexGlass(RefractiveIndex):
    """ Refractive index of an :mod:`opticalglass` medium.

    Any object with a `rindex(wvl_nm)` method can be used, e.g. catalog
    glasses, :class:`opticalglass.opticalmedium.ConstantIndex` or
    :class:`opticalglass.opticalmedium.Air`.
    """

    def __init__(self, medium):
        self.medium = medium

    @classmethod
    def from_catalog(cls, glass_name: str, catalog_name: str):
        try:
            medium = gfact.create_glass(glass_name, catalog_name)
        except glasserror.GlassNotFoundError as gerr:
            raise OtherError(f"{gerr.catalog} glass {gerr.name} "
                             "not found") from gerr
        return cls(medium)

    def __repr__(self):
        return "{!s}({!r})".format(type(self).__name__, self.medium.name())

    def __eq__(self, other):
        return (type(self) is type(other)
                and self.medium.name() == other.medium.name()
                and self.medium.catalog_name() == other.medium.catalog_name())

    def calc_rindex(self, wvl):
        return float(self.medium.rindex(wvl))


def decode_medium(*inputs):
    """ Input utility for parsing various forms of refractive index input.

    The **inputs** can have several forms:

        - **refractive_index** only: float -> :class:`RefrIndexConst`
        - **glass_name, catalog_name** as 2 strings ->
          :class:`RefrIndexGlass`
        - **air**: str -> :class:`RefrIndexGlass` of
          :class:`opticalglass.opticalmedium.Air`
        - a :class:`RefractiveIndex` instance
        - an instance with a `rindex` attribute -> :class:`RefrIndexGlass`
    """
    mat = None
    if isanumber(inputs[0]):
        mat = RefrIndexConst(float(inputs[0]))
    elif isinstance(inputs[0], RefractiveIndex):
        mat = inputs[0]
    elif isinstance(inputs[0], str):
        if len(inputs) == 1 and inputs[0].upper() == 'AIR':
            mat = RefrIndexGlass(om.Air())
        elif len(inputs) == 2:
            mat = RefrIndexGlass.from_catalog(inputs[0].strip(),
                                              inputs[1].strip())
    elif hasattr(inputs[0], 'rindex'):
        mat = RefrIndexGlass(inputs[0])

    if mat is None:
        raise OtherError(f"cannot decode refractive index from {inputs}")
    logger.debug(f"decoded medium {mat!r}")
    return mat
