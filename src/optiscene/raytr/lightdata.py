#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Copyright © 2024 The optiscene developers
""" Light data passed along the edges of a scene graph

    Each analysis mode moves one variant of light data between nodes:

        - :class:`DataEnergy` carries a |Spectrum| (energy analysis)
        - :class:`DataGeometric` carries a :class:`~.rays.Rays` bundle
          (ray tracing)
        - :class:`DataGhostFocus` carries a list of bundles (ghost focus
          analysis)
        - :class:`DataFourier` is reserved for wave optics propagation

    The result of a node analysis is a dict of port name to light data.

.. Created on Tue Mar 26 09:02:44 2024

.. codeauthor: The optiscene developers
"""
import math

import attr


@attr.s
class DataEnergy():
    spectrum = attr.ib()

    def listobj_str(self):
        return "Energy\n" + self.spectrum.listobj_str()

    def copy(self):
        return DataEnergy(self.spectrum.copy())

    def total_energy(self):
        return self.spectrum.total_energy()


@attr.s
class DataGeometric():
    rays = attr.ib()

    def listobj_str(self):
        return "Geometric\n" + self.rays.listobj_str()

    def copy(self):
        return DataGeometric(self.rays.copy())

    def total_energy(self):
        return self.rays.total_energy()


@attr.s
class DataGhostFocus():
    bundles = attr.ib(factory=list)

    def listobj_str(self):
        o_str = f"GhostFocus: {len(self.bundles)} ray bundles\n"
        for rays in self.bundles:
            o_str += rays.listobj_str()
        return o_str

    def copy(self):
        return DataGhostFocus([rays.copy() for rays in self.bundles])

    def total_energy(self):
        return math.fsum(rays.total_energy() for rays in self.bundles)


@attr.s
class DataFourier():
    """ placeholder for wave optics propagation, carries no data """

    def listobj_str(self):
        return "Fourier\n"

    def copy(self):
        return DataFourier()
