#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Copyright © 2024 The optiscene developers
""" Named input and output ports of an optical node

    Every port owns an :class:`~.opticsurface.OpticSurface`. Port names are
    unique within a node. Inverting the ports swaps the roles of input and
    output names without touching the surfaces.

.. Created on Wed Mar 27 15:41:12 2024

.. codeauthor: The optiscene developers
"""
from enum import Enum

from optiscene.opmerror import OpticPortError
from optiscene.elem.opticsurface import OpticSurface


class PortType(Enum):
    INPUT = 'input'
    OUTPUT = 'output'


class OpticPorts():
    """ Input and output ports, each holding an :class:`~.OpticSurface`

    Attributes:
        inputs: dict of physical input port name to surface
        outputs: dict of physical output port name to surface
        inverted: True if input and output roles are swapped
    """

    def __init__(self):
        self.inputs = {}
        self.outputs = {}
        self.inverted = False

    def __repr__(self):
        return "{!s}(inputs={!r}, outputs={!r}, inverted={})".format(
            type(self).__name__, list(self.inputs), list(self.outputs),
            self.inverted)

    def listobj_str(self):
        o_str = ""
        for label, names in (('inputs', self.input_names()),
                             ('outputs', self.output_names())):
            o_str += f"{label}: {', '.join(names)}\n"
        return o_str

    def _check_new_name(self, name):
        if name in self.inputs or name in self.outputs:
            raise OpticPortError(f"port with name {name} already exists")

    def create_input(self, name: str, surface=None):
        self._check_new_name(name)
        self.inputs[name] = surface if surface is not None else OpticSurface()
        return self.inputs[name]

    def create_output(self, name: str, surface=None):
        self._check_new_name(name)
        self.outputs[name] = (surface if surface is not None
                              else OpticSurface())
        return self.outputs[name]

    def set_inverted(self, inverted: bool):
        self.inverted = inverted

    def input_names(self):
        """ names acting as inputs, i.e. the outputs when inverted """
        return list(self.outputs if self.inverted else self.inputs)

    def output_names(self):
        return list(self.inputs if self.inverted else self.outputs)

    def names(self, port_type):
        if port_type == PortType.INPUT:
            return self.input_names()
        return self.output_names()

    def contains(self, port_type, name: str) -> bool:
        return name in self.names(port_type)

    def surface(self, name: str):
        """ the surface of port `name`, irrespective of its role """
        if name in self.inputs:
            return self.inputs[name]
        if name in self.outputs:
            return self.outputs[name]
        raise OpticPortError(f"port {name} not found")

    def set_surface(self, name: str, surface):
        if name in self.inputs:
            self.inputs[name] = surface
        elif name in self.outputs:
            self.outputs[name] = surface
        else:
            raise OpticPortError(f"port {name} not found")

    def surfaces(self):
        """ generator of (name, surface) of all ports """
        yield from self.inputs.items()
        yield from self.outputs.items()

    def set_isometry(self, node_iso):
        for _, surface in self.surfaces():
            surface.set_isometry(node_iso)

    def set_coating(self, name: str, coating):
        self.surface(name).coating = coating

    def set_aperture(self, name: str, aperture):
        self.surface(name).aperture = aperture

    def set_lidt(self, name: str, lidt: float):
        self.surface(name).set_lidt(lidt)

    def hit_maps(self):
        """ dict of port name to :class:`~.HitMap` """
        return {name: surface.hit_map for name, surface in self.surfaces()}

    def reset_data(self):
        for _, surface in self.surfaces():
            surface.reset_data()
