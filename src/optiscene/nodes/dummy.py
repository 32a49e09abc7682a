#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Copyright © 2024 The optiscene developers
""" Dummy node, passes light unchanged

.. Created on Thu Mar 28 13:45:09 2024

.. codeauthor: The optiscene developers
"""
from optiscene.raytr.lightdata import DataGeometric, DataGhostFocus
from optiscene.nodes.opticnode import OpticNode


class Dummy(OpticNode):
    """ A node with one input and one output port that does nothing.

    In ray tracing the rays cross the flat input and output surfaces at the
    node position, so that hits are still recorded.
    """
    node_type = 'dummy'

    def __init__(self, name=None):
        super().__init__(name=name)
        self.ports.create_input('input_1')
        self.ports.create_output('output_1')

    def analyze_energy(self, incoming, config, context):
        in_port, out_port, data = self.single_path_energy(incoming)
        if data is None:
            return {}
        return {out_port: data}

    def analyze_raytrace(self, incoming, config, context):
        in_port, out_port, data = self.single_path_rays(incoming)
        if data is None:
            return {}
        rays = data.rays
        self.trace_through_surface(in_port, None, rays, config)
        self.trace_through_surface(out_port, None, rays, config)
        return {out_port: DataGeometric(rays)}

    def analyze_ghostfocus(self, incoming, config, context, **kwargs):
        in_port = self.input_port_names()[0]
        out_port = self.output_port_names()[0]
        bundles = self.get_input_bundles(incoming, in_port)
        self.pass_through_surface(in_port, None, bundles, config)
        self.pass_through_surface(out_port, None, bundles, config)
        if not bundles:
            return {}
        return {out_port: DataGhostFocus(bundles)}
