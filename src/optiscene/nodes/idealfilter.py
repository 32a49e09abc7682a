#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Copyright © 2024 The optiscene developers
""" Ideal filter node

.. Created on Thu Mar 28 15:50:12 2024

.. codeauthor: The optiscene developers
"""
import math

from optiscene.opmerror import OtherError, PropertiesError
from optiscene.util.spectrum import Spectrum
from optiscene.raytr.lightdata import (DataEnergy, DataGeometric,
                                       DataGhostFocus)
from optiscene.nodes.opticnode import OpticNode


def check_filter_type(filter_type):
    if isinstance(filter_type, Spectrum):
        if not filter_type.is_transmission_spectrum():
            raise PropertiesError("transmission spectrum values must be "
                                  "within [0.0, 1.0]")
    elif not 0.0 <= filter_type <= 1.0:
        raise PropertiesError("transmission factor must be within "
                              "[0.0, 1.0]")


class IdealFilter(OpticNode):
    """ Attenuates light by a constant factor or a transmission spectrum.

    The filter has no geometric effect on rays. The filter type is either a
    float transmission factor or a transmission |Spectrum|.
    """
    node_type = 'ideal filter'

    def __init__(self, filter_type=1.0, name=None):
        super().__init__(name=name)
        try:
            check_filter_type(filter_type)
        except PropertiesError as err:
            raise OtherError(str(err)) from err
        self.props.create('filter type', 'used filter algorithm',
                          filter_type, object, validator=check_filter_type)
        self.ports.create_input('input_1')
        self.ports.create_output('output_1')

    @property
    def filter_type(self):
        return self.props.get('filter type')

    def set_transmission(self, transmission: float):
        """ set a constant transmission factor """
        self.props.set('filter type', transmission)

    def set_optical_density(self, density: float):
        if density < 0.0 or not math.isfinite(density):
            raise OtherError("optical density must be >= 0.0 and finite")
        self.props.set('filter type', 10.0**(-density))

    def optical_density(self):
        """ the optical density of a constant filter, else None """
        if isinstance(self.filter_type, Spectrum):
            return None
        if self.filter_type == 0.0:
            return math.inf
        return -math.log10(self.filter_type)

    def analyze_energy(self, incoming, config, context):
        in_port, out_port, data = self.single_path_energy(incoming)
        if data is None:
            return {}
        spectrum = data.spectrum.copy()
        if isinstance(self.filter_type, Spectrum):
            spectrum.filter(self.filter_type)
        else:
            spectrum.filter_constant(self.filter_type)
        return {out_port: DataEnergy(spectrum)}

    def analyze_raytrace(self, incoming, config, context):
        in_port, out_port, data = self.single_path_rays(incoming)
        if data is None:
            return {}
        rays = data.rays
        self.trace_through_surface(in_port, None, rays, config)
        rays.filter_energy(self.filter_type)
        self.trace_through_surface(out_port, None, rays, config)
        return {out_port: DataGeometric(rays)}

    def analyze_ghostfocus(self, incoming, config, context, **kwargs):
        in_port = self.input_port_names()[0]
        out_port = self.output_port_names()[0]
        bundles = self.get_input_bundles(incoming, in_port)
        self.pass_through_surface(in_port, None, bundles, config)
        for rays in bundles:
            rays.filter_energy(self.filter_type)
        self.pass_through_surface(out_port, None, bundles, config)
        if not bundles:
            return {}
        return {out_port: DataGhostFocus(bundles)}
