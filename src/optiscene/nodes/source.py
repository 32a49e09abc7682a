#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Copyright © 2024 The optiscene developers
""" Light source node

.. Created on Thu Mar 28 11:02:15 2024

.. codeauthor: The optiscene developers
"""
import logging

from optiscene.opmerror import AnalysisError, PropertiesError
from optiscene.util.transform import Isometry
from optiscene.raytr.ray import Ray
from optiscene.raytr.rays import Rays
from optiscene.raytr.lightdata import (DataEnergy, DataGeometric,
                                       DataGhostFocus)
from optiscene.nodes.opticnode import OpticNode

logger = logging.getLogger(__name__)


class Source(OpticNode):
    """ Emits the light data given at construction on port `output_1`.

    A source holds either a :class:`~.DataEnergy` or a
    :class:`~.DataGeometric` light data. Ray bundles are given in the local
    frame of the source and emitted in world coordinates. In an energy
    analysis a ray bundle is converted to its spectrum. A source cannot be
    inverted by the user.
    """
    node_type = 'source'

    def __init__(self, light_data=None, name=None, spectrum_resolution=0.1):
        super().__init__(name=name)
        self.props.create('light data', 'data of the emitted light',
                          light_data, object)
        self.props.create('spectrum resolution',
                          'resolution of spectra generated from rays (nm)',
                          spectrum_resolution, float)
        self.ports.create_output('output_1')

    def set_property(self, name, value):
        if name == 'inverted' and value:
            raise PropertiesError("Cannot change the inversion status of a "
                                  "source node!")
        super().set_property(name, value)

    def set_light_data(self, light_data):
        self.props.set('light data', light_data)

    @property
    def light_data(self):
        return self.props.get('light data')

    def is_source(self):
        return True

    def _check_light_data(self):
        if self.light_data is None:
            raise AnalysisError("source has no light data defined")

    def _emitted_rays(self):
        """ copy of the source rays in world coordinates """
        if not isinstance(self.light_data, DataGeometric):
            raise AnalysisError("source must contain ray data for this "
                                "analysis")
        rays = self.light_data.rays.copy()
        if self.isometry is not None:
            rays = rays.transformed_rays(self.isometry)
        rays.set_node_origin(self.uuid)
        surface = self.ports.surface('output_1')
        if surface.aperture is not None:
            rays.apodize(surface.aperture, surface.isometry)
        return rays

    def analyze_energy(self, incoming, config, context):
        self._check_light_data()
        if not self.output_port_names():
            return {}
        data = self.light_data
        if isinstance(data, DataGeometric):
            spectrum = data.rays.to_spectrum(
                self.props.get('spectrum resolution'))
            return {'output_1': DataEnergy(spectrum)}
        return {'output_1': data.copy()}

    def analyze_raytrace(self, incoming, config, context):
        self._check_light_data()
        if not self.output_port_names():
            return {}
        rays = self._emitted_rays()
        rays.invalidate_by_threshold_energy(config.min_energy_per_ray)
        return {'output_1': DataGeometric(rays)}

    def analyze_ghostfocus(self, incoming, config, context, bounce_lvl=0,
                           **kwargs):
        self._check_light_data()
        if bounce_lvl > 0 or not self.output_port_names():
            return {}
        return {'output_1': DataGhostFocus([self._emitted_rays()])}

    def calc_node_position(self, incoming, context):
        """ emit the optical axis ray from the source pose """
        if self.isometry is None:
            self.set_isometry(self.alignment if self.alignment is not None
                              else Isometry())
        if not self.output_port_names():
            return {}
        ray = Ray(self.isometry.translation, self.isometry.z_axis(),
                  context.alignment_wavelength, 1.0)
        rays = Rays([ray])
        rays.set_node_origin(self.uuid)
        return {'output_1': DataGeometric(rays)}
