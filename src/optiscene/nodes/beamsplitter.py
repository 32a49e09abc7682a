#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Copyright © 2024 The optiscene developers
""" Ideal beam splitter

    The beam splitter has two inputs and two outputs. Light entering at
    `input_1` is transmitted to `out1_trans1_refl2` with the splitting ratio
    and sent to `out2_trans2_refl1` with the remainder; light entering at
    `input_2` is treated symmetrically. Split rays keep their direction.

.. Created on Thu Mar 28 14:26:37 2024

.. codeauthor: The optiscene developers
"""
from optiscene.opmerror import AnalysisError, OtherError, PropertiesError
from optiscene.util.spectrum import Spectrum, merge_spectra
from optiscene.raytr.rays import Rays
from optiscene.raytr.lightdata import (DataEnergy, DataGeometric,
                                       DataGhostFocus)
from optiscene.nodes.opticnode import OpticNode


def check_splitting_config(config):
    if isinstance(config, Spectrum):
        if not config.is_transmission_spectrum():
            raise OtherError("splitting spectrum values must be within "
                             "[0.0, 1.0]")
    elif not 0.0 <= config <= 1.0:
        raise OtherError("splitting ratio must be within [0.0, 1.0]")
    return config


def _validate_config(config):
    try:
        check_splitting_config(config)
    except OtherError as err:
        raise PropertiesError(str(err)) from err


class BeamSplitter(OpticNode):
    """ Splits light by a constant ratio or a transmission |Spectrum|

    Args:
        splitting_config: ratio in [0, 1] of the light kept on the
            transmitted path, or a spectrum of that ratio
    """
    node_type = 'beam splitter'

    def __init__(self, splitting_config=0.5, name=None):
        super().__init__(name=name)
        self.props.create('splitter config',
                          'config data of the beam splitter',
                          check_splitting_config(splitting_config), object,
                          validator=_validate_config)
        self.ports.create_input('input_1')
        self.ports.create_input('input_2')
        self.ports.create_output('out1_trans1_refl2')
        self.ports.create_output('out2_trans2_refl1')

    @property
    def splitting_config(self):
        return self.props.get('splitter config')

    def set_splitting_config(self, config):
        self.props.set('splitter config', config)

    def _ports(self):
        in1, in2 = self.input_port_names()
        out1, out2 = self.output_port_names()
        return in1, in2, out1, out2

    def _split_spectrum(self, data):
        if data is None:
            return None, None
        spectrum = data.spectrum.copy()
        config = self.splitting_config
        if isinstance(config, Spectrum):
            split = spectrum.split_by_spectrum(config)
        else:
            split = spectrum.split_by_ratio(config)
        return spectrum, split

    def analyze_energy(self, incoming, config, context):
        in1, in2, out1, out2 = self._ports()
        kept1, split1 = self._split_spectrum(
            self.get_input(incoming, in1, DataEnergy))
        kept2, split2 = self._split_spectrum(
            self.get_input(incoming, in2, DataEnergy))
        out1_spec = merge_spectra(kept1, split2)
        out2_spec = merge_spectra(split1, kept2)
        result = {}
        if out1_spec is not None:
            result[out1] = DataEnergy(out1_spec)
        if out2_spec is not None:
            result[out2] = DataEnergy(out2_spec)
        return result

    def _split_rays(self, port_name, rays, config):
        """ pass the input surface and split, return (kept, split) rays """
        self.trace_through_surface(port_name, None, rays, config)
        split = rays.split(self.splitting_config)
        return rays, split

    def analyze_raytrace(self, incoming, config, context):
        in1, in2, out1, out2 = self._ports()
        data1 = self.get_input(incoming, in1, DataGeometric)
        data2 = self.get_input(incoming, in2, DataGeometric)
        if data1 is None and data2 is None:
            return {}
        out1_rays = Rays()
        out2_rays = Rays()
        if data1 is not None:
            kept, split = self._split_rays(in1, data1.rays, config)
            out1_rays = kept
            out2_rays.merge(split)
        if data2 is not None:
            kept, split = self._split_rays(in2, data2.rays, config)
            out1_rays.merge(split)
            out2_rays.merge(kept)
        for port, rays in ((out1, out1_rays), (out2, out2_rays)):
            surface = self.ports.surface(port)
            rays.apodize(surface.aperture, surface.isometry)
            rays.invalidate_by_threshold_energy(config.min_energy_per_ray)
        return {out1: DataGeometric(out1_rays),
                out2: DataGeometric(out2_rays)}

    def analyze_ghostfocus(self, incoming, config, context, **kwargs):
        in1, in2, out1, out2 = self._ports()
        out1_bundles = []
        out2_bundles = []
        for port, kept_list, split_list in ((in1, out1_bundles, out2_bundles),
                                            (in2, out2_bundles, out1_bundles)):
            bundles = self.get_input_bundles(incoming, port)
            self.pass_through_surface(port, None, bundles, config)
            for rays in bundles:
                split = rays.split(self.splitting_config)
                kept_list.append(rays)
                split_list.append(split)
        result = {}
        if out1_bundles:
            result[out1] = DataGhostFocus(out1_bundles)
        if out2_bundles:
            result[out2] = DataGhostFocus(out2_bundles)
        return result

    def calc_node_position(self, incoming, context):
        """ the optical axis continues unchanged on both outputs """
        in1, in2, out1, out2 = self._ports()
        in_port = in1
        data = self.get_input(incoming, in1, DataGeometric)
        if data is None:
            in_port = in2
            data = self.get_input(incoming, in2, DataGeometric)
        if data is None:
            raise AnalysisError("could not calc optical axis for beam "
                                "splitter")
        rays = data.rays
        rays.refract_on_surface(self.ports.surface(in_port))
        return {out1: DataGeometric(rays), out2: DataGeometric(rays.copy())}
